"""In-memory capture session for unit tests and offline demos."""

from typing import Callable, Optional, Tuple

import numpy as np

from .core.interfaces import CaptureError, ICaptureSession


class MockCaptureSession(ICaptureSession):
    """A capture session serving whatever frame the test last set.

    With defer=True, open() only records the callbacks; the test then calls
    complete_open() or fail_open() to simulate a slow permission prompt.
    """

    def __init__(
        self,
        frame: Optional[np.ndarray] = None,
        sample_rate: float = 44100.0,
        frame_size: int = 2048,
        defer: bool = False,
        error: Optional[Exception] = None,
    ):
        self.frame = (
            np.zeros(frame_size, dtype=np.float32) if frame is None else frame
        )
        self.sample_rate = sample_rate
        self.defer = defer
        self.error = error
        self.is_running = False
        self.open_calls = 0
        self.close_calls = 0
        self.frames_read = 0
        self._on_ready: Optional[Callable[[], None]] = None
        self._on_error: Optional[Callable[[Exception], None]] = None

    def open(self, on_ready, on_error) -> None:
        self.open_calls += 1
        self._on_ready = on_ready
        self._on_error = on_error
        if not self.defer:
            self._finish_open()

    def _finish_open(self) -> None:
        if self.error is not None:
            self._on_error(self.error)
        else:
            self.is_running = True
            self._on_ready()

    def complete_open(self) -> None:
        """Deliver a deferred open result."""
        self._finish_open()

    def fail_open(self, error: Optional[Exception] = None) -> None:
        """Deliver a deferred open failure."""
        self.error = error or CaptureError("Permission denied")
        self._finish_open()

    def close(self) -> None:
        self.close_calls += 1
        self.is_running = False

    def get_frame(self) -> Tuple[np.ndarray, float]:
        self.frames_read += 1
        return np.array(self.frame, dtype=np.float32), self.sample_rate

    def is_open(self) -> bool:
        return self.is_running
