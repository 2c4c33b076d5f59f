"""Replay of recorded audio through the live detection loop."""

from __future__ import annotations
import time
from typing import Callable, Optional, Tuple

import numpy as np
import soundfile as sf

from ..logger import get_logger
from ..core.interfaces import CaptureError, ICaptureSession

logger = get_logger(__name__)


class WavFileCaptureSession(ICaptureSession):
    """Provides frames from an audio file as if it were being recorded.

    The window returned by get_frame ends at the current play position,
    derived from the clock since open(), so playback runs in real time
    whatever the tick cadence is.
    """

    def __init__(
        self,
        file_path: str,
        frame_size: int = 2048,
        loop: bool = False,
        gain: float = 1.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._file_path = file_path
        self._frame_size = frame_size
        self._loop = loop
        self._gain = gain
        self._clock = clock

        self._data: Optional[np.ndarray] = None
        self._sample_rate = 0.0
        self._start_time = 0.0
        self._running = False

    @property
    def sample_rate(self) -> float:
        return self._sample_rate

    @property
    def duration(self) -> float:
        """Length of the loaded file in seconds (0 before open)."""
        if self._data is None or not self._sample_rate:
            return 0.0
        return len(self._data) / self._sample_rate

    @property
    def finished(self) -> bool:
        """True once a non-looping replay has played to the end."""
        if not self._running or self._loop:
            return False
        return self._clock() - self._start_time >= self.duration

    def open(
        self,
        on_ready: Callable[[], None],
        on_error: Callable[[Exception], None],
    ) -> None:
        try:
            data, sample_rate = sf.read(self._file_path, dtype="float32", always_2d=True)
        except (OSError, RuntimeError) as e:
            logger.error(f"Error reading audio file {self._file_path}: {e}")
            on_error(CaptureError(f"Could not read {self._file_path}: {e}"))
            return

        if len(data) == 0:
            on_error(CaptureError(f"Audio file is empty: {self._file_path}"))
            return

        # Analyse the first channel only
        self._data = data[:, 0] * np.float32(self._gain)
        self._sample_rate = float(sample_rate)
        self._start_time = self._clock()
        self._running = True
        logger.info(
            f"Replaying {self._file_path}: {self.duration:.2f}s at {sample_rate} Hz"
            f"{' (looping)' if self._loop else ''}"
        )
        on_ready()

    def get_frame(self) -> Tuple[np.ndarray, float]:
        if self._data is None:
            return np.zeros(self._frame_size, dtype=np.float32), self._sample_rate

        total = len(self._data)
        position = int((self._clock() - self._start_time) * self._sample_rate)

        if self._loop and position >= self._frame_size:
            indices = np.arange(position - self._frame_size, position)
            return np.take(self._data, indices, mode="wrap"), self._sample_rate

        if position > total:
            # Played out: the device has gone quiet
            return np.zeros(self._frame_size, dtype=np.float32), self._sample_rate

        frame = np.zeros(self._frame_size, dtype=np.float32)
        window = self._data[max(0, position - self._frame_size) : position]
        if len(window):
            frame[-len(window) :] = window
        return frame, self._sample_rate

    def close(self) -> None:
        if self._running:
            logger.info(f"Stopped replaying {self._file_path}")
        self._running = False

    def is_open(self) -> bool:
        return self._running
