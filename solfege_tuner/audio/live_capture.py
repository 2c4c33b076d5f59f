"""Live microphone capture using the sounddevice library."""

from __future__ import annotations
import threading
from typing import Any, Callable, ClassVar, Dict, List, Optional, Tuple

import numpy as np
import sounddevice as sd

from ..logger import get_logger
from ..core.interfaces import CaptureError, ICaptureSession

logger = get_logger(__name__)


def list_input_devices() -> List[Dict[str, Any]]:
    """Return the audio devices that can record.

    Returns:
        One dict per input device with its id, name, channel count and default rate
    """
    devices = []
    for device_id, device in enumerate(sd.query_devices()):
        if device["max_input_channels"] > 0:
            devices.append(
                {
                    "id": device_id,
                    "name": device["name"],
                    "max_input_channels": device["max_input_channels"],
                    "default_samplerate": device["default_samplerate"],
                }
            )
    return devices


class LiveCaptureSession(ICaptureSession):
    """Capture session reading a rolling window from an input device.

    The stream callback runs on the audio thread and writes into a ring
    buffer under a lock; get_frame hands out a copy, so the analysis side
    never sees a half-written frame.
    """

    SAMPLE_RATE: ClassVar[int] = 44100  # Hz, used when the device accepts it
    FRAME_SIZE: ClassVar[int] = 2048  # Analysis window in samples
    CHANNELS: ClassVar[int] = 1  # Mono audio

    def __init__(
        self,
        device_id: Optional[int] = None,
        sample_rate: Optional[int] = None,
        frame_size: Optional[int] = None,
        channels: Optional[int] = None,
        blocksize: int = 0,
    ) -> None:
        """Initialize the capture session.

        Args:
            device_id: Audio input device ID, or None for the default device
            sample_rate: Requested sample rate in Hz; the device's own rate is used if refused
            frame_size: Number of samples handed to the estimator each tick
            channels: Number of channels to open; only the first is analysed
            blocksize: Stream block size, 0 lets the host choose
        """
        self._device_id = device_id
        self._requested_rate = sample_rate or self.SAMPLE_RATE
        self._sample_rate = float(self._requested_rate)
        self._frame_size = frame_size or self.FRAME_SIZE
        self._channels = channels or self.CHANNELS
        self._blocksize = blocksize

        self._stream: Optional[sd.InputStream] = None
        self._buffer = np.zeros(self._frame_size, dtype=np.float32)
        self._lock = threading.Lock()
        self._running = False

    @property
    def sample_rate(self) -> float:
        return self._sample_rate

    def open(
        self,
        on_ready: Callable[[], None],
        on_error: Callable[[Exception], None],
    ) -> None:
        """Open the input stream and report the outcome through a callback."""
        if self._running:
            logger.warning("Audio capture already open")
            on_ready()
            return

        error: Optional[Exception] = None
        # Requested rate first, then whatever the device reports as its default
        for rate in (self._requested_rate, None):
            try:
                logger.info(f"Opening audio input: device={self._device_id}, rate={rate or 'device default'}")
                self._stream = sd.InputStream(
                    device=self._device_id,
                    samplerate=rate,
                    blocksize=self._blocksize,
                    channels=self._channels,
                    dtype="float32",
                    callback=self._audio_callback,
                )
                self._stream.start()
                break
            except (sd.PortAudioError, ValueError) as e:
                logger.warning(f"Failed to open audio input at {rate or 'device default'} Hz: {e}")
                error = e
                self._discard_stream()

        if self._stream is None:
            on_error(CaptureError(f"Could not open audio input: {error}"))
            return

        self._sample_rate = float(self._stream.samplerate)
        with self._lock:
            self._buffer[:] = 0.0
        self._running = True
        logger.info(f"Audio capture started at {self._sample_rate:.0f} Hz")
        on_ready()

    def _discard_stream(self) -> None:
        if self._stream is not None:
            try:
                self._stream.close()
            except sd.PortAudioError as e:
                logger.debug(f"Error closing failed stream: {e}")
            self._stream = None

    def _audio_callback(
        self,
        indata: np.ndarray,
        _frames: int,
        _time_info: Any,
        status: sd.CallbackFlags,
    ) -> None:
        """Append a block of input to the ring buffer.

        Note:
            This is called from a separate audio thread, so it should be fast
            and avoid any blocking operations to prevent audio glitches.
        """
        if status:
            logger.warning(f"Audio callback status: {status}")

        mono = indata[:, 0] if indata.ndim > 1 else indata
        count = len(mono)
        with self._lock:
            if count >= self._frame_size:
                self._buffer[:] = mono[-self._frame_size :]
            elif count:
                self._buffer[:-count] = self._buffer[count:]
                self._buffer[-count:] = mono

    def get_frame(self) -> Tuple[np.ndarray, float]:
        with self._lock:
            frame = self._buffer.copy()
        return frame, self._sample_rate

    def close(self) -> None:
        """Stop the input stream."""
        if not self._running:
            return

        try:
            if self._stream:
                self._stream.stop()
                self._stream.close()
        except sd.PortAudioError as e:
            logger.error(f"Error stopping audio input: {e}")
        finally:
            self._stream = None
            self._running = False
        logger.info("Audio capture stopped")

    def is_open(self) -> bool:
        return self._running
