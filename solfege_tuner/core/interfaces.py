"""Defines the core interfaces for the Solfege Tuner application."""

from __future__ import annotations
from abc import ABC, abstractmethod
from typing import Callable, Optional, Tuple

import numpy as np


class CaptureError(RuntimeError):
    """Audio capture could not be connected (permission denied, no device)."""


class IFrequencyEstimator(ABC):
    """Interface for fundamental frequency estimators."""

    @abstractmethod
    def estimate(self, frame: np.ndarray, sample_rate: float) -> Optional[float]:
        """Return the fundamental frequency in Hz, or None if undetected."""
        pass


class ICaptureSession(ABC):
    """Interface for audio capture sessions feeding the analysis loop."""

    @abstractmethod
    def open(
        self,
        on_ready: Callable[[], None],
        on_error: Callable[[Exception], None],
    ) -> None:
        """Connect the capture source.

        Completion is reported through exactly one of the callbacks, either
        before this call returns or at some later point.
        """
        pass

    @abstractmethod
    def close(self) -> None:
        """Disconnect the capture source from the analysis sink."""
        pass

    @abstractmethod
    def get_frame(self) -> Tuple[np.ndarray, float]:
        """Return a snapshot of the latest frame and the sample rate."""
        pass

    @abstractmethod
    def is_open(self) -> bool:
        """Check if the capture source is connected."""
        pass


class IFramePacer(ABC):
    """Interface for the display-refresh scheduling primitive."""

    @abstractmethod
    def request_tick(self, callback: Callable[[float], None]) -> int:
        """Invoke the callback once on the next refresh and return a handle."""
        pass

    @abstractmethod
    def cancel_tick(self, handle: int) -> None:
        """Cancel a requested callback that has not fired yet."""
        pass
