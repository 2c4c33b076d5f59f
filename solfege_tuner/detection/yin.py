"""YIN pitch estimation backed by aubio."""

from __future__ import annotations
from typing import Dict, Optional, Tuple

import aubio
import numpy as np

from ..logger import get_logger
from ..core.interfaces import IFrequencyEstimator

logger = get_logger(__name__)


class AubioYinEstimator(IFrequencyEstimator):
    """Frequency estimator using aubio's YIN implementation.

    Each frame is analysed in a single hop (hop size == window size), so the
    detector holds no samples from one frame to the next.
    """

    def __init__(
        self,
        tolerance: float = 0.15,
        min_confidence: float = 0.8,
        silence_db: float = -40.0,
    ) -> None:
        """Initialize the estimator.

        Args:
            tolerance: aubio YIN tolerance (0.0 to 1.0)
            min_confidence: Minimum aubio confidence to accept a pitch
            silence_db: Level in dB below which aubio reports no pitch
        """
        self._tolerance = tolerance
        self._min_confidence = min_confidence
        self._silence_db = silence_db
        self._detectors: Dict[Tuple[int, int], aubio.pitch] = {}

    def _get_detector(self, size: int, sample_rate: int) -> aubio.pitch:
        key = (size, sample_rate)
        if key not in self._detectors:
            detector = aubio.pitch("yin", size, size, sample_rate)
            detector.set_unit("Hz")
            detector.set_tolerance(self._tolerance)
            detector.set_silence(self._silence_db)
            self._detectors[key] = detector
            logger.info(f"Created aubio YIN detector: size={size}, sample_rate={sample_rate}")
        return self._detectors[key]

    def estimate(self, frame: np.ndarray, sample_rate: float) -> Optional[float]:
        if sample_rate <= 0:
            raise ValueError(f"Sample rate must be positive, got {sample_rate}")

        samples = np.array(frame, dtype=np.float32).ravel()
        if samples.size < 2:
            return None

        detector = self._get_detector(samples.size, int(round(sample_rate)))
        pitch = float(detector(samples)[0])
        confidence = float(detector.get_confidence())

        if pitch <= 0 or confidence < self._min_confidence:
            logger.debug(f"YIN rejected: pitch={pitch:.2f}Hz, conf={confidence:.2f}")
            return None
        return pitch
