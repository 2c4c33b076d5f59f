"""Normalized autocorrelation pitch estimation."""

from __future__ import annotations
from typing import ClassVar, Optional

import numpy as np

from ..logger import get_logger
from ..core.interfaces import IFrequencyEstimator

logger = get_logger(__name__)


class AutoCorrelationEstimator(IFrequencyEstimator):
    """Estimate the fundamental frequency of a frame by autocorrelation.

    The estimator is stateless: the same frame and sample rate always give
    the same result, and the frame passed in is never written to.
    """

    DEFAULT_SILENCE_THRESHOLD: ClassVar[float] = 0.01  # RMS below this is silence
    DEFAULT_NOISE_FLOOR: ClassVar[float] = 0.001  # Edge samples at or below this are trimmed
    DEFAULT_MIN_CORRELATION: ClassVar[float] = 0.5  # Weakest peak accepted as periodic
    DEFAULT_PEAK_RATIO: ClassVar[float] = 0.9  # First lobe within this share of the best wins
    DEFAULT_MIN_LAG: ClassVar[int] = 2  # Shortest period in samples
    DEFAULT_TROUGH_LEVEL: ClassVar[float] = 0.0  # Correlation that ends the zero-lag lobe

    def __init__(
        self,
        silence_threshold: float = DEFAULT_SILENCE_THRESHOLD,
        noise_floor: float = DEFAULT_NOISE_FLOOR,
        min_correlation: float = DEFAULT_MIN_CORRELATION,
        peak_ratio: float = DEFAULT_PEAK_RATIO,
        min_lag: int = DEFAULT_MIN_LAG,
        trough_level: float = DEFAULT_TROUGH_LEVEL,
    ) -> None:
        """Initialize the estimator.

        Args:
            silence_threshold: Minimum frame RMS to attempt detection
            noise_floor: Magnitude below which leading/trailing samples are trimmed
            min_correlation: Minimum normalized correlation of the chosen peak
            peak_ratio: Fraction of the highest peak a lower lag peak must reach
                to be chosen over it (guards against picking period multiples)
            min_lag: Shortest detectable period in samples
            trough_level: Correlation the curve must fall below before peaks are
                searched; it also separates one lobe of the curve from the next
        """
        if not 0.0 < peak_ratio <= 1.0:
            raise ValueError(f"peak_ratio must be in (0, 1], got {peak_ratio}")
        if min_lag < 1:
            raise ValueError(f"min_lag must be at least 1, got {min_lag}")

        self._silence_threshold = silence_threshold
        self._noise_floor = noise_floor
        self._min_correlation = min_correlation
        self._peak_ratio = peak_ratio
        self._min_lag = int(min_lag)
        self._trough_level = trough_level

    def estimate(self, frame: np.ndarray, sample_rate: float) -> Optional[float]:
        """Estimate the fundamental frequency of an audio frame.

        Args:
            frame: 1D array of samples in roughly [-1, 1]
            sample_rate: Sample rate of the frame in Hz

        Returns:
            Frequency in Hz, or None if the frame is silent or not periodic enough

        Raises:
            ValueError: If the sample rate is not positive
        """
        if sample_rate <= 0:
            raise ValueError(f"Sample rate must be positive, got {sample_rate}")

        # Work on a float64 copy so the capture buffer is never touched
        samples = np.array(frame, dtype=np.float64).ravel()
        if samples.size < 2 * self._min_lag:
            logger.debug(f"Frame too short for detection: {samples.size} samples")
            return None

        rms = float(np.sqrt(np.mean(samples**2)))
        if rms < self._silence_threshold:
            logger.debug(f"Signal below silence threshold: rms={rms:.5f}")
            return None

        samples = self._trim(samples)
        if samples.size < 2 * self._min_lag:
            logger.debug(f"Trimmed frame too short: {samples.size} samples")
            return None

        correlation = self._normalized_autocorrelation(samples)
        lag = self._find_peak_lag(correlation)
        if lag is None:
            return None

        refined_lag = self._interpolate(correlation, lag)
        if refined_lag <= 0:
            logger.debug(f"Degenerate refined lag {refined_lag:.3f} at peak {lag}")
            return None

        frequency = float(sample_rate / refined_lag)
        logger.debug(
            f"Estimated {frequency:.2f}Hz (lag {refined_lag:.2f}, "
            f"corr {correlation[lag]:.3f}, rms {rms:.4f})"
        )
        return frequency

    def _trim(self, samples: np.ndarray) -> np.ndarray:
        """Drop leading and trailing samples at or below the noise floor."""
        audible = np.flatnonzero(np.abs(samples) > self._noise_floor)
        if audible.size == 0:
            return samples[:0]
        return samples[audible[0] : audible[-1] + 1]

    def _normalized_autocorrelation(self, samples: np.ndarray) -> np.ndarray:
        """Correlation coefficient of the signal with itself for lags 0..n/2."""
        size = samples.size
        max_lag = size // 2

        raw = np.correlate(samples, samples, mode="full")[size - 1 : size + max_lag]

        # energy[k] is the sum of the first k squared samples
        energy = np.concatenate(([0.0], np.cumsum(samples**2)))
        lags = np.arange(max_lag + 1)
        head_energy = energy[size - lags]
        tail_energy = energy[size] - energy[lags]

        norm = np.sqrt(head_energy * tail_energy)
        return np.divide(raw, norm, out=np.zeros_like(raw), where=norm > 0)

    def _find_peak_lag(self, correlation: np.ndarray) -> Optional[int]:
        """Pick the lag of the fundamental period from a correlation curve."""
        last = correlation.size - 1

        # Leave the zero-lag lobe at the first lag below the trough level
        below = np.flatnonzero(correlation[self._min_lag :] < self._trough_level)
        dipped = below.size > 0
        if dipped:
            trough = self._min_lag + int(below[0])
        else:
            # Curve never dips (e.g. a DC offset): use the first local minimum
            trough = 0
            while trough < last and correlation[trough] > correlation[trough + 1]:
                trough += 1
            trough = max(trough, self._min_lag)
        if trough >= last:
            logger.debug("No trough found in the correlation curve")
            return None

        tail = correlation[trough:]
        best = float(np.max(tail))
        if best < self._min_correlation:
            logger.debug(f"Correlation too weak: {best:.3f} < {self._min_correlation}")
            return None

        # Lobes are split where the curve falls below this level
        floor = self._trough_level if dipped else (float(correlation[trough]) + best) / 2

        # Apex of the first lobe that reaches peak_ratio of the best
        start = int(np.flatnonzero(tail >= best * self._peak_ratio)[0])
        after = np.flatnonzero(tail[start:] < floor)
        end = start + max(int(after[0]), 1) if after.size else tail.size
        return trough + start + int(np.argmax(tail[start:end]))

    @staticmethod
    def _interpolate(correlation: np.ndarray, lag: int) -> float:
        """Refine a peak lag to sub-sample precision with a parabola."""
        if lag <= 0 or lag >= correlation.size - 1:
            return float(lag)

        x1, x2, x3 = correlation[lag - 1], correlation[lag], correlation[lag + 1]
        a = (x1 + x3 - 2 * x2) / 2
        b = (x3 - x1) / 2
        if a == 0:
            return float(lag)
        return float(lag - b / (2 * a))
