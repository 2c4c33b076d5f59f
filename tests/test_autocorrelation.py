import numpy as np
import pytest

from solfege_tuner.detection.autocorrelation import AutoCorrelationEstimator

SAMPLE_RATE = 44100
FRAME_SIZE = 2048


def sine(freq, amplitude=0.5, size=FRAME_SIZE, sample_rate=SAMPLE_RATE, phase=0.0):
    t = np.arange(size) / sample_rate
    return (amplitude * np.sin(2 * np.pi * freq * t + phase)).astype(np.float32)


@pytest.fixture
def estimator():
    return AutoCorrelationEstimator()


@pytest.mark.parametrize(
    "freq", [80.0, 98.0, 110.0, 196.0, 220.0, 261.63, 329.63, 440.0, 523.25, 700.0, 880.0, 1000.0]
)
def test_pure_sine_within_one_percent(estimator, freq):
    detected = estimator.estimate(sine(freq), SAMPLE_RATE)
    assert detected is not None
    assert abs(detected - freq) / freq < 0.01


@pytest.mark.parametrize("phase", [0.3, 1.7, 3.0])
def test_phase_does_not_matter(estimator, phase):
    detected = estimator.estimate(sine(330.0, phase=phase), SAMPLE_RATE)
    assert detected == pytest.approx(330.0, rel=0.01)


def test_harmonic_rich_tone_reports_fundamental(estimator):
    # Sawtooth-like tone: strong overtones must not pull the estimate up an octave
    t = np.arange(FRAME_SIZE) / SAMPLE_RATE
    tone = sum(0.4 / k * np.sin(2 * np.pi * 196.0 * k * t) for k in range(1, 6))
    detected = estimator.estimate(tone.astype(np.float32), SAMPLE_RATE)
    assert detected == pytest.approx(196.0, rel=0.01)


def test_other_sample_rate(estimator):
    detected = estimator.estimate(sine(440.0, sample_rate=48000), 48000)
    assert detected == pytest.approx(440.0, rel=0.01)


def test_silence_padding_is_trimmed(estimator):
    frame = np.zeros(FRAME_SIZE, dtype=np.float32)
    frame[512:] = sine(220.0, size=FRAME_SIZE - 512)
    assert estimator.estimate(frame, SAMPLE_RATE) == pytest.approx(220.0, rel=0.01)


def test_all_zero_frame_is_undetected(estimator):
    assert estimator.estimate(np.zeros(FRAME_SIZE, dtype=np.float32), SAMPLE_RATE) is None


def test_quiet_noise_is_undetected(estimator):
    rng = np.random.default_rng(1234)
    noise = rng.uniform(-0.001, 0.001, FRAME_SIZE).astype(np.float32)
    assert estimator.estimate(noise, SAMPLE_RATE) is None


def test_quiet_tone_below_silence_threshold(estimator):
    assert estimator.estimate(sine(440.0, amplitude=0.005), SAMPLE_RATE) is None


def test_loud_noise_is_aperiodic(estimator):
    rng = np.random.default_rng(42)
    noise = rng.uniform(-0.5, 0.5, FRAME_SIZE).astype(np.float32)
    assert estimator.estimate(noise, SAMPLE_RATE) is None


def test_short_frame_is_undetected(estimator):
    assert estimator.estimate(np.array([0.5, -0.5, 0.5], dtype=np.float32), SAMPLE_RATE) is None


def test_deterministic_and_read_only(estimator):
    frame = sine(523.25)
    original = frame.copy()
    first = estimator.estimate(frame, SAMPLE_RATE)
    second = estimator.estimate(frame, SAMPLE_RATE)
    assert first == second
    np.testing.assert_array_equal(frame, original)


def test_accepts_plain_lists(estimator):
    detected = estimator.estimate(sine(440.0).tolist(), SAMPLE_RATE)
    assert detected == pytest.approx(440.0, rel=0.01)


def test_invalid_sample_rate(estimator):
    with pytest.raises(ValueError):
        estimator.estimate(sine(440.0), 0)


def test_invalid_configuration():
    with pytest.raises(ValueError):
        AutoCorrelationEstimator(peak_ratio=0.0)
    with pytest.raises(ValueError):
        AutoCorrelationEstimator(min_lag=0)


@pytest.mark.parametrize("freq", np.geomspace(80.0, 1000.0, 60).round(2).tolist())
def test_sine_in_moderate_noise(estimator, freq):
    # 0.5 amplitude tone over N(0, 0.05) noise, about 17 dB SNR
    rng = np.random.default_rng(int(freq * 100))
    frame = sine(freq) + rng.normal(0.0, 0.05, FRAME_SIZE).astype(np.float32)
    detected = estimator.estimate(frame, SAMPLE_RATE)
    assert detected is not None
    assert detected == pytest.approx(freq, rel=0.02)


def test_dc_offset_tone(estimator):
    # The correlation curve never goes negative here
    frame = sine(220.0) + np.float32(0.6)
    assert estimator.estimate(frame, SAMPLE_RATE) == pytest.approx(220.0, rel=0.01)


def test_ripple_near_zero_lag_is_not_a_period():
    # A faint 11 kHz ripple bumps the curve back up right after lag 0
    t = np.arange(FRAME_SIZE) / SAMPLE_RATE
    frame = sine(150.0) + 0.03 * np.sin(2 * np.pi * 11025.0 * t)
    detected = AutoCorrelationEstimator().estimate(frame, SAMPLE_RATE)
    assert detected == pytest.approx(150.0, rel=0.02)
