"""Core components for the Solfege Tuner application."""

# Import interfaces for easier access
from .interfaces import (
    CaptureError,
    ICaptureSession,
    IFramePacer,
    IFrequencyEstimator,
)

__all__ = ["CaptureError", "ICaptureSession", "IFramePacer", "IFrequencyEstimator"]
