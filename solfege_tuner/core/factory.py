"""Factory for creating Solfege Tuner components."""

import importlib
import inspect
from typing import Any, Dict, Optional

from ..logger import get_logger
from .config import ConfigManager
from ..services.detection_scheduler import DetectionScheduler
from ..services.frame_pacer import RefreshPacer
from .interfaces import ICaptureSession, IFramePacer, IFrequencyEstimator

logger = get_logger(__name__)


def _load(path: str) -> type:
    """Import a class from a 'module:ClassName' path.

    Implementations are loaded on demand so optional backends (aubio,
    PortAudio) are only required when selected.
    """
    module_name, class_name = path.split(":")
    module = importlib.import_module(module_name, package=__package__)
    return getattr(module, class_name)


def _accepted(cls: type, config: Dict[str, Any]) -> Dict[str, Any]:
    """Keep only the keyword arguments the class constructor accepts."""
    params = inspect.signature(cls.__init__).parameters
    return {key: value for key, value in config.items() if key in params}


class ComponentFactory:
    """Factory for creating Solfege Tuner components."""

    def __init__(self, config_manager: Optional[ConfigManager] = None):
        """Initialize the component factory.

        Args:
            config_manager: Configuration manager, or None to create a default one
        """
        self.config_manager = config_manager or ConfigManager()

        # Register default component implementations
        self.estimator_classes: Dict[str, str] = {
            "autocorrelation": "..detection.autocorrelation:AutoCorrelationEstimator",
            "yin": "..detection.yin:AubioYinEstimator",
        }

        self.capture_classes: Dict[str, str] = {
            "live": "..audio.live_capture:LiveCaptureSession",
            "file": "..audio.file_capture:WavFileCaptureSession",
            "mock": "..mock_capture:MockCaptureSession",
        }

    def create_estimator(
        self, implementation: Optional[str] = None, **kwargs
    ) -> IFrequencyEstimator:
        """Create a frequency estimator.

        Args:
            implementation: Name of the implementation, or None to use the configured one
            **kwargs: Additional parameters to pass to the constructor

        Returns:
            Frequency estimator instance

        Raises:
            ValueError: If the implementation is not registered
        """
        config = self.config_manager.get_config("estimator")
        configured = config.pop("implementation", "autocorrelation")
        implementation = implementation or configured

        if implementation not in self.estimator_classes:
            raise ValueError(f"Unknown estimator implementation: {implementation}")

        cls = _load(self.estimator_classes[implementation])
        config = _accepted(cls, config)
        config.update(kwargs)
        instance = cls(**config)

        logger.info(f"Created estimator: {implementation}")
        return instance

    def create_capture(self, implementation: str = "live", **kwargs) -> ICaptureSession:
        """Create a capture session.

        Args:
            implementation: Name of the implementation to use
            **kwargs: Additional parameters (e.g. file_path for 'file')

        Returns:
            Capture session instance

        Raises:
            ValueError: If the implementation is not registered
        """
        if implementation not in self.capture_classes:
            raise ValueError(f"Unknown capture implementation: {implementation}")

        cls = _load(self.capture_classes[implementation])
        config = _accepted(cls, self.config_manager.get_config("capture"))
        config.update(kwargs)
        instance = cls(**config)

        logger.info(f"Created capture session: {implementation}")
        return instance

    def create_pacer(self, **kwargs) -> IFramePacer:
        """Create the refresh pacer using the scheduler refresh rate."""
        config = {"refresh_rate": self.config_manager.get_config("scheduler")["refresh_rate"]}
        config.update(kwargs)
        return RefreshPacer(**config)

    def create_scheduler(
        self,
        capture: ICaptureSession,
        pacer: Optional[IFramePacer] = None,
        estimator: Optional[IFrequencyEstimator] = None,
        **kwargs,
    ) -> DetectionScheduler:
        """Create a detection scheduler.

        Args:
            capture: Capture session feeding the scheduler
            pacer: Pacer, or None to create one from configuration
            estimator: Estimator, or None to create the configured one
            **kwargs: Overrides for root / max_frequency

        Returns:
            DetectionScheduler instance
        """
        config = self.config_manager.get_config("scheduler")
        config = _accepted(DetectionScheduler, config)
        config.update(kwargs)

        instance = DetectionScheduler(
            capture=capture,
            pacer=pacer or self.create_pacer(),
            estimator=estimator or self.create_estimator(),
            **config,
        )
        logger.info(f"Created detection scheduler with root {instance.root}")
        return instance
