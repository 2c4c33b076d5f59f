"""Event system for Solfege Tuner components."""

from typing import Dict, List, Callable, Any
from enum import Enum, auto

from ..logger import get_logger
from ..note_types import DetectionState

logger = get_logger(__name__)


class DetectionEventType(Enum):
    """Event types published by the detection scheduler."""

    STATE_PUBLISHED = auto()
    ACTIVE_CHANGED = auto()
    CAPTURE_FAILED = auto()


class EventEmitter:
    """Event emitter for Solfege Tuner components."""

    def __init__(self):
        """Initialize the event emitter."""
        self._listeners: Dict[Any, List[Callable]] = {}

    def on(self, event_type: Any, callback: Callable) -> None:
        """Register a callback for an event type.

        Args:
            event_type: Event type to listen for
            callback: Function to call when the event occurs
        """
        if event_type not in self._listeners:
            self._listeners[event_type] = []

        if callback not in self._listeners[event_type]:
            self._listeners[event_type].append(callback)
            logger.debug(f"Added listener for event {event_type}")

    def off(self, event_type: Any, callback: Callable) -> None:
        """Remove a previously registered callback."""
        listeners = self._listeners.get(event_type, [])
        if callback in listeners:
            listeners.remove(callback)

    def emit(self, event_type: Any, *args, **kwargs) -> None:
        """Emit an event.

        Listener errors are logged and never reach the emitter's caller.

        Args:
            event_type: Event type to emit
            *args: Positional arguments to pass to listeners
            **kwargs: Keyword arguments to pass to listeners
        """
        if event_type not in self._listeners:
            return

        for callback in list(self._listeners[event_type]):
            try:
                callback(*args, **kwargs)
            except Exception as e:
                logger.error(f"Error in event listener for {event_type}: {e}", exc_info=True)

    def clear(self) -> None:
        """Remove all event listeners."""
        self._listeners = {}
        logger.debug("Cleared all event listeners")


class DetectionEvents:
    """Event emitter specifically for detection scheduler events."""

    def __init__(self):
        """Initialize the detection events."""
        self._emitter = EventEmitter()

    def on_state_published(self, callback: Callable[[DetectionState], None]) -> None:
        """Register a callback for newly published detection states."""
        self._emitter.on(DetectionEventType.STATE_PUBLISHED, callback)

    def on_active_changed(self, callback: Callable[[bool], None]) -> None:
        """Register a callback for the started/stopped flag."""
        self._emitter.on(DetectionEventType.ACTIVE_CHANGED, callback)

    def on_capture_failed(self, callback: Callable[[Exception], None]) -> None:
        """Register a callback for capture connection failures."""
        self._emitter.on(DetectionEventType.CAPTURE_FAILED, callback)

    def emit_state_published(self, state: DetectionState) -> None:
        self._emitter.emit(DetectionEventType.STATE_PUBLISHED, state)

    def emit_active_changed(self, active: bool) -> None:
        self._emitter.emit(DetectionEventType.ACTIVE_CHANGED, active)

    def emit_capture_failed(self, error: Exception) -> None:
        self._emitter.emit(DetectionEventType.CAPTURE_FAILED, error)
