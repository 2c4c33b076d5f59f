"""Single-flight detection loop tying capture, estimation and solfege mapping together."""

from __future__ import annotations
import functools
import itertools
from enum import Enum, auto
from typing import ClassVar, Optional

from ..logger import get_logger
from ..core.events import DetectionEvents
from ..core.interfaces import ICaptureSession, IFramePacer, IFrequencyEstimator
from ..detection.autocorrelation import AutoCorrelationEstimator
from ..note_types import DetectionState, INITIAL_STATE
from ..note_utils import get_note_name
from ..solfege import SolfegeMappingError, get_solfege, normalize_root

logger = get_logger(__name__)


class SchedulerState(Enum):
    """Lifecycle states of the detection scheduler."""

    IDLE = auto()  # No capture active
    ARMED = auto()  # Capture requested, no tick scheduled yet
    TICK_PENDING = auto()  # One tick outstanding, nothing published yet
    RUNNING = auto()  # One tick outstanding, state published at least once


class DetectionScheduler:
    """Drives pitch detection once per pacer refresh.

    At most one tick is ever outstanding. Every tick request carries a serial
    number and only the invocation matching the currently pending serial does
    any work, so cancelled or duplicated invocations fall through harmlessly.
    The tick body reads the root once, so a root change never mixes an old
    note with a new root inside one publication.
    """

    DEFAULT_MAX_FREQUENCY: ClassVar[float] = 7000.0  # Hz - above this is treated as noise

    def __init__(
        self,
        capture: ICaptureSession,
        pacer: IFramePacer,
        estimator: Optional[IFrequencyEstimator] = None,
        root: str = "C",
        max_frequency: float = DEFAULT_MAX_FREQUENCY,
        events: Optional[DetectionEvents] = None,
    ) -> None:
        """Initialize the scheduler.

        Args:
            capture: Capture session supplying frames
            pacer: Frame-pacing primitive that invokes the tick handler
            estimator: Frequency estimator, or None for the autocorrelation default
            root: Initial root note (flat or sharp spelling)
            max_frequency: Estimates at or above this are not published
            events: Event hub to publish on, or None to create one
        """
        self._capture = capture
        self._pacer = pacer
        self._estimator = estimator or AutoCorrelationEstimator()
        self._root = normalize_root(root)
        self._max_frequency = max_frequency
        self.events = events or DetectionEvents()

        self._state = SchedulerState.IDLE
        self._detection_state = INITIAL_STATE
        self._session = 0
        self._serials = itertools.count(1)
        self._pending_serial: Optional[int] = None
        self._pending_handle: Optional[int] = None
        self._in_tick = False
        self._ticks = 0

    @property
    def state(self) -> SchedulerState:
        return self._state

    @property
    def root(self) -> str:
        return self._root

    @property
    def detection_state(self) -> DetectionState:
        """The last published detection result (kept after stop)."""
        return self._detection_state

    @property
    def is_active(self) -> bool:
        return self._state is not SchedulerState.IDLE

    @property
    def is_tick_pending(self) -> bool:
        return self._pending_serial is not None

    @property
    def ticks_processed(self) -> int:
        return self._ticks

    def start(self) -> None:
        """Request the capture connection and begin detecting once it is ready."""
        if self._state is not SchedulerState.IDLE:
            logger.warning(f"Detection already started (state: {self._state.name})")
            return

        self._session += 1
        session = self._session
        self._state = SchedulerState.ARMED
        logger.info(f"Starting detection with root {self._root}")
        self.events.emit_active_changed(True)

        self._capture.open(
            functools.partial(self._on_capture_ready, session),
            functools.partial(self._on_capture_failed, session),
        )

    def stop(self) -> None:
        """Cancel the pending tick and disconnect the capture."""
        if self._state is SchedulerState.IDLE:
            return

        self._session += 1
        self._cancel_pending()
        self._state = SchedulerState.IDLE
        self._capture.close()
        logger.info("Detection stopped")
        self.events.emit_active_changed(False)

    def set_root(self, root: str) -> None:
        """Change the root note, restarting the pending tick if there is one.

        Args:
            root: New root in flat or sharp spelling

        Raises:
            ValueError: If the root is not a pitch class; the current root is kept
        """
        new_root = normalize_root(root)
        if new_root == self._root:
            return

        logger.info(f"Root changed: {self._root} -> {new_root}")
        self._root = new_root

        # A tick already executing keeps the root it read and reschedules itself
        if self._pending_serial is not None:
            self._cancel_pending()
            self._schedule_tick()

    def _on_capture_ready(self, session: int) -> None:
        if session != self._session or self._state is not SchedulerState.ARMED:
            logger.info("Capture connected after detection was stopped, ignoring")
            if self._state is SchedulerState.IDLE:
                self._capture.close()
            return

        logger.info("Capture connected, scheduling first tick")
        self._state = SchedulerState.TICK_PENDING
        self._schedule_tick()

    def _on_capture_failed(self, session: int, error: Exception) -> None:
        if session != self._session:
            logger.warning(f"Ignoring capture failure from a stopped session: {error}")
            return

        logger.error(f"Audio capture unavailable: {error}")
        self._state = SchedulerState.IDLE
        self.events.emit_active_changed(False)
        self.events.emit_capture_failed(error)

    def _schedule_tick(self) -> None:
        """Request a tick unless one is already outstanding."""
        if self._pending_serial is not None:
            return

        serial = next(self._serials)
        self._pending_serial = serial
        handle = self._pacer.request_tick(functools.partial(self._on_tick, serial))
        # A pacer may fire synchronously; only keep the handle if it is still ours
        if self._pending_serial == serial:
            self._pending_handle = handle

    def _cancel_pending(self) -> None:
        if self._pending_handle is not None:
            self._pacer.cancel_tick(self._pending_handle)
        self._pending_handle = None
        self._pending_serial = None

    def _on_tick(self, serial: int, timestamp: float) -> None:
        """Tick handler invoked by the pacer."""
        if serial != self._pending_serial:
            logger.debug(f"Ignoring stale tick {serial} (pending: {self._pending_serial})")
            return
        if self._in_tick:
            logger.warning(f"Re-entrant tick {serial} ignored")
            return

        self._pending_serial = None
        self._pending_handle = None

        self._in_tick = True
        try:
            self._detect(timestamp)
        except Exception as e:
            logger.error(f"Detection tick failed: {e}", exc_info=True)
        finally:
            self._in_tick = False
            self._ticks += 1

        if self._state is not SchedulerState.IDLE:
            self._schedule_tick()

    def _detect(self, timestamp: float) -> None:
        """Run one frame through estimation and mapping, publishing on success."""
        root = self._root
        frame, sample_rate = self._capture.get_frame()

        frequency = self._estimator.estimate(frame, sample_rate)
        if frequency is None:
            logger.debug("No confident pitch this tick")
            return
        if not 0 < frequency < self._max_frequency:
            logger.debug(f"Frequency out of range: {frequency:.2f}Hz")
            return

        note = get_note_name(frequency)
        try:
            syllable = get_solfege(note, root)
        except SolfegeMappingError:
            logger.exception(f"Solfege lookup failed for {note} with root {root}")
            return

        state = DetectionState(
            pitch_display=f"{frequency:.2f}",
            note=note,
            syllable=syllable,
            frequency=frequency,
            root=root,
            timestamp=timestamp,
        )
        self._detection_state = state
        if self._state is not SchedulerState.IDLE:
            self._state = SchedulerState.RUNNING
        logger.debug(f"Published {state}")
        self.events.emit_state_published(state)
