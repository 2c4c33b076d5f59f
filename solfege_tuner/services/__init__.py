"""Scheduling services for the detection loop."""

from .detection_scheduler import DetectionScheduler, SchedulerState
from .frame_pacer import RefreshPacer

__all__ = ["DetectionScheduler", "RefreshPacer", "SchedulerState"]
