from plon.services.graph import DependencyGraph
from plon.services.timeline_scheduler import (
    TaskSchedule,
    TimelineSchedule,
    TimelineScheduler,
    schedule_fingerprint,
)

__all__ = [
    "DependencyGraph",
    "TaskSchedule",
    "TimelineSchedule",
    "TimelineScheduler",
    "schedule_fingerprint",
]
