"""
plon - task dependency graph and resource-leveling timeline scheduler.
"""

from plon.exceptions import (
    CycleDetectedError,
    ErrorCode,
    GraphHasCycleError,
    NoAvailableTimeError,
    PlonError,
)
from plon.models import (
    Availability,
    Dependency,
    DependencyType,
    Resource,
    ResourceAllocation,
    Task,
)
from plon.services import (
    DependencyGraph,
    TaskSchedule,
    TimelineSchedule,
    TimelineScheduler,
    schedule_fingerprint,
)

__version__ = "0.1.0"

__all__ = [
    "Availability",
    "CycleDetectedError",
    "Dependency",
    "DependencyGraph",
    "DependencyType",
    "ErrorCode",
    "GraphHasCycleError",
    "NoAvailableTimeError",
    "PlonError",
    "Resource",
    "ResourceAllocation",
    "Task",
    "TaskSchedule",
    "TimelineSchedule",
    "TimelineScheduler",
    "schedule_fingerprint",
]
