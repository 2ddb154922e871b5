"""
Structured exceptions for the plon scheduling engine.

Every failure carries:
- A closed error code (see ErrorCode)
- A human-readable message
- Optional structured details, in the same shape UI layers render
"""

import uuid
from enum import Enum
from typing import Any, Dict, List, Optional


class ErrorCode(str, Enum):
    """All failure kinds the engine can raise."""
    CYCLE_DETECTED = "cycle_detected"
    GRAPH_HAS_CYCLE = "graph_has_cycle"
    NO_AVAILABLE_TIME = "no_available_time"


# =============================================================================
# Custom Exceptions
# =============================================================================

class PlonError(Exception):
    """Base exception for all engine errors."""

    def __init__(
        self,
        message: str,
        error_code: ErrorCode,
        details: Optional[List[Dict[str, Any]]] = None,
    ):
        self.message = message
        self.error_code = error_code
        self.details = details
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        """Structured error payload: {error, message, details}."""
        return {
            "error": self.error_code.value,
            "message": self.message,
            "details": self.details,
        }


class CycleDetectedError(PlonError):
    """Adding a dependency would create a cycle."""

    def __init__(self, from_task_id: uuid.UUID, to_task_id: uuid.UUID):
        super().__init__(
            message="Adding this dependency would create a cycle",
            error_code=ErrorCode.CYCLE_DETECTED,
            details=[{
                "loc": ["dependency"],
                "msg": f"Dependency {from_task_id} -> {to_task_id} would create a cycle",
                "type": "cycle_error",
            }],
        )
        self.from_task_id = from_task_id
        self.to_task_id = to_task_id


class GraphHasCycleError(PlonError):
    """The dependency graph is already cyclic, so no ordering exists."""

    def __init__(self):
        super().__init__(
            message="Graph contains a cycle",
            error_code=ErrorCode.GRAPH_HAS_CYCLE,
        )


class NoAvailableTimeError(PlonError):
    """A resource has no capacity for a task within the scheduling horizon."""

    def __init__(
        self,
        task_id: uuid.UUID,
        resource_id: uuid.UUID,
        horizon_days: int,
    ):
        super().__init__(
            message=(
                f"Could not find available time for task {task_id} "
                f"within {horizon_days} days"
            ),
            error_code=ErrorCode.NO_AVAILABLE_TIME,
            details=[{
                "loc": ["resources", str(resource_id)],
                "msg": f"Resource {resource_id} has no remaining capacity in the horizon",
                "type": "capacity_error",
            }],
        )
        self.task_id = task_id
        self.resource_id = resource_id
        self.horizon_days = horizon_days
