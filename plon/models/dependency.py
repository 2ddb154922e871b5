import uuid
from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, Field


class DependencyType(str, Enum):
    """How a predecessor constrains its successor."""
    FINISH_TO_START = "finish_to_start"    # B starts after A finishes (default)
    START_TO_START = "start_to_start"      # B starts when A starts
    FINISH_TO_FINISH = "finish_to_finish"  # B finishes when A finishes
    START_TO_FINISH = "start_to_finish"    # B finishes when A starts (rare)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Dependency(BaseModel):
    """
    A directed, typed edge in the task DAG.

    from_task_id -> to_task_id means:
    "The predecessor (from) constrains when the successor (to) may run"

    Example: If Task A blocks Task B with FINISH_TO_START:
    - from_task_id = A.id (the blocker)
    - to_task_id = B.id (the blocked)
    """

    id: uuid.UUID = Field(default_factory=uuid.uuid4)
    from_task_id: uuid.UUID
    to_task_id: uuid.UUID
    dependency_type: DependencyType = DependencyType.FINISH_TO_START
    created_at: datetime = Field(default_factory=_utcnow)
