import uuid

from pydantic import BaseModel, Field


class Task(BaseModel):
    """
    Task record as supplied by the persistence layer.

    Key fields for scheduling:
    - estimated_hours: effort estimate (None = not estimated yet)
    - assigned_resource_id: who does the work (None = unassigned)
    """

    id: uuid.UUID = Field(default_factory=uuid.uuid4)
    title: str
    description: str = ""
    estimated_hours: float | None = Field(default=None, ge=0)
    assigned_resource_id: uuid.UUID | None = None
    metadata: dict[str, str] = Field(default_factory=dict)
