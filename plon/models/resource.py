import uuid
from datetime import date, datetime, timedelta, timezone

from pydantic import BaseModel, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Availability(BaseModel):
    """Explicit capacity override for a single date."""
    date: date
    hours_available: float = Field(ge=0)


class Resource(BaseModel):
    """
    A person or team with a per-date hour capacity.

    Capacity on a given date is the explicit Availability entry for that
    date if one exists, otherwise weekly_hours spread over five weekdays.
    """

    id: uuid.UUID = Field(default_factory=uuid.uuid4)
    name: str
    email: str | None = None
    role: str = ""
    skills: set[str] = Field(default_factory=set)
    metadata_filters: dict[str, str] = Field(default_factory=dict)  # e.g. "category" -> "infrastructure"
    weekly_hours: float = Field(default=40.0, ge=0)
    availability: list[Availability] = Field(default_factory=list)
    current_load: float = 0.0  # Hours currently allocated
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)

    def add_skill(self, skill: str) -> None:
        self.skills.add(skill)
        self.updated_at = _utcnow()

    def add_metadata_filter(self, key: str, value: str) -> None:
        self.metadata_filters[key] = value
        self.updated_at = _utcnow()

    def can_work_on_task(self, task_metadata: dict[str, str]) -> bool:
        """True if any filter matches the task metadata. No filters means anything goes."""
        if not self.metadata_filters:
            return True
        return any(
            task_metadata.get(key) == value
            for key, value in self.metadata_filters.items()
        )

    def get_availability_for_date(self, day: date) -> float:
        for entry in self.availability:
            if entry.date == day:
                return entry.hours_available
        if day.weekday() < 5:
            return self.weekly_hours / 5.0
        return 0.0  # Weekends

    def get_availability_for_week(self, week_start: date) -> float:
        """
        Hours available in the 7 days starting at week_start.

        Explicit entries inside the week replace the weekly default entirely;
        a week without any explicit hours falls back to weekly_hours.
        """
        week_end = week_start + timedelta(days=6)
        custom_hours = sum(
            entry.hours_available
            for entry in self.availability
            if week_start <= entry.date <= week_end
        )
        if custom_hours > 0:
            return custom_hours
        return self.weekly_hours

    def set_availability(self, day: date, hours: float) -> None:
        for entry in self.availability:
            if entry.date == day:
                entry.hours_available = hours
                break
        else:
            self.availability.append(Availability(date=day, hours_available=hours))
        self.updated_at = _utcnow()

    def utilization_percentage(self) -> float:
        if self.weekly_hours == 0:
            return 0.0
        return self.current_load / self.weekly_hours * 100.0

    def is_overloaded(self) -> bool:
        return self.current_load > self.weekly_hours

    def available_hours(self) -> float:
        return max(self.weekly_hours - self.current_load, 0.0)


class ResourceAllocation(BaseModel):
    """Hours of one resource committed to one task over a date range."""

    id: uuid.UUID = Field(default_factory=uuid.uuid4)
    resource_id: uuid.UUID
    task_id: uuid.UUID
    hours_allocated: float
    start_date: date
    end_date: date
    created_at: datetime = Field(default_factory=_utcnow)

    def duration_days(self) -> int:
        """Inclusive number of calendar days covered."""
        return (self.end_date - self.start_date).days + 1

    def daily_hours(self) -> float:
        return self.hours_allocated / self.duration_days()
