"""
Pytest configuration and fixtures for plon tests.
"""

import uuid
from datetime import date

import pytest

from plon.config import Settings, get_settings
from plon.models import Dependency, DependencyType, Resource, Task
from plon.services.graph import DependencyGraph
from plon.services.timeline_scheduler import TimelineScheduler


# 2026-01-05 is a Monday
MONDAY = date(2026, 1, 5)


@pytest.fixture(autouse=True)
def clear_settings_cache(monkeypatch):
    """Isolate tests from PLON_* variables and the cached settings instance."""
    for name in (
        "PLON_DEBUG",
        "PLON_LOG_LEVEL",
        "PLON_LOG_JSON",
        "PLON_DEFAULT_ESTIMATED_HOURS",
        "PLON_UNASSIGNED_HOURS_PER_DAY",
        "PLON_MAX_SCHEDULE_DAYS",
    ):
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def monday() -> date:
    return MONDAY


@pytest.fixture
def settings() -> Settings:
    return Settings(_env_file=None)


@pytest.fixture
def scheduler(settings) -> TimelineScheduler:
    return TimelineScheduler(settings)


@pytest.fixture
def graph() -> DependencyGraph:
    return DependencyGraph()


def make_task(title: str, hours: float | None = 8.0, resource: Resource | None = None) -> Task:
    return Task(
        title=title,
        estimated_hours=hours,
        assigned_resource_id=resource.id if resource else None,
    )


def link(
    graph: DependencyGraph,
    a: uuid.UUID,
    b: uuid.UUID,
    dependency_type: DependencyType = DependencyType.FINISH_TO_START,
) -> None:
    graph.add_dependency(Dependency(from_task_id=a, to_task_id=b, dependency_type=dependency_type))
