"""
Resource-constrained timeline scheduling.

Turns a dependency graph, tasks with effort estimates, and resource
calendars into concrete per-task dates:
- Tasks are visited in topological order
- Each task's earliest start is derived from already-scheduled predecessors
- Resourced tasks are leveled day by day against the resource's capacity
- Unresourced tasks use a flat hours-per-weekday rate
"""

import hashlib
import math
import uuid
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import date, timedelta

from plon.config import Settings, get_settings
from plon.exceptions import GraphHasCycleError, NoAvailableTimeError
from plon.logging_config import get_logger
from plon.models import DependencyType, Resource, ResourceAllocation, Task
from plon.services.graph import DependencyGraph

logger = get_logger(__name__)

# resource_id -> date -> hours already committed
Ledger = dict[uuid.UUID, dict[date, float]]


@dataclass
class TaskSchedule:
    """Computed dates for a single task."""
    task_id: uuid.UUID
    resource_id: uuid.UUID | None
    start_date: date
    end_date: date
    allocated_hours: float


@dataclass
class TimelineSchedule:
    """Complete result of one scheduling run."""
    task_schedules: dict[uuid.UUID, TaskSchedule] = field(default_factory=dict)
    resource_allocations: list[ResourceAllocation] = field(default_factory=list)
    critical_path: list[uuid.UUID] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def project_start_date(self) -> date | None:
        if not self.task_schedules:
            return None
        return min(s.start_date for s in self.task_schedules.values())

    def project_end_date(self) -> date | None:
        if not self.task_schedules:
            return None
        return max(s.end_date for s in self.task_schedules.values())

    def get_total_duration_days(self) -> int:
        """Inclusive span from the earliest start to the latest end (0 if empty)."""
        if not self.task_schedules:
            return 0
        return (self.project_end_date() - self.project_start_date()).days + 1

    def is_critical(self, task_id: uuid.UUID) -> bool:
        return task_id in self.critical_path

    def allocations_for_resource(self, resource_id: uuid.UUID) -> list[ResourceAllocation]:
        return [a for a in self.resource_allocations if a.resource_id == resource_id]


def is_weekend(day: date) -> bool:
    return day.weekday() >= 5


class TimelineScheduler:
    """
    Computes a TimelineSchedule from tasks, resources and a DependencyGraph.

    The scheduler keeps no state between calls; the allocation ledger lives
    only for the duration of one calculate_schedule() run.
    """

    def __init__(self, settings: Settings | None = None):
        self.settings = settings or get_settings()

    def calculate_schedule(
        self,
        tasks: Mapping[uuid.UUID, Task],
        resources: Mapping[uuid.UUID, Resource],
        dependency_graph: DependencyGraph,
        start_date: date,
    ) -> TimelineSchedule:
        """
        Schedule every task in `tasks`, starting no earlier than start_date.

        Scheduling problems (unassigned tasks, unknown resources, missing
        estimates, a cyclic graph) are reported as warnings.

        A task whose assigned_resource_id is not in `resources` is scheduled
        at the flat unresourced rate and gets no ResourceAllocation, since no
        capacity was reserved for it.

        Raises:
            NoAvailableTimeError: if an assigned resource has no capacity
                left within settings.max_schedule_days of a task's earliest start
        """
        schedule = TimelineSchedule()
        ledger: Ledger = {resource_id: {} for resource_id in resources}

        for task_id in self._scheduling_order(tasks, dependency_graph, schedule.warnings):
            task = tasks[task_id]

            resource = None
            if task.assigned_resource_id is None:
                schedule.warnings.append(f"Task '{task.title}' is unassigned to any resource")
            else:
                resource = resources.get(task.assigned_resource_id)
                if resource is None:
                    schedule.warnings.append(
                        f"Task '{task.title}' is assigned to unknown resource "
                        f"{task.assigned_resource_id}"
                    )

            estimated_hours = self._estimated_hours(task)
            if task.estimated_hours is None:
                schedule.warnings.append(
                    f"Task '{task.title}' has no estimate; assuming {estimated_hours:g} hours"
                )

            earliest_start = self.calculate_earliest_start(
                task_id,
                dependency_graph,
                schedule.task_schedules,
                start_date,
            )

            if resource is not None:
                task_schedule = self._schedule_task_with_resource(
                    task_id,
                    estimated_hours,
                    resource,
                    earliest_start,
                    ledger,
                )
                schedule.resource_allocations.append(ResourceAllocation(
                    resource_id=resource.id,
                    task_id=task_id,
                    hours_allocated=estimated_hours,
                    start_date=task_schedule.start_date,
                    end_date=task_schedule.end_date,
                ))
            else:
                task_schedule = self._schedule_task_without_resource(
                    task_id,
                    estimated_hours,
                    earliest_start,
                )

            schedule.task_schedules[task_id] = task_schedule

        task_estimates = {
            task_id: self._estimated_hours(task)
            for task_id, task in tasks.items()
        }
        schedule.critical_path = dependency_graph.get_critical_path(task_estimates)

        logger.info(
            f"Scheduled {len(schedule.task_schedules)} tasks over "
            f"{schedule.get_total_duration_days()} days "
            f"({len(schedule.warnings)} warnings)"
        )
        return schedule

    def _estimated_hours(self, task: Task) -> float:
        if task.estimated_hours is None:
            return self.settings.default_estimated_hours
        return task.estimated_hours

    def _scheduling_order(
        self,
        tasks: Mapping[uuid.UUID, Task],
        dependency_graph: DependencyGraph,
        warnings: list[str],
    ) -> list[uuid.UUID]:
        """
        Topological order restricted to known tasks.

        Falls back to task insertion order if the graph is cyclic. Tasks the
        graph has never seen are appended in insertion order.
        """
        try:
            order = dependency_graph.topological_sort()
        except GraphHasCycleError:
            logger.error("Cycle detected in dependency graph; using task order")
            warnings.append(
                "Dependency graph contains a cycle; tasks scheduled without dependency ordering"
            )
            order = list(tasks)

        order = [task_id for task_id in order if task_id in tasks]
        seen = set(order)
        order.extend(task_id for task_id in tasks if task_id not in seen)
        return order

    def calculate_earliest_start(
        self,
        task_id: uuid.UUID,
        dependency_graph: DependencyGraph,
        scheduled_tasks: Mapping[uuid.UUID, TaskSchedule],
        default_start: date,
    ) -> date:
        """
        Latest start floor imposed by already-scheduled predecessors.

        FINISH_TO_START: predecessor end + 1 day
        START_TO_START: predecessor start
        FINISH_TO_FINISH: predecessor end (approximation, constrains start not finish)
        START_TO_FINISH: predecessor start (approximation)

        Predecessors without a schedule yet impose no floor.
        """
        earliest_start = default_start

        for dep_task_id, dep_type in dependency_graph.get_dependencies(task_id):
            dep_schedule = scheduled_tasks.get(dep_task_id)
            if dep_schedule is None:
                continue

            if dep_type == DependencyType.FINISH_TO_START:
                required_start = dep_schedule.end_date + timedelta(days=1)
            elif dep_type == DependencyType.START_TO_START:
                required_start = dep_schedule.start_date
            elif dep_type == DependencyType.FINISH_TO_FINISH:
                required_start = dep_schedule.end_date
            else:
                required_start = dep_schedule.start_date

            if required_start > earliest_start:
                earliest_start = required_start

        return earliest_start

    def _schedule_task_with_resource(
        self,
        task_id: uuid.UUID,
        estimated_hours: float,
        resource: Resource,
        earliest_start: date,
        ledger: Ledger,
    ) -> TaskSchedule:
        """
        Greedy leveling: fill each weekday's free capacity until the work is done.

        Zero-hour tasks are milestones and take no capacity.
        """
        if estimated_hours <= 0:
            return TaskSchedule(
                task_id=task_id,
                resource_id=resource.id,
                start_date=earliest_start,
                end_date=earliest_start,
                allocated_hours=estimated_hours,
            )

        allocated = ledger.setdefault(resource.id, {})
        horizon = earliest_start + timedelta(days=self.settings.max_schedule_days)
        current_date = earliest_start
        remaining_hours = estimated_hours
        start_date = None

        while remaining_hours > 0:
            if current_date >= horizon:
                logger.error(
                    f"Resource {resource.name} has no capacity for task {task_id} "
                    f"before {horizon}"
                )
                raise NoAvailableTimeError(task_id, resource.id, self.settings.max_schedule_days)

            if is_weekend(current_date):
                current_date += timedelta(days=1)
                continue

            already_allocated = allocated.get(current_date, 0.0)
            available = max(resource.get_availability_for_date(current_date) - already_allocated, 0.0)

            if available > 0:
                if start_date is None:
                    start_date = current_date
                hours_to_allocate = min(available, remaining_hours)
                remaining_hours -= hours_to_allocate
                allocated[current_date] = already_allocated + hours_to_allocate

            if remaining_hours > 0:
                current_date += timedelta(days=1)

        return TaskSchedule(
            task_id=task_id,
            resource_id=resource.id,
            start_date=start_date,
            end_date=current_date,
            allocated_hours=estimated_hours,
        )

    def _schedule_task_without_resource(
        self,
        task_id: uuid.UUID,
        estimated_hours: float,
        earliest_start: date,
    ) -> TaskSchedule:
        """
        Flat-rate estimate: ceil(hours / hours_per_day) weekdays from earliest_start.

        The start date is earliest_start as-is; the end date is the last
        weekday counted.
        """
        days_needed = math.ceil(estimated_hours / self.settings.unassigned_hours_per_day)
        end_date = earliest_start
        days_added = 0

        while days_added < days_needed:
            if not is_weekend(end_date):
                days_added += 1
            if days_added < days_needed:
                end_date += timedelta(days=1)

        return TaskSchedule(
            task_id=task_id,
            resource_id=None,
            start_date=earliest_start,
            end_date=end_date,
            allocated_hours=estimated_hours,
        )


def schedule_fingerprint(
    tasks: Mapping[uuid.UUID, Task],
    resources: Mapping[uuid.UUID, Resource],
    dependency_graph: DependencyGraph,
    settings: Settings | None = None,
) -> str:
    """
    SHA-256 over the scheduling inputs.

    Covers the fields the scheduler reads, in the order it reads them:
    task and resource mapping order (which decides who gets shared capacity
    first), graph node and edge insertion order (which breaks ordering and
    critical-path ties), and the scheduling settings. Equal digests mean
    equal schedules for the same start date, so it is safe as a cache key.
    """
    settings = settings or get_settings()
    digest = hashlib.sha256()
    for task in tasks.values():
        digest.update(
            task.model_dump_json(include={"id", "title", "estimated_hours", "assigned_resource_id"})
            .encode()
        )
    for resource in resources.values():
        digest.update(
            resource.model_dump_json(include={"id", "weekly_hours", "availability"})
            .encode()
        )
    for task_id in dependency_graph.task_ids:
        digest.update(f"node|{task_id}".encode())
    for dep in dependency_graph.get_all_dependencies():
        digest.update(
            f"edge|{dep.from_task_id}|{dep.to_task_id}|{dep.dependency_type.value}".encode()
        )
    digest.update(
        settings.model_dump_json(
            include={"default_estimated_hours", "unassigned_hours_per_day", "max_schedule_days"}
        ).encode()
    )
    return digest.hexdigest()
