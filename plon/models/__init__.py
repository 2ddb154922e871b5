from plon.models.dependency import Dependency, DependencyType
from plon.models.resource import Availability, Resource, ResourceAllocation
from plon.models.task import Task

__all__ = [
    "Dependency",
    "DependencyType",
    "Availability",
    "Resource",
    "ResourceAllocation",
    "Task",
]
