"""Web host stack jobs package."""

from .base import BaseJob
from .plan_stack import PlanStackJob
from .apply_stack import ApplyStackJob
from .destroy_stack import DestroyStackJob
from .stack_status import StackStatusJob

__all__ = [
    "BaseJob",
    "PlanStackJob",
    "ApplyStackJob",
    "DestroyStackJob",
    "StackStatusJob",
]
