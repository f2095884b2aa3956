"""Simple data models for web host stacks."""

# Resource models
from .resources import (
    DEPENDENCIES,
    PlanAction,
    PlannedStep,
    ResourceKind,
    ResourceRecord,
    ResourceStatus,
    creation_order,
    destruction_order,
)

# Settings models
from .stack import (
    LogFileMapping,
    StackSettings,
)

# Tag models
from .tags import (
    TagInfo,
)

__all__ = [
    # Resource models
    "DEPENDENCIES",
    "PlanAction",
    "PlannedStep",
    "ResourceKind",
    "ResourceRecord",
    "ResourceStatus",
    "creation_order",
    "destruction_order",
    # Settings models
    "LogFileMapping",
    "StackSettings",
    # Tag models
    "TagInfo",
]
