"""Stack resource models

The seven resources of a web host stack, their live state and the
planned action for each of them."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple


class ResourceKind(Enum):
    """Stack resources, declared in creation order."""
    IAM_ROLE = "iam_role"
    IAM_POLICY = "iam_policy"
    POLICY_ATTACHMENT = "policy_attachment"
    INSTANCE_PROFILE = "instance_profile"
    LOG_GROUP = "log_group"
    SECURITY_GROUP = "security_group"
    INSTANCE = "instance"


class ResourceStatus(Enum):
    EXISTS = "exists"
    MISSING = "missing"


class PlanAction(Enum):
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    NOOP = "no-op"


# Resources each kind references by identifier
DEPENDENCIES: Dict[ResourceKind, Tuple[ResourceKind, ...]] = {
    ResourceKind.IAM_ROLE: (),
    ResourceKind.IAM_POLICY: (),
    ResourceKind.POLICY_ATTACHMENT: (ResourceKind.IAM_ROLE, ResourceKind.IAM_POLICY),
    ResourceKind.INSTANCE_PROFILE: (ResourceKind.IAM_ROLE,),
    ResourceKind.LOG_GROUP: (),
    ResourceKind.SECURITY_GROUP: (),
    ResourceKind.INSTANCE: (
        ResourceKind.INSTANCE_PROFILE,
        ResourceKind.SECURITY_GROUP,
        ResourceKind.LOG_GROUP,
    ),
}


def creation_order() -> List[ResourceKind]:
    return list(ResourceKind)


def destruction_order() -> List[ResourceKind]:
    return list(reversed(ResourceKind))


@dataclass
class ResourceRecord:
    """Live state of one stack resource."""
    kind: ResourceKind
    name: str
    status: ResourceStatus = ResourceStatus.MISSING
    identifier: Optional[str] = None
    details: Dict[str, Any] = field(default_factory=dict)

    @property
    def exists(self) -> bool:
        return self.status == ResourceStatus.EXISTS

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind.value,
            "name": self.name,
            "status": self.status.value,
            "identifier": self.identifier or "",
            **{k: v for k, v in self.details.items() if v is not None},
        }


@dataclass
class PlannedStep:
    """One step of a plan."""
    kind: ResourceKind
    name: str
    action: PlanAction
    depends_on: Tuple[ResourceKind, ...] = ()
    reason: str = ""

    @property
    def changes(self) -> bool:
        return self.action != PlanAction.NOOP

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind.value,
            "name": self.name,
            "action": self.action.value,
            "depends_on": ",".join(dep.value for dep in self.depends_on),
            "reason": self.reason,
        }
