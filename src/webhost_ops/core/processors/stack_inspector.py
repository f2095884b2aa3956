#!/usr/bin/env python3
"""Resolves the live state of each stack resource."""

from typing import List, Optional

from webhost_ops.core.aws import StackManagers, missing_ingress_ports
from webhost_ops.core.models import (
    ResourceKind,
    ResourceRecord,
    ResourceStatus,
    StackSettings,
    creation_order,
)
from webhost_ops.utils.logger import setup_logger


class StackInspector:
    """Looks up stack resources by their derived names and tags."""

    def __init__(self, settings: StackSettings, managers: StackManagers):
        self.settings = settings
        self.managers = managers
        self.logger = setup_logger(__name__, "stack_inspector.log")
        self._vpc_id: Optional[str] = settings.vpc_id
        self._vpc_resolved = settings.vpc_id is not None

    @property
    def vpc_id(self) -> Optional[str]:
        """Configured VPC, or the region's default VPC (looked up once)."""
        if not self._vpc_resolved:
            self._vpc_id = self.managers.ec2.get_default_vpc_id()
            self._vpc_resolved = True
            if self._vpc_id is None:
                self.logger.warning(f"No default VPC found in {self.settings.region}")
        return self._vpc_id

    def resource_name(self, kind: ResourceKind) -> str:
        s = self.settings
        return {
            ResourceKind.IAM_ROLE: s.role_name,
            ResourceKind.IAM_POLICY: s.policy_name,
            ResourceKind.POLICY_ATTACHMENT: f"{s.role_name}/{s.policy_name}",
            ResourceKind.INSTANCE_PROFILE: s.instance_profile_name,
            ResourceKind.LOG_GROUP: s.log_group_name,
            ResourceKind.SECURITY_GROUP: s.security_group_name,
            ResourceKind.INSTANCE: s.instance_name,
        }[kind]

    def inspect(self, kind: ResourceKind) -> ResourceRecord:
        record = ResourceRecord(kind=kind, name=self.resource_name(kind))
        getattr(self, f"_inspect_{kind.value}")(record)
        self.logger.debug(f"{kind.value} {record.name}: {record.status.value}")
        return record

    def inspect_all(self) -> List[ResourceRecord]:
        return [self.inspect(kind) for kind in creation_order()]

    @staticmethod
    def _found(record: ResourceRecord, identifier: str, **details) -> None:
        record.status = ResourceStatus.EXISTS
        record.identifier = identifier
        record.details.update(details)

    def _inspect_iam_role(self, record: ResourceRecord) -> None:
        role = self.managers.iam.get_role(self.settings.role_name)
        if role:
            self._found(record, role["Arn"])

    def _inspect_iam_policy(self, record: ResourceRecord) -> None:
        policy = self.managers.iam.find_policy(self.settings.policy_name)
        if policy:
            self._found(record, policy["Arn"])

    def _inspect_policy_attachment(self, record: ResourceRecord) -> None:
        policy = self.managers.iam.find_policy(self.settings.policy_name)
        if policy and self.managers.iam.is_policy_attached(self.settings.role_name, policy["Arn"]):
            self._found(record, policy["Arn"], role_name=self.settings.role_name)

    def _inspect_instance_profile(self, record: ResourceRecord) -> None:
        profile = self.managers.iam.get_instance_profile(self.settings.instance_profile_name)
        if profile:
            roles = [role["RoleName"] for role in profile.get("Roles", [])]
            self._found(record, profile["Arn"], roles=",".join(roles))

    def _inspect_log_group(self, record: ResourceRecord) -> None:
        group = self.managers.logs.get_log_group(self.settings.log_group_name)
        if group:
            self._found(record, group.get("arn", ""), retention_days=group.get("retentionInDays"))

    def _inspect_security_group(self, record: ResourceRecord) -> None:
        vpc_id = self.vpc_id
        if vpc_id is None:
            return
        group = self.managers.ec2.find_security_group(self.settings.security_group_name, vpc_id)
        if group:
            missing = missing_ingress_ports(
                group.get("IpPermissions", []),
                self.settings.ingress_ports,
                self.settings.ingress_cidr,
            )
            self._found(
                record,
                group["GroupId"],
                vpc_id=vpc_id,
                missing_ports=",".join(str(port) for port in missing) or None,
            )

    def _inspect_instance(self, record: ResourceRecord) -> None:
        instance = self.managers.ec2.find_stack_instance(self.settings.name)
        if instance:
            self._found(
                record,
                instance["InstanceId"],
                state=instance.get("State", {}).get("Name"),
                public_ip=instance.get("PublicIpAddress"),
            )
