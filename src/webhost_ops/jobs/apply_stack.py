#!/usr/bin/env python3

import time
from typing import Any, Dict, Optional
from dataclasses import dataclass

from .base import BaseJob
from webhost_ops.core.aws import agent_policy_document, log_group_arn
from webhost_ops.core.models import (
    PlanAction,
    ResourceKind,
    ResourceRecord,
    ResourceStatus,
    creation_order,
)
from webhost_ops.core.processors import StepProcessor
from webhost_ops.core.renderers import render_user_data
from webhost_ops.utils.aws_utils import format_instance_info
from webhost_ops.utils.exceptions import ConfigurationError, ProvisioningError


@dataclass
class ApplyMetrics:
    """Metrics for apply operation tracking."""

    created: int = 0
    updated: int = 0
    unchanged: int = 0
    operation_duration: float = 0.0


class ApplyStackJob(BaseJob):
    """Create every missing resource of the stack, in dependency order.

    Features:
    - Existing resources are left alone, except that log retention drift
      is corrected and missing ingress ports are opened
    - Halts at the first failed step and reports what was already created
    - Optionally waits until the instance is running
    """

    def __init__(self, config_manager=None, managers=None):
        super().__init__(config_manager=config_manager, job_name="apply_stack", managers=managers)
        self._records: Dict[ResourceKind, ResourceRecord] = {}
        self._inspector = None
        self._wait = self.settings.wait_for_instance
        self._user_data = None

    def execute(self, **kwargs) -> Dict[str, Any]:
        operation_start = time.time()
        metrics = ApplyMetrics()
        if kwargs.get("no_wait"):
            self._wait = False

        try:
            self.settings.ensure_valid()
            user_data = render_user_data(self.settings)
        except ConfigurationError as e:
            return self.error_result(str(e), problems=e.problems)

        self.log(
            f"Applying stack {self.settings.name} in {self.settings.region} "
            f"({self.settings.instance_type}, {self.settings.ami_id})"
        )
        self._records = {}
        self._inspector = self.create_inspector()
        self._user_data = user_data

        processor = StepProcessor(name="apply_stack_processor")
        result = processor.process_steps(
            creation_order(),
            self._apply_step,
            operation_name="apply",
            correlation_id=self.correlation_id,
            step_label=lambda kind: kind.value,
        )

        for step in result.results:
            action = step["action"]
            if action == PlanAction.CREATE.value:
                metrics.created += 1
            elif action == PlanAction.UPDATE.value:
                metrics.updated += 1
            else:
                metrics.unchanged += 1
        metrics.operation_duration = time.time() - operation_start

        created = [s["kind"] for s in result.results if s["action"] == PlanAction.CREATE.value]
        response = {
            "stack": self.settings.name,
            "steps": result.results,
            "created": created,
            "metrics": metrics,
            "processing": result.to_dict(),
            "correlation_id": self.correlation_id,
        }

        if not result.succeeded:
            return self.error_result(
                f"Apply halted at {result.failed_step}: {result.errors[0]} "
                f"(created before failure: {', '.join(created) or 'nothing'})",
                **{k: v for k, v in response.items() if k != "stack"},
                failed_step=result.failed_step,
            )

        instance = self._records.get(ResourceKind.INSTANCE)
        if instance is not None:
            response["instance"] = instance.details.get("info", {})

        self.log(
            f"Apply complete: {metrics.created} created, {metrics.updated} updated, "
            f"{metrics.unchanged} unchanged in {metrics.operation_duration:.2f}s"
        )
        return {
            "status": "success",
            "message": (
                f"Stack {self.settings.name} applied: {metrics.created} created, "
                f"{metrics.updated} updated, {metrics.unchanged} unchanged"
            ),
            **response,
        }

    # Steps

    def _apply_step(self, kind: ResourceKind) -> Dict[str, Any]:
        record = self._inspector.inspect(kind)
        action = getattr(self, f"_apply_{kind.value}")(record)
        self._records[kind] = record
        self.log(f"{kind.value} {record.name}: {action.value} ({record.identifier or '-'})")
        return {
            "kind": kind.value,
            "name": record.name,
            "action": action.value,
            "identifier": record.identifier or "",
        }

    def _created(self, record: ResourceRecord, identifier: str) -> PlanAction:
        record.status = ResourceStatus.EXISTS
        record.identifier = identifier
        return PlanAction.CREATE

    def _tags(self, name: str):
        return self.settings.tag_info(name).to_aws_tags()

    def _apply_iam_role(self, record: ResourceRecord) -> PlanAction:
        if record.exists:
            return PlanAction.NOOP
        role = self.managers.iam.create_role(self.settings.role_name, self._tags(record.name))
        return self._created(record, role["Arn"])

    def _apply_iam_policy(self, record: ResourceRecord) -> PlanAction:
        if record.exists:
            return PlanAction.NOOP
        document = agent_policy_document(
            log_group_arn(self.settings.region, self.settings.log_group_name)
        )
        policy = self.managers.iam.create_policy(
            self.settings.policy_name, document, self._tags(record.name)
        )
        return self._created(record, policy["Arn"])

    def _apply_policy_attachment(self, record: ResourceRecord) -> PlanAction:
        if record.exists:
            return PlanAction.NOOP
        policy_arn = self._records[ResourceKind.IAM_POLICY].identifier
        self.managers.iam.attach_role_policy(self.settings.role_name, policy_arn)
        return self._created(record, policy_arn)

    def _apply_instance_profile(self, record: ResourceRecord) -> PlanAction:
        role_name = self.settings.role_name
        if not record.exists:
            profile = self.managers.iam.create_instance_profile(
                self.settings.instance_profile_name, role_name, self._tags(record.name)
            )
            return self._created(record, profile["Arn"])

        roles = [r for r in record.details.get("roles", "").split(",") if r]
        if role_name in roles:
            return PlanAction.NOOP
        if roles:
            raise ProvisioningError(
                record.kind.value,
                f"instance profile {record.name} already holds role {roles[0]}",
            )
        self.managers.iam.add_role_to_instance_profile(record.name, role_name)
        return PlanAction.UPDATE

    def _apply_log_group(self, record: ResourceRecord) -> PlanAction:
        retention = self.settings.log_retention_days
        if not record.exists:
            self.managers.logs.create_log_group(
                record.name, retention, self.settings.tag_info(record.name).all_tags
            )
            return self._created(
                record, log_group_arn(self.settings.region, record.name)
            )
        if record.details.get("retention_days") != retention:
            self.managers.logs.put_retention(record.name, retention)
            record.details["retention_days"] = retention
            return PlanAction.UPDATE
        return PlanAction.NOOP

    def _apply_security_group(self, record: ResourceRecord) -> PlanAction:
        if record.exists:
            missing = record.details.get("missing_ports")
            if not missing:
                return PlanAction.NOOP
            ports = [int(port) for port in missing.split(",")]
            self.managers.ec2.authorize_ingress(
                record.identifier, ports, self.settings.ingress_cidr
            )
            record.details["missing_ports"] = None
            return PlanAction.UPDATE
        vpc_id = self._inspector.vpc_id
        if vpc_id is None:
            raise ProvisioningError(
                record.kind.value,
                f"no default VPC in {self.settings.region}; "
                "set stack.vpc_id and stack.subnet_id",
            )
        group_id = self.managers.ec2.create_security_group(
            record.name, vpc_id, self._tags(record.name)
        )
        self.managers.ec2.authorize_ingress(
            group_id, self.settings.ingress_ports, self.settings.ingress_cidr
        )
        return self._created(record, group_id)

    def _apply_instance(self, record: ResourceRecord) -> PlanAction:
        if record.exists:
            action = PlanAction.NOOP
            instance: Optional[Dict[str, Any]] = self.managers.ec2.describe_instance(record.identifier)
        else:
            instance = self.managers.ec2.run_instance(
                ami_id=self.settings.ami_id,
                instance_type=self.settings.instance_type,
                security_group_id=self._records[ResourceKind.SECURITY_GROUP].identifier,
                instance_profile_name=self.settings.instance_profile_name,
                user_data=self._user_data,
                tags=self._tags(record.name),
                key_name=self.settings.key_name,
                subnet_id=self.settings.subnet_id,
                profile_timeout=self.settings.profile_propagation_timeout,
            )
            action = self._created(record, instance["InstanceId"])

        state = (instance or {}).get("State", {}).get("Name")
        if self._wait and (action == PlanAction.CREATE or state == "pending"):
            self.log(f"Waiting for instance {record.identifier} to be running")
            instance = self.managers.ec2.wait_until_running(record.identifier)

        record.details["info"] = format_instance_info(instance or {"InstanceId": record.identifier})
        return action
