#!/usr/bin/env python3

from typing import Any, Dict

from .base import BaseJob
from webhost_ops.core.models import (
    PlanAction,
    ResourceKind,
    ResourceRecord,
    destruction_order,
)
from webhost_ops.core.processors import StepProcessor


class DestroyStackJob(BaseJob):
    """Delete the stack's resources in reverse dependency order.

    Missing resources are skipped, so a partially applied or partially
    destroyed stack can be destroyed again.
    """

    def __init__(self, config_manager=None, managers=None):
        super().__init__(config_manager=config_manager, job_name="destroy_stack", managers=managers)
        self._keep_logs = False
        self._inspector = None

    def execute(self, **kwargs) -> Dict[str, Any]:
        self._keep_logs = kwargs.get("keep_logs", False)
        self._inspector = self.create_inspector()

        self.log(
            f"Destroying stack {self.settings.name} in {self.settings.region}"
            + (" (keeping log group)" if self._keep_logs else "")
        )
        result = StepProcessor(name="destroy_stack_processor").process_steps(
            destruction_order(),
            self._destroy_step,
            operation_name="destroy",
            correlation_id=self.correlation_id,
            step_label=lambda kind: kind.value,
        )

        deleted = [s["kind"] for s in result.results if s["action"] == PlanAction.DELETE.value]
        response = {
            "steps": result.results,
            "deleted": deleted,
            "processing": result.to_dict(),
        }
        if not result.succeeded:
            return self.error_result(
                f"Destroy halted at {result.failed_step}: {result.errors[0]} "
                f"(deleted before failure: {', '.join(deleted) or 'nothing'})",
                failed_step=result.failed_step,
                **response,
            )

        return {
            "status": "success",
            "message": f"Stack {self.settings.name} destroyed: {len(deleted)} resource(s) deleted",
            "stack": self.settings.name,
            "correlation_id": self.correlation_id,
            **response,
        }

    def _destroy_step(self, kind: ResourceKind) -> Dict[str, Any]:
        record = self._inspector.inspect(kind)
        if not record.exists:
            action = PlanAction.NOOP
        elif kind == ResourceKind.LOG_GROUP and self._keep_logs:
            self.log(f"Keeping log group {record.name}")
            action = PlanAction.NOOP
        else:
            getattr(self, f"_delete_{kind.value}")(record)
            action = PlanAction.DELETE

        self.log(f"{kind.value} {record.name}: {action.value}")
        return {
            "kind": kind.value,
            "name": record.name,
            "action": action.value,
            "identifier": record.identifier or "",
        }

    def _delete_instance(self, record: ResourceRecord) -> None:
        self.managers.ec2.terminate_instance(record.identifier, wait=True)

    def _delete_security_group(self, record: ResourceRecord) -> None:
        self.managers.ec2.delete_security_group(record.identifier)

    def _delete_log_group(self, record: ResourceRecord) -> None:
        self.managers.logs.delete_log_group(record.name)

    def _delete_instance_profile(self, record: ResourceRecord) -> None:
        self.managers.iam.delete_instance_profile(record.name)

    def _delete_policy_attachment(self, record: ResourceRecord) -> None:
        self.managers.iam.detach_role_policy(self.settings.role_name, record.identifier)

    def _delete_iam_policy(self, record: ResourceRecord) -> None:
        self.managers.iam.delete_policy(record.identifier)

    def _delete_iam_role(self, record: ResourceRecord) -> None:
        self.managers.iam.delete_role(record.name)
