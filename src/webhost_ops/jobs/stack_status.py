#!/usr/bin/env python3

from typing import Any, Dict

from botocore.exceptions import BotoCoreError, ClientError

from .base import BaseJob
from webhost_ops.core.models import ResourceKind
from webhost_ops.utils.aws_utils import format_instance_info
from webhost_ops.utils.health import check_website


class StackStatusJob(BaseJob):
    """Report the state of every stack resource and the instance endpoints."""

    def __init__(self, config_manager=None, managers=None):
        super().__init__(config_manager=config_manager, job_name="stack_status", managers=managers)

    def execute(self, **kwargs) -> Dict[str, Any]:
        check_http = kwargs.get("check_http", False)

        try:
            records = self.create_inspector().inspect_all()
        except (ClientError, BotoCoreError) as e:
            return self.error_result(f"Failed to inspect stack: {e}")

        present = [r for r in records if r.exists]
        result: Dict[str, Any] = {
            "status": "success",
            "message": f"Stack {self.settings.name}: {len(present)}/{len(records)} resources present",
            "stack": self.settings.name,
            "resources": [record.to_dict() for record in records],
            "correlation_id": self.correlation_id,
        }

        instance_record = next(r for r in records if r.kind == ResourceKind.INSTANCE)
        if instance_record.exists:
            instance = self.managers.ec2.describe_instance(instance_record.identifier)
            info = format_instance_info(instance or {"InstanceId": instance_record.identifier})
            result["instance"] = info
            if check_http:
                if info["url"] == "N/A":
                    result["health"] = {"ok": False, "error": "instance has no public IP"}
                else:
                    result["health"] = check_website(info["url"])

        self.log(result["message"])
        return result
