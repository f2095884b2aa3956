#!/usr/bin/env python3

from typing import Any, Dict

from botocore.exceptions import BotoCoreError, ClientError

from .base import BaseJob
from webhost_ops.core.processors import build_plan, summarize_plan


class PlanStackJob(BaseJob):
    """Compare the live stack with its settings and list the actions needed."""

    def __init__(self, config_manager=None, managers=None):
        super().__init__(config_manager=config_manager, job_name="plan_stack", managers=managers)

    def execute(self, **kwargs) -> Dict[str, Any]:
        destroy = kwargs.get("destroy", False)

        problems = [] if destroy else self.settings.validate()
        if problems:
            return self.error_result(
                "Invalid configuration: " + "; ".join(problems), problems=problems
            )

        self.log(f"Planning {'destroy' if destroy else 'apply'} of stack {self.settings.name}")
        try:
            records = self.create_inspector().inspect_all()
        except (ClientError, BotoCoreError) as e:
            return self.error_result(f"Failed to inspect stack: {e}")

        steps = build_plan(
            records,
            destroy=destroy,
            desired_retention=self.settings.log_retention_days,
        )
        counts = summarize_plan(steps)
        changes = [step for step in steps if step.changes]

        self.log(
            f"Plan: {counts['create']} to create, {counts['update']} to update, "
            f"{counts['delete']} to delete, {counts['no-op']} unchanged"
        )
        return {
            "status": "success",
            "message": (
                f"{len(changes)} change(s) planned for stack {self.settings.name}"
                if changes else f"Stack {self.settings.name} is up to date"
            ),
            "stack": self.settings.name,
            "mode": "destroy" if destroy else "apply",
            "steps": [step.to_dict() for step in steps],
            "summary": counts,
            "resources": [record.to_dict() for record in records],
            "correlation_id": self.correlation_id,
        }
