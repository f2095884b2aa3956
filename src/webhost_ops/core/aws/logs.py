"""Simple CloudWatch Logs Manager for the stack log group."""

from typing import Any, Dict, Optional

import boto3
from botocore.exceptions import ClientError

from webhost_ops.utils.aws_utils import is_error
from webhost_ops.utils.logger import setup_logger


def log_group_arn(region: str, name: str, account_id: str = "*", partition: str = "aws") -> str:
    """ARN of a log group, usable in IAM policies before the group exists."""
    return f"arn:{partition}:logs:{region}:{account_id}:log-group:{name}"


class LogsManager:
    """Simple CloudWatch Logs resource manager."""

    def __init__(self, session: boto3.Session, region: str):
        """Initialize LogsManager."""
        self.session = session
        self.region = region
        self.logs_client = session.client("logs", region_name=region)
        self.logger = setup_logger(__name__, "logs_manager.log")

    def get_log_group(self, name: str) -> Optional[Dict[str, Any]]:
        """Find a log group by exact name."""
        paginator = self.logs_client.get_paginator("describe_log_groups")
        for page in paginator.paginate(logGroupNamePrefix=name):
            for group in page["logGroups"]:
                if group["logGroupName"] == name:
                    return group
        return None

    def create_log_group(self, name: str, retention_days: int, tags: Dict[str, str]) -> None:
        self.logs_client.create_log_group(logGroupName=name, tags=tags)
        self.put_retention(name, retention_days)
        self.logger.info(f"Created log group {name} ({retention_days} days retention)")

    def put_retention(self, name: str, retention_days: int) -> None:
        self.logs_client.put_retention_policy(
            logGroupName=name, retentionInDays=retention_days
        )

    def delete_log_group(self, name: str) -> bool:
        """Delete a log group. Returns False when it was already gone."""
        try:
            self.logs_client.delete_log_group(logGroupName=name)
        except ClientError as e:
            if is_error(e, ("ResourceNotFoundException",)):
                return False
            raise
        self.logger.info(f"Deleted log group {name}")
        return True


def create_logs_manager(session: boto3.Session, region: str) -> LogsManager:
    """Create LogsManager instance."""
    return LogsManager(session, region)
