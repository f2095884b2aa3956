"""AWS core modules."""

from dataclasses import dataclass

import boto3

from .ec2 import EC2Manager, create_ec2_manager, missing_ingress_ports
from .iam import IAMManager, agent_policy_document, create_iam_manager
from .logs import LogsManager, create_logs_manager, log_group_arn


@dataclass
class StackManagers:
    """Service managers used to provision one stack."""
    iam: IAMManager
    logs: LogsManager
    ec2: EC2Manager


def create_stack_managers(session: boto3.Session, region: str) -> StackManagers:
    """Create all service managers for a region."""
    return StackManagers(
        iam=create_iam_manager(session, region),
        logs=create_logs_manager(session, region),
        ec2=create_ec2_manager(session, region),
    )


__all__ = [
    "EC2Manager",
    "create_ec2_manager",
    "missing_ingress_ports",
    "IAMManager",
    "create_iam_manager",
    "agent_policy_document",
    "LogsManager",
    "create_logs_manager",
    "log_group_arn",
    "StackManagers",
    "create_stack_managers",
]
