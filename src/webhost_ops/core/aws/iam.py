"""Simple IAM Manager for the instance role, policy and profile."""

import json
from typing import Any, Dict, List, Optional

import boto3
from botocore.exceptions import ClientError

from webhost_ops.utils.aws_utils import is_error
from webhost_ops.utils.logger import setup_logger

NOT_FOUND = ("NoSuchEntity",)

EC2_TRUST_POLICY = {
    "Version": "2012-10-17",
    "Statement": [
        {
            "Effect": "Allow",
            "Principal": {"Service": "ec2.amazonaws.com"},
            "Action": "sts:AssumeRole",
        }
    ],
}


def agent_policy_document(log_group_arn: str) -> Dict[str, Any]:
    """Permissions the CloudWatch agent needs to ship into one log group."""
    return {
        "Version": "2012-10-17",
        "Statement": [
            {
                "Effect": "Allow",
                "Action": [
                    "logs:CreateLogStream",
                    "logs:PutLogEvents",
                    "logs:DescribeLogStreams",
                ],
                "Resource": [log_group_arn, f"{log_group_arn}:*"],
            },
            {
                "Effect": "Allow",
                "Action": ["logs:DescribeLogGroups", "ec2:DescribeTags"],
                "Resource": "*",
            },
        ],
    }


class IAMManager:
    """Simple AWS IAM resource manager."""

    def __init__(self, session: boto3.Session, region: str = None):
        """Initialize IAMManager."""
        self.session = session
        self.region = region
        self.iam_client = session.client("iam")
        self.logger = setup_logger(__name__, "iam_manager.log")

    # Roles

    def get_role(self, role_name: str) -> Optional[Dict[str, Any]]:
        try:
            return self.iam_client.get_role(RoleName=role_name)["Role"]
        except ClientError as e:
            if is_error(e, NOT_FOUND):
                return None
            raise

    def create_role(self, role_name: str, tags: List[Dict[str, str]], description: str = "") -> Dict[str, Any]:
        """Create a role EC2 instances can assume."""
        response = self.iam_client.create_role(
            RoleName=role_name,
            AssumeRolePolicyDocument=json.dumps(EC2_TRUST_POLICY),
            Description=description or f"CloudWatch agent role for {role_name}",
            Tags=tags,
        )
        self.logger.info(f"Created IAM role {role_name}")
        return response["Role"]

    def delete_role(self, role_name: str) -> None:
        self.iam_client.delete_role(RoleName=role_name)
        self.logger.info(f"Deleted IAM role {role_name}")

    # Managed policies

    def find_policy(self, policy_name: str) -> Optional[Dict[str, Any]]:
        """Find a customer managed policy by name."""
        paginator = self.iam_client.get_paginator("list_policies")
        for page in paginator.paginate(Scope="Local"):
            for policy in page["Policies"]:
                if policy["PolicyName"] == policy_name:
                    return policy
        return None

    def create_policy(self, policy_name: str, document: Dict[str, Any], tags: List[Dict[str, str]]) -> Dict[str, Any]:
        response = self.iam_client.create_policy(
            PolicyName=policy_name,
            PolicyDocument=json.dumps(document),
            Description=f"CloudWatch agent log shipping for {policy_name}",
            Tags=tags,
        )
        self.logger.info(f"Created IAM policy {policy_name}")
        return response["Policy"]

    def delete_policy(self, policy_arn: str) -> None:
        """Delete a managed policy, removing its non-default versions first."""
        versions = self.iam_client.list_policy_versions(PolicyArn=policy_arn)["Versions"]
        for version in versions:
            if not version["IsDefaultVersion"]:
                self.iam_client.delete_policy_version(
                    PolicyArn=policy_arn, VersionId=version["VersionId"]
                )
        self.iam_client.delete_policy(PolicyArn=policy_arn)
        self.logger.info(f"Deleted IAM policy {policy_arn}")

    def is_policy_attached(self, role_name: str, policy_arn: str) -> bool:
        paginator = self.iam_client.get_paginator("list_attached_role_policies")
        try:
            for page in paginator.paginate(RoleName=role_name):
                for policy in page["AttachedPolicies"]:
                    if policy["PolicyArn"] == policy_arn:
                        return True
        except ClientError as e:
            if is_error(e, NOT_FOUND):
                return False
            raise
        return False

    def attach_role_policy(self, role_name: str, policy_arn: str) -> None:
        self.iam_client.attach_role_policy(RoleName=role_name, PolicyArn=policy_arn)
        self.logger.info(f"Attached {policy_arn} to role {role_name}")

    def detach_role_policy(self, role_name: str, policy_arn: str) -> None:
        self.iam_client.detach_role_policy(RoleName=role_name, PolicyArn=policy_arn)
        self.logger.info(f"Detached {policy_arn} from role {role_name}")

    # Instance profiles

    def get_instance_profile(self, profile_name: str) -> Optional[Dict[str, Any]]:
        try:
            response = self.iam_client.get_instance_profile(InstanceProfileName=profile_name)
            return response["InstanceProfile"]
        except ClientError as e:
            if is_error(e, NOT_FOUND):
                return None
            raise

    def create_instance_profile(self, profile_name: str, role_name: str, tags: List[Dict[str, str]]) -> Dict[str, Any]:
        """Create an instance profile holding role_name and wait until IAM reports it."""
        response = self.iam_client.create_instance_profile(
            InstanceProfileName=profile_name, Tags=tags
        )
        self.add_role_to_instance_profile(profile_name, role_name)
        self.iam_client.get_waiter("instance_profile_exists").wait(
            InstanceProfileName=profile_name
        )
        self.logger.info(f"Created instance profile {profile_name} with role {role_name}")
        return response["InstanceProfile"]

    def add_role_to_instance_profile(self, profile_name: str, role_name: str) -> None:
        self.iam_client.add_role_to_instance_profile(
            InstanceProfileName=profile_name, RoleName=role_name
        )

    def remove_role_from_instance_profile(self, profile_name: str, role_name: str) -> None:
        self.iam_client.remove_role_from_instance_profile(
            InstanceProfileName=profile_name, RoleName=role_name
        )

    def delete_instance_profile(self, profile_name: str) -> None:
        """Remove all roles from the profile, then delete it."""
        profile = self.get_instance_profile(profile_name)
        if profile is None:
            return
        for role in profile.get("Roles", []):
            self.remove_role_from_instance_profile(profile_name, role["RoleName"])
        self.iam_client.delete_instance_profile(InstanceProfileName=profile_name)
        self.logger.info(f"Deleted instance profile {profile_name}")


def create_iam_manager(session: boto3.Session, region: str = None) -> IAMManager:
    """Create IAMManager instance."""
    return IAMManager(session, region)
