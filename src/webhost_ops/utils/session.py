#!/usr/bin/env python3
"""
utils/session.py

Session management utilities for AWS interactions.

Provides functions and classes to handle AWS session creation and role assumption.
"""

import boto3
import os
from typing import Optional
from botocore.exceptions import ClientError
from webhost_ops.core.constants import DEFAULT_AWS_REGION
from .exceptions import ValidationRules
from .logger import setup_logger

logger = setup_logger(__name__, "session.log")


def assume_role(
    role_arn: str,
    region: str = DEFAULT_AWS_REGION,
    role_session_name: str = "webhost-ops",
    base_session: Optional[boto3.Session] = None,
) -> boto3.Session:
    """Assumes a role and returns a boto3 Session holding its temporary credentials."""
    if not ValidationRules.validate_role_arn(role_arn):
        raise ValueError(f"Invalid IAM role ARN: {role_arn}")

    base_session = base_session or boto3.Session(region_name=region)
    try:
        sts_client = base_session.client("sts", region_name=region)
        response = sts_client.assume_role(
            RoleArn=role_arn, RoleSessionName=role_session_name
        )
        credentials = response["Credentials"]
    except ClientError as e:
        error_code = e.response["Error"]["Code"]
        raise RuntimeError(f"Failed to assume role {role_arn}: {error_code} - {e}") from e

    logger.info(f"Assumed role {role_arn} as session {role_session_name}")
    return boto3.Session(
        aws_access_key_id=credentials["AccessKeyId"],
        aws_secret_access_key=credentials["SecretAccessKey"],
        aws_session_token=credentials["SessionToken"],
        region_name=region,
    )


class SessionManager:
    """Manages AWS sessions for role assumption and credential handling."""

    @classmethod
    def get_session(
        cls,
        region: str = DEFAULT_AWS_REGION,
        profile: Optional[str] = None,
        role_arn: Optional[str] = None,
        role_session_name: str = "webhost-ops",
    ) -> boto3.Session:
        """Create a boto3 Session from a profile or the default credential chain.

        When role_arn is set, the session is used to assume that role first.
        """
        base_session = boto3.Session(profile_name=profile, region_name=region)
        if role_arn:
            return assume_role(role_arn, region, role_session_name, base_session)
        return base_session

    @classmethod
    def get_session_from_env(cls, region: str = DEFAULT_AWS_REGION) -> boto3.Session:
        """Create a boto3 Session from environment variables.

        Expected environment variables:
        - AWS_ACCESS_KEY_ID
        - AWS_SECRET_ACCESS_KEY
        - AWS_SESSION_TOKEN (optional)
        """
        access_key = os.getenv("AWS_ACCESS_KEY_ID")
        secret_key = os.getenv("AWS_SECRET_ACCESS_KEY")
        session_token = os.getenv("AWS_SESSION_TOKEN")

        if not access_key or not secret_key:
            raise ValueError(
                "Missing required environment variables. "
                "Please set AWS_ACCESS_KEY_ID and AWS_SECRET_ACCESS_KEY."
            )

        return boto3.Session(
            aws_access_key_id=access_key,
            aws_secret_access_key=secret_key,
            aws_session_token=session_token,
            region_name=region,
        )
