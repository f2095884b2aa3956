"""Exception classes and validation utilities for web host provisioning.

This module contains common exception classes and validation rules
used across the toolkit.
"""

import ipaddress
import re

from webhost_ops.core.constants import VALID_RETENTION_DAYS


class CLIError(Exception):
    """Custom exception for CLI-related errors."""

    pass


class ConfigurationError(CLIError):
    """Raised when stack settings are invalid."""

    def __init__(self, problems):
        if isinstance(problems, str):
            problems = [problems]
        self.problems = list(problems)
        super().__init__("Invalid configuration: " + "; ".join(self.problems))


class ProvisioningError(CLIError):
    """Raised when a stack resource cannot be created or deleted."""

    def __init__(self, kind: str, message: str):
        self.kind = kind
        super().__init__(f"{kind}: {message}")


class ValidationRules:
    """Validation utilities for AWS resources."""

    @staticmethod
    def validate_role_arn(role_arn: str) -> bool:
        """Validate an IAM role ARN."""
        return bool(re.match(r"^arn:aws[a-z-]*:iam::\d{12}:role/[\w+=,.@/-]+$", role_arn))

    @staticmethod
    def validate_ami_id(ami_id: str) -> bool:
        return bool(re.match(r"^ami-[0-9a-f]{8,17}$", ami_id or ""))

    @staticmethod
    def validate_resource_name(name: str) -> bool:
        """Names must be usable as IAM role, policy and profile names."""
        return bool(re.match(r"^[\w+=,.@-]{1,40}$", name or ""))

    @staticmethod
    def validate_retention_days(days) -> bool:
        return days in VALID_RETENTION_DAYS

    @staticmethod
    def validate_port(port) -> bool:
        return isinstance(port, int) and not isinstance(port, bool) and 0 < port < 65536

    @staticmethod
    def validate_cidr(cidr: str) -> bool:
        try:
            ipaddress.ip_network(cidr)
        except (TypeError, ValueError):
            return False
        return True
