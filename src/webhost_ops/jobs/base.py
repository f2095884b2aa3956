"""Base job class for stack operations."""

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional
import boto3
import uuid
from webhost_ops.core.aws import StackManagers, create_stack_managers
from webhost_ops.core.models import StackSettings
from webhost_ops.core.processors import StackInspector
from webhost_ops.utils.logger import setup_logger
from webhost_ops.utils.config import ConfigManager
from webhost_ops.utils.session import SessionManager


class BaseJob(ABC):
    """Base class for all stack jobs."""

    def __init__(
        self,
        config_manager: Optional[ConfigManager] = None,
        job_name: str = None,
        managers: Optional[StackManagers] = None,
    ):
        """Initialize the job with configuration.

        Args:
            config_manager: Configuration source (a default ConfigManager if omitted)
            job_name: Name used for the job log file
            managers: Pre-built service managers; created from an AWS session when omitted
        """
        self.config_manager = config_manager or ConfigManager()
        self.job_name = job_name or self.__class__.__name__.lower().replace('job', '')
        self.correlation_id = str(uuid.uuid4())[:8]  # Short correlation ID for tracking
        self.settings = StackSettings.from_config(self.config_manager)
        self._managers = managers

        self.logger = setup_logger(
            name=self.__class__.__module__,
            log_file=f"{self.job_name}.log",
            level=self.config_manager.get_logging_level(),
        )

    def log(self, message: str, level: str = "info") -> None:
        getattr(self.logger, level)(f"[{self.correlation_id}] {message}")

    def create_aws_session(self) -> boto3.Session:
        """Create the AWS session for the configured region, profile and role."""
        region = self.settings.region
        profile = self.config_manager.get_aws_profile()
        role_arn = self.config_manager.get_role_arn()

        self.log(
            f"Creating AWS session in {region}"
            + (f" with profile {profile}" if profile else "")
            + (f", assuming {role_arn}" if role_arn else "")
        )
        return SessionManager.get_session(
            region=region,
            profile=profile,
            role_arn=role_arn or None,
            role_session_name=f"webhost-ops-{self.job_name}",
        )

    @property
    def managers(self) -> StackManagers:
        if self._managers is None:
            self._managers = create_stack_managers(self.create_aws_session(), self.settings.region)
        return self._managers

    def create_inspector(self) -> StackInspector:
        return StackInspector(self.settings, self.managers)

    def error_result(self, message: str, **extra) -> Dict[str, Any]:
        self.log(message, "error")
        return {
            "status": "error",
            "message": message,
            "stack": self.settings.name,
            "correlation_id": self.correlation_id,
            **extra,
        }

    @abstractmethod
    def execute(self, **kwargs) -> Any:
        """Execute the job with given parameters."""
        pass
