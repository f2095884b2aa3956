"""Stack settings model

Every value substituted into the stack's resources and boot script, loaded
from the settings file and validated before anything is provisioned."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from webhost_ops.core.constants import (
    DEFAULT_AMI_ID,
    DEFAULT_AWS_REGION,
    DEFAULT_INGRESS_CIDR,
    DEFAULT_INGRESS_PORTS,
    DEFAULT_INSTANCE_TYPE,
    DEFAULT_LOG_FILES,
    DEFAULT_LOG_RETENTION_DAYS,
    DEFAULT_PACKAGE_MANAGER,
    DEFAULT_STACK_NAME,
    DEFAULT_TEMPLATE_DIR,
    DEFAULT_TEMPLATE_URL,
    DEFAULT_WEB_ROOT,
    INSTANCE_PROFILE_PROPAGATION_TIMEOUT,
    SUPPORTED_PACKAGE_MANAGERS,
    VALID_RETENTION_DAYS,
)
from webhost_ops.core.models.tags import TagInfo
from webhost_ops.utils.exceptions import ConfigurationError, ValidationRules


@dataclass
class LogFileMapping:
    """A local file tailed by the agent and the stream it is shipped to."""
    file_path: str
    log_stream_name: str = "{instance_id}"
    timezone: str = "UTC"

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LogFileMapping":
        return cls(
            file_path=data.get("file_path", ""),
            log_stream_name=data.get("log_stream_name") or "{instance_id}",
            timezone=data.get("timezone") or "UTC",
        )


@dataclass
class StackSettings:
    """Configuration of a single web host stack."""
    name: str = DEFAULT_STACK_NAME
    region: str = DEFAULT_AWS_REGION
    instance_type: str = DEFAULT_INSTANCE_TYPE
    ami_id: str = DEFAULT_AMI_ID
    key_name: Optional[str] = None
    vpc_id: Optional[str] = None
    subnet_id: Optional[str] = None
    ingress_cidr: str = DEFAULT_INGRESS_CIDR
    ingress_ports: Tuple[int, ...] = DEFAULT_INGRESS_PORTS
    tags: Dict[str, str] = field(default_factory=dict)
    template_url: str = DEFAULT_TEMPLATE_URL
    template_dir: str = DEFAULT_TEMPLATE_DIR
    web_root: str = DEFAULT_WEB_ROOT
    package_manager: str = DEFAULT_PACKAGE_MANAGER
    log_group_name: Optional[str] = None
    log_retention_days: int = DEFAULT_LOG_RETENTION_DAYS
    log_files: List[LogFileMapping] = field(
        default_factory=lambda: [LogFileMapping.from_dict(f) for f in DEFAULT_LOG_FILES]
    )
    wait_for_instance: bool = True
    profile_propagation_timeout: int = INSTANCE_PROFILE_PROPAGATION_TIMEOUT

    def __post_init__(self):
        if not self.log_group_name:
            self.log_group_name = f"{self.name}-logs"
        self.ingress_ports = tuple(self.ingress_ports)

    # Derived resource names

    @property
    def role_name(self) -> str:
        return f"{self.name}-cw-agent-role"

    @property
    def policy_name(self) -> str:
        return f"{self.name}-cw-agent-policy"

    @property
    def instance_profile_name(self) -> str:
        return f"{self.name}-instance-profile"

    @property
    def security_group_name(self) -> str:
        return f"{self.name}-sg"

    @property
    def instance_name(self) -> str:
        return f"{self.name}-web"

    def tag_info(self, name: str) -> TagInfo:
        return TagInfo(name=name, stack=self.name, custom_tags=dict(self.tags))

    @classmethod
    def from_config(cls, config_manager) -> "StackSettings":
        """Build settings from a ConfigManager, falling back to defaults."""
        stack = config_manager.get_stack_config()
        web = config_manager.get_web_config()
        agent = config_manager.get_agent_config()

        kwargs: Dict[str, Any] = {
            "name": stack.get("name", DEFAULT_STACK_NAME),
            "region": config_manager.get_aws_region(),
            "instance_type": stack.get("instance_type", DEFAULT_INSTANCE_TYPE),
            "ami_id": stack.get("ami_id", DEFAULT_AMI_ID),
            "key_name": stack.get("key_name") or None,
            "vpc_id": stack.get("vpc_id") or None,
            "subnet_id": stack.get("subnet_id") or None,
            "ingress_cidr": stack.get("ingress_cidr", DEFAULT_INGRESS_CIDR),
            "ingress_ports": tuple(stack.get("ingress_ports", DEFAULT_INGRESS_PORTS)),
            "tags": {str(k): str(v) for k, v in (stack.get("tags") or {}).items()},
            "wait_for_instance": bool(stack.get("wait_for_instance", True)),
            "profile_propagation_timeout": int(
                stack.get("profile_propagation_timeout", INSTANCE_PROFILE_PROPAGATION_TIMEOUT)
            ),
            "template_url": web.get("template_url", DEFAULT_TEMPLATE_URL),
            "template_dir": web.get("template_dir", DEFAULT_TEMPLATE_DIR) or "",
            "web_root": web.get("web_root", DEFAULT_WEB_ROOT),
            "package_manager": web.get("package_manager", DEFAULT_PACKAGE_MANAGER),
            "log_group_name": agent.get("log_group_name") or None,
            "log_retention_days": agent.get("retention_days", DEFAULT_LOG_RETENTION_DAYS),
        }
        files = config_manager.get_log_files()
        if files:
            kwargs["log_files"] = [LogFileMapping.from_dict(f) for f in files]
        return cls(**kwargs)

    def validate(self) -> List[str]:
        """Return every problem found in the settings."""
        problems = []
        if not ValidationRules.validate_resource_name(self.name):
            problems.append(
                f"stack name '{self.name}' must be 1-40 characters of letters, digits and +=,.@_-"
            )
        if not ValidationRules.validate_ami_id(self.ami_id):
            problems.append(f"'{self.ami_id}' is not a valid AMI id")
        if not self.instance_type:
            problems.append("instance_type is required")
        if not ValidationRules.validate_cidr(self.ingress_cidr):
            problems.append(f"'{self.ingress_cidr}' is not a valid CIDR block")
        if self.vpc_id and not self.subnet_id:
            problems.append("subnet_id is required when vpc_id is set")
        if not self.ingress_ports:
            problems.append("at least one ingress port is required")
        for port in self.ingress_ports:
            if not ValidationRules.validate_port(port):
                problems.append(f"invalid ingress port: {port}")
        if not ValidationRules.validate_retention_days(self.log_retention_days):
            problems.append(
                f"retention_days must be one of {', '.join(map(str, VALID_RETENTION_DAYS))}, "
                f"got {self.log_retention_days}"
            )
        if not self.template_url.startswith(("http://", "https://")):
            problems.append(f"template_url must be an http(s) URL: {self.template_url}")
        if not self.web_root.startswith("/"):
            problems.append(f"web_root must be an absolute path: {self.web_root}")
        if self.package_manager not in SUPPORTED_PACKAGE_MANAGERS:
            problems.append(
                f"package_manager must be one of {', '.join(SUPPORTED_PACKAGE_MANAGERS)}"
            )
        if not self.log_files:
            problems.append("at least one log file must be shipped")
        for mapping in self.log_files:
            if not mapping.file_path.startswith("/"):
                problems.append(f"log file path must be absolute: '{mapping.file_path}'")
        return problems

    def ensure_valid(self) -> "StackSettings":
        problems = self.validate()
        if problems:
            raise ConfigurationError(problems)
        return self
