#!/usr/bin/env python3
"""
utils/config.py

Simple configuration management utilities.
Provides centralized configuration loading.
"""

import os
import yaml
from pathlib import Path
from typing import Dict, Any, List, Optional
from webhost_ops.core.constants import DEFAULT_AWS_REGION
from webhost_ops.utils.logger import setup_logger

logger = setup_logger(__name__, "config.log")

CONFIG_DIR_ENV = "WEBHOST_CONFIG_DIR"


class ConfigManager:
    """
    Simple configuration manager.

    Features:
    - YAML configuration loading
    - Environment variable override support
    - Runtime overrides (CLI flags)
    """

    def __init__(self, config_dir: Optional[Path] = None):
        """
        Initialize ConfigManager.

        Args:
            config_dir: Custom config directory path (defaults to
                $WEBHOST_CONFIG_DIR, then PROJECT_ROOT/configs)
        """
        self.project_root = Path(__file__).parent.parent.parent.parent
        if config_dir is None and os.environ.get(CONFIG_DIR_ENV):
            config_dir = os.environ[CONFIG_DIR_ENV]
        self.config_dir = Path(config_dir) if config_dir else self.project_root / "configs"
        self._overrides: Dict[str, Any] = {}

        # Try both .yml and .yaml extensions
        yml_file = self.config_dir / "settings.yml"
        yaml_file = self.config_dir / "settings.yaml"

        if yml_file.exists():
            self.settings_file = yml_file
        else:
            self.settings_file = yaml_file  # Default to .yaml for error messages

    def _load_yaml_file(self, file_path: Path) -> Dict[str, Any]:
        """
        Load a YAML file safely.
        """
        if not file_path.exists():
            logger.warning(f"Config file not found: {file_path}")
            return {}

        try:
            with open(file_path, "r", encoding="utf-8") as f:
                content = yaml.safe_load(f)
                return content or {}
        except (OSError, yaml.YAMLError) as e:
            logger.error(f"Error loading {file_path}: {e}")
            return {}

    def load_settings(self) -> Dict[str, Any]:
        """
        Load application settings.
        """
        return self._load_yaml_file(self.settings_file)

    def set_override(self, key_path: str, value: Any) -> None:
        """Override a configuration value for this process only. None is ignored."""
        if value is not None:
            self._overrides[key_path] = value

    def get_value(
        self, key_path: str, default: Any = None, env_var: Optional[str] = None
    ) -> Any:
        """
        Get configuration value with dot notation support and environment variable override.
        """
        if key_path in self._overrides:
            return self._overrides[key_path]

        # Check environment variable first
        if env_var and env_var in os.environ:
            return os.environ[env_var]

        # Navigate through nested dictionary
        keys = key_path.split(".")
        current = self.config

        try:
            for key in keys:
                current = current[key]
        except (KeyError, TypeError):
            return default
        return default if current is None else current

    def get_aws_region(self) -> str:
        """Get AWS region with environment variable override support."""
        region = self.get_value("aws.region", env_var="AWS_REGION")
        return region or os.environ.get("AWS_DEFAULT_REGION", DEFAULT_AWS_REGION)

    def get_aws_profile(self) -> Optional[str]:
        """Get named AWS profile, if any."""
        return self.get_value("aws.profile", None, env_var="AWS_PROFILE") or None

    def get_role_arn(self) -> str:
        """Get ARN of the role to assume before provisioning (optional)."""
        return self.get_value("aws.role_arn", "")

    def get_stack_config(self) -> Dict[str, Any]:
        """Get stack (instance and network) configuration section."""
        return self.get_value("stack", {})

    def get_web_config(self) -> Dict[str, Any]:
        """Get static site configuration section."""
        return self.get_value("web", {})

    def get_agent_config(self) -> Dict[str, Any]:
        """Get log-shipping agent configuration section."""
        return self.get_value("log_agent", {})

    def get_log_files(self) -> List[Dict[str, Any]]:
        """Get log file mappings shipped by the agent."""
        return self.get_value("log_agent.files", [])

    def get_logging_level(self) -> str:
        """Get logging level."""
        return self.get_value("logging.level", "INFO", env_var="LOG_LEVEL")

    @property
    def config(self) -> Dict[str, Any]:
        """Get the full configuration as a cached property."""
        if not hasattr(self, "_cached_config"):
            self._cached_config = self.load_settings()
        return self._cached_config

    def reload_config(self) -> None:
        """Force reload of configuration from file."""
        if hasattr(self, "_cached_config"):
            delattr(self, "_cached_config")
