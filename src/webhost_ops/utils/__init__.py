# utils/__init__.py

from .config import ConfigManager
from .session import SessionManager, assume_role
from .logger import setup_logger
from .health import check_website
from .exceptions import CLIError, ConfigurationError, ProvisioningError, ValidationRules

__all__ = [
    "ConfigManager",
    "SessionManager",
    "assume_role",
    "setup_logger",
    "check_website",
    "CLIError",
    "ConfigurationError",
    "ProvisioningError",
    "ValidationRules",
]
