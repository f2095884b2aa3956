#!/usr/bin/env python3
"""Core constants for web host provisioning."""

# Ownership tags
MANAGED_BY_KEY = "managed_by"
MANAGED_BY_VALUE = "webhost-ops"
STACK_TAG_KEY = "Stack"

# AWS defaults
DEFAULT_AWS_REGION = "us-east-1"
DEFAULT_STACK_NAME = "webhost"
DEFAULT_INSTANCE_TYPE = "t2.micro"
DEFAULT_AMI_ID = "ami-0c02fb55956c7d316"  # Amazon Linux 2, us-east-1
DEFAULT_INGRESS_CIDR = "0.0.0.0/0"
DEFAULT_INGRESS_PORTS = (22, 80)

# Static site template
DEFAULT_TEMPLATE_URL = "https://www.tooplate.com/zip-templates/2117_infinite_loop.zip"
DEFAULT_TEMPLATE_DIR = "2117_infinite_loop"
DEFAULT_WEB_ROOT = "/var/www/html"
DEFAULT_PACKAGE_MANAGER = "yum"
SUPPORTED_PACKAGE_MANAGERS = ("yum", "dnf")

# CloudWatch agent
DEFAULT_LOG_RETENTION_DAYS = 7
USER_DATA_LOG = "/var/log/user-data.log"
DEFAULT_LOG_FILES = (
    {"file_path": "/var/log/httpd/access_log", "log_stream_name": "{instance_id}/access_log"},
    {"file_path": "/var/log/httpd/error_log", "log_stream_name": "{instance_id}/error_log"},
    {"file_path": USER_DATA_LOG, "log_stream_name": "{instance_id}/user-data"},
)
AGENT_HOME = "/opt/aws/amazon-cloudwatch-agent"
AGENT_CONFIG_PATH = f"{AGENT_HOME}/etc/amazon-cloudwatch-agent.json"
AGENT_CTL_PATH = f"{AGENT_HOME}/bin/amazon-cloudwatch-agent-ctl"
AGENT_LOGFILE = f"{AGENT_HOME}/logs/amazon-cloudwatch-agent.log"

# Retention values accepted by PutRetentionPolicy
VALID_RETENTION_DAYS = (
    1, 3, 5, 7, 14, 30, 60, 90, 120, 150, 180, 365, 400, 545,
    731, 1096, 1827, 2192, 2557, 2922, 3288, 3653,
)

# EC2 limits
MAX_USER_DATA_BYTES = 16 * 1024
INSTANCE_PROFILE_PROPAGATION_TIMEOUT = 120
INSTANCE_PROFILE_RETRY_INTERVAL = 10

# File and Directory Constants
LOGS_DIR = "logs"
DEFAULT_REPORT_EXTENSION = ".csv"
LOG_ROTATION_MAX_BYTES = 10 * 1024 * 1024  # 10MB
LOG_BACKUP_COUNT = 5
