from unittest.mock import MagicMock

import pytest
import yaml

from webhost_ops.core.aws import StackManagers
from webhost_ops.utils.config import ConfigManager

ROLE_ARN = "arn:aws:iam::123456789012:role/webhost-cw-agent-role"
POLICY_ARN = "arn:aws:iam::123456789012:policy/webhost-cw-agent-policy"
PROFILE_ARN = "arn:aws:iam::123456789012:instance-profile/webhost-instance-profile"
LOG_GROUP_ARN = "arn:aws:logs:us-east-1:123456789012:log-group:webhost-logs:*"

SETTINGS = {
    "aws": {"region": "us-east-1"},
    "stack": {
        "name": "webhost",
        "instance_type": "t2.micro",
        "ami_id": "ami-0c02fb55956c7d316",
        "key_name": "deployer",
        "ingress_ports": [22, 80],
        "tags": {"Project": "webhost"},
    },
    "web": {
        "template_url": "https://www.tooplate.com/zip-templates/2117_infinite_loop.zip",
        "template_dir": "2117_infinite_loop",
    },
    "log_agent": {
        "log_group_name": "webhost-logs",
        "retention_days": 7,
        "files": [
            {"file_path": "/var/log/httpd/access_log", "log_stream_name": "{instance_id}/access_log"},
            {"file_path": "/var/log/httpd/error_log", "log_stream_name": "{instance_id}/error_log"},
        ],
    },
}


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for var in ("AWS_REGION", "AWS_DEFAULT_REGION", "AWS_PROFILE", "LOG_LEVEL", "WEBHOST_CONFIG_DIR"):
        monkeypatch.delenv(var, raising=False)


@pytest.fixture
def write_settings(tmp_path):
    def _write(settings=None):
        config_dir = tmp_path / "configs"
        config_dir.mkdir(exist_ok=True)
        with open(config_dir / "settings.yaml", "w", encoding="utf-8") as f:
            yaml.safe_dump(settings if settings is not None else SETTINGS, f)
        return config_dir

    return _write


@pytest.fixture
def config(write_settings):
    return ConfigManager(write_settings())


def make_managers():
    """Managers for an account where none of the stack exists yet."""
    iam = MagicMock()
    iam.get_role.return_value = None
    iam.find_policy.return_value = None
    iam.is_policy_attached.return_value = False
    iam.get_instance_profile.return_value = None
    iam.create_role.return_value = {"Arn": ROLE_ARN}
    iam.create_policy.return_value = {"Arn": POLICY_ARN}
    iam.create_instance_profile.return_value = {"Arn": PROFILE_ARN}

    logs = MagicMock()
    logs.get_log_group.return_value = None

    ec2 = MagicMock()
    ec2.get_default_vpc_id.return_value = "vpc-0abc"
    ec2.find_security_group.return_value = None
    ec2.create_security_group.return_value = "sg-0abc"
    ec2.find_stack_instance.return_value = None
    ec2.run_instance.return_value = {"InstanceId": "i-0abc", "State": {"Name": "pending"}}
    running = {
        "InstanceId": "i-0abc",
        "State": {"Name": "running"},
        "InstanceType": "t2.micro",
        "PublicIpAddress": "203.0.113.10",
        "PublicDnsName": "ec2-203-0-113-10.compute-1.amazonaws.com",
    }
    ec2.wait_until_running.return_value = running
    ec2.describe_instance.return_value = running

    return StackManagers(iam=iam, logs=logs, ec2=ec2)


def make_existing_managers():
    """Managers for an account where the whole stack is already applied."""
    managers = make_managers()
    managers.iam.get_role.return_value = {"Arn": ROLE_ARN, "RoleName": "webhost-cw-agent-role"}
    managers.iam.find_policy.return_value = {"Arn": POLICY_ARN, "PolicyName": "webhost-cw-agent-policy"}
    managers.iam.is_policy_attached.return_value = True
    managers.iam.get_instance_profile.return_value = {
        "Arn": PROFILE_ARN,
        "Roles": [{"RoleName": "webhost-cw-agent-role"}],
    }
    managers.logs.get_log_group.return_value = {
        "logGroupName": "webhost-logs",
        "arn": LOG_GROUP_ARN,
        "retentionInDays": 7,
    }
    managers.ec2.find_security_group.return_value = {
        "GroupId": "sg-0abc",
        "IpPermissions": [
            {"IpProtocol": "tcp", "FromPort": port, "ToPort": port,
             "IpRanges": [{"CidrIp": "0.0.0.0/0"}]}
            for port in (22, 80)
        ],
    }
    managers.ec2.find_stack_instance.return_value = {
        "InstanceId": "i-0abc",
        "State": {"Name": "running"},
        "PublicIpAddress": "203.0.113.10",
    }
    return managers


@pytest.fixture
def managers():
    return make_managers()


@pytest.fixture
def existing_managers():
    return make_existing_managers()
