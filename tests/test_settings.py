import pytest

from webhost_ops.core.models import StackSettings
from webhost_ops.utils.config import ConfigManager
from webhost_ops.utils.exceptions import ConfigurationError


def test_from_config_reads_every_section(config):
    settings = StackSettings.from_config(config)

    assert settings.name == "webhost"
    assert settings.region == "us-east-1"
    assert settings.key_name == "deployer"
    assert settings.ingress_ports == (22, 80)
    assert settings.log_group_name == "webhost-logs"
    assert settings.template_dir == "2117_infinite_loop"
    assert [m.file_path for m in settings.log_files] == [
        "/var/log/httpd/access_log",
        "/var/log/httpd/error_log",
    ]
    assert settings.validate() == []


def test_defaults_without_settings_file(tmp_path):
    settings = StackSettings.from_config(ConfigManager(tmp_path))

    assert settings.name == "webhost"
    assert settings.log_group_name == "webhost-logs"
    assert settings.log_retention_days == 7
    assert [m.file_path for m in settings.log_files] == [
        "/var/log/httpd/access_log",
        "/var/log/httpd/error_log",
        "/var/log/user-data.log",
    ]
    assert settings.log_files[2].log_stream_name == "{instance_id}/user-data"
    assert settings.key_name is None
    assert settings.validate() == []


def test_derived_resource_names():
    settings = StackSettings(name="shop")
    assert settings.role_name == "shop-cw-agent-role"
    assert settings.policy_name == "shop-cw-agent-policy"
    assert settings.instance_profile_name == "shop-instance-profile"
    assert settings.security_group_name == "shop-sg"
    assert settings.instance_name == "shop-web"
    assert settings.log_group_name == "shop-logs"


def test_stack_tags_include_ownership():
    tags = StackSettings(name="shop", tags={"Project": "shop"}).tag_info("shop-sg").all_tags
    assert tags == {
        "Project": "shop",
        "Name": "shop-sg",
        "Stack": "shop",
        "managed_by": "webhost-ops",
    }


@pytest.mark.parametrize(
    "overrides, fragment",
    [
        ({"ami_id": "ubuntu-22"}, "not a valid AMI id"),
        ({"log_retention_days": 10}, "retention_days must be one of"),
        ({"ingress_cidr": "10.0.0.0/33"}, "not a valid CIDR"),
        ({"ingress_ports": (22, 70000)}, "invalid ingress port: 70000"),
        ({"ingress_ports": ()}, "at least one ingress port"),
        ({"template_url": "ftp://example.com/site.zip"}, "http(s) URL"),
        ({"name": "bad name!"}, "stack name"),
        ({"package_manager": "apt"}, "package_manager"),
        ({"log_files": []}, "at least one log file"),
        ({"vpc_id": "vpc-0custom"}, "subnet_id is required when vpc_id is set"),
    ],
)
def test_validate_reports_problem(overrides, fragment):
    problems = StackSettings(**overrides).validate()
    assert any(fragment in p for p in problems), problems


def test_relative_log_path_is_rejected(config):
    settings = StackSettings.from_config(config)
    settings.log_files[0].file_path = "var/log/httpd/access_log"
    assert "log file path must be absolute: 'var/log/httpd/access_log'" in settings.validate()


def test_ensure_valid_lists_all_problems():
    with pytest.raises(ConfigurationError) as exc:
        StackSettings(ami_id="bogus", log_retention_days=2).ensure_valid()
    assert len(exc.value.problems) == 2
    assert "Invalid configuration" in str(exc.value)


def test_custom_vpc_with_subnet_is_valid():
    assert StackSettings(vpc_id="vpc-0custom", subnet_id="subnet-0abc").validate() == []
