import json

import pytest

from webhost_ops.core.models import LogFileMapping, StackSettings
from webhost_ops.core.renderers import build_agent_config, render_agent_config, render_user_data
from webhost_ops.utils.exceptions import ConfigurationError


def test_agent_config_maps_each_file_to_the_log_group(config):
    settings = StackSettings.from_config(config)
    collect_list = build_agent_config(settings)["logs"]["logs_collected"]["files"]["collect_list"]

    assert collect_list == [
        {
            "file_path": "/var/log/httpd/access_log",
            "log_group_name": "webhost-logs",
            "log_stream_name": "{instance_id}/access_log",
            "timezone": "UTC",
        },
        {
            "file_path": "/var/log/httpd/error_log",
            "log_group_name": "webhost-logs",
            "log_stream_name": "{instance_id}/error_log",
            "timezone": "UTC",
        },
    ]


def test_rendered_agent_config_is_json():
    text = render_agent_config(StackSettings())
    assert json.loads(text)["agent"]["run_as_user"] == "root"


def test_stream_name_defaults_to_instance_id():
    mapping = LogFileMapping.from_dict({"file_path": "/var/log/messages"})
    assert mapping.log_stream_name == "{instance_id}"
    assert mapping.timezone == "UTC"


def test_user_data_runs_steps_in_order(config):
    script = render_user_data(StackSettings.from_config(config))
    lines = script.splitlines()

    assert lines[0] == "#!/bin/bash"
    assert "set -euxo pipefail" in lines
    order = [
        "yum update -y",
        "yum install -y httpd wget unzip amazon-cloudwatch-agent",
        "systemctl start httpd",
        "wget -q -O /tmp/site-template/template.zip "
        "https://www.tooplate.com/zip-templates/2117_infinite_loop.zip",
        "unzip -o /tmp/site-template/template.zip -d /tmp/site-template",
        "cp -r /tmp/site-template/2117_infinite_loop/. /var/www/html/",
        "cat > /opt/aws/amazon-cloudwatch-agent/etc/amazon-cloudwatch-agent.json <<'AGENT_CONFIG_EOF'",
        "/opt/aws/amazon-cloudwatch-agent/bin/amazon-cloudwatch-agent-ctl -a fetch-config "
        "-m ec2 -c file:/opt/aws/amazon-cloudwatch-agent/etc/amazon-cloudwatch-agent.json -s",
    ]
    positions = [lines.index(command) for command in order]
    assert positions == sorted(positions)


def test_user_data_embeds_agent_config_verbatim():
    settings = StackSettings()
    script = render_user_data(settings)
    start = script.index("<<'AGENT_CONFIG_EOF'\n") + len("<<'AGENT_CONFIG_EOF'\n")
    end = script.index("\nAGENT_CONFIG_EOF\n")
    assert script[start:end] == render_agent_config(settings)


def test_user_data_quotes_interpolated_values():
    settings = StackSettings(
        template_url="https://example.com/site.zip?a=1&b=2",
        web_root="/srv/my site",
        template_dir="",
    )
    script = render_user_data(settings)
    assert "'https://example.com/site.zip?a=1&b=2'" in script
    assert "cp -r /tmp/site-template/. '/srv/my site'/" in script


def test_dnf_package_manager():
    script = render_user_data(StackSettings(package_manager="dnf"))
    assert "dnf install -y httpd wget unzip amazon-cloudwatch-agent" in script


def test_oversized_user_data_is_rejected():
    files = [
        LogFileMapping(f"/var/log/app/{'x' * 200}-{i}.log") for i in range(80)
    ]
    with pytest.raises(ConfigurationError, match="user data is"):
        render_user_data(StackSettings(log_files=files))
