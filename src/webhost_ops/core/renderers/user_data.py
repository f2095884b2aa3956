"""EC2 user data (boot script) rendering."""

import shlex
from typing import List

from webhost_ops.core.constants import (
    AGENT_CONFIG_PATH,
    AGENT_CTL_PATH,
    MAX_USER_DATA_BYTES,
    USER_DATA_LOG,
)
from webhost_ops.core.renderers.agent_config import render_agent_config
from webhost_ops.utils.exceptions import ConfigurationError

PACKAGES = ("httpd", "wget", "unzip", "amazon-cloudwatch-agent")
HEREDOC_MARKER = "AGENT_CONFIG_EOF"
DOWNLOAD_DIR = "/tmp/site-template"


def _install_commands(settings) -> List[str]:
    pm = settings.package_manager
    return [
        f"{pm} update -y",
        f"{pm} install -y {' '.join(PACKAGES)}",
        "systemctl enable httpd",
        "systemctl start httpd",
    ]


def _template_commands(settings) -> List[str]:
    archive = f"{DOWNLOAD_DIR}/template.zip"
    source = DOWNLOAD_DIR
    if settings.template_dir:
        source = f"{DOWNLOAD_DIR}/{settings.template_dir}"
    return [
        f"mkdir -p {shlex.quote(DOWNLOAD_DIR)}",
        f"wget -q -O {shlex.quote(archive)} {shlex.quote(settings.template_url)}",
        f"unzip -o {shlex.quote(archive)} -d {shlex.quote(DOWNLOAD_DIR)}",
        f"rm -f {shlex.quote(archive)}",
        f"cp -r {shlex.quote(source)}/. {shlex.quote(settings.web_root)}/",
        "systemctl restart httpd",
    ]


def _agent_commands(settings) -> List[str]:
    config_json = render_agent_config(settings)
    config_dir = AGENT_CONFIG_PATH.rsplit("/", 1)[0]
    return [
        f"mkdir -p {config_dir}",
        f"cat > {AGENT_CONFIG_PATH} <<'{HEREDOC_MARKER}'",
        config_json,
        HEREDOC_MARKER,
        f"{AGENT_CTL_PATH} -a fetch-config -m ec2 -c file:{AGENT_CONFIG_PATH} -s",
    ]


def render_user_data(settings) -> str:
    """Render the one-shot boot script for the stack instance.

    Raises ConfigurationError when the script exceeds the EC2 user data limit.
    """
    lines = [
        "#!/bin/bash",
        "set -euxo pipefail",
        f"exec > >(tee -a {USER_DATA_LOG}) 2>&1",
        "",
        "# web server and agent packages",
        *_install_commands(settings),
        "",
        "# static site template",
        *_template_commands(settings),
        "",
        "# log shipping",
        *_agent_commands(settings),
    ]
    script = "\n".join(lines) + "\n"

    size = len(script.encode("utf-8"))
    if size > MAX_USER_DATA_BYTES:
        raise ConfigurationError(
            f"user data is {size} bytes, EC2 accepts at most {MAX_USER_DATA_BYTES}"
        )
    return script
