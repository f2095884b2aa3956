"""CloudWatch agent configuration.

Builds the JSON document the Amazon CloudWatch agent reads at startup. Only
the ``logs`` section is produced: each configured local file is mapped to
the stack's log group and a log stream. ``{instance_id}`` in a stream name
is expanded by the agent itself on the instance.
"""

import json
from typing import Any, Dict

from webhost_ops.core.constants import AGENT_LOGFILE


def build_agent_config(settings) -> Dict[str, Any]:
    collect_list = [
        {
            "file_path": mapping.file_path,
            "log_group_name": settings.log_group_name,
            "log_stream_name": mapping.log_stream_name,
            "timezone": mapping.timezone,
        }
        for mapping in settings.log_files
    ]
    return {
        "agent": {
            "run_as_user": "root",
            "logfile": AGENT_LOGFILE,
        },
        "logs": {
            "logs_collected": {
                "files": {
                    "collect_list": collect_list,
                },
            },
        },
    }


def render_agent_config(settings) -> str:
    """Agent configuration as indented JSON text."""
    return json.dumps(build_agent_config(settings), indent=2)
