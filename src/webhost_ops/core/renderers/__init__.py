"""Renderers for files placed on the stack instance."""

from .agent_config import build_agent_config, render_agent_config
from .user_data import render_user_data

__all__ = [
    "build_agent_config",
    "render_agent_config",
    "render_user_data",
]
