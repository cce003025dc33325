"""Tools available to the assistant."""

from slackbot.tools.registry import ToolsRegistry, get_tools_registry

__all__ = ["ToolsRegistry", "get_tools_registry"]
