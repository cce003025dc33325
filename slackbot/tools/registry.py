"""Tools registry assembling the per-request tool set."""

import httpx
from langchain_core.tools import BaseTool

from slackbot.config import BotConfig, get_config
from slackbot.services.status import StatusReporter
from slackbot.tools.weather import create_weather_tool
from slackbot.tools.web_search import create_web_search_tool
from slackbot.utils.logging import get_logger

logger = get_logger(__name__)


class ToolsRegistry:
    """Registry for the assistant's static tools and the merge with discovered ones."""

    def __init__(self, config: BotConfig):
        """Initialize tools registry with the bot configuration."""
        self.config = config

    def static_tools(self, http_client: httpx.AsyncClient, status: StatusReporter) -> list[BaseTool]:
        """Create the fixed tool set bound to this request's HTTP client and status sink."""
        return [
            create_weather_tool(http_client, status),
            create_web_search_tool(http_client, status, self.config.exa_api_key),
        ]

    def merge(self, static: list[BaseTool], dynamic: list[BaseTool]) -> dict[str, BaseTool]:
        """Merge tool sets by name; a static tool is never replaced by a discovered one."""
        tools = {tool.name: tool for tool in static}

        for tool in dynamic:
            if tool.name in tools:
                logger.warning(f"Ignoring discovered tool {tool.name!r}: name is already taken")
                continue
            tools[tool.name] = tool

        return tools

    def build_tools(
        self, http_client: httpx.AsyncClient, status: StatusReporter, dynamic: list[BaseTool] | None = None
    ) -> list[BaseTool]:
        """Get the full tool set for one request."""
        tools = self.merge(self.static_tools(http_client, status), dynamic or [])
        logger.debug(f"Tool set for request: {list(tools)}")
        return list(tools.values())


_tools_registry: ToolsRegistry | None = None


def get_tools_registry(config: BotConfig | None = None) -> ToolsRegistry:
    """Get or create tools registry instance."""
    global _tools_registry

    if _tools_registry is None:
        _tools_registry = ToolsRegistry(config or get_config())

    return _tools_registry
