"""Tools discovered at request time from a remote MCP server.

The server (for example a Zapier MCP endpoint) lists its actions with a name,
a description and the names of their parameters. Each action is wrapped as a
LangChain tool that forwards its arguments to the server over the same
session and hands the server's reply back to the model untouched.
"""

import asyncio
from collections.abc import AsyncIterator
from contextlib import AsyncExitStack, asynccontextmanager
from datetime import timedelta
from typing import Any

from langchain_core.tools import BaseTool, StructuredTool
from mcp import ClientSession, types
from mcp.client.sse import sse_client
from pydantic import BaseModel, Field, create_model

from slackbot.services.status import StatusReporter
from slackbot.tools.base import OpenArguments, ToolExecutionError, source_metadata
from slackbot.utils.logging import get_logger

logger = get_logger(__name__)


def declared_parameters(input_schema: dict[str, Any] | None) -> list[str]:
    """Parameter names an action declares; their types are not trusted."""
    properties = (input_schema or {}).get("properties") or {}
    return list(properties) if isinstance(properties, dict) else []


def build_arguments_model(tool_name: str, parameters: list[str], description: str) -> type[OpenArguments]:
    """Create a permissive argument model: every parameter optional, any shape."""
    fields: dict[str, Any] = {}
    for parameter in parameters:
        if not parameter.isidentifier() or parameter.startswith("_") or hasattr(BaseModel, parameter):
            # Still forwarded as an extra key if the model sends it
            logger.debug(f"Parameter {parameter!r} of {tool_name} cannot be declared, accepting it as an extra")
            continue
        fields[parameter] = (Any, Field(None))

    return create_model(f"{tool_name}_arguments", __base__=OpenArguments, __doc__=description, **fields)


def result_error_text(result: types.CallToolResult) -> str:
    for content in result.content:
        if isinstance(content, types.TextContent):
            return content.text
    return "Tool execution failed"


class McpToolLoader:
    """Open a per-request MCP session and expose its actions as tools.

    Example:
        loader = McpToolLoader("https://actions.zapier.com/mcp/.../sse")
        async with loader.open_tools(status) as tools:
            ...  # tools stay callable until the block exits
    """

    def __init__(self, server_url: str | None, timeout: float = 10.0, call_timeout: float = 30.0):
        """Initialize the loader.

        Args:
            server_url: SSE endpoint of the MCP server; None disables discovery
            timeout: Seconds allowed for connecting and listing actions
            call_timeout: Seconds allowed for a single remote action call
        """
        self.server_url = server_url
        self.timeout = timeout
        self.call_timeout = call_timeout

    @asynccontextmanager
    async def open_tools(self, status: StatusReporter | None = None) -> AsyncIterator[list[BaseTool]]:
        """Yield the discovered tools, closing the session on exit.

        Discovery problems never escape: an unconfigured server, a timeout, a
        connection failure or an empty listing all yield an empty list.
        """
        status = status or StatusReporter()

        if not self.server_url:
            logger.debug("No MCP server configured, skipping tool discovery")
            yield []
            return

        stack = AsyncExitStack()
        try:
            tools: list[BaseTool] = []
            try:
                status.report("Connecting to tool server...")
                async with asyncio.timeout(self.timeout):
                    session = await self._open_session(stack)
                    status.report("Fetching tools...")
                    listing = await session.list_tools()

                tools = [self._wrap_tool(session, remote_tool, status) for remote_tool in listing.tools]
                if tools:
                    logger.info(f"Discovered {len(tools)} MCP tools: {[t.name for t in tools]}")
                else:
                    status.report("No remote tools found.")
                    logger.info("MCP server returned no tools")
                    await self._close(stack)

            except Exception as e:
                # TimeoutError and transport exception groups included
                logger.warning(f"MCP tool discovery failed: {e!r}")
                status.report(f"Error fetching tools: {e}")
                tools = []
                await self._close(stack)

            yield tools
        finally:
            await self._close(stack)

    async def _open_session(self, stack: AsyncExitStack) -> ClientSession:
        read_stream, write_stream = await stack.enter_async_context(sse_client(self.server_url))
        session = await stack.enter_async_context(ClientSession(read_stream, write_stream))
        await session.initialize()
        return session

    async def _close(self, stack: AsyncExitStack) -> None:
        try:
            await stack.aclose()
        except Exception as e:
            logger.debug(f"Ignoring error while closing MCP session: {e!r}")

    def _wrap_tool(self, session: ClientSession, remote_tool: types.Tool, status: StatusReporter) -> BaseTool:
        """Wrap one remote action as a tool bound to the open session."""
        name = remote_tool.name
        description = remote_tool.description or f"Run the {name} action"
        call_timeout = timedelta(seconds=self.call_timeout)

        async def call_remote_tool(**arguments: Any) -> str:
            status.report(f"Calling {name}...")
            forwarded = {key: value for key, value in arguments.items() if value is not None}
            logger.info(f"Calling MCP tool {name} with {sorted(forwarded)}")

            result = await session.call_tool(name, arguments=forwarded, read_timeout_seconds=call_timeout)
            if result.isError:
                raise ToolExecutionError(f"{name} failed: {result_error_text(result)}")

            return result.model_dump_json(exclude_none=True)

        return StructuredTool.from_function(
            coroutine=call_remote_tool,
            name=name,
            description=description,
            args_schema=build_arguments_model(name, declared_parameters(remote_tool.inputSchema), description),
            metadata=source_metadata("dynamic"),
        )
