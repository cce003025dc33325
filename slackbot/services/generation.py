"""Response generation: tool assembly, the generation graph and formatting."""

from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import AsyncExitStack, asynccontextmanager

import httpx
from langchain_core.language_models import BaseChatModel
from langchain_core.messages import AIMessage
from langchain_core.tools import BaseTool

from slackbot.clients.anthropic import create_chat_model
from slackbot.config import BotConfig, get_config
from slackbot.graphs.generation import (
    FALLBACK_RESPONSE,
    create_generation_graph,
    create_initial_state,
    final_text,
    graph_config,
    message_text,
    request_deadline,
)
from slackbot.models.messages import ConversationMessage
from slackbot.services.status import StatusReporter
from slackbot.tools.mcp_tools import McpToolLoader
from slackbot.tools.registry import ToolsRegistry, get_tools_registry
from slackbot.utils.formatting import TextSegmenter, to_slack_markdown
from slackbot.utils.logging import get_logger

logger = get_logger(__name__)

SegmentCallback = Callable[[str], Awaitable[None]]

# Nodes whose AI messages are meant for the user
SPEAKING_NODES = ("agent", "error")


class ResponseGenerator:
    """Turn a conversation into a Slack-formatted answer.

    Everything a request needs (HTTP client, discovered tools, the graph) is
    created per call and released when the call returns.
    """

    def __init__(
        self,
        config: BotConfig,
        registry: ToolsRegistry | None = None,
        tool_loader: McpToolLoader | None = None,
        model: BaseChatModel | None = None,
    ):
        """Initialize response generator.

        Args:
            config: Bot configuration
            registry: Static tool registry (defaults to global instance)
            tool_loader: Dynamic tool loader (defaults to one for config.mcp_server_url)
            model: Chat model (defaults to an Anthropic model built on first use)
        """
        self.config = config
        self.registry = registry or get_tools_registry(config)
        self.tool_loader = tool_loader or McpToolLoader(
            config.mcp_server_url,
            timeout=config.discovery_timeout,
            call_timeout=config.tool_call_timeout,
        )
        self._model = model

    @property
    def model(self) -> BaseChatModel:
        if self._model is None:
            self._model = create_chat_model(self.config)
        return self._model

    @asynccontextmanager
    async def _request_tools(self, status: StatusReporter) -> AsyncIterator[list[BaseTool]]:
        """Tool set for one request; the discovery session stays open for the whole loop."""
        async with AsyncExitStack() as stack:
            http_client = await stack.enter_async_context(httpx.AsyncClient(timeout=self.config.http_timeout))
            dynamic = await stack.enter_async_context(self.tool_loader.open_tools(status))
            yield self.registry.build_tools(http_client, status, dynamic)

    async def generate_response(
        self, messages: list[ConversationMessage], status: StatusReporter | None = None
    ) -> str:
        """Run the generation loop and return the formatted final answer.

        Args:
            messages: Conversation so far, oldest first
            status: Progress sink for user-facing updates

        Returns:
            Slack mrkdwn text, never empty
        """
        status = status or StatusReporter()
        deadline = request_deadline(self.config.request_timeout)
        logger.info(f"Generating response for {len(messages)} messages")

        async with self._request_tools(status) as tools:
            graph = create_generation_graph(self.model, tools)
            result = await graph.ainvoke(
                create_initial_state([m.to_langchain() for m in messages], self.config.max_steps, deadline),
                graph_config(self.config.max_steps),
            )

        logger.info(
            f"Generation finished after {result.get('steps', 0)} steps"
            + (" (deadline reached)" if result.get("timed_out") else "")
        )
        return to_slack_markdown(final_text(result["messages"]))

    async def stream_response(
        self,
        messages: list[ConversationMessage],
        on_segment: SegmentCallback,
        status: StatusReporter | None = None,
    ) -> str:
        """Run the generation loop, delivering each completed paragraph as it streams.

        Args:
            messages: Conversation so far, oldest first
            on_segment: Awaited with every formatted segment, in order
            status: Progress sink for user-facing updates

        Returns:
            All delivered segments joined with blank lines
        """
        status = status or StatusReporter()
        deadline = request_deadline(self.config.request_timeout)
        segmenter = TextSegmenter()
        delivered: list[str] = []

        async def deliver(segment: str) -> None:
            formatted = to_slack_markdown(segment)
            delivered.append(formatted)
            await on_segment(formatted)

        logger.info(f"Streaming response for {len(messages)} messages")

        async with self._request_tools(status) as tools:
            graph = create_generation_graph(self.model, tools)
            current_message_id = None

            async for chunk, metadata in graph.astream(
                create_initial_state([m.to_langchain() for m in messages], self.config.max_steps, deadline),
                graph_config(self.config.max_steps),
                stream_mode="messages",
            ):
                if metadata.get("langgraph_node") not in SPEAKING_NODES or not isinstance(chunk, AIMessage):
                    continue

                # A new model turn never continues the previous turn's paragraph
                if chunk.id != current_message_id:
                    current_message_id = chunk.id
                    if remainder := segmenter.flush():
                        await deliver(remainder)

                for segment in segmenter.feed(message_text(chunk)):
                    await deliver(segment)

        if remainder := segmenter.flush():
            await deliver(remainder)

        if not delivered:
            await deliver(FALLBACK_RESPONSE)

        logger.info(f"Streamed {len(delivered)} segments")
        return "\n\n".join(delivered)


_response_generator: ResponseGenerator | None = None


def get_response_generator() -> ResponseGenerator:
    """Get or create response generator instance."""
    global _response_generator
    if _response_generator is None:
        _response_generator = ResponseGenerator(get_config())
    return _response_generator
