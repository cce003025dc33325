"""Node implementations for the generation graph."""

import asyncio
import time
from collections.abc import Awaitable, Callable, Sequence
from typing import Any

from langchain_core.language_models import LanguageModelInput
from langchain_core.messages import AIMessage, BaseMessage, SystemMessage, ToolMessage
from langchain_core.runnables import Runnable, RunnableConfig
from langchain_core.tools import BaseTool
from langgraph.prebuilt import ToolNode

from slackbot.graphs.state import GenerationState
from slackbot.utils.logging import get_logger

logger = get_logger(__name__)

ERROR_RESPONSE = "Sorry, something went wrong while I was working on that. Please try again."

GraphNode = Callable[[GenerationState, RunnableConfig], Awaitable[dict[str, Any]]]


def create_agent_node(model: Runnable[LanguageModelInput, BaseMessage], system_prompt: str) -> GraphNode:
    """Build the node that asks the model for its next move.

    The returned node counts model invocations and decides the transition:
    to ``tools`` when the reply requests tool calls and the step budget is not
    used up, otherwise to ``end``.
    """

    async def agent_node(state: GenerationState, config: RunnableConfig) -> dict[str, Any]:
        step = state.steps + 1

        remaining = None
        if state.deadline is not None:
            remaining = state.deadline - time.monotonic()
            if remaining <= 0:
                logger.warning("Request deadline passed before the next model step")
                return {"timed_out": True, "next_step": "end"}

        logger.info(f"Agent step {step}/{state.max_steps} with {len(state.messages)} messages")

        try:
            async with asyncio.timeout(remaining):
                response = await model.ainvoke([SystemMessage(content=system_prompt), *state.messages], config)
        except TimeoutError:
            logger.warning(f"Model step {step} hit the request deadline")
            return {"steps": step, "timed_out": True, "next_step": "end"}
        except Exception as e:
            logger.error(f"Agent node error: {e}", exc_info=True)
            return {"steps": step, "error": str(e), "next_step": "error"}

        tool_calls = getattr(response, "tool_calls", None) or []
        if not tool_calls:
            return {"messages": [response], "steps": step, "next_step": "end"}

        if step >= state.max_steps:
            logger.warning(f"Step limit {state.max_steps} reached with {len(tool_calls)} tool calls pending")
            return {"messages": [response], "steps": step, "next_step": "end"}

        logger.info(f"Agent requesting {len(tool_calls)} tool calls: {[tc['name'] for tc in tool_calls]}")
        return {"messages": [response], "steps": step, "next_step": "tools"}

    return agent_node


def error_handler_node(state: GenerationState) -> dict[str, Any]:
    """Replace a failed model step with an apology so the request still ends cleanly."""
    logger.error(f"Error handler invoked: {state.error}")
    return {
        "messages": [AIMessage(content=ERROR_RESPONSE)],
        "error": None,
        "next_step": "end",
    }


def create_tools_node(tools: Sequence[BaseTool]) -> GraphNode:
    """Build the node that runs the requested tool calls within the request deadline.

    Tool failures come back as error tool messages from ``ToolNode``. Calls
    still running when the deadline passes are cancelled and reported to the
    model the same way.
    """
    tool_node = ToolNode(tools, handle_tool_errors=True)

    async def tools_node(state: GenerationState, config: RunnableConfig) -> dict[str, Any]:
        remaining = None if state.deadline is None else state.deadline - time.monotonic()

        try:
            async with asyncio.timeout(remaining):
                return await tool_node.ainvoke({"messages": list(state.messages)}, config)
        except TimeoutError:
            pending = getattr(state.messages[-1], "tool_calls", None) or []
            logger.warning(f"Request deadline hit while running {[tc['name'] for tc in pending]}")
            return {
                "messages": [
                    ToolMessage(
                        content=f"Error: {tool_call['name']} did not finish before the request deadline",
                        tool_call_id=tool_call["id"],
                        name=tool_call["name"],
                        status="error",
                    )
                    for tool_call in pending
                ],
                "timed_out": True,
            }

    return tools_node
