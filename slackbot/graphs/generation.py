"""Generation graph: bounded model/tool loop for a single request."""

import time
from collections.abc import Sequence
from datetime import date
from typing import Any

from langchain_core.language_models import BaseChatModel
from langchain_core.messages import AIMessage, BaseMessage
from langchain_core.runnables import RunnableConfig
from langchain_core.tools import BaseTool
from langgraph.graph import END, StateGraph

from slackbot.graphs.edges import route_agent_output
from slackbot.graphs.nodes import create_agent_node, create_tools_node, error_handler_node
from slackbot.graphs.state import GenerationState
from slackbot.utils.logging import get_logger

logger = get_logger(__name__)

FALLBACK_RESPONSE = "Sorry, I wasn't able to come up with an answer. Please try asking again."


def get_system_prompt(today: date | None = None) -> str:
    """System prompt for the Slack assistant persona."""
    today = today or date.today()
    return f"""You are a Slack bot assistant. Keep your responses concise and to the point.
- Do not tag users.
- Current date is: {today.isoformat()}
- Make sure to ALWAYS include sources in your final response if you use web search. Put sources inline if possible."""


def create_generation_graph(model: BaseChatModel, tools: list[BaseTool], system_prompt: str | None = None):
    """Create the generation graph for one request's tool set.

    Nodes:
    - agent: invoke the tool-bound model (awaiting-model)
    - tools: run every requested tool call within the deadline, errors returned as tool messages
    - error: turn a failed model call into an apology

    Args:
        model: Chat model supporting tool binding
        tools: Merged static and discovered tools
        system_prompt: Override for the default persona prompt

    Returns:
        Compiled LangGraph workflow
    """
    logger.debug(f"Creating generation graph with {len(tools)} tools")

    bound_model = model.bind_tools(tools) if tools else model

    workflow = StateGraph(GenerationState)

    workflow.add_node("agent", create_agent_node(bound_model, system_prompt or get_system_prompt()))
    workflow.add_node("tools", create_tools_node(tools))
    workflow.add_node("error", error_handler_node)

    workflow.set_entry_point("agent")

    workflow.add_conditional_edges(
        "agent",
        route_agent_output,
        {
            "tools": "tools",
            "error": "error",
            "end": END,
        },
    )
    workflow.add_edge("tools", "agent")
    workflow.add_edge("error", END)

    return workflow.compile()


def create_initial_state(
    messages: Sequence[BaseMessage], max_steps: int = 10, deadline: float | None = None
) -> dict[str, Any]:
    """Create the graph input for a request.

    Args:
        messages: Conversation so far, oldest first
        max_steps: Cap on model invocations
        deadline: time.monotonic() value after which no new model step starts
    """
    return {"messages": list(messages), "max_steps": max_steps, "deadline": deadline}


def request_deadline(timeout: float | None) -> float | None:
    return time.monotonic() + timeout if timeout is not None else None


def graph_config(max_steps: int) -> RunnableConfig:
    # Each step is an agent superstep plus a tools superstep
    return {"recursion_limit": 2 * max_steps + 2}


def message_text(message: BaseMessage) -> str:
    """Plain text of a message, ignoring tool-use and other non-text blocks."""
    content: Any = message.content
    if isinstance(content, str):
        return content

    parts = []
    for block in content:
        if isinstance(block, str):
            parts.append(block)
        elif isinstance(block, dict) and block.get("type") == "text":
            parts.append(block.get("text", ""))
    return "".join(parts)


def final_text(messages: Sequence[BaseMessage]) -> str:
    """The most recent text the model produced, or a fixed apology."""
    for message in reversed(messages):
        if isinstance(message, AIMessage) and (text := message_text(message).strip()):
            return text
    return FALLBACK_RESPONSE
