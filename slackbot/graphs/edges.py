"""Edge logic and routing for the generation graph."""

from typing import Literal

from slackbot.graphs.state import GenerationState
from slackbot.utils.logging import get_logger

logger = get_logger(__name__)


def route_agent_output(state: GenerationState) -> Literal["tools", "error", "end"]:
    """Route from the agent node.

    Follows the transition the agent node chose; an error without an explicit
    transition goes to the error handler and anything else ends the run.
    """
    logger.debug(f"Routing from agent node. Next step: {state.next_step}")

    if state.next_step:
        return state.next_step

    if state.error:
        logger.warning(f"Routing to error handler due to: {state.error}")
        return "error"

    return "end"
