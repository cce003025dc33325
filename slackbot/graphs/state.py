"""State definitions for the generation graph."""

from collections.abc import Sequence
from typing import Annotated, Literal

from langchain_core.messages import BaseMessage
from langgraph.graph import add_messages
from pydantic import BaseModel, ConfigDict, Field

NextStep = Literal["tools", "error", "end"]


class GenerationState(BaseModel):
    """State passed between the graph's nodes for a single request.

    The graph is a small state machine: ``agent`` is the awaiting-model
    state, ``tools`` is executing-tools and ``END`` is done.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    messages: Annotated[Sequence[BaseMessage], add_messages]

    # Control flow
    steps: int = 0
    max_steps: int = Field(default=10, ge=1)
    deadline: float | None = None
    next_step: NextStep | None = None
    error: str | None = None
    timed_out: bool = False
