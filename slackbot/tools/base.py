"""Base types and definitions for tools."""

from typing import Any, Literal

from langchain_core.tools import BaseTool
from pydantic import BaseModel, ConfigDict

ToolSource = Literal["static", "dynamic"]


class ToolExecutionError(Exception):
    """An external call behind a tool failed.

    Raised from tool executors and handed back to the model as the tool
    result, never out of the generation loop.
    """


class OpenArguments(BaseModel):
    """Argument bag for tools whose parameter shapes are unknown.

    Discovered tools only advertise parameter names, so every declared name
    is an optional value of any shape and undeclared keys are kept as-is.
    """

    model_config = ConfigDict(extra="allow")


def source_metadata(source: ToolSource) -> dict[str, Any]:
    return {"source": source}


def tool_source(tool: BaseTool) -> ToolSource | None:
    """Whether a tool was defined statically or discovered at request time."""
    return (tool.metadata or {}).get("source")
