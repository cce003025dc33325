"""Conversation message models."""

from typing import Literal

from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, SystemMessage, ToolMessage
from pydantic import BaseModel

MessageRole = Literal["user", "assistant", "tool", "system"]


class ConversationMessage(BaseModel):
    """A message in the conversation handed to the generation loop.

    Order is significant: a list of these is the turn order the model sees.
    """

    role: MessageRole
    content: str
    tool_call_id: str | None = None

    def to_langchain(self) -> BaseMessage:
        """Convert into the LangChain message type for this role."""
        if self.role == "user":
            return HumanMessage(content=self.content)
        if self.role == "assistant":
            return AIMessage(content=self.content)
        if self.role == "system":
            return SystemMessage(content=self.content)
        if not self.tool_call_id:
            raise ValueError("Tool messages require a tool_call_id")
        return ToolMessage(content=self.content, tool_call_id=self.tool_call_id)
