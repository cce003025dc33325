"""Shared test fixtures."""

import time
from unittest.mock import patch

import pytest
from langchain_core.language_models import BaseChatModel
from langchain_core.messages import AIMessage, BaseMessage
from langchain_core.outputs import ChatGeneration, ChatResult
from pydantic import Field

from slackbot.utils.tokens import TokenCounter


class ScriptedChatModel(BaseChatModel):
    """Chat model that replays a fixed list of replies; the last reply repeats."""

    replies: list[AIMessage]
    calls: int = 0
    delay: float = 0.0
    fail_with: str | None = None
    received: list[list[BaseMessage]] = Field(default_factory=list)
    bound_tools: list[str] = Field(default_factory=list)

    @property
    def _llm_type(self) -> str:
        return "scripted"

    def bind_tools(self, tools, **kwargs):
        self.bound_tools = [tool.name for tool in tools]
        return self

    def _generate(self, messages, stop=None, run_manager=None, **kwargs) -> ChatResult:
        self.received.append(list(messages))
        if self.delay:
            time.sleep(self.delay)
        if self.fail_with:
            raise RuntimeError(self.fail_with)

        reply = self.replies[min(self.calls, len(self.replies) - 1)]
        self.calls += 1
        return ChatResult(generations=[ChatGeneration(message=reply.model_copy(update={"id": None}))])


@pytest.fixture
def scripted_model():
    """Factory for scripted chat models."""

    def create(*replies: AIMessage, **kwargs) -> ScriptedChatModel:
        return ScriptedChatModel(replies=list(replies), **kwargs)

    return create


@pytest.fixture
def token_counter():
    """Token counter using the character fallback (no tokenizer download)."""
    with patch("slackbot.utils.tokens.tiktoken.get_encoding", side_effect=RuntimeError("offline")):
        return TokenCounter(max_message_tokens=1000, max_history_tokens=10000)
