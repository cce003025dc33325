"""Token estimation for incoming messages and thread history."""

import tiktoken

from slackbot.models.messages import ConversationMessage
from slackbot.utils.logging import get_logger

logger = get_logger(__name__)


class TokenCounter:
    """Estimate and budget tokens for conversation input."""

    tokenizer: tiktoken.Encoding | None = None

    def __init__(self, max_message_tokens: int = 2000, max_history_tokens: int = 20000):
        """Initialize token counter.

        Args:
            max_message_tokens: Maximum tokens accepted in a single user message
            max_history_tokens: Budget for the whole thread history sent to the model
        """
        self.max_message_tokens = max_message_tokens
        self.max_history_tokens = max_history_tokens

        try:
            # Close approximation for Claude
            self.tokenizer = tiktoken.get_encoding("cl100k_base")
        except Exception:
            self.tokenizer = None

    def count(self, text: str) -> int:
        """Estimate token count for a piece of text."""
        try:
            return len(self.tokenizer.encode(text)) if self.tokenizer else len(text) // 4
        except Exception:
            # Fallback: roughly 4 characters per token
            return len(text) // 4

    def validate_message_tokens(self, message: str) -> None:
        """Validate that a message doesn't exceed the per-message limit.

        Raises:
            ValueError: If message exceeds token limit
        """
        token_count = self.count(message)
        if token_count > self.max_message_tokens:
            raise ValueError(f"Message exceeds token limit: {token_count} tokens > {self.max_message_tokens} limit")

    def truncate_history(self, messages: list[ConversationMessage]) -> list[ConversationMessage]:
        """Drop the oldest messages until the history fits the budget.

        The newest message is always kept, even when it alone exceeds the
        budget, so the request never loses the question being asked.
        """
        if not messages:
            return messages

        truncated: list[ConversationMessage] = []
        current_tokens = 0

        for message in reversed(messages):
            message_tokens = self.count(message.content)
            if truncated and current_tokens + message_tokens > self.max_history_tokens:
                break
            truncated.insert(0, message)
            current_tokens += message_tokens

        if len(truncated) < len(messages):
            logger.warning(
                f"Truncated thread history from {len(messages)} to {len(truncated)} messages "
                f"to fit within {self.max_history_tokens} tokens"
            )

        return truncated
