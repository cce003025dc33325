"""Tests for token validation and history truncation."""

from unittest.mock import Mock

import pytest

from slackbot.models.messages import ConversationMessage


class TestTokenValidation:
    """Tests for message token validation."""

    def test_validate_message_tokens_within_limit(self, token_counter):
        """Test that messages within token limit pass validation."""
        token_counter.tokenizer = Mock()
        token_counter.tokenizer.encode.return_value = ["token"] * 500

        # Should not raise exception
        token_counter.validate_message_tokens("Short message")

    def test_validate_message_tokens_exceeds_limit(self, token_counter):
        """Test that messages exceeding token limit raise ValueError."""
        token_counter.tokenizer = Mock()
        token_counter.tokenizer.encode.return_value = ["token"] * 1500

        with pytest.raises(ValueError, match="Message exceeds token limit"):
            token_counter.validate_message_tokens("Very long message")

    def test_validate_message_tokens_fallback_without_tokenizer(self, token_counter):
        """Test token validation fallback when tokenizer is unavailable."""
        assert token_counter.tokenizer is None

        # Under 4000 chars is ~1000 tokens
        token_counter.validate_message_tokens("a" * 3000)

        with pytest.raises(ValueError, match="Message exceeds token limit"):
            token_counter.validate_message_tokens("a" * 5000)

    def test_count_falls_back_when_tokenizer_fails(self, token_counter):
        """Test that a failing tokenizer degrades to the character estimate."""
        token_counter.tokenizer = Mock()
        token_counter.tokenizer.encode.side_effect = RuntimeError("boom")

        assert token_counter.count("a" * 400) == 100


class TestHistoryTruncation:
    """Tests for thread history truncation."""

    def test_history_within_budget_is_untouched(self, token_counter):
        """Test that histories within the budget are returned whole."""
        messages = [
            ConversationMessage(role="user", content="Message 1"),
            ConversationMessage(role="assistant", content="Response 1"),
            ConversationMessage(role="user", content="Message 2"),
        ]

        assert token_counter.truncate_history(messages) == messages

    def test_oldest_messages_dropped_first(self, token_counter):
        """Test that truncation keeps the newest messages."""
        # 4000 chars is ~1000 tokens each, budget is 10000
        messages = [ConversationMessage(role="user", content=f"{i}" + "a" * 3999) for i in range(15)]

        result = token_counter.truncate_history(messages)

        assert len(result) == 10
        assert result[-1] == messages[-1]
        assert result[0] == messages[5]

    def test_newest_message_always_kept(self, token_counter):
        """Test that an oversized latest message still survives truncation."""
        messages = [
            ConversationMessage(role="user", content="earlier question"),
            ConversationMessage(role="user", content="a" * 80000),
        ]

        result = token_counter.truncate_history(messages)

        assert result == [messages[-1]]

    def test_empty_history(self, token_counter):
        assert token_counter.truncate_history([]) == []
