"""Tests for configuration and client wiring."""

from unittest.mock import AsyncMock, patch

import pytest
from langchain_anthropic import ChatAnthropic
from slack_bolt.async_app import AsyncApp

from slackbot.clients.anthropic import create_chat_model
from slackbot.clients.slack import build_slack_app
from slackbot.config import BotConfig
from slackbot.services.rate_limiter import UserRateLimiter
from slackbot.services.slack_events import SlackEventHandler


class TestBotConfig:
    """Tests for environment-driven configuration."""

    def test_defaults(self):
        with patch.dict("os.environ", {}, clear=True):
            config = BotConfig.from_env()

        assert config.max_steps == 10
        assert config.response_mode == "complete"
        assert config.mcp_server_url is None
        assert config.discovery_timeout == 10.0

    def test_values_from_environment(self):
        env = {
            "SLACK_BOT_TOKEN": "xoxb-test",
            "SLACK_SIGNING_SECRET": "secret",
            "MCP_SERVER_URL": "https://mcp.example.com/sse",
            "BOT_RESPONSE_MODE": "STREAM",
            "BOT_MAX_STEPS": "4",
            "BOT_REQUEST_TIMEOUT": "30.5",
        }
        with patch.dict("os.environ", env, clear=True):
            config = BotConfig.from_env()

        assert config.slack_bot_token == "xoxb-test"
        assert config.mcp_server_url == "https://mcp.example.com/sse"
        assert config.response_mode == "stream"
        assert config.max_steps == 4
        assert config.request_timeout == 30.5

    def test_zapier_url_fallback(self):
        """Test that the Zapier variable is used when no MCP URL is set."""
        with patch.dict("os.environ", {"ZAPIER_MCP_URL": "https://actions.zapier.com/mcp/x/sse"}, clear=True):
            config = BotConfig.from_env()

        assert config.mcp_server_url == "https://actions.zapier.com/mcp/x/sse"

    def test_invalid_response_mode(self):
        with patch.dict("os.environ", {"BOT_RESPONSE_MODE": "carrier-pigeon"}, clear=True):
            with pytest.raises(ValueError, match="BOT_RESPONSE_MODE"):
                BotConfig.from_env()


class TestClients:
    """Tests for model and Slack app construction."""

    def test_chat_model_requires_key(self):
        with pytest.raises(ValueError, match="ANTHROPIC_API_KEY"):
            create_chat_model(BotConfig())

    def test_chat_model_created(self):
        model = create_chat_model(BotConfig(anthropic_api_key="sk-test", model="claude-sonnet-4-5"))

        assert isinstance(model, ChatAnthropic)
        assert model.model == "claude-sonnet-4-5"

    def test_slack_app_requires_credentials(self, token_counter):
        handler = SlackEventHandler(AsyncMock(), BotConfig(), token_counter=token_counter)

        with pytest.raises(ValueError, match="SLACK_BOT_TOKEN"):
            build_slack_app(BotConfig(), handler)

    def test_slack_app_created(self, token_counter):
        config = BotConfig(slack_bot_token="xoxb-test", slack_signing_secret="secret")
        handler = SlackEventHandler(AsyncMock(), config, token_counter=token_counter)

        assert isinstance(build_slack_app(config, handler), AsyncApp)


class TestUserRateLimiter:
    """Tests for per-user rate limiting."""

    def test_limit_per_user(self):
        """Test that each user has an independent budget."""
        limiter = UserRateLimiter(requests_per_minute=2)

        assert limiter.allow("U1")
        assert limiter.allow("U1")
        assert not limiter.allow("U1")
        assert limiter.allow("U2")

    def test_missing_user_shares_anonymous_budget(self):
        limiter = UserRateLimiter(requests_per_minute=1)

        assert limiter.allow(None)
        assert not limiter.allow(None)
