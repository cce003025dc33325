"""Runtime configuration loaded from the environment."""

import os
from dataclasses import dataclass
from typing import Literal

ResponseMode = Literal["complete", "stream"]


def _env_float(name: str, default: float) -> float:
    value = os.getenv(name)
    return float(value) if value else default


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    return int(value) if value else default


@dataclass
class BotConfig:
    """Configuration for the Slack assistant.

    Secrets are optional here and validated by whichever component consumes
    them, so that importing the package never requires a populated
    environment.
    """

    slack_bot_token: str | None = None
    slack_signing_secret: str | None = None

    anthropic_api_key: str | None = None
    model: str = "claude-sonnet-4-5"
    max_tokens: int = 4096
    temperature: float = 0.0

    # Tool discovery; no URL means the dynamic tool set is always empty
    mcp_server_url: str | None = None
    discovery_timeout: float = 10.0
    tool_call_timeout: float = 30.0

    exa_api_key: str | None = None
    http_timeout: float = 20.0

    max_steps: int = 10
    request_timeout: float = 55.0
    response_mode: ResponseMode = "complete"

    rate_limit_per_minute: int = 10
    max_message_tokens: int = 2000
    max_history_tokens: int = 20000
    history_limit: int = 50

    @classmethod
    def from_env(cls) -> "BotConfig":
        """Build configuration from environment variables."""
        response_mode = os.getenv("BOT_RESPONSE_MODE", "complete").lower()
        if response_mode not in ("complete", "stream"):
            raise ValueError(f"BOT_RESPONSE_MODE must be 'complete' or 'stream', got {response_mode!r}")

        return cls(
            slack_bot_token=os.getenv("SLACK_BOT_TOKEN"),
            slack_signing_secret=os.getenv("SLACK_SIGNING_SECRET"),
            anthropic_api_key=os.getenv("ANTHROPIC_API_KEY"),
            model=os.getenv("ANTHROPIC_MODEL", cls.model),
            max_tokens=_env_int("ANTHROPIC_MAX_TOKENS", cls.max_tokens),
            mcp_server_url=os.getenv("MCP_SERVER_URL") or os.getenv("ZAPIER_MCP_URL") or None,
            discovery_timeout=_env_float("MCP_DISCOVERY_TIMEOUT", cls.discovery_timeout),
            tool_call_timeout=_env_float("MCP_TOOL_TIMEOUT", cls.tool_call_timeout),
            exa_api_key=os.getenv("EXA_API_KEY"),
            max_steps=_env_int("BOT_MAX_STEPS", cls.max_steps),
            request_timeout=_env_float("BOT_REQUEST_TIMEOUT", cls.request_timeout),
            response_mode=response_mode,  # type: ignore[arg-type]
            rate_limit_per_minute=_env_int("BOT_RATE_LIMIT_PER_MINUTE", cls.rate_limit_per_minute),
            max_message_tokens=_env_int("BOT_MAX_MESSAGE_TOKENS", cls.max_message_tokens),
            max_history_tokens=_env_int("BOT_MAX_HISTORY_TOKENS", cls.max_history_tokens),
            history_limit=_env_int("BOT_HISTORY_LIMIT", cls.history_limit),
        )


_config: BotConfig | None = None


def get_config() -> BotConfig:
    """Get or create the process-wide configuration."""
    global _config
    if _config is None:
        _config = BotConfig.from_env()
    return _config
