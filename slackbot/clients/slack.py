"""Slack Bolt application wiring."""

from slack_bolt.adapter.fastapi.async_handler import AsyncSlackRequestHandler
from slack_bolt.async_app import AsyncApp

from slackbot.config import BotConfig, get_config
from slackbot.services.generation import get_response_generator
from slackbot.services.rate_limiter import UserRateLimiter
from slackbot.services.slack_events import SlackEventHandler
from slackbot.utils.logging import get_logger
from slackbot.utils.tokens import TokenCounter

logger = get_logger(__name__)


def build_slack_app(config: BotConfig, handler: SlackEventHandler) -> AsyncApp:
    """Create the Bolt app with listeners for messages and mentions.

    Raises:
        ValueError: If the bot token or signing secret is missing
    """
    if not config.slack_bot_token or not config.slack_signing_secret:
        raise ValueError("SLACK_BOT_TOKEN and SLACK_SIGNING_SECRET environment variables are required")

    app = AsyncApp(token=config.slack_bot_token, signing_secret=config.slack_signing_secret)

    app.event("app_mention")(handler.handle_mention)
    app.event("message")(handler.handle_message)

    logger.info(f"Slack app ready (response mode: {config.response_mode})")
    return app


_request_handler: AsyncSlackRequestHandler | None = None


def get_request_handler() -> AsyncSlackRequestHandler:
    """Get or create the FastAPI request handler for Slack events."""
    global _request_handler
    if _request_handler is None:
        config = get_config()
        handler = SlackEventHandler(
            get_response_generator(),
            config,
            rate_limiter=UserRateLimiter(config.rate_limit_per_minute),
            token_counter=TokenCounter(config.max_message_tokens, config.max_history_tokens),
        )
        _request_handler = AsyncSlackRequestHandler(build_slack_app(config, handler))
    return _request_handler
