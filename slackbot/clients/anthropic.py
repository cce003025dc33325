"""Anthropic chat model construction."""

from langchain_anthropic import ChatAnthropic

from slackbot.config import BotConfig
from slackbot.utils.logging import get_logger

logger = get_logger(__name__)


def create_chat_model(config: BotConfig) -> ChatAnthropic:
    """Build the chat model used by the generation graph.

    Args:
        config: Bot configuration carrying the model settings and API key

    Raises:
        ValueError: If no Anthropic API key is configured
    """
    if not config.anthropic_api_key:
        raise ValueError("ANTHROPIC_API_KEY environment variable is required")

    logger.info(f"Creating chat model {config.model} (max_tokens={config.max_tokens})")
    return ChatAnthropic(
        model=config.model,
        temperature=config.temperature,
        max_tokens=config.max_tokens,
        api_key=config.anthropic_api_key,
        max_retries=3,
    )
