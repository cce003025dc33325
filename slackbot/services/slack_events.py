"""Slack event handling: from an incoming message to a threaded reply."""

from typing import Any

from pydantic import ValidationError
from slack_sdk.web.async_client import AsyncWebClient

from slackbot.config import BotConfig
from slackbot.models.messages import ConversationMessage
from slackbot.models.slack import SlackMessageEvent
from slackbot.services.generation import ResponseGenerator
from slackbot.services.rate_limiter import UserRateLimiter
from slackbot.services.status import StatusReporter
from slackbot.utils.logging import get_logger
from slackbot.utils.tokens import TokenCounter

logger = get_logger(__name__)

THINKING_TEXT = "is thinking..."
RATE_LIMITED_REPLY = "You're sending messages faster than I can answer. Please wait a minute and try again."
TOO_LONG_REPLY = "That message is too long for me to handle. Could you shorten it?"
ERROR_REPLY = "Sorry, I ran into a problem answering that. Please try again."


def merge_consecutive(messages: list[ConversationMessage]) -> list[ConversationMessage]:
    """Collapse runs of same-role messages and drop leading assistant turns."""
    merged: list[ConversationMessage] = []
    for message in messages:
        if not merged and message.role == "assistant":
            continue
        if merged and merged[-1].role == message.role:
            merged[-1] = merged[-1].model_copy(update={"content": f"{merged[-1].content}\n{message.content}"})
        else:
            merged.append(message)
    return merged


class SlackEventHandler:
    """Answer Slack messages and mentions in their thread."""

    def __init__(
        self,
        generator: ResponseGenerator,
        config: BotConfig,
        rate_limiter: UserRateLimiter | None = None,
        token_counter: TokenCounter | None = None,
    ):
        self.generator = generator
        self.config = config
        self.rate_limiter = rate_limiter or UserRateLimiter(config.rate_limit_per_minute)
        self.token_counter = token_counter or TokenCounter(config.max_message_tokens, config.max_history_tokens)

    async def handle_mention(self, event: dict[str, Any], client: AsyncWebClient, context: dict[str, Any]) -> None:
        """Bolt listener for ``app_mention`` events."""
        parsed = self._parse(event)
        if parsed is not None:
            await self.process_event(parsed, client, context.get("bot_user_id"))

    async def handle_message(self, event: dict[str, Any], client: AsyncWebClient, context: dict[str, Any]) -> None:
        """Bolt listener for ``message`` events.

        Outside direct messages a message that mentions the bot also arrives
        as ``app_mention``; only that copy is answered.
        """
        parsed = self._parse(event)
        if parsed is None:
            return

        bot_user_id = context.get("bot_user_id")
        if parsed.mentions(bot_user_id) and not parsed.is_direct_message:
            logger.debug(f"Skipping message {parsed.ts}: handled as app_mention")
            return

        await self.process_event(parsed, client, bot_user_id)

    def _parse(self, event: dict[str, Any]) -> SlackMessageEvent | None:
        try:
            return SlackMessageEvent.from_event(event)
        except ValidationError as e:
            logger.warning(f"Ignoring malformed Slack event: {e.error_count()} validation errors")
            return None

    async def process_event(self, event: SlackMessageEvent, client: AsyncWebClient, bot_user_id: str | None) -> None:
        """Answer one event; failures end in an apology, never an exception."""
        if event.is_from_bot(bot_user_id):
            logger.debug(f"Ignoring bot-authored event {event.ts}")
            return

        if not event.is_answerable():
            logger.debug(f"Ignoring event {event.ts} with subtype {event.subtype}")
            return

        text = event.clean_text(bot_user_id)
        if not text:
            return

        thread_ts = event.thread_root
        logger.info(f"Handling {event.type} from {event.user} in {event.channel} (thread {thread_ts})")

        if not self.rate_limiter.allow(event.user):
            await self._post_safely(client, event.channel, thread_ts, RATE_LIMITED_REPLY)
            return

        try:
            self.token_counter.validate_message_tokens(text)
        except ValueError as e:
            logger.warning(f"Rejecting message {event.ts}: {e}")
            await self._post_safely(client, event.channel, thread_ts, TOO_LONG_REPLY)
            return

        try:
            messages = await self.build_conversation(event, text, client, bot_user_id)
            if self.config.response_mode == "stream":
                await self._reply_streaming(messages, client, event.channel, thread_ts)
            else:
                await self._reply_complete(messages, client, event.channel, thread_ts)
        except Exception as e:
            logger.error(f"Failed to answer event {event.ts}: {e}", exc_info=True)
            await self._post_safely(client, event.channel, thread_ts, ERROR_REPLY)

    async def build_conversation(
        self, event: SlackMessageEvent, text: str, client: AsyncWebClient, bot_user_id: str | None
    ) -> list[ConversationMessage]:
        """Conversation for the model: the thread so far, or just this message."""
        if not event.in_thread:
            return [ConversationMessage(role="user", content=text)]

        try:
            response = await client.conversations_replies(
                channel=event.channel, ts=event.thread_root, limit=self.config.history_limit
            )
        except Exception as e:
            logger.warning(f"Could not fetch thread {event.thread_root}, answering without history: {e}")
            return [ConversationMessage(role="user", content=text)]

        history: list[ConversationMessage] = []
        for reply in response.get("messages") or []:
            reply_text = reply.get("text") or ""
            if reply_text == THINKING_TEXT:
                continue

            content = reply_text.replace(f"<@{bot_user_id}>", "").strip() if bot_user_id else reply_text.strip()
            if not content:
                continue

            is_bot = bool(reply.get("bot_id")) or (bool(bot_user_id) and reply.get("user") == bot_user_id)
            history.append(ConversationMessage(role="assistant" if is_bot else "user", content=content))

        if not history or history[-1].role != "user":
            history.append(ConversationMessage(role="user", content=text))

        return self.token_counter.truncate_history(merge_consecutive(history))

    async def _reply_complete(
        self, messages: list[ConversationMessage], client: AsyncWebClient, channel: str, thread_ts: str
    ) -> None:
        """Post a placeholder, keep it updated with progress, then replace it with the answer."""
        placeholder = await client.chat_postMessage(channel=channel, thread_ts=thread_ts, text=THINKING_TEXT)
        placeholder_ts = placeholder["ts"]

        async def update_status(status: str) -> None:
            await client.chat_update(channel=channel, ts=placeholder_ts, text=status)

        status = StatusReporter(update_status)
        try:
            try:
                answer = await self.generator.generate_response(messages, status)
            finally:
                # A late progress update must not overwrite the answer or the apology
                await status.drain()
            await client.chat_update(channel=channel, ts=placeholder_ts, text=answer)
        except Exception as e:
            logger.error(f"Failed to answer in placeholder {placeholder_ts}: {e}", exc_info=True)
            await self._replace_placeholder(client, channel, thread_ts, placeholder_ts, ERROR_REPLY)

    async def _replace_placeholder(
        self, client: AsyncWebClient, channel: str, thread_ts: str, placeholder_ts: str, text: str
    ) -> None:
        try:
            await client.chat_update(channel=channel, ts=placeholder_ts, text=text)
        except Exception as e:
            logger.error(f"Failed to update placeholder {placeholder_ts}: {e}")
            await self._post_safely(client, channel, thread_ts, text)

    async def _reply_streaming(
        self, messages: list[ConversationMessage], client: AsyncWebClient, channel: str, thread_ts: str
    ) -> None:
        """Post every completed segment into the thread as soon as it is decoded."""

        async def post_segment(segment: str) -> None:
            await client.chat_postMessage(channel=channel, thread_ts=thread_ts, text=segment)

        await self.generator.stream_response(messages, post_segment)

    async def _post_safely(self, client: AsyncWebClient, channel: str, thread_ts: str, text: str) -> None:
        try:
            await client.chat_postMessage(channel=channel, thread_ts=thread_ts, text=text)
        except Exception as e:
            logger.error(f"Failed to post reply to {channel}: {e}")
