"""Slack event data models."""

from typing import Any

from pydantic import BaseModel, ConfigDict

# Subtypes that still carry a human-authored message worth answering
ANSWERABLE_SUBTYPES = frozenset({"thread_broadcast", "file_share"})


class SlackMessageEvent(BaseModel):
    """The subset of a Slack ``message``/``app_mention`` event the bot reads."""

    model_config = ConfigDict(extra="ignore")

    type: str
    channel: str
    ts: str
    text: str = ""
    user: str | None = None
    thread_ts: str | None = None
    subtype: str | None = None
    bot_id: str | None = None
    channel_type: str | None = None

    @classmethod
    def from_event(cls, event: dict[str, Any]) -> "SlackMessageEvent":
        """Parse a raw event payload delivered by Bolt."""
        return cls.model_validate(event)

    @property
    def thread_root(self) -> str:
        """Timestamp of the thread the reply belongs in.

        Replies go into the existing thread when the event is already part of
        one, otherwise they start a new thread under the triggering message.
        """
        return self.thread_ts or self.ts

    @property
    def in_thread(self) -> bool:
        """Whether the event was posted inside an existing thread."""
        return self.thread_ts is not None and self.thread_ts != self.ts

    @property
    def is_direct_message(self) -> bool:
        return self.channel_type == "im"

    def is_from_bot(self, bot_user_id: str | None = None) -> bool:
        """Whether the event was authored by a bot (including this one)."""
        if self.bot_id or self.subtype == "bot_message":
            return True
        return bool(bot_user_id) and self.user == bot_user_id

    def is_answerable(self) -> bool:
        """Whether the subtype describes a plain user message."""
        return self.subtype is None or self.subtype in ANSWERABLE_SUBTYPES

    def mentions(self, bot_user_id: str | None) -> bool:
        return bool(bot_user_id) and f"<@{bot_user_id}>" in self.text

    def clean_text(self, bot_user_id: str | None) -> str:
        """Message text with the bot mention token removed."""
        text = self.text
        if bot_user_id:
            text = text.replace(f"<@{bot_user_id}>", "")
        return text.strip()
