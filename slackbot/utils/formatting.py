"""Conversion of model output into Slack mrkdwn."""

import re

MARKDOWN_LINK = re.compile(r"\[(.*?)\]\((.*?)\)")
SEGMENT_BREAK = "\n\n"


def to_slack_markdown(text: str) -> str:
    """Rewrite markdown links and bold markers into Slack mrkdwn.

    ``[label](url)`` becomes ``<url|label>`` and ``**bold**`` becomes
    ``*bold*``. Text without either construct is returned unchanged.
    """
    return MARKDOWN_LINK.sub(r"<\2|\1>", text).replace("**", "*")


class TextSegmenter:
    """Accumulate streamed text and release it one paragraph at a time."""

    def __init__(self) -> None:
        self._buffer = ""

    def feed(self, delta: str) -> list[str]:
        """Add a streamed delta and return any segments it completed."""
        self._buffer += delta
        segments: list[str] = []
        while SEGMENT_BREAK in self._buffer:
            segment, self._buffer = self._buffer.split(SEGMENT_BREAK, 1)
            if segment.strip():
                segments.append(segment.strip())
        return segments

    def flush(self) -> str | None:
        """Return whatever is left in the buffer, if anything."""
        remainder, self._buffer = self._buffer.strip(), ""
        return remainder or None
