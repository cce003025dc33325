"""Tests for Slack formatting and stream segmentation."""

from slackbot.utils.formatting import TextSegmenter, to_slack_markdown


class TestSlackMarkdown:
    """Tests for Markdown to Slack mrkdwn conversion."""

    def test_links_and_bold(self):
        """Test the combined link and bold rewrite."""
        assert to_slack_markdown("See [docs](http://x/y) for **bold** info") == "See <http://x/y|docs> for *bold* info"

    def test_plain_text_unchanged(self):
        """Test that text without Markdown constructs passes through unchanged."""
        text = "Nothing special here.\nJust _two_ lines with `code`."
        assert to_slack_markdown(text) == text

    def test_multiple_links(self):
        """Test that every link is rewritten."""
        text = "[one](https://a.example) and [two](https://b.example/path?q=1)"
        assert to_slack_markdown(text) == "<https://a.example|one> and <https://b.example/path?q=1|two>"

    def test_single_asterisks_preserved(self):
        """Test that single asterisks are left alone."""
        assert to_slack_markdown("*already slack bold*") == "*already slack bold*"

    def test_empty_string(self):
        assert to_slack_markdown("") == ""


class TestTextSegmenter:
    """Tests for paragraph segmentation of streamed text."""

    def test_segments_split_on_blank_lines(self):
        """Test that completed paragraphs are emitted as soon as they end."""
        segmenter = TextSegmenter()

        assert segmenter.feed("First para") == []
        assert segmenter.feed("graph.\n\nSecond") == ["First paragraph."]
        assert segmenter.feed(" one.\n\nThird.\n\n") == ["Second one.", "Third."]
        assert segmenter.flush() is None

    def test_flush_returns_remainder(self):
        """Test that the trailing partial paragraph is returned by flush."""
        segmenter = TextSegmenter()
        segmenter.feed("Only paragraph, no terminator")

        assert segmenter.flush() == "Only paragraph, no terminator"
        assert segmenter.flush() is None

    def test_blank_segments_skipped(self):
        """Test that whitespace-only segments are never emitted."""
        segmenter = TextSegmenter()

        assert segmenter.feed("\n\n   \n\nText\n\n\n\n") == ["Text"]
        assert segmenter.flush() is None

    def test_separator_split_across_chunks(self):
        """Test a separator arriving in two separate deltas."""
        segmenter = TextSegmenter()

        assert segmenter.feed("Alpha\n") == []
        assert segmenter.feed("\nBeta") == ["Alpha"]
        assert segmenter.flush() == "Beta"
