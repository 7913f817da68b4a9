"""Unit tests for turn finalisation and string helpers."""
from daiy.reasoning.models import TimelineTag
from daiy.turns import error_turn, finalize_turn
from daiy.utils import generate_title, mask_api_key, truncate


class TestFinalizeTurn:
    """Tests for finalize_turn."""

    def test_strips_reasoning_block(self):
        """Test that stored content excludes the reasoning block."""
        outcome = finalize_turn("<think>\n[ANALYZING] foo\n</think>\n\nWhat do you notice?")

        assert outcome.content == "What do you notice?"
        assert outcome.is_breakthrough is False
        assert outcome.timeline_event is None
        assert outcome.is_error is False

    def test_breakthrough_and_timeline(self):
        """Test the breakthrough flag and canonical timeline event."""
        outcome = finalize_turn("[QUESTION] What is x?\n[BREAKTHROUGH] It's 5!")

        assert outcome.is_breakthrough is True
        assert outcome.timeline_event == TimelineTag.BREAKTHROUGH
        assert len(outcome.timeline_events) == 2

    def test_breakthrough_marker_is_case_sensitive(self):
        """Test that only the upper-case marker sets the flag."""
        outcome = finalize_turn("[breakthrough] you got it")

        assert outcome.is_breakthrough is False
        assert outcome.timeline_event == TimelineTag.BREAKTHROUGH

    def test_tags_inside_reasoning_block_ignored(self):
        """Test that only visible text is searched for markers."""
        outcome = finalize_turn("<think>[BREAKTHROUGH] not yet</think>Keep going.")

        assert outcome.is_breakthrough is False
        assert outcome.content == "Keep going."

    def test_to_message(self):
        """Test conversion to an assistant chat message."""
        message = finalize_turn("Hello").to_message()

        assert message.role == "assistant"
        assert message.content == "Hello"


class TestErrorTurn:
    """Tests for error_turn."""

    def test_error_content(self):
        """Test the user-visible error text."""
        outcome = error_turn("rate limited")

        assert outcome.content == "⚠️ Error: rate limited"
        assert outcome.is_error is True
        assert outcome.is_breakthrough is False


class TestUtils:
    """Tests for string helpers."""

    def test_truncate_short_text_unchanged(self):
        assert truncate("short") == "short"

    def test_truncate_adds_ellipsis(self):
        """Test truncation at the default length."""
        assert truncate("x" * 50) == "x" * 40 + "…"

    def test_truncate_strips_trailing_space(self):
        """Test that whitespace at the cut point is removed."""
        assert truncate("abc   defgh", 5) == "abc…"

    def test_generate_title(self):
        """Test titles from the first user message."""
        assert generate_title("  Why\nis the sky blue?  ") == "Why is the sky blue?"
        assert generate_title("a" * 60) == "a" * 50 + "…"

    def test_mask_api_key(self):
        """Test credential masking for logs."""
        assert mask_api_key("short") == "••••••••"
        assert mask_api_key("sk-1234567890abcd") == "sk-1••••abcd"
