"""Unit tests for the tag grammar."""
from hypothesis import given
from hypothesis import strategies as st

from daiy.reasoning.models import ReasoningTag, ThinkingStep, TimelineTag
from daiy.reasoning.tags import (
    canonical_timeline_event,
    extract_thinking_steps,
    iter_tagged_lines,
    parse_timeline_events,
)


class TestExtractThinkingSteps:
    """Tests for reasoning step extraction."""

    def test_extracts_steps_in_order(self):
        """Test that tagged lines become steps in order of appearance."""
        text = "[ANALYZING] first\n[MAPPING] second\n[FORMULATING] third"

        steps = extract_thinking_steps(text)

        assert steps == [
            ThinkingStep(tag=ReasoningTag.ANALYZING, text="first"),
            ThinkingStep(tag=ReasoningTag.MAPPING, text="second"),
            ThinkingStep(tag=ReasoningTag.FORMULATING, text="third"),
        ]

    def test_tags_are_case_insensitive(self):
        """Test that lower-case tags are recognised and upper-cased."""
        steps = extract_thinking_steps("[analyzing] lower\n[Refining] mixed")

        assert [s.tag for s in steps] == [ReasoningTag.ANALYZING, ReasoningTag.REFINING]

    def test_text_is_stripped(self):
        """Test that surrounding whitespace is removed from step text."""
        steps = extract_thinking_steps("  [VALIDATING]    spaced out   ")

        assert steps == [ThinkingStep(tag=ReasoningTag.VALIDATING, text="spaced out")]

    def test_unknown_tags_are_ignored(self):
        """Test that tags outside the vocabulary produce no steps."""
        assert extract_thinking_steps("[PONDERING] nothing\n[QUESTION] not here") == []

    def test_tag_must_start_the_line(self):
        """Test that a tag in the middle of a line is not a step."""
        assert extract_thinking_steps("Then [ANALYZING] inline") == []

    def test_tag_without_text_is_ignored(self):
        """Test that a bare tag does not swallow the next line."""
        steps = extract_thinking_steps("[ANALYZING]\n[MAPPING] next")

        assert steps == [ThinkingStep(tag=ReasoningTag.MAPPING, text="next")]

    def test_all_vocabulary_tags_recognised(self):
        """Test that every reasoning tag can be extracted."""
        text = "\n".join(f"[{tag.value}] text" for tag in ReasoningTag)

        steps = extract_thinking_steps(text)

        assert [s.tag for s in steps] == list(ReasoningTag)

    @given(st.text())
    def test_never_raises(self, text: str):
        """Property test: extraction is total over arbitrary text."""
        steps = extract_thinking_steps(text)
        assert all(step.text for step in steps)

    def test_iter_tagged_lines_reports_offsets(self):
        """Test that match offsets point into the original text."""
        text = "intro\n[ANALYZING] foo\n"

        (line,) = list(iter_tagged_lines(text, ReasoningTag))

        assert line.tag == "ANALYZING"
        assert text[line.start:line.end] == "[ANALYZING] foo"


class TestTimelineEvents:
    """Tests for timeline event detection."""

    def test_two_events_and_canonical_type(self):
        """Test splitting on timeline tags anywhere in the text."""
        content = "[QUESTION] What is x?\n[BREAKTHROUGH] It's 5!"

        events = parse_timeline_events(content)

        assert [(e.type, e.text) for e in events] == [
            (TimelineTag.QUESTION, "What is x?"),
            (TimelineTag.BREAKTHROUGH, "It's 5!"),
        ]
        assert canonical_timeline_event(content) == TimelineTag.BREAKTHROUGH

    def test_tag_mid_line(self):
        """Test that a timeline tag need not start a line."""
        events = parse_timeline_events("Good work. [INSIGHT] You saw the pattern.\nMore text")

        assert len(events) == 1
        assert events[0].type == TimelineTag.INSIGHT
        assert events[0].text == "You saw the pattern."

    def test_types_are_lower_case(self):
        """Test that event types are normalised to lower case."""
        events = parse_timeline_events("[challenge] prove it")

        assert events[0].type == TimelineTag.CHALLENGE
        assert events[0].type.value == "challenge"

    def test_text_truncated_to_80_characters(self):
        """Test that long event text is truncated with an ellipsis."""
        events = parse_timeline_events("[ASSUMPTION] " + "a" * 120)

        assert events[0].text == "a" * 79 + "…"
        assert len(events[0].text) == 80

    def test_text_of_exactly_80_characters_kept(self):
        """Test that text at the limit is not truncated."""
        events = parse_timeline_events("[QUESTION] " + "b" * 80)

        assert events[0].text == "b" * 80

    @given(st.text(alphabet="ab \n", max_size=200))
    def test_text_never_exceeds_80_characters(self, text: str):
        """Property test: event text is at most 80 characters."""
        for event in parse_timeline_events(f"[INSIGHT] {text}"):
            assert len(event.text) <= 80

    def test_adjacent_tags_give_empty_text(self):
        """Test that a tag immediately followed by another has empty text."""
        events = parse_timeline_events("[QUESTION][INSIGHT] both")

        assert [(e.type, e.text) for e in events] == [
            (TimelineTag.QUESTION, ""),
            (TimelineTag.INSIGHT, "both"),
        ]

    def test_no_tags(self):
        """Test that plain text has no events and no canonical type."""
        assert parse_timeline_events("Just a question?") == []
        assert canonical_timeline_event("Just a question?") is None

    def test_reasoning_tags_are_not_timeline_events(self):
        """Test that the two vocabularies do not overlap."""
        assert parse_timeline_events("[ANALYZING] foo") == []
