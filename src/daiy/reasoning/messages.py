"""Message sets for each pass of a tutoring turn.

Pass 1 (decompose) and pass 2 (critique) are analysis calls whose output
the student never sees directly; pass 3 (respond) is the Socratic answer,
written with both analyses in its system prompt.
"""

from collections.abc import Sequence

from ..llm.models import ChatMessage
from ..prompts import (
    get_critique_prompt,
    get_decompose_prompt,
    get_response_prompt,
    get_socratic_prompt,
)

SUMMARY_TURNS = 6
SUMMARY_CHARS_PER_TURN = 300
CRITIQUE_REQUEST = "Please critique this analysis and provide your refined strategy."
DECOMPOSITION_HEADER = "=== ORIGINAL DECOMPOSITION ==="
CRITIQUE_HEADER = "=== SELF-CRITIQUE & REFINEMENT ==="


def build_conversation_summary(
    messages: Sequence[ChatMessage],
    turns: int = SUMMARY_TURNS,
    chars_per_turn: int = SUMMARY_CHARS_PER_TURN,
) -> str:
    """Render the last few turns as ``[ROLE]: content`` lines."""
    recent = list(messages)[-turns:] if turns > 0 else []
    return "\n".join(
        f"[{msg.role.upper()}]: {msg.content[:chars_per_turn]}" for msg in recent
    )


def build_single_pass_messages(messages: Sequence[ChatMessage]) -> list[ChatMessage]:
    """Persona system prompt followed by the conversation."""
    return [ChatMessage(role="system", content=get_socratic_prompt()), *messages]


def build_decompose_messages(messages: Sequence[ChatMessage]) -> list[ChatMessage]:
    return [ChatMessage(role="system", content=get_decompose_prompt()), *messages]


def build_critique_messages(analysis: str, conversation_summary: str) -> list[ChatMessage]:
    prompt = (
        get_critique_prompt()
        .replace("{analysis}", analysis)
        .replace("{conversation_summary}", conversation_summary)
    )
    return [
        ChatMessage(role="system", content=prompt),
        ChatMessage(role="user", content=CRITIQUE_REQUEST),
    ]


def build_refined_analysis(decomposition: str, critique: str) -> str:
    """Concatenate both analyses under labelled headers."""
    return f"{DECOMPOSITION_HEADER}\n{decomposition}\n\n{CRITIQUE_HEADER}\n{critique}"


def build_response_messages(
    refined_analysis: str,
    messages: Sequence[ChatMessage],
) -> list[ChatMessage]:
    system_prompt = (
        get_socratic_prompt()
        + "\n\n"
        + get_response_prompt().replace("{refined_analysis}", refined_analysis)
    )
    return [ChatMessage(role="system", content=system_prompt), *messages]
