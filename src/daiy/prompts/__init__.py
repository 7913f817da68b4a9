"""Prompt management module.

Prompts live in text files next to this module. Any of them can be
overridden by placing a file with the same name in ``./prompts/``.
"""

from functools import lru_cache
from pathlib import Path

_PROMPTS_DIR = Path(__file__).parent


@lru_cache(maxsize=16)
def load_prompt(name: str) -> str:
    """Load a prompt from file.

    Search order:
    1. Current working directory: ./prompts/{name}.txt
    2. Package prompts directory: daiy/prompts/{name}.txt

    Args:
        name: Prompt name (without .txt extension)

    Returns:
        Prompt text with the trailing newline removed

    Raises:
        FileNotFoundError: If prompt file not found in any location
    """
    filename = f"{name}.txt"

    local_path = Path.cwd() / "prompts" / filename
    if local_path.exists():
        return local_path.read_text(encoding="utf-8").rstrip("\n")

    package_path = _PROMPTS_DIR / filename
    if package_path.exists():
        return package_path.read_text(encoding="utf-8").rstrip("\n")

    raise FileNotFoundError(
        f"Prompt '{name}' not found. Searched:\n"
        f"  - {local_path}\n"
        f"  - {package_path}"
    )


def get_socratic_prompt() -> str:
    """Persona prompt used for every tutoring response."""
    return load_prompt("socratic")


def get_decompose_prompt() -> str:
    """Instruction for the problem decomposition pass."""
    return load_prompt("decompose")


def get_critique_prompt() -> str:
    """Instruction for the self-critique pass.

    Contains ``{analysis}`` and ``{conversation_summary}`` placeholders.
    """
    return load_prompt("critique")


def get_response_prompt() -> str:
    """Instruction appended to the persona for the final response pass.

    Contains a ``{refined_analysis}`` placeholder.
    """
    return load_prompt("response")


def clear_cache() -> None:
    """Clear the prompt cache (useful after modifying prompt files)."""
    load_prompt.cache_clear()


__all__ = [
    "clear_cache",
    "get_critique_prompt",
    "get_decompose_prompt",
    "get_response_prompt",
    "get_socratic_prompt",
    "load_prompt",
]
