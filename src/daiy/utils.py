"""Small string helpers used across the package."""

ELLIPSIS = "…"
MASK = "•" * 8


def truncate(text: str, max_length: int = 40) -> str:
    """Truncate a string to ``max_length`` characters, adding an ellipsis."""
    if len(text) <= max_length:
        return text
    return text[:max_length].rstrip() + ELLIPSIS


def generate_title(message: str) -> str:
    """Build a conversation title from the first user message."""
    cleaned = message.replace("\n", " ").strip()
    return truncate(cleaned, 50)


def mask_api_key(key: str) -> str:
    """Mask an API key for display and logging."""
    if len(key) <= 8:
        return MASK
    return key[:4] + "•" * 4 + key[-4:]
