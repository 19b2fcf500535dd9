"""Session title derivation."""

DEFAULT_TITLE = "New Chat"
TITLE_MAX_LENGTH = 50
TITLE_ELLIPSIS = "..."


def derive_title(text: str) -> str:
    """Title a session after its first user message.

    Keeps the first 50 characters and marks the cut with an ellipsis.
    """
    if len(text) > TITLE_MAX_LENGTH:
        return text[:TITLE_MAX_LENGTH] + TITLE_ELLIPSIS
    return text
