"""Unit tests for session title derivation."""

from t3chat.services.title_service import DEFAULT_TITLE, derive_title


class TestDeriveTitle:
    """Title is the first user message, cut at 50 characters."""

    def test_short_text_is_unchanged(self) -> None:
        assert derive_title("Explain recursion") == "Explain recursion"

    def test_exactly_fifty_characters_has_no_ellipsis(self) -> None:
        text = "a" * 50
        assert derive_title(text) == text

    def test_long_text_is_truncated_with_ellipsis(self) -> None:
        text = "b" * 51
        assert derive_title(text) == "b" * 50 + "..."

    def test_default_title(self) -> None:
        assert DEFAULT_TITLE == "New Chat"
