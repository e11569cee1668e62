from typing import Any, Optional


class TextValidator:
    """Field checks applied to incoming book values."""

    @staticmethod
    def has_value(value: Any) -> bool:
        # Truthiness rule: None and "" both count as missing. Whitespace does not.
        return isinstance(value, str) and bool(value)

    @staticmethod
    def validate_title(title: Optional[str]) -> bool:
        return TextValidator.has_value(title)

    @staticmethod
    def validate_author(author: Optional[str]) -> bool:
        return TextValidator.has_value(author)

    @staticmethod
    def pick(new: Optional[str], current: str) -> str:
        """Return ``new`` when it has a value, else keep ``current``."""
        return new if TextValidator.has_value(new) else current


class IDValidator:
    """Helpers for the numeric string ids assigned by the server."""

    @staticmethod
    def as_number(book_id: Any) -> Optional[int]:
        if not isinstance(book_id, str) or not (book_id.isascii() and book_id.isdigit()):
            return None
        return int(book_id)
