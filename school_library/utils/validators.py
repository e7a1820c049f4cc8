import re
from typing import Optional

from school_library.errors import ValidationError


class ISBNValidator:
    """ISBN-10 / ISBN-13 shape helpers used by the metadata lookup."""

    @staticmethod
    def normalize_isbn(raw: Optional[str]) -> str:
        if raw is None:
            return ""
        s = re.sub(r"[^0-9Xx]", "", raw)
        return s.upper()

    @staticmethod
    def looks_like_isbn(raw: Optional[str]) -> bool:
        """Shape check only: 13 digits, or 9 digits followed by a digit or 'X'."""
        if not raw or re.search(r"[^0-9Xx\-\s]", raw):
            return False
        s = ISBNValidator.normalize_isbn(raw)
        if len(s) == 10:
            return s[:9].isdigit() and (s[9].isdigit() or s[9] == "X")
        return len(s) == 13 and s.isdigit()


class TextValidator:
    """Required-field checks for catalog and borrower input."""

    @staticmethod
    def is_blank(text: Optional[str]) -> bool:
        return text is None or not str(text).strip()

    @staticmethod
    def require(value: Optional[str], field_name: str) -> str:
        if TextValidator.is_blank(value):
            raise ValidationError(f"{field_name} is required.")
        return str(value).strip()

    @staticmethod
    def sanitize_text(text: Optional[str]) -> str:
        if text is None:
            return ""
        # Strip HTML tags (Google Books descriptions carry <p>, <b>, <br> ...)
        cleaned = re.sub(r"<[^>]*>", "", text)
        return cleaned.strip()
