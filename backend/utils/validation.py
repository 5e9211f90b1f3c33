import re
from typing import Optional
from urllib.parse import urlparse

from exceptions import ValidationException


class InputValidator:

    CONTROL_CHARS_PATTERN = re.compile(r'[\x00-\x08\x0B\x0C\x0E-\x1F\x7F]')
    WHITESPACE_PATTERN = re.compile(r'\s+')

    MAX_TEXT_LENGTH = 20000
    MAX_URL_LENGTH = 2048

    @staticmethod
    def sanitize_text(value: Optional[str], field: str, max_length: int = MAX_TEXT_LENGTH) -> Optional[str]:
        if value is None:
            return None

        value = InputValidator.CONTROL_CHARS_PATTERN.sub('', str(value))
        value = InputValidator.WHITESPACE_PATTERN.sub(' ', value).strip()

        if len(value) > max_length:
            raise ValidationException(field, f"cannot exceed {max_length} characters")

        return value or None

    @staticmethod
    def sanitize_url(value: Optional[str], field: str) -> Optional[str]:
        if value is None:
            return None

        value = InputValidator.CONTROL_CHARS_PATTERN.sub('', str(value)).strip()
        if not value:
            return None

        if len(value) > InputValidator.MAX_URL_LENGTH:
            raise ValidationException(field, f"cannot exceed {InputValidator.MAX_URL_LENGTH} characters")

        parsed = urlparse(value)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ValidationException(field, "must be an absolute http(s) URL")

        return value

    @staticmethod
    def normalize_for_fingerprint(value: str) -> str:
        """Whitespace-insensitive form used for content identity. Case is preserved."""
        return InputValidator.WHITESPACE_PATTERN.sub(" ", value).strip()
