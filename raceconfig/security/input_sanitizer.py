"""Input sanitization for player names and output file names."""

import re
import unicodedata
from typing import Optional

from raceconfig.config import DEFAULT_MAX_PLAYER_NAME_LENGTH


class InputSanitizer:
    """Cleans names that end up inside generated YAML or on disk."""

    # Characters rejected in file names on at least one supported platform
    INVALID_FILENAME_CHARS = set('<>:"/\\|?*')

    # Maximum player name length (characters)
    MAX_NAME_LENGTH = DEFAULT_MAX_PLAYER_NAME_LENGTH

    def __init__(self, max_length: int = MAX_NAME_LENGTH) -> None:
        """Initialize sanitizer with configurable limits."""
        self.max_length = max_length

    def sanitize(self, input_text: str) -> str:
        """
        Sanitize a player name by:
        1. Normalizing unicode
        2. Removing control characters
        3. Stripping whitespace
        4. Truncating to max length
        """
        if not isinstance(input_text, str):
            raise TypeError(f"Input must be a string, got {type(input_text)}")

        # Normalize unicode (NFKC: compatibility decomposition + composition)
        normalized = unicodedata.normalize("NFKC", input_text)

        # Remove control characters, newlines and tabs included
        sanitized = re.sub(r"[\x00-\x1F\x7F]", "", normalized)

        sanitized = sanitized.strip()

        # Truncate to max length
        if len(sanitized) > self.max_length:
            sanitized = sanitized[: self.max_length].rstrip()

        return sanitized

    def sanitize_filename(self, name: str) -> str:
        """Drop characters that are not allowed in file names and trim; names of only dots become empty."""
        if not isinstance(name, str):
            raise TypeError(f"Input must be a string, got {type(name)}")
        cleaned = "".join(
            c for c in name if c not in self.INVALID_FILENAME_CHARS and unicodedata.category(c) != "Cc"
        )
        cleaned = cleaned.strip()
        # "." and ".." name the current and parent folders
        if not cleaned.strip("."):
            return ""
        return cleaned

    def is_safe(self, input_text: str) -> tuple[bool, Optional[str]]:
        """
        Check if a player name is usable.
        Returns (is_safe, error_message).
        """
        if not input_text or not input_text.strip():
            return False, "Input is empty"

        if len(input_text) > self.max_length:
            return False, f"Input exceeds maximum length of {self.max_length} characters"

        if re.search(r"[\x00-\x1F\x7F]", input_text):
            return False, "Input contains control characters"

        if not self.sanitize_filename(input_text):
            return False, "Input has no characters usable in a file name"

        return True, None


def sanitize_filename(name: str) -> str:
    """Drop characters that are not allowed in file names and trim."""
    return InputSanitizer().sanitize_filename(name)
