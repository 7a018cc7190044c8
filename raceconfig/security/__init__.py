"""Input sanitization module for RaceConfig."""

from raceconfig.security.input_sanitizer import InputSanitizer, sanitize_filename

__all__ = [
    "InputSanitizer",
    "sanitize_filename",
]
