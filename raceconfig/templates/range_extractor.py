"""Recover numeric bounds documented in comments next to an option."""

import re
from functools import lru_cache
from typing import Optional

from raceconfig.config import DEFAULT_RANGE_WINDOW_LINES

# First pattern that matches wins, per side
MIN_PATTERNS = [
    re.compile(r"minimum\s+value\s+is\s+(?P<num>-?\d+)", re.IGNORECASE),
    re.compile(r"minimum\s*:\s*(?P<num>-?\d+)", re.IGNORECASE),
    re.compile(r"min(?:imum)?\s+value\s*:\s*(?P<num>-?\d+)", re.IGNORECASE),
]
MAX_PATTERNS = [
    re.compile(r"maximum\s+value\s+is\s+(?P<num>-?\d+)", re.IGNORECASE),
    re.compile(r"maximum\s*:\s*(?P<num>-?\d+)", re.IGNORECASE),
    re.compile(r"max(?:imum)?\s+value\s*:\s*(?P<num>-?\d+)", re.IGNORECASE),
]


@lru_cache(maxsize=256)
def _header_regex(key: str) -> re.Pattern:
    # Block key on a line of its own, optionally quoted
    return re.compile(
        rf"^(?P<indent>[ \t]*)(?P<q>['\"]?){re.escape(key)}(?P=q)[ \t]*:[ \t]*(?:#.*)?\r?$",
        re.MULTILINE,
    )


def extract_range(
    raw_text: str,
    game_name: str,
    option_key: str,
    window_lines: int = DEFAULT_RANGE_WINDOW_LINES,
) -> tuple[Optional[int], Optional[int]]:
    """
    Find "Minimum value is N" / "Maximum: N" style bounds below an option key.

    The game header must start a line; the option key is the first matching
    block key after it. Up to ``window_lines`` lines below the key are
    scanned, stopping early where the option's block ends (the next line
    indented no deeper than the key that is not blank or a comment).

    Args:
        raw_text: Full template text
        game_name: Game block key
        option_key: Option key inside the game block
        window_lines: Maximum number of lines to scan

    Returns:
        (min, max); either side is None when not documented
    """
    section = re.search(
        rf"^(?P<q>['\"]?){re.escape(game_name)}(?P=q)[ \t]*:[ \t]*(?:#.*)?\r?$",
        raw_text,
        re.MULTILINE,
    )
    if not section:
        return None, None

    option = _header_regex(option_key).search(raw_text, section.end())
    if not option:
        return None, None

    window = _option_window(raw_text[option.end():], len(option.group("indent")), window_lines)
    return _first_match(MIN_PATTERNS, window), _first_match(MAX_PATTERNS, window)


def _option_window(text: str, key_indent: int, window_lines: int) -> str:
    lines = text.split("\n")[1 : window_lines + 1]
    kept = []
    for line in lines:
        stripped = line.strip()
        if stripped and not stripped.startswith("#"):
            indent = len(line) - len(line.lstrip(" \t"))
            if indent <= key_indent:
                break
        kept.append(line)
    return "\n".join(kept)


def _first_match(patterns: list[re.Pattern], window: str) -> Optional[int]:
    for pattern in patterns:
        match = pattern.search(window)
        if match:
            return int(match.group("num"))
    return None
