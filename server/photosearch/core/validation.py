"""Input validation and sanitization utilities."""

import re
import unicodedata

# Control characters to remove (except newline, tab)
CONTROL_CHAR_PATTERN = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")

# Multiple whitespace pattern
MULTI_WHITESPACE_PATTERN = re.compile(r"\s+")


def normalize_text(text: str | None) -> str | None:
    """
    Normalize text input by:
    - Stripping leading/trailing whitespace
    - Collapsing multiple whitespace to single space
    - Removing null bytes and control characters
    - Normalizing Unicode to NFC form

    Returns None if input is None.
    """
    if text is None:
        return None

    # Normalize Unicode to NFC (canonical composition)
    text = unicodedata.normalize("NFC", text)

    text = CONTROL_CHAR_PATTERN.sub("", text)
    text = text.strip()
    text = MULTI_WHITESPACE_PATTERN.sub(" ", text)

    return text


def normalize_single_line(text: str | None) -> str | None:
    """
    Normalize text for single-line fields (no newlines allowed).
    """
    if text is None:
        return None

    text = text.replace("\n", " ").replace("\r", " ")

    return normalize_text(text)


def coerce_int(value: object, default: int) -> int:
    """Parse an integer query value, falling back to ``default`` when unparseable.

    Accepts ints and numeric strings ("3", " 3 "). Booleans, floats with a
    fractional part, and anything else fall back to the default.
    """
    if isinstance(value, bool):
        return default
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else default
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return default
    return default


def clamp(value: int, low: int, high: int | None = None) -> int:
    """Clamp ``value`` into ``[low, high]`` (no upper bound when ``high`` is None)."""
    if value < low:
        return low
    if high is not None and value > high:
        return high
    return value
