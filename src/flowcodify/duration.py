from __future__ import annotations

import re

from .errors import InvalidDuration

UNIT_MS: dict[str, int] = {
    "ms": 1,
    "s": 1000,
    "m": 60 * 1000,
    "h": 60 * 60 * 1000,
}

_PLAIN_MS_PATTERN = re.compile(r"^\d+$")
_PART_PATTERN = re.compile(r"(\d+(?:\.\d+)?)(ms|s|m|h)")


def is_valid_duration(value: object) -> bool:
    if not isinstance(value, str):
        return False
    text = value.strip().lower()
    if not text:
        return False
    if _PLAIN_MS_PATTERN.match(text):
        return True

    position = 0
    matched = False
    for match in _PART_PATTERN.finditer(text):
        if match.start() != position:
            return False
        matched = True
        position = match.end()
    return matched and position == len(text)


def parse_duration(value: str | int | float) -> int:
    """Convert ``"500ms"``, ``"2s"``, ``"1m30s"`` or a bare number into milliseconds.

    Numbers pass through unchanged (rounded to an int); digit-only strings are
    milliseconds.
    """
    if isinstance(value, bool):
        raise InvalidDuration(value)
    if isinstance(value, (int, float)):
        return int(round(value))
    if not isinstance(value, str) or not value.strip():
        raise InvalidDuration(value)

    text = value.strip().lower()
    if _PLAIN_MS_PATTERN.match(text):
        return int(text)
    if not is_valid_duration(text):
        raise InvalidDuration(value)

    total = 0.0
    for amount, unit in _PART_PATTERN.findall(text):
        total += float(amount) * UNIT_MS[unit]
    return int(round(total))


def format_duration(ms: int) -> str:
    if ms < 1000:
        return f"{ms}ms"

    hours = ms // 3_600_000
    minutes = (ms % 3_600_000) // 60_000
    seconds = (ms % 60_000) // 1000

    parts: list[str] = []
    if hours:
        parts.append(f"{hours}h")
    if minutes:
        parts.append(f"{minutes}m")
    if seconds:
        parts.append(f"{seconds}s")
    return "".join(parts) or "0s"
