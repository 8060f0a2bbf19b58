import pytest

from flowcodify.duration import format_duration, is_valid_duration, parse_duration
from flowcodify.errors import InvalidDuration


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("500ms", 500),
        ("2s", 2000),
        ("1m", 60_000),
        ("1h", 3_600_000),
        ("1m30s", 90_000),
        ("1.5s", 1500),
        ("250", 250),
        (" 3S ", 3000),
        (750, 750),
        (12.6, 13),
    ],
)
def test_parse_duration(value: object, expected: int) -> None:
    assert parse_duration(value) == expected  # type: ignore[arg-type]


@pytest.mark.parametrize("value", ["", "soon", "5 s", "1m 30s", "ms", "-2s", True])
def test_parse_duration_rejects_invalid(value: object) -> None:
    with pytest.raises(InvalidDuration):
        parse_duration(value)  # type: ignore[arg-type]


def test_invalid_duration_is_a_value_error() -> None:
    with pytest.raises(ValueError, match='Invalid duration "later"'):
        parse_duration("later")


def test_is_valid_duration_only_accepts_strings() -> None:
    assert is_valid_duration("2m15s")
    assert not is_valid_duration(2000)
    assert not is_valid_duration("2x")


def test_format_duration() -> None:
    assert format_duration(450) == "450ms"
    assert format_duration(90_000) == "1m30s"
    assert format_duration(3_600_000) == "1h"
