from __future__ import annotations

from datetime import timedelta

import pytest

from random_delay.primitives import (
    MAX_DURATION,
    MAX_DURATION_NS,
    InvalidConfigurationError,
    duration_to_ns,
    format_duration,
    format_nanoseconds,
    from_nanoseconds,
    parse_duration,
    parse_duration_ns,
    to_nanoseconds,
)


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("1h", timedelta(hours=1)),
        ("1m", timedelta(minutes=1)),
        ("1s", timedelta(seconds=1)),
        ("300ms", timedelta(milliseconds=300)),
        ("100us", timedelta(microseconds=100)),
        ("100µs", timedelta(microseconds=100)),  # noqa: RUF001
        ("1.5h", timedelta(minutes=90)),
        ("2h45m", timedelta(hours=2, minutes=45)),
        ("1h30m15s", timedelta(hours=1, minutes=30, seconds=15)),
        (".5s", timedelta(milliseconds=500)),
        ("+2s", timedelta(seconds=2)),
        ("-1s", timedelta(seconds=-1)),
        ("0", timedelta(0)),
        (" 5s ", timedelta(seconds=5)),
    ],
)
def test_parse_duration_strings(text: str, expected: timedelta) -> None:
    assert parse_duration(text) == expected


def test_parse_duration_ns_keeps_nanoseconds() -> None:
    assert parse_duration_ns("1500ns") == 1500
    assert parse_duration_ns("1ms500us") == 1_500_000
    assert duration_to_ns("1500ns") == 1500
    assert duration_to_ns("500ns") == 500


@pytest.mark.parametrize(
    "text",
    ["", "invalid", "10", "1x", "s", "1h 30m", "--1s", ".s", "1h30", "h1"],
)
def test_parse_duration_rejects_bad_syntax(text: str) -> None:
    with pytest.raises(InvalidConfigurationError) as exc_info:
        parse_duration(text)
    assert exc_info.value.field == "max_duration"
    assert exc_info.value.value == text


def test_parse_duration_rejects_out_of_range() -> None:
    with pytest.raises(InvalidConfigurationError, match="out of range"):
        parse_duration("3000000h")


def test_parse_duration_accepts_numbers_and_timedeltas() -> None:
    assert parse_duration(2) == timedelta(seconds=2)
    assert parse_duration(0.25) == timedelta(milliseconds=250)
    delta = timedelta(minutes=3)
    assert parse_duration(delta) is delta


@pytest.mark.parametrize("value", [True, None, [1], object()])
def test_parse_duration_rejects_other_types(value: object) -> None:
    with pytest.raises(InvalidConfigurationError):
        parse_duration(value)  # type: ignore[arg-type]


def test_invalid_configuration_is_a_value_error() -> None:
    with pytest.raises(ValueError, match="invalid duration"):
        parse_duration("nope")


@pytest.mark.parametrize(
    ("delta", "expected"),
    [
        (timedelta(0), "0s"),
        (timedelta(hours=1, minutes=2, seconds=3.5), "1h2m3.5s"),
        (timedelta(minutes=1), "1m0s"),
        (timedelta(hours=2), "2h0m0s"),
        (timedelta(milliseconds=250), "250ms"),
        (timedelta(microseconds=1500), "1.5ms"),
        (timedelta(microseconds=7), "7us"),
        (timedelta(seconds=-2), "-2s"),
    ],
)
def test_format_duration(delta: timedelta, expected: str) -> None:
    assert format_duration(delta) == expected


def test_nanosecond_conversions() -> None:
    assert to_nanoseconds(timedelta(seconds=1)) == 1_000_000_000
    assert to_nanoseconds(timedelta(seconds=-1)) == -1_000_000_000
    assert from_nanoseconds(1_999) == timedelta(microseconds=1)
    assert to_nanoseconds(MAX_DURATION) <= 2**63 - 1


def test_duration_to_ns_converts_every_input_exactly() -> None:
    assert duration_to_ns(timedelta(microseconds=3)) == 3_000
    assert duration_to_ns(2) == 2_000_000_000
    assert duration_to_ns(0.1) == 100_000_000
    assert duration_to_ns("-1ms") == -1_000_000
    assert duration_to_ns(f"{MAX_DURATION_NS}ns") == MAX_DURATION_NS


@pytest.mark.parametrize("value", [float("inf"), float("nan"), 1e300])
def test_duration_to_ns_rejects_unbounded_numbers(value: float) -> None:
    with pytest.raises(InvalidConfigurationError):
        duration_to_ns(value)


@pytest.mark.parametrize(
    ("nanoseconds", "expected"),
    [(500, "500ns"), (1_500, "1.5us"), (1_000_001, "1.000001ms"), (-7, "-7ns")],
)
def test_format_nanoseconds(nanoseconds: int, expected: str) -> None:
    assert format_nanoseconds(nanoseconds) == expected
