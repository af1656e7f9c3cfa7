"""Human-readable duration parsing.

Accepts strings such as ``"300ms"``, ``"1.5h"`` or ``"2h45m"``: an optional
sign followed by one or more ``<number><unit>`` groups. Recognised units are
``ns``, ``us`` (also ``µs``/``μs``), ``ms``, ``s``, ``m`` and ``h``. The bare
string ``"0"`` means zero.
"""

from __future__ import annotations

import math
import re
from datetime import timedelta
from decimal import Decimal

from .exceptions import InvalidConfigurationError

NANOSECOND = 1
MICROSECOND = 1_000 * NANOSECOND
MILLISECOND = 1_000 * MICROSECOND
SECOND = 1_000 * MILLISECOND
MINUTE = 60 * SECOND
HOUR = 60 * MINUTE

# Upper bound on a maximum duration, expressed in nanoseconds (≈ 292 years).
MAX_DURATION_NS = 2**63 - 1
MAX_DURATION = timedelta(microseconds=MAX_DURATION_NS // MICROSECOND)

_UNITS: dict[str, int] = {
    "ns": NANOSECOND,
    "us": MICROSECOND,
    "µs": MICROSECOND,  # noqa: RUF001
    "μs": MICROSECOND,  # noqa: RUF001
    "ms": MILLISECOND,
    "s": SECOND,
    "m": MINUTE,
    "h": HOUR,
}

# Longest units first so "ms" wins over "m".
_UNIT_PATTERN = "|".join(sorted(map(re.escape, _UNITS), key=len, reverse=True))
_COMPONENT = re.compile(rf"(\d+(?:\.\d*)?|\.\d+)({_UNIT_PATTERN})")


def _invalid(value: object, reason: str) -> InvalidConfigurationError:
    return InvalidConfigurationError(
        f"invalid duration {value!r}: {reason}",
        field="max_duration",
        value=value,
    )


def parse_duration_ns(text: str) -> int:
    """Parse *text* into a signed number of nanoseconds."""
    if not isinstance(text, str):
        raise _invalid(text, "expected a string")

    raw = text.strip()
    sign = 1
    if raw[:1] in ("+", "-"):
        sign = -1 if raw[0] == "-" else 1
        raw = raw[1:]

    if raw == "0":
        return 0
    if not raw:
        raise _invalid(text, "empty duration")

    total = Decimal(0)
    pos = 0
    while pos < len(raw):
        match = _COMPONENT.match(raw, pos)
        if match is None:
            if raw[pos].isdigit() or raw[pos] == ".":
                raise _invalid(text, "missing unit")
            raise _invalid(text, f"unexpected {raw[pos:]!r}")
        number, unit = match.groups()
        total += Decimal(number) * _UNITS[unit]
        pos = match.end()

    return sign * int(total)


def to_nanoseconds(delta: timedelta) -> int:
    """Exact nanosecond count of *delta*."""
    micros = (delta.days * 86_400 + delta.seconds) * 1_000_000 + delta.microseconds
    return micros * MICROSECOND


def from_nanoseconds(nanoseconds: int) -> timedelta:
    """Convert nanoseconds to a ``timedelta``, truncating below a microsecond."""
    if nanoseconds < 0:
        return -timedelta(microseconds=-nanoseconds // MICROSECOND)
    return timedelta(microseconds=nanoseconds // MICROSECOND)


def duration_to_ns(value: str | timedelta | float) -> int:
    """Coerce *value* into a whole number of nanoseconds without losing precision.

    Strings use the duration syntax described in the module docstring,
    numbers are taken as seconds and ``timedelta`` instances are converted
    exactly.

    Raises:
        InvalidConfigurationError: if *value* cannot be interpreted, or a
            string or number lies outside ``±MAX_DURATION_NS``.
    """
    if isinstance(value, timedelta):
        return to_nanoseconds(value)
    if isinstance(value, bool):
        raise _invalid(value, "expected a duration, got a bool")
    if isinstance(value, int):
        nanoseconds = value * SECOND
    elif isinstance(value, float):
        if not math.isfinite(value):
            raise _invalid(value, "not a finite number")
        nanoseconds = int(Decimal(repr(value)) * SECOND)
    elif isinstance(value, str):
        nanoseconds = parse_duration_ns(value)
    else:
        raise _invalid(value, f"unsupported type {type(value).__name__}")

    if abs(nanoseconds) > MAX_DURATION_NS:
        raise _invalid(value, "out of range")
    return nanoseconds


def parse_duration(value: str | timedelta | float) -> timedelta:
    """Coerce *value* into a ``timedelta``.

    Same inputs as :func:`duration_to_ns`; ``timedelta`` instances pass
    through and anything finer than a microsecond is truncated.
    """
    if isinstance(value, timedelta):
        return value
    return from_nanoseconds(duration_to_ns(value))


def format_duration(delta: timedelta) -> str:
    """Render *delta* compactly, e.g. ``1h2m3.5s`` or ``250ms``."""
    return format_nanoseconds(to_nanoseconds(delta))


def format_nanoseconds(nanoseconds: int) -> str:
    """Render a nanosecond count the way :func:`format_duration` does."""
    if nanoseconds == 0:
        return "0s"
    sign = "-" if nanoseconds < 0 else ""
    nanoseconds = abs(nanoseconds)

    if nanoseconds < SECOND:
        for unit, size in (("ms", MILLISECOND), ("us", MICROSECOND)):
            if nanoseconds >= size:
                return f"{sign}{_trim(Decimal(nanoseconds) / size)}{unit}"
        return f"{sign}{nanoseconds}ns"

    hours, rest = divmod(nanoseconds, HOUR)
    minutes, rest = divmod(rest, MINUTE)
    parts = []
    if hours:
        parts.append(f"{hours}h")
    if hours or minutes:
        parts.append(f"{minutes}m")
    parts.append(f"{_trim(Decimal(rest) / SECOND)}s")
    return sign + "".join(parts)


def _trim(number: Decimal) -> str:
    text = format(number, "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text
