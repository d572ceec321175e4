"""
Type coercion for configuration values.

Every ``to_*`` function raises ``ValueError`` or ``TypeError`` when the value
cannot be represented; the settings store turns those into zero values.

Durations accept Go-style strings ("5s", "1h30m", "250ms", "-1.5h").
Bare numbers are read as seconds.
"""
from __future__ import annotations

import re
from datetime import date, datetime, time, timedelta, timezone
from typing import Any

_TRUE = {"1", "t", "true"}
_FALSE = {"0", "f", "false"}

_UNIT_US = {
    "ns": 0.001,
    "us": 1.0,
    "µs": 1.0,  # U+00B5 micro sign
    "μs": 1.0,  # U+03BC greek mu
    "ms": 1_000.0,
    "s": 1_000_000.0,
    "m": 60_000_000.0,
    "h": 3_600_000_000.0,
}
_NUM = r"(?:\d+(?:\.\d*)?|\.\d+)"
_UNIT = r"(?:ns|us|µs|μs|ms|s|m|h)"
_DURATION_RE = re.compile(rf"(?:{_NUM}{_UNIT})+")
_DURATION_PART = re.compile(rf"({_NUM})({_UNIT})")

_TIME_FORMATS = (
    "%Y-%m-%d %H:%M:%S %z",
    "%a, %d %b %Y %H:%M:%S %z",
    "%a, %d %b %Y %H:%M:%S %Z",
    "%d %b %Y %H:%M",
    "%d %b %Y",
    "%H:%M:%S",
)


def to_bool(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0
    if isinstance(value, str):
        low = value.strip().lower()
        if low in _TRUE:
            return True
        if low in _FALSE:
            return False
        raise ValueError(f"invalid boolean: {value!r}")
    raise TypeError(f"cannot convert {type(value).__name__} to bool")


def to_int(value: Any) -> int:
    if value is None:
        return 0
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value)
    if isinstance(value, str):
        txt = re.sub(r"\.0*$", "", value.strip())
        try:
            return int(txt, 0)
        except ValueError:
            return int(txt, 10)
    raise TypeError(f"cannot convert {type(value).__name__} to int")


def to_float(value: Any) -> float:
    if value is None:
        return 0.0
    if isinstance(value, (bool, int, float)):
        return float(value)
    if isinstance(value, str):
        return float(value.strip())
    raise TypeError(f"cannot convert {type(value).__name__} to float")


def to_string(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).decode("utf-8")
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, timedelta):
        return format_duration(value)
    raise TypeError(f"cannot convert {type(value).__name__} to str")


def to_time(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime.combine(value, time())
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return datetime.fromtimestamp(value, tz=timezone.utc)
    if isinstance(value, str):
        txt = value.strip()
        try:
            return datetime.fromisoformat(txt)
        except ValueError:
            pass
        for fmt in _TIME_FORMATS:
            try:
                return datetime.strptime(txt, fmt)
            except ValueError:
                continue
        raise ValueError(f"unable to parse time: {value!r}")
    raise TypeError(f"cannot convert {type(value).__name__} to datetime")


def to_duration(value: Any) -> timedelta:
    if value is None:
        return timedelta(0)
    if isinstance(value, timedelta):
        return value
    if isinstance(value, bool):
        raise TypeError("cannot convert bool to timedelta")
    if isinstance(value, (int, float)):
        return timedelta(seconds=value)
    if isinstance(value, str):
        txt = value.strip()
        if any(c.isalpha() or c in "µμ" for c in txt):
            return parse_duration(txt)
        return timedelta(seconds=float(txt))
    raise TypeError(f"cannot convert {type(value).__name__} to timedelta")


def parse_duration(text: str) -> timedelta:
    """Parse a Go-style duration string such as ``"1h15m30.5s"``."""
    s = text.strip()
    sign = 1
    if s[:1] in ("+", "-"):
        sign = -1 if s[0] == "-" else 1
        s = s[1:]
    if s == "0":
        return timedelta(0)
    if not s or not _DURATION_RE.fullmatch(s):
        raise ValueError(f"invalid duration: {text!r}")
    micros = 0.0
    for num, unit in _DURATION_PART.findall(s):
        micros += float(num) * _UNIT_US[unit]
    return timedelta(microseconds=sign * micros)


def format_duration(td: timedelta) -> str:
    """Inverse of parse_duration(), e.g. ``timedelta(minutes=90)`` -> ``"1h30m0s"``."""
    us = td // timedelta(microseconds=1)
    if us == 0:
        return "0s"
    sign = "-" if us < 0 else ""
    us = abs(us)
    if us < 1_000:
        return f"{sign}{us}µs"
    if us < 1_000_000:
        return f"{sign}{_trim(us / 1_000)}ms"
    hours, rem = divmod(us, 3_600_000_000)
    minutes, rem = divmod(rem, 60_000_000)
    out = sign
    if hours:
        out += f"{hours}h"
    if hours or minutes:
        out += f"{minutes}m"
    return out + f"{_trim(rem / 1_000_000)}s"


def _trim(x: float) -> str:
    return f"{x:.6f}".rstrip("0").rstrip(".")


def cast_like(value: Any, like: Any) -> Any:
    """Cast ``value`` to the type of ``like`` (used for env strings with typed defaults)."""
    if isinstance(like, bool):
        return to_bool(value)
    if isinstance(like, int):
        return to_int(value)
    if isinstance(like, float):
        return to_float(value)
    if isinstance(like, str):
        return to_string(value)
    if isinstance(like, datetime):
        return to_time(value)
    if isinstance(like, timedelta):
        return to_duration(value)
    if isinstance(like, list) and isinstance(value, str):
        return value.split()
    return value
