from datetime import date, datetime, timedelta, timezone

import pytest

from layercfg import casting


@pytest.mark.parametrize(
    "text,expected",
    [
        ("5s", timedelta(seconds=5)),
        ("1h30m", timedelta(hours=1, minutes=30)),
        ("250ms", timedelta(milliseconds=250)),
        ("1.5h", timedelta(minutes=90)),
        ("-2m", timedelta(minutes=-2)),
        ("1m30.5s", timedelta(seconds=90.5)),
        ("10us", timedelta(microseconds=10)),
        ("0", timedelta(0)),
    ],
)
def test_parse_duration(text, expected):
    assert casting.parse_duration(text) == expected


@pytest.mark.parametrize("text", ["", "5", "5x", "h", "1h 30m", "--5s"])
def test_parse_duration_rejects_garbage(text):
    with pytest.raises(ValueError):
        casting.parse_duration(text)


def test_format_duration():
    assert casting.format_duration(timedelta(seconds=5)) == "5s"
    assert casting.format_duration(timedelta(minutes=90)) == "1h30m0s"
    assert casting.format_duration(timedelta(milliseconds=250)) == "250ms"
    assert casting.format_duration(timedelta(0)) == "0s"
    assert casting.format_duration(timedelta(seconds=-3)) == "-3s"


def test_to_duration_numbers_are_seconds():
    assert casting.to_duration(30) == timedelta(seconds=30)
    assert casting.to_duration("2.5") == timedelta(seconds=2.5)
    assert casting.to_duration("30s") == timedelta(seconds=30)
    with pytest.raises(TypeError):
        casting.to_duration(True)


def test_to_bool():
    assert casting.to_bool("true") is True
    assert casting.to_bool("T") is True
    assert casting.to_bool("0") is False
    assert casting.to_bool(2) is True
    assert casting.to_bool(None) is False
    with pytest.raises(ValueError):
        casting.to_bool("maybe")


def test_to_int():
    assert casting.to_int("42") == 42
    assert casting.to_int("4.0") == 4
    assert casting.to_int("0x10") == 16
    assert casting.to_int(3.9) == 3
    assert casting.to_int(True) == 1
    with pytest.raises(ValueError):
        casting.to_int("forty")
    with pytest.raises(TypeError):
        casting.to_int([1])


def test_to_float_and_string():
    assert casting.to_float("2.4") == pytest.approx(2.4)
    assert casting.to_float(1) == 1.0
    assert casting.to_string(True) == "true"
    assert casting.to_string(2.4) == "2.4"
    assert casting.to_string(None) == ""
    assert casting.to_string(timedelta(seconds=5)) == "5s"
    with pytest.raises(TypeError):
        casting.to_string({"a": 1})


def test_to_time():
    assert casting.to_time("2021-09-11 12:34:56") == datetime(2021, 9, 11, 12, 34, 56)
    assert casting.to_time("2021-09-11T12:34:56+00:00") == datetime(2021, 9, 11, 12, 34, 56, tzinfo=timezone.utc)
    assert casting.to_time(date(2021, 9, 11)) == datetime(2021, 9, 11)
    assert casting.to_time(0) == datetime(1970, 1, 1, tzinfo=timezone.utc)
    with pytest.raises(ValueError):
        casting.to_time("not a time")


def test_cast_like_follows_default_type():
    assert casting.cast_like("9090", 8080) == 9090
    assert casting.cast_like("false", True) is False
    assert casting.cast_like("1.5", 0.5) == 1.5
    assert casting.cast_like("10s", timedelta(0)) == timedelta(seconds=10)
    assert casting.cast_like("a b", []) == ["a", "b"]
