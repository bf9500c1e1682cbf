import pytest

from cchkit.vector_text import (
    DATA_TYPES,
    escape_string,
    format_value,
    parse_value,
    unescape_string,
)


@pytest.mark.parametrize("text", ["plain", "two\nlines", "c:\\dir\\file", "", "\n\n"])
def test_escape_round_trip(text):
    escaped = escape_string(text)
    assert "\n" not in escaped
    assert unescape_string(escaped) == text


def test_escape_newline():
    assert escape_string("a\nb") == "a\\nb"


def test_escape_backslash():
    assert escape_string("a\\b") == "a\\\\b"


def test_string_type_round_trip():
    text = "line\nwith\\backslash"
    assert parse_value(format_value(text, "string"), "string") == text


@pytest.mark.parametrize(
    "data_type,low,high",
    [
        ("int8", -128, 127),
        ("uint8", 0, 255),
        ("int16", -32768, 32767),
        ("uint16", 0, 65535),
        ("int32", -2147483648, 2147483647),
        ("uint32", 0, 4294967295),
        ("int64", -(2**63), 2**63 - 1),
        ("uint64", 0, 2**64 - 1),
    ],
)
def test_integer_bounds_round_trip(data_type, low, high):
    for value in (low, high):
        assert parse_value(format_value(value, data_type), data_type) == value


def test_too_large_message():
    with pytest.raises(ValueError, match='too large, max is "127"'):
        parse_value("128", "int8")


def test_too_small_message():
    with pytest.raises(ValueError, match='too small, min is "-128"'):
        parse_value("-129", "int8")


def test_unsigned_rejects_negative():
    with pytest.raises(ValueError, match="too small"):
        parse_value("-1", "uint16")


def test_int64_out_of_range():
    with pytest.raises(ValueError):
        parse_value(str(2**63), "int64")


def test_uint64_out_of_range():
    with pytest.raises(ValueError):
        parse_value(str(2**64), "uint64")


def test_integer_with_trailing_text_uses_prefix():
    assert parse_value(" 42abc", "int32") == 42


def test_not_a_number():
    with pytest.raises(ValueError):
        parse_value("abc", "int32")
    with pytest.raises(ValueError):
        parse_value("abc", "float64")


def test_unknown_data_type():
    with pytest.raises(ValueError, match='Unknown data type "int128"'):
        parse_value("1", "int128")
    with pytest.raises(ValueError):
        format_value(1, "int128")


def test_float64_round_trip():
    for value in (0.1, -3.25, 1e20, 123456.789):
        assert parse_value(format_value(value, "float64"), "float64") == value


def test_float32_round_trip_prints_short_form():
    value = parse_value("0.1", "float32")
    assert value != 0.1
    assert format_value(value, "float32") == "0.1"
    assert parse_value(format_value(value, "float32"), "float32") == value


def test_float32_overflow_is_infinite():
    value = parse_value("1e300", "float32")
    assert value == float("inf")


def test_format_integer_out_of_range():
    with pytest.raises(ValueError):
        format_value(256, "uint8")


def test_every_listed_data_type_parses():
    assert set(DATA_TYPES) == {
        "int8", "uint8", "int16", "uint16", "int32", "uint32",
        "int64", "uint64", "float32", "float64", "string",
    }
    for data_type in DATA_TYPES:
        expected = "7" if data_type == "string" else 7
        assert parse_value("7", data_type) == expected