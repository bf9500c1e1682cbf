"""Text form of the elements of typed binary vectors, one element per line."""

import math
import re
import struct

_INTEGER_RANGES = {
    "int8": (-(2**7), 2**7 - 1),
    "uint8": (0, 2**8 - 1),
    "int16": (-(2**15), 2**15 - 1),
    "uint16": (0, 2**16 - 1),
    "int32": (-(2**31), 2**31 - 1),
    "uint32": (0, 2**32 - 1),
    "int64": (-(2**63), 2**63 - 1),
    "uint64": (0, 2**64 - 1),
}

# Significant digits used when printing floating point values.
_FLOAT_PRECISION = {"float32": 7, "float64": 16}

DATA_TYPES = (*_INTEGER_RANGES, *_FLOAT_PRECISION, "string")

_INT64_MIN, _INT64_MAX = _INTEGER_RANGES["int64"]
_UINT64_MAX = _INTEGER_RANGES["uint64"][1]

_INTEGER_PREFIX = re.compile(r"\s*([+-]?\d+)")
_FLOAT_PREFIX = re.compile(
    r"\s*([+-]?(?:(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?|inf(?:inity)?|nan))",
    re.IGNORECASE,
)


def escape_string(text):
    """Escape backslashes and newlines so that ``text`` fits on one line."""
    return text.replace("\\", "\\\\").replace("\n", "\\n")


def unescape_string(text):
    """Undo the escaping of backslashes and newlines in one line of text."""
    return text.replace("\\\\", "\\").replace("\\n", "\n")


def _leading_integer(line):
    match = _INTEGER_PREFIX.match(line)
    if match is None:
        raise ValueError(f'"{line}" is not a number')
    return int(match.group(1))


def _to_float32(value):
    try:
        return struct.unpack("f", struct.pack("f", value))[0]
    except OverflowError:
        return math.copysign(math.inf, value)


def _parse_float(line, data_type):
    match = _FLOAT_PREFIX.match(line)
    if match is None:
        raise ValueError(f'"{line}" is not a number')
    value = float(match.group(1))
    return _to_float32(value) if data_type == "float32" else value


def _parse_uint64(line):
    value = _leading_integer(line)
    if value < 0:
        if -value > _UINT64_MAX:
            raise ValueError(f'The number "{line}" is out of range')
        value %= 2**64
    if value > _UINT64_MAX:
        raise ValueError(f'The number "{line}" is out of range')
    return value


def parse_value(line, data_type):
    """Parse one line of text as an element of the given data type."""
    if data_type == "string":
        return unescape_string(line)
    if data_type in _FLOAT_PRECISION:
        return _parse_float(line, data_type)
    if data_type == "uint64":
        return _parse_uint64(line)
    bounds = _INTEGER_RANGES.get(data_type)
    if bounds is None:
        raise ValueError(f'Unknown data type "{data_type}"')
    value = _leading_integer(line)
    if not _INT64_MIN <= value <= _INT64_MAX:
        raise ValueError(f'The number "{line}" is out of range')
    low, high = bounds
    if value < low:
        raise ValueError(f'The number "{line}" is too small, min is "{low}"')
    if value > high:
        raise ValueError(f'The number "{line}" is too large, max is "{high}"')
    return value


def format_value(value, data_type):
    """Format one element of the given data type as a line of text."""
    if data_type == "string":
        return escape_string(value)
    precision = _FLOAT_PRECISION.get(data_type)
    if precision is not None:
        return f"{float(value):.{precision}g}"
    bounds = _INTEGER_RANGES.get(data_type)
    if bounds is None:
        raise ValueError(f'Unknown data type "{data_type}"')
    low, high = bounds
    if not low <= value <= high:
        raise ValueError(f"{value} does not fit into {data_type}")
    return str(int(value))