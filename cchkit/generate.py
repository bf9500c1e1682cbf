"""Generation of constant vectors and seeded random node, time and query lists."""

_ENGINE_MODULUS = 2**31 - 1
_ENGINE_MULTIPLIER = 16807
_ENGINE_MIN = 1
_ENGINE_MAX = _ENGINE_MODULUS - 1
_INT_MAX = 2**31 - 1


class _MinStdRand0:
    """Multiplicative congruential generator with multiplier 16807 modulo 2^31-1."""

    def __init__(self, seed):
        state = seed % _ENGINE_MODULUS
        self._state = state if state != 0 else 1

    def __call__(self):
        self._state = self._state * _ENGINE_MULTIPLIER % _ENGINE_MODULUS
        return self._state


def _uniform_int(engine, low, high):
    """Draw an integer in ``[low, high]`` by rejection-based downscaling."""
    urange = high - low
    urngrange = _ENGINE_MAX - _ENGINE_MIN
    if urngrange > urange:
        uerange = urange + 1
        scaling = urngrange // uerange
        past = uerange * scaling
        ret = engine() - _ENGINE_MIN
        while ret >= past:
            ret = engine() - _ENGINE_MIN
        ret //= scaling
    elif urngrange < urange:
        uerngrange = urngrange + 1
        while True:
            tmp = uerngrange * _uniform_int(engine, 0, urange // uerngrange)
            ret = tmp + (engine() - _ENGINE_MIN)
            if tmp <= ret <= urange:
                break
    else:
        ret = engine() - _ENGINE_MIN
    return ret + low


def _check_seed(seed):
    if not 0 <= seed < 2**32:
        raise ValueError("seed must be an unsigned 32-bit integer")


def _check_upper_count(name, count):
    if not 1 <= count <= _INT_MAX + 1:
        raise ValueError(f"{name} must be between 1 and {_INT_MAX + 1}")


def _check_length(name, length):
    if length < 0:
        raise ValueError(f"{name} must not be negative")


def constant_vector(size, value):
    """Return a list of ``size`` copies of ``value``."""
    _check_length("size", size)
    return [value] * size


def random_node_list(node_count, count, seed):
    """Return ``count`` node ids drawn uniformly from ``range(node_count)``."""
    _check_upper_count("node_count", node_count)
    _check_length("count", count)
    _check_seed(seed)
    engine = _MinStdRand0(seed)
    return [_uniform_int(engine, 0, node_count - 1) for _ in range(count)]


def random_source_times(time_count, period, seed):
    """Return ``time_count`` times drawn uniformly from ``range(period)``."""
    _check_upper_count("period", period)
    _check_length("time_count", time_count)
    _check_seed(seed)
    engine = _MinStdRand0(seed)
    return [_uniform_int(engine, 0, period - 1) for _ in range(time_count)]


def random_test_queries(node_count, query_count, seed):
    """Return ``(sources, targets)`` of ``query_count`` random node pairs.

    Each source is drawn right before its target from one shared generator.
    """
    _check_upper_count("node_count", node_count)
    _check_length("query_count", query_count)
    _check_seed(seed)
    engine = _MinStdRand0(seed)
    sources, targets = [], []
    for _ in range(query_count):
        sources.append(_uniform_int(engine, 0, node_count - 1))
        targets.append(_uniform_int(engine, 0, node_count - 1))
    return sources, targets