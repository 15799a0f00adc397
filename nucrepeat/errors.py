import numbers


class InvalidConfig(ValueError):
    """Raised for analysis parameters that cannot produce a result."""


def check_min_length(min_length) -> int:
    """Validate the minimum repeat length once per pipeline."""
    if isinstance(min_length, bool) or not isinstance(min_length, numbers.Integral):
        raise InvalidConfig(f"min_length must be an integer, got {min_length!r}")
    if min_length < 1:
        raise InvalidConfig(f"min_length must be at least 1, got {min_length}")
    return int(min_length)
