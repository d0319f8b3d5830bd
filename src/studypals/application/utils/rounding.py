import math


def round_half_up(value: float) -> int:
    """
    Round to the nearest integer, ties away from zero.

    Stored intervals were produced this way; built-in round() gives
    round(6.5) == 6.
    """
    if value < 0:
        return -math.floor(-value + 0.5)
    return math.floor(value + 0.5)
