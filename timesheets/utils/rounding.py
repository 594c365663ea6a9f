import math


def round_hours(value: float) -> float:
    """Two decimal places, halves rounded up (0.125 -> 0.13)."""
    return math.floor(value * 100 + 0.5) / 100
