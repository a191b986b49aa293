"""Currency rounding shared by every surfaced amount"""

import math


def round_currency(amount: float) -> float:
    """
    Round to 2 decimal places, halves rounding up.

    Scales by 100, rounds and scales back; applied only where an amount is
    surfaced, never to intermediate sums. Values too large to scale, and
    inf/NaN, come back unchanged.
    """
    scaled = amount * 100
    if not math.isfinite(scaled):
        return amount
    return math.floor(scaled + 0.5) / 100


def collection_rate(actual: float, expected: float) -> float:
    """Percentage of expected collected, to 2 decimals; 0 when nothing was expected"""
    if expected <= 0:
        return 0.0
    return round_currency(actual / expected * 100)


def round_percent(ratio: float) -> int:
    """Ratio as a whole percentage, halves rounding up; 0 for inf/NaN"""
    scaled = ratio * 100
    if not math.isfinite(scaled):
        return 0
    return math.floor(scaled + 0.5)
