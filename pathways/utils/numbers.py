"""Numeric helpers shared by the analytics engines."""
from decimal import Decimal, ROUND_HALF_UP, localcontext


def round_half_up(value: float, digits: int = 0) -> float:
    """Round with halves going away from zero (2.5 -> 3, 12.25 -> 12.3).

    The builtin ``round`` uses banker's rounding, which would report 12 for
    a 12.5% slow-learner share.
    """
    number = Decimal(str(value))
    if not number.is_finite():
        return float(number)
    quantum = Decimal(1).scaleb(-digits)
    with localcontext() as ctx:
        ctx.prec = max(ctx.prec, number.adjusted() + digits + 2)
        return float(number.quantize(quantum, rounding=ROUND_HALF_UP))


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))
