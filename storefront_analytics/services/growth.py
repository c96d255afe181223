"""Period-over-period growth."""

from __future__ import annotations

from decimal import Decimal
from typing import Union

Number = Union[int, float, Decimal]


def growth_rate(current: Number, previous: Number) -> Decimal:
    """Percentage change from ``previous`` to ``current``.

    A zero baseline yields 100 for any positive current value and 0 otherwise.
    """
    cur = Decimal(str(current))
    prev = Decimal(str(previous))
    if prev == 0:
        return Decimal("100") if cur > 0 else Decimal("0")
    return (cur - prev) / prev * 100
