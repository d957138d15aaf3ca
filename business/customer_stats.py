"""Customer lifetime aggregates.

A checkout adds one visit and the transaction total; a void takes both
back out. Both results are floored at zero and the average ticket is
recomputed from the new values.
"""
from typing import NamedTuple, Optional


class CustomerStats(NamedTuple):
    total_visits: int
    lifetime_spend: float
    avg_ticket: float


def _avg(spend: float, visits: int) -> float:
    return round(spend / visits, 2) if visits > 0 else 0.0


def record_visit(total_visits: Optional[int], lifetime_spend: Optional[float],
                 amount: float) -> CustomerStats:
    """Aggregates after a completed checkout of ``amount``."""
    visits = (total_visits or 0) + 1
    spend = round(float(lifetime_spend or 0) + float(amount), 2)
    return CustomerStats(visits, spend, _avg(spend, visits))


def revert_visit(total_visits: Optional[int], lifetime_spend: Optional[float],
                 amount: float) -> CustomerStats:
    """Aggregates after voiding a checkout of ``amount``."""
    visits = max(0, (total_visits or 0) - 1)
    spend = max(0.0, round(float(lifetime_spend or 0) - float(amount), 2))
    return CustomerStats(visits, spend, _avg(spend, visits))
