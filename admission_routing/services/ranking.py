"""Weighted load-balancing policy for picking a lead's agent.

Candidates are ordered by ``active_leads_count / weightage`` (lower
first).  Scores within ``tolerance`` of each other count as a tie, which
is broken by the oldest ``last_assigned_at`` (never-assigned agents
first) and then by the lower raw ``active_leads_count``.

Everything here is synchronous and side-effect free; the functions
accept ORM rows or any object exposing the same attributes.
"""

from datetime import datetime
from functools import cmp_to_key
from typing import Any, List, Optional, Sequence

from admission_routing.core.constants import (
    DEFAULT_AGENT_WEIGHTAGE,
    SCORE_TIE_TOLERANCE,
)


def _leads_count(agent: Any) -> int:
    return getattr(agent, "active_leads_count", None) or 0


def _weightage(agent: Any) -> float:
    weight = getattr(agent, "weightage", None)
    if weight is None or weight <= 0:
        return DEFAULT_AGENT_WEIGHTAGE
    return weight


def _assigned_ts(agent: Any) -> float:
    # Missing timestamp sorts as the epoch, i.e. ahead of everyone else
    value = getattr(agent, "last_assigned_at", None)
    if isinstance(value, datetime):
        return value.timestamp()
    if isinstance(value, (int, float)):
        return float(value)
    return 0.0


def score(agent: Any) -> float:
    """Load relative to declared capacity; lower is preferred."""
    return _leads_count(agent) / _weightage(agent)


def compare_candidates(
    a: Any, b: Any, tolerance: float = SCORE_TIE_TOLERANCE
) -> int:
    """Three-way comparison implementing the ranking order."""
    score_a, score_b = score(a), score(b)
    if abs(score_a - score_b) > tolerance:
        return -1 if score_a < score_b else 1

    ts_a, ts_b = _assigned_ts(a), _assigned_ts(b)
    if ts_a != ts_b:
        return -1 if ts_a < ts_b else 1

    count_a, count_b = _leads_count(a), _leads_count(b)
    return (count_a > count_b) - (count_a < count_b)


def rank(
    candidates: Sequence[Any], tolerance: float = SCORE_TIE_TOLERANCE
) -> List[Any]:
    """Return *candidates* best-first.  Full ties keep their input order."""
    return sorted(
        candidates,
        key=cmp_to_key(lambda a, b: compare_candidates(a, b, tolerance)),
    )


def pick_winner(
    candidates: Sequence[Any], tolerance: float = SCORE_TIE_TOLERANCE
) -> Optional[Any]:
    """The single best candidate, or ``None`` for an empty pool."""
    if not candidates:
        return None
    return rank(candidates, tolerance)[0]
