"""Round-robin distribution of a whole batch over the candidate pool.

Cheaper than scoring every lead: the pool is sorted once by raw
``active_leads_count`` (no weightage, no timestamp tie-break) and leads
are dealt out in order.  Counter increments are aggregated per agent and
applied once at the end of the batch by the caller.
"""

import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import Any, Dict, List, Sequence

from admission_routing.models.agent import Agent
from admission_routing.services.candidate_loader import CandidateLoader
from admission_routing.services.role_cache import RoleCache

logger = logging.getLogger(__name__)


@dataclass
class BulkAssignment:
    leads: List[Dict[str, Any]]
    counter_deltas: Dict[str, int] = field(default_factory=dict)

    @property
    def unassigned_count(self) -> int:
        return sum(1 for lead in self.leads if lead.get("assigned_to") is None)


def distribute_round_robin(
    leads: Sequence[Dict[str, Any]], agents: Sequence[Any]
) -> BulkAssignment:
    """Deal *leads* over *agents* in least-loaded-first order.

    Lead ``i`` goes to the ``i % len(agents)``-th agent after a stable
    sort on ``active_leads_count``.  An empty pool leaves every lead
    unassigned.
    """
    if not agents:
        return BulkAssignment(leads=[{**lead, "assigned_to": None} for lead in leads])

    pool = sorted(agents, key=lambda a: a.active_leads_count or 0)
    deltas: Counter = Counter()
    assigned: List[Dict[str, Any]] = []

    for index, lead in enumerate(leads):
        agent = pool[index % len(pool)]
        assigned.append({**lead, "assigned_to": agent.id})
        deltas[agent.id] += 1

    return BulkAssignment(leads=assigned, counter_deltas=dict(deltas))


class BulkAssignmentService:
    """Loads the candidate pool once per batch and distributes over it."""

    def __init__(self, role_cache: RoleCache, candidate_loader: CandidateLoader) -> None:
        self._role_cache = role_cache
        self._candidate_loader = candidate_loader

    async def load_pool(self) -> List[Agent]:
        """Same eligibility as single-lead routing; failures give an empty pool."""
        role_ids = await self._role_cache.resolve_role_ids()
        result = await self._candidate_loader.load(role_ids)
        if not result.is_ok:
            logger.warning("Bulk assignment has no candidate pool: %s", result.error)
            return []
        return result.value

    async def assign(self, leads: Sequence[Dict[str, Any]]) -> BulkAssignment:
        pool = await self.load_pool()
        assignment = distribute_round_robin(leads, pool)
        logger.info(
            "Distributed %d lead(s) over %d agent(s)", len(leads), len(pool)
        )
        return assignment
