from datetime import datetime
from typing import Dict, Iterable, List

from sqlalchemy import and_, func, or_, select, update

from admission_routing.models.agent import Agent
from admission_routing.repositories.base import BaseRepository


def role_predicates(role_ids: Iterable[str]) -> list:
    """Build one ``role_id = :id`` fragment per resolved role id.

    Absent ids are skipped by the caller; an empty list means there is
    nothing to match and no query should be issued.
    """
    return [Agent.role_id == role_id for role_id in role_ids]


def counter_increment(amount: int = 1):
    """``active_leads_count + amount``, initialising a NULL counter to 0."""
    return func.coalesce(Agent.active_leads_count, 0) + amount


class AgentRepository(BaseRepository):
    """Encapsulates every SQL query that touches the ``users`` table."""

    async def get_available_by_roles(self, role_ids: Iterable[str]) -> List[Agent]:
        """Return available agents holding any of *role_ids*.

        Single unpaginated read: ``(role_id = a OR role_id = b) AND
        is_available``, ordered by id so a fully tied roster always yields
        the same winner.  The admissions roster is small enough for this.
        """
        fragments = role_predicates(role_ids)
        if not fragments:
            return []
        result = await self._db.execute(
            select(Agent)
            .where(and_(or_(*fragments), Agent.is_available.is_(True)))
            .order_by(Agent.id)
        )
        return list(result.scalars().all())

    async def record_assignment(self, agent_id: str, assigned_at: datetime) -> int:
        """Bump the counter by one and stamp ``last_assigned_at``.

        Does not commit; returns the number of matched rows so the
        caller can abort its transaction when the agent vanished.
        """
        result = await self._db.execute(
            update(Agent)
            .where(Agent.id == agent_id)
            .values(
                active_leads_count=counter_increment(1),
                last_assigned_at=assigned_at,
            )
            .execution_options(synchronize_session=False)
        )
        return result.rowcount

    async def increment_counters(
        self, deltas: Dict[str, int], assigned_at: datetime
    ) -> None:
        """Apply one aggregated increment per agent (bulk path).  No commit."""
        for agent_id, amount in deltas.items():
            await self._db.execute(
                update(Agent)
                .where(Agent.id == agent_id)
                .values(
                    active_leads_count=counter_increment(amount),
                    last_assigned_at=assigned_at,
                )
                .execution_options(synchronize_session=False)
            )
