import logging
from datetime import datetime
from typing import Iterable, List, Optional, Sequence, Tuple

from sqlalchemy import and_, or_, select
from sqlalchemy.exc import SQLAlchemyError

from admission_routing.core.exceptions import AgentNotFoundError, LeadPersistenceError
from admission_routing.models.lead import Lead
from admission_routing.repositories.agent_repository import AgentRepository
from admission_routing.repositories.base import BaseRepository

logger = logging.getLogger(__name__)

DuplicateKey = Tuple[str, str, str]


class LeadRepository(BaseRepository):
    """Encapsulates every SQL query that touches the ``leads`` table."""

    async def get_by_id(self, lead_id: str) -> Optional[Lead]:
        """Return a single lead by primary key, or ``None``."""
        result = await self._db.execute(select(Lead).where(Lead.id == lead_id))
        return result.scalar_one_or_none()

    async def find_by_phone(self, phone: str) -> List[Lead]:
        """All leads for *phone*, served by ``idx_leads_phone``."""
        result = await self._db.execute(
            select(Lead).where(Lead.phone == phone).order_by(Lead.created_at)
        )
        return list(result.scalars().all())

    async def find_by_phones(self, phones: Iterable[str]) -> List[Lead]:
        """Batched variant of :meth:`find_by_phone` for bulk uploads."""
        phones = list(phones)
        if not phones:
            return []
        result = await self._db.execute(
            select(Lead).where(Lead.phone.in_(phones)).order_by(Lead.created_at)
        )
        return list(result.scalars().all())

    async def scan_for_duplicate(
        self, phone: str, admission_year: str, source_website: str
    ) -> Optional[Lead]:
        """Full three-way filtered read used when the phone lookup fails."""
        result = await self._db.execute(
            select(Lead)
            .where(
                Lead.phone == phone,
                Lead.admission_year == admission_year,
                Lead.source_website == source_website,
            )
            .order_by(Lead.created_at)
            .limit(1)
        )
        return result.scalars().first()

    async def scan_for_duplicates(self, keys: Sequence[DuplicateKey]) -> List[Lead]:
        """Batched variant of :meth:`scan_for_duplicate`."""
        if not keys:
            return []
        clauses = [
            and_(
                Lead.phone == phone,
                Lead.admission_year == year,
                Lead.source_website == source,
            )
            for phone, year, source in keys
        ]
        result = await self._db.execute(
            select(Lead).where(or_(*clauses)).order_by(Lead.created_at)
        )
        return list(result.scalars().all())

    async def create(self, lead: Lead) -> Lead:
        """Insert a lead on its own and commit."""
        self._db.add(lead)
        try:
            await self._db.commit()
        except SQLAlchemyError as exc:
            await self._db.rollback()
            raise LeadPersistenceError(f"Lead {lead.id} was not saved") from exc
        return lead

    async def create_with_assignment(
        self, lead: Lead, agent_id: str, assigned_at: datetime
    ) -> Lead:
        """Insert *lead* and bump *agent_id*'s counter in one transaction.

        Both effects commit together or not at all: any failure in either
        half rolls the whole transaction back before re-raising.
        """
        agents = AgentRepository(self.session)
        try:
            self._db.add(lead)
            await self._db.flush()
            matched = await agents.record_assignment(agent_id, assigned_at)
            if matched != 1:
                raise AgentNotFoundError(
                    f"Agent {agent_id} disappeared before assignment"
                )
            await self._db.commit()
        except SQLAlchemyError as exc:
            await self._db.rollback()
            raise LeadPersistenceError(
                f"Lead {lead.id} was not saved; assignment to {agent_id} rolled back"
            ) from exc
        except Exception:
            await self._db.rollback()
            raise
        return lead

    async def bulk_create(self, leads: Sequence[Lead]) -> int:
        """Insert one batch of leads in a single commit."""
        self._db.add_all(list(leads))
        try:
            await self._db.commit()
        except SQLAlchemyError:
            await self._db.rollback()
            raise
        return len(leads)
