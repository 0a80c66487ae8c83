import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Mapping, Optional, Union
from uuid import uuid4

from pydantic import BaseModel

from admission_routing.core.constants import LEAD_STATUS_NEW
from admission_routing.core.exceptions import InvalidLeadDataError
from admission_routing.core.identifiers import generate_lead_reference
from admission_routing.models.lead import Lead
from admission_routing.repositories.lead_repository import LeadRepository
from admission_routing.services.duplicate_guard import DuplicateGuard
from admission_routing.services.lead_assignment import (
    AssignedAgent,
    LeadAssignmentManager,
)

logger = logging.getLogger(__name__)

# Payload keys copied onto the Lead row; anything else is ignored
LEAD_FIELDS = (
    "name",
    "phone",
    "email",
    "college",
    "course",
    "state",
    "district",
    "admission_year",
    "source_website",
    "utm_params",
    "form_data",
)

_DUPLICATE_KEY_FIELDS = ("phone", "admission_year", "source_website")


@dataclass
class LeadCreationResult:
    is_duplicate: bool
    lead: Lead
    assigned_agent: Optional[AssignedAgent] = None


class LeadService:
    """Creates leads and routes them to agents.

    Dependencies are injected via the constructor; the service itself
    holds no state between calls.
    """

    def __init__(
        self,
        assignment_manager: LeadAssignmentManager,
        duplicate_guard: DuplicateGuard,
        lead_repo: LeadRepository,
    ) -> None:
        self._assignment_manager = assignment_manager
        self._duplicate_guard = duplicate_guard
        self._lead_repo = lead_repo

    async def create_lead_in_db(
        self,
        lead_data: Union[Mapping[str, Any], BaseModel],
        is_internal: bool = False,
        creator_id: Optional[str] = None,
    ) -> LeadCreationResult:
        """Create one lead, routing it to the best available agent.

        Steps:
        1. Public submissions only: return the existing lead if
           ``(phone, admission_year, source_website)`` was seen before.
           Routing is not attempted for a duplicate.
        2. Unless the payload already names ``assigned_to``, ask the
           assignment manager for a winner.  No winner means the lead
           goes to *creator_id* for internal submissions and stays
           unassigned otherwise.
        3. Persist.  With a routing winner the lead insert and the
           agent's counter bump run as one transaction; otherwise only
           the lead is written.

        Payloads are expected to be schema-validated already.

        Raises:
            InvalidLeadDataError: If a de-duplication field is missing.
            DuplicateCheckError: If the uniqueness check could not run.
            LeadPersistenceError: If the write was rolled back.
            AgentNotFoundError: If the winner vanished before the write.
        """
        data = _normalise(lead_data)

        if not is_internal:
            missing = [f for f in _DUPLICATE_KEY_FIELDS if not data.get(f)]
            if missing:
                raise InvalidLeadDataError(
                    f"Missing required fields: {', '.join(missing)}"
                )
            existing = await self._duplicate_guard.find_existing(
                data["phone"], data["admission_year"], data["source_website"]
            )
            if existing is not None:
                logger.info(
                    "Duplicate submission for %s matched lead %s",
                    data["phone"],
                    existing.id,
                )
                return LeadCreationResult(is_duplicate=True, lead=existing)

        assigned_to: Optional[str] = data.get("assigned_to")
        winner: Optional[AssignedAgent] = None

        if not assigned_to:
            winner = await self._assignment_manager.find_best_agent()
            if winner is not None:
                assigned_to = winner.id
                logger.info("Auto-assigning lead to %s (%s)", winner.name, winner.id)
            elif is_internal and creator_id:
                assigned_to = creator_id
                logger.warning(
                    "No available agents; assigning lead to creator %s", creator_id
                )
            else:
                logger.warning("No available agents for public lead")

        now = datetime.now(timezone.utc)
        lead = Lead(
            **{field: data[field] for field in LEAD_FIELDS if field in data},
            id=str(uuid4()),
            lead_reference_id=generate_lead_reference(now),
            assigned_to=assigned_to,
            created_by=creator_id,
            status=LEAD_STATUS_NEW,
            created_at=now,
            updated_at=now,
        )
        if lead.utm_params is None:
            lead.utm_params = {}
        if lead.form_data is None:
            lead.form_data = {}

        if winner is not None:
            await self._lead_repo.create_with_assignment(
                lead, winner.id, assigned_at=now
            )
        else:
            await self._lead_repo.create(lead)

        await self._duplicate_guard.remember(lead)

        return LeadCreationResult(is_duplicate=False, lead=lead, assigned_agent=winner)


def _normalise(lead_data: Union[Mapping[str, Any], BaseModel]) -> Dict[str, Any]:
    if isinstance(lead_data, BaseModel):
        return lead_data.model_dump()
    return dict(lead_data)
