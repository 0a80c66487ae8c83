import logging
from typing import List

from admission_routing.core.result import RoutingResult
from admission_routing.models.agent import Agent
from admission_routing.repositories.agent_repository import AgentRepository
from admission_routing.services.role_cache import RoleIds

logger = logging.getLogger(__name__)

NO_ELIGIBLE_ROLES = "no eligible roles configured"


class CandidateLoader:
    """Fetches every available agent holding a routing-eligible role."""

    def __init__(self, agent_repo: AgentRepository) -> None:
        self._agent_repo = agent_repo

    async def load(self, role_ids: RoleIds) -> RoutingResult[List[Agent]]:
        if role_ids.is_empty:
            return RoutingResult.err(NO_ELIGIBLE_ROLES)

        try:
            agents = await self._agent_repo.get_available_by_roles(role_ids.present())
        except Exception as exc:
            logger.error("Candidate lookup failed: %s", exc, exc_info=True)
            await self._reset_session()
            return RoutingResult.err(f"candidate lookup failed: {exc}")

        return RoutingResult.ok(agents)

    async def _reset_session(self) -> None:
        # The lead write that follows shares this session; on PostgreSQL a
        # failed statement aborts the transaction until it is rolled back
        try:
            await self._agent_repo.rollback()
        except Exception:
            logger.warning("Rollback after failed candidate lookup also failed")
