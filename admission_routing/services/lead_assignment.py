import logging
from dataclasses import dataclass
from typing import Optional

from admission_routing.core.config import settings
from admission_routing.core.result import RoutingResult
from admission_routing.models.agent import Agent
from admission_routing.services import ranking
from admission_routing.services.candidate_loader import CandidateLoader
from admission_routing.services.role_cache import RoleCache

logger = logging.getLogger(__name__)

NO_AVAILABLE_AGENTS = "no available agents"


@dataclass(frozen=True)
class AssignedAgent:
    """Routing winner plus the resolved role name used for logging."""

    agent: Agent
    role_name: Optional[str]
    score: float

    @property
    def id(self) -> str:
        return self.agent.id

    @property
    def name(self) -> str:
        return self.agent.name


class LeadAssignmentManager:
    """Picks the agent that should receive the next lead.

    Runs strictly in order: resolve role ids (cached), load available
    candidates holding those roles, rank them with the weighted policy in
    :mod:`admission_routing.services.ranking`.

    Routing is fail-open.  :meth:`try_find_best_agent` reports why no
    agent was chosen; :meth:`find_best_agent` collapses every miss or
    failure to ``None`` so that lead creation continues as "unassigned".
    """

    def __init__(
        self,
        role_cache: RoleCache,
        candidate_loader: CandidateLoader,
        tolerance: float = settings.ASSIGNMENT_SCORE_TOLERANCE,
    ) -> None:
        self._role_cache = role_cache
        self._candidate_loader = candidate_loader
        self._tolerance = tolerance

    async def try_find_best_agent(self) -> RoutingResult[AssignedAgent]:
        roles = await self._role_cache.try_resolve()
        if not roles.is_ok:
            return RoutingResult.err(roles.error)
        role_ids = roles.value

        candidates = await self._candidate_loader.load(role_ids)
        if not candidates.is_ok:
            return RoutingResult.err(candidates.error)

        winner = ranking.pick_winner(candidates.value, self._tolerance)
        if winner is None:
            return RoutingResult.err(NO_AVAILABLE_AGENTS)

        return RoutingResult.ok(
            AssignedAgent(
                agent=winner,
                role_name=role_ids.role_name_for(winner.role_id),
                score=ranking.score(winner),
            )
        )

    async def find_best_agent(self) -> Optional[AssignedAgent]:
        """Return the winning agent, or ``None``.  Never raises."""
        try:
            result = await self.try_find_best_agent()
        except Exception:
            logger.error("Agent routing failed unexpectedly", exc_info=True)
            return None

        if not result.is_ok:
            logger.warning("No agent selected: %s", result.error)
            return None

        selected = result.value
        logger.info(
            "Routing winner %s (%s, score=%.2f)",
            selected.id,
            selected.role_name,
            selected.score,
        )
        return selected
