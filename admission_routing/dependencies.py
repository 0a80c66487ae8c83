import logging
from typing import List, Optional

from fastapi import Depends, Header
from redis.asyncio import Redis
from sqlalchemy.ext.asyncio import AsyncSession

from admission_routing.core.config import settings
from admission_routing.core.database import AsyncSessionLocal, get_db
from admission_routing.core.exceptions import MissingActorError
from admission_routing.models.role import Role
from admission_routing.services.candidate_loader import CandidateLoader
from admission_routing.services.lead_assignment import LeadAssignmentManager
from admission_routing.services.role_cache import RoleCache

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Redis client factory
# ---------------------------------------------------------------------------


async def get_redis_client() -> Optional[Redis]:
    """Get an async Redis client, or ``None`` when Redis is unreachable."""
    try:
        client = Redis.from_url(
            settings.REDIS_URL,
            decode_responses=True,
        )
        await client.ping()
        return client
    except Exception:
        logger.warning("Redis unavailable – duplicate fast path disabled for this request")
        return None


# ---------------------------------------------------------------------------
# Repository factory functions (one per repository, each gets the shared db)
# ---------------------------------------------------------------------------


async def get_lead_repo(
    db: AsyncSession = Depends(get_db),
):
    from admission_routing.repositories.lead_repository import LeadRepository

    return LeadRepository(db)


async def get_agent_repo(
    db: AsyncSession = Depends(get_db),
):
    from admission_routing.repositories.agent_repository import AgentRepository

    return AgentRepository(db)


# ---------------------------------------------------------------------------
# Cache service factory
# ---------------------------------------------------------------------------


async def get_cache_service(
    redis_client: Optional[Redis] = Depends(get_redis_client),
):
    """Build a :class:`CacheService` backed by the shared Redis client."""
    from admission_routing.core.cache import CacheService

    return CacheService(redis_client=redis_client)


# ---------------------------------------------------------------------------
# Role cache (process-wide)
# ---------------------------------------------------------------------------


async def _fetch_roles() -> List[Role]:
    # Own session: the cache outlives any single request
    from admission_routing.repositories.role_repository import RoleRepository

    async with AsyncSessionLocal() as session:
        return await RoleRepository(session).list_all()


_role_cache = RoleCache(fetch_roles=_fetch_roles)


def get_role_cache() -> RoleCache:
    return _role_cache


# ---------------------------------------------------------------------------
# Service factory functions
# ---------------------------------------------------------------------------


async def get_candidate_loader(
    agent_repo=Depends(get_agent_repo),
) -> CandidateLoader:
    return CandidateLoader(agent_repo=agent_repo)


async def get_assignment_manager(
    role_cache: RoleCache = Depends(get_role_cache),
    candidate_loader: CandidateLoader = Depends(get_candidate_loader),
) -> LeadAssignmentManager:
    return LeadAssignmentManager(
        role_cache=role_cache,
        candidate_loader=candidate_loader,
    )


async def get_duplicate_guard(
    lead_repo=Depends(get_lead_repo),
    cache=Depends(get_cache_service),
):
    """Build a :class:`DuplicateGuard` over the request's lead repository."""
    from admission_routing.services.duplicate_guard import DuplicateGuard

    return DuplicateGuard(lead_repo=lead_repo, cache=cache)


async def get_lead_service(
    assignment_manager: LeadAssignmentManager = Depends(get_assignment_manager),
    duplicate_guard=Depends(get_duplicate_guard),
    lead_repo=Depends(get_lead_repo),
):
    """Build a :class:`LeadService` with injected dependencies."""
    from admission_routing.services.lead_service import LeadService

    return LeadService(
        assignment_manager=assignment_manager,
        duplicate_guard=duplicate_guard,
        lead_repo=lead_repo,
    )


async def get_bulk_assignment_service(
    role_cache: RoleCache = Depends(get_role_cache),
    candidate_loader: CandidateLoader = Depends(get_candidate_loader),
):
    from admission_routing.services.bulk_assignment import BulkAssignmentService

    return BulkAssignmentService(
        role_cache=role_cache,
        candidate_loader=candidate_loader,
    )


async def get_bulk_upload_service(
    bulk_assignment=Depends(get_bulk_assignment_service),
    duplicate_guard=Depends(get_duplicate_guard),
    lead_repo=Depends(get_lead_repo),
    agent_repo=Depends(get_agent_repo),
):
    """Build a :class:`BulkLeadUploadService` with injected dependencies."""
    from admission_routing.services.bulk_upload_service import BulkLeadUploadService

    return BulkLeadUploadService(
        bulk_assignment=bulk_assignment,
        duplicate_guard=duplicate_guard,
        lead_repo=lead_repo,
        agent_repo=agent_repo,
    )


# ---------------------------------------------------------------------------
# Caller identity
# ---------------------------------------------------------------------------


async def get_current_user_id(
    x_user_id: Optional[str] = Header(None),
) -> str:
    """Id of the staff member making the request.

    Authentication happens upstream; the gateway forwards the user id in
    the ``X-User-Id`` header.
    """
    if not x_user_id:
        raise MissingActorError()
    return x_user_id
