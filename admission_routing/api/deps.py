"""API-layer dependency functions.

Re-exports the dependency factories from ``admission_routing.dependencies``
so that endpoint modules only need to import from ``admission_routing.api.deps``.
"""

from admission_routing.dependencies import (
    # Repository factories
    get_lead_repo,
    get_agent_repo,
    # Service factories
    get_role_cache,
    get_candidate_loader,
    get_assignment_manager,
    get_duplicate_guard,
    get_lead_service,
    get_bulk_assignment_service,
    get_bulk_upload_service,
    # Caller identity
    get_current_user_id,
    # Redis
    get_redis_client,
    get_cache_service,
)

__all__ = [
    "get_lead_repo",
    "get_agent_repo",
    "get_role_cache",
    "get_candidate_loader",
    "get_assignment_manager",
    "get_duplicate_guard",
    "get_lead_service",
    "get_bulk_assignment_service",
    "get_bulk_upload_service",
    "get_current_user_id",
    "get_redis_client",
    "get_cache_service",
]
