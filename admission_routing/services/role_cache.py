"""Process-wide, TTL-bounded cache of the routing role ids."""

import logging
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Iterable, List, Optional

from admission_routing.core.config import settings
from admission_routing.core.constants import (
    ADMISSION_EXECUTIVE_ROLE,
    ADMISSION_MANAGER_ROLE,
)
from admission_routing.core.result import RoutingResult

logger = logging.getLogger(__name__)

RoleFetcher = Callable[[], Awaitable[Iterable[Any]]]


@dataclass(frozen=True)
class RoleIds:
    """Resolved ids of the two routing-eligible roles (either may be absent)."""

    manager_id: Optional[str] = None
    exec_id: Optional[str] = None

    @classmethod
    def from_roles(cls, roles: Iterable[Any]) -> "RoleIds":
        by_name = {role.name: role.id for role in roles}
        return cls(
            manager_id=by_name.get(ADMISSION_MANAGER_ROLE),
            exec_id=by_name.get(ADMISSION_EXECUTIVE_ROLE),
        )

    @property
    def is_empty(self) -> bool:
        return self.manager_id is None and self.exec_id is None

    def present(self) -> List[str]:
        """The ids that resolved, manager first."""
        return [rid for rid in (self.manager_id, self.exec_id) if rid is not None]

    def role_name_for(self, role_id: Optional[str]) -> Optional[str]:
        if role_id is not None and role_id == self.manager_id:
            return ADMISSION_MANAGER_ROLE
        if role_id is not None and role_id == self.exec_id:
            return ADMISSION_EXECUTIVE_ROLE
        return None


class RoleCache:
    """Maps "Admission Manager" / "Admission Executive" to their ids.

    Refreshes lazily: the first call, or any call made once the entry is
    older than *ttl_seconds*, re-reads every role.  Inside the TTL the
    cached entry is returned even if a role was edited meanwhile.  A failed
    fetch yields empty ids and leaves the previous entry (and its age)
    untouched, so the next call retries.
    """

    def __init__(
        self,
        fetch_roles: RoleFetcher,
        ttl_seconds: float = settings.ROLE_CACHE_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._fetch_roles = fetch_roles
        self._ttl = ttl_seconds
        self._clock = clock
        self._entry: Optional[RoleIds] = None
        self._fetched_at: Optional[float] = None

    def _is_fresh(self) -> bool:
        if self._entry is None or self._fetched_at is None:
            return False
        return self._clock() - self._fetched_at < self._ttl

    async def try_resolve(self) -> RoutingResult[RoleIds]:
        """Resolve the role ids, reporting a fetch failure as an error."""
        if self._is_fresh():
            return RoutingResult.ok(self._entry)

        try:
            roles = await self._fetch_roles()
        except Exception as exc:
            logger.error("Role lookup failed: %s", exc, exc_info=True)
            return RoutingResult.err(f"role lookup failed: {exc}")

        ids = RoleIds.from_roles(roles)
        self._entry = ids
        self._fetched_at = self._clock()
        logger.debug(
            "Role cache refreshed (manager=%s, executive=%s)",
            ids.manager_id,
            ids.exec_id,
        )
        return RoutingResult.ok(ids)

    async def resolve_role_ids(self) -> RoleIds:
        """Return the cached ids, or empty ids when the lookup failed."""
        result = await self.try_resolve()
        return result.value if result.is_ok else RoleIds()

    def invalidate(self) -> None:
        """Drop the cached entry; the next resolve re-fetches."""
        self._entry = None
        self._fetched_at = None
