"""Role repository – read-only access to the ``roles`` table."""

from typing import List

from sqlalchemy import select

from admission_routing.models.role import Role
from admission_routing.repositories.base import BaseRepository


class RoleRepository(BaseRepository):
    """Encapsulates queries against the ``roles`` table."""

    async def list_all(self) -> List[Role]:
        """Return every role; the table holds a handful of rows."""
        result = await self._db.execute(select(Role))
        return list(result.scalars().all())
