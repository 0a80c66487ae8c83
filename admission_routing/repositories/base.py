from sqlalchemy.ext.asyncio import AsyncSession


class BaseRepository:
    """Holds the request's ``AsyncSession``.

    Repositories built over the same session share one transaction, which
    is what lets a lead insert and an agent counter update commit or roll
    back as a unit.
    """

    def __init__(self, db: AsyncSession) -> None:
        self._db = db

    @property
    def session(self) -> AsyncSession:
        return self._db

    async def flush(self) -> None:
        await self._db.flush()

    async def commit(self) -> None:
        await self._db.commit()

    async def rollback(self) -> None:
        await self._db.rollback()
