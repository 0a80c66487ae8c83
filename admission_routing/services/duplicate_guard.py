import logging
from typing import Dict, Iterable, Optional, Sequence

from sqlalchemy.exc import SQLAlchemyError

from admission_routing.core.cache import CacheService
from admission_routing.core.config import settings
from admission_routing.core.exceptions import DuplicateCheckError
from admission_routing.models.lead import Lead
from admission_routing.repositories.lead_repository import DuplicateKey, LeadRepository

logger = logging.getLogger(__name__)


def _key_of(lead: Lead) -> DuplicateKey:
    return (lead.phone, lead.admission_year, lead.source_website)


class DuplicateGuard:
    """Finds an existing lead for ``(phone, admission_year, source_website)``.

    Lookup order:

    1. Redis key written after every successful creation (fast path).
       A cached id is always confirmed against the database, and a stale
       key is dropped.
    2. Indexed read of every lead for the phone, filtered in memory by
       year and source.
    3. If that read fails, a full filtered scan on all three columns,
       logged as a warning.  If the scan fails too the error propagates
       as :class:`DuplicateCheckError`; uniqueness is never skipped.

    Only public submissions go through the guard; staff-created leads do
    not.
    """

    def __init__(
        self,
        lead_repo: LeadRepository,
        cache: Optional[CacheService] = None,
        ttl: int = settings.REDIS_DUPLICATE_CHECK_TTL,
    ) -> None:
        self._lead_repo = lead_repo
        self._cache: CacheService = cache or CacheService()
        self._ttl = ttl

    @staticmethod
    def cache_key(phone: str, admission_year: str, source_website: str) -> str:
        return f"lead_duplicate:{phone}:{admission_year}:{source_website}"

    # ------------------------------------------------------------------
    # Single lead
    # ------------------------------------------------------------------

    async def find_existing(
        self, phone: str, admission_year: str, source_website: str
    ) -> Optional[Lead]:
        key = (phone, admission_year, source_website)
        try:
            return await self._lookup(key)
        except SQLAlchemyError as exc:
            logger.warning(
                "Phone lookup failed for %s (%s); falling back to full scan",
                phone,
                exc,
            )
        return await self._scan(key)

    async def _lookup(self, key: DuplicateKey) -> Optional[Lead]:
        cache_key = self.cache_key(*key)
        cached_id = await self._cache.get(cache_key)
        if cached_id:
            lead = await self._lead_repo.get_by_id(cached_id)
            if lead is not None and _key_of(lead) == key:
                return lead
            await self._cache.delete(cache_key)

        for lead in await self._lead_repo.find_by_phone(key[0]):
            if _key_of(lead) == key:
                return lead
        return None

    async def _scan(self, key: DuplicateKey) -> Optional[Lead]:
        # A failed statement leaves the transaction aborted on PostgreSQL
        await self._lead_repo.rollback()
        try:
            return await self._lead_repo.scan_for_duplicate(*key)
        except SQLAlchemyError as exc:
            logger.error("Duplicate scan failed for %s", key[0], exc_info=True)
            raise DuplicateCheckError(
                f"Could not verify uniqueness for phone {key[0]}"
            ) from exc

    # ------------------------------------------------------------------
    # Batches (bulk upload)
    # ------------------------------------------------------------------

    async def find_existing_many(
        self, keys: Sequence[DuplicateKey]
    ) -> Dict[DuplicateKey, Lead]:
        """Resolve a batch of keys with one query; same fallback rules."""
        wanted = set(keys)
        if not wanted:
            return {}
        try:
            found = await self._lead_repo.find_by_phones({k[0] for k in wanted})
        except SQLAlchemyError as exc:
            logger.warning(
                "Batched phone lookup failed (%s); falling back to full scan", exc
            )
            await self._lead_repo.rollback()
            try:
                found = await self._lead_repo.scan_for_duplicates(sorted(wanted))
            except SQLAlchemyError as scan_exc:
                raise DuplicateCheckError(
                    f"Could not verify uniqueness for {len(wanted)} leads"
                ) from scan_exc
        return _first_matches(found, wanted)

    # ------------------------------------------------------------------
    # Fast-path bookkeeping
    # ------------------------------------------------------------------

    async def remember(self, lead: Lead) -> None:
        """Record a freshly created lead in the Redis fast path."""
        await self._cache.set(self.cache_key(*_key_of(lead)), lead.id, ttl=self._ttl)


def _first_matches(
    leads: Iterable[Lead], wanted: set
) -> Dict[DuplicateKey, Lead]:
    matches: Dict[DuplicateKey, Lead] = {}
    for lead in leads:
        key = _key_of(lead)
        if key in wanted and key not in matches:
            matches[key] = lead
    return matches
