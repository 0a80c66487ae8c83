import logging
import re
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple
from uuid import uuid4

from admission_routing.core.config import settings
from admission_routing.core.constants import (
    BULK_COLUMN_MAP,
    BULK_REQUIRED_COLUMNS,
    BULK_SOURCE_WEBSITE,
    LEAD_STATUS_NEW,
    MIN_PHONE_DIGITS,
)
from admission_routing.core.exceptions import DuplicateCheckError
from admission_routing.core.identifiers import generate_lead_reference
from admission_routing.models.lead import Lead
from admission_routing.repositories.agent_repository import AgentRepository
from admission_routing.repositories.lead_repository import LeadRepository
from admission_routing.services.bulk_assignment import BulkAssignmentService
from admission_routing.services.duplicate_guard import DuplicateGuard

logger = logging.getLogger(__name__)

_NON_DIGITS = re.compile(r"\D")

# Spreadsheet row numbers are 1-based and row 1 is the header
_FIRST_DATA_ROW = 2


def normalise_rows(
    rows: Sequence[Mapping[str, Any]],
) -> Tuple[List[Dict[str, Any]], List[Dict[str, Any]]]:
    """Turn raw spreadsheet rows into lead dicts.

    Returns ``(valid_leads, errors)``; each error is
    ``{"row": n, "message": ...}`` using spreadsheet row numbers.
    """
    valid: List[Dict[str, Any]] = []
    errors: List[Dict[str, Any]] = []

    for index, row in enumerate(rows):
        row_number = index + _FIRST_DATA_ROW
        if any(not row.get(column) for column in BULK_REQUIRED_COLUMNS):
            errors.append(
                {
                    "row": row_number,
                    "message": "Missing required fields (Name, Phone, Admission Year)",
                }
            )
            continue

        phone = _NON_DIGITS.sub("", str(row["Phone"]))
        if len(phone) < MIN_PHONE_DIGITS:
            errors.append({"row": row_number, "message": "Invalid Phone Number"})
            continue

        lead = {
            field: str(row.get(column) or "")
            for column, field in BULK_COLUMN_MAP.items()
        }
        lead["phone"] = phone
        lead["admission_year"] = str(row["Admission Year"])
        lead["source_website"] = row.get("Source Website") or BULK_SOURCE_WEBSITE
        lead["raw_row"] = row_number
        valid.append(lead)

    return valid, errors


class BulkLeadUploadService:
    """Validates, de-duplicates, assigns and stores a batch of parsed rows.

    Unlike single-lead creation the per-agent counter increments are
    applied after the leads are stored, as one aggregated update per
    agent.  If that update fails the leads stay assigned and the counters
    under-count; the missing deltas are logged for reconciliation.
    """

    def __init__(
        self,
        bulk_assignment: BulkAssignmentService,
        duplicate_guard: DuplicateGuard,
        lead_repo: LeadRepository,
        agent_repo: AgentRepository,
        batch_size: int = settings.BULK_INSERT_BATCH_SIZE,
        dedup_batch_size: int = settings.BULK_DEDUP_BATCH_SIZE,
    ) -> None:
        self._bulk_assignment = bulk_assignment
        self._duplicate_guard = duplicate_guard
        self._lead_repo = lead_repo
        self._agent_repo = agent_repo
        self._batch_size = batch_size
        self._dedup_batch_size = dedup_batch_size

    async def process_rows(
        self, rows: Sequence[Mapping[str, Any]], creator_id: Optional[str]
    ) -> Dict[str, Any]:
        logger.info("Starting bulk upload of %d row(s)", len(rows))

        valid, errors = normalise_rows(rows)
        if not valid:
            return {
                "success": False,
                "message": "No valid leads found",
                "stats": _stats(len(rows), 0, 0, len(errors), 0),
                "errors": errors,
            }

        unique, duplicates = await self.filter_duplicates(valid)
        logger.info("Unique leads to process: %d", len(unique))
        duplicate_errors = [
            {"row": lead["raw_row"], "message": lead["reason"]} for lead in duplicates
        ]

        if not unique:
            return {
                "success": True,
                "message": "All leads were duplicates",
                "stats": _stats(len(rows), 0, len(duplicates), len(errors), 0),
                "errors": errors + duplicate_errors,
            }

        assignment = await self._bulk_assignment.assign(unique)
        now = datetime.now(timezone.utc)
        inserted = await self._insert(assignment.leads, creator_id, now)
        await self._apply_counters(assignment.counter_deltas, now)

        return {
            "success": True,
            "message": "Bulk upload completed",
            "stats": _stats(
                len(rows),
                inserted,
                len(duplicates),
                len(errors),
                assignment.unassigned_count,
            ),
            "errors": errors + duplicate_errors,
        }

    async def filter_duplicates(
        self, leads: Sequence[Dict[str, Any]]
    ) -> Tuple[List[Dict[str, Any]], List[Dict[str, Any]]]:
        """Drop repeated phones within the file, then leads already stored."""
        in_file: List[Dict[str, Any]] = []
        duplicates: List[Dict[str, Any]] = []
        seen_phones = set()

        for lead in leads:
            if lead["phone"] in seen_phones:
                duplicates.append({**lead, "reason": "Duplicate in file"})
            else:
                seen_phones.add(lead["phone"])
                in_file.append(lead)

        unique: List[Dict[str, Any]] = []
        for start in range(0, len(in_file), self._dedup_batch_size):
            batch = in_file[start : start + self._dedup_batch_size]
            keys = [_duplicate_key(lead) for lead in batch]
            try:
                existing = await self._duplicate_guard.find_existing_many(keys)
            except DuplicateCheckError:
                # Rows are kept rather than lost; see DESIGN.md
                logger.error(
                    "Dedup check failed for %d row(s); treating them as unique",
                    len(batch),
                    exc_info=True,
                )
                existing = {}

            for lead, key in zip(batch, keys):
                if key in existing:
                    duplicates.append({**lead, "reason": "Already exists in DB"})
                else:
                    unique.append(lead)

        return unique, duplicates

    async def _insert(
        self,
        leads: Sequence[Dict[str, Any]],
        creator_id: Optional[str],
        now: datetime,
    ) -> int:
        rows = [
            Lead(
                id=str(uuid4()),
                lead_reference_id=generate_lead_reference(now),
                name=lead["name"],
                phone=lead["phone"],
                email=lead.get("email") or None,
                college=lead.get("college") or None,
                course=lead.get("course") or None,
                state=lead.get("state") or None,
                district=lead.get("district") or None,
                admission_year=lead["admission_year"],
                source_website=lead["source_website"],
                utm_params={},
                form_data={},
                assigned_to=lead.get("assigned_to"),
                created_by=creator_id,
                status=LEAD_STATUS_NEW,
                created_at=now,
                updated_at=now,
            )
            for lead in leads
        ]

        inserted = 0
        for start in range(0, len(rows), self._batch_size):
            inserted += await self._lead_repo.bulk_create(
                rows[start : start + self._batch_size]
            )
        return inserted

    async def _apply_counters(self, deltas: Dict[str, int], now: datetime) -> None:
        if not deltas:
            return
        try:
            await self._agent_repo.increment_counters(deltas, now)
            await self._agent_repo.commit()
        except Exception:
            await self._agent_repo.rollback()
            logger.error(
                "Agent counter update failed after leads were stored; "
                "counters under-count by %s",
                deltas,
                exc_info=True,
            )


def _duplicate_key(lead: Mapping[str, Any]) -> Tuple[str, str, str]:
    return (lead["phone"], lead["admission_year"], lead["source_website"])


def _stats(
    total: int, inserted: int, duplicates: int, errors: int, unassigned: int
) -> Dict[str, int]:
    return {
        "total": total,
        "inserted": inserted,
        "duplicates": duplicates,
        "errors": errors,
        "unassigned": unassigned,
    }
