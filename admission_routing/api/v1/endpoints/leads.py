from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from admission_routing.api.deps import (
    get_bulk_upload_service,
    get_current_user_id,
    get_lead_service,
)
from admission_routing.core.config import settings
from admission_routing.core.rate_limit import limiter
from admission_routing.schemas.bulk import BulkUploadRequest, BulkUploadResponse
from admission_routing.schemas.lead import (
    LeadCreate,
    LeadOut,
    LeadSubmission,
    LeadSubmitResponse,
)
from admission_routing.services.bulk_upload_service import BulkLeadUploadService
from admission_routing.services.lead_service import LeadService

router = APIRouter(prefix="/leads", tags=["Leads"])


@router.post("", response_model=LeadOut, status_code=201)
async def create_lead(
    lead_in: LeadCreate,
    user_id: str = Depends(get_current_user_id),
    service: LeadService = Depends(get_lead_service),
) -> LeadOut:
    """Create a lead from the staff dashboard.

    Routed to the best available agent; falls back to the creator when
    nobody is available.  Staff entries skip duplicate detection.
    """
    result = await service.create_lead_in_db(
        lead_in, is_internal=True, creator_id=user_id
    )
    return LeadOut.model_validate(result.lead)


@router.post(
    "/submit",
    response_model=LeadSubmitResponse,
    status_code=201,
    responses={200: {"model": LeadSubmitResponse}},
)
@limiter.limit(settings.PUBLIC_SUBMIT_RATE_LIMIT)
async def submit_lead(
    request: Request,
    submission: LeadSubmission,
    service: LeadService = Depends(get_lead_service),
):
    """Public website form submission.

    Rate-limited per client IP.  A repeat of an existing
    ``(phone, admission_year, source_website)`` returns 200 with the
    existing lead id instead of creating a new one.
    """
    result = await service.create_lead_in_db(submission.to_lead_data())
    if result.is_duplicate:
        return JSONResponse(
            status_code=200,
            content=LeadSubmitResponse(
                message="Lead already exists.", lead_id=result.lead.id
            ).model_dump(),
        )
    return LeadSubmitResponse(
        message="Lead submitted successfully.", lead_id=result.lead.id
    )


@router.post("/bulk", response_model=BulkUploadResponse)
async def bulk_upload_leads(
    upload: BulkUploadRequest,
    user_id: str = Depends(get_current_user_id),
    service: BulkLeadUploadService = Depends(get_bulk_upload_service),
) -> BulkUploadResponse:
    """Import parsed spreadsheet rows.

    Rows are validated, de-duplicated and dealt round-robin over the
    available agents; per-row problems come back in ``errors``.
    """
    result = await service.process_rows(upload.rows, creator_id=user_id)
    return BulkUploadResponse(**result)
