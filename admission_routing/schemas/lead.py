"""Lead-specific Pydantic schemas (internal create, public submit, response)."""

from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from admission_routing.core.constants import INTERNAL_SOURCE_WEBSITE

_PHONE_PATTERN = r"^\+?\d{10,15}$"
_YEAR_PATTERN = r"^\d{4}$"


# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class LeadCreate(BaseModel):
    """Lead entered by a staff member from the dashboard."""

    name: str = Field(..., min_length=1)
    phone: str = Field(..., pattern=_PHONE_PATTERN)
    email: Optional[EmailStr] = None
    college: str = Field(..., min_length=1)
    course: str = Field(..., min_length=1)
    state: Optional[str] = None
    district: Optional[str] = None
    admission_year: str = Field(
        default_factory=lambda: str(datetime.now().year), pattern=_YEAR_PATTERN
    )
    source_website: str = INTERNAL_SOURCE_WEBSITE
    utm_params: Dict[str, Any] = Field(default_factory=dict)


class LeadSubmission(BaseModel):
    """Public website form submission.

    Unknown form fields are accepted and kept as ``form_data``.
    """

    model_config = ConfigDict(extra="allow")

    name: str = Field(..., min_length=1)
    phone: str = Field(..., pattern=_PHONE_PATTERN)
    admission_year: str = Field(..., pattern=_YEAR_PATTERN)
    source_website: str = Field(..., min_length=1)
    email: Optional[EmailStr] = None
    college: Optional[str] = None
    course: Optional[str] = None
    state: Optional[str] = None
    district: Optional[str] = None
    utm_source: Optional[str] = None
    utm_medium: Optional[str] = None
    utm_campaign: Optional[str] = None

    def to_lead_data(self) -> Dict[str, Any]:
        """Fold UTM fields and extra form fields into the lead payload."""
        return {
            "name": self.name,
            "phone": self.phone,
            "email": self.email,
            "college": self.college,
            "course": self.course,
            "state": self.state,
            "district": self.district,
            "admission_year": self.admission_year,
            "source_website": self.source_website,
            "utm_params": {
                "source": self.utm_source,
                "medium": self.utm_medium,
                "campaign": self.utm_campaign,
            },
            "form_data": dict(self.model_extra or {}),
        }


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class LeadOut(BaseModel):
    """Lead as returned to staff after creation."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    lead_reference_id: str
    name: str
    phone: str
    email: Optional[str] = None
    college: Optional[str] = None
    course: Optional[str] = None
    state: Optional[str] = None
    district: Optional[str] = None
    admission_year: str
    source_website: str
    assigned_to: Optional[str] = None
    created_by: Optional[str] = None
    status: str
    created_at: Optional[datetime] = None


class LeadSubmitResponse(BaseModel):
    """Response body for the public submission endpoint."""

    message: str
    lead_id: str
