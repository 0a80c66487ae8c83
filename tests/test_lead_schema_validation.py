from datetime import datetime

import pytest
from pydantic import ValidationError

from admission_routing.schemas.bulk import BulkUploadRequest
from admission_routing.schemas.lead import LeadCreate, LeadSubmission

_VALID_INTERNAL = {
    "name": "Ravi",
    "phone": "9876543210",
    "college": "EGS Pillay Engineering College",
    "course": "B.E. ECE",
}

_VALID_SUBMISSION = {
    "name": "Kavya",
    "phone": "+919999999999",
    "admission_year": "2024",
    "source_website": "egspec.org",
}


class TestLeadCreate:
    def test_defaults(self):
        lead = LeadCreate(**_VALID_INTERNAL)
        assert lead.admission_year == str(datetime.now().year)
        assert lead.source_website == "internal_dashboard"
        assert lead.utm_params == {}

    @pytest.mark.parametrize("field", ["name", "phone", "college", "course"])
    def test_required_fields(self, field):
        payload = {k: v for k, v in _VALID_INTERNAL.items() if k != field}
        with pytest.raises(ValidationError):
            LeadCreate(**payload)

    @pytest.mark.parametrize("phone", ["12345", "98765-43210", "abcdefghij"])
    def test_invalid_phone(self, phone):
        with pytest.raises(ValidationError):
            LeadCreate(**{**_VALID_INTERNAL, "phone": phone})

    def test_invalid_email(self):
        with pytest.raises(ValidationError):
            LeadCreate(**{**_VALID_INTERNAL, "email": "not-an-email"})


class TestLeadSubmission:
    def test_extra_fields_become_form_data(self):
        submission = LeadSubmission(
            **_VALID_SUBMISSION, utm_medium="cpc", hostel_required="yes"
        )

        data = submission.to_lead_data()

        assert data["form_data"] == {"hostel_required": "yes"}
        assert data["utm_params"] == {
            "source": None,
            "medium": "cpc",
            "campaign": None,
        }
        assert "assigned_to" not in data

    @pytest.mark.parametrize(
        "field", ["name", "phone", "admission_year", "source_website"]
    )
    def test_dedup_fields_required(self, field):
        payload = {k: v for k, v in _VALID_SUBMISSION.items() if k != field}
        with pytest.raises(ValidationError):
            LeadSubmission(**payload)

    def test_year_must_have_four_digits(self):
        with pytest.raises(ValidationError):
            LeadSubmission(**{**_VALID_SUBMISSION, "admission_year": "24"})


class TestBulkUploadRequest:
    def test_rows_required(self):
        with pytest.raises(ValidationError):
            BulkUploadRequest(rows=[])
