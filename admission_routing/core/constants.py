from typing import Dict, Tuple

ADMISSION_MANAGER_ROLE: str = "Admission Manager"
ADMISSION_EXECUTIVE_ROLE: str = "Admission Executive"

# Routing only ever creates leads in this state
LEAD_STATUS_NEW: str = "new"

DEFAULT_AGENT_WEIGHTAGE: int = 1

# Scores closer than this are treated as equal by the ranking policy
SCORE_TIE_TOLERANCE: float = 0.01

# Lead reference ids carry the calendar date in IST
LEAD_REFERENCE_PREFIX: str = "egsp-admission"
IST_UTC_OFFSET_MINUTES: int = 330

INTERNAL_SOURCE_WEBSITE: str = "internal_dashboard"
BULK_SOURCE_WEBSITE: str = "bulk_upload"
MIN_PHONE_DIGITS: int = 10

# Spreadsheet column headers -> lead fields for bulk rows
BULK_COLUMN_MAP: Dict[str, str] = {
    "Name": "name",
    "Phone": "phone",
    "Email": "email",
    "College": "college",
    "Course": "course",
    "State": "state",
    "District": "district",
    "Admission Year": "admission_year",
    "Source Website": "source_website",
}

BULK_REQUIRED_COLUMNS: Tuple[str, ...] = ("Name", "Phone", "Admission Year")
