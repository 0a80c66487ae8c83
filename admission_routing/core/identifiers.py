import secrets
from datetime import datetime, timedelta, timezone
from typing import Optional

from admission_routing.core.constants import IST_UTC_OFFSET_MINUTES, LEAD_REFERENCE_PREFIX

_IST = timezone(timedelta(minutes=IST_UTC_OFFSET_MINUTES))


def generate_lead_reference(now: Optional[datetime] = None) -> str:
    """Human-facing lead id: ``egsp-admission-YYYYMMDD-NNNNNN``.

    The date is the IST calendar day; the suffix is six random digits.
    """
    moment = now or datetime.now(timezone.utc)
    day = moment.astimezone(_IST).strftime("%Y%m%d")
    suffix = 100000 + secrets.randbelow(900000)
    return f"{LEAD_REFERENCE_PREFIX}-{day}-{suffix}"
