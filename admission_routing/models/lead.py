from uuid import uuid4

from sqlalchemy import JSON, Column, DateTime, ForeignKey, Index, String
from sqlalchemy.sql import func

from admission_routing.models.base import Base


class Lead(Base):
    """Admission enquiry captured from a website form, staff or bulk upload.

    ``(phone, admission_year, source_website)`` is the natural key for
    public submissions; it is enforced by the duplicate guard, not by a
    UNIQUE constraint, because staff may legitimately re-enter a lead.
    ``assigned_to`` is ``NULL`` when no agent was available at creation.
    """

    __tablename__ = "leads"
    id = Column(String(36), primary_key=True, default=lambda: str(uuid4()))
    lead_reference_id = Column(String(40), nullable=False)
    name = Column(String(200), nullable=False)
    phone = Column(String(20), nullable=False)
    email = Column(String(255))
    college = Column(String(255))
    course = Column(String(255))
    state = Column(String(100))
    district = Column(String(100))
    admission_year = Column(String(4), nullable=False)
    source_website = Column(String(255), nullable=False)
    utm_params = Column(JSON, nullable=False, default=dict)
    form_data = Column(JSON, nullable=False, default=dict)
    assigned_to = Column(String(36), ForeignKey("users.id", ondelete="SET NULL"))
    created_by = Column(String(36), ForeignKey("users.id", ondelete="SET NULL"))
    status = Column(String(50), nullable=False, server_default="new")
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    __table_args__ = (
        Index("idx_leads_phone", "phone"),
        Index(
            "idx_leads_phone_year_source",
            "phone",
            "admission_year",
            "source_website",
        ),
        Index("idx_leads_assigned_to", "assigned_to"),
    )
