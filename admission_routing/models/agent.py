from uuid import uuid4

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func, text

from admission_routing.models.base import Base


class Agent(Base):
    """Staff user as seen by the lead router.

    ``active_leads_count`` and ``last_assigned_at`` are only written by the
    lead-creation transaction (single leads) or the aggregated bulk update;
    nothing decrements the counter.  ``weightage`` is the relative capacity
    used by the ranking policy.
    """

    __tablename__ = "users"
    id = Column(String(36), primary_key=True, default=lambda: str(uuid4()))
    name = Column(String(200), nullable=False)
    email = Column(String(255), unique=True, nullable=False)
    phone = Column(String(20))
    role_id = Column(String(36), ForeignKey("roles.id", ondelete="SET NULL"))
    is_available = Column(Boolean, nullable=False, server_default=text("true"))
    weightage = Column(Integer, nullable=False, server_default=text("1"))
    active_leads_count = Column(Integer, nullable=False, server_default=text("0"))
    last_assigned_at = Column(DateTime(timezone=True))
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    role = relationship("Role", back_populates="users")

    __table_args__ = (
        CheckConstraint("active_leads_count >= 0", name="ck_active_leads_nonneg"),
        CheckConstraint("weightage >= 1", name="ck_weightage_positive"),
        Index("idx_users_role_available", "role_id", "is_available"),
    )
