from uuid import uuid4

from sqlalchemy import Column, DateTime, String
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from admission_routing.models.base import Base


class Role(Base):
    """Staff role.  Only two role names are eligible for lead routing."""

    __tablename__ = "roles"
    id = Column(String(36), primary_key=True, default=lambda: str(uuid4()))
    name = Column(String(100), unique=True, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    users = relationship("Agent", back_populates="role")
