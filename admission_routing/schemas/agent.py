from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class RoutedAgentOut(BaseModel):
    """The agent the router would pick right now."""

    id: str
    name: str
    role_name: Optional[str] = None
    active_leads_count: int
    weightage: int
    last_assigned_at: Optional[datetime] = None
    score: float


class NextAgentResponse(BaseModel):
    agent: Optional[RoutedAgentOut] = None
