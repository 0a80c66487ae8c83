from admission_routing.models.base import Base
from admission_routing.models.role import Role
from admission_routing.models.agent import Agent
from admission_routing.models.lead import Lead

__all__ = [
    "Base",
    "Role",
    "Agent",
    "Lead",
]
