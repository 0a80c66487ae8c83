"""Repository layer – all database access goes through here.

Repositories encapsulate SQLAlchemy queries so that the service layer
only contains routing and intake logic.
"""

from admission_routing.repositories.lead_repository import LeadRepository
from admission_routing.repositories.agent_repository import AgentRepository
from admission_routing.repositories.role_repository import RoleRepository

__all__ = [
    "LeadRepository",
    "AgentRepository",
    "RoleRepository",
]
