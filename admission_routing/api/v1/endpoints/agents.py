from fastapi import APIRouter, Depends

from admission_routing.api.deps import get_assignment_manager, get_current_user_id
from admission_routing.schemas.agent import NextAgentResponse, RoutedAgentOut
from admission_routing.services.lead_assignment import LeadAssignmentManager

router = APIRouter(prefix="/agents", tags=["Agents"])


@router.get("/next", response_model=NextAgentResponse)
async def get_next_agent(
    user_id: str = Depends(get_current_user_id),
    manager: LeadAssignmentManager = Depends(get_assignment_manager),
) -> NextAgentResponse:
    """Preview which agent the router would pick for the next lead.

    Read-only: no counters change.  ``agent`` is null when nobody is
    eligible or routing failed.
    """
    selected = await manager.find_best_agent()
    if selected is None:
        return NextAgentResponse(agent=None)

    agent = selected.agent
    return NextAgentResponse(
        agent=RoutedAgentOut(
            id=agent.id,
            name=agent.name,
            role_name=selected.role_name,
            active_leads_count=agent.active_leads_count or 0,
            weightage=agent.weightage or 1,
            last_assigned_at=agent.last_assigned_at,
            score=selected.score,
        )
    )
