from fastapi import APIRouter

from admission_routing.api.v1.endpoints import agents, health, leads

router = APIRouter(prefix="/api/v1")

router.include_router(leads.router)
router.include_router(agents.router)
router.include_router(health.router)
