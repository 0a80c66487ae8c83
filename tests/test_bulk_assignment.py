from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy.exc import OperationalError

from admission_routing.core.result import RoutingResult
from admission_routing.repositories.agent_repository import AgentRepository
from admission_routing.services.bulk_assignment import (
    BulkAssignmentService,
    distribute_round_robin,
)
from admission_routing.services.candidate_loader import CandidateLoader
from admission_routing.services.role_cache import RoleCache, RoleIds


def _make_agent(agent_id: str, active_leads_count=0, weightage=1):
    agent = MagicMock()
    agent.id = agent_id
    agent.active_leads_count = active_leads_count
    agent.weightage = weightage
    return agent


def _leads(n: int):
    return [{"phone": f"98765{i:05d}"} for i in range(n)]


class TestDistributeRoundRobin:
    def test_five_leads_over_three_idle_agents(self):
        agents = [_make_agent("a"), _make_agent("b"), _make_agent("c")]

        result = distribute_round_robin(_leads(5), agents)

        assert [lead["assigned_to"] for lead in result.leads] == [
            "a",
            "b",
            "c",
            "a",
            "b",
        ]
        assert result.counter_deltas == {"a": 2, "b": 2, "c": 1}
        assert result.unassigned_count == 0

    def test_pool_sorted_by_raw_count(self):
        agents = [
            _make_agent("busy", 9),
            _make_agent("idle", 0),
            _make_agent("mid", 4, weightage=10),
        ]

        result = distribute_round_robin(_leads(3), agents)

        assert [lead["assigned_to"] for lead in result.leads] == [
            "idle",
            "mid",
            "busy",
        ]

    def test_null_count_sorts_as_zero(self):
        agents = [_make_agent("a", 1), _make_agent("b", None)]
        result = distribute_round_robin(_leads(1), agents)
        assert result.leads[0]["assigned_to"] == "b"

    def test_empty_pool_leaves_all_unassigned(self):
        result = distribute_round_robin(_leads(4), [])

        assert all(lead["assigned_to"] is None for lead in result.leads)
        assert result.counter_deltas == {}
        assert result.unassigned_count == 4

    def test_input_rows_are_not_mutated(self):
        rows = _leads(2)
        distribute_round_robin(rows, [_make_agent("a")])
        assert "assigned_to" not in rows[0]

    def test_deltas_sum_to_lead_count(self):
        agents = [_make_agent(str(i)) for i in range(4)]
        result = distribute_round_robin(_leads(11), agents)
        assert sum(result.counter_deltas.values()) == 11


class TestBulkAssignmentService:
    @pytest.mark.asyncio
    async def test_loads_pool_once_per_batch(self):
        role_cache = AsyncMock(spec=RoleCache)
        role_cache.resolve_role_ids = AsyncMock(
            return_value=RoleIds(manager_id="r-mgr")
        )
        loader = AsyncMock(spec=CandidateLoader)
        loader.load = AsyncMock(
            return_value=RoutingResult.ok([_make_agent("a"), _make_agent("b")])
        )

        result = await BulkAssignmentService(role_cache, loader).assign(_leads(6))

        loader.load.assert_awaited_once()
        assert result.counter_deltas == {"a": 3, "b": 3}

    @pytest.mark.asyncio
    async def test_loader_failure_gives_empty_pool(self):
        role_cache = AsyncMock(spec=RoleCache)
        role_cache.resolve_role_ids = AsyncMock(return_value=RoleIds())
        loader = CandidateLoader(AsyncMock())

        result = await BulkAssignmentService(role_cache, loader).assign(_leads(2))

        assert result.unassigned_count == 2

    @pytest.mark.asyncio
    async def test_failed_pool_query_leaves_session_usable(self):
        session = MagicMock()
        session.execute = AsyncMock(side_effect=OperationalError("SELECT", {}, Exception()))
        session.rollback = AsyncMock()
        role_cache = AsyncMock(spec=RoleCache)
        role_cache.resolve_role_ids = AsyncMock(
            return_value=RoleIds(manager_id="r-mgr", exec_id="r-exec")
        )
        loader = CandidateLoader(AgentRepository(session))

        result = await BulkAssignmentService(role_cache, loader).assign(_leads(3))

        assert result.unassigned_count == 3
        session.rollback.assert_awaited_once()
