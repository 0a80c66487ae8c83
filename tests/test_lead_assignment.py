"""Tests for LeadAssignmentManager.find_best_agent."""

import logging
from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest

from admission_routing.core.result import RoutingResult
from admission_routing.services.candidate_loader import (
    NO_ELIGIBLE_ROLES,
    CandidateLoader,
)
from admission_routing.services.lead_assignment import (
    NO_AVAILABLE_AGENTS,
    LeadAssignmentManager,
)
from admission_routing.services.role_cache import RoleCache, RoleIds

_IDS = RoleIds(manager_id="r-mgr", exec_id="r-exec")


def _make_agent(agent_id, active_leads_count=0, weightage=1, role_id="r-exec"):
    agent = MagicMock()
    agent.id = agent_id
    agent.name = f"Agent {agent_id}"
    agent.active_leads_count = active_leads_count
    agent.weightage = weightage
    agent.last_assigned_at = datetime(2024, 6, 1, tzinfo=timezone.utc)
    agent.role_id = role_id
    return agent


def _role_cache(result: RoutingResult) -> AsyncMock:
    cache = AsyncMock(spec=RoleCache)
    cache.try_resolve = AsyncMock(return_value=result)
    return cache


def _loader(result: RoutingResult) -> AsyncMock:
    loader = AsyncMock(spec=CandidateLoader)
    loader.load = AsyncMock(return_value=result)
    return loader


class TestFindBestAgent:
    @pytest.mark.asyncio
    async def test_returns_lowest_score(self):
        agents = [
            _make_agent("a", 4, 2, "r-mgr"),
            _make_agent("b", 1, 1, "r-exec"),
        ]
        manager = LeadAssignmentManager(
            _role_cache(RoutingResult.ok(_IDS)),
            _loader(RoutingResult.ok(agents)),
        )

        selected = await manager.find_best_agent()

        assert selected.id == "b"
        assert selected.role_name == "Admission Executive"
        assert selected.score == 1.0

    @pytest.mark.asyncio
    async def test_manager_role_name_resolved(self):
        manager = LeadAssignmentManager(
            _role_cache(RoutingResult.ok(_IDS)),
            _loader(RoutingResult.ok([_make_agent("m", 0, 1, "r-mgr")])),
        )
        selected = await manager.find_best_agent()
        assert selected.role_name == "Admission Manager"
        assert selected.name == "Agent m"

    @pytest.mark.asyncio
    async def test_no_roles_returns_none(self):
        loader = CandidateLoader(AsyncMock())
        manager = LeadAssignmentManager(
            _role_cache(RoutingResult.ok(RoleIds())), loader
        )

        assert await manager.find_best_agent() is None
        result = await manager.try_find_best_agent()
        assert result.error == NO_ELIGIBLE_ROLES

    @pytest.mark.asyncio
    async def test_empty_pool_returns_none(self):
        manager = LeadAssignmentManager(
            _role_cache(RoutingResult.ok(_IDS)), _loader(RoutingResult.ok([]))
        )

        assert await manager.find_best_agent() is None
        assert (await manager.try_find_best_agent()).error == NO_AVAILABLE_AGENTS

    @pytest.mark.asyncio
    async def test_role_lookup_failure_returns_none(self):
        loader = _loader(RoutingResult.ok([_make_agent("a")]))
        manager = LeadAssignmentManager(
            _role_cache(RoutingResult.err("role lookup failed: timeout")), loader
        )

        assert await manager.find_best_agent() is None
        loader.load.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_loader_failure_returns_none(self, caplog):
        manager = LeadAssignmentManager(
            _role_cache(RoutingResult.ok(_IDS)),
            _loader(RoutingResult.err("candidate lookup failed: boom")),
        )

        with caplog.at_level(logging.WARNING):
            assert await manager.find_best_agent() is None
        assert "candidate lookup failed" in caplog.text

    @pytest.mark.asyncio
    async def test_unexpected_exception_returns_none(self):
        cache = AsyncMock(spec=RoleCache)
        cache.try_resolve = AsyncMock(side_effect=RuntimeError("bug"))
        manager = LeadAssignmentManager(cache, _loader(RoutingResult.ok([])))

        assert await manager.find_best_agent() is None

    @pytest.mark.asyncio
    async def test_uses_configured_tolerance(self):
        agents = [
            _make_agent("a", 10, 10),
            _make_agent("b", 11, 10),
        ]
        agents[1].last_assigned_at = datetime(2024, 1, 1, tzinfo=timezone.utc)
        manager = LeadAssignmentManager(
            _role_cache(RoutingResult.ok(_IDS)),
            _loader(RoutingResult.ok(agents)),
            tolerance=0.5,
        )

        assert (await manager.find_best_agent()).id == "b"

    @pytest.mark.asyncio
    async def test_does_not_touch_counters(self):
        agent = _make_agent("a", 3, 1)
        manager = LeadAssignmentManager(
            _role_cache(RoutingResult.ok(_IDS)), _loader(RoutingResult.ok([agent]))
        )

        await manager.find_best_agent()

        assert agent.active_leads_count == 3
