from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy.dialects import postgresql

from admission_routing.repositories.agent_repository import (
    AgentRepository,
    role_predicates,
)
from admission_routing.services.candidate_loader import (
    NO_ELIGIBLE_ROLES,
    CandidateLoader,
)
from admission_routing.services.role_cache import RoleIds


def _repo(agents=None, error=None) -> AsyncMock:
    repo = AsyncMock(spec=AgentRepository)
    if error is not None:
        repo.get_available_by_roles = AsyncMock(side_effect=error)
    else:
        repo.get_available_by_roles = AsyncMock(return_value=agents or [])
    return repo


class TestCandidateLoader:
    @pytest.mark.asyncio
    async def test_no_roles_skips_the_query(self):
        repo = _repo()
        result = await CandidateLoader(repo).load(RoleIds())

        assert not result.is_ok
        assert result.error == NO_ELIGIBLE_ROLES
        repo.get_available_by_roles.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_both_roles_present(self):
        agents = [MagicMock(), MagicMock()]
        repo = _repo(agents)

        result = await CandidateLoader(repo).load(
            RoleIds(manager_id="r-mgr", exec_id="r-exec")
        )

        assert result.is_ok
        assert result.value == agents
        repo.get_available_by_roles.assert_awaited_once_with(["r-mgr", "r-exec"])

    @pytest.mark.asyncio
    async def test_only_present_ids_are_used(self):
        repo = _repo()
        await CandidateLoader(repo).load(RoleIds(exec_id="r-exec"))
        repo.get_available_by_roles.assert_awaited_once_with(["r-exec"])

    @pytest.mark.asyncio
    async def test_empty_pool_is_ok(self):
        result = await CandidateLoader(_repo([])).load(RoleIds(manager_id="r-mgr"))
        assert result.is_ok
        assert result.value == []

    @pytest.mark.asyncio
    async def test_query_failure_becomes_err(self):
        repo = _repo(error=RuntimeError("connection reset"))
        result = await CandidateLoader(repo).load(RoleIds(manager_id="r-mgr"))

        assert not result.is_ok
        assert "connection reset" in result.error

    @pytest.mark.asyncio
    async def test_query_failure_rolls_back_the_session(self):
        repo = _repo(error=RuntimeError("statement timeout"))
        await CandidateLoader(repo).load(RoleIds(manager_id="r-mgr"))
        repo.rollback.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_rollback_failure_still_returns_err(self):
        repo = _repo(error=RuntimeError("statement timeout"))
        repo.rollback = AsyncMock(side_effect=RuntimeError("connection closed"))

        result = await CandidateLoader(repo).load(RoleIds(manager_id="r-mgr"))

        assert not result.is_ok
        assert "statement timeout" in result.error

    @pytest.mark.asyncio
    async def test_success_leaves_the_transaction_alone(self):
        repo = _repo([MagicMock()])
        await CandidateLoader(repo).load(RoleIds(manager_id="r-mgr"))
        repo.rollback.assert_not_awaited()


class TestAgentRepositoryPredicates:
    def test_one_fragment_per_id(self):
        fragments = role_predicates(["r-mgr", "r-exec"])
        compiled = [
            str(f.compile(dialect=postgresql.dialect(), compile_kwargs={"literal_binds": True}))
            for f in fragments
        ]
        assert compiled == ["users.role_id = 'r-mgr'", "users.role_id = 'r-exec'"]

    def test_no_ids_no_fragments(self):
        assert role_predicates([]) == []

    @pytest.mark.asyncio
    async def test_repository_skips_query_without_ids(self):
        session = AsyncMock()
        assert await AgentRepository(session).get_available_by_roles([]) == []
        session.execute.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_candidates_are_ordered_by_id(self):
        session = AsyncMock()
        session.execute = AsyncMock(return_value=MagicMock())
        await AgentRepository(session).get_available_by_roles(["r-mgr"])

        stmt = session.execute.await_args.args[0]
        sql = str(stmt.compile(dialect=postgresql.dialect()))
        assert sql.rstrip().endswith("ORDER BY users.id")
