"""Tests for AgentReconciler."""

import pytest

from vdb_operator.cmds import FakePodRunner
from vdb_operator.exceptions import CommandExecutionError
from vdb_operator.reconcilers import AgentReconciler
from vdb_protocols import ExecResult, IPFamily, MemberIdentity, ReconcileResult, Tristate

AGENT_START = ("/opt/vertica/sbin/vertica_agent", "start")


async def reconcile_and_find_agent_start(vdb, pfacts, runner, recorder):
    r = AgentReconciler(vdb=vdb, runner=runner, pfacts=pfacts, recorder=recorder)
    assert await r.reconcile(vdb.identity) == ReconcileResult.done()
    return runner.find_commands(*AGENT_START)


class TestAgentReconciler:
    @pytest.mark.asyncio
    async def test_starts_agent_if_not_running(self, make_vdb, make_pfacts, runner, recorder):
        vdb = make_vdb(sizes=(2,))
        pfacts = make_pfacts(vdb, db_exists=Tristate.TRUE, agent_running=Tristate.FALSE)

        cmds = await reconcile_and_find_agent_start(vdb, pfacts, runner, recorder)

        assert len(cmds) == 2
        assert {c.member.name for c in cmds} == {"vertdb-sc1-0", "vertdb-sc1-1"}
        assert all(c.command == list(AGENT_START) for c in cmds)

    @pytest.mark.asyncio
    async def test_skips_ipv6_members(self, make_vdb, make_pfacts, runner, recorder):
        vdb = make_vdb(sizes=(3,))
        pfacts = make_pfacts(vdb, db_exists=Tristate.TRUE, ip_family=IPFamily.IPV6)

        cmds = await reconcile_and_find_agent_start(vdb, pfacts, runner, recorder)

        assert len(cmds) == 0

    @pytest.mark.asyncio
    async def test_skips_members_not_in_database(self, make_vdb, make_pfacts, runner, recorder):
        vdb = make_vdb(sizes=(1,))
        pfacts = make_pfacts(vdb, db_exists=Tristate.TRUE)
        pfacts.detail[vdb.pod_name(vdb.spec.subclusters[0], 0)].db_exists = Tristate.FALSE

        cmds = await reconcile_and_find_agent_start(vdb, pfacts, runner, recorder)

        assert len(cmds) == 0

    @pytest.mark.asyncio
    async def test_unknown_db_membership_still_starts(self, make_vdb, make_pfacts, runner, recorder):
        vdb = make_vdb(sizes=(1,))
        pfacts = make_pfacts(vdb, db_exists=Tristate.UNKNOWN)

        cmds = await reconcile_and_find_agent_start(vdb, pfacts, runner, recorder)

        assert len(cmds) == 1

    @pytest.mark.asyncio
    async def test_skips_members_with_agent_running(self, make_vdb, make_pfacts, runner, recorder):
        vdb = make_vdb(sizes=(3,))
        pfacts = make_pfacts(vdb, db_exists=Tristate.TRUE, agent_running=Tristate.FALSE)
        pfacts.detail[MemberIdentity("default", "vertdb-sc1-1")].agent_running = Tristate.TRUE

        cmds = await reconcile_and_find_agent_start(vdb, pfacts, runner, recorder)

        assert [c.member.name for c in cmds] == ["vertdb-sc1-0", "vertdb-sc1-2"]

    @pytest.mark.asyncio
    async def test_start_failure_is_not_a_requeue(self, make_vdb, make_pfacts, recorder):
        vdb = make_vdb(sizes=(2,))
        pfacts = make_pfacts(vdb, db_exists=Tristate.TRUE)
        member = MemberIdentity("default", "vertdb-sc1-0")
        runner = FakePodRunner()
        runner.add_result(
            member,
            ExecResult(stderr="agent failed", error=CommandExecutionError(member, list(AGENT_START), 1)),
        )

        cmds = await reconcile_and_find_agent_start(vdb, pfacts, runner, recorder)

        # Second member is still attempted
        assert len(cmds) == 2

    @pytest.mark.asyncio
    async def test_second_invocation_with_agents_up_issues_nothing(
        self, make_vdb, make_pfacts, runner, recorder
    ):
        vdb = make_vdb(sizes=(2,))
        pfacts = make_pfacts(vdb, db_exists=Tristate.TRUE, agent_running=Tristate.TRUE)

        assert await reconcile_and_find_agent_start(vdb, pfacts, runner, recorder) == []
        assert await reconcile_and_find_agent_start(vdb, pfacts, runner, recorder) == []
        assert runner.histories == []
