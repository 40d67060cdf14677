"""Tests for the resync loop."""

import asyncio

import pytest

from vdb_operator.exceptions import DatabaseInitError
from vdb_operator.loop import ResyncLoop
from vdb_protocols import MemberIdentity, ReconcileResult

A = MemberIdentity("default", "a")
B = MemberIdentity("default", "b")


class StubReconciler:
    def __init__(self, outcomes):
        self.outcomes = outcomes
        self.calls: list[MemberIdentity] = []

    async def reconcile(self, request):
        self.calls.append(request)
        outcome = self.outcomes[request]
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


class TestResyncCycle:
    @pytest.mark.asyncio
    async def test_all_done_waits_full_interval(self):
        stub = StubReconciler({A: ReconcileResult.done(), B: ReconcileResult.done()})
        loop = ResyncLoop(stub, [A, B], interval_seconds=30, requeue_delay_seconds=5)

        assert await loop.resync_cycle() == 30
        assert stub.calls == [A, B]
        assert loop.cycles == 1

    @pytest.mark.asyncio
    async def test_requeue_shortens_wait(self):
        stub = StubReconciler({A: ReconcileResult.requeue_now(), B: ReconcileResult.done()})
        loop = ResyncLoop(stub, [A, B], interval_seconds=30, requeue_delay_seconds=5)

        assert await loop.resync_cycle() == 5

    @pytest.mark.asyncio
    async def test_requeue_after_is_honored(self):
        stub = StubReconciler({A: ReconcileResult.after(2), B: ReconcileResult.requeue_now()})
        loop = ResyncLoop(stub, [A, B], interval_seconds=30, requeue_delay_seconds=5)

        assert await loop.resync_cycle() == 2

    @pytest.mark.asyncio
    async def test_error_does_not_stop_other_requests(self):
        err = DatabaseInitError("create_db", "vertdb")
        stub = StubReconciler({A: err, B: ReconcileResult.done()})
        loop = ResyncLoop(stub, [A, B], interval_seconds=30)

        assert await loop.resync_cycle() == 30
        assert stub.calls == [A, B]
        assert loop.last_results[A] is err
        assert loop.last_results[B] == ReconcileResult.done()


class TestRun:
    @pytest.mark.asyncio
    async def test_stop_ends_run(self):
        stub = StubReconciler({A: ReconcileResult.done()})
        loop = ResyncLoop(stub, [A], interval_seconds=60)

        task = asyncio.create_task(loop.run())
        await asyncio.sleep(0.05)
        loop.stop()
        await asyncio.wait_for(task, timeout=2)

        assert loop.cycles == 1

    @pytest.mark.asyncio
    async def test_requeue_runs_next_cycle_sooner(self):
        stub = StubReconciler({A: ReconcileResult.requeue_now()})
        loop = ResyncLoop(stub, [A], interval_seconds=60, requeue_delay_seconds=0.01)

        task = asyncio.create_task(loop.run())
        await asyncio.sleep(0.2)
        loop.stop()
        await asyncio.wait_for(task, timeout=2)

        assert loop.cycles > 1
