"""Tests for shared protocol value types."""

import pytest

from vdb_protocols import (
    ExecResult,
    MemberIdentity,
    PodRunnerProtocol,
    ReconcileActorProtocol,
    ReconcileResult,
    Tristate,
)


class TestTristate:
    def test_from_bool(self):
        assert Tristate.from_bool(True) is Tristate.TRUE
        assert Tristate.from_bool(False) is Tristate.FALSE

    def test_unknown_is_neither_true_nor_false(self):
        assert not Tristate.UNKNOWN.is_true
        assert not Tristate.UNKNOWN.is_false
        assert Tristate.UNKNOWN.is_unknown

    def test_string_value(self):
        assert Tristate("false") is Tristate.FALSE


class TestReconcileResult:
    def test_done(self):
        res = ReconcileResult.done()
        assert res.is_done
        assert res == ReconcileResult()

    def test_requeue_now(self):
        res = ReconcileResult.requeue_now()
        assert res.requeue
        assert not res.is_done

    def test_after(self):
        res = ReconcileResult.after(2.5)
        assert res.requeue_after == 2.5
        assert not res.is_done

    @pytest.mark.parametrize("seconds", [0, -1])
    def test_after_requires_positive_delay(self, seconds):
        with pytest.raises(ValueError):
            ReconcileResult.after(seconds)


class TestMemberIdentity:
    def test_str(self):
        assert str(MemberIdentity("default", "vertdb-sc1-0")) == "default/vertdb-sc1-0"

    def test_hashable_and_ordered(self):
        a = MemberIdentity("default", "a")
        b = MemberIdentity("default", "b")
        assert {a: 1}[MemberIdentity("default", "a")] == 1
        assert sorted([b, a]) == [a, b]


def test_exec_result_ok():
    assert ExecResult(stdout="x").ok
    assert not ExecResult(error=RuntimeError("boom")).ok


def test_runtime_checkable_protocols():
    class Runner:
        async def exec_in_pod(self, member, container, *command):
            return ExecResult()

        async def exec_admintools(self, member, container, *args):
            return ExecResult()

    class Actor:
        async def reconcile(self, request):
            return ReconcileResult.done()

    assert isinstance(Runner(), PodRunnerProtocol)
    assert isinstance(Actor(), ReconcileActorProtocol)
    assert not isinstance(object(), PodRunnerProtocol)
