"""
Pod runner base class and in-memory fake.

BasePodRunner supplies exec_admintools on top of an implementation's
exec_in_pod. FakePodRunner records every invocation and returns queued
results; it is used by tests and by dry runs.
"""

from dataclasses import dataclass, field

from vdb_protocols import ExecResult, MemberIdentity

# Path of the database administration tool inside the server container
ADMINTOOLS = "/opt/vertica/bin/admintools"


class BasePodRunner:
    """Common behavior shared by all pod runners."""

    async def exec_in_pod(
        self, member: MemberIdentity, container: str, *command: str
    ) -> ExecResult:
        raise NotImplementedError

    async def exec_admintools(
        self, member: MemberIdentity, container: str, *args: str
    ) -> ExecResult:
        """Run admintools with args in member's container."""
        return await self.exec_in_pod(member, container, ADMINTOOLS, *args)


@dataclass
class CmdHistory:
    """One recorded invocation of FakePodRunner."""

    member: MemberIdentity
    container: str
    command: list[str] = field(default_factory=list)

    @property
    def command_line(self) -> str:
        return " ".join(self.command)


class FakePodRunner(BasePodRunner):
    """
    Pod runner that executes nothing.

    Results are queued per member and handed out in order; once a member's
    queue is empty every call succeeds with empty output. The history is an
    invocation log for assertions only.

    Example:
        runner = FakePodRunner()
        runner.add_result(pod, ExecResult(stdout="...", error=err))
        ...
        assert len(runner.find_commands("vertica_agent", "start")) == 2
    """

    def __init__(
        self, results: dict[MemberIdentity, list[ExecResult]] | None = None
    ) -> None:
        self.results: dict[MemberIdentity, list[ExecResult]] = results or {}
        self.histories: list[CmdHistory] = []

    def add_result(self, member: MemberIdentity, result: ExecResult) -> None:
        self.results.setdefault(member, []).append(result)

    async def exec_in_pod(
        self, member: MemberIdentity, container: str, *command: str
    ) -> ExecResult:
        self.histories.append(CmdHistory(member, container, list(command)))
        queued = self.results.get(member)
        if queued:
            return queued.pop(0)
        return ExecResult()

    def find_commands(self, *fragments: str) -> list[CmdHistory]:
        """Return recorded commands whose command line contains every fragment."""
        return [
            h
            for h in self.histories
            if all(fragment in h.command_line for fragment in fragments)
        ]
