"""
Pod runner protocol definition.

A PodRunner executes a literal argument vector inside a named container
of a cluster member. Implementations exist for Kubernetes pods, local
Docker containers and an in-memory fake used by tests.
"""

from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from vdb_protocols.types import MemberIdentity


@dataclass
class ExecResult:
    """
    Captured output of one remote command.

    stdout and stderr are always populated with whatever the command wrote,
    even when it failed, so callers can classify expected failures.

    Attributes:
        stdout: Captured standard output.
        stderr: Captured standard error.
        error: None on success, otherwise the execution error (non-zero
            exit or transport failure).
    """

    stdout: str = ""
    stderr: str = ""
    error: Exception | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@runtime_checkable
class PodRunnerProtocol(Protocol):
    """
    Protocol for executing commands inside cluster members.

    Calls are awaited by the calling reconcile step until the remote process
    exits or the awaiting task is cancelled. Implementations must not raise
    for command failures; they report them through ExecResult.error.
    """

    async def exec_in_pod(
        self, member: MemberIdentity, container: str, *command: str
    ) -> ExecResult:
        """Run command in the container of member and capture its output."""
        ...

    async def exec_admintools(
        self, member: MemberIdentity, container: str, *args: str
    ) -> ExecResult:
        """Run the database administration tool with args in member."""
        ...
