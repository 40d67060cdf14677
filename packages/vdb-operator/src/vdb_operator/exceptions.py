"""
Exception classes for the reconciliation engine.

- CommandExecutionError: A remote command exited non-zero or could not run
- PodNotFoundError: The target member does not exist
- DatabaseInitError: Initialization failed for an unrecognized reason
- CredentialsError: Communal storage credentials are unavailable
- SpecLoadError: A cluster spec document could not be loaded

Command runners return CommandExecutionError inside ExecResult.error rather
than raising it; reconcilers raise it when a setup command must succeed.
"""

from vdb_protocols import MemberIdentity


class OperatorError(Exception):
    """Base class for all reconciliation engine errors."""


class CommandExecutionError(OperatorError):
    """
    Raised (or returned) when a command inside a member fails.

    Attributes:
        member: Member the command ran in
        command: The argument vector
        returncode: Exit code, or None for transport failures
        stdout: Captured standard output
        stderr: Captured standard error
    """

    def __init__(
        self,
        member: MemberIdentity,
        command: list[str],
        returncode: int | None = None,
        stdout: str = "",
        stderr: str = "",
        reason: str | None = None,
    ) -> None:
        self.member = member
        self.command = list(command)
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr
        detail = reason or (stderr.strip() or f"exit code {returncode}")
        super().__init__(f"Command {' '.join(self.command)!r} failed in {member}: {detail}")


class PodNotFoundError(CommandExecutionError):
    """Raised when the member targeted by a command does not exist."""

    def __init__(self, member: MemberIdentity, command: list[str]) -> None:
        super().__init__(member, command, reason="pod not found")


class DatabaseInitError(OperatorError):
    """
    Raised when create_db/revive_db fails with unclassified output.

    Attributes:
        operation: The admintools task that failed (create_db, revive_db)
        database: Name of the database being initialized
    """

    def __init__(self, operation: str, database: str) -> None:
        self.operation = operation
        self.database = database
        super().__init__(f"admintools -t {operation} failed for database '{database}'")


class CredentialsError(OperatorError):
    """Raised when communal storage credentials cannot be read."""


class SpecLoadError(OperatorError):
    """
    Raised when a cluster spec document cannot be parsed or validated.

    Attributes:
        source: Where the document came from (file path or object name)
    """

    def __init__(self, source: str, reason: str) -> None:
        self.source = source
        super().__init__(f"Cannot load VerticaDB from {source}: {reason}")
