"""
Shared value types for the reconciliation engine.

These are plain dataclasses and str enums used across protocols and
implementations. Pydantic models are reserved for parsing cluster spec
documents and settings (see vdb_operator.vdb and vdb_operator.config).
"""

from dataclasses import dataclass
from enum import Enum


class Tristate(str, Enum):
    """
    Three-valued observed flag.

    UNKNOWN means the property was not (or could not be) probed. It must
    never be treated the same as FALSE, which is a confirmed negative.
    """

    UNKNOWN = "unknown"
    TRUE = "true"
    FALSE = "false"

    @classmethod
    def from_bool(cls, value: bool) -> "Tristate":
        return cls.TRUE if value else cls.FALSE

    @property
    def is_true(self) -> bool:
        return self is Tristate.TRUE

    @property
    def is_false(self) -> bool:
        return self is Tristate.FALSE

    @property
    def is_unknown(self) -> bool:
        return self is Tristate.UNKNOWN


class IPFamily(str, Enum):
    """Address family of a member's network identity."""

    IPV4 = "ipv4"
    IPV6 = "ipv6"
    UNKNOWN = "unknown"


@dataclass(frozen=True, order=True)
class MemberIdentity:
    """
    Namespaced name of one cluster member (pod).

    Attributes:
        namespace: Namespace the member lives in.
        name: Deterministic member name, "<cluster>-<subcluster>-<index>".
    """

    namespace: str
    name: str

    def __str__(self) -> str:
        return f"{self.namespace}/{self.name}"


@dataclass(frozen=True)
class ReconcileResult:
    """
    Continuation decision returned by every reconcile actor.

    A result is "done" when neither requeue flag is set. Fatal errors are
    not part of the result: they are raised as exceptions.

    Attributes:
        requeue: Ask the scheduler to run another pass right away.
        requeue_after: Ask for another pass after this many seconds.
    """

    requeue: bool = False
    requeue_after: float | None = None

    @classmethod
    def done(cls) -> "ReconcileResult":
        return cls()

    @classmethod
    def requeue_now(cls) -> "ReconcileResult":
        return cls(requeue=True)

    @classmethod
    def after(cls, seconds: float) -> "ReconcileResult":
        if seconds <= 0:
            raise ValueError(f"requeue_after must be positive, got {seconds}")
        return cls(requeue_after=seconds)

    @property
    def is_done(self) -> bool:
        return not self.requeue and not self.requeue_after
