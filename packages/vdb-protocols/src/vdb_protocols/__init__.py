"""
Protocol definitions for the VerticaDB reconciliation engine.

This package provides Protocol definitions and value types shared by the
engine and its adapters. It has zero dependencies on other vdb-* packages.

Key protocols:
- PodRunnerProtocol: Interface for executing commands inside members
- EventRecorderProtocol: Interface for emitting reconcile events
- ReconcileActorProtocol: Interface for one reconciliation step

Key types:
- ExecResult: Captured output of one remote command
- ReconcileResult: Done / requeue continuation decision
- MemberIdentity: Namespaced name of a cluster member
- Tristate: Unknown / True / False observed flag
- IPFamily: Address family of a member
- EventType: Normal / Warning
"""

from vdb_protocols.actor import ReconcileActorProtocol
from vdb_protocols.events import EventRecorderProtocol, EventType
from vdb_protocols.runner import ExecResult, PodRunnerProtocol
from vdb_protocols.types import IPFamily, MemberIdentity, ReconcileResult, Tristate

__all__ = [
    # Protocols
    "PodRunnerProtocol",
    "EventRecorderProtocol",
    "ReconcileActorProtocol",
    # Data types
    "ExecResult",
    "ReconcileResult",
    "MemberIdentity",
    "Tristate",
    "IPFamily",
    "EventType",
]
