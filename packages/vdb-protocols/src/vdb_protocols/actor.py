"""
Reconcile actor protocol.

A reconcile actor is one idempotent step of a reconciliation pass. Actors
are built per pass with the cluster spec, the pod runner, the PodFacts
snapshot of that pass, an event recorder and a logger, and are discarded
when the pass ends.
"""

from typing import Protocol, runtime_checkable

from vdb_protocols.types import MemberIdentity, ReconcileResult


@runtime_checkable
class ReconcileActorProtocol(Protocol):
    """
    Protocol for reconcile actors.

    Implementations should:
    - Be safe to invoke repeatedly with an unchanged cluster and snapshot
    - Return ReconcileResult.done() to let the pipeline continue
    - Return a requeue result to stop the pass without an error
    - Raise to report a fatal error
    """

    async def reconcile(self, request: MemberIdentity) -> ReconcileResult:
        """
        Drive the cluster one step closer to its spec.

        Args:
            request: Namespaced name of the database object being reconciled.

        Returns:
            The continuation decision for the pipeline.
        """
        ...
