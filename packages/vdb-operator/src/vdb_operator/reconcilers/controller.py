"""
Entry point invoked once per delivered event.

VerticaDBReconciler fetches the current spec for the request and runs the
default actor pipeline over it. Passes for the same request must not run
concurrently; that serialization is the caller's responsibility.
"""

import logging

from vdb_operator.config import SERVER_CONTAINER
from vdb_operator.credentials import CredentialSource
from vdb_operator.reconcilers.agent import AgentReconciler
from vdb_operator.reconcilers.base import ReconcileActor
from vdb_operator.reconcilers.create_db import CreateDBReconciler
from vdb_operator.reconcilers.pipeline import ReconcilePipeline
from vdb_operator.reconcilers.revive_db import ReviveDBReconciler
from vdb_operator.sources import SpecSource
from vdb_protocols import (
    EventRecorderProtocol,
    MemberIdentity,
    PodRunnerProtocol,
    ReconcileResult,
)

logger = logging.getLogger(__name__)

# Database creation/revival must converge before agents are started.
DEFAULT_ACTORS: list[type[ReconcileActor]] = [
    CreateDBReconciler,
    ReviveDBReconciler,
    AgentReconciler,
]


class VerticaDBReconciler:
    """Reconcile VerticaDB objects toward their spec."""

    def __init__(
        self,
        source: SpecSource,
        runner: PodRunnerProtocol,
        recorder: EventRecorderProtocol,
        credentials: CredentialSource | None = None,
        container: str = SERVER_CONTAINER,
        actor_types: list[type[ReconcileActor]] | None = None,
    ) -> None:
        self.source = source
        self.pipeline = ReconcilePipeline(
            actor_types or DEFAULT_ACTORS,
            runner=runner,
            recorder=recorder,
            credentials=credentials,
            container=container,
        )

    async def reconcile(self, request: MemberIdentity) -> ReconcileResult:
        """
        Run one reconciliation pass for request.

        Returns:
            done() when converged or the object is gone, a requeue result
            when the pass could not finish

        Raises:
            OperatorError: On a fatal error; the scheduler's backoff applies
        """
        vdb = await self.source.get(request)
        if vdb is None:
            logger.info(f"VerticaDB {request} not found, nothing to reconcile")
            return ReconcileResult.done()

        logger.debug(f"Reconciling {request} (initPolicy={vdb.spec.init_policy.value})")
        return await self.pipeline.run(vdb, request)
