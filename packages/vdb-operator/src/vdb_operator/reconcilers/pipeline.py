"""
Reconcile pipeline.

Runs an ordered list of actors for one pass over a single, freshly built
PodFacts snapshot. The first actor that asks for a requeue ends the pass
and its result is returned unchanged; the first exception propagates out
unchanged. Order matters: later actors rely on earlier ones having
converged (a database must exist before agents can be started on it).
"""

import logging
from collections.abc import Sequence

from vdb_operator.config import SERVER_CONTAINER
from vdb_operator.credentials import CredentialSource
from vdb_operator.podfacts import PodFacts, collect_pod_facts
from vdb_operator.reconcilers.base import ReconcileActor
from vdb_operator.vdb import VerticaDB
from vdb_protocols import (
    EventRecorderProtocol,
    MemberIdentity,
    PodRunnerProtocol,
    ReconcileActorProtocol,
    ReconcileResult,
)

logger = logging.getLogger(__name__)


async def run_actors(
    actors: Sequence[ReconcileActorProtocol], request: MemberIdentity
) -> ReconcileResult:
    """
    Invoke actors in order, stopping at the first non-done result.

    Exceptions raised by an actor are not caught.
    """
    for actor in actors:
        res = await actor.reconcile(request)
        if not res.is_done:
            logger.info(f"{type(actor).__name__} requested requeue for {request}: {res}")
            return res
    return ReconcileResult.done()


class ReconcilePipeline:
    """
    Ordered actor types sharing one snapshot per pass.

    Example:
        pipeline = ReconcilePipeline(
            [CreateDBReconciler, ReviveDBReconciler, AgentReconciler],
            runner=KubernetesPodRunner(),
            recorder=KubernetesEventRecorder(),
            credentials=KubernetesSecretCredentials(),
        )
        result = await pipeline.run(vdb, vdb.identity)
    """

    def __init__(
        self,
        actor_types: Sequence[type[ReconcileActor]],
        runner: PodRunnerProtocol,
        recorder: EventRecorderProtocol,
        credentials: CredentialSource | None = None,
        container: str = SERVER_CONTAINER,
    ) -> None:
        self.actor_types = list(actor_types)
        self.runner = runner
        self.recorder = recorder
        self.credentials = credentials
        self.container = container

    def build_actors(self, vdb: VerticaDB, pfacts: PodFacts) -> list[ReconcileActor]:
        """Instantiate every actor type for one pass over pfacts."""
        return [
            actor_type(
                vdb=vdb,
                runner=self.runner,
                pfacts=pfacts,
                recorder=self.recorder,
                credentials=self.credentials,
                container=self.container,
            )
            for actor_type in self.actor_types
        ]

    async def run(self, vdb: VerticaDB, request: MemberIdentity) -> ReconcileResult:
        """Run one pass: probe all members, then run the actors in order."""
        pfacts = await collect_pod_facts(vdb, self.runner, self.container)
        try:
            return await run_actors(self.build_actors(vdb, pfacts), request)
        finally:
            await self.recorder.flush()
