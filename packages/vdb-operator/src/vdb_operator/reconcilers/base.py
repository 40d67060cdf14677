"""Common constructor for reconcile actors."""

import logging

from vdb_operator.config import SERVER_CONTAINER
from vdb_operator.credentials import CredentialSource
from vdb_operator.podfacts import PodFacts
from vdb_operator.vdb import VerticaDB
from vdb_protocols import (
    EventRecorderProtocol,
    MemberIdentity,
    PodRunnerProtocol,
    ReconcileResult,
)


class ReconcileActor:
    """
    Base class for reconcile actors.

    An actor is built for one pass and must not keep any of its references
    past the reconcile() call. Subclasses implement reconcile().

    Attributes:
        vdb: Cluster spec being reconciled (read-only)
        runner: Pod runner for commands inside members
        pfacts: PodFacts snapshot of the current pass
        recorder: Event recorder
        credentials: Communal credential source (initializers only)
        container: Container that runs the database server
        log: Logger for this actor
    """

    def __init__(
        self,
        vdb: VerticaDB,
        runner: PodRunnerProtocol,
        pfacts: PodFacts,
        recorder: EventRecorderProtocol,
        credentials: CredentialSource | None = None,
        container: str = SERVER_CONTAINER,
        log: logging.Logger | None = None,
    ) -> None:
        self.vdb = vdb
        self.runner = runner
        self.pfacts = pfacts
        self.recorder = recorder
        self.credentials = credentials
        self.container = container
        self.log = log or logging.getLogger(type(self).__module__)

    async def reconcile(self, request: MemberIdentity) -> ReconcileResult:
        raise NotImplementedError
