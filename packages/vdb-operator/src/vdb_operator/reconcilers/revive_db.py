"""Revive a database from communal storage when the init policy asks for it."""

import time

from vdb_operator import events
from vdb_operator.classify import OutputCategory, classify_output, is_transient
from vdb_operator.exceptions import DatabaseInitError
from vdb_operator.podfacts import PodFact
from vdb_operator.reconcilers.base import ReconcileActor
from vdb_operator.reconcilers.create_db import format_elapsed
from vdb_operator.reconcilers.init_db import (
    AUTH_PARMS_FILE,
    GenericDatabaseInitializer,
    sort_by_compat21,
    transient_warning,
)
from vdb_operator.vdb import InitPolicy
from vdb_protocols import EventType, MemberIdentity, ReconcileResult


class ReviveDBReconciler(ReconcileActor):
    """Revive the database on every member of every subcluster."""

    async def reconcile(self, request: MemberIdentity) -> ReconcileResult:
        if self.vdb.spec.init_policy != InitPolicy.REVIVE:
            return ReconcileResult.done()

        g = GenericDatabaseInitializer(
            initializer=self,
            vdb=self.vdb,
            runner=self.runner,
            pfacts=self.pfacts,
            credentials=self.credentials,
            container=self.container,
            log=self.log,
        )
        return await g.check_and_run_init()

    async def pre_cmd_setup(self, at_pod: MemberIdentity) -> None:
        # The catalog already exists in communal storage; nothing to prepare.
        return None

    def get_additional_auth_parms(self) -> str:
        return ""

    def get_pod_list(self) -> tuple[list[PodFact], bool]:
        """Every expected member, ordered by legacy node name."""
        pod_list: list[PodFact] = []
        for _, member in self.vdb.iter_pods():
            pf = self.pfacts.get(member)
            if pf is None:
                return [], False
            pod_list.append(pf)
        return sort_by_compat21(pod_list), True

    def gen_cmd(self, host_list: list[str]) -> list[str]:
        return [
            "-t", "revive_db",
            "--hosts=" + ",".join(host_list),
            "--communal-storage-location=" + self.vdb.communal_path,
            "--communal-storage-params=" + AUTH_PARMS_FILE,
            "--database", self.vdb.spec.db_name,
            "--force",
        ]

    async def exec_cmd(self, at_pod: MemberIdentity, cmd: list[str]) -> ReconcileResult:
        """Run revive_db and turn its outcome into events and a result.

        Raises:
            DatabaseInitError: If revive_db failed with unrecognized output
        """
        self.recorder.event(
            self.vdb, EventType.NORMAL, events.REVIVE_DB_START, "Calling 'admintools -t revive_db'"
        )
        start = time.monotonic()
        res = await self.runner.exec_admintools(at_pod, self.container, *cmd)
        if res.error is not None:
            category = classify_output(res.stdout)
            if is_transient(category):
                reason, message = transient_warning(self.vdb, category, "read from")
                self.recorder.event(self.vdb, EventType.WARNING, reason, message)
                return ReconcileResult.requeue_now()
            if category == OutputCategory.DATABASE_NOT_FOUND:
                self.recorder.event(
                    self.vdb, EventType.WARNING, events.REVIVE_DB_NOT_FOUND,
                    f"The database '{self.vdb.spec.db_name}' could not be found "
                    f"in the communal path '{self.vdb.communal_path}'",
                )
                return ReconcileResult.requeue_now()

            self.recorder.event(
                self.vdb, EventType.WARNING, events.REVIVE_DB_FAILED, "Failed to revive the database"
            )
            raise DatabaseInitError("revive_db", self.vdb.spec.db_name) from res.error

        self.recorder.event(
            self.vdb, EventType.NORMAL, events.REVIVE_DB_SUCCEEDED,
            f"Successfully revived database. It took {format_elapsed(time.monotonic() - start)}",
        )
        return ReconcileResult.done()
