"""Create a new database when the init policy asks for one."""

import time

from vdb_operator import events
from vdb_operator.classify import classify_output, is_transient
from vdb_operator.exceptions import DatabaseInitError
from vdb_operator.podfacts import PodFact
from vdb_operator.reconcilers.base import ReconcileActor
from vdb_operator.reconcilers.init_db import (
    AUTH_PARMS_FILE,
    GenericDatabaseInitializer,
    sort_by_compat21,
    transient_warning,
    write_file_in_pod,
)
from vdb_operator.vdb import K_SAFETY_0, InitPolicy
from vdb_protocols import EventType, MemberIdentity, ReconcileResult

# SQL run by create_db through --sql
POST_DB_CREATE_SQL_FILE = "/home/dbadmin/post-db-create.sql"

# Lowered for the duration of create_db so a bad endpoint fails fast.
TEMP_AWS_CONNECT_TIMEOUT = "20"
TEMP_AWS_MAX_RETRY_COUNT = "3"


def format_elapsed(seconds: float) -> str:
    """Render a duration as e.g. '4.2s' or '3m7.5s'."""
    minutes, secs = divmod(seconds, 60)
    if minutes:
        return f"{int(minutes)}m{secs:.1f}s"
    return f"{secs:.1f}s"


class CreateDBReconciler(ReconcileActor):
    """Create the database with the first subcluster if none exists yet."""

    async def reconcile(self, request: MemberIdentity) -> ReconcileResult:
        if self.vdb.spec.init_policy != InitPolicy.CREATE:
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

    def gen_post_create_sql(self) -> str:
        # Clear the temporary auth parms (see get_additional_auth_parms) and
        # give the default subcluster the name of the first subcluster. Any
        # other subcluster is added later by a separate reconciler.
        sql = (
            "alter database default clear AWSConnectTimeout;\n"
            "alter database default clear AWSMaxRetryCount;\n"
            f"alter subcluster default_subcluster rename to {self.vdb.spec.subclusters[0].name};\n"
        )
        if self.vdb.spec.k_safety == K_SAFETY_0:
            sql += "select set_preferred_ksafe(0);\n"
        return sql

    async def pre_cmd_setup(self, at_pod: MemberIdentity) -> None:
        await write_file_in_pod(
            self.runner, at_pod, self.container, POST_DB_CREATE_SQL_FILE, self.gen_post_create_sql()
        )

    def get_additional_auth_parms(self) -> str:
        return (
            f"AWSConnectTimeout = {TEMP_AWS_CONNECT_TIMEOUT}\n"
            f"AWSMaxRetryCount = {TEMP_AWS_MAX_RETRY_COUNT}\n"
        )

    def get_pod_list(self) -> tuple[list[PodFact], bool]:
        """
        Members of the first subcluster, ordered by legacy node name.

        With k-safety 0 only the first member is used; the rest of the
        subcluster is added afterwards with db_add_node.
        """
        sc = self.vdb.spec.subclusters[0]
        pod_list: list[PodFact] = []
        for i in range(sc.size):
            pf = self.pfacts.get(self.vdb.pod_name(sc, i))
            if pf is None:
                return [], False
            pod_list.append(pf)

        pod_list = sort_by_compat21(pod_list)
        if self.vdb.spec.k_safety == K_SAFETY_0:
            return pod_list[:1], True
        return pod_list, True

    def gen_cmd(self, host_list: list[str]) -> list[str]:
        return [
            "-t", "create_db",
            "--skip-fs-checks",
            "--hosts=" + ",".join(host_list),
            "--communal-storage-location=" + self.vdb.communal_path,
            "--communal-storage-params=" + AUTH_PARMS_FILE,
            "--sql=" + POST_DB_CREATE_SQL_FILE,
            f"--shard-count={self.vdb.spec.shard_count}",
            "--depot-path=" + self.vdb.spec.local.depot_path,
            "--database", self.vdb.spec.db_name,
            "--force-cleanup-on-failure",
            "--noprompt",
        ]

    async def exec_cmd(self, at_pod: MemberIdentity, cmd: list[str]) -> ReconcileResult:
        """Run create_db and turn its outcome into events and a result.

        Raises:
            DatabaseInitError: If create_db failed with unrecognized output
        """
        self.recorder.event(
            self.vdb, EventType.NORMAL, events.CREATE_DB_START, "Calling 'admintools -t create_db'"
        )
        start = time.monotonic()
        res = await self.runner.exec_admintools(at_pod, self.container, *cmd)
        if res.error is not None:
            category = classify_output(res.stdout)
            if is_transient(category):
                reason, message = transient_warning(self.vdb, category, "write to")
                self.recorder.event(self.vdb, EventType.WARNING, reason, message)
                return ReconcileResult.requeue_now()

            self.recorder.event(
                self.vdb, EventType.WARNING, events.CREATE_DB_FAILED, "Failed to create the database"
            )
            raise DatabaseInitError("create_db", self.vdb.spec.db_name) from res.error

        self.recorder.event(
            self.vdb, EventType.NORMAL, events.CREATE_DB_SUCCEEDED,
            f"Successfully created database with subcluster '{self.vdb.spec.subclusters[0].name}'. "
            f"It took {format_elapsed(time.monotonic() - start)}",
        )
        return ReconcileResult.done()
