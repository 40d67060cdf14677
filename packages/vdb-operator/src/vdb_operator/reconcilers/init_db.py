"""
Generic database initializer shared by create_db and revive_db.

The workflow for one pass:
1. If any probed member is already part of a database, there is nothing
   to do. If existence cannot be determined yet, requeue.
2. Ask the strategy for the ordered member list. If a member is missing
   from the snapshot, requeue without running anything.
3. Write the communal auth parameter file on the first selected member.
4. Run the strategy's pre-command setup on that member.
5. Build the admintools command and let the strategy run and classify it.

The policy check (whether this strategy applies at all) is done by the
owning reconciler before the workflow is started.
"""

import logging
from typing import Protocol
from urllib.parse import urlparse

from vdb_operator import events
from vdb_operator.classify import OutputCategory
from vdb_operator.credentials import CredentialSource
from vdb_operator.exceptions import CommandExecutionError, CredentialsError
from vdb_operator.podfacts import PodFact, PodFacts
from vdb_operator.vdb import VerticaDB
from vdb_protocols import MemberIdentity, PodRunnerProtocol, ReconcileResult

# Auth parameter file passed with --communal-storage-params
AUTH_PARMS_FILE = "/home/dbadmin/auth_parms.conf"


class DatabaseInitializer(Protocol):
    """Strategy steps that differ between creating and reviving a database."""

    async def pre_cmd_setup(self, at_pod: MemberIdentity) -> None:
        """Prepare the member that will run admintools."""
        ...

    def get_pod_list(self) -> tuple[list[PodFact], bool]:
        """Ordered members taking part, and False if any member is missing."""
        ...

    def gen_cmd(self, host_list: list[str]) -> list[str]:
        """admintools arguments for the given host list."""
        ...

    def get_additional_auth_parms(self) -> str:
        """Extra auth parameter lines appended to the auth file for this call."""
        ...

    async def exec_cmd(self, at_pod: MemberIdentity, cmd: list[str]) -> ReconcileResult:
        """Run cmd on at_pod, emit events, and classify the outcome."""
        ...


async def write_file_in_pod(
    runner: PodRunnerProtocol,
    member: MemberIdentity,
    container: str,
    path: str,
    content: str,
) -> None:
    """
    Write content to path inside member.

    The path and content are passed as positional parameters of the shell,
    so neither is interpreted by it.

    Raises:
        CommandExecutionError: If the write fails
    """
    res = await runner.exec_in_pod(
        member, container, "bash", "-c", 'cat > "$0" <<< "$1"', path, content
    )
    if res.error is not None:
        if isinstance(res.error, CommandExecutionError):
            raise res.error
        raise CommandExecutionError(member, ["bash", "-c", f"cat > {path}"], reason=str(res.error)) from res.error


def sort_by_compat21(pods: list[PodFact]) -> list[PodFact]:
    """
    Order members by legacy node name.

    admintools numbers nodes in the order hosts are listed, and restart_db
    expects that numbering to match the legacy node names.
    """
    return sorted(pods, key=lambda pf: pf.compat21_node_name)


def endpoint_host(endpoint: str) -> str:
    """Host (and port) part of the communal endpoint URL."""
    parsed = urlparse(endpoint)
    return parsed.netloc or parsed.path


def transient_warning(vdb: VerticaDB, category: OutputCategory, access: str) -> tuple[str, str]:
    """
    Event reason and message for a transient communal storage condition.

    Args:
        vdb: Cluster spec being initialized
        category: One of TRANSIENT_CATEGORIES
        access: "write to" or "read from", as seen by the admintools task
    """
    if category == OutputCategory.ENDPOINT_UNREACHABLE:
        return (
            events.S3_ENDPOINT_ISSUE,
            f"Unable to {access} the bucket in the S3 endpoint '{vdb.spec.communal.endpoint}'",
        )
    if category == OutputCategory.BUCKET_MISSING:
        return (
            events.S3_BUCKET_DOES_NOT_EXIST,
            f"The bucket in the S3 path '{vdb.communal_path}' does not exist",
        )
    return (
        events.COMMUNAL_PATH_IS_NOT_EMPTY,
        f"The communal path '{vdb.communal_path}' is not empty",
    )


class GenericDatabaseInitializer:
    """
    Shared create/revive workflow driven by a DatabaseInitializer strategy.

    Example:
        g = GenericDatabaseInitializer(
            initializer=self, vdb=self.vdb, runner=self.runner,
            pfacts=self.pfacts, credentials=self.credentials,
            container=self.container, log=self.log,
        )
        return await g.check_and_run_init()
    """

    def __init__(
        self,
        initializer: DatabaseInitializer,
        vdb: VerticaDB,
        runner: PodRunnerProtocol,
        pfacts: PodFacts,
        credentials: CredentialSource | None,
        container: str,
        log: logging.Logger,
    ) -> None:
        self.initializer = initializer
        self.vdb = vdb
        self.runner = runner
        self.pfacts = pfacts
        self.credentials = credentials
        self.container = container
        self.log = log

    async def check_and_run_init(self) -> ReconcileResult:
        """Initialize the database unless some member already belongs to one."""
        exists = self.pfacts.db_exists()
        if exists.is_true:
            self.log.debug(f"Database {self.vdb.spec.db_name} already exists, skipping init")
            return ReconcileResult.done()
        if exists.is_unknown:
            self.log.info("Database existence is not known for every member yet, requeue")
            return ReconcileResult.requeue_now()
        return await self.run_init()

    async def run_init(self) -> ReconcileResult:
        pod_list, ok = self.initializer.get_pod_list()
        if not ok or not pod_list:
            self.log.info("Not all pods are in pod facts yet, cannot initialize the database")
            return ReconcileResult.requeue_now()

        at_pod = pod_list[0].name
        await self.construct_auth_parms(at_pod)
        await self.initializer.pre_cmd_setup(at_pod)
        cmd = self.initializer.gen_cmd([pf.dns_name for pf in pod_list])
        return await self.initializer.exec_cmd(at_pod, cmd)

    async def construct_auth_parms(self, at_pod: MemberIdentity) -> None:
        """
        Write the communal auth parameter file on at_pod.

        Raises:
            CredentialsError: If no credential source is configured
            CommandExecutionError: If the file cannot be written
        """
        if self.credentials is None:
            raise CredentialsError("No communal credential source configured")
        creds = await self.credentials.get_communal_credentials(self.vdb)

        content = f"awsauth = {creds.auth}\n"
        endpoint = self.vdb.spec.communal.endpoint
        if endpoint:
            content += f"awsendpoint = {endpoint_host(endpoint)}\n"
            if urlparse(endpoint).scheme == "http":
                content += "awsenablehttps = 0\n"
        content += self.initializer.get_additional_auth_parms()

        await write_file_in_pod(self.runner, at_pod, self.container, AUTH_PARMS_FILE, content)
