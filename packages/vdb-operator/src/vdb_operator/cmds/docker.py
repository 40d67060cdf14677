"""Pod runner executing commands in local Docker containers.

Members of a locally run cluster are plain containers named after the
member (e.g. "vertdb-sc1-0"); the namespace is ignored. Provides async
wrappers around python-on-whales via run_in_executor.
"""

import asyncio
import logging

from python_on_whales import docker
from python_on_whales.exceptions import DockerException, NoSuchContainer

from vdb_operator.cmds.runner import BasePodRunner
from vdb_operator.exceptions import CommandExecutionError, PodNotFoundError
from vdb_protocols import ExecResult, MemberIdentity

logger = logging.getLogger(__name__)


class DockerPodRunner(BasePodRunner):
    """Run commands in containers through the Docker CLI.

    The container argument is accepted for interface compatibility; a
    local member has a single container.
    """

    def __init__(self, user: str | None = None):
        """Initialize runner with python-on-whales docker client.

        Args:
            user: User to run commands as (default: container's default user)
        """
        self._docker = docker
        self._user = user

    async def exec_in_pod(
        self, member: MemberIdentity, container: str, *command: str
    ) -> ExecResult:
        """Execute command inside the member's container.

        Returns:
            ExecResult; a non-zero exit keeps the output python-on-whales
            captured on the DockerException.
        """
        loop = asyncio.get_running_loop()
        argv = list(command)

        def _blocking_execute() -> ExecResult:
            try:
                output = self._docker.container.execute(
                    member.name,
                    argv,
                    user=self._user,
                    tty=False,
                    interactive=False,
                )
            except NoSuchContainer:
                return ExecResult(error=PodNotFoundError(member, argv))
            except DockerException as e:
                stdout = e.stdout or ""
                stderr = e.stderr or ""
                return ExecResult(
                    stdout,
                    stderr,
                    CommandExecutionError(member, argv, e.return_code, stdout, stderr),
                )
            return ExecResult(stdout=output or "")

        logger.debug(f"docker exec {member.name}: {' '.join(argv)}")
        return await loop.run_in_executor(None, _blocking_execute)
