"""Pod runner executing commands in Kubernetes pods.

Uses the exec subresource through kubernetes.stream. The websocket client
is blocking, so every call runs in the default executor to keep the event
loop free, the same way the Docker runner wraps python-on-whales.
"""

import asyncio
import logging

from kubernetes import client
from kubernetes.client.rest import ApiException
from kubernetes.stream import stream

from vdb_operator.cmds.runner import BasePodRunner
from vdb_operator.exceptions import CommandExecutionError, PodNotFoundError
from vdb_protocols import ExecResult, MemberIdentity

logger = logging.getLogger(__name__)

# Upper bound for a single exec; create_db on a large cluster takes minutes
DEFAULT_EXEC_TIMEOUT = 1800


class KubernetesPodRunner(BasePodRunner):
    """Run commands in pod containers through the Kubernetes exec API.

    Note:
        Cancelling the awaiting task stops waiting for the result but the
        websocket read runs in a worker thread until the remote command
        exits or the exec timeout expires.
    """

    def __init__(
        self,
        core_api: client.CoreV1Api | None = None,
        timeout_seconds: float = DEFAULT_EXEC_TIMEOUT,
    ):
        self._core_api = core_api or client.CoreV1Api()
        self._timeout = timeout_seconds

    async def exec_in_pod(
        self, member: MemberIdentity, container: str, *command: str
    ) -> ExecResult:
        """Execute command in a pod container.

        Args:
            member: Pod to execute in
            container: Container name inside the pod
            command: Literal argument vector (not shell interpreted)

        Returns:
            ExecResult with stdout, stderr and, on failure, a
            CommandExecutionError (PodNotFoundError if the pod is missing)
        """
        loop = asyncio.get_running_loop()
        argv = list(command)

        def _blocking_exec() -> ExecResult:
            try:
                resp = stream(
                    self._core_api.connect_get_namespaced_pod_exec,
                    member.name,
                    member.namespace,
                    container=container,
                    command=argv,
                    stderr=True,
                    stdin=False,
                    stdout=True,
                    tty=False,
                    _preload_content=False,
                )
            except ApiException as e:
                if _is_not_found(e):
                    return ExecResult(error=PodNotFoundError(member, argv))
                return ExecResult(
                    error=CommandExecutionError(member, argv, reason=f"exec failed: {e.reason}")
                )
            except Exception as e:
                return ExecResult(error=CommandExecutionError(member, argv, reason=f"exec failed: {e}"))

            stdout = stderr = ""
            try:
                resp.run_forever(timeout=self._timeout)
                stdout = resp.read_stdout() or ""
                stderr = resp.read_stderr() or ""
                if resp.is_open():
                    return ExecResult(
                        stdout,
                        stderr,
                        CommandExecutionError(
                            member, argv, stdout=stdout, stderr=stderr,
                            reason=f"timed out after {self._timeout}s",
                        ),
                    )
                returncode = resp.returncode
            except Exception as e:
                return ExecResult(
                    stdout,
                    stderr,
                    CommandExecutionError(
                        member, argv, stdout=stdout, stderr=stderr,
                        reason=f"exec stream failed: {e}",
                    ),
                )
            finally:
                resp.close()

            if returncode != 0:
                return ExecResult(
                    stdout,
                    stderr,
                    CommandExecutionError(member, argv, returncode, stdout, stderr),
                )
            return ExecResult(stdout, stderr)

        logger.debug(f"exec in {member} ({container}): {' '.join(argv)}")
        return await loop.run_in_executor(None, _blocking_exec)


def _is_not_found(e: ApiException) -> bool:
    # websocket_call reports a failed handshake as status 0 with the HTTP
    # status line in the reason
    return e.status == 404 or "Handshake status 404" in str(e.reason or "")
