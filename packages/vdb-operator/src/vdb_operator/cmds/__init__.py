"""
Pod runners for executing commands inside cluster members.

- KubernetesPodRunner: Kubernetes exec API
- DockerPodRunner: local Docker containers via python-on-whales
- FakePodRunner: records invocations, returns queued results
"""

from vdb_operator.cmds.runner import ADMINTOOLS, BasePodRunner, CmdHistory, FakePodRunner

__all__ = [
    "ADMINTOOLS",
    "BasePodRunner",
    "CmdHistory",
    "FakePodRunner",
]
