"""
Factory for runner, recorder and credential source instances.

Uses lazy imports so the docker backend does not load the Kubernetes
client configuration and vice versa.
"""

from pathlib import Path
from typing import TYPE_CHECKING

from vdb_operator.config import Settings
from vdb_operator.events import MemoryEventRecorder
from vdb_operator.reconcilers.controller import VerticaDBReconciler
from vdb_operator.sources import FileSpecSource, KubernetesSpecSource, SpecSource

if TYPE_CHECKING:
    from vdb_operator.credentials import CredentialSource
    from vdb_protocols import EventRecorderProtocol, PodRunnerProtocol

# Hardcoded list of available runner backends
AVAILABLE_RUNNERS = ["kubernetes", "docker"]


def load_kube_config(settings: Settings) -> None:
    """Configure the Kubernetes client from the cluster or a kubeconfig."""
    from kubernetes import config

    if settings.in_cluster:
        config.load_incluster_config()
    else:
        config.load_kube_config(config_file=settings.kubeconfig)


def create_backend(
    settings: Settings,
) -> tuple["PodRunnerProtocol", "EventRecorderProtocol", "CredentialSource"]:
    """
    Create runner, recorder and credential source for the configured backend.

    Raises:
        ValueError: If settings.runner is not recognized
    """
    if settings.runner == "kubernetes":
        from vdb_operator.cmds.k8s import KubernetesPodRunner
        from vdb_operator.credentials import KubernetesSecretCredentials
        from vdb_operator.events import KubernetesEventRecorder

        load_kube_config(settings)
        return KubernetesPodRunner(), KubernetesEventRecorder(), KubernetesSecretCredentials()
    elif settings.runner == "docker":
        from vdb_operator.cmds.docker import DockerPodRunner
        from vdb_operator.credentials import StaticCredentials

        return (
            DockerPodRunner(),
            MemoryEventRecorder(),
            StaticCredentials(settings.communal_access_key, settings.communal_secret_key),
        )
    else:
        raise ValueError(
            f"Unknown runner '{settings.runner}'. "
            f"Available runners: {', '.join(AVAILABLE_RUNNERS)}"
        )


def create_source(settings: Settings, spec_paths: list[Path]) -> SpecSource:
    """
    Create the spec source: manifest files if given, else the cluster.

    Raises:
        ValueError: If no files are given and the runner is not kubernetes
    """
    if spec_paths:
        return FileSpecSource(spec_paths)
    if settings.runner != "kubernetes":
        raise ValueError(f"Runner '{settings.runner}' needs --spec manifest files")

    load_kube_config(settings)
    return KubernetesSpecSource()


def create_reconciler(settings: Settings, spec_paths: list[Path]) -> VerticaDBReconciler:
    """Build a VerticaDBReconciler reading specs from spec_paths (or the cluster)."""
    runner, recorder, credentials = create_backend(settings)
    return VerticaDBReconciler(
        source=create_source(settings, spec_paths),
        runner=runner,
        recorder=recorder,
        credentials=credentials,
        container=settings.server_container,
    )
