"""Shared fixtures: cluster specs, PodFacts snapshots and fake collaborators."""

import pytest

from vdb_operator.cmds import FakePodRunner
from vdb_operator.credentials import StaticCredentials
from vdb_operator.events import MemoryEventRecorder
from vdb_operator.podfacts import PodFact, PodFacts
from vdb_operator.vdb import VerticaDB
from vdb_protocols import IPFamily, Tristate


def build_vdb(
    sizes: tuple[int, ...] = (3,),
    init_policy: str = "Create",
    k_safety: int = 1,
    endpoint: str = "https://s3.amazonaws.com",
) -> VerticaDB:
    return VerticaDB.model_validate(
        {
            "apiVersion": "vertica.com/v1beta1",
            "kind": "VerticaDB",
            "metadata": {"name": "vertdb", "namespace": "default", "uid": "abcd-1234"},
            "spec": {
                "dbName": "vertdb",
                "initPolicy": init_policy,
                "kSafety": k_safety,
                "shardCount": 6,
                "local": {"dataPath": "/data", "depotPath": "/depot"},
                "communal": {
                    "path": "s3://nimbusdb/db",
                    "endpoint": endpoint,
                    "credentialSecret": "s3-auth",
                },
                "subclusters": [
                    {"name": f"sc{i + 1}", "size": size} for i, size in enumerate(sizes)
                ],
            },
        }
    )


def build_pfacts(
    vdb: VerticaDB,
    db_exists: Tristate = Tristate.FALSE,
    agent_running: Tristate = Tristate.FALSE,
    ip_family: IPFamily = IPFamily.IPV4,
) -> PodFacts:
    """Facts for every expected member, all running, with node names in ordinal order."""
    pfacts = PodFacts()
    for n, (sc, member) in enumerate(vdb.iter_pods(), start=1):
        pfacts.detail[member] = PodFact(
            name=member,
            subcluster=sc.name,
            dns_name=vdb.pod_dns_name(member),
            compat21_node_name=f"node{n:04d}",
            running=True,
            db_exists=db_exists,
            agent_running=agent_running,
            ip_family=ip_family,
            pod_ip="fd00::1" if ip_family == IPFamily.IPV6 else f"10.0.0.{n}",
        )
    return pfacts


@pytest.fixture
def make_vdb():
    return build_vdb


@pytest.fixture
def make_pfacts():
    return build_pfacts


@pytest.fixture
def runner() -> FakePodRunner:
    return FakePodRunner()


@pytest.fixture
def recorder() -> MemoryEventRecorder:
    return MemoryEventRecorder()


@pytest.fixture
def credentials() -> StaticCredentials:
    return StaticCredentials("minio", "minio123")
