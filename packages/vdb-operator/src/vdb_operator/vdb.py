"""
VerticaDB cluster spec models.

The cluster spec is the declarative description of the desired database
cluster. It is owned by the event source and read-only for the duration of
a reconciliation pass. Field aliases follow the camelCase names used in the
custom resource manifest so documents can be loaded as-is.

Scheduling and exposure attributes (service type, external IPs, affinity,
tolerations, resources) are carried for the manifest builders and are not
interpreted here.
"""

from collections.abc import Iterator
from enum import Enum
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic.alias_generators import to_camel

from vdb_operator.exceptions import SpecLoadError
from vdb_protocols import MemberIdentity

API_VERSION = "vertica.com/v1beta1"
KIND = "VerticaDB"

# Minimum fault tolerance: a single member may initialize the database.
K_SAFETY_0 = 0


class _CRModel(BaseModel):
    """Base for custom resource models: camelCase aliases, snake_case attributes."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class InitPolicy(str, Enum):
    """How the database is initialized against communal storage."""

    CREATE = "Create"
    """Create a new database at an empty communal location."""

    REVIVE = "Revive"
    """Revive an existing database from its communal location."""

    SCHEDULE_ONLY = "ScheduleOnly"
    """Only schedule pods; never initialize a database."""


class Subcluster(_CRModel):
    """One named, independently sized group of members."""

    name: str
    size: int = Field(default=3, ge=0)
    service_type: str = "ClusterIP"
    external_ips: list[str] = Field(default_factory=list, alias="externalIPs")
    node_port: int | None = None
    node_selector: dict[str, str] = Field(default_factory=dict)
    affinity: dict[str, Any] | None = None
    tolerations: list[dict[str, Any]] = Field(default_factory=list)
    resources: dict[str, Any] = Field(default_factory=dict)

    @property
    def compatible_name(self) -> str:
        """Subcluster name made safe for use in object names."""
        return self.name.lower().replace("_", "-")


class LocalStorage(_CRModel):
    data_path: str = "/data"
    depot_path: str = "/depot"
    storage_class: str = ""
    request_size: str = "500Gi"


class CommunalStorage(_CRModel):
    """Location of the shared object storage holding the catalog and data."""

    path: str
    endpoint: str = ""
    credential_secret: str = ""
    include_uid_in_path: bool = Field(default=False, alias="includeUIDInPath")


class VerticaDBSpec(_CRModel):
    image: str = "vertica/vertica-k8s:latest"
    image_pull_policy: str = "IfNotPresent"
    db_name: str = "vertdb"
    init_policy: InitPolicy = InitPolicy.CREATE
    k_safety: int = Field(default=1, ge=0)
    shard_count: int = Field(default=12, ge=1)
    license_secret: str = ""
    local: LocalStorage = Field(default_factory=LocalStorage)
    communal: CommunalStorage
    subclusters: list[Subcluster] = Field(min_length=1)

    @field_validator("subclusters")
    @classmethod
    def _unique_subcluster_names(cls, value: list[Subcluster]) -> list[Subcluster]:
        seen: set[str] = set()
        for sc in value:
            if sc.compatible_name in seen:
                raise ValueError(f"duplicate subcluster name '{sc.name}'")
            seen.add(sc.compatible_name)
        return value


class ObjectMeta(_CRModel):
    name: str
    namespace: str = "default"
    uid: str = ""


class VerticaDB(_CRModel):
    """
    The cluster spec for one database.

    Example:
        vdb = load_vdb(Path("vertdb.yaml"))
        for sc, member in vdb.iter_pods():
            print(sc.name, member)
    """

    api_version: str = API_VERSION
    kind: str = KIND
    metadata: ObjectMeta
    spec: VerticaDBSpec

    @property
    def identity(self) -> MemberIdentity:
        """Namespaced name of this object (used as the reconcile request)."""
        return MemberIdentity(self.metadata.namespace, self.metadata.name)

    @property
    def communal_path(self) -> str:
        path = self.spec.communal.path
        if self.spec.communal.include_uid_in_path and self.metadata.uid:
            return f"{path.rstrip('/')}/{self.metadata.uid}"
        return path

    @property
    def headless_service_name(self) -> str:
        return self.metadata.name

    def pod_name(self, sc: Subcluster, index: int) -> MemberIdentity:
        """Deterministic member name for ordinal index of subcluster sc."""
        return MemberIdentity(
            self.metadata.namespace,
            f"{self.metadata.name}-{sc.compatible_name}-{index}",
        )

    def pod_dns_name(self, member: MemberIdentity) -> str:
        """Stable DNS name of member behind the headless service."""
        return f"{member.name}.{self.headless_service_name}.{member.namespace}"

    def iter_pods(self) -> Iterator[tuple[Subcluster, MemberIdentity]]:
        """Yield every expected member, subcluster by subcluster, in ordinal order."""
        for sc in self.spec.subclusters:
            for i in range(sc.size):
                yield sc, self.pod_name(sc, i)


def parse_vdb(data: Any, source: str = "<memory>") -> VerticaDB:
    """
    Validate a decoded manifest into a VerticaDB.

    Raises:
        SpecLoadError: If the document is not a valid VerticaDB
    """
    if not isinstance(data, dict):
        raise SpecLoadError(source, "document is not a mapping")
    kind = data.get("kind", KIND)
    if kind != KIND:
        raise SpecLoadError(source, f"unexpected kind '{kind}'")
    try:
        return VerticaDB.model_validate(data)
    except ValidationError as e:
        raise SpecLoadError(source, str(e)) from e


def load_vdb(path: Path) -> VerticaDB:
    """
    Load a VerticaDB from a YAML manifest file.

    Raises:
        SpecLoadError: If the file cannot be read, parsed or validated
    """
    try:
        data = yaml.safe_load(path.read_text())
    except (OSError, yaml.YAMLError) as e:
        raise SpecLoadError(str(path), str(e)) from e
    return parse_vdb(data, source=str(path))
