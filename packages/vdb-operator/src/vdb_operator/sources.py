"""
Sources of VerticaDB cluster specs.

A source returns the current spec for a request, or None if the object no
longer exists. Specs are fetched fresh for every pass.
"""

import asyncio
from pathlib import Path
from typing import Protocol

from kubernetes import client
from kubernetes.client.rest import ApiException

from vdb_operator.vdb import API_VERSION, VerticaDB, load_vdb, parse_vdb
from vdb_protocols import MemberIdentity

GROUP, VERSION = API_VERSION.split("/")
PLURAL = "verticadbs"


class SpecSource(Protocol):
    async def get(self, request: MemberIdentity) -> VerticaDB | None:
        ...


class FileSpecSource:
    """Specs read from YAML manifest files, re-read on every get()."""

    def __init__(self, paths: list[Path]):
        self.paths = list(paths)

    def load_all(self) -> list[VerticaDB]:
        return [load_vdb(p) for p in self.paths]

    async def get(self, request: MemberIdentity) -> VerticaDB | None:
        for vdb in self.load_all():
            if vdb.identity == request:
                return vdb
        return None


class KubernetesSpecSource:
    """Specs read from VerticaDB custom objects."""

    def __init__(self, custom_api: client.CustomObjectsApi | None = None):
        self._custom_api = custom_api or client.CustomObjectsApi()

    async def get(self, request: MemberIdentity) -> VerticaDB | None:
        loop = asyncio.get_running_loop()

        def _blocking_get() -> dict | None:
            try:
                return self._custom_api.get_namespaced_custom_object(
                    GROUP, VERSION, request.namespace, PLURAL, request.name
                )
            except ApiException as e:
                if e.status == 404:
                    return None
                raise

        obj = await loop.run_in_executor(None, _blocking_get)
        if obj is None:
            return None
        return parse_vdb(obj, source=str(request))
