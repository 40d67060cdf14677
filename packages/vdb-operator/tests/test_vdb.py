"""Tests for the VerticaDB spec models."""

import pytest
import yaml

from vdb_operator.exceptions import SpecLoadError
from vdb_operator.vdb import InitPolicy, VerticaDB, load_vdb, parse_vdb
from vdb_protocols import MemberIdentity

MANIFEST = """
apiVersion: vertica.com/v1beta1
kind: VerticaDB
metadata:
  name: vertdb
  namespace: prod
  uid: 1f2e3d
spec:
  initPolicy: Revive
  kSafety: 0
  communal:
    path: s3://nimbusdb/db
    endpoint: http://minio:9000
    credentialSecret: s3-auth
    includeUIDInPath: true
  subclusters:
    - name: Default_SC
      size: 2
      externalIPs: [10.1.1.1]
    - name: analytics
"""


class TestLoadVdb:
    def test_load_manifest(self, tmp_path):
        path = tmp_path / "vdb.yaml"
        path.write_text(MANIFEST)

        vdb = load_vdb(path)

        assert vdb.identity == MemberIdentity("prod", "vertdb")
        assert vdb.spec.init_policy == InitPolicy.REVIVE
        assert vdb.spec.k_safety == 0
        assert vdb.spec.db_name == "vertdb"
        assert vdb.spec.shard_count == 12
        assert vdb.spec.subclusters[0].external_ips == ["10.1.1.1"]
        assert vdb.spec.subclusters[1].size == 3
        assert vdb.spec.local.depot_path == "/depot"

    def test_missing_file(self, tmp_path):
        with pytest.raises(SpecLoadError):
            load_vdb(tmp_path / "nope.yaml")

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("spec: [unclosed")
        with pytest.raises(SpecLoadError):
            load_vdb(path)

    def test_wrong_kind(self):
        with pytest.raises(SpecLoadError, match="unexpected kind"):
            parse_vdb({"kind": "Pod", "metadata": {"name": "x"}})

    def test_not_a_mapping(self):
        with pytest.raises(SpecLoadError):
            parse_vdb(["a", "b"])

    @pytest.mark.parametrize(
        "spec",
        [
            {"communal": {"path": "s3://b"}, "subclusters": []},
            {"communal": {"path": "s3://b"}, "subclusters": [{"name": "a"}, {"name": "A"}]},
            {"communal": {"path": "s3://b"}, "subclusters": [{"name": "a", "size": -1}]},
            {"communal": {"path": "s3://b"}, "kSafety": -1, "subclusters": [{"name": "a"}]},
            {"subclusters": [{"name": "a"}]},
        ],
    )
    def test_validation_errors(self, spec):
        with pytest.raises(SpecLoadError):
            parse_vdb({"metadata": {"name": "x"}, "spec": spec})


class TestNaming:
    @pytest.fixture
    def vdb(self) -> VerticaDB:
        return parse_vdb(yaml.safe_load(MANIFEST))

    def test_pod_names_use_compatible_subcluster_name(self, vdb):
        names = [m.name for _, m in vdb.iter_pods()]
        assert names == [
            "vertdb-default-sc-0",
            "vertdb-default-sc-1",
            "vertdb-analytics-0",
            "vertdb-analytics-1",
            "vertdb-analytics-2",
        ]

    def test_pod_dns_name(self, vdb):
        member = vdb.pod_name(vdb.spec.subclusters[0], 1)
        assert vdb.pod_dns_name(member) == "vertdb-default-sc-1.vertdb.prod"

    def test_communal_path_with_uid(self, vdb):
        assert vdb.communal_path == "s3://nimbusdb/db/1f2e3d"

    def test_communal_path_without_uid(self, make_vdb):
        assert make_vdb().communal_path == "s3://nimbusdb/db"

    def test_zero_size_subcluster_has_no_members(self, make_vdb):
        vdb = make_vdb(sizes=(0, 1))
        assert [m.name for _, m in vdb.iter_pods()] == ["vertdb-sc2-0"]
