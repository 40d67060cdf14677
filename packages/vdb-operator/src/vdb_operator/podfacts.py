"""
PodFacts: point-in-time snapshot of observed member state.

A snapshot is built at the start of every reconciliation pass by running a
probe script in each expected member, handed by reference to every actor
of that pass and discarded afterwards. It is never persisted or merged with
an earlier snapshot; a restarted pass re-derives everything by probing.

Probe output is one key=value pair per line:
    pod_ip=10.244.1.7
    db_exists=true
    compat21_node_name=node0001
    agent_running=false
Keys that are missing leave the corresponding flag UNKNOWN.
"""

import asyncio
import ipaddress
import logging
from collections.abc import Iterator
from dataclasses import dataclass

from vdb_operator.vdb import Subcluster, VerticaDB
from vdb_protocols import IPFamily, MemberIdentity, PodRunnerProtocol, Tristate

logger = logging.getLogger(__name__)

ADMINTOOLS_CONF = "/opt/vertica/config/admintools.conf"
AGENT_BIN = "/opt/vertica/sbin/vertica_agent"


@dataclass
class PodFact:
    """
    Observed state of one member.

    Attributes:
        name: Member identity
        subcluster: Name of the subcluster the member belongs to
        dns_name: Host name used when listing the member to admintools
        compat21_node_name: Legacy node name (node0001, ...) used for ordering
        running: Whether the server container is up
        db_exists: Whether the member is part of an initialized database
        agent_running: Whether the management agent is running
        ip_family: Address family of the member's IP
        pod_ip: The member's IP as reported by the probe
    """

    name: MemberIdentity
    subcluster: str
    dns_name: str
    compat21_node_name: str = ""
    running: bool = False
    db_exists: Tristate = Tristate.UNKNOWN
    agent_running: Tristate = Tristate.UNKNOWN
    ip_family: IPFamily = IPFamily.UNKNOWN
    pod_ip: str = ""


class PodFacts:
    """
    Mapping of member identity to PodFact for one reconciliation pass.

    Members that could not be probed are absent; callers treat absence as
    "not ready". Iteration follows insertion order, which collect_pod_facts
    makes subcluster order then ordinal order.
    """

    def __init__(self, detail: dict[MemberIdentity, PodFact] | None = None) -> None:
        self.detail: dict[MemberIdentity, PodFact] = detail or {}

    def __contains__(self, member: object) -> bool:
        return member in self.detail

    def __iter__(self) -> Iterator[PodFact]:
        return iter(self.detail.values())

    def __len__(self) -> int:
        return len(self.detail)

    def get(self, member: MemberIdentity) -> PodFact | None:
        return self.detail.get(member)

    def db_exists(self) -> Tristate:
        """
        Aggregate database existence across probed members.

        TRUE if any member is part of a database, UNKNOWN if none is and at
        least one member could not tell, FALSE otherwise.
        """
        result = Tristate.FALSE
        for pf in self.detail.values():
            if pf.db_exists.is_true:
                return Tristate.TRUE
            if pf.db_exists.is_unknown:
                result = Tristate.UNKNOWN
        return result


def gen_probe_script(vdb: VerticaDB) -> str:
    """Shell script printing the key=value facts of the member it runs in."""
    catalog_glob = f"{vdb.spec.local.data_path}/{vdb.spec.db_name}/v_*_catalog"
    return "\n".join(
        [
            "POD_IP=\"${POD_IP:-$(hostname -i | awk '{print $1}')}\"",
            "echo \"pod_ip=$POD_IP\"",
            f"if ls -d {catalog_glob} >/dev/null 2>&1; "
            "then echo db_exists=true; else echo db_exists=false; fi",
            f"if [ -f {ADMINTOOLS_CONF} ]; then "
            "echo \"compat21_node_name=$(grep -E '^node[0-9]{4} = ' "
            f"{ADMINTOOLS_CONF} | grep -F \"= $POD_IP,\" | cut -d' ' -f1 | head -1)\"; fi",
            f"if {AGENT_BIN} status >/dev/null 2>&1; "
            "then echo agent_running=true; else echo agent_running=false; fi",
        ]
    )


def _parse_tristate(value: str | None) -> Tristate:
    if value is None:
        return Tristate.UNKNOWN
    value = value.strip().lower()
    if value in ("true", "false"):
        return Tristate.from_bool(value == "true")
    return Tristate.UNKNOWN


def ip_family_of(address: str) -> IPFamily:
    """Address family of a textual IP, UNKNOWN if it does not parse."""
    try:
        ip = ipaddress.ip_address(address.strip())
    except ValueError:
        return IPFamily.UNKNOWN
    return IPFamily.IPV6 if ip.version == 6 else IPFamily.IPV4


def parse_probe_output(stdout: str) -> dict[str, str]:
    """
    Parse key=value lines of probe output.

    Lines without "=" are ignored; later keys override earlier ones.
    """
    fields: dict[str, str] = {}
    for line in stdout.splitlines():
        key, sep, value = line.partition("=")
        if not sep:
            continue
        fields[key.strip()] = value.strip()
    return fields


def build_pod_fact(
    vdb: VerticaDB, sc: Subcluster, member: MemberIdentity, stdout: str
) -> PodFact:
    """Assemble the PodFact of a member that answered the probe."""
    fields = parse_probe_output(stdout)
    pod_ip = fields.get("pod_ip", "")
    return PodFact(
        name=member,
        subcluster=sc.name,
        dns_name=vdb.pod_dns_name(member),
        compat21_node_name=fields.get("compat21_node_name", ""),
        running=True,
        db_exists=_parse_tristate(fields.get("db_exists")),
        agent_running=_parse_tristate(fields.get("agent_running")),
        ip_family=ip_family_of(pod_ip) if pod_ip else IPFamily.UNKNOWN,
        pod_ip=pod_ip,
    )


async def collect_pod_facts(
    vdb: VerticaDB, runner: PodRunnerProtocol, container: str
) -> PodFacts:
    """
    Probe every expected member and build a fresh snapshot.

    All probes run concurrently and are awaited together before returning.
    A member whose probe fails (not found, execution error, or an
    exception from the runner) is left out;
    one failure does not stop the others. There are no retries here.

    Args:
        vdb: Cluster spec naming the expected members
        runner: Pod runner used to execute the probe
        container: Container to probe in

    Returns:
        PodFacts holding every member that answered
    """
    script = gen_probe_script(vdb)
    expected = list(vdb.iter_pods())

    async def _probe(sc: Subcluster, member: MemberIdentity) -> PodFact | None:
        res = await runner.exec_in_pod(member, container, "bash", "-c", script)
        if res.error is not None:
            logger.info(f"Probe of {member} failed, leaving it out of pod facts: {res.error}")
            return None
        return build_pod_fact(vdb, sc, member, res.stdout)

    facts = await asyncio.gather(
        *(_probe(sc, member) for sc, member in expected), return_exceptions=True
    )

    pfacts = PodFacts()
    for (_, member), pf in zip(expected, facts):
        if isinstance(pf, Exception):
            logger.info(f"Probe of {member} raised, leaving it out of pod facts: {pf!r}")
            continue
        if isinstance(pf, BaseException):
            raise pf
        if pf is not None:
            pfacts.detail[pf.name] = pf
    logger.debug(f"Collected pod facts for {len(pfacts)}/{len(expected)} members of {vdb.identity}")
    return pfacts
