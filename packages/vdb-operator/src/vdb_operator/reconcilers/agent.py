"""Keep the management agent running on members of the database."""

from vdb_operator.podfacts import AGENT_BIN, PodFact
from vdb_operator.reconcilers.base import ReconcileActor
from vdb_protocols import IPFamily, MemberIdentity, ReconcileResult

# The agent is not started on members with this address family.
EXCLUDED_IP_FAMILY = IPFamily.IPV6


class AgentReconciler(ReconcileActor):
    """
    Start vertica_agent where it is not running yet.

    Members confirmed to be outside the database (db_exists FALSE) are
    skipped. A failed start is logged and retried on a later pass; it never
    requeues the pipeline.
    """

    def should_start_agent(self, pf: PodFact) -> bool:
        return (
            pf.running
            and not pf.db_exists.is_false
            and not pf.agent_running.is_true
            and pf.ip_family != EXCLUDED_IP_FAMILY
        )

    async def reconcile(self, request: MemberIdentity) -> ReconcileResult:
        for pf in self.pfacts:
            if not self.should_start_agent(pf):
                continue
            res = await self.runner.exec_in_pod(pf.name, self.container, AGENT_BIN, "start")
            if res.error is not None:
                self.log.warning(f"Failed to start vertica_agent in {pf.name}: {res.error}")
            else:
                self.log.info(f"Started vertica_agent in {pf.name}")
        return ReconcileResult.done()
