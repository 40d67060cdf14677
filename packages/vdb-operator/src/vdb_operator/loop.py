"""
Periodic resync driver.

Runs a reconciliation pass for every known request at a fixed interval
until SIGINT/SIGTERM. A requeue shortens the wait before the next cycle;
a fatal error is logged and the request is retried on the next cycle.
This is a local stand-in for the orchestration platform's work queue, not
a backoff policy.

Uses asyncio.Event for shutdown coordination and wait_for with a timeout
for interruptible sleeps.
"""

import asyncio
import functools
import logging
import signal
from collections.abc import Sequence

from vdb_operator.reconcilers.controller import VerticaDBReconciler
from vdb_protocols import MemberIdentity, ReconcileResult

logger = logging.getLogger(__name__)


class ResyncLoop:
    """
    Long-running driver calling VerticaDBReconciler for each request.

    Requests are reconciled one after the other, so passes for the same
    request never overlap.

    Example:
        loop = ResyncLoop(reconciler, [vdb.identity], interval_seconds=30.0)
        await loop.run()  # Runs until SIGINT/SIGTERM
    """

    def __init__(
        self,
        reconciler: VerticaDBReconciler,
        requests: Sequence[MemberIdentity],
        interval_seconds: float = 30.0,
        requeue_delay_seconds: float = 5.0,
    ) -> None:
        self.reconciler = reconciler
        self.requests = list(requests)
        self.interval = interval_seconds
        self.requeue_delay = requeue_delay_seconds
        self._shutdown = asyncio.Event()

        self.cycles = 0
        self.last_results: dict[MemberIdentity, ReconcileResult | Exception] = {}

    async def run(self) -> None:
        """Run resync cycles until shutdown is requested."""
        loop = asyncio.get_running_loop()
        for sig in (signal.SIGINT, signal.SIGTERM):
            loop.add_signal_handler(sig, functools.partial(self._handle_signal, sig))

        logger.info(f"Resync loop starting (interval: {self.interval}s, {len(self.requests)} object(s))")
        while not self._shutdown.is_set():
            wait = await self.resync_cycle()
            try:
                await asyncio.wait_for(self._shutdown.wait(), timeout=wait)
            except asyncio.TimeoutError:
                pass  # Normal timeout, continue loop
        logger.info("Resync loop stopped")

    def stop(self) -> None:
        self._shutdown.set()

    def _handle_signal(self, sig: signal.Signals) -> None:
        logger.info(f"Received {sig.name}, shutting down...")
        self._shutdown.set()

    async def resync_cycle(self) -> float:
        """
        Reconcile every request once.

        Returns:
            Seconds to wait before the next cycle
        """
        self.cycles += 1
        wait = self.interval
        for request in self.requests:
            try:
                res = await self.reconciler.reconcile(request)
            except Exception as e:
                # Log but don't crash; the next cycle retries
                logger.error(f"Reconcile of {request} failed: {e}")
                self.last_results[request] = e
                continue

            self.last_results[request] = res
            if res.requeue_after:
                wait = min(wait, res.requeue_after)
            elif res.requeue:
                wait = min(wait, self.requeue_delay)
        return wait
