from faxmonitor.fax.base import BaseFaxServer
from faxmonitor.logging.logger import Log
from faxmonitor.monitor.reconciler import Reconciler
from faxmonitor.monitor.snapshot import ActiveJobSnapshot, Transition


class QueuePoller:
    """Pull the outgoing queue, diff it against the snapshot, apply the result."""

    def __init__(
        self,
        server: BaseFaxServer,
        snapshot: ActiveJobSnapshot,
        reconciler: Reconciler,
    ) -> None:
        self._server = server
        self._snapshot = snapshot
        self._reconciler = reconciler

    @property
    def snapshot(self) -> ActiveJobSnapshot:
        return self._snapshot

    def poll(self) -> list[Transition]:
        """Run one poll tick and return the transitions it applied."""
        queue = sorted(self._server.get_outgoing_queue(), key=lambda s: s.job_id)
        transitions = self._snapshot.diff(queue)
        if transitions:
            Log.debug(
                f"Outgoing queue: {len(queue)} jobs, {len(transitions)} transitions"
            )
        self._reconciler.apply(transitions)
        return transitions
