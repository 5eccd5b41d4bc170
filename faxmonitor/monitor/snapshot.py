from dataclasses import dataclass
from enum import Enum

from faxmonitor.fax.codes import is_terminal_status
from faxmonitor.fax.models import FaxJobStatus


class TransitionKind(str, Enum):
    ADDED = "added"
    CHANGED = "changed"
    REMOVED = "removed"


@dataclass(frozen=True)
class Transition:
    """A classified change of one outgoing job between two queue polls."""

    kind: TransitionKind
    job_id: str
    status: FaxJobStatus | None = None
    terminal_status: int | None = None


class ActiveJobSnapshot:
    """Last seen queue entry per outgoing job id.

    Process-local; a fresh snapshot is built on every reconnect and filled
    from the queue itself, never from the job store.
    """

    def __init__(self) -> None:
        self._entries: dict[str, FaxJobStatus] = {}
        # Terminal ids already reported that still linger in the queue.
        self._reported_terminal: set[str] = set()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, job_id: object) -> bool:
        return job_id in self._entries

    def diff(self, queue: list[FaxJobStatus]) -> list[Transition]:
        """Classify a queue listing against the snapshot and absorb it.

        ``queue`` must be ordered by job id. Every job that reached a terminal
        status is closed with that status, whether or not the snapshot knew
        it, and reported once while it lingers in the queue. Jobs that
        vanished from the queue are closed without one.
        """
        transitions: list[Transition] = []
        processed: set[str] = set()
        terminal: dict[str, int] = {}

        for entry in queue:
            if is_terminal_status(entry.status):
                terminal[entry.job_id] = entry.status
                continue
            processed.add(entry.job_id)
            previous = self._entries.get(entry.job_id)
            if previous is None:
                transitions.append(Transition(TransitionKind.ADDED, entry.job_id, entry))
                transitions.append(Transition(TransitionKind.CHANGED, entry.job_id, entry))
            elif previous.status_tuple != entry.status_tuple:
                transitions.append(Transition(TransitionKind.CHANGED, entry.job_id, entry))
            else:
                continue
            self._entries[entry.job_id] = entry

        closing = (self._entries.keys() - processed) | (
            terminal.keys() - self._reported_terminal
        )
        for job_id in sorted(closing):
            transitions.append(
                Transition(
                    TransitionKind.REMOVED,
                    job_id,
                    terminal_status=terminal.get(job_id),
                )
            )
            self._entries.pop(job_id, None)
        self._reported_terminal = set(terminal)

        return transitions
