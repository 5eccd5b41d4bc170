from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class FaxJobDirection(str, Enum):
    INCOMING = "incoming"
    OUTGOING = "outgoing"


class StatusSource(str, Enum):
    """Which channel delivered a status update."""

    PUSH = "push"
    POLL = "poll"


@dataclass(frozen=True)
class FaxDevice:
    id: int
    name: str


@dataclass(frozen=True)
class FaxJobStatus:
    """Raw job status as reported by the fax server (push payload or queue entry)."""

    job_id: str
    status: int
    extended_status: int = 0
    current_page: int = 0
    pages: int = 0
    device_id: int = 0
    tsid: str = ""
    csid: str = ""
    sender_name: str = ""
    submission_time: datetime | None = None
    recipient_name: str | None = None
    recipient_number: str | None = None

    @property
    def status_tuple(self) -> tuple[int, int, int]:
        """The fields whose change counts as a new status point."""
        return (self.status, self.extended_status, self.current_page)


@dataclass(frozen=True)
class StatusUpdate:
    """One observed status point for a job, tagged with where it came from."""

    external_id: str
    direction: FaxJobDirection
    source: StatusSource
    status: FaxJobStatus

    @classmethod
    def pushed(
        cls, job_id: str, direction: FaxJobDirection, status: FaxJobStatus
    ) -> "StatusUpdate":
        return cls(job_id, direction, StatusSource.PUSH, status)

    @classmethod
    def polled(cls, status: FaxJobStatus) -> "StatusUpdate":
        return cls(status.job_id, FaxJobDirection.OUTGOING, StatusSource.POLL, status)
