from dataclasses import dataclass
from datetime import datetime


@dataclass
class FaxJobRecord:
    """Represents a row from the fax_jobs table."""

    server_job_id: str
    incoming: bool
    created_at: datetime
    user_name: str = ""
    tsid: str | None = None
    csid: str | None = None
    page_total: int = 0
    status: str | None = None
    extended_status: str | None = None
    closed_at: datetime | None = None
    recipient_name: str | None = None
    recipient_number: str | None = None
    id: int | None = None

    @property
    def is_closed(self) -> bool:
        return self.closed_at is not None

    @property
    def direction_label(self) -> str:
        return "INCOMING FAX:" if self.incoming else "OUTGOING FAX:"


@dataclass(frozen=True)
class JobEventRecord:
    """Represents a row from the fax_job_events table."""

    job_id: int
    device_name: str
    event_at: datetime
    current_page: int
    status: str
    extended_status: str
    event_id: int | None = None
