"""Folds push notifications and queue polls into the persisted job history."""

import threading
from collections.abc import Callable
from datetime import datetime

from faxmonitor.database.models import FaxJobRecord, JobEventRecord
from faxmonitor.database.repositories.job_event_repository import JobEventRepository
from faxmonitor.database.repositories.job_repository import JobRepository
from faxmonitor.devices.resolver import NO_DEVICE, DeviceNameResolver
from faxmonitor.fax.models import StatusUpdate
from faxmonitor.logging.logger import Log
from faxmonitor.monitor.snapshot import Transition, TransitionKind
from faxmonitor.status.normalizer import StatusNormalizer

COMPLETED = "COMPLETED"
TERMINAL_STATUSES = frozenset({"FAILED", "RETRIES_EXCEEDED", "COMPLETED", "CANCELED"})

LOCAL_USER = "Local"

_LOCK_STRIPES = 64


class Reconciler:
    """Single writer of job rows and job events.

    Push callbacks and the poll loop call in concurrently; every operation on
    one external job id runs under that id's lock, so each is a serialized
    read-modify-write against the store.
    """

    def __init__(
        self,
        job_repo: JobRepository,
        event_repo: JobEventRepository,
        normalizer: StatusNormalizer,
        resolver: DeviceNameResolver,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self._job_repo = job_repo
        self._event_repo = event_repo
        self._normalizer = normalizer
        self._resolver = resolver
        self._clock = clock
        self._locks = [threading.RLock() for _ in range(_LOCK_STRIPES)]

    def job_added(
        self,
        external_id: str,
        *,
        incoming: bool,
        user: str,
        submitted_at: datetime | None = None,
        recipient_name: str | None = None,
        recipient_number: str | None = None,
    ) -> FaxJobRecord:
        """Create the job row on first sight of an external id.

        An id that still has an open row (seen by both push and poll) keeps
        that row.
        """
        with self._lock_for(external_id):
            existing = self._job_repo.find_by_external_id(external_id)
            if existing is not None and not existing.is_closed:
                Log.debug(f"Job {external_id} already tracked as row {existing.id}")
                return existing

            job = FaxJobRecord(
                server_job_id=external_id,
                incoming=incoming,
                created_at=submitted_at or self._clock(),
                user_name=user,
                recipient_name=recipient_name,
                recipient_number=recipient_number,
            )
            job = self._job_repo.create(job)
            Log.info(f"{job.direction_label} Job {external_id} added", user=user, row=job.id)
            return job

    def apply_status_update(self, update: StatusUpdate) -> JobEventRecord | None:
        """Apply one status point to the job row and append it as an event.

        Returns the appended event, or None when no open row exists for the id.
        """
        raw = update.status
        with self._lock_for(update.external_id):
            job = self._job_repo.find_by_external_id(update.external_id)

            inherited_device = None
            if job is not None and raw.device_id == 0:
                last_event = self._event_repo.find_last_for_job(_row_id(job))
                if last_event is not None:
                    inherited_device = last_event.device_name
            device_name = self._resolver.resolve(raw.device_id, inherited_device)

            status = self._normalizer.normalize(raw.status)
            extended_status = self._normalizer.normalize_extended(raw.extended_status)
            if not self._normalizer.is_known(raw.status):
                Log.warning(
                    f"Unknown status code {raw.status!r} for job {update.external_id}"
                )
            if not self._normalizer.is_known_extended(raw.extended_status):
                Log.warning(
                    f"Unknown extended status code {raw.extended_status!r} "
                    f"for job {update.external_id}"
                )

            event = None
            direction = "UNKNOWN FAX:"
            if job is not None and job.is_closed:
                Log.debug(f"Ignoring status {status} for closed job {update.external_id}")
            elif job is not None:
                direction = job.direction_label
                job.tsid = raw.tsid.strip()
                job.csid = raw.csid.strip()
                job.page_total = raw.current_page if job.incoming else raw.pages
                job.status = status
                job.extended_status = extended_status
                self._job_repo.update(job)
                event = self._event_repo.append(
                    JobEventRecord(
                        job_id=_row_id(job),
                        device_name=device_name,
                        event_at=self._clock(),
                        current_page=raw.current_page,
                        status=status,
                        extended_status=extended_status,
                    )
                )

        Log.info(
            f"{direction} Device {device_name} Job {update.external_id} "
            f"TSID: {raw.tsid.strip()}, CSID: {raw.csid.strip()}, "
            f"page: {raw.current_page}/{raw.pages} status {status}, "
            f"ext {extended_status} ({update.source.value})"
        )
        return event

    def close_job(
        self, external_id: str, terminal_status: int | None = None
    ) -> FaxJobRecord | None:
        """Close the job's open row.

        With an explicit terminal status, that status becomes final. Without
        one the job is assumed completed and a final COMPLETED event is copied
        from its last event, unless its current status is already terminal.
        """
        with self._lock_for(external_id):
            job = self._job_repo.find_by_external_id(external_id)
            if job is None:
                Log.info(f"Job {external_id} removed before it was recorded")
                return None
            if job.is_closed:
                Log.debug(f"Job {external_id} already closed")
                return job

            now = self._clock()
            job.closed_at = now
            if terminal_status is not None:
                job.status = self._normalizer.normalize(terminal_status)
                self._job_repo.update(job)
            elif job.status in TERMINAL_STATUSES:
                self._job_repo.update(job)
            else:
                last_event = self._event_repo.find_last_for_job(_row_id(job))
                job.status = COMPLETED
                self._job_repo.update(job)
                self._event_repo.append(
                    JobEventRecord(
                        job_id=_row_id(job),
                        device_name=last_event.device_name if last_event else NO_DEVICE,
                        event_at=now,
                        current_page=(
                            last_event.current_page if last_event else job.page_total
                        ),
                        status=COMPLETED,
                        extended_status=(
                            last_event.extended_status
                            if last_event
                            else job.extended_status or ""
                        ),
                    )
                )

        Log.info(
            f"{job.direction_label} Job {external_id} closed",
            status=job.status,
            explicit=terminal_status is not None,
        )
        return job

    def apply(self, transitions: list[Transition]) -> None:
        """Apply the transitions classified from one queue poll, in order."""
        for transition in transitions:
            if transition.kind is TransitionKind.REMOVED:
                self.close_job(transition.job_id, transition.terminal_status)
                continue
            status = transition.status
            if status is None:
                raise ValueError(
                    f"{transition.kind.value} transition for job {transition.job_id} "
                    "carries no queue entry"
                )
            if transition.kind is TransitionKind.ADDED:
                self.job_added(
                    transition.job_id,
                    incoming=False,
                    user=status.sender_name,
                    submitted_at=status.submission_time,
                    recipient_name=status.recipient_name,
                    recipient_number=status.recipient_number,
                )
            else:
                self.apply_status_update(StatusUpdate.polled(status))

    def _lock_for(self, external_id: str) -> threading.RLock:
        return self._locks[hash(external_id) % _LOCK_STRIPES]


def _row_id(job: FaxJobRecord) -> int:
    if job.id is None:
        raise ValueError(f"Job {job.server_job_id} has not been created yet")
    return job.id
