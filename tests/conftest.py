from dataclasses import replace
from datetime import datetime, timedelta

import pytest

from faxmonitor.database.models import FaxJobRecord, JobEventRecord
from faxmonitor.devices.resolver import DeviceNameResolver
from faxmonitor.fax.memory_adapter import InMemoryFaxServer
from faxmonitor.fax.models import FaxDevice
from faxmonitor.monitor.reconciler import Reconciler
from faxmonitor.status.normalizer import StatusNormalizer


class FakeJobRepository:
    """In-memory stand-in for JobRepository."""

    def __init__(self) -> None:
        self.rows: list[FaxJobRecord] = []
        self.update_count = 0

    def find_by_external_id(self, server_job_id: str) -> FaxJobRecord | None:
        for row in reversed(self.rows):
            if row.server_job_id == server_job_id:
                return replace(row)
        return None

    def create(self, job: FaxJobRecord) -> FaxJobRecord:
        job.id = len(self.rows) + 1
        self.rows.append(replace(job))
        return job

    def update(self, job: FaxJobRecord) -> None:
        assert job.id is not None
        self.rows[job.id - 1] = replace(job)
        self.update_count += 1


class FakeJobEventRepository:
    """In-memory stand-in for JobEventRepository."""

    def __init__(self) -> None:
        self.events: list[JobEventRecord] = []

    def append(self, event: JobEventRecord) -> JobEventRecord:
        stored = replace(event, event_id=len(self.events) + 1)
        self.events.append(stored)
        return stored

    def find_last_for_job(self, job_id: int) -> JobEventRecord | None:
        for event in reversed(self.events):
            if event.job_id == job_id:
                return event
        return None

    def for_job(self, job_id: int) -> list[JobEventRecord]:
        return [e for e in self.events if e.job_id == job_id]


class StepClock:
    """Clock that advances one second per reading."""

    def __init__(self, start: datetime = datetime(2023, 10, 17, 9, 0, 0)) -> None:
        self.now = start

    def __call__(self) -> datetime:
        self.now += timedelta(seconds=1)
        return self.now


@pytest.fixture()
def job_repo() -> FakeJobRepository:
    return FakeJobRepository()


@pytest.fixture()
def event_repo() -> FakeJobEventRepository:
    return FakeJobEventRepository()


@pytest.fixture()
def clock() -> StepClock:
    return StepClock()


@pytest.fixture()
def fax_server() -> InMemoryFaxServer:
    server = InMemoryFaxServer(
        devices=[FaxDevice(5, "Modem 5"), FaxDevice(6, "Modem 6")],
        accounts=["CCCC\\tech", "CCCC\\front"],
        own_account="CCCC\\tech",
    )
    server.connect("faxhost")
    return server


@pytest.fixture()
def reconciler(
    job_repo: FakeJobRepository,
    event_repo: FakeJobEventRepository,
    fax_server: InMemoryFaxServer,
    clock: StepClock,
) -> Reconciler:
    resolver = DeviceNameResolver(fax_server, fax_server.list_devices())
    return Reconciler(job_repo, event_repo, StatusNormalizer(), resolver, clock)  # type: ignore[arg-type]
