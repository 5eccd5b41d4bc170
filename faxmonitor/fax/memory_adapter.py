"""In-process fax server adapter.

Use this module as a reference when implementing adapters for a real fax
service: implement BaseFaxServer and register it in FaxServerFactory.
The simulation methods (``put_outgoing``, ``receive`` ...) let development
setups and tests drive the same push and queue paths a real server would.
"""

import threading

from faxmonitor.fax.base import BaseFaxServer, FaxEventSink
from faxmonitor.fax.codes import AccessRight
from faxmonitor.fax.exceptions import FaxConnectionError, FaxPermissionError
from faxmonitor.fax.models import FaxDevice, FaxJobStatus

DEFAULT_RIGHTS = AccessRight.SUBMIT_NORMAL | AccessRight.QUERY_OUT_JOBS | AccessRight.QUERY_CONFIG


class InMemoryFaxServer(BaseFaxServer):
    """Fax server held entirely in memory. No network calls."""

    def __init__(
        self,
        *,
        devices: list[FaxDevice] | None = None,
        accounts: list[str] | None = None,
        own_account: str = "",
        rights: AccessRight = DEFAULT_RIGHTS,
    ) -> None:
        self._devices: dict[int, str] = {d.id: d.name for d in devices or []}
        self._accounts = list(accounts or [])
        self._own_account = own_account
        self._rights = rights
        self._queue: dict[str, FaxJobStatus] = {}
        self._queue_owner: dict[str, str] = {}
        self._sink: FaxEventSink | None = None
        self._account_sinks: dict[str, FaxEventSink] = {}
        self._queue_accounts: set[str] = set()
        self._lock = threading.Lock()
        self.host: str | None = None
        self.reachable = True

    @property
    def connected(self) -> bool:
        return self.host is not None

    def connect(self, host: str) -> None:
        if not self.reachable:
            raise FaxConnectionError(f"Fax service on '{host}' is not reachable")
        self.host = host

    def disconnect(self) -> None:
        self.host = None

    def granted_rights(self) -> AccessRight:
        self._require_connection()
        return self._rights

    def list_devices(self) -> list[FaxDevice]:
        self._require_connection()
        with self._lock:
            return [FaxDevice(i, n) for i, n in sorted(self._devices.items())]

    def list_accounts(self) -> list[str]:
        self._require_connection()
        return list(self._accounts)

    def get_outgoing_queue(self) -> list[FaxJobStatus]:
        self._require_connection()
        with self._lock:
            return list(self._queue.values())

    def listen(self, sink: FaxEventSink) -> None:
        self._require_connection()
        self._sink = sink

    def stop_listening(self) -> None:
        self._sink = None

    def listen_account(
        self, account: str, sink: FaxEventSink, *, queue_events: bool
    ) -> None:
        self._require_connection()
        if queue_events:
            if account != self._own_account:
                raise FaxPermissionError(
                    f"Cannot listen to queue events of account '{account}'"
                )
            self._queue_accounts.add(account)
        self._account_sinks[account] = sink

    def stop_listening_account(self, account: str) -> None:
        self._account_sinks.pop(account, None)
        self._queue_accounts.discard(account)

    def is_listening(self, account: str | None = None) -> bool:
        if account is None:
            return self._sink is not None
        return account in self._account_sinks

    # Simulation

    def add_device(self, device: FaxDevice) -> None:
        with self._lock:
            self._devices[device.id] = device.name

    def remove_device(self, device_id: int) -> None:
        with self._lock:
            self._devices.pop(device_id, None)

    def put_outgoing(self, status: FaxJobStatus, account: str | None = None) -> None:
        """Insert or replace a queue entry, notifying the owning account's listener."""
        with self._lock:
            is_new = status.job_id not in self._queue
            self._queue[status.job_id] = status
            owner = account or self._queue_owner.get(status.job_id, "")
            self._queue_owner[status.job_id] = owner
        sink = self._queue_sink(owner)
        if sink is None:
            return
        if is_new:
            sink.on_outgoing_job_added(owner, status.job_id)
        sink.on_outgoing_job_changed(owner, status.job_id, status)

    def remove_outgoing(self, job_id: str) -> None:
        with self._lock:
            self._queue.pop(job_id, None)
            owner = self._queue_owner.pop(job_id, "")
        sink = self._queue_sink(owner)
        if sink is not None:
            sink.on_outgoing_job_removed(owner, job_id)

    def receive(self, job_id: str) -> None:
        if self._sink is not None:
            self._sink.on_incoming_job_added(job_id)

    def update_incoming(self, status: FaxJobStatus) -> None:
        if self._sink is not None:
            self._sink.on_incoming_job_changed(status.job_id, status)

    def finish_incoming(self, job_id: str) -> None:
        if self._sink is not None:
            self._sink.on_incoming_job_removed(job_id)

    def archive_outgoing(self, message_id: str) -> None:
        if self._sink is not None:
            self._sink.on_outgoing_message_added(message_id)

    def shutdown(self) -> None:
        """Simulate the fax service stopping."""
        if self._sink is not None:
            self._sink.on_server_shutdown()
        self.host = None

    def _queue_sink(self, account: str) -> FaxEventSink | None:
        if account not in self._queue_accounts:
            return None
        return self._account_sinks.get(account)

    def _require_connection(self) -> None:
        if self.host is None:
            raise FaxConnectionError("Not connected to a fax service")
