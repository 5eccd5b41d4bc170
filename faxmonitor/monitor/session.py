import socket
from collections.abc import Callable
from datetime import datetime

from faxmonitor.config.settings import Settings
from faxmonitor.database.repositories.job_event_repository import JobEventRepository
from faxmonitor.database.repositories.job_repository import JobRepository
from faxmonitor.devices.resolver import DeviceNameResolver
from faxmonitor.fax.base import BaseFaxServer, FaxEventSink
from faxmonitor.fax.codes import AccessRight
from faxmonitor.fax.exceptions import FaxPermissionError, FaxServerError
from faxmonitor.fax.models import FaxJobDirection, FaxJobStatus, StatusUpdate
from faxmonitor.logging.logger import Log
from faxmonitor.monitor.poller import QueuePoller
from faxmonitor.monitor.reconciler import LOCAL_USER, Reconciler
from faxmonitor.monitor.snapshot import ActiveJobSnapshot, Transition
from faxmonitor.status.normalizer import StatusNormalizer


class FaxSession(FaxEventSink):
    """One connect/disconnect cycle with the fax server.

    Owns the state that must not outlive a connection: the device cache,
    the active job snapshot and the event subscriptions.
    """

    def __init__(
        self,
        server: BaseFaxServer,
        reconciler: Reconciler,
        poller: QueuePoller,
        queue_account: str = "",
    ) -> None:
        self._server = server
        self._reconciler = reconciler
        self._poller = poller
        self._queue_account = queue_account
        self._accounts: list[str] = []
        self._attached = False
        self._failure: Exception | None = None
        self.closed = False

    @classmethod
    def open(
        cls,
        server: BaseFaxServer,
        settings: Settings,
        job_repo: JobRepository,
        event_repo: JobEventRepository,
        clock: Callable[[], datetime] = datetime.now,
    ) -> "FaxSession":
        """Connect, enumerate devices and subscribe to events.

        Raises:
            FaxServerError: if the server cannot be connected or enumerated.
        """
        host = settings.fax_server_host or socket.gethostname()
        server.connect(host)
        try:
            Log.info(f"Connected to fax service on {host}")
            granted = server.granted_rights()
            for right in AccessRight:
                if right in granted:
                    Log.info(f"Process has {right.name} permission")

            devices = server.list_devices()
            Log.info(f"Found {len(devices)} fax devices")
            for device in devices:
                Log.info(f"Enumerated device {device.name}, id: {device.id}")

            normalizer = StatusNormalizer(
                settings.undocumented_status_codes,
                settings.undocumented_extended_status_codes,
            )
            resolver = DeviceNameResolver(server, devices)
            reconciler = Reconciler(job_repo, event_repo, normalizer, resolver, clock)
            poller = QueuePoller(server, ActiveJobSnapshot(), reconciler)
            session = cls(server, reconciler, poller, settings.fax_queue_account)
            session.attach()
        except FaxServerError:
            server.disconnect()
            raise
        return session

    @property
    def poller(self) -> QueuePoller:
        return self._poller

    @property
    def accounts(self) -> list[str]:
        return list(self._accounts)

    def attach(self) -> None:
        """Subscribe to server and account events. No-op when already attached."""
        if self._attached:
            return
        self._server.listen(self)
        for account in self._server.list_accounts():
            try:
                self._server.listen_account(
                    account, self, queue_events=account == self._queue_account
                )
            except FaxPermissionError as exc:
                Log.warning(f"Skipping account {account}: {exc}")
                continue
            self._accounts.append(account)
            Log.info(f"Found account {account}")
        self._attached = True

    def detach(self) -> None:
        """Drop every subscription made by attach(). No-op when not attached."""
        if not self._attached:
            return
        self._server.stop_listening()
        for account in self._accounts:
            self._server.stop_listening_account(account)
        self._accounts.clear()
        self._attached = False

    def close(self) -> None:
        if self.closed:
            return
        try:
            self.detach()
            self._server.disconnect()
        except FaxServerError as exc:
            Log.error(f"Error while disconnecting from fax service: {exc}")
        finally:
            self.closed = True

    def poll(self) -> list[Transition]:
        """Surface any push handler failure, then run one queue poll."""
        self.raise_if_failed()
        return self._poller.poll()

    def raise_if_failed(self) -> None:
        if self._failure is not None:
            failure, self._failure = self._failure, None
            raise failure

    # Push notifications

    def on_server_shutdown(self) -> None:
        Log.info("Fax service shutting down")
        self.close()
        Log.info("Fax monitoring going dormant")

    def on_incoming_job_added(self, job_id: str) -> None:
        self._dispatch(
            self._reconciler.job_added, job_id, incoming=True, user=LOCAL_USER
        )

    def on_incoming_job_changed(self, job_id: str, status: FaxJobStatus) -> None:
        self._dispatch(
            self._reconciler.apply_status_update,
            StatusUpdate.pushed(job_id, FaxJobDirection.INCOMING, status),
        )

    def on_incoming_job_removed(self, job_id: str) -> None:
        self._dispatch(self._reconciler.close_job, job_id)

    def on_outgoing_job_added(self, account: str, job_id: str) -> None:
        self._dispatch(self._reconciler.job_added, job_id, incoming=False, user=account)

    def on_outgoing_job_changed(
        self, account: str, job_id: str, status: FaxJobStatus
    ) -> None:
        self._dispatch(
            self._reconciler.apply_status_update,
            StatusUpdate.pushed(job_id, FaxJobDirection.OUTGOING, status),
        )

    def on_outgoing_job_removed(self, account: str, job_id: str) -> None:
        self._dispatch(self._reconciler.close_job, job_id)

    def on_outgoing_message_added(self, message_id: str) -> None:
        Log.info(f"Outgoing message {message_id} added")

    def on_outgoing_message_removed(self, message_id: str) -> None:
        Log.info(f"Outgoing message {message_id} removed")

    def _dispatch(self, handler: Callable[..., object], *args: object, **kwargs: object) -> None:
        """Run a push handler; a failure is kept for the poll loop to re-raise."""
        try:
            handler(*args, **kwargs)
        except Exception as exc:
            Log.exception(f"Push notification handler failed: {exc}")
            self._failure = exc
