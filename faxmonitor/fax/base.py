from abc import ABC, abstractmethod

from faxmonitor.fax.codes import AccessRight
from faxmonitor.fax.models import FaxDevice, FaxJobStatus


class FaxEventSink(ABC):
    """Receiver for push notifications delivered by a fax server adapter.

    Adapters may invoke these callbacks from their own threads.
    """

    @abstractmethod
    def on_server_shutdown(self) -> None:
        """The fax service is going down; the connection is no longer usable."""

    @abstractmethod
    def on_incoming_job_added(self, job_id: str) -> None: ...

    @abstractmethod
    def on_incoming_job_changed(self, job_id: str, status: FaxJobStatus) -> None: ...

    @abstractmethod
    def on_incoming_job_removed(self, job_id: str) -> None: ...

    @abstractmethod
    def on_outgoing_job_added(self, account: str, job_id: str) -> None: ...

    @abstractmethod
    def on_outgoing_job_changed(
        self, account: str, job_id: str, status: FaxJobStatus
    ) -> None: ...

    @abstractmethod
    def on_outgoing_job_removed(self, account: str, job_id: str) -> None: ...

    @abstractmethod
    def on_outgoing_message_added(self, message_id: str) -> None:
        """A sent message was archived."""

    @abstractmethod
    def on_outgoing_message_removed(self, message_id: str) -> None:
        """An archived sent message was deleted."""


class BaseFaxServer(ABC):
    """Contract for all fax server adapters."""

    @abstractmethod
    def connect(self, host: str) -> None:
        """Open a connection to the fax service on the given host.

        Raises:
            FaxConnectionError: if the service cannot be reached.
        """

    @abstractmethod
    def disconnect(self) -> None: ...

    @abstractmethod
    def granted_rights(self) -> AccessRight: ...

    @abstractmethod
    def list_devices(self) -> list[FaxDevice]:
        """Return the devices currently known to the server.

        Raises:
            FaxConnectionError: if not connected.
        """

    @abstractmethod
    def list_accounts(self) -> list[str]: ...

    @abstractmethod
    def get_outgoing_queue(self) -> list[FaxJobStatus]:
        """Return every job currently in the outgoing queue.

        Raises:
            FaxConnectionError: if not connected.
        """

    @abstractmethod
    def listen(self, sink: FaxEventSink) -> None:
        """Deliver server-level events (shutdown, incoming queue, outgoing archive) to sink."""

    @abstractmethod
    def stop_listening(self) -> None: ...

    @abstractmethod
    def listen_account(
        self, account: str, sink: FaxEventSink, *, queue_events: bool
    ) -> None:
        """Deliver an account's outgoing job events to sink.

        Raises:
            FaxPermissionError: if queue events are requested for an account
                other than the connected one.
        """

    @abstractmethod
    def stop_listening_account(self, account: str) -> None: ...
