import time
from collections.abc import Callable

from faxmonitor.config.settings import Settings
from faxmonitor.database.repositories.job_event_repository import JobEventRepository
from faxmonitor.database.repositories.job_repository import JobRepository
from faxmonitor.fax.base import BaseFaxServer
from faxmonitor.fax.exceptions import FaxServerError
from faxmonitor.logging.logger import Log
from faxmonitor.monitor.session import FaxSession


class Worker:
    """Tick loop: connect if needed -> poll the outgoing queue -> sleep."""

    def __init__(
        self,
        server_factory: Callable[[], BaseFaxServer],
        job_repo: JobRepository,
        event_repo: JobEventRepository,
        settings: Settings,
    ) -> None:
        self._server_factory = server_factory
        self._job_repo = job_repo
        self._event_repo = event_repo
        self._settings = settings
        self._session: FaxSession | None = None
        self._running = False

    @property
    def session(self) -> FaxSession | None:
        return self._session

    def run(self, max_ticks: int | None = None) -> None:
        """Main loop. Runs until stopped or interrupted.

        If max_ticks is set, stop after that many ticks (for testing).
        Errors other than fax service errors propagate to the caller.
        """
        Log.info("Fax monitor started")
        self._running = True
        ticks = 0
        try:
            while self._running:
                if max_ticks is not None and ticks >= max_ticks:
                    break
                self.tick()
                ticks += 1
                time.sleep(self._settings.poll_interval_seconds)
        except KeyboardInterrupt:
            Log.info("Fax monitor shutting down gracefully")
        finally:
            self._close_session()
        Log.info("Fax monitor stopped")

    def stop(self) -> None:
        """Stop the loop after the current tick."""
        self._running = False

    def tick(self) -> None:
        if self._session is not None and self._session.closed:
            session, self._session = self._session, None
            session.raise_if_failed()

        if self._session is None:
            self._session = self._connect()
            return

        try:
            self._session.poll()
        except FaxServerError as exc:
            Log.warning(f"Fax service error while polling, reconnecting: {exc}")
            self._close_session()

    def _connect(self) -> FaxSession | None:
        """Open a session. Gracefully handle an unreachable fax service."""
        try:
            return FaxSession.open(
                self._server_factory(), self._settings, self._job_repo, self._event_repo
            )
        except FaxServerError as exc:
            Log.info(f"Failure to connect to fax service, will retry: {exc}")
            return None

    def _close_session(self) -> None:
        if self._session is not None:
            self._session.close()
            self._session = None
