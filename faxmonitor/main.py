import signal
import sys
from functools import partial

from faxmonitor.config.settings import Settings
from faxmonitor.database.connection import close_pool, ensure_schema, init_pool
from faxmonitor.database.repositories.job_event_repository import JobEventRepository
from faxmonitor.database.repositories.job_repository import JobRepository
from faxmonitor.fax.factory import FaxServerFactory
from faxmonitor.logging.logger import Log
from faxmonitor.worker.worker import Worker


def main() -> None:
    """Entry point: initialize pool -> ensure schema -> start monitor loop.

    Any error escaping the loop is fatal: stale or wrong job history is worse
    than a stopped monitor that its supervisor restarts.
    """
    settings = Settings()
    Log.configure(settings.log_level)
    init_pool(settings)

    try:
        ensure_schema()
        worker = Worker(
            partial(FaxServerFactory.create, settings),
            JobRepository(),
            JobEventRepository(),
            settings,
        )
        signal.signal(signal.SIGTERM, lambda _signum, _frame: worker.stop())
        worker.run()
    except Exception as exc:
        Log.exception(f"Fax monitor stopped on unhandled error: {exc}")
        sys.exit(1)
    finally:
        close_pool()


if __name__ == "__main__":
    main()
