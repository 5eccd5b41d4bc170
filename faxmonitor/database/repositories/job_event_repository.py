from psycopg.rows import dict_row

from faxmonitor.database.connection import get_connection
from faxmonitor.database.models import JobEventRecord


class JobEventRepository:
    """Database operations for the append-only fax_job_events table."""

    def append(self, event: JobEventRecord) -> JobEventRecord:
        """Insert an event and return it with its event id."""
        with get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    INSERT INTO fax_job_events
                    (job_id, device_name, event_at, current_page, status,
                     extended_status)
                    VALUES (%s, %s, %s, %s, %s, %s)
                    RETURNING event_id
                    """,
                    (
                        event.job_id,
                        event.device_name,
                        event.event_at,
                        event.current_page,
                        event.status,
                        event.extended_status,
                    ),
                )
                row = cur.fetchone()
            if row is None:
                raise RuntimeError(f"Insert of event for job {event.job_id} returned no id")
            conn.commit()

        return JobEventRecord(
            event_id=row[0],
            job_id=event.job_id,
            device_name=event.device_name,
            event_at=event.event_at,
            current_page=event.current_page,
            status=event.status,
            extended_status=event.extended_status,
        )

    def find_last_for_job(self, job_id: int) -> JobEventRecord | None:
        """Find the most recently written event of a job."""
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    """
                    SELECT event_id, job_id, device_name, event_at,
                           current_page, status, extended_status
                    FROM fax_job_events
                    WHERE job_id = %s
                    ORDER BY event_id DESC
                    LIMIT 1
                    """,
                    (job_id,),
                )
                row = cur.fetchone()

        if row is None:
            return None

        return JobEventRecord(
            event_id=row["event_id"],
            job_id=row["job_id"],
            device_name=row["device_name"],
            event_at=row["event_at"],
            current_page=row["current_page"],
            status=row["status"],
            extended_status=row["extended_status"],
        )
