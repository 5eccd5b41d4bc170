from typing import Any

from psycopg.rows import dict_row

from faxmonitor.database.connection import get_connection
from faxmonitor.database.models import FaxJobRecord

_JOB_COLUMNS = """
    id, server_job_id, incoming, tsid, csid, page_total, created_at,
    closed_at, status, extended_status, user_name, recipient_name,
    recipient_number
"""


class JobRepository:
    """Database operations for the fax_jobs table."""

    def find_by_external_id(self, server_job_id: str) -> FaxJobRecord | None:
        """Find the most recent job row for a fax server job id."""
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    f"""
                    SELECT {_JOB_COLUMNS}
                    FROM fax_jobs
                    WHERE server_job_id = %s
                    ORDER BY id DESC
                    LIMIT 1
                    """,
                    (server_job_id,),
                )
                row = cur.fetchone()

        if row is None:
            return None
        return _to_record(row)

    def create(self, job: FaxJobRecord) -> FaxJobRecord:
        """Insert a new job row and return it with its surrogate id."""
        with get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    INSERT INTO fax_jobs
                    (server_job_id, incoming, tsid, csid, page_total, created_at,
                     closed_at, status, extended_status, user_name,
                     recipient_name, recipient_number)
                    VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s)
                    RETURNING id
                    """,
                    (
                        job.server_job_id,
                        job.incoming,
                        job.tsid,
                        job.csid,
                        job.page_total,
                        job.created_at,
                        job.closed_at,
                        job.status,
                        job.extended_status,
                        job.user_name,
                        job.recipient_name,
                        job.recipient_number,
                    ),
                )
                row = cur.fetchone()
            if row is None:
                raise RuntimeError(f"Insert of job {job.server_job_id} returned no id")
            conn.commit()

        job.id = row[0]
        return job

    def update(self, job: FaxJobRecord) -> None:
        """Persist the mutable fields of an existing job row.

        Direction, creation time and user never change after creation.
        """
        if job.id is None:
            raise ValueError(f"Job {job.server_job_id} has not been created yet")
        with get_connection() as conn:
            conn.execute(
                """
                UPDATE fax_jobs
                SET tsid = %s, csid = %s, page_total = %s, closed_at = %s,
                    status = %s, extended_status = %s,
                    recipient_name = %s, recipient_number = %s
                WHERE id = %s
                """,
                (
                    job.tsid,
                    job.csid,
                    job.page_total,
                    job.closed_at,
                    job.status,
                    job.extended_status,
                    job.recipient_name,
                    job.recipient_number,
                    job.id,
                ),
            )
            conn.commit()


def _to_record(row: dict[str, Any]) -> FaxJobRecord:
    return FaxJobRecord(
        id=row["id"],
        server_job_id=row["server_job_id"],
        incoming=row["incoming"],
        tsid=row["tsid"],
        csid=row["csid"],
        page_total=row["page_total"],
        created_at=row["created_at"],
        closed_at=row["closed_at"],
        status=row["status"],
        extended_status=row["extended_status"],
        user_name=row["user_name"],
        recipient_name=row["recipient_name"],
        recipient_number=row["recipient_number"],
    )
