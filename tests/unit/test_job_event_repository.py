from datetime import datetime
from unittest.mock import MagicMock, patch

import pytest

from faxmonitor.database.models import JobEventRecord
from faxmonitor.database.repositories.job_event_repository import JobEventRepository

EVENT_AT = datetime(2023, 10, 17, 9, 0)


def _mock_connection(mock_get_conn: MagicMock) -> tuple[MagicMock, MagicMock]:
    """Wire up a mock connection + cursor and return (mock_conn, mock_cursor)."""
    mock_cursor = MagicMock()
    mock_conn = MagicMock()
    mock_conn.cursor.return_value.__enter__ = MagicMock(return_value=mock_cursor)
    mock_conn.cursor.return_value.__exit__ = MagicMock(return_value=False)
    mock_get_conn.return_value.__enter__ = MagicMock(return_value=mock_conn)
    mock_get_conn.return_value.__exit__ = MagicMock(return_value=False)
    return mock_conn, mock_cursor


class TestAppend:
    @patch("faxmonitor.database.repositories.job_event_repository.get_connection")
    def test_returns_event_with_id(self, mock_get_conn: MagicMock) -> None:
        mock_conn, mock_cursor = _mock_connection(mock_get_conn)
        mock_cursor.fetchone.return_value = (41,)
        event = JobEventRecord(
            job_id=3, device_name="Modem 5", event_at=EVENT_AT,
            current_page=1, status="INPROGRESS", extended_status="TRANSMITTING",
        )

        stored = JobEventRepository().append(event)

        assert stored.event_id == 41
        assert stored.device_name == "Modem 5"
        assert mock_cursor.execute.call_args[0][1] == (
            3, "Modem 5", EVENT_AT, 1, "INPROGRESS", "TRANSMITTING",
        )
        mock_conn.commit.assert_called_once()

    @patch("faxmonitor.database.repositories.job_event_repository.get_connection")
    def test_raises_when_no_id_returned(self, mock_get_conn: MagicMock) -> None:
        mock_conn, mock_cursor = _mock_connection(mock_get_conn)
        mock_cursor.fetchone.return_value = None
        event = JobEventRecord(
            job_id=3, device_name="Modem 5", event_at=EVENT_AT,
            current_page=1, status="INPROGRESS", extended_status="TRANSMITTING",
        )

        with pytest.raises(RuntimeError, match="returned no id"):
            JobEventRepository().append(event)
        mock_conn.commit.assert_not_called()


class TestFindLastForJob:
    @patch("faxmonitor.database.repositories.job_event_repository.get_connection")
    def test_returns_latest_event(self, mock_get_conn: MagicMock) -> None:
        _conn, mock_cursor = _mock_connection(mock_get_conn)
        mock_cursor.fetchone.return_value = {
            "event_id": 9,
            "job_id": 3,
            "device_name": "Modem 6",
            "event_at": EVENT_AT,
            "current_page": 2,
            "status": "RETRYING",
            "extended_status": "BUSY",
        }

        event = JobEventRepository().find_last_for_job(3)

        assert event == JobEventRecord(
            event_id=9, job_id=3, device_name="Modem 6", event_at=EVENT_AT,
            current_page=2, status="RETRYING", extended_status="BUSY",
        )
        assert "ORDER BY event_id DESC" in mock_cursor.execute.call_args[0][0]

    @patch("faxmonitor.database.repositories.job_event_repository.get_connection")
    def test_returns_none_without_events(self, mock_get_conn: MagicMock) -> None:
        _conn, mock_cursor = _mock_connection(mock_get_conn)
        mock_cursor.fetchone.return_value = None

        assert JobEventRepository().find_last_for_job(3) is None
