from unittest.mock import MagicMock, patch

import pytest

from faxmonitor import main as main_module


@patch("faxmonitor.main.close_pool")
@patch("faxmonitor.main.ensure_schema")
@patch("faxmonitor.main.init_pool")
@patch("faxmonitor.main.Worker")
class TestMain:
    def test_runs_worker_and_closes_pool(
        self, mock_worker_cls: MagicMock, _init: MagicMock, mock_schema: MagicMock, mock_close: MagicMock
    ) -> None:
        with patch("faxmonitor.main.signal.signal"):
            main_module.main()

        mock_schema.assert_called_once_with()
        mock_worker_cls.return_value.run.assert_called_once_with()
        mock_close.assert_called_once_with()

    def test_unhandled_error_exits_with_status_1(
        self, mock_worker_cls: MagicMock, _init: MagicMock, _schema: MagicMock, mock_close: MagicMock
    ) -> None:
        mock_worker_cls.return_value.run.side_effect = RuntimeError("db down")

        with patch("faxmonitor.main.signal.signal"), pytest.raises(SystemExit) as exc_info:
            main_module.main()

        assert exc_info.value.code == 1
        mock_close.assert_called_once_with()
