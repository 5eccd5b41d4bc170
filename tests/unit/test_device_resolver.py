from unittest.mock import MagicMock

from faxmonitor.devices.resolver import (
    NO_DEVICE,
    NO_FAX_SERVICE,
    DeviceNameResolver,
)
from faxmonitor.fax.exceptions import FaxConnectionError
from faxmonitor.fax.models import FaxDevice


def _make_resolver(
    devices: list[FaxDevice] | None = None,
) -> tuple[DeviceNameResolver, MagicMock]:
    server = MagicMock()
    server.list_devices.return_value = []
    resolver = DeviceNameResolver(server, devices or [FaxDevice(5, "Modem 5")])
    return resolver, server


class TestNoDevice:
    def test_zero_returns_marker(self) -> None:
        resolver, server = _make_resolver()
        assert resolver.resolve(0) == NO_DEVICE
        server.list_devices.assert_not_called()

    def test_zero_inherits_last_event_device(self) -> None:
        resolver, _server = _make_resolver()
        assert resolver.resolve(0, "Modem 5") == "Modem 5"

    def test_inheritance_ignored_for_real_device(self) -> None:
        resolver, _server = _make_resolver()
        assert resolver.resolve(5, "Modem 9") == "Modem 5"


class TestLookup:
    def test_cached_device_is_not_queried(self) -> None:
        resolver, server = _make_resolver()
        assert resolver.resolve(5) == "Modem 5"
        server.list_devices.assert_not_called()

    def test_cache_miss_queries_and_caches(self) -> None:
        resolver, server = _make_resolver()
        server.list_devices.return_value = [FaxDevice(5, "Modem 5"), FaxDevice(7, "Modem 7")]

        assert resolver.resolve(7) == "Modem 7"
        assert resolver.resolve(7) == "Modem 7"

        server.list_devices.assert_called_once()

    def test_missing_device_returns_placeholder_without_caching(self) -> None:
        resolver, server = _make_resolver()

        assert resolver.resolve(9) == "(Failed to get from id 9)"

        server.list_devices.return_value = [FaxDevice(9, "Modem 9")]
        assert resolver.resolve(9) == "Modem 9"
        assert server.list_devices.call_count == 2

    def test_server_error_returns_placeholder(self) -> None:
        resolver, server = _make_resolver()
        server.list_devices.side_effect = FaxConnectionError("gone")

        assert resolver.resolve(9) == NO_FAX_SERVICE

        server.list_devices.side_effect = None
        server.list_devices.return_value = [FaxDevice(9, "Modem 9")]
        assert resolver.resolve(9) == "Modem 9"
