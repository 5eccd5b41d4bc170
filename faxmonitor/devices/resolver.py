import threading

from faxmonitor.fax.base import BaseFaxServer
from faxmonitor.fax.exceptions import FaxServerError
from faxmonitor.fax.models import FaxDevice
from faxmonitor.logging.logger import Log

NO_DEVICE = "(No Device)"
NO_FAX_SERVICE = "(Failed to get fax service)"


def unknown_device(device_id: int) -> str:
    return f"(Failed to get from id {device_id})"


class DeviceNameResolver:
    """Maps device ids to names, caching successful lookups.

    Built from the device list enumerated right after connecting. A new
    resolver is created on every reconnect since ids may be reassigned.
    Safe to call from push notification threads.
    """

    def __init__(self, server: BaseFaxServer, devices: list[FaxDevice]) -> None:
        self._server = server
        self._cache: dict[int, str] = {d.id: d.name for d in devices}
        self._lock = threading.Lock()

    def resolve(self, device_id: int, last_event_device_name: str | None = None) -> str:
        """Return the device's name.

        Device id 0 means the status change is not attributable to a device;
        ``last_event_device_name`` is returned instead when supplied.
        Failed lookups return a placeholder and are not cached.
        """
        if device_id == 0:
            return last_event_device_name or NO_DEVICE

        with self._lock:
            cached = self._cache.get(device_id)
        if cached is not None:
            return cached

        try:
            devices = self._server.list_devices()
        except FaxServerError as exc:
            Log.warning(f"Unable to query fax devices for id {device_id}: {exc}")
            return NO_FAX_SERVICE

        for device in devices:
            if device.id == device_id:
                with self._lock:
                    self._cache[device_id] = device.name
                return device.name

        Log.info(f"Unable to get fax device with id {device_id}")
        return unknown_device(device_id)
