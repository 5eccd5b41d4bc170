"""Maps raw fax server status codes to canonical status strings."""

from collections.abc import Mapping
from enum import IntEnum

from faxmonitor.fax.codes import ExtendedStatusCode, JobStatusCode

STATUS_PREFIX_LENGTH = 3
EXTENDED_STATUS_PREFIX_LENGTH = 4

# Status sums the server reports that have no symbolic name of their own.
UNDOCUMENTED_STATUS_CODES: dict[int, str] = {
    33: "NOLINE,PENDING",
    80: "PAUSED,RETRYING",
    96: "NOLINE,RETRYING",
}


class StatusNormalizer:
    """Pure mapping from raw status codes to canonical strings. Never raises.

    Configured tables extend the built-in undocumented codes; an entry for a
    code already known replaces its mapping.
    """

    def __init__(
        self,
        undocumented_statuses: Mapping[int, str] | None = None,
        undocumented_extended_statuses: Mapping[int, str] | None = None,
    ) -> None:
        self._statuses = {**UNDOCUMENTED_STATUS_CODES, **(undocumented_statuses or {})}
        self._extended_statuses = dict(undocumented_extended_statuses or {})

    def normalize(self, raw_status: int) -> str:
        name = self._lookup(raw_status, self._statuses, JobStatusCode, STATUS_PREFIX_LENGTH)
        return str(raw_status) if name is None else name

    def normalize_extended(self, raw_extended_status: int) -> str:
        name = self._lookup(
            raw_extended_status,
            self._extended_statuses,
            ExtendedStatusCode,
            EXTENDED_STATUS_PREFIX_LENGTH,
        )
        return str(raw_extended_status) if name is None else name

    def is_known(self, raw_status: int) -> bool:
        """False when ``normalize`` would fall back to the raw value."""
        return (
            self._lookup(raw_status, self._statuses, JobStatusCode, STATUS_PREFIX_LENGTH)
            is not None
        )

    def is_known_extended(self, raw_extended_status: int) -> bool:
        return (
            self._lookup(
                raw_extended_status,
                self._extended_statuses,
                ExtendedStatusCode,
                EXTENDED_STATUS_PREFIX_LENGTH,
            )
            is not None
        )

    @staticmethod
    def _lookup(
        raw: object,
        exceptions: Mapping[int, str],
        vocabulary: type[IntEnum],
        prefix_length: int,
    ) -> str | None:
        try:
            code = int(raw)  # type: ignore[call-overload]
        except (TypeError, ValueError):
            return None
        if code in exceptions:
            return exceptions[code]
        try:
            name = vocabulary(code).name
        except ValueError:
            return None
        return name[prefix_length:]
