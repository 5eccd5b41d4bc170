class FaxServerError(Exception):
    """Base exception for all fax server errors."""


class FaxConnectionError(FaxServerError):
    """Raised when the fax server cannot be reached or the connection is gone."""


class FaxPermissionError(FaxServerError):
    """Raised when the process is not allowed to subscribe to an account's events."""
