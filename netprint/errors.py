"""
Exceptions raised by netprint.

Exception Hierarchy:
    NetPrintError (base)
    ├── ConfigurationError - Unusable timeout/deadline, no request attempted
    ├── TransportError     - Connection, HTTP status or response decoding failure
    ├── ProtocolError      - Device answered with an IPP error status
    └── ValidationError    - Job configuration rejected locally, never sent

Discovery never raises these to the caller: a failed browse is logged and the
scan yields whatever was collected.
"""

from typing import Any, Dict, List, Optional, Sequence


class NetPrintError(Exception):

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class ConfigurationError(NetPrintError):
    pass


class TransportError(NetPrintError):
    """The IPP request could not be delivered or its response could not be read."""

    def __init__(self, message: str, uri: str, operation: str):
        super().__init__(message, {"uri": uri, "operation": operation})
        self.uri = uri
        self.operation = operation


class ProtocolError(NetPrintError):
    """The device processed the request and rejected it.

    The message carries the status code in hex followed by any status-message
    strings the device supplied, one per line.
    """

    def __init__(self, status_code: int, messages: Optional[Sequence[str]] = None, operation: str = ""):
        self.status_code = status_code
        self.messages: List[str] = list(messages or [])
        self.operation = operation
        message = f"Error code 0x{status_code:04x}"
        if self.messages:
            message += ":\n" + "\n".join(self.messages)
        super().__init__(message)


class ValidationError(NetPrintError):
    pass
