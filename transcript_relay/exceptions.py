"""
Transcript Relay - Exceptions

Malformed input and upstream failures are recovered per message and shown to
the client as an ``error`` event. Transport failures close the connection.
"""

from typing import Any, Dict, Optional


class RelayError(Exception):
    """
    Base exception for all relay errors.

    Attributes:
        message: Human-readable error message
        code: Error code
        details: Additional error details
    """

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(self.message)

    def __str__(self) -> str:
        if self.code:
            return f"[{self.code}] {self.message}"
        return self.message

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(message='{self.message}', code='{self.code}')"


class MalformedInputError(RelayError):
    """
    Raised when an inbound message cannot be parsed.

    This occurs when:
    - The payload is not valid JSON or not valid UTF-8
    - The payload is not a JSON object
    - ``transcript`` is missing, blank or not a string
    """

    def __init__(
        self,
        message: str = "Invalid message",
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, code="MALFORMED_INPUT", details=details)


class UpstreamError(RelayError):
    """Raised when the generation service fails before or during streaming."""

    def __init__(
        self,
        message: str = "Failed to generate response",
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, code="UPSTREAM_FAILURE", details=details)


class TransportError(RelayError):
    """Raised when an event cannot be delivered over the connection."""

    def __init__(self, message: str = "Connection is not deliverable") -> None:
        super().__init__(message, code="TRANSPORT_FAILURE")


class ConfigurationError(RelayError):
    """Raised at startup when the service is misconfigured."""

    def __init__(self, message: str) -> None:
        super().__init__(message, code="CONFIGURATION_ERROR")
