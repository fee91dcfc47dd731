"""Service layer for the Transcript Relay."""
from .relay_session import ConnectionState, RelaySession, parse_message

__all__ = ["ConnectionState", "RelaySession", "parse_message"]
