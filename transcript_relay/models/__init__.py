"""Data models for the Transcript Relay."""
from .schemas import (
    ChunkEvent,
    DoneEvent,
    ErrorEvent,
    ErrorResponse,
    HealthResponse,
    InboundRequest,
    StreamEvent,
)

__all__ = [
    "InboundRequest",
    "ChunkEvent",
    "DoneEvent",
    "ErrorEvent",
    "StreamEvent",
    "HealthResponse",
    "ErrorResponse",
]
