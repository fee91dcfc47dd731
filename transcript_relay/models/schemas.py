"""
Pydantic schemas for the Transcript Relay.

Defines the inbound WebSocket message, the outbound stream events and the
HTTP health/error responses.
"""
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, Field, field_validator


class InboundRequest(BaseModel):
    """One message sent by the client over the relay WebSocket."""

    transcript: str = Field(..., min_length=1, description="User utterance to answer")
    lang: str | None = Field(None, description="Language tag selecting the system instruction")

    model_config = {
        "extra": "ignore",
        "json_schema_extra": {
            "examples": [
                {
                    "transcript": "What is 2+2?",
                    "lang": "en-US",
                }
            ]
        },
    }

    @field_validator("transcript")
    @classmethod
    def transcript_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("transcript must not be blank")
        return value


class ChunkEvent(BaseModel):
    """Incremental model output."""

    type: Literal["chunk"] = "chunk"
    text: str = Field(..., description="Text delta")
    full_text: str = Field(..., alias="fullText", description="Cumulative text so far")

    model_config = {"populate_by_name": True}


class DoneEvent(BaseModel):
    """Generation completed; carries the final cumulative text."""

    type: Literal["done"] = "done"
    full_text: str = Field(..., alias="fullText")

    model_config = {"populate_by_name": True}


class ErrorEvent(BaseModel):
    """Failure while handling one inbound message."""

    type: Literal["error"] = "error"
    message: str


StreamEvent = Annotated[
    Union[ChunkEvent, DoneEvent, ErrorEvent],
    Field(discriminator="type"),
]


class HealthResponse(BaseModel):
    """Health check response."""

    status: Literal["healthy", "unhealthy"] = "healthy"
    service: str = "transcript-relay"
    version: str = "1.0.0"
    timestamp: str


class ErrorResponse(BaseModel):
    """Error response model."""

    error: str
    code: str
    details: dict[str, Any] | None = None
