"""
Relay Session - streams generated text for one WebSocket connection.

Each connection owns:
- An inbound queue of raw messages
- One worker task that handles the queued messages in order
- A two-state lifecycle (open, closed)

Every message produces zero or more ``chunk`` events followed by exactly one
``done`` or ``error`` event. Messages are handled one at a time, so the events
of two requests on the same connection never interleave.
"""
import asyncio
from contextlib import aclosing
from enum import Enum
from typing import Protocol, Union
from uuid import uuid4

import structlog
from pydantic import BaseModel, ValidationError

from transcript_relay.adapters.llm_adapter import LLMAdapter
from transcript_relay.exceptions import MalformedInputError, TransportError, UpstreamError
from transcript_relay.models.schemas import ChunkEvent, DoneEvent, ErrorEvent, InboundRequest
from transcript_relay.prompts import build_prompt

logger = structlog.get_logger()

RawMessage = Union[bytes, str]

# WebSocket "internal error" close code
TRANSPORT_FAILURE_CLOSE_CODE = 1011


class ConnectionState(str, Enum):
    """Connection lifecycle states."""

    OPEN = "open"
    CLOSED = "closed"


class EventSink(Protocol):
    """Anything that can deliver and close text frames (e.g. a Starlette WebSocket)."""

    async def send_text(self, data: str) -> None:
        ...

    async def close(self, code: int = 1000, reason: str | None = None) -> None:
        ...


def parse_message(raw: RawMessage) -> InboundRequest:
    """
    Parse one raw inbound frame.

    Raises:
        MalformedInputError: if the frame is not a valid request
    """
    if isinstance(raw, (bytes, bytearray)):
        try:
            raw = bytes(raw).decode("utf-8")
        except UnicodeDecodeError:
            raise MalformedInputError("Invalid message: payload is not valid UTF-8")

    try:
        return InboundRequest.model_validate_json(raw)
    except ValidationError as e:
        problems = []
        for error in e.errors(include_url=False):
            location = ".".join(str(part) for part in error["loc"])
            problems.append(f"{location}: {error['msg']}" if location else error["msg"])
        raise MalformedInputError(
            "Invalid message: " + "; ".join(problems),
            details={"error_count": e.error_count()},
        )


class RelaySession:
    """
    Per-connection relay between the client and the generation service.

    Usage:
        session = RelaySession(websocket, llm_adapter)
        session.submit(raw_frame)   # for every inbound frame
        await session.close()       # on disconnect
    """

    def __init__(
        self,
        sink: EventSink,
        llm_adapter: LLMAdapter,
        debug: bool = False,
        connection_id: str | None = None,
    ) -> None:
        self.sink = sink
        self.llm = llm_adapter
        self.debug = debug
        self.connection_id = connection_id or uuid4().hex[:12]
        self.state = ConnectionState.OPEN
        self.messages_handled = 0

        self._queue: asyncio.Queue[RawMessage] = asyncio.Queue()
        self._worker: asyncio.Task[None] | None = None
        self._log = logger.bind(connection_id=self.connection_id)

    @property
    def is_open(self) -> bool:
        return self.state == ConnectionState.OPEN

    def submit(self, raw: RawMessage) -> None:
        """Queue an inbound frame for handling."""
        if not self.is_open:
            self._log.debug("message_dropped_after_close")
            return

        self._queue.put_nowait(raw)
        if self._worker is None:
            self._worker = asyncio.create_task(self._run())

    async def drain(self) -> None:
        """Wait until every queued message has been handled."""
        if self._worker is None or not self.is_open:
            return
        await self._queue.join()

    async def close(self) -> None:
        """Close the session and cancel any in-flight generation."""
        self.state = ConnectionState.CLOSED

        worker, self._worker = self._worker, None
        if worker and not worker.done():
            worker.cancel()
            try:
                await worker
            except asyncio.CancelledError:
                pass

        self._log.info("connection_closed", messages_handled=self.messages_handled)

    async def _run(self) -> None:
        """Handle queued messages one at a time."""
        while True:
            raw = await self._queue.get()
            try:
                await self.handle_message(raw)
            finally:
                self._queue.task_done()

    async def handle_message(self, raw: RawMessage) -> None:
        """
        Handle one inbound frame end to end.

        Malformed input and upstream failures become a single ``error`` event.
        A transport failure closes the session and the underlying socket;
        nothing else is sent.
        """
        if not self.is_open:
            self._log.debug("message_ignored_after_close")
            return

        self.messages_handled += 1
        try:
            await self._relay(raw)
        except TransportError as e:
            self.state = ConnectionState.CLOSED
            self._log.warning("transport_failure", error=e.message)
            await self._close_transport()

    async def _close_transport(self) -> None:
        """Close the underlying connection after a failed send."""
        try:
            await self.sink.close(code=TRANSPORT_FAILURE_CLOSE_CODE)
        except Exception as e:
            self._log.debug("transport_close_failed", error=str(e))

    async def _relay(self, raw: RawMessage) -> None:
        try:
            request = parse_message(raw)
        except MalformedInputError as e:
            self._log.warning("malformed_message", error=e.message)
            await self._send(ErrorEvent(message=e.message))
            return

        prompt = build_prompt(request.transcript, request.lang)
        self._log.info(
            "transcript_received",
            lang=prompt.lang,
            requested_lang=request.lang,
            transcript_length=len(request.transcript),
        )

        full_text = ""
        chunk_count = 0
        try:
            async with aclosing(self.llm.stream(prompt.full_prompt)) as deltas:
                async for delta in deltas:
                    full_text += delta
                    chunk_count += 1
                    await self._send(ChunkEvent(text=delta, full_text=full_text))

        except TransportError:
            raise

        except Exception as e:
            self._log.error("generation_failed", chunk_count=chunk_count, error=str(e))
            await self._send(ErrorEvent(message=self._upstream_message(e)))
            return

        await self._send(DoneEvent(full_text=full_text))
        self._log.info("response_complete", chunk_count=chunk_count, response_length=len(full_text))

    def _upstream_message(self, error: Exception) -> str:
        """Client-facing text for a generation failure."""
        message = UpstreamError().message
        if self.debug:
            detail = error.details.get("error") if isinstance(error, UpstreamError) else str(error)
            if detail:
                message = f"{message}: {detail}"
        return message

    async def _send(self, event: BaseModel) -> None:
        """
        Deliver one event to the client.

        Raises:
            TransportError: if the session is closed or the send fails
        """
        if not self.is_open:
            raise TransportError("Connection is closed")

        try:
            await self.sink.send_text(event.model_dump_json(by_alias=True))
        except Exception as e:
            raise TransportError(f"Failed to send {event.type} event: {e}") from e
