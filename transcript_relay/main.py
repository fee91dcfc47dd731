"""
Transcript Relay - Main FastAPI Application.

Relays speech transcripts to an LLM and streams the response back over a
WebSocket as ``chunk`` events followed by ``done`` or ``error``.
"""
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import AsyncGenerator

import structlog
from fastapi import FastAPI, HTTPException, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware

from transcript_relay import __version__
from transcript_relay.adapters import create_llm_adapter
from transcript_relay.config import get_settings
from transcript_relay.models import HealthResponse
from transcript_relay.services import RelaySession

# Configure structured logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer(),
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)

logger = structlog.get_logger()

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    logger.info(
        "starting_transcript_relay",
        http_url=f"http://localhost:{settings.port}",
        ws_url=f"ws://localhost:{settings.port}{settings.ws_path}",
        env=settings.environment,
        llm_provider=settings.llm_provider,
    )

    yield

    logger.info("shutting_down_transcript_relay")


app = FastAPI(
    title="Transcript Relay",
    description="Streams LLM responses to speech transcripts over WebSocket",
    version=__version__,
    lifespan=lifespan,
)

# Shared, read-only after startup
app.state.llm_adapter = create_llm_adapter()

# CORS middleware
cors_origins = (
    ["*"]
    if settings.cors_origins == "*"
    else [o.strip() for o in settings.cors_origins.split(",")]
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _health() -> HealthResponse:
    return HealthResponse(
        status="healthy",
        service="transcript-relay",
        version=__version__,
        timestamp=datetime.now(timezone.utc).isoformat(),
    )


@app.get("/health", response_model=HealthResponse, tags=["Health"])
async def health_check() -> HealthResponse:
    """Health check endpoint."""
    return _health()


@app.get("/ready", response_model=HealthResponse, tags=["Health"])
async def readiness_check() -> HealthResponse:
    """Readiness check endpoint."""
    llm_available = await app.state.llm_adapter.is_available()

    if not llm_available:
        raise HTTPException(status_code=503, detail="LLM adapter not available")

    return _health()


@app.websocket(settings.ws_path)
async def relay_websocket(websocket: WebSocket) -> None:
    """
    WebSocket relay for transcripts.

    Receives:
    - {"transcript": "...", "lang": "en-US"}

    Sends:
    - {"type": "chunk", "text": "...", "fullText": "..."}
    - {"type": "done", "fullText": "..."}
    - {"type": "error", "message": "..."}
    """
    await websocket.accept()

    session = RelaySession(
        sink=websocket,
        llm_adapter=websocket.app.state.llm_adapter,
        debug=settings.debug,
    )
    log = logger.bind(connection_id=session.connection_id)
    log.info("client_connected")

    try:
        while session.is_open:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                break

            raw = message.get("text")
            if raw is None:
                raw = message.get("bytes")
            if raw is not None:
                session.submit(raw)

    except WebSocketDisconnect:
        pass

    except Exception as e:
        log.error("websocket_error", error=str(e))

    finally:
        log.info("client_disconnected")
        await session.close()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "transcript_relay.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.environment == "development",
    )
