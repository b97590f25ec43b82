"""
CaptionCam Service - Live caption reconciliation over WebSocket

The page owns the camera and the browser's SpeechRecognition object; this
service owns the transcript. The page forwards every recognition event, the
service answers with the caption to display and tells the page when to
(re)start recognition.

Endpoints:
- GET  /health                        - Health check
- GET  /sessions                      - Known sessions
- GET  /sessions/{id}/transcript      - Transcript download (text/plain)
- GET  /sessions/{id}/log             - Operator log download (text/plain)
- WS   /recognition                   - Recognition event stream

Protocol:
1. Page connects to /recognition and sends
     {"type": "config", "lang": "ja-JP", "available": true, "embedded": false}
   ("available" is false when the browser has no SpeechRecognition)
2. Server sends {"type": "ready", "session_id": "...", "available": true}
3. Server sends {"type": "command", "command": "start", "lang": ..., ...}
4. Page forwards events: {"type": "signal", "signal": "result", "data": {...}}
5. Server sends {"type": "caption", "text": "...", "clear_after_ms": 10000}
   and {"type": "critical", "message": "..."} when recognition is unusable
"""

import asyncio
import contextlib
import json
import logging
import uuid
from collections import OrderedDict
from typing import Any, Literal

from fastapi import FastAPI, HTTPException, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel, ValidationError

from captioncam import __version__
from captioncam.config import CaptionSettings, get_settings
from captioncam.context import CaptionContext
from captioncam.recognition import BrowserRecognizer

logger = logging.getLogger(__name__)

CONFIG_TIMEOUT_SEC = 10.0


# ==============================================================================
# Data Models
# ==============================================================================


class ClientConfig(BaseModel):
    """First message of a recognition stream."""

    type: Literal["config"] = "config"
    lang: str | None = None
    available: bool = True
    embedded: bool = False


class SignalMessage(BaseModel):
    """A SpeechRecognition event forwarded by the page."""

    type: Literal["signal"]
    signal: str
    data: dict[str, Any] | None = None


class SessionInfo(BaseModel):
    id: str
    state: str
    caption: str
    critical: str | None = None


# ==============================================================================
# Session Registry
# ==============================================================================


class SessionRegistry:
    """Caption contexts by session id; the oldest are dropped beyond max_sessions."""

    def __init__(self, max_sessions: int):
        self._sessions: OrderedDict[str, CaptionContext] = OrderedDict()
        self._max_sessions = max_sessions

    def add(self, context: CaptionContext) -> str:
        session_id = uuid.uuid4().hex
        self._sessions[session_id] = context
        while len(self._sessions) > self._max_sessions:
            dropped, _ = self._sessions.popitem(last=False)
            logger.info(f"Session {dropped} dropped from registry")
        return session_id

    def get(self, session_id: str) -> CaptionContext:
        context = self._sessions.get(session_id)
        if context is None:
            raise HTTPException(status_code=404, detail=f"Unknown session: {session_id}")
        return context

    def items(self) -> list[tuple[str, CaptionContext]]:
        return list(self._sessions.items())

    def __len__(self) -> int:
        return len(self._sessions)


# ==============================================================================
# Recognition Stream
# ==============================================================================


async def _receive_config(websocket: WebSocket) -> ClientConfig | None:
    """Read and validate the config message. None if the page sent garbage."""
    raw = await asyncio.wait_for(websocket.receive_text(), timeout=CONFIG_TIMEOUT_SEC)
    try:
        return ClientConfig.model_validate(json.loads(raw))
    except (json.JSONDecodeError, ValidationError) as e:
        logger.warning(f"Invalid config message: {e}")
        return None


async def run_recognition_stream(
    websocket: WebSocket, settings: CaptionSettings, registry: SessionRegistry
) -> None:
    """Serve one page: relay its recognition events into a CaptionContext."""
    await websocket.accept()

    try:
        config = await _receive_config(websocket)
    except (TimeoutError, WebSocketDisconnect):
        logger.info("Stream closed before config")
        return
    if config is None:
        await websocket.send_json({"type": "error", "error": "invalid config message"})
        await websocket.close(code=1003)
        return

    outbox: asyncio.Queue[dict[str, Any]] = asyncio.Queue()
    recognizer: BrowserRecognizer | None = None

    def make_recognizer() -> BrowserRecognizer | None:
        nonlocal recognizer
        if not config.available:
            return None
        recognizer = BrowserRecognizer(outbox.put_nowait)
        return recognizer

    context = CaptionContext(
        settings=settings,
        recognizer_factory=make_recognizer,
        language=config.lang,
        on_caption=lambda text: outbox.put_nowait(
            {"type": "caption", "text": text, "clear_after_ms": settings.clear_after_ms}
        ),
        on_critical=lambda message: outbox.put_nowait({"type": "critical", "message": message}),
        # The page clears its own caption using clear_after_ms
        auto_clear=False,
    )
    session_id = registry.add(context)
    logger.info(f"Recognition stream {session_id} connected (lang={config.lang})")

    outbox.put_nowait({"type": "ready", "session_id": session_id, "available": config.available})
    available = context.prepare()

    async def send_messages():
        while True:
            message = await outbox.get()
            await websocket.send_json(message)

    async def receive_signals():
        if available:
            await asyncio.sleep(settings.start_delay_for(config.embedded))
            context.start()

        while True:
            raw = await websocket.receive_text()
            try:
                message = SignalMessage.model_validate(json.loads(raw))
            except (json.JSONDecodeError, ValidationError) as e:
                outbox.put_nowait({"type": "error", "error": f"invalid signal message: {e}"})
                continue

            if recognizer is None:
                outbox.put_nowait({"type": "error", "error": "speech recognition is not available"})
                continue
            if not recognizer.dispatch(message.signal, message.data):
                outbox.put_nowait({"type": "error", "error": f"unknown signal: {message.signal}"})

    send_task = asyncio.create_task(send_messages())
    recv_task = asyncio.create_task(receive_signals())
    try:
        done, pending = await asyncio.wait(
            [send_task, recv_task], return_when=asyncio.FIRST_COMPLETED
        )
        for task in pending:
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task
        for task in done:
            error = task.exception()
            if error is not None and not isinstance(error, WebSocketDisconnect):
                logger.error(f"Stream {session_id} error: {error}")
    finally:
        # Nothing drains the outbox any more
        if recognizer is not None:
            recognizer.close()
        context.close()
        logger.info(f"Recognition stream {session_id} closed")


# ==============================================================================
# FastAPI Application
# ==============================================================================


def create_app(settings: CaptionSettings | None = None) -> FastAPI:
    """Build the caption service."""
    settings = settings or get_settings()
    registry = SessionRegistry(settings.max_sessions)

    app = FastAPI(
        title="CaptionCam Service",
        description="Live caption transcript reconciliation",
        version=__version__,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.state.settings = settings
    app.state.registry = registry

    @app.get("/health")
    async def health():
        """Health check endpoint."""
        return {
            "status": "healthy",
            "service": "captioncam",
            "version": __version__,
            "sessions": len(registry),
            "max_characters": settings.max_characters,
            "language": settings.language,
        }

    @app.get("/sessions", response_model=list[SessionInfo])
    async def list_sessions():
        return [
            SessionInfo(
                id=session_id,
                state=context.state.value,
                caption=context.caption,
                critical=context.critical_message,
            )
            for session_id, context in registry.items()
        ]

    @app.get("/sessions/{session_id}/transcript", response_class=PlainTextResponse)
    async def download_transcript(session_id: str):
        context = registry.get(session_id)
        return PlainTextResponse(
            context.transcript_text(),
            headers={"Content-Disposition": f'attachment; filename="captioncam-{session_id}.txt"'},
        )

    @app.get("/sessions/{session_id}/log", response_class=PlainTextResponse)
    async def download_log(session_id: str):
        context = registry.get(session_id)
        return PlainTextResponse(
            context.operator_log.text(),
            headers={
                "Content-Disposition": f'attachment; filename="captioncam-{session_id}-log.txt"'
            },
        )

    @app.websocket("/recognition")
    async def recognition_stream(websocket: WebSocket):
        await run_recognition_stream(websocket, settings, registry)

    return app


app = create_app()


# ==============================================================================
# Main Entry Point
# ==============================================================================

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
