"""FastAPI application serving the tutoring stream.

``POST /api/chat`` validates the request, resolves the provider and its
credential, then streams the turn produced by a
:class:`~daiy.reasoning.orchestrator.PassOrchestrator` as SSE frames.
Anything that goes wrong before the stream starts is answered with a
JSON ``{"error": ...}`` body instead.
"""

import asyncio
import logging
from collections.abc import AsyncIterator, Sequence

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, StreamingResponse

from .. import __version__
from ..config import Settings
from ..errors import DaiyError
from ..llm.adapter import ChatBackend, ProviderAdapter
from ..llm.models import AVAILABLE_MODELS, ChatMessage
from ..reasoning.orchestrator import PassOrchestrator, prepare_turn
from ..reasoning.pacing import CancellationToken, Clock
from ..transport.sse import SSE_HEADERS, encode_events
from .schemas import ChatRequest, ModelsResponse

logger = logging.getLogger(__name__)

DISCONNECT_POLL_INTERVAL = 0.25


def create_app(
    settings: Settings | None = None,
    backend: ChatBackend | None = None,
    clock: Clock | None = None,
) -> FastAPI:
    """Build the application.

    Args:
        settings: Runtime settings (read from the environment by default)
        backend: Provider adapter; tests pass a fake
        clock: Delay source for replayed reasoning lines
    """
    app = FastAPI(title="daiy", version=__version__)
    app.state.settings = settings or Settings.from_env()
    app.state.backend = backend or ProviderAdapter()
    app.state.clock = clock
    _register_handlers(app)
    _register_routes(app)
    return app


async def _watch_disconnect(request: Request, token: CancellationToken) -> None:
    while not token.cancelled:
        if await request.is_disconnected():
            token.cancel("client disconnected")
            return
        await asyncio.sleep(DISCONNECT_POLL_INTERVAL)


async def _stream_turn(
    request: Request,
    orchestrator: PassOrchestrator,
    messages: Sequence[ChatMessage],
) -> AsyncIterator[bytes]:
    watcher = asyncio.create_task(_watch_disconnect(request, orchestrator.token))
    try:
        async for frame in encode_events(orchestrator.run(messages)):
            yield frame
    finally:
        watcher.cancel()


def _register_routes(app: FastAPI) -> None:
    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok", "version": __version__}

    @app.get("/api/models", response_model=ModelsResponse)
    async def models(request: Request) -> ModelsResponse:
        return ModelsResponse(
            models=AVAILABLE_MODELS,
            default_model=request.app.state.settings.default_model,
        )

    @app.post("/api/chat")
    async def chat(request: Request, body: ChatRequest) -> StreamingResponse:
        messages = body.messages or []
        orchestrator = prepare_turn(
            request.app.state.settings,
            request.app.state.backend,
            messages,
            model=body.model,
            api_keys=body.api_keys.model_dump(),
            extended=body.extended_thinking,
            clock=request.app.state.clock,
            token=CancellationToken(),
        )
        logger.info(
            "Chat turn: model=%s extended=%s messages=%d",
            orchestrator.model, body.extended_thinking, len(messages),
        )

        return StreamingResponse(
            _stream_turn(request, orchestrator, messages),
            media_type="text/event-stream",
            headers=SSE_HEADERS,
        )


def _register_handlers(app: FastAPI) -> None:
    @app.exception_handler(DaiyError)
    async def handle_daiy_error(request: Request, exc: DaiyError) -> JSONResponse:
        logger.info("Rejected %s: %s", request.url.path, exc.message)
        return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation_error(
        request: Request,
        exc: RequestValidationError,
    ) -> JSONResponse:
        issues = []
        for issue in exc.errors():
            loc = ".".join(str(part) for part in issue.get("loc", []) if part != "body")
            msg = issue.get("msg", "Invalid request.")
            issues.append(f"{loc}: {msg}" if loc else msg)
        return JSONResponse(status_code=400, content={"error": "; ".join(issues) or "Invalid request"})

    @app.exception_handler(Exception)
    async def handle_unexpected_exception(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s", request.url.path)
        return JSONResponse(status_code=500, content={"error": str(exc) or "Internal server error"})
