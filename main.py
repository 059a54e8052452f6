"""FastAPI app entry point for Hexline Server."""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from api.games import router as games_router
from config import LOG_FORMAT, LOG_LEVEL, PERSIST_STATE, SAVE_FILE
from engine.errors import GameError
from engine.store import Store

logging.basicConfig(level=LOG_LEVEL, format=LOG_FORMAT)
logger = logging.getLogger(__name__)


def create_app(store: Store | None = None, persist: bool = PERSIST_STATE) -> FastAPI:
    """Build the app around a store.

    Args:
        store: Store to serve. When omitted, the saved snapshot is loaded if
            persistence is on, otherwise a fresh store is used.
        persist: Save a snapshot after every state-changing request.
    """
    app = FastAPI(
        title="Hexline Server",
        description="Turn-based hex-grid tactics with simultaneous orders and fog of war",
        version="0.1.0",
    )

    if store is None and persist:
        store = Store.load(SAVE_FILE)
        if store is not None:
            logger.info("Loaded saved state from %s", SAVE_FILE)
    app.state.store = store or Store()
    app.state.persist = persist

    @app.exception_handler(GameError)
    def game_error_handler(request: Request, exc: GameError) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})

    @app.exception_handler(RequestValidationError)
    def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        error = exc.errors()[0]
        field = ".".join(str(part) for part in error["loc"])
        return JSONResponse(status_code=400, content={"detail": f"Invalid request: {field}: {error['msg']}"})

    app.include_router(games_router, prefix="/games", tags=["Games"])

    @app.get("/")
    def root() -> dict:
        """Root endpoint returning server info."""
        return {"name": "Hexline Server", "version": "0.1.0", "status": "running"}

    @app.get("/health")
    def health() -> dict:
        """Health check endpoint."""
        return {"healthy": True}

    return app


app = create_app()
