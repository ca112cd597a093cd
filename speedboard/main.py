from __future__ import annotations

import logging
import os

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from speedboard.adapters.api.controllers.realtime import router as realtime_router
from speedboard.domain.exceptions.feed import FeedError

logging.getLogger("speedboard").setLevel(
    (os.getenv("LOG_LEVEL") or "INFO").strip().upper()
)

app = FastAPI(title="Route Speedboard")
app.add_middleware(CORSMiddleware, allow_origins=["*"], allow_methods=["GET"])
app.include_router(realtime_router)


def _env_bool(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


@app.exception_handler(FeedError)
async def feed_error_handler(request: Request, exc: FeedError) -> JSONResponse:
    logging.getLogger("uvicorn.error").warning(
        "Upstream feed failure: %s", exc, extra={"path": str(request.url.path)}
    )
    return JSONResponse(
        status_code=502, content={"detail": str(exc) or exc.__class__.__name__}
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Ensure API errors are JSON so the frontend can display them."""

    logging.getLogger("uvicorn.error").exception(
        "Unhandled exception", extra={"path": str(request.url.path)}
    )

    if _env_bool("SPEEDBOARD_REVEAL_ERRORS") or isinstance(
        exc, (FileNotFoundError, RuntimeError, ValueError)
    ):
        detail = str(exc) or exc.__class__.__name__
    else:
        detail = "Internal Server Error"

    return JSONResponse(status_code=500, content={"detail": detail})


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}
