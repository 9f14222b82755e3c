"""FastAPI application entry point."""

import logging

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from slowapi import Limiter
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded

from api.schemas import TableStatusResponse
from api.websocket import manager
from api.websocket import router as ws_router
from config import config

# Initialize rate limiter
limiter = Limiter(
    key_func=get_remote_address,
    enabled=config.rate_limit.enabled,
    default_limits=[f"{config.rate_limit.requests_per_minute}/minute"],
)


def _rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """Handle rate limit exceeded errors."""
    return JSONResponse(
        status_code=429,
        content={"detail": f"Rate limit exceeded: {exc.detail}"},
    )


app = FastAPI(
    title="Flip 7 Table",
    description="Multiplayer Flip 7 table over websockets",
    version="0.1.0",
)

# Add rate limiter to app state and exception handler
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# CORS middleware with configurable origins
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.cors.allowed_origins,
    allow_credentials=config.cors.allow_credentials,
    allow_methods=config.cors.allow_methods,
    allow_headers=config.cors.allow_headers,
)


@app.get("/api/health")
@limiter.limit(f"{config.rate_limit.requests_per_minute}/minute")
async def health_check(request: Request) -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "healthy"}


@app.get("/api/table", response_model=TableStatusResponse)
@limiter.limit(f"{config.rate_limit.requests_per_minute}/minute")
async def table_status(request: Request) -> TableStatusResponse:
    """Seats, scores and phase of the shared table."""
    return manager.status()


# Include routers
app.include_router(ws_router, prefix="/ws", tags=["websocket"])


def run() -> None:
    """Serve the table."""
    logging.basicConfig(level=logging.DEBUG if config.debug else logging.INFO)
    uvicorn.run("api.main:app", host=config.host, port=config.port)


if __name__ == "__main__":
    run()
