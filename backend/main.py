"""
Roger - Support Chat Message Orchestration
FastAPI Backend
"""

from contextlib import asynccontextmanager
import logging
import uuid

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from routers import chat, sessions
from routers.chat_orchestration import get_session_registry
from routers.chat_orchestration.handlers import get_router
from tools.registry import DetectorRegistry, register_all_detectors
from logging_config import setup_logging
from config import runtime_config

setup_logging()
logger = logging.getLogger(__name__)

# Instance ID - changes on every startup, used by clients to detect restarts
INSTANCE_ID = str(uuid.uuid4())

APP_NAME = "Roger"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown events"""
    # Startup
    register_all_detectors()
    router = get_router()
    logger.info(
        f"{APP_NAME} ready: {len(router.get_handlers())} handlers, "
        f"{len(DetectorRegistry.get_all_detectors())} optional detectors"
    )

    yield

    # Shutdown
    cleared = get_session_registry().clear()
    logger.info(f"{APP_NAME} signing off ({cleared} sessions discarded)")


app = FastAPI(
    title=APP_NAME,
    description="Rule-based support chat pipeline",
    version="1.0.0",
    lifespan=lifespan,
)


# Request body size limit middleware
MAX_BODY_SIZE_API = 1 * 1024 * 1024  # 1MB


class RequestSizeLimitMiddleware(BaseHTTPMiddleware):
    """Reject requests with bodies exceeding size limits."""

    async def dispatch(self, request: Request, call_next):
        content_length = request.headers.get("content-length")
        if content_length:
            size = int(content_length)
            if size > MAX_BODY_SIZE_API:
                return JSONResponse(
                    status_code=413,
                    content={"detail": f"Request body too large ({size} bytes, limit {MAX_BODY_SIZE_API} bytes)"},
                )
        return await call_next(request)


app.add_middleware(RequestSizeLimitMiddleware)

# CORS - restrict to localhost and private network IPs on port 3000
app.add_middleware(
    CORSMiddleware,
    allow_origin_regex=r"^https?://(localhost|127\.0\.0\.1|192\.168\.\d+\.\d+):3000$",
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# API Routers
# Chat router is mounted WITHOUT /api prefix so WebSocket is at /ws/chat
app.include_router(chat.router, tags=["chat"])
app.include_router(sessions.router, prefix="/api", tags=["sessions"])


@app.get("/health")
async def health():
    """Health check."""
    return {
        "status": "healthy",
        "service": APP_NAME.lower(),
        "instance_id": INSTANCE_ID,
        "sessions": get_session_registry().count(),
        "handlers": [h.name for h in get_router().get_handlers()],
        "detectors": sorted(DetectorRegistry.get_all_detectors()),
        "typing_enabled": runtime_config.typing_enabled,
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000, ws_max_size=1048576)  # 1MB WS frame limit
