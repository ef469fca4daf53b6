"""
Roger Sessions Router
REST surface over the in-memory session registry.

Sessions live only in process memory; deleting one discards its state.
"""

import logging
import random
import re
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, HTTPException
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from config import runtime_config
from errors import NotFoundError, ValidationError, error_response, success_response

from .chat_orchestration import get_session_registry

# Session ID validation pattern: alphanumeric, hyphens, underscores, max 64 chars
_SESSION_ID_PATTERN = re.compile(r"^[a-zA-Z0-9_-]{1,64}$")

logger = logging.getLogger(__name__)

router = APIRouter()


class CreateSessionRequest(BaseModel):
    session_id: Optional[str] = None
    seed: Optional[int] = None


class SessionCreated(BaseModel):
    session_id: str


class SessionInfo(BaseModel):
    session_id: str
    stage: str
    message_count: int
    introduction_made: bool
    shown_concerns: List[str]
    client_preferences: Dict[str, Any] = Field(default_factory=dict)
    detectors: List[str] = Field(default_factory=list)


class MessageRequest(BaseModel):
    text: str


class ReplyResponse(BaseModel):
    id: str
    text: str
    concern_tag: Optional[str] = None
    delay_ms: int
    alerts: List[str] = Field(default_factory=list)


def _validate_session_id(session_id: str) -> None:
    """Validate session ID format."""
    if not _SESSION_ID_PATTERN.match(session_id):
        raise HTTPException(
            status_code=400,
            detail="Invalid session ID. Must be alphanumeric/hyphens/underscores, max 64 chars."
        )


def _not_found(error: NotFoundError) -> JSONResponse:
    return JSONResponse(status_code=404, content=error_response(error, source="sessions"))


# =============================================================================
# API ENDPOINTS
# =============================================================================


@router.post("/sessions", response_model=SessionCreated, status_code=201)
async def create_session(request: Optional[CreateSessionRequest] = None):
    """Start a new conversation."""
    request = request or CreateSessionRequest()
    registry = get_session_registry()

    if request.session_id is not None:
        _validate_session_id(request.session_id)
        if request.session_id in registry.ids():
            raise HTTPException(status_code=409, detail="Session already exists")

    rng = random.Random(request.seed) if request.seed is not None else None

    session = registry.create(session_id=request.session_id, rng=rng)
    return SessionCreated(session_id=session.session_id)


@router.get("/sessions/{session_id}", response_model=SessionInfo)
async def get_session(session_id: str):
    """Session stage, counters and alerted concerns."""
    _validate_session_id(session_id)
    try:
        session = get_session_registry().get(session_id)
    except NotFoundError as e:
        return _not_found(e)
    return SessionInfo(**session.to_dict())


@router.post("/sessions/{session_id}/messages", response_model=ReplyResponse)
async def post_message(session_id: str, request: MessageRequest):
    """Process one utterance and return the reply without pacing."""
    _validate_session_id(session_id)
    try:
        session = get_session_registry().get(session_id)
    except NotFoundError as e:
        return _not_found(e)

    if not request.text.strip():
        err = ValidationError("Message text is empty", parameter="text")
        return JSONResponse(status_code=400, content=error_response(err, source="sessions"))

    if len(request.text) > runtime_config.max_message_length:
        err = ValidationError(
            f"Message too long (max {runtime_config.max_message_length:,} characters)",
            parameter="text",
            received=str(len(request.text)),
        )
        return JSONResponse(status_code=400, content=error_response(err, source="sessions"))

    reply = session.process(request.text)
    return ReplyResponse(**reply.to_dict(), alerts=[tag.value for tag in reply.alerts])


@router.delete("/sessions/{session_id}")
async def delete_session(session_id: str):
    """Discard a session."""
    _validate_session_id(session_id)
    if not get_session_registry().delete(session_id):
        err = NotFoundError(f"Session not found: {session_id}", resource_type="session", resource_id=session_id)
        return _not_found(err)
    return success_response(session_id=session_id)
