"""
Roger Chat Router - WebSocket Handler

Each connection gets its own ChatSession. For every message the client
receives, in order:
    {"type": "typing"}
    {"type": "concern_alert", "tag": ...}   (zero or more, first time only)
    {"type": "reply", ...}                  (after the paced delay)

A new message arriving before the previous reply is delivered cancels
that delivery; the reply was already committed to session memory.
"""

import logging
import secrets

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from config import runtime_config

from .chat_orchestration import Reply, TypingSimulator, get_session_registry

logger = logging.getLogger(__name__)

router = APIRouter()


def _get_client_ip(websocket: WebSocket) -> str:
    """Extract client IP from WebSocket, handling proxies."""
    forwarded = websocket.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()

    real_ip = websocket.headers.get("X-Real-IP")
    if real_ip:
        return real_ip

    if websocket.client:
        return websocket.client.host

    return "unknown"


@router.websocket("/ws/chat")
async def chat_websocket(websocket: WebSocket):
    """WebSocket endpoint for chat."""
    await websocket.accept()

    client_ip = _get_client_ip(websocket)
    logger.info(f"Chat connected from {client_ip}")

    registry = get_session_registry()
    session = registry.create(session_id=f"ws_{secrets.token_urlsafe(16)}")
    session_id = session.session_id
    typing = TypingSimulator(enabled=runtime_config.typing_enabled)

    await websocket.send_json({"type": "session", "session_id": session_id})

    async def send_reply(reply: Reply) -> None:
        await websocket.send_json({"type": "reply", **reply.to_dict()})

    try:
        while True:
            data = await websocket.receive_json()
            if data.get("type", "message") != "message":
                continue

            message = data.get("text", "")
            if not isinstance(message, str) or not message.strip():
                continue

            if len(message) > runtime_config.max_message_length:
                await websocket.send_json(
                    {"type": "error", "content": f"Message too long (max {runtime_config.max_message_length:,} characters)"}
                )
                continue

            try:
                await websocket.send_json({"type": "typing"})

                reply = session.process(message)

                for tag in reply.alerts:
                    await websocket.send_json({"type": "concern_alert", "tag": tag.value})

                typing.schedule(reply, send_reply)

            except WebSocketDisconnect:
                raise
            except Exception as e:
                logger.error(f"Chat error: {e}", exc_info=True)
                try:
                    await websocket.send_json({"type": "error", "content": "Something went wrong delivering that message."})
                except Exception as send_err:
                    logger.error(f"Failed to send error to WebSocket: {send_err}", exc_info=True)

    except WebSocketDisconnect:
        logger.info(f"Chat disconnected: {session_id}")
    finally:
        typing.cancel()
        registry.delete(session_id)
