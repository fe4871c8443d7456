from __future__ import annotations

import json
import logging

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect

from app.api.deps import get_auth_gate
from app.application.use_cases.auth_gate import AuthGate, extract_bearer_token
from app.domain.exceptions import AuthenticationRequiredError, ExpiredTokenError, InvalidTokenError


logger = logging.getLogger(__name__)

router = APIRouter(tags=["realtime"])

CLOSE_UNAUTHORIZED = 4401
CLOSE_FORBIDDEN = 4403


def _handshake_token(websocket: WebSocket) -> str | None:
    token = websocket.query_params.get("token")
    if token:
        return token
    return extract_bearer_token(websocket.headers.get("authorization"))


@router.websocket("/ws")
async def realtime_gateway(websocket: WebSocket, auth_gate: AuthGate = Depends(get_auth_gate)):
    """Authenticate once at handshake; the identity stays bound to the connection."""
    await websocket.accept()
    try:
        claims = auth_gate.authenticate(_handshake_token(websocket))
    except (AuthenticationRequiredError, ExpiredTokenError) as exc:
        await websocket.close(code=CLOSE_UNAUTHORIZED, reason=str(exc))
        return
    except InvalidTokenError as exc:
        await websocket.close(code=CLOSE_FORBIDDEN, reason=str(exc))
        return

    logger.info("Socket connected: user=%s role=%s", claims.user_id, claims.role.value)
    await websocket.send_json(
        {"event": "connected", "data": {"userId": claims.user_id, "role": claims.role.value}}
    )
    try:
        while True:
            raw = await websocket.receive_text()
            try:
                message = json.loads(raw)
            except ValueError:
                logger.warning("Socket sent invalid JSON: user=%s", claims.user_id)
                await websocket.send_json({"event": "error", "data": {"message": "Invalid JSON."}})
                continue
            event = message.get("event") if isinstance(message, dict) else None
            if event == "ping":
                await websocket.send_json({"event": "pong"})
            else:
                await websocket.send_json({"event": "error", "data": {"message": "Unsupported event."}})
    except WebSocketDisconnect:
        logger.info("Socket disconnected: user=%s", claims.user_id)
