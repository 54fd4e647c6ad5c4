from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, WebSocket, status

from socialhub.core.dependencies import get_realtime_hub
from socialhub.core.exceptions import AuthenticationError
from socialhub.core.security import decode_access_token
from socialhub.core.settings import settings
from socialhub.realtime.hub import RealtimeHub

logger = logging.getLogger(__name__)

router = APIRouter(tags=["realtime"])


def _handshake_user_id(websocket: WebSocket) -> str | None:
    token = websocket.cookies.get(settings.access_token_cookie)
    if not token:
        return None
    try:
        return decode_access_token(token)
    except AuthenticationError as exc:
        logger.warning("Ignoring socket session cookie: %s", exc.code)
        return None


@router.websocket("/socket")
async def socket_endpoint(
    websocket: WebSocket,
    hub: RealtimeHub = Depends(get_realtime_hub),
) -> None:
    user_id = _handshake_user_id(websocket)
    if user_id is None and settings.socket_require_auth:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    connection = await hub.connect(websocket, authenticated_user_id=user_id)
    try:
        while True:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                return
            text = message.get("text")
            if text is None:
                logger.warning("Dropping binary frame from %s", connection.connection_id)
                continue
            await hub.handle_text(connection, text)
    finally:
        hub.disconnect(connection.connection_id)
