"""Realtime hub: socket lifecycle and inbound event dispatch.

This is a lightweight in-memory WebSocket layer intended for a single process
deployment. Connection, presence and room tables are lost on restart; clients
re-register and re-join their rooms when they reconnect.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Awaitable, Callable

from fastapi import WebSocket
from pydantic import ValidationError

from socialhub.realtime.connections import Connection, ConnectionRegistry, WebSocketConnection
from socialhub.realtime.presence import PresenceRegistry
from socialhub.realtime.rooms import RoomMembershipManager
from socialhub.realtime.router import MessageDeliveryRouter
from socialhub.realtime.stores import PresenceStore, RoomStore
from socialhub.realtime.typing_relay import TypingRelay
from socialhub.schemas.realtime import (
    GroupRoomPayload,
    InboundEvent,
    OutboundEvent,
    RegisterPayload,
    SocketFrame,
    TypingPayload,
    group_room,
)

logger = logging.getLogger(__name__)

Handler = Callable[[Connection, Any], Awaitable[None]]


class RealtimeHub:
    """Owns the realtime tables and wires inbound events to them."""

    def __init__(
        self,
        *,
        presence_store: PresenceStore | None = None,
        room_store: RoomStore | None = None,
    ) -> None:
        self.connections = ConnectionRegistry()
        self.presence = PresenceRegistry(presence_store)
        self.rooms = RoomMembershipManager(self.connections, room_store)
        self.typing = TypingRelay(self.presence, self.connections)
        self.router = MessageDeliveryRouter(self.presence, self.rooms, self.connections)
        self._handlers: dict[str, Handler] = {
            InboundEvent.register.value: self._on_register,
            InboundEvent.join_group.value: self._on_join_group,
            InboundEvent.leave_group.value: self._on_leave_group,
            InboundEvent.typing.value: self._on_typing,
            InboundEvent.stop_typing.value: self._on_stop_typing,
        }

    # ------------- lifecycle -------------
    async def connect(
        self, websocket: WebSocket, *, authenticated_user_id: str | None = None
    ) -> WebSocketConnection:
        await websocket.accept()
        connection = WebSocketConnection(websocket, authenticated_user_id=authenticated_user_id)
        self.attach(connection)
        await self.connections.push(
            connection.connection_id,
            OutboundEvent.connected.value,
            {"connectionId": connection.connection_id},
        )
        return connection

    def attach(self, connection: Connection) -> None:
        self.connections.add(connection)
        logger.info("Socket connected: %s", connection.connection_id)

    def disconnect(self, connection_id: str) -> None:
        users = self.presence.remove_by_connection(connection_id)
        rooms = self.rooms.drop_connection(connection_id)
        self.connections.remove(connection_id)
        logger.info(
            "Socket disconnected: %s (users=%s, rooms=%d)", connection_id, users, len(rooms)
        )

    # ------------- inbound -------------
    async def handle_text(self, connection: Connection, text: str) -> None:
        try:
            raw = json.loads(text)
        except ValueError:
            logger.warning("Dropping non-JSON frame from %s", connection.connection_id)
            return
        await self.dispatch(connection, raw)

    async def dispatch(self, connection: Connection, raw: Any) -> None:
        """Handle one inbound frame; failures are confined to this frame."""
        try:
            frame = SocketFrame.model_validate(raw)
        except ValidationError:
            logger.warning("Dropping malformed frame from %s", connection.connection_id)
            return

        handler = self._handlers.get(frame.event)
        if handler is None:
            logger.warning("Dropping unknown event %r from %s", frame.event, connection.connection_id)
            return

        try:
            await handler(connection, frame.data)
        except ValidationError as exc:
            logger.warning(
                "Dropping %s from %s: invalid payload (%d errors)",
                frame.event,
                connection.connection_id,
                exc.error_count(),
            )
        except Exception:
            logger.exception("Handler for %s failed on %s", frame.event, connection.connection_id)

    async def _on_register(self, connection: Connection, data: Any) -> None:
        verified = connection.authenticated_user_id
        if data is None and verified:
            data = verified
        if isinstance(data, str):
            data = {"userId": data}
        payload = RegisterPayload.model_validate(data)
        if verified and payload.user_id != verified:
            logger.warning(
                "Dropping register as %s on %s: session belongs to %s",
                payload.user_id,
                connection.connection_id,
                verified,
            )
            return
        connection.user_id = payload.user_id
        self.presence.register(payload.user_id, connection.connection_id)
        logger.info("User %s registered on %s", payload.user_id, connection.connection_id)

    async def _on_join_group(self, connection: Connection, data: Any) -> None:
        payload = GroupRoomPayload.model_validate(data)
        self.rooms.join(connection.connection_id, group_room(payload.group_id))

    async def _on_leave_group(self, connection: Connection, data: Any) -> None:
        payload = GroupRoomPayload.model_validate(data)
        self.rooms.leave(connection.connection_id, group_room(payload.group_id))

    async def _on_typing(self, connection: Connection, data: Any) -> None:
        payload = TypingPayload.model_validate(data)
        await self.typing.relay(payload.from_user_id, payload.to_user_id, OutboundEvent.typing)

    async def _on_stop_typing(self, connection: Connection, data: Any) -> None:
        payload = TypingPayload.model_validate(data)
        await self.typing.relay(payload.from_user_id, payload.to_user_id, OutboundEvent.stop_typing)


__all__ = ["RealtimeHub"]
