"""
Peer transport abstraction for multiplayer rooms.

Host and guest sessions only see PeerTransport. LocalHub wires peers
together in-process; the WebSocket room in api/rooms.py is the network
implementation.
"""

import logging
from collections import defaultdict
from collections.abc import Callable
from typing import Any, Protocol

from boosterdraft.models.messages import MessageType, PeerMessage

logger = logging.getLogger(__name__)

# Handlers receive the message and the sending peer's ID
MessageHandler = Callable[[PeerMessage, str], None]


class PeerTransport(Protocol):
    """Message delivery between the peers of one room."""

    @property
    def peer_id(self) -> str:
        ...

    def send(self, target_id: str, message_type: MessageType, payload: dict[str, Any]) -> None:
        """Deliver a message to one peer."""
        ...

    def broadcast(self, message_type: MessageType, payload: dict[str, Any]) -> None:
        """Deliver a message to every other peer."""
        ...

    def on(self, message_type: MessageType, handler: MessageHandler) -> None:
        ...

    def off(self, message_type: MessageType, handler: MessageHandler) -> None:
        ...


class HandlerRegistry:
    """Per-type handler lists shared by transport implementations."""

    def __init__(self) -> None:
        self._handlers: dict[MessageType, list[MessageHandler]] = defaultdict(list)

    def on(self, message_type: MessageType, handler: MessageHandler) -> None:
        self._handlers[message_type].append(handler)

    def off(self, message_type: MessageType, handler: MessageHandler) -> None:
        handlers = self._handlers.get(message_type, [])
        if handler in handlers:
            handlers.remove(handler)

    def dispatch(self, message: PeerMessage, sender_id: str) -> None:
        handlers = list(self._handlers.get(message.type, []))
        if not handlers:
            logger.debug("No handler for %s from %s", message.type.value, sender_id)
        for handler in handlers:
            handler(message, sender_id)


class LocalTransport(HandlerRegistry):
    """One peer's end of a LocalHub."""

    def __init__(self, hub: "LocalHub", peer_id: str) -> None:
        super().__init__()
        self._hub = hub
        self._peer_id = peer_id

    @property
    def peer_id(self) -> str:
        return self._peer_id

    def send(self, target_id: str, message_type: MessageType, payload: dict[str, Any]) -> None:
        self._hub.deliver(self._peer_id, target_id, PeerMessage(type=message_type, payload=payload))

    def broadcast(self, message_type: MessageType, payload: dict[str, Any]) -> None:
        message = PeerMessage(type=message_type, payload=payload)
        for peer_id in self._hub.peer_ids():
            if peer_id != self._peer_id:
                self._hub.deliver(self._peer_id, peer_id, message)

    def disconnect(self) -> None:
        self._hub.disconnect(self._peer_id)


class LocalHub:
    """
    In-process message broker. Delivery is synchronous and in send order.

    Usage:
        hub = LocalHub()
        host = hub.connect("host")
        guest = hub.connect("guest-1")
    """

    def __init__(self) -> None:
        self._peers: dict[str, LocalTransport] = {}

    def connect(self, peer_id: str) -> LocalTransport:
        if peer_id in self._peers:
            raise ValueError(f"Peer {peer_id} is already connected")
        transport = LocalTransport(self, peer_id)
        self._peers[peer_id] = transport
        return transport

    def disconnect(self, peer_id: str) -> None:
        self._peers.pop(peer_id, None)

    def peer_ids(self) -> list[str]:
        return list(self._peers)

    def deliver(self, sender_id: str, target_id: str, message: PeerMessage) -> None:
        target = self._peers.get(target_id)
        if target is None:
            logger.warning("Dropped %s for unknown peer %s", message.type.value, target_id)
            return
        target.dispatch(message, sender_id)
