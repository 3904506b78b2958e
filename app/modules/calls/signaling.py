"""In-process WebRTC signaling relay: call_id -> user_id -> WebSocket.

Peers form a full mesh. For every pair the lexicographically smaller user id
sends the offer. Frames are delivered once, to their addressee only; there is
no retry, ordering or loss recovery, a lost frame stalls that one pair.
"""
import asyncio
import json
import logging
from datetime import datetime, timezone
from typing import Dict, Iterable, List

from fastapi import WebSocket
from pydantic import ValidationError

from app.modules.calls.schemas import SignalMessage

logger = logging.getLogger(__name__)


def should_initiate_offer(user_id: str, peer_id: str) -> bool:
    """Lower id initiates"""
    return user_id < peer_id


def peers_to_offer(user_id: str, participant_ids: Iterable[str]) -> List[str]:
    return sorted(p for p in set(participant_ids) if p != user_id and should_initiate_offer(user_id, p))


class SignalingHub:
    def __init__(self):
        self._lock = asyncio.Lock()
        self._calls: Dict[str, Dict[str, dict]] = {}

    def participants(self, call_id: str) -> List[dict]:
        peers = self._calls.get(call_id, {})
        return sorted((p["user"] for p in peers.values()), key=lambda u: u["joined_at"])

    def is_connected(self, call_id: str, user_id: str) -> bool:
        return user_id in self._calls.get(call_id, {})

    async def connect(self, call_id: str, user_id: str, name: str, websocket: WebSocket) -> None:
        """Register a peer socket. A second socket for the same user replaces the first."""
        async with self._lock:
            peers = self._calls.setdefault(call_id, {})
            previous = peers.get(user_id)
            peers[user_id] = {
                "websocket": websocket,
                "user": {
                    "id": user_id,
                    "name": name,
                    "joined_at": datetime.now(timezone.utc).isoformat(),
                },
            }
        if previous and previous["websocket"] is not websocket:
            logger.info(f"User {user_id} reconnected to call {call_id}, closing old socket")
            try:
                await previous["websocket"].close()
            except Exception as e:
                logger.debug(f"Closing stale socket of {user_id} failed: {e}")
        logger.info(f"User {user_id} joined signaling for call {call_id}")
        await self.broadcast_presence(call_id)

    async def disconnect(self, call_id: str, user_id: str, websocket: WebSocket) -> None:
        peer = self._calls.get(call_id, {}).get(user_id)
        if peer is None or peer["websocket"] is not websocket:
            return
        if not await self._drop(call_id, user_id, peer):
            return
        logger.info(f"User {user_id} left signaling for call {call_id}")
        await self.broadcast_presence(call_id)

    async def _drop(self, call_id: str, user_id: str, peer: dict) -> bool:
        async with self._lock:
            peers = self._calls.get(call_id)
            if not peers or peers.get(user_id) is not peer:
                return False
            del peers[user_id]
            if not peers:
                del self._calls[call_id]
        return True

    async def _send(self, call_id: str, user_id: str, message: dict, announce_drop: bool = True) -> bool:
        """Deliver one frame. A peer whose socket fails is removed, and the others are told unless announce_drop is off."""
        peer = self._calls.get(call_id, {}).get(user_id)
        if peer is None:
            return False
        try:
            await peer["websocket"].send_json(message)
            return True
        except Exception as e:
            logger.warning(f"Send to {user_id} in call {call_id} failed, dropping peer: {e}")
            if await self._drop(call_id, user_id, peer) and announce_drop:
                await self.broadcast_presence(call_id)
            return False

    async def broadcast_presence(self, call_id: str) -> None:
        """Send the participant list to every peer, repeating until no send fails"""
        while True:
            participants = self.participants(call_id)
            ids = [p["id"] for p in participants]
            dropped = False
            for user_id in ids:
                delivered = await self._send(call_id, user_id, {
                    "event": "presence",
                    "participants": participants,
                    "offer_to": peers_to_offer(user_id, ids),
                }, announce_drop=False)
                dropped = dropped or not delivered
            if not dropped:
                return

    async def relay(self, call_id: str, sender_id: str, raw: str) -> bool:
        """Validate a client frame and forward it to its addressee. Returns True if delivered."""
        try:
            payload = json.loads(raw)
        except ValueError:
            await self._send(call_id, sender_id, {"event": "error", "detail": "Malformed signaling frame"})
            return False
        if not isinstance(payload, dict):
            await self._send(call_id, sender_id, {"event": "error", "detail": "Malformed signaling frame"})
            return False
        if payload.get("type") not in ("offer", "answer", "ice-candidate"):
            logger.warning(f"Unknown signaling message type from {sender_id}: {payload.get('type')!r}")
            await self._send(call_id, sender_id, {"event": "error", "detail": "Unknown signaling message type"})
            return False
        try:
            message = SignalMessage.model_validate(payload)
        except ValidationError as e:
            await self._send(call_id, sender_id, {"event": "error", "detail": f"Invalid signaling frame: {e.errors()[0]['msg']}"})
            return False

        if message.to == sender_id:
            await self._send(call_id, sender_id, {"event": "error", "detail": "Cannot signal yourself"})
            return False

        frame = message.model_dump(exclude_none=True)
        frame["from"] = sender_id
        delivered = await self._send(call_id, message.to, frame)
        if not delivered:
            logger.info(f"Dropped {message.type} from {sender_id} to absent peer {message.to} in call {call_id}")
        return delivered


signaling_hub = SignalingHub()


def get_signaling_hub() -> SignalingHub:
    return signaling_hub
