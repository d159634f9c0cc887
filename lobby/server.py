from __future__ import annotations

import asyncio
import contextlib
import json
import logging
import uuid
from collections import defaultdict
from dataclasses import dataclass
from datetime import datetime, timezone
from http import HTTPStatus
from typing import Callable, Dict, List, Optional, Tuple

import websockets
from websockets.asyncio.server import ServerConnection, serve
from websockets.datastructures import Headers
from websockets.http11 import Request, Response

from tractor.errors import BadRequest, NotSeated, RoomError
from tractor.models import RoomConfig
from tractor.projector import project_for
from tractor.registry import RoomRegistry
from tractor.room import Room

LOGGER = logging.getLogger("tractor_lobby")

# RoomServer glues the room state machine to WebSocket clients.
# Every network concern lives here; Room stays pure.


@dataclass
class ClientSession:
    participant: str
    websocket: ServerConnection


Outbound = Tuple[ServerConnection, str]
RoomAction = Callable[[Room, ClientSession, Dict[str, object]], None]


def _http_response(status: HTTPStatus, body: bytes, content_type: str) -> Response:
    headers = Headers(
        [
            ("Content-Type", content_type),
            ("Content-Length", str(len(body))),
        ]
    )
    return Response(status.value, status.phrase, headers, body)


def process_request(connection: ServerConnection, request: Request) -> Optional[Response]:
    """Answer plain HTTP health checks; let WebSocket upgrades through."""
    if request.headers.get("Upgrade", "").lower() == "websocket":
        return None
    path = request.path.split("?", 1)[0]
    if path in {"/health", "/healthz"}:
        return _http_response(HTTPStatus.OK, json.dumps({"ok": True}).encode(), "application/json")
    return _http_response(HTTPStatus.NOT_FOUND, b"not found\n", "text/plain; charset=utf-8")


class RoomServer:
    def __init__(self, config: Optional[RoomConfig] = None) -> None:
        self.registry = RoomRegistry(config)
        self.sessions: Dict[str, ClientSession] = {}
        # Registry lock for insert/lookup/sweep; one lock per room for its operations.
        self.lock = asyncio.Lock()
        self.room_locks: Dict[str, asyncio.Lock] = defaultdict(asyncio.Lock)
        self._room_actions: Dict[str, RoomAction] = {
            "sit": self._sit,
            "draw_card": self._draw_card,
            "auto_deal": self._auto_deal,
            "undo_draw": self._undo_draw,
            "start_bottom_pile": self._claim_bottom_pile,
            "discard_bottom_pile": self._discard_bottom_pile,
            "reshuffle_round": self._reshuffle_round,
            "play_cards": self._play_cards,
            "clear_trick": self._clear_trick,
        }

    async def start(self, host: str = "0.0.0.0", port: int = 8765) -> None:
        async with serve(self._handle_connection, host, port, process_request=process_request):
            LOGGER.info("Room server listening on %s:%s", host, port)
            await asyncio.Future()

    async def _handle_connection(self, websocket: ServerConnection) -> None:
        participant = uuid.uuid4().hex[:12]
        session = ClientSession(participant=participant, websocket=websocket)
        self.sessions[participant] = session
        LOGGER.info("Participant %s connected", participant)
        try:
            async for raw in websocket:
                await self.handle_message(session, self._decode(raw))
        except websockets.ConnectionClosed:
            pass
        finally:
            self.sessions.pop(participant, None)
            await self.disconnect(participant)
            LOGGER.info("Participant %s disconnected", participant)

    async def handle_message(self, session: ClientSession, message: Dict[str, object]) -> None:
        msg_type = message.get("type")
        try:
            if msg_type == "create_room":
                await self._create_room(session)
            elif msg_type == "join_room":
                await self._join_room(session, message)
            elif msg_type == "request_state":
                await self._request_state(session, message)
            elif isinstance(msg_type, str) and msg_type in self._room_actions:
                await self._room_action(session, msg_type, message)
            else:
                raise BadRequest("UNKNOWN_TYPE", "Unsupported message type")
        except RoomError as exc:
            LOGGER.warning(
                "Rejected %s from %s code=%s reason=%s",
                msg_type,
                session.participant,
                exc.code,
                exc.msg,
            )
            await self._send_error(session.websocket, exc)

    async def disconnect(self, participant: str) -> None:
        async with self.lock:
            affected = self.registry.rooms_for(participant)
            async with contextlib.AsyncExitStack() as stack:
                for room in affected:
                    await stack.enter_async_context(self.room_locks[room.code])
                changed = self.registry.remove_participant(participant)
                outbound = [item for room in changed for item in self._room_state_locked(room)]
        for room in changed:
            LOGGER.info("Room %s: %s left", room.code, participant)
        await self._deliver(outbound)

    # Event handlers --------------------------------------------------

    async def _create_room(self, session: ClientSession) -> None:
        async with self.lock:
            room = self.registry.create()
        LOGGER.info("Room %s created by %s", room.code, session.participant)
        await self._send_json(session.websocket, "room_created", {"code": room.code})

    async def _join_room(self, session: ClientSession, message: Dict[str, object]) -> None:
        room = await self._lookup(message)
        async with self.room_locks[room.code]:
            room.join(session.participant)
            outbound = self._room_state_locked(room)
        LOGGER.info("Room %s: %s joined", room.code, session.participant)
        await self._send_json(session.websocket, "joined_room", {"code": room.code})
        await self._deliver(outbound)

    async def _request_state(self, session: ClientSession, message: Dict[str, object]) -> None:
        room = await self._lookup(message)
        async with self.room_locks[room.code]:
            self._require_member(room, session)
            payload = project_for(session.participant, room)
        await self._send_json(session.websocket, "room_state", payload)

    async def _room_action(self, session: ClientSession, msg_type: str, message: Dict[str, object]) -> None:
        room = await self._lookup(message)
        handler = self._room_actions[msg_type]
        async with self.room_locks[room.code]:
            if msg_type != "sit":
                self._require_member(room, session)
            handler(room, session, message)
            outbound = self._room_state_locked(room)
            version = room.version
        LOGGER.debug(
            "Applied %s room=%s participant=%s version=%s",
            msg_type,
            room.code,
            session.participant,
            version,
        )
        await self._deliver(outbound)

    def _sit(self, room: Room, session: ClientSession, message: Dict[str, object]) -> None:
        seat = self._require_str(message, "seat")
        name = message.get("name")
        started = room.sit(session.participant, seat, name if isinstance(name, str) else None)
        LOGGER.info("Room %s: seat %s taken by %s", room.code, seat, session.participant)
        if started:
            LOGGER.info("Room %s: all seats filled, drawing begins", room.code)

    def _draw_card(self, room: Room, session: ClientSession, message: Dict[str, object]) -> None:
        room.draw_card(session.participant)
        if room.last_action and room.last_action.fixed_trump:
            LOGGER.info(
                "Room %s: trump %s fixed by seat %s",
                room.code,
                room.trump_suit.value if room.trump_suit else None,
                room.starting_player.value if room.starting_player else None,
            )

    def _auto_deal(self, room: Room, session: ClientSession, message: Dict[str, object]) -> None:
        dealt = room.auto_deal()
        LOGGER.info("Room %s: auto-dealt %s cards, phase=%s", room.code, len(dealt), room.phase.value)

    def _undo_draw(self, room: Room, session: ClientSession, message: Dict[str, object]) -> None:
        room.undo_draw(session.participant)

    def _claim_bottom_pile(self, room: Room, session: ClientSession, message: Dict[str, object]) -> None:
        room.claim_bottom_pile(session.participant)

    def _discard_bottom_pile(self, room: Room, session: ClientSession, message: Dict[str, object]) -> None:
        room.discard_bottom_pile(session.participant, self._card_ids(message))
        LOGGER.info("Room %s: bottom pile set, play begins", room.code)

    def _reshuffle_round(self, room: Room, session: ClientSession, message: Dict[str, object]) -> None:
        room.reshuffle_round(session.participant)
        LOGGER.info("Room %s: round reshuffled by %s", room.code, session.participant)

    def _play_cards(self, room: Room, session: ClientSession, message: Dict[str, object]) -> None:
        room.play_cards(session.participant, self._card_ids(message))

    def _clear_trick(self, room: Room, session: ClientSession, message: Dict[str, object]) -> None:
        room.clear_trick()

    # Helpers ---------------------------------------------------------

    async def _lookup(self, message: Dict[str, object]) -> Room:
        code = self._require_str(message, "code")
        async with self.lock:
            return self.registry.get(code)

    def _require_member(self, room: Room, session: ClientSession) -> None:
        if session.participant not in room.members:
            raise NotSeated("NOT_IN_ROOM", "Join the room first.")

    def _require_str(self, message: Dict[str, object], key: str) -> str:
        value = message.get(key)
        if not isinstance(value, str) or not value.strip():
            raise BadRequest("BAD_SCHEMA", f"{key} required")
        return value.strip()

    def _card_ids(self, message: Dict[str, object]) -> List[str]:
        raw = message.get("card_ids", message.get("cardIds"))
        if not isinstance(raw, list) or not all(isinstance(item, str) for item in raw):
            raise BadRequest("BAD_SCHEMA", "card_ids must be a list of strings")
        return raw

    def _room_state_locked(self, room: Room) -> List[Outbound]:
        outbound: List[Outbound] = []
        for member in room.members:
            session = self.sessions.get(member)
            if session is None:
                continue
            outbound.append((session.websocket, self._envelope("room_state", project_for(member, room))))
        return outbound

    async def _deliver(self, outbound: List[Outbound]) -> None:
        if not outbound:
            return
        await asyncio.gather(*(socket.send(message) for socket, message in outbound), return_exceptions=True)

    async def _send_json(self, websocket: ServerConnection, msg_type: str, payload: Dict[str, object]) -> None:
        try:
            await websocket.send(self._envelope(msg_type, payload))
        except websockets.ConnectionClosed:
            pass

    async def _send_error(self, websocket: ServerConnection, exc: RoomError) -> None:
        await self._send_json(websocket, "error_msg", {"code": exc.code, "message": exc.msg})

    def _envelope(self, msg_type: str, payload: Dict[str, object]) -> str:
        body = {"type": msg_type, "v": 1, "ts": datetime.now(timezone.utc).isoformat()}
        body.update(payload)
        return json.dumps(body)

    def _decode(self, raw) -> Dict[str, object]:
        try:
            message = json.loads(raw)
        except (json.JSONDecodeError, TypeError):
            return {}
        return message if isinstance(message, dict) else {}
