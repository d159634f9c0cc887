from __future__ import annotations

import random
import string
from typing import Dict, List, Optional

from .errors import NotFound
from .models import RoomConfig
from .room import Room

CODE_ALPHABET = string.ascii_uppercase + string.digits
CODE_LENGTH = 6


class RoomRegistry:
    """Owns every live room, keyed by its code."""

    def __init__(self, config: Optional[RoomConfig] = None) -> None:
        self.config = config or RoomConfig()
        self.rng = random.Random(self.config.seed)
        self.rooms: Dict[str, Room] = {}

    def __len__(self) -> int:
        return len(self.rooms)

    def __contains__(self, code: object) -> bool:
        return isinstance(code, str) and self._normalize(code) in self.rooms

    def create(self) -> Room:
        code = self._generate_code()
        while code in self.rooms:
            code = self._generate_code()
        # Each room shuffles from its own stream so seeded runs stay reproducible.
        room = Room(code, self.config, rng=random.Random(self.rng.getrandbits(64)))
        self.rooms[code] = room
        return room

    def find(self, code: str) -> Optional[Room]:
        return self.rooms.get(self._normalize(code))

    def get(self, code: str) -> Room:
        room = self.find(code)
        if room is None:
            raise NotFound("ROOM_NOT_FOUND", "Room not found.")
        return room

    def rooms_for(self, participant: str) -> List[Room]:
        return [
            room
            for room in self.rooms.values()
            if participant in room.members or room.seat_of(participant) is not None
        ]

    def remove_participant(self, participant: str) -> List[Room]:
        """Drop ``participant`` from every room; returns the rooms that changed."""
        return [room for room in self.rooms_for(participant) if room.remove_participant(participant)]

    def _generate_code(self) -> str:
        return "".join(self.rng.choices(CODE_ALPHABET, k=CODE_LENGTH))

    def _normalize(self, code: str) -> str:
        return code.strip().upper()
