from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class Seat(str, Enum):
    NORTH = "N"
    EAST = "E"
    SOUTH = "S"
    WEST = "W"


class Suit(str, Enum):
    SPADE = "S"
    HEART = "H"
    DIAMOND = "D"
    CLUB = "C"


class Phase(str, Enum):
    WAITING = "waiting"
    DRAWING = "drawing"
    AWAITING_BOTTOM_PILE = "awaiting_bottom_pile"
    DISCARDING_BOTTOM_PILE = "discarding_bottom_pile"
    PLAYING = "playing"


@dataclass
class RoomConfig:
    hand_limit: int = 25
    bottom_pile_size: int = 8
    reshuffle_threshold: int = 25
    auto_deal_limit: int = 2_000
    seed: Optional[int] = None


@dataclass(frozen=True)
class LastAction:
    # Only draws are recorded; undo is a single level deep.
    kind: str
    seat: Seat
    card_id: str
    fixed_trump: bool = False
