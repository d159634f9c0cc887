"""Room state machine for the four-seat double-deck trick-taking game."""

from .cards import Card, DECK_SIZE, build_deck, hand_points
from .errors import (
    BadRequest,
    CapacityExceeded,
    IneligibleAction,
    MalformedSelection,
    NotFound,
    NotSeated,
    PhaseViolation,
    RoomError,
    SeatConflict,
    TurnViolation,
)
from .models import LastAction, Phase, RoomConfig, Seat, Suit
from .projector import project_for
from .registry import RoomRegistry
from .room import Room
from .seats import SEAT_ORDER, next_seat

__all__ = [
    "Card",
    "DECK_SIZE",
    "build_deck",
    "hand_points",
    "BadRequest",
    "CapacityExceeded",
    "IneligibleAction",
    "MalformedSelection",
    "NotFound",
    "NotSeated",
    "PhaseViolation",
    "RoomError",
    "SeatConflict",
    "TurnViolation",
    "LastAction",
    "Phase",
    "RoomConfig",
    "Seat",
    "Suit",
    "project_for",
    "RoomRegistry",
    "Room",
    "SEAT_ORDER",
    "next_seat",
]
