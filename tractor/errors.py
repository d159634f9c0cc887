"""Rejections raised by room operations.

Every error is scoped to a single request: the room is left untouched and the
router reports ``code``/``msg`` back to the requester only.
"""

from __future__ import annotations


class RoomError(Exception):
    category = "ROOM_ERROR"

    def __init__(self, code: str, msg: str) -> None:
        super().__init__(msg)
        self.code = code
        self.msg = msg


class PhaseViolation(RoomError):
    category = "PHASE_VIOLATION"


class TurnViolation(RoomError):
    category = "TURN_VIOLATION"


class NotSeated(RoomError):
    category = "NOT_SEATED"


class SeatConflict(RoomError):
    category = "SEAT_CONFLICT"


class CapacityExceeded(RoomError):
    category = "CAPACITY_EXCEEDED"


class MalformedSelection(RoomError):
    category = "MALFORMED_SELECTION"


class IneligibleAction(RoomError):
    category = "INELIGIBLE_ACTION"


class NotFound(RoomError):
    category = "NOT_FOUND"


class BadRequest(RoomError):
    # Inbound message could not be understood at all.
    category = "BAD_REQUEST"
