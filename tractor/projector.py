from __future__ import annotations

from typing import Dict, List, Optional

from .cards import Card
from .models import Phase
from .room import Room

# The bottom pile's size is public until the starting player picks it up.
_UNCLAIMED_PHASES = (Phase.DRAWING, Phase.AWAITING_BOTTOM_PILE)


def _cards(cards: List[Card]) -> List[Dict[str, object]]:
    return [card.to_payload() for card in cards]


def _label(value) -> Optional[str]:
    return value.value if value is not None else None


def project_for(participant: str, room: Room) -> Dict[str, object]:
    """Read-only view of ``room`` for one viewer.

    The viewer sees its own hand in full and only the size of everybody
    else's. Table plays are public once made.
    """
    seat = room.seat_of(participant)
    bottom_count = len(room.bottom_pile) if room.phase in _UNCLAIMED_PHASES else None
    return {
        "code": room.code,
        "version": room.version,
        "phase": room.phase.value,
        "started": room.started,
        "seats": {label.value: occupant for label, occupant in room.seats.items()},
        "names": dict(room.names),
        "your_seat": _label(seat),
        "current_turn": _label(room.current_turn),
        "trump_suit": _label(room.trump_suit),
        "starting_player": _label(room.starting_player),
        "deck_count": len(room.draw_pile),
        "discards_count": len(room.discards),
        "bottom_pile_count": bottom_count,
        "your_hand": _cards(room.hands.get(participant, [])),
        "hand_counts": {member: len(hand) for member, hand in room.hands.items()},
        "table": {member: _cards(cards) for member, cards in room.table.items()},
        "trick_complete": room.trick_complete(),
        "can_reshuffle": room.can_reshuffle(participant),
        "your_points": room.hand_points(participant),
    }
