from __future__ import annotations

from typing import Union

from .models import Seat

SEAT_ORDER = (Seat.NORTH, Seat.EAST, Seat.SOUTH, Seat.WEST)


def parse_seat(label: Union[Seat, str]) -> Seat:
    try:
        return Seat(label)
    except ValueError:
        raise ValueError(f"Invalid seat: {label!r}") from None


def next_seat(seat: Union[Seat, str]) -> Seat:
    """Clockwise neighbour: N -> E -> S -> W -> N."""
    current = parse_seat(seat)
    idx = SEAT_ORDER.index(current)
    return SEAT_ORDER[(idx + 1) % len(SEAT_ORDER)]
