from __future__ import annotations

from typing import Dict, Optional

from tractor.cards import Card
from tractor.models import Phase, RoomConfig, Seat, Suit
from tractor.room import Room

PLAYERS: Dict[Seat, str] = {
    Seat.NORTH: "p-north",
    Seat.EAST: "p-east",
    Seat.SOUTH: "p-south",
    Seat.WEST: "p-west",
}


def create_room(seed: int = 42, *, seated: bool = True, config: Optional[RoomConfig] = None) -> Room:
    """Room with all four seats filled (so drawing has begun) unless seated=False."""
    room = Room("TEST01", config or RoomConfig(seed=seed))
    if seated:
        for seat, participant in PLAYERS.items():
            room.sit(participant, seat.value, participant.split("-")[1].title())
    return room


def on_turn(room: Room) -> str:
    assert room.current_turn is not None
    participant = room.seats[room.current_turn]
    assert participant is not None
    return participant


def put_on_top(room: Room, rank: int, suit: Optional[Suit]) -> Card:
    """Move a matching card to the top of the draw pile without changing the deck."""
    for pile in (room.draw_pile, room.bottom_pile):
        for idx, card in enumerate(pile):
            if card.rank == rank and card.suit == suit:
                pile.pop(idx)
                if pile is room.bottom_pile:
                    pile.append(room.draw_pile.pop(0))
                room.draw_pile.append(card)
                return card
    raise AssertionError(f"No card with rank={rank} suit={suit} left in the piles")


def deal_round(room: Room, trump: Suit = Suit.HEART) -> str:
    """Deal the whole pile with North drawing a 2 first; returns the starting player."""
    put_on_top(room, 2, trump)
    room.auto_deal()
    assert room.phase == Phase.AWAITING_BOTTOM_PILE
    assert room.starting_player == Seat.NORTH
    return PLAYERS[Seat.NORTH]


def drain_points(room: Room, participant: str) -> None:
    """Swap every point card in ``participant``'s hand for a blank from another hand."""
    hand = room.hands[participant]
    donors = [room.hands[other] for other in room.members if other != participant]
    for idx, card in enumerate(hand):
        if not card.points:
            continue
        for donor in donors:
            swap = next((i for i, c in enumerate(donor) if not c.points), None)
            if swap is not None:
                hand[idx], donor[swap] = donor[swap], card
                break
    assert room.hand_points(participant) == 0


def to_playing(room: Room) -> str:
    """Deal, claim and discard the first 8 cards; returns the starting player."""
    starter = deal_round(room)
    room.claim_bottom_pile(starter)
    room.discard_bottom_pile(starter, [card.id for card in room.hands[starter][:8]])
    assert room.phase == Phase.PLAYING
    return starter
