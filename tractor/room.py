from __future__ import annotations

import random
from typing import Dict, Iterable, List, Optional

from .cards import Card, TRUMP_RANK, build_deck, hand_points
from .errors import (
    BadRequest,
    CapacityExceeded,
    IneligibleAction,
    MalformedSelection,
    NotSeated,
    PhaseViolation,
    SeatConflict,
    TurnViolation,
)
from .models import LastAction, Phase, RoomConfig, Seat, Suit
from .seats import SEAT_ORDER, next_seat, parse_seat

# Room keeps one game's state in memory. No networking or logging lives here.
# Every public operation checks all of its preconditions before touching any
# field, so a raised RoomError always leaves the room as it was.


class Room:
    """Four-seat room: seating, drawing, bottom-pile exchange and trick play."""

    def __init__(
        self,
        code: str,
        config: Optional[RoomConfig] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.code = code
        self.config = config or RoomConfig()
        self.rng = rng or random.Random(self.config.seed)
        self.seats: Dict[Seat, Optional[str]] = {seat: None for seat in SEAT_ORDER}
        self.names: Dict[str, str] = {}
        self.members: List[str] = []
        self.hands: Dict[str, List[Card]] = {}
        self.table: Dict[str, List[Card]] = {}
        self.discards: List[Card] = []
        self.draw_pile: List[Card] = []
        self.bottom_pile: List[Card] = []
        self.trump_suit: Optional[Suit] = None
        self.starting_player: Optional[Seat] = None
        self.current_turn: Optional[Seat] = None
        self.phase = Phase.WAITING
        self.last_action: Optional[LastAction] = None
        self.started = False
        self.version = 0

    # Queries ---------------------------------------------------------

    def seat_of(self, participant: str) -> Optional[Seat]:
        for seat, occupant in self.seats.items():
            if occupant == participant:
                return seat
        return None

    def is_full(self) -> bool:
        return all(occupant is not None for occupant in self.seats.values())

    def hand_points(self, participant: str) -> int:
        return hand_points(self.hands.get(participant, []))

    def can_reshuffle(self, participant: str) -> bool:
        return (
            self.phase == Phase.DISCARDING_BOTTOM_PILE
            and self.starting_player is not None
            and self.seat_of(participant) == self.starting_player
            and self.hand_points(participant) < self.config.reshuffle_threshold
        )

    def trick_complete(self) -> bool:
        # Hook for trick resolution: every seat has something on the table.
        occupants = [occupant for occupant in self.seats.values() if occupant]
        if len(occupants) < len(SEAT_ORDER):
            return False
        return all(self.table.get(occupant) for occupant in occupants)

    def card_total(self) -> int:
        return (
            len(self.draw_pile)
            + len(self.bottom_pile)
            + len(self.discards)
            + sum(len(hand) for hand in self.hands.values())
            + sum(len(cards) for cards in self.table.values())
        )

    # Seating ---------------------------------------------------------

    def join(self, participant: str) -> bool:
        joined = self._ensure_member(participant)
        self.version += 1
        return joined

    def sit(self, participant: str, seat: str, name: Optional[str] = None) -> bool:
        """Seat ``participant``; returns True when this seating started the round."""
        try:
            target = parse_seat(seat)
        except ValueError:
            raise BadRequest("INVALID_SEAT", f"Unknown seat {seat!r}.") from None
        occupant = self.seats[target]
        if occupant is not None and occupant != participant:
            raise SeatConflict("SEAT_TAKEN", "Seat already taken.")

        self._ensure_member(participant)
        for label, holder in self.seats.items():
            if holder == participant:
                self.seats[label] = None
        self.seats[target] = participant
        display = name.strip() if isinstance(name, str) else ""
        if display:
            self.names[participant] = display

        started_now = False
        if not self.started and self.is_full():
            self.started = True
            self._start_round()
            started_now = True
        self.version += 1
        return started_now

    def remove_participant(self, participant: str) -> bool:
        changed = False
        for label, holder in self.seats.items():
            if holder == participant:
                self.seats[label] = None
                changed = True
        if participant in self.members:
            self.members.remove(participant)
            changed = True
        for mapping in (self.hands, self.table, self.names):
            if participant in mapping:
                del mapping[participant]
                changed = True
        if changed:
            self.version += 1
        return changed

    # Drawing ---------------------------------------------------------

    def draw_card(self, participant: str) -> Card:
        self._require_phase(Phase.DRAWING)
        seat = self._require_seat(participant)
        if seat != self.current_turn:
            raise TurnViolation("NOT_YOUR_TURN", "Not your turn.")
        card = self._draw(seat, participant)
        self.version += 1
        return card

    def auto_deal(self) -> List[Card]:
        self._require_phase(Phase.DRAWING)
        if not self.is_full():
            raise PhaseViolation("INCOMPLETE_SEATING", "Need 4 players seated to deal.")

        dealt: List[Card] = []
        for _ in range(self.config.auto_deal_limit):
            if self.phase != Phase.DRAWING or self.current_turn is None:
                break
            seat = self.current_turn
            occupant = self.seats[seat]
            if len(self.hands[occupant]) >= self.config.hand_limit:
                break
            dealt.append(self._draw(seat, occupant))
        self.version += 1
        return dealt

    def undo_draw(self, participant: str) -> Card:
        action = self.last_action
        if self.phase != Phase.DRAWING or action is None or action.kind != "draw":
            raise PhaseViolation("NOTHING_TO_UNDO", "Nothing to undo.")
        if self.seat_of(participant) != action.seat:
            raise TurnViolation("NOT_YOUR_DRAW", "Only the player who drew can undo it.")
        hand = self.hands.get(participant, [])
        idx = next((i for i, card in enumerate(hand) if card.id == action.card_id), None)
        if idx is None:
            raise MalformedSelection("CARDS_NOT_FOUND", "The drawn card is no longer in your hand.")

        card = hand.pop(idx)
        self.draw_pile.append(card)
        if action.fixed_trump:
            self.trump_suit = None
            self.starting_player = None
        self.current_turn = action.seat
        self.last_action = None
        self.version += 1
        return card

    def _draw(self, seat: Seat, participant: str) -> Card:
        hand = self.hands[participant]
        if len(hand) >= self.config.hand_limit:
            raise CapacityExceeded("HAND_FULL", f"Hand already holds {self.config.hand_limit} cards.")
        if not self.draw_pile:
            raise CapacityExceeded("DECK_EMPTY", "Deck is empty.")

        card = self.draw_pile.pop()
        hand.append(card)
        fixed_trump = card.rank == TRUMP_RANK and self.trump_suit is None
        if fixed_trump:
            self.trump_suit = card.suit
            self.starting_player = seat
        self.last_action = LastAction(kind="draw", seat=seat, card_id=card.id, fixed_trump=fixed_trump)
        self.current_turn = next_seat(seat)
        if not self.draw_pile:
            self.phase = Phase.AWAITING_BOTTOM_PILE
            self.current_turn = None
        return card

    # Bottom pile -----------------------------------------------------

    def claim_bottom_pile(self, participant: str) -> List[Card]:
        self._require_phase(Phase.AWAITING_BOTTOM_PILE)
        self._require_starting_player(participant)
        picked = list(self.bottom_pile)
        self.hands[participant].extend(picked)
        self.bottom_pile = []
        self.phase = Phase.DISCARDING_BOTTOM_PILE
        self.version += 1
        return picked

    def discard_bottom_pile(self, participant: str, card_ids: Iterable[str]) -> List[Card]:
        self._require_phase(Phase.DISCARDING_BOTTOM_PILE)
        seat = self._require_starting_player(participant)
        size = self.config.bottom_pile_size
        requested = list(card_ids)
        if len(requested) != size:
            raise MalformedSelection("INVALID_COUNT", f"Select exactly {size} cards.")
        wanted = set(requested)
        hand = self.hands[participant]
        chosen = [card for card in hand if card.id in wanted]
        if len(chosen) != size:
            raise MalformedSelection(
                "CARDS_NOT_FOUND",
                f"Select {size} different cards from your hand.",
            )

        hand[:] = [card for card in hand if card.id not in wanted]
        self.bottom_pile = chosen
        self.phase = Phase.PLAYING
        self.current_turn = seat
        self.version += 1
        return chosen

    def reshuffle_round(self, participant: str) -> None:
        self._require_phase(Phase.DISCARDING_BOTTOM_PILE)
        self._require_starting_player(participant)
        points = self.hand_points(participant)
        threshold = self.config.reshuffle_threshold
        if points >= threshold:
            raise IneligibleAction(
                "NOT_ELIGIBLE",
                f"Reshuffle needs fewer than {threshold} points in hand (you hold {points}).",
            )
        self._start_round()
        self.version += 1

    # Trick play ------------------------------------------------------

    def play_cards(self, participant: str, card_ids: Iterable[str]) -> List[Card]:
        self._require_phase(Phase.PLAYING)
        seat = self._require_seat(participant)
        if seat != self.current_turn:
            raise TurnViolation("NOT_YOUR_TURN", "Not your turn.")

        hand = self.hands[participant]
        remaining = {card.id: card for card in hand}
        played: List[Card] = []
        for card_id in card_ids:
            card = remaining.pop(card_id, None)
            if card is not None:
                played.append(card)
        hand[:] = [card for card in hand if card.id in remaining]
        # The previous play is replaced on the table; keep it in the round.
        self.discards.extend(self.table.get(participant, []))
        self.table[participant] = played
        self.current_turn = next_seat(seat)
        self.version += 1
        return played

    def clear_trick(self) -> int:
        cleared = 0
        for participant, cards in self.table.items():
            self.discards.extend(cards)
            cleared += len(cards)
            self.table[participant] = []
        self.version += 1
        return cleared

    # Internals -------------------------------------------------------

    def _ensure_member(self, participant: str) -> bool:
        self.hands.setdefault(participant, [])
        self.table.setdefault(participant, [])
        if participant in self.members:
            return False
        self.members.append(participant)
        return True

    def _start_round(self) -> None:
        deck = build_deck(self.rng)
        size = self.config.bottom_pile_size
        self.bottom_pile = deck[:size]
        self.draw_pile = deck[size:]
        self.discards = []
        for participant in self.members:
            self.hands[participant] = []
            self.table[participant] = []
        self.trump_suit = None
        self.starting_player = None
        self.last_action = None
        self.phase = Phase.DRAWING
        self.current_turn = Seat.NORTH

    def _require_phase(self, phase: Phase) -> None:
        if self.phase != phase:
            raise PhaseViolation(
                "WRONG_PHASE",
                f"Not allowed while the room is {self.phase.value} (needs {phase.value}).",
            )

    def _require_seat(self, participant: str) -> Seat:
        seat = self.seat_of(participant)
        if seat is None:
            raise NotSeated("NOT_SEATED", "Take a seat first.")
        return seat

    def _require_starting_player(self, participant: str) -> Seat:
        if self.starting_player is None:
            raise TurnViolation("NO_STARTING_PLAYER", "Nobody drew a 2 this round.")
        seat = self.seat_of(participant)
        if seat != self.starting_player:
            raise TurnViolation("NOT_STARTING_PLAYER", "Only the starting player can do that.")
        return seat
