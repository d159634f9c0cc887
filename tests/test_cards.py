import random
from collections import Counter

import pytest

from tractor.cards import DECK_SIZE, HIGH_JOKER, LOW_JOKER, RANKS, SUITS, Card, build_deck, hand_points
from tractor.models import Seat, Suit
from tractor.seats import SEAT_ORDER, next_seat


def test_deck_has_108_unique_cards_with_exact_multiset():
    deck = build_deck(random.Random(1))
    assert len(deck) == DECK_SIZE == 108
    assert len({card.id for card in deck}) == 108

    counts = Counter((card.suit, card.rank) for card in deck)
    for suit in SUITS:
        for rank in RANKS:
            assert counts[(suit, rank)] == 2
    assert counts[(None, LOW_JOKER)] == 2
    assert counts[(None, HIGH_JOKER)] == 2


def test_seeded_decks_repeat_and_unseeded_calls_are_independent():
    first = [card.id for card in build_deck(random.Random(9))]
    second = [card.id for card in build_deck(random.Random(9))]
    other = [card.id for card in build_deck(random.Random(10))]
    assert first == second
    assert first != other
    assert sorted(first) == sorted(other)


def test_card_rejects_inconsistent_suit_and_rank():
    with pytest.raises(ValueError, match="Joker cannot carry a suit"):
        Card("bad", Suit.SPADE, LOW_JOKER)
    with pytest.raises(ValueError, match="needs a suit"):
        Card("bad", None, 7)
    with pytest.raises(ValueError, match="Invalid rank"):
        Card("bad", Suit.CLUB, 17)


def test_card_payload_and_label():
    card = Card("c_0_3", Suit.HEART, 12)
    assert card.to_payload() == {"id": "c_0_3", "suit": "H", "rank": 12}
    assert card.label == "QH"
    assert Card("j", None, HIGH_JOKER).to_payload()["suit"] is None


def test_hand_points_counts_fives_tens_and_kings():
    hand = [
        Card("a", Suit.SPADE, 5),
        Card("b", Suit.HEART, 10),
        Card("c", Suit.CLUB, 13),
        Card("d", Suit.DIAMOND, 12),
        Card("e", None, HIGH_JOKER),
    ]
    assert hand_points(hand) == 25
    assert hand_points([]) == 0


def test_full_deck_is_worth_two_hundred_points():
    assert hand_points(build_deck(random.Random(3))) == 200


def test_next_seat_rotates_clockwise_and_wraps():
    assert [next_seat(seat) for seat in SEAT_ORDER] == [Seat.EAST, Seat.SOUTH, Seat.WEST, Seat.NORTH]
    assert next_seat("W") == Seat.NORTH


def test_next_seat_rejects_unknown_label():
    with pytest.raises(ValueError, match="Invalid seat"):
        next_seat("X")
