from __future__ import annotations

import itertools
import random
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional

from .models import Suit

RANKS = range(2, 15)  # 11=J, 12=Q, 13=K, 14=A
SUITS = (Suit.SPADE, Suit.HEART, Suit.DIAMOND, Suit.CLUB)
LOW_JOKER = 15
HIGH_JOKER = 16
TRUMP_RANK = 2
DECK_COPIES = 2
DECK_SIZE = DECK_COPIES * (len(SUITS) * len(RANKS) + 2)

POINT_VALUES = {5: 5, 10: 10, 13: 10}

_FACE_LABELS = {11: "J", 12: "Q", 13: "K", 14: "A"}


@dataclass(frozen=True)
class Card:
    id: str
    suit: Optional[Suit]
    rank: int

    def __post_init__(self) -> None:
        if self.rank in (LOW_JOKER, HIGH_JOKER):
            if self.suit is not None:
                raise ValueError(f"Joker cannot carry a suit: {self.id}")
        elif self.rank in RANKS:
            if self.suit is None:
                raise ValueError(f"Ranked card needs a suit: {self.id}")
        else:
            raise ValueError(f"Invalid rank: {self.rank}")

    @property
    def is_joker(self) -> bool:
        return self.suit is None

    @property
    def points(self) -> int:
        return POINT_VALUES.get(self.rank, 0)

    @property
    def label(self) -> str:
        if self.rank == LOW_JOKER:
            return "jk"
        if self.rank == HIGH_JOKER:
            return "JK"
        return f"{_FACE_LABELS.get(self.rank, self.rank)}{self.suit.value}"

    def to_payload(self) -> Dict[str, object]:
        return {
            "id": self.id,
            "suit": self.suit.value if self.suit else None,
            "rank": self.rank,
        }


def build_deck(rng: Optional[random.Random] = None) -> List[Card]:
    """Return a freshly shuffled double deck (108 cards).

    Identities embed a counter local to this call, so two decks built by the
    same process can share ids. A round only ever holds one deck.
    """
    rng = rng or random.Random()
    counter = itertools.count()
    deck: List[Card] = []
    for copy in range(DECK_COPIES):
        for suit in SUITS:
            for rank in RANKS:
                deck.append(Card(f"c_{copy}_{next(counter)}", suit, rank))
        deck.append(Card(f"j_{copy}_b_{next(counter)}", None, LOW_JOKER))
        deck.append(Card(f"j_{copy}_r_{next(counter)}", None, HIGH_JOKER))
    rng.shuffle(deck)
    return deck


def hand_points(cards: Iterable[Card]) -> int:
    return sum(card.points for card in cards)
