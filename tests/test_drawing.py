import pytest

from tractor.errors import CapacityExceeded, MalformedSelection, NotSeated, PhaseViolation, TurnViolation
from tractor.models import Phase, RoomConfig, Seat, Suit

from .helpers import PLAYERS, create_room, on_turn, put_on_top

NORTH = PLAYERS[Seat.NORTH]
EAST = PLAYERS[Seat.EAST]


def test_draw_moves_top_card_and_advances_turn():
    room = create_room()
    top = room.draw_pile[-1]

    card = room.draw_card(NORTH)

    assert card == top
    assert room.hands[NORTH] == [top]
    assert len(room.draw_pile) == 99
    assert room.current_turn == Seat.EAST
    assert room.last_action.seat == Seat.NORTH
    assert room.last_action.card_id == top.id
    assert room.card_total() == 108


def test_draw_rejects_wrong_phase_unseated_and_out_of_turn():
    waiting = create_room(seated=False)
    waiting.sit(NORTH, "N")
    with pytest.raises(PhaseViolation) as exc:
        waiting.draw_card(NORTH)
    assert exc.value.code == "WRONG_PHASE"

    room = create_room()
    room.join("watcher")
    with pytest.raises(NotSeated):
        room.draw_card("watcher")
    with pytest.raises(TurnViolation) as exc:
        room.draw_card(EAST)
    assert exc.value.code == "NOT_YOUR_TURN"
    assert len(room.draw_pile) == 100
    assert room.current_turn == Seat.NORTH


def test_first_two_fixes_trump_and_later_twos_do_not():
    room = create_room()
    put_on_top(room, 2, Suit.HEART)
    room.draw_card(NORTH)
    assert room.trump_suit == Suit.HEART
    assert room.starting_player == Seat.NORTH

    put_on_top(room, 2, Suit.SPADE)
    room.draw_card(EAST)
    assert room.trump_suit == Suit.HEART
    assert room.starting_player == Seat.NORTH
    assert room.card_total() == 108


def test_undo_restores_exact_pre_draw_state():
    room = create_room()
    put_on_top(room, 3, Suit.SPADE)
    room.draw_card(NORTH)
    put_on_top(room, 2, Suit.CLUB)
    pile_before = list(room.draw_pile)
    hand_before = list(room.hands[EAST])

    room.draw_card(EAST)
    assert room.trump_suit == Suit.CLUB
    assert room.starting_player == Seat.EAST

    returned = room.undo_draw(EAST)

    assert returned.rank == 2
    assert room.draw_pile == pile_before
    assert room.hands[EAST] == hand_before
    assert room.current_turn == Seat.EAST
    assert room.trump_suit is None
    assert room.starting_player is None
    assert room.last_action is None

    with pytest.raises(PhaseViolation) as exc:
        room.undo_draw(EAST)
    assert exc.value.code == "NOTHING_TO_UNDO"


def test_undo_keeps_trump_fixed_by_an_earlier_draw():
    room = create_room()
    put_on_top(room, 2, Suit.DIAMOND)
    room.draw_card(NORTH)
    room.draw_card(EAST)

    room.undo_draw(EAST)

    assert room.trump_suit == Suit.DIAMOND
    assert room.starting_player == Seat.NORTH
    assert room.current_turn == Seat.EAST


def test_only_the_drawer_can_undo():
    room = create_room()
    room.draw_card(NORTH)
    with pytest.raises(TurnViolation) as exc:
        room.undo_draw(EAST)
    assert exc.value.code == "NOT_YOUR_DRAW"
    assert len(room.hands[NORTH]) == 1


def test_hand_limit_rejects_extra_draw():
    room = create_room(config=RoomConfig(seed=5, hand_limit=1))
    for _ in range(4):
        room.draw_card(on_turn(room))
    pile = len(room.draw_pile)

    with pytest.raises(CapacityExceeded) as exc:
        room.draw_card(NORTH)

    assert exc.value.code == "HAND_FULL"
    assert len(room.draw_pile) == pile
    assert room.current_turn == Seat.NORTH


def test_manual_draws_empty_the_pile_and_await_bottom_pile():
    room = create_room()
    for _ in range(100):
        room.draw_card(on_turn(room))

    assert room.phase == Phase.AWAITING_BOTTOM_PILE
    assert room.current_turn is None
    assert all(len(room.hands[p]) == 25 for p in PLAYERS.values())
    with pytest.raises(PhaseViolation):
        room.undo_draw(PLAYERS[room.last_action.seat])


def test_auto_deal_distributes_whole_pile_in_ring_order():
    room = create_room()
    room.draw_card(NORTH)
    room.draw_card(EAST)

    dealt = room.auto_deal()

    assert len(dealt) == 98
    assert room.phase == Phase.AWAITING_BOTTOM_PILE
    assert room.current_turn is None
    assert room.draw_pile == []
    assert [len(room.hands[PLAYERS[seat]]) for seat in Seat] == [25, 25, 25, 25]
    assert len(room.bottom_pile) == 8
    assert room.card_total() == 108


def test_auto_deal_sets_trump_from_first_two_dealt():
    room = create_room()
    put_on_top(room, 2, Suit.SPADE)
    room.auto_deal()
    assert room.trump_suit == Suit.SPADE
    assert room.starting_player == Seat.NORTH


def test_auto_deal_requires_full_table_and_drawing_phase():
    room = create_room()
    room.remove_participant(PLAYERS[Seat.WEST])
    with pytest.raises(PhaseViolation) as exc:
        room.auto_deal()
    assert exc.value.code == "INCOMPLETE_SEATING"
    assert len(room.draw_pile) == 100

    room.sit(PLAYERS[Seat.WEST], "W")
    room.auto_deal()
    with pytest.raises(PhaseViolation) as exc:
        room.auto_deal()
    assert exc.value.code == "WRONG_PHASE"


def test_auto_deal_stops_when_seat_on_turn_hits_the_cap():
    room = create_room(config=RoomConfig(seed=8, hand_limit=10))
    dealt = room.auto_deal()
    assert len(dealt) == 40
    assert room.phase == Phase.DRAWING
    assert room.current_turn == Seat.NORTH
    assert len(room.draw_pile) == 60


def test_auto_deal_stops_at_iteration_limit():
    room = create_room(config=RoomConfig(seed=3, auto_deal_limit=5))
    dealt = room.auto_deal()
    assert len(dealt) == 5
    assert room.phase == Phase.DRAWING
    assert room.current_turn == Seat.EAST
    assert len(room.draw_pile) == 95


def test_undo_by_new_occupant_of_drawers_seat_changes_nothing():
    room = create_room()
    room.draw_card(NORTH)
    room.remove_participant(NORTH)
    room.sit("newcomer", "N")
    pile = list(room.draw_pile)
    action = room.last_action

    with pytest.raises(MalformedSelection) as exc:
        room.undo_draw("newcomer")

    assert exc.value.code == "CARDS_NOT_FOUND"
    assert room.draw_pile == pile
    assert room.current_turn == Seat.EAST
    assert room.last_action == action
    assert room.hands["newcomer"] == []
