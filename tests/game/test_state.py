"""Tests for immutable replay state transitions."""

import pytest

from solvermatch.game.actions import bet, call, check, fold
from solvermatch.game.cards import parse_cards
from solvermatch.game.state import GameState, SeatStatus, Street, advance_street, apply_action
from solvermatch.shared.errors import ValidationError

BOARD = parse_cards("Kd7s2c9h4d")


def initial():
    return GameState.initial([10000, 10000, 10000], small_blind=50, big_blind=100)


class TestStreet:
    """Street enum helpers."""

    def test_codes_and_board_sizes(self):
        assert [s.code for s in Street] == [0, 1, 2, 3]
        assert [s.board_size for s in Street] == [0, 3, 4, 5]

    def test_next_street(self):
        assert Street.FLOP.next_street() is Street.TURN
        assert Street.RIVER.next_street() is None

    def test_from_label(self):
        assert Street.from_label("Flop") is Street.FLOP
        with pytest.raises(ValidationError):
            Street.from_label("fifth")

    def test_importer_labels(self):
        assert Street.from_label("posts") is Street.PREFLOP
        assert Street.is_showdown_label(" Showdown ")
        assert not Street.is_showdown_label("river")
        with pytest.raises(ValidationError):
            Street.from_label("showdown")


class TestGameState:
    """Construction and derived views."""

    def test_initial_pot_includes_blinds_and_antes(self):
        state = GameState.initial([100, 100, 100, 100], small_blind=1, big_blind=2, ante=0.5)
        assert state.pot == 5.0
        assert state.street is Street.PREFLOP
        assert state.active_seats() == (0, 1, 2, 3)

    def test_board_must_match_street(self):
        with pytest.raises(ValidationError, match="Board should have"):
            GameState(
                street=Street.FLOP,
                board=BOARD[:2],
                pot=0,
                stacks=(1.0,),
                statuses=(SeatStatus.ACTIVE,),
            )

    def test_stack_status_length_mismatch(self):
        with pytest.raises(ValidationError, match="differ in length"):
            GameState(street=Street.PREFLOP, board=(), pot=0, stacks=(1.0, 2.0), statuses=(SeatStatus.ACTIVE,))


class TestApplyAction:
    """Pure transitions."""

    def test_returns_new_state(self):
        state = initial()
        after = apply_action(state, 2, bet(300))

        assert after is not state
        assert state.pot == 150
        assert after.pot == 450
        assert after.stacks[2] == 9700
        assert state.stacks[2] == 10000

    def test_history_records_pot_before(self):
        after = apply_action(apply_action(initial(), 2, bet(300)), 0, call(250))
        assert [r.pot_before for r in after.history] == [150, 450]
        assert after.history[0].street is Street.PREFLOP

    def test_fold_marks_seat(self):
        after = apply_action(initial(), 1, fold())
        assert after.active_seats() == (0, 2)
        assert after.pot == 150

    def test_check_changes_nothing_but_history(self):
        state = initial()
        after = apply_action(state, 0, check())
        assert after.pot == state.pot
        assert after.stacks == state.stacks
        assert len(after.history) == 1

    def test_folded_seat_cannot_act(self):
        after = apply_action(initial(), 1, fold())
        with pytest.raises(ValidationError, match="after folding"):
            apply_action(after, 1, check())

    def test_seat_out_of_range(self):
        with pytest.raises(ValidationError, match="out of range"):
            apply_action(initial(), 5, check())

    def test_stack_floors_at_zero(self):
        state = GameState.initial([100, 100])
        after = apply_action(state, 0, bet(150))
        assert after.stacks[0] == 0.0


class TestAdvanceStreet:
    """Street changes reveal board cards."""

    def test_reveals_cards(self):
        flop = advance_street(initial(), Street.FLOP, BOARD)
        assert flop.board == BOARD[:3]
        river = advance_street(flop, Street.RIVER, BOARD)
        assert river.board == BOARD

    def test_same_street_is_noop(self):
        state = initial()
        assert advance_street(state, Street.PREFLOP, BOARD) is state

    def test_cannot_go_back(self):
        turn = advance_street(initial(), Street.TURN, BOARD)
        with pytest.raises(ValidationError, match="back"):
            advance_street(turn, Street.FLOP, BOARD)

    def test_not_enough_board_cards(self):
        with pytest.raises(ValidationError, match="needs 4"):
            advance_street(initial(), Street.TURN, BOARD[:3])

    def test_street_actions_only_current_street(self):
        state = apply_action(initial(), 0, call(50))
        flop = advance_street(state, Street.FLOP, BOARD)
        assert flop.street_actions == ()
        assert apply_action(flop, 0, check()).street_actions[0].street is Street.FLOP
