"""Tests for player and turn bookkeeping."""
import pytest

from netreversi.engine.board import Cell
from netreversi.engine.game import GameSession, Turn
from netreversi.errors import GameStateError, MalformedSnapshotError

R = Cell.RED
B = Cell.BLUE


@pytest.fixture
def ready() -> GameSession:
    """Both players named and coloured, no game started yet."""
    game = GameSession()
    game.assign_local_name("alice")
    game.assign_local_color(R)
    game.assign_remote("bob", B)
    return game


class TestAssignment:
    def test_name_length_limit(self):
        game = GameSession()
        game.assign_local_name("a" * 20)

        with pytest.raises(ValueError):
            game.assign_local_name("a" * 21)

    def test_empty_name_rejected(self):
        with pytest.raises(ValueError):
            GameSession().assign_local_name("")

    def test_remote_cannot_share_local_colour(self):
        game = GameSession()
        game.assign_local_name("alice")
        game.assign_local_color(R)

        with pytest.raises(GameStateError):
            game.assign_remote("bob", R)

    def test_empty_colour_rejected(self):
        with pytest.raises(GameStateError):
            GameSession().assign_local_color(Cell.EMPTY)

    def test_new_colour_forgets_previous_opponent(self, ready):
        ready.start_new_game(True)

        ready.assign_local_color(B)

        assert ready.remote.name is None
        assert ready.turn is None
        ready.assign_remote("carol", R)
        assert ready.remote.color is R


class TestGuards:
    """Game-affecting calls need both players."""

    @pytest.mark.parametrize("call", [
        lambda g: g.start_new_game(True),
        lambda g: g.set_turn(True),
        lambda g: g.end_game(),
        lambda g: g.apply_local_move(0, 0),
        lambda g: g.apply_remote_move(0, 0),
        lambda g: g.mark_opponent_gone(),
    ])
    def test_rejected_before_players_ready(self, call):
        game = GameSession()
        game.assign_local_name("alice")
        game.assign_local_color(R)

        with pytest.raises(GameStateError):
            call(game)
        assert game.board.snapshot() == " " * 16
        assert game.turn is None


class TestTransitions:
    def test_start_new_game_local_first(self, ready):
        ready.over = True
        ready.start_new_game(True)

        assert ready.turn is Turn.LOCAL
        assert ready.is_local_turn
        assert not ready.over
        assert ready.board.get_piece(1, 1) is R

    def test_start_new_game_remote_first(self, ready):
        ready.start_new_game(False)

        assert ready.turn is Turn.REMOTE
        assert ready.board.get_piece(1, 1) is B

    def test_moves_alternate_turn(self, ready):
        ready.start_new_game(True)

        assert ready.apply_local_move(3, 1) == [(2, 1)]
        assert ready.turn is Turn.REMOTE
        assert ready.board.get_piece(2, 1) is R

        ready.apply_remote_move(0, 0)
        assert ready.turn is Turn.LOCAL
        assert ready.board.get_piece(0, 0) is B

    def test_set_turn_and_end_game(self, ready):
        ready.start_new_game(True)
        ready.set_turn(False)
        ready.end_game()

        assert ready.turn is Turn.REMOTE
        assert ready.over

    def test_opponent_gone(self, ready):
        ready.start_new_game(True)
        ready.mark_opponent_gone()

        assert not ready.opponent_present
        assert ready.turn is Turn.REMOTE


class TestRestore:
    SNAPSHOT = "RRBB     RB  BR "

    def test_restore_after_fresh_login(self):
        game = GameSession()
        game.assign_local_name("alice")

        game.restore(self.SNAPSHOT, True, "bob", B)

        assert game.local.color is R
        assert game.remote.name == "bob"
        assert game.turn is Turn.LOCAL
        assert game.board.snapshot() == self.SNAPSHOT
        assert game.opponent_present

    def test_restore_requires_login(self):
        with pytest.raises(GameStateError):
            GameSession().restore(self.SNAPSHOT, True, "bob", B)

    def test_bad_snapshot_leaves_game_untouched(self, ready):
        ready.start_new_game(True)
        before = ready.snapshot()

        with pytest.raises(MalformedSnapshotError):
            ready.restore("RB", False, "carol", B)
        assert ready.snapshot() == before

    def test_colour_clash_leaves_game_untouched(self, ready):
        ready.start_new_game(True)
        before = ready.snapshot()

        with pytest.raises(GameStateError):
            ready.restore(self.SNAPSHOT, False, "carol", R)
        assert ready.snapshot() == before


def test_snapshot_is_a_copy(ready):
    ready.start_new_game(True)
    snapshot = ready.snapshot()

    ready.apply_local_move(0, 0)

    assert snapshot.board[0][0] is Cell.EMPTY
    assert snapshot.turn is Turn.LOCAL
    assert snapshot.local_name == "alice"
