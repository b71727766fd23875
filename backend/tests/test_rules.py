import pytest

from monster_arena.models import Creature, MonsterKind
from monster_arena.services.games import rules
from monster_arena.services.games.board import Board
from monster_arena.services.games.errors import OutOfBounds


def creature(kind, owner, cid=1, round_placed=1):
    return Creature(id=cid, kind=MonsterKind.parse(kind), owner=owner, round_placed=round_placed)


# ---- board ----

@pytest.mark.parametrize('row,col', [(-1, 0), (0, -1), (10, 0), (0, 10), (3.5, 1), ('1', 2), (None, 0)])
def test_board_rejects_out_of_range_cells(row, col):
    board = Board()
    with pytest.raises(OutOfBounds):
        board.get(row, col)
    with pytest.raises(OutOfBounds):
        board.set(row, col, None)


def test_board_set_get_and_locate():
    board = Board()
    v = creature('V', 1, cid=42)
    board.set(9, 9, v)
    assert board.get(9, 9) is v
    assert board.locate(42) == (9, 9)
    assert list(board.cells()) == [(9, 9, v)]
    board.clear(9, 9)
    assert board.get(9, 9) is None
    assert board.locate(42) is None


def test_board_snapshot_is_detached():
    board = Board()
    snap = board.snapshot()
    board.set(0, 0, creature('G', 3))
    assert snap[0][0] is None
    assert len(snap) == 10 and all(len(r) == 10 for r in snap)


# ---- placement ----

@pytest.mark.parametrize('player,row,col', [
    (1, 0, 0), (1, 5, 0), (1, 9, 0),
    (2, 0, 9), (2, 4, 9),
    (3, 0, 0), (3, 0, 6),
    (4, 9, 0), (4, 9, 3),
])
def test_placement_on_own_edge(player, row, col):
    assert rules.is_valid_placement(player, row, col)


@pytest.mark.parametrize('player,row,col', [
    (1, 5, 5), (1, 0, 9), (1, 5, 1),
    (2, 5, 0), (2, 5, 8),
    (3, 9, 3), (3, 1, 3),
    (4, 0, 3), (4, 8, 3),
    (5, 0, 0), (1, 10, 0), (3, 0, -1),
])
def test_placement_off_edge_is_illegal(player, row, col):
    assert not rules.is_valid_placement(player, row, col)


# ---- movement ----

def test_short_diagonal_legal_long_diagonal_illegal():
    board = Board()
    board.set(2, 2, creature('V', 1))
    assert rules.is_valid_move(board, 2, 2, 4, 4, 1)
    assert rules.is_valid_move(board, 2, 2, 3, 1, 1)
    assert rules.is_valid_move(board, 2, 2, 0, 0, 1)
    assert not rules.is_valid_move(board, 2, 2, 5, 5, 1)


def test_straight_moves_any_distance():
    board = Board()
    board.set(2, 2, creature('W', 1))
    assert rules.is_valid_move(board, 2, 2, 2, 9, 1)
    assert rules.is_valid_move(board, 2, 2, 9, 2, 1)
    assert rules.is_valid_move(board, 2, 2, 0, 2, 1)


def test_knight_like_and_null_moves_are_illegal():
    board = Board()
    board.set(2, 2, creature('W', 1))
    assert not rules.is_valid_move(board, 2, 2, 4, 3, 1)
    assert not rules.is_valid_move(board, 2, 2, 2, 2, 1)


def test_move_requires_own_creature_and_bounds():
    board = Board()
    board.set(2, 2, creature('W', 1))
    assert not rules.is_valid_move(board, 2, 2, 2, 5, 2)
    assert not rules.is_valid_move(board, 3, 3, 3, 5, 1)
    assert not rules.is_valid_move(board, 2, 2, 2, 10, 1)


def test_path_blocked_by_enemy_but_not_by_friend():
    board = Board()
    board.set(0, 0, creature('V', 1, cid=1))
    board.set(0, 3, creature('G', 1, cid=2))
    assert rules.is_path_clear(board, 0, 0, 0, 6, 1)
    board.set(0, 4, creature('G', 2, cid=3))
    assert not rules.is_path_clear(board, 0, 0, 0, 6, 1)
    # an enemy on the destination itself is not part of the path
    assert rules.is_path_clear(board, 0, 0, 0, 4, 1)


def test_diagonal_path_checks_middle_cell():
    board = Board()
    board.set(2, 2, creature('V', 1, cid=1))
    board.set(3, 3, creature('W', 4, cid=2))
    assert not rules.is_path_clear(board, 2, 2, 4, 4, 1)
    assert rules.is_path_clear(board, 2, 2, 3, 3, 1)
    assert rules.is_path_clear(board, 2, 2, 0, 0, 1)


def test_vertical_path_upwards():
    board = Board()
    board.set(9, 5, creature('V', 4, cid=1))
    board.set(5, 5, creature('W', 3, cid=2))
    assert not rules.is_path_clear(board, 9, 5, 0, 5, 4)
    assert rules.is_path_clear(board, 9, 5, 6, 5, 4)


# ---- conflicts ----

@pytest.mark.parametrize('moving,target,winner', [
    ('V', 'W', 'moving'),
    ('W', 'G', 'moving'),
    ('G', 'V', 'moving'),
    ('W', 'V', 'target'),
    ('G', 'W', 'target'),
    ('V', 'G', 'target'),
    ('V', 'V', None),
    ('W', 'W', None),
    ('G', 'G', None),
])
def test_conflict_table(moving, target, winner):
    m = creature(moving, 1, cid=1)
    t = creature(target, 2, cid=2)
    result = rules.resolve_conflict(m, t)
    if winner == 'moving':
        assert result.winner is m
        assert result.removed == (t,)
    elif winner == 'target':
        assert result.winner is t
        assert result.removed == (m,)
    else:
        assert result.winner is None
        assert set(result.removed) == {m, t}


def test_dominance_is_a_cycle():
    kinds = list(MonsterKind)
    for a in kinds:
        beaten = [b for b in kinds if rules.beats(a, b)]
        beaten_by = [b for b in kinds if rules.beats(b, a)]
        assert len(beaten) == 1 and len(beaten_by) == 1
        assert not rules.beats(a, a)


def test_monster_kind_parse():
    assert MonsterKind.parse('v') is MonsterKind.VAMPIRE
    assert MonsterKind.parse('Werewolf') is MonsterKind.WEREWOLF
    assert MonsterKind.parse(MonsterKind.GHOST) is MonsterKind.GHOST
    with pytest.raises(ValueError):
        MonsterKind.parse('Zombie')
    with pytest.raises(ValueError):
        MonsterKind.parse(3)
