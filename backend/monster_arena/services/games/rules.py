from dataclasses import dataclass
from typing import Optional, Tuple

from monster_arena.models import BOARD_SIZE, Creature, MonsterKind
from .board import Board

MAX_DIAGONAL_STEP = 2

# kind -> the kind it defeats
DOMINATES = {
    MonsterKind.VAMPIRE: MonsterKind.WEREWOLF,
    MonsterKind.WEREWOLF: MonsterKind.GHOST,
    MonsterKind.GHOST: MonsterKind.VAMPIRE,
}


@dataclass(frozen=True)
class ConflictResult:
    winner: Optional[Creature]
    removed: Tuple[Creature, ...]


def edge_for(player_id: int) -> Tuple[str, int]:
    """Return ('col' | 'row', index) of the edge a player may place on."""
    last = BOARD_SIZE - 1
    edges = {1: ('col', 0), 2: ('col', last), 3: ('row', 0), 4: ('row', last)}
    try:
        return edges[player_id]
    except KeyError:
        raise ValueError(f'no edge for player {player_id!r}') from None


def is_valid_placement(player_id: int, row: int, col: int) -> bool:
    """True when (row, col) lies on the player's own border edge."""
    if player_id not in (1, 2, 3, 4):
        return False
    axis, index = edge_for(player_id)
    if axis == 'col':
        return col == index and 0 <= row < BOARD_SIZE
    return row == index and 0 <= col < BOARD_SIZE


def is_valid_move(board: Board, from_row: int, from_col: int, to_row: int, to_col: int, player_id: int) -> bool:
    """Rook-like straight moves of any length, or diagonal moves of at most two cells."""
    if not board.in_bounds(from_row, from_col) or not board.in_bounds(to_row, to_col):
        return False
    moving = board.get(from_row, from_col)
    if moving is None or moving.owner != player_id:
        return False

    row_diff = abs(to_row - from_row)
    col_diff = abs(to_col - from_col)
    if row_diff == 0 and col_diff == 0:
        return False
    if row_diff == 0 or col_diff == 0:
        return True
    return row_diff == col_diff and row_diff <= MAX_DIAGONAL_STEP


def is_path_clear(board: Board, from_row: int, from_col: int, to_row: int, to_col: int, player_id: int) -> bool:
    """Every cell strictly between source and destination must be empty or friendly.

    Only straight and diagonal lines have a path; other offsets are reported
    as not clear.
    """
    row_diff = to_row - from_row
    col_diff = to_col - from_col
    if row_diff != 0 and col_diff != 0 and abs(row_diff) != abs(col_diff):
        return False
    steps = max(abs(row_diff), abs(col_diff))
    row_step = (row_diff > 0) - (row_diff < 0)
    col_step = (col_diff > 0) - (col_diff < 0)
    for i in range(1, steps):
        cell = board.get(from_row + i * row_step, from_col + i * col_step)
        if cell is not None and cell.owner != player_id:
            return False
    return True


def beats(attacker: MonsterKind, defender: MonsterKind) -> bool:
    return DOMINATES[attacker] == defender


def resolve_conflict(moving: Creature, target: Creature) -> ConflictResult:
    """Decide a collision on one cell.

    Vampire beats Werewolf, Werewolf beats Ghost, Ghost beats Vampire.
    Equal kinds destroy each other and leave the cell empty.
    """
    if moving.kind == target.kind:
        return ConflictResult(winner=None, removed=(moving, target))
    if beats(moving.kind, target.kind):
        return ConflictResult(winner=moving, removed=(target,))
    return ConflictResult(winner=target, removed=(moving,))
