from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, Optional, Tuple
import string
import random

BOARD_SIZE = 10
MAX_PLAYERS = 4
ELIMINATION_THRESHOLD = 10
# indexed by seat number - 1
PLAYER_COLORS = ('blue', 'red', 'green', 'yellow')


class MonsterKind(str, Enum):
    VAMPIRE = 'V'
    WEREWOLF = 'W'
    GHOST = 'G'

    @classmethod
    def parse(cls, value) -> 'MonsterKind':
        """Accept a MonsterKind, its letter ('V') or its name ('vampire')."""
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            raise ValueError(f'unknown monster kind: {value!r}')
        text = value.strip()
        for kind in cls:
            if text.upper() == kind.value or text.upper() == kind.name:
                return kind
        raise ValueError(f'unknown monster kind: {value!r}')


class Phase(str, Enum):
    LOBBY = 'lobby'
    AWAITING_PLACEMENT = 'awaiting_placement'
    AWAITING_MOVE = 'awaiting_move'
    GAME_OVER = 'game_over'


@dataclass(frozen=True)
class Creature:
    id: int
    kind: MonsterKind
    owner: int
    round_placed: int

    def to_dict(self):
        return {
            'id': self.id,
            'kind': self.kind.value,
            'owner': self.owner,
            'round_placed': self.round_placed,
        }


@dataclass
class Player:
    id: int
    live_creature_count: int = 0
    lost_creature_count: int = 0
    wins: int = 0
    losses: int = 0
    eliminated: bool = False
    connected: bool = True

    @property
    def color(self) -> str:
        return PLAYER_COLORS[(self.id - 1) % len(PLAYER_COLORS)]

    def to_dict(self):
        return {
            'id': self.id,
            'color': self.color,
            'live_creature_count': self.live_creature_count,
            'lost_creature_count': self.lost_creature_count,
            'wins': self.wins,
            'losses': self.losses,
            'eliminated': self.eliminated,
            'connected': self.connected,
        }


@dataclass(frozen=True)
class PlayerView:
    """Read-only copy of a Player taken for a snapshot."""
    id: int
    live_creature_count: int
    lost_creature_count: int
    wins: int
    losses: int
    eliminated: bool
    connected: bool
    color: str = ''

    @classmethod
    def of(cls, player: Player) -> 'PlayerView':
        return cls(
            id=player.id,
            color=player.color,
            live_creature_count=player.live_creature_count,
            lost_creature_count=player.lost_creature_count,
            wins=player.wins,
            losses=player.losses,
            eliminated=player.eliminated,
            connected=player.connected,
        )

    def to_dict(self):
        return {
            'id': self.id,
            'color': self.color,
            'live_creature_count': self.live_creature_count,
            'lost_creature_count': self.lost_creature_count,
            'wins': self.wins,
            'losses': self.losses,
            'eliminated': self.eliminated,
            'connected': self.connected,
        }


@dataclass(frozen=True)
class GameSnapshot:
    game_code: str
    phase: Phase
    board: Tuple[Tuple[Optional[Creature], ...], ...]
    players: Tuple[PlayerView, ...]
    round: int
    turn_order: Tuple[int, ...]
    turn_index: int
    turn_counter: int
    has_placed_this_turn: bool
    winner: Optional[int] = None
    moved_this_turn: Tuple[int, ...] = field(default_factory=tuple)

    @property
    def current_player(self) -> Optional[int]:
        if self.phase not in (Phase.AWAITING_PLACEMENT, Phase.AWAITING_MOVE):
            return None
        if 0 <= self.turn_index < len(self.turn_order):
            return self.turn_order[self.turn_index]
        return None

    def player(self, player_id: int) -> Optional[PlayerView]:
        for p in self.players:
            if p.id == player_id:
                return p
        return None

    def creatures(self) -> Iterable[Tuple[int, int, Creature]]:
        for r, row in enumerate(self.board):
            for c, cell in enumerate(row):
                if cell is not None:
                    yield r, c, cell

    def to_dict(self) -> Dict[str, Any]:
        return {
            'game_code': self.game_code,
            'phase': self.phase.value,
            'board': [[cell.to_dict() if cell else None for cell in row] for row in self.board],
            'players': [p.to_dict() for p in self.players],
            'round': self.round,
            'turn_order': list(self.turn_order),
            'turn_index': self.turn_index,
            'turn_counter': self.turn_counter,
            'current_player': self.current_player,
            'has_placed_this_turn': self.has_placed_this_turn,
            'moved_this_turn': list(self.moved_this_turn),
            'winner': self.winner,
        }


def generate_game_code(taken=(), length=4):
    """Generate a unique, short game code."""
    while True:
        code = ''.join(random.choices(string.ascii_uppercase + string.digits, k=length))
        if code not in taken:
            return code
