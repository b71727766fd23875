"""Rejection taxonomy and the value every session operation returns."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from monster_arena.models import GameSnapshot


class GameError(Exception):
    """Base class for errors raised inside the game core."""


class OutOfBounds(GameError, IndexError):
    def __init__(self, row, col):
        super().__init__(f'cell ({row!r}, {col!r}) is outside the board')
        self.row = row
        self.col = col


class LobbyFull(GameError):
    pass


# Categories
ILLEGAL_ACTION = 'IllegalAction'
FULL = 'Full'
GAME_ALREADY_OVER = 'GameAlreadyOver'
NOT_SEATED = 'NotSeated'

# Reasons
NOT_YOUR_TURN = 'NotYourTurn'
ALREADY_PLACED = 'AlreadyPlaced'
ILLEGAL_PLACEMENT = 'IllegalPlacement'
UNKNOWN_MONSTER_KIND = 'UnknownMonsterKind'
MONSTER_ALREADY_MOVED = 'MonsterAlreadyMoved'
MONSTER_NOT_ELIGIBLE = 'MonsterNotEligible'
ILLEGAL_MOVE = 'IllegalMove'
OUT_OF_BOUNDS = 'OutOfBounds'
GAME_NOT_STARTED = 'GameNotStarted'
UNKNOWN_PLAYER = 'UnknownPlayer'
UNKNOWN_GAME = 'UnknownGame'

_CATEGORY_BY_REASON = {
    FULL: FULL,
    GAME_ALREADY_OVER: GAME_ALREADY_OVER,
    NOT_SEATED: NOT_SEATED,
}

MESSAGES = {
    NOT_YOUR_TURN: 'It is not your turn',
    ALREADY_PLACED: 'You have already placed a monster this turn',
    ILLEGAL_PLACEMENT: 'Monsters may only be placed on your own edge',
    UNKNOWN_MONSTER_KIND: 'Monster type must be V, W or G',
    MONSTER_ALREADY_MOVED: 'That monster has already moved this turn',
    MONSTER_NOT_ELIGIBLE: 'A monster cannot move in the round it was placed',
    ILLEGAL_MOVE: 'That move is not allowed',
    OUT_OF_BOUNDS: 'Coordinates are outside the board',
    GAME_NOT_STARTED: 'The game has not started yet',
    UNKNOWN_PLAYER: 'Unknown player',
    UNKNOWN_GAME: 'Game not found',
    FULL: 'This game already has four players',
    GAME_ALREADY_OVER: 'This game is over',
    NOT_SEATED: 'You have not joined a game',
}


def category_for(reason: str) -> str:
    return _CATEGORY_BY_REASON.get(reason, ILLEGAL_ACTION)


@dataclass(frozen=True)
class GameEvent:
    """An outbound notification. ``to_player`` None means the whole game room."""
    name: str
    payload: Dict[str, Any]
    to_player: Optional[int] = None


@dataclass
class Outcome:
    ok: bool
    snapshot: Optional[GameSnapshot] = None
    reason: Optional[str] = None
    player_id: Optional[int] = None
    events: List[GameEvent] = field(default_factory=list)

    @property
    def category(self) -> Optional[str]:
        if self.ok or self.reason is None:
            return None
        return category_for(self.reason)

    @property
    def message(self) -> Optional[str]:
        if self.reason is None:
            return None
        return MESSAGES.get(self.reason, self.reason)

    @classmethod
    def accepted(cls, snapshot, events=None, player_id=None) -> 'Outcome':
        return cls(ok=True, snapshot=snapshot, events=list(events or []), player_id=player_id)

    @classmethod
    def rejected(cls, reason: str, player_id=None) -> 'Outcome':
        return cls(ok=False, reason=reason, player_id=player_id)

    def rejection_dict(self, action: str) -> Dict[str, Any]:
        return {
            'action': action,
            'reason': self.reason,
            'category': self.category,
            'message': self.message,
        }
