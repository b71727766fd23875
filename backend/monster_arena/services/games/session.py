"""Game session state machine.

A GameSession is the only writer of its board, roster and turn state. Every
public operation takes the session lock, validates the request completely
before touching any state, and returns an Outcome: either accepted with a
fresh snapshot and the events to publish, or rejected with a reason code and
nothing changed.
"""

import logging
import random
import threading
from dataclasses import dataclass
from typing import List, Optional, Set

from monster_arena.models import Creature, GameSnapshot, MonsterKind, Phase, PlayerView
from . import rules
from .board import Board
from .errors import (
    ALREADY_PLACED,
    FULL,
    GAME_ALREADY_OVER,
    GAME_NOT_STARTED,
    ILLEGAL_MOVE,
    ILLEGAL_PLACEMENT,
    MONSTER_ALREADY_MOVED,
    MONSTER_NOT_ELIGIBLE,
    NOT_YOUR_TURN,
    OUT_OF_BOUNDS,
    UNKNOWN_MONSTER_KIND,
    UNKNOWN_PLAYER,
    GameEvent,
    LobbyFull,
    OutOfBounds,
    Outcome,
)
from .roster import Roster

logger = logging.getLogger(__name__)

FORFEIT = 'forfeit'
PAUSE = 'pause'


@dataclass(frozen=True)
class SessionOptions:
    allow_placement_conflict: bool = True
    disconnect_policy: str = FORFEIT

    @classmethod
    def from_config(cls, config) -> 'SessionOptions':
        policy = str(config.get('DISCONNECT_POLICY', FORFEIT)).lower()
        if policy not in (FORFEIT, PAUSE):
            logger.warning(f"[config] unknown DISCONNECT_POLICY={policy!r}, using {FORFEIT}")
            policy = FORFEIT
        return cls(
            allow_placement_conflict=bool(config.get('ALLOW_PLACEMENT_CONFLICT', True)),
            disconnect_policy=policy,
        )


class GameSession:
    def __init__(self, game_code: str, options: Optional[SessionOptions] = None,
                 rng: Optional[random.Random] = None):
        self.game_code = game_code
        self.options = options or SessionOptions()
        self.board = Board()
        self.roster = Roster()
        self.phase = Phase.LOBBY
        self.round = 0
        self.turn_order: List[int] = []
        self.turn_index = 0
        self.turn_counter = 0
        self.has_placed_this_turn = False
        self.moved_this_turn: Set[int] = set()
        self.winner: Optional[int] = None
        self._next_creature_id = 1
        self._rng = rng or random.Random()
        self._lock = threading.RLock()
        self._events: List[GameEvent] = []

    # ---- read side ----

    @property
    def current_player(self) -> Optional[int]:
        if self.phase not in (Phase.AWAITING_PLACEMENT, Phase.AWAITING_MOVE):
            return None
        if 0 <= self.turn_index < len(self.turn_order):
            return self.turn_order[self.turn_index]
        return None

    def snapshot(self) -> GameSnapshot:
        with self._lock:
            return self._snapshot()

    def summary(self):
        with self._lock:
            return {
                'game_code': self.game_code,
                'phase': self.phase.value,
                'players': len(self.roster),
                'round': self.round,
                'winner': self.winner,
            }

    def _snapshot(self) -> GameSnapshot:
        return GameSnapshot(
            game_code=self.game_code,
            phase=self.phase,
            board=self.board.snapshot(),
            players=tuple(PlayerView.of(p) for p in self.roster),
            round=self.round,
            turn_order=tuple(self.turn_order),
            turn_index=self.turn_index,
            turn_counter=self.turn_counter,
            has_placed_this_turn=self.has_placed_this_turn,
            winner=self.winner,
            moved_this_turn=tuple(sorted(self.moved_this_turn)),
        )

    # ---- operations ----

    def join(self) -> Outcome:
        with self._lock:
            self._events = []
            if self.phase == Phase.GAME_OVER:
                return self._reject('join', None, GAME_ALREADY_OVER)
            if self.phase != Phase.LOBBY:
                return self._reject('join', None, FULL)
            try:
                player_id = self.roster.register()
            except LobbyFull:
                return self._reject('join', None, FULL)

            logger.info(f"[joined] game={self.game_code} player={player_id} seats={len(self.roster)}/{self.roster.capacity}")
            self._emit('player_assigned', {
                'player_number': player_id,
                'color': self.roster.get(player_id).color,
                'game_code': self.game_code,
            }, to_player=player_id)
            if self.roster.is_full:
                self._start_round()
                self._emit('game_started', {
                    'game_code': self.game_code,
                    'players': [p.to_dict() for p in self.roster],
                })
            return self._accept(player_id=player_id)

    def place_monster(self, player_id: int, kind, row: int, col: int) -> Outcome:
        with self._lock:
            self._events = []
            reason = self._turn_rejection(player_id)
            if reason:
                return self._reject('place', player_id, reason)
            if self.has_placed_this_turn:
                return self._reject('place', player_id, ALREADY_PLACED)
            try:
                kind = MonsterKind.parse(kind)
            except ValueError:
                return self._reject('place', player_id, UNKNOWN_MONSTER_KIND)
            try:
                occupant = self.board.get(row, col)
            except OutOfBounds:
                return self._reject('place', player_id, OUT_OF_BOUNDS)
            if not rules.is_valid_placement(player_id, row, col):
                return self._reject('place', player_id, ILLEGAL_PLACEMENT)
            if occupant is not None and (occupant.owner == player_id or not self.options.allow_placement_conflict):
                return self._reject('place', player_id, ILLEGAL_PLACEMENT)

            creature = Creature(id=self._mint_creature_id(), kind=kind, owner=player_id, round_placed=self.round)
            self.roster.record_gain(player_id)
            self.has_placed_this_turn = True
            self.phase = Phase.AWAITING_MOVE
            logger.info(f"[placed] game={self.game_code} player={player_id} kind={kind.value} at=({row},{col}) creature={creature.id}")
            if occupant is None:
                self.board.set(row, col, creature)
            else:
                self._resolve_at(row, col, creature, occupant)
                self._pass_turn_if_eliminated(player_id)
            return self._accept()

    def move_monster(self, player_id: int, from_row: int, from_col: int, to_row: int, to_col: int) -> Outcome:
        with self._lock:
            self._events = []
            reason = self._turn_rejection(player_id)
            if reason:
                return self._reject('move', player_id, reason)
            try:
                moving = self.board.get(from_row, from_col)
                target = self.board.get(to_row, to_col)
            except OutOfBounds:
                return self._reject('move', player_id, OUT_OF_BOUNDS)
            if moving is None or moving.owner != player_id:
                return self._reject('move', player_id, ILLEGAL_MOVE)
            if moving.round_placed >= self.round:
                return self._reject('move', player_id, MONSTER_NOT_ELIGIBLE)
            if moving.id in self.moved_this_turn:
                return self._reject('move', player_id, MONSTER_ALREADY_MOVED)
            if target is not None and target.owner == player_id:
                return self._reject('move', player_id, ILLEGAL_MOVE)
            if not rules.is_valid_move(self.board, from_row, from_col, to_row, to_col, player_id):
                return self._reject('move', player_id, ILLEGAL_MOVE)
            if not rules.is_path_clear(self.board, from_row, from_col, to_row, to_col, player_id):
                return self._reject('move', player_id, ILLEGAL_MOVE)

            self.board.clear(from_row, from_col)
            self.moved_this_turn.add(moving.id)
            logger.info(
                f"[moved] game={self.game_code} player={player_id} creature={moving.id} "
                f"from=({from_row},{from_col}) to=({to_row},{to_col})"
            )
            if target is None:
                self.board.set(to_row, to_col, moving)
            else:
                self._resolve_at(to_row, to_col, moving, target)
                self._pass_turn_if_eliminated(player_id)
            return self._accept()

    def end_turn(self, player_id: int) -> Outcome:
        with self._lock:
            self._events = []
            reason = self._turn_rejection(player_id)
            if reason:
                return self._reject('end_turn', player_id, reason)
            logger.info(f"[end-turn] game={self.game_code} round={self.round} player={player_id}")
            self._advance_turn()
            return self._accept()

    def disconnect(self, player_id: int) -> Outcome:
        with self._lock:
            self._events = []
            player = self.roster.get(player_id)
            if player is None:
                return self._reject('disconnect', player_id, UNKNOWN_PLAYER)

            if self.phase == Phase.LOBBY:
                self.roster.unregister(player_id)
                logger.info(f"[left-lobby] game={self.game_code} player={player_id}")
            else:
                player.connected = False
                if self.phase != Phase.GAME_OVER and self.options.disconnect_policy == FORFEIT:
                    holds_turn = self.current_player == player_id
                    self._eliminate(player_id, cause='forfeit')
                    self._check_victory()
                    if holds_turn and self.phase != Phase.GAME_OVER:
                        self._advance_turn()
                else:
                    logger.info(f"[disconnected] game={self.game_code} player={player_id} policy={self.options.disconnect_policy}")
            self._emit('player_left', {'player_number': player_id, 'game_code': self.game_code})
            return self._accept(player_id=player_id)

    def check_elimination(self, player_id: int) -> bool:
        """Eliminate the player if they have lost enough creatures. Returns True on a new elimination."""
        with self._lock:
            self._events = []
            if not self.roster.has_reached_threshold(player_id):
                return False
            if not self._eliminate(player_id, cause='losses'):
                return False
            self._check_victory()
            self._pass_turn_if_eliminated(player_id)
            return True

    # ---- turn order ----

    def determine_turn_order(self) -> List[int]:
        """Fewest live creatures first; ties for the minimum are shuffled.

        Players above the minimum follow in ascending live count, keeping
        registration order among equals.
        """
        with self._lock:
            active = [self.roster.get(pid) for pid in self.roster.active_players()]
            if not active:
                return []
            ranked = sorted(active, key=lambda p: p.live_creature_count)
            fewest = ranked[0].live_creature_count
            leaders = [p.id for p in ranked if p.live_creature_count == fewest]
            if len(leaders) > 1:
                self._rng.shuffle(leaders)
            return leaders + [p.id for p in ranked if p.live_creature_count != fewest]

    def _start_round(self) -> None:
        self.round += 1
        self.turn_counter = 0
        self.has_placed_this_turn = False
        self.moved_this_turn.clear()
        if self.round == 1:
            order = self.roster.ids()
            self._rng.shuffle(order)
        else:
            order = self.determine_turn_order()
        self.turn_order = order
        self.turn_index = 0
        self.phase = Phase.AWAITING_PLACEMENT
        logger.info(f"[round] game={self.game_code} round={self.round} order={self.turn_order}")

    def _advance_turn(self) -> None:
        self.turn_counter += 1
        self.has_placed_this_turn = False
        self.moved_this_turn.clear()
        self.turn_index += 1
        if self.turn_index >= len(self.turn_order):
            self._start_round()
        else:
            self.phase = Phase.AWAITING_PLACEMENT

    def _pass_turn_if_eliminated(self, player_id: int) -> None:
        if self.phase == Phase.GAME_OVER:
            return
        player = self.roster.get(player_id)
        if player and player.eliminated and self.current_player == player_id:
            self._advance_turn()

    # ---- conflict, elimination, victory ----

    def _resolve_at(self, row: int, col: int, moving: Creature, target: Creature) -> None:
        result = rules.resolve_conflict(moving, target)
        self.board.set(row, col, result.winner)
        for creature in result.removed:
            self.roster.record_loss(creature.owner)
        logger.info(
            f"[conflict] game={self.game_code} at=({row},{col}) "
            f"{moving.kind.value}{moving.owner} vs {target.kind.value}{target.owner} "
            f"winner={result.winner.owner if result.winner else None}"
        )
        for owner in sorted({c.owner for c in result.removed}):
            if self.roster.has_reached_threshold(owner):
                self._eliminate(owner, cause='losses')
        self._check_victory()

    def _eliminate(self, player_id: int, cause: str) -> bool:
        if not self.roster.record_elimination(player_id):
            return False
        head = self.turn_order[:self.turn_index + 1]
        tail = [pid for pid in self.turn_order[self.turn_index + 1:] if pid != player_id]
        self.turn_order = head + tail
        logger.info(f"[eliminated] game={self.game_code} player={player_id} cause={cause}")
        self._emit('player_eliminated', {'player_number': player_id, 'game_code': self.game_code, 'cause': cause})
        return True

    def _check_victory(self) -> None:
        if self.phase in (Phase.LOBBY, Phase.GAME_OVER):
            return
        active = self.roster.active_players()
        if len(active) > 1:
            return
        self.winner = active[0] if active else None
        self.phase = Phase.GAME_OVER
        self.roster.record_result(self.winner)
        logger.info(f"[game-over] game={self.game_code} winner={self.winner} round={self.round}")
        self._emit('game_over', {'winner': self.winner, 'game_code': self.game_code})

    # ---- helpers ----

    def _turn_rejection(self, player_id: int) -> Optional[str]:
        if self.phase == Phase.GAME_OVER:
            return GAME_ALREADY_OVER
        if self.phase == Phase.LOBBY:
            return GAME_NOT_STARTED
        player = self.roster.get(player_id)
        if player is None:
            return UNKNOWN_PLAYER
        if player.eliminated or self.current_player != player_id:
            return NOT_YOUR_TURN
        return None

    def _mint_creature_id(self) -> int:
        creature_id = self._next_creature_id
        self._next_creature_id += 1
        return creature_id

    def _emit(self, name: str, payload, to_player: Optional[int] = None) -> None:
        self._events.append(GameEvent(name=name, payload=payload, to_player=to_player))

    def _accept(self, player_id: Optional[int] = None) -> Outcome:
        snapshot = self._snapshot()
        self._emit('state_update', snapshot.to_dict())
        events, self._events = self._events, []
        return Outcome.accepted(snapshot, events=events, player_id=player_id)

    def _reject(self, action: str, player_id: Optional[int], reason: str) -> Outcome:
        self._events = []
        logger.info(f"[rejected] game={self.game_code} player={player_id} action={action} reason={reason}")
        return Outcome.rejected(reason, player_id=player_id)
