import logging
import random
import threading
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

from monster_arena.models import Phase, generate_game_code
from .errors import NOT_SEATED, UNKNOWN_GAME, Outcome
from .session import GameSession, SessionOptions

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Seat:
    game_code: str
    player_id: int


class SessionRegistry:
    """Maps transport connections (socket ids) to seats in game sessions.

    Connections that join without a code are placed in the open lobby, which
    is created on demand. The registry never decides game rules; it only
    attributes an action to a player number and forwards it to the session.
    """

    def __init__(self, options: Optional[SessionOptions] = None,
                 rng_factory: Optional[Callable[[], random.Random]] = None):
        self.options = options or SessionOptions()
        self._rng_factory = rng_factory or random.Random
        self._sessions: Dict[str, GameSession] = {}
        self._seats: Dict[str, Seat] = {}
        self._lock = threading.Lock()

    def init_app(self, app) -> None:
        self.options = SessionOptions.from_config(app.config)
        app.extensions['monster_arena.registry'] = self

    # ---- lookup ----

    def get(self, game_code: str) -> Optional[GameSession]:
        if not game_code:
            return None
        with self._lock:
            return self._sessions.get(game_code.upper())

    def sessions(self) -> List[GameSession]:
        with self._lock:
            return list(self._sessions.values())

    def seat_for(self, sid: str) -> Optional[Seat]:
        with self._lock:
            return self._seats.get(sid)

    def sids_for(self, game_code: str) -> Dict[int, str]:
        """player_id -> sid for every connection seated in the game."""
        with self._lock:
            return {s.player_id: sid for sid, s in self._seats.items() if s.game_code == game_code}

    # ---- lifecycle ----

    def create(self) -> GameSession:
        with self._lock:
            return self._create_locked()

    def _create_locked(self) -> GameSession:
        code = generate_game_code(taken=self._sessions)
        session = GameSession(code, options=self.options, rng=self._rng_factory())
        self._sessions[code] = session
        logger.info(f"[session-created] game={code}")
        return session

    def _open_lobby_locked(self) -> GameSession:
        for session in self._sessions.values():
            if session.phase == Phase.LOBBY and not session.roster.is_full:
                return session
        return self._create_locked()

    def join(self, sid: str, game_code: Optional[str] = None) -> Outcome:
        with self._lock:
            seat = self._seats.get(sid)
            if seat is not None:
                session = self._sessions.get(seat.game_code)
                if session is not None:
                    return Outcome.accepted(session.snapshot(), player_id=seat.player_id)
            if game_code:
                session = self._sessions.get(game_code.upper())
                if session is None:
                    return Outcome.rejected(UNKNOWN_GAME)
            else:
                session = self._open_lobby_locked()

            outcome = session.join()
            if outcome.ok:
                self._seats[sid] = Seat(session.game_code, outcome.player_id)
            return outcome

    def leave(self, sid: str) -> Outcome:
        # Lock order is registry then session, as in join()
        with self._lock:
            seat = self._seats.pop(sid, None)
            session = self._sessions.get(seat.game_code) if seat else None
            if seat is None or session is None:
                return Outcome.rejected(NOT_SEATED)

            outcome = session.disconnect(seat.player_id)
            still_seated = any(s.game_code == seat.game_code for s in self._seats.values())
            if not still_seated:
                self._sessions.pop(seat.game_code, None)
                logger.info(f"[session-removed] game={seat.game_code} phase={session.phase.value}")
            return outcome

    def reset(self) -> int:
        with self._lock:
            count = len(self._sessions)
            self._sessions.clear()
            self._seats.clear()
        logger.info(f"[registry-reset] dropped={count}")
        return count

    # ---- attributed actions ----

    def _resolve(self, sid: str):
        with self._lock:
            seat = self._seats.get(sid)
            session = self._sessions.get(seat.game_code) if seat else None
        return seat, session

    def place_monster(self, sid: str, kind, row, col) -> Outcome:
        seat, session = self._resolve(sid)
        if session is None:
            return Outcome.rejected(NOT_SEATED)
        return session.place_monster(seat.player_id, kind, row, col)

    def move_monster(self, sid: str, from_row, from_col, to_row, to_col) -> Outcome:
        seat, session = self._resolve(sid)
        if session is None:
            return Outcome.rejected(NOT_SEATED)
        return session.move_monster(seat.player_id, from_row, from_col, to_row, to_col)

    def end_turn(self, sid: str) -> Outcome:
        seat, session = self._resolve(sid)
        if session is None:
            return Outcome.rejected(NOT_SEATED)
        return session.end_turn(seat.player_id)
