"""Game domain services: board, rules, roster, sessions and the lobby.

This package contains pure domain logic that is imported by socket
handlers and HTTP routes, keeping transport concerns separated from core
game mechanics.
"""

from .errors import GameEvent, Outcome
from .lobby import SessionRegistry
from .session import GameSession, SessionOptions

__all__ = ['GameEvent', 'GameSession', 'Outcome', 'SessionOptions', 'SessionRegistry']
