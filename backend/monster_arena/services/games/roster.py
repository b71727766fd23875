from typing import Dict, Iterator, List, Optional

from monster_arena.models import ELIMINATION_THRESHOLD, MAX_PLAYERS, Player
from .errors import LobbyFull


class Roster:
    """Up to four player records, kept in registration order."""

    def __init__(self, capacity: int = MAX_PLAYERS):
        self.capacity = capacity
        self._players: Dict[int, Player] = {}

    def __len__(self) -> int:
        return len(self._players)

    def __iter__(self) -> Iterator[Player]:
        return iter(self._players.values())

    def __contains__(self, player_id) -> bool:
        return player_id in self._players

    @property
    def is_full(self) -> bool:
        return len(self._players) >= self.capacity

    def register(self) -> int:
        """Seat a new player on the lowest free id (1..capacity)."""
        if self.is_full:
            raise LobbyFull()
        player_id = next(i for i in range(1, self.capacity + 1) if i not in self._players)
        self._players[player_id] = Player(id=player_id)
        # registration order is id order
        self._players = dict(sorted(self._players.items()))
        return player_id

    def unregister(self, player_id: int) -> None:
        self._players.pop(player_id, None)

    def get(self, player_id: int) -> Optional[Player]:
        return self._players.get(player_id)

    def ids(self) -> List[int]:
        return list(self._players)

    def active_players(self) -> List[int]:
        return [p.id for p in self._players.values() if not p.eliminated]

    def record_gain(self, player_id: int) -> None:
        self._players[player_id].live_creature_count += 1

    def record_loss(self, player_id: int) -> None:
        player = self._players[player_id]
        player.live_creature_count = max(0, player.live_creature_count - 1)
        player.lost_creature_count += 1

    def record_elimination(self, player_id: int) -> bool:
        """Mark a player eliminated. Returns False if they already were."""
        player = self._players[player_id]
        if player.eliminated:
            return False
        player.eliminated = True
        return True

    def has_reached_threshold(self, player_id: int) -> bool:
        return self._players[player_id].lost_creature_count >= ELIMINATION_THRESHOLD

    def record_result(self, winner: Optional[int]) -> None:
        for player in self._players.values():
            if winner is not None and player.id == winner:
                player.wins += 1
            else:
                player.losses += 1
