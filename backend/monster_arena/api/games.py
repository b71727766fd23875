from flask import Blueprint, jsonify
from monster_arena import registry


games = Blueprint('games', __name__)


@games.route('/', methods=['GET'])
def list_games():
    """Returns a short summary of every game held in memory."""
    return jsonify([s.summary() for s in registry.sessions()])


@games.route('/<string:game_code>/state', methods=['GET'])
def get_game_state(game_code):
    """Returns the full snapshot of a game: board, players and turn metadata."""
    session = registry.get(game_code)
    if session is None:
        return jsonify({'error': 'Game not found'}), 404
    return jsonify(session.snapshot().to_dict())


@games.route('/<string:game_code>/players', methods=['GET'])
def get_players(game_code):
    session = registry.get(game_code)
    if session is None:
        return jsonify({'error': 'Game not found'}), 404
    snapshot = session.snapshot()
    return jsonify({
        'game_code': snapshot.game_code,
        'players': [p.to_dict() for p in snapshot.players],
        'turn_order': list(snapshot.turn_order),
        'current_player': snapshot.current_player,
    })
