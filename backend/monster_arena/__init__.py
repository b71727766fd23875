from flask import Flask
from flask_cors import CORS
from flask_socketio import SocketIO
import click
from config import Config
from monster_arena.services.games import SessionRegistry

registry = SessionRegistry()
socketio = SocketIO(async_mode=None)

def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)
    flask_app.logger.setLevel(flask_app.config.get('LOG_LEVEL', 'INFO'))

    allowed_origins = flask_app.config.get('CORS_ORIGINS', [])
    CORS(flask_app, supports_credentials=True, origins=allowed_origins)
    registry.init_app(flask_app)

    # Initialize Socket.IO after app is created
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    from monster_arena.routes import main
    flask_app.register_blueprint(main)

    from monster_arena.api.games import games
    flask_app.register_blueprint(games, url_prefix='/api/games')

    # Importing here ensures the handlers bind to the initialized socketio instance
    from monster_arena.socketio_events import register_socketio_handlers
    register_socketio_handlers(testing=flask_app.config.get('TESTING', False))

    @click.command('games-reset')
    def games_reset_command():
        """Drops every in-memory game session."""
        dropped = registry.reset()
        print(f'Dropped {dropped} game session(s).')

    @click.command('games-list')
    def games_list_command():
        """Lists the in-memory game sessions."""
        sessions = registry.sessions()
        if not sessions:
            print('No active games.')
        for session in sessions:
            info = session.summary()
            print(f"{info['game_code']}  phase={info['phase']} players={info['players']} round={info['round']}")

    flask_app.cli.add_command(games_reset_command)
    flask_app.cli.add_command(games_list_command)

    return flask_app
