import os

class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    # Comma separated list of origins allowed to open a socket
    CORS_ORIGINS = [
        o.strip() for o in os.environ.get(
            'CORS_ORIGINS',
            'http://localhost:5173,http://127.0.0.1:5173,http://localhost:3000,http://127.0.0.1:3000',
        ).split(',') if o.strip()
    ]
    # Placing onto an enemy creature resolves a conflict instead of being refused
    ALLOW_PLACEMENT_CONFLICT = os.environ.get('ALLOW_PLACEMENT_CONFLICT', '1') not in ('0', 'false', 'False')
    # What happens to a seated player whose socket drops mid-game: forfeit | pause
    DISCONNECT_POLICY = os.environ.get('DISCONNECT_POLICY', 'forfeit')
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
