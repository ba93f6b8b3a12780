import os

class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or 'sqlite:///rondo.db'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    # Server process
    HOST = os.environ.get('HOST', '0.0.0.0')
    PORT = int(os.environ.get('PORT', '3000'))
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
    # Comma separated list of allowed browser origins ("*" for any)
    CORS_ORIGINS = os.environ.get('CORS_ORIGINS', '*')
    SOCKETIO_NAMESPACE = os.environ.get('SOCKETIO_NAMESPACE', '/')
    # Per-player clock budget (seconds)
    INITIAL_TIME_SEC = int(os.environ.get('INITIAL_TIME_SEC', '250'))
    ROOM_CODE_LENGTH = int(os.environ.get('ROOM_CODE_LENGTH', '6'))
    # Extra seconds a turn holder gets before the server expires the turn itself
    TURN_DEADLINE_GRACE_SEC = int(os.environ.get('TURN_DEADLINE_GRACE_SEC', '2'))
