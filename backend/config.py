import os

BASE_DIR = os.path.abspath(os.path.dirname(__file__))


def _flag(name, default):
    return os.environ.get(name, default).lower() in ('1', 'true', 'yes', 'on')


class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or 'sqlite:///' + os.path.join(BASE_DIR, 'charades.db')
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    PORT = int(os.environ.get('PORT', '3000'))
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
    # Static client bundle served at /
    PUBLIC_DIR = os.environ.get('PUBLIC_DIR') or os.path.join(BASE_DIR, '..', 'public')
    # Turn length used when a room is created without a usable duration (seconds)
    DEFAULT_TURN_DURATION_SEC = int(os.environ.get('DEFAULT_TURN_DURATION_SEC', '60'))
    MAX_TURN_DURATION_SEC = int(os.environ.get('MAX_TURN_DURATION_SEC', '600'))
    ROOM_CODE_LENGTH = int(os.environ.get('ROOM_CODE_LENGTH', '4'))
    # Empty rooms are dropped after this much inactivity (seconds)
    ROOM_IDLE_TIMEOUT_SEC = int(os.environ.get('ROOM_IDLE_TIMEOUT_SEC', '3600'))
    ROOM_SWEEP_INTERVAL_SEC = int(os.environ.get('ROOM_SWEEP_INTERVAL_SEC', '300'))
    ENABLE_ROOM_SWEEPER = _flag('ENABLE_ROOM_SWEEPER', 'true')
    # When disabled, turn timers are created but never tick on their own
    TURN_TIMER_AUTOSTART = _flag('TURN_TIMER_AUTOSTART', 'true')
    # Seed credentials for the word admin
    ADMIN_USERNAME = os.environ.get('ADMIN_USERNAME', 'admin')
    ADMIN_PASSWORD = os.environ.get('ADMIN_PASSWORD', 'charades123')
    BCRYPT_LOG_ROUNDS = int(os.environ.get('BCRYPT_LOG_ROUNDS', '12'))
