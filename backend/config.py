import os


def _env_list(name, default=''):
    raw = os.environ.get(name, default)
    return [item.strip().lower() for item in raw.split(',') if item.strip()]


def _env_bool(name, default='0'):
    return os.environ.get(name, default).strip().lower() in ('1', 'true', 'yes', 'on')


class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or 'sqlite:///data.db'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    # Create missing tables on startup (mirrors CREATE TABLE IF NOT EXISTS)
    AUTO_CREATE_TABLES = _env_bool('AUTO_CREATE_TABLES', '1')
    PORT = int(os.environ.get('PORT', '3000'))
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
    # Viewer displays may be hosted elsewhere (overlay dev servers)
    CORS_ORIGINS = os.environ.get('CORS_ORIGINS', '*')
    SOCKETIO_NAMESPACE = os.environ.get('SOCKETIO_NAMESPACE', '/')

    # Chat platform
    TWITCH_CHANNEL = (os.environ.get('TWITCH_CHANNEL') or '').lower()
    TWITCH_TOKEN = os.environ.get('TWITCH_TOKEN') or None
    TWITCH_USE_MOCK = _env_bool('TWITCH_USE_MOCK') or _env_bool('USE_FDGT_MOCK')
    TWITCH_SERVER = os.environ.get('TWITCH_SERVER', 'irc.chat.twitch.tv')
    TWITCH_PORT = int(os.environ.get('TWITCH_PORT', '6697'))
    CHAT_ENABLED = _env_bool('CHAT_ENABLED', '1')
    CHAT_RECONNECT_MAX_SEC = int(os.environ.get('CHAT_RECONNECT_MAX_SEC', '60'))

    # Operators allowed to run ?start / ?forcetimer / ?setbasetime
    TIMER_ADMINS = _env_list('TIMER_ADMINS')

    # Seconds granted per tier-1 sub, scaled by the multipliers below
    TIMER_BASE_TIME = int(os.environ.get('TIMER_BASE_TIME', '60'))
    TIMER_MULTIPLIERS = {
        'tier_1': float(os.environ.get('TIMER_MULTIPLIER_TIER_1', '1')),
        'tier_2': float(os.environ.get('TIMER_MULTIPLIER_TIER_2', '2')),
        'tier_3': float(os.environ.get('TIMER_MULTIPLIER_TIER_3', '5')),
        'bits': float(os.environ.get('TIMER_MULTIPLIER_BITS', '0.5')),
        'donation': float(os.environ.get('TIMER_MULTIPLIER_DONATION', '0.2')),
    }

    # Historical graph sampling
    GRAPH_INTERVAL_SEC = int(os.environ.get('GRAPH_INTERVAL_SEC', '60'))
    GRAPH_MAX_SAMPLES = int(os.environ.get('GRAPH_MAX_SAMPLES', '120'))
