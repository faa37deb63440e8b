from flask_socketio import emit
from countdown import socketio


def send_snapshot(engine) -> None:
    """Bring a freshly connected viewer up to date without replaying history."""
    emit('update_incentives', engine.incentives())
    emit('update_timer', {'ending_at': engine.ending_at, 'forced': True})
    emit('update_uptime', {'started_at': engine.started_at})


def handle_ping(data):
    emit('pong', data or {})


def register_socketio_handlers(engine, namespace: str = '/') -> None:
    """Register Socket.IO event handlers bound to the given engine."""

    def handle_connect(auth=None):
        send_snapshot(engine)

    socketio.on_event('connect', handle_connect, namespace=namespace)
    socketio.on_event('ping', handle_ping, namespace=namespace)
