from flask import Flask, jsonify
from flask_sqlalchemy import SQLAlchemy
from flask_cors import CORS
from flask_migrate import Migrate
from flask_socketio import SocketIO
import click
from config import Config

db = SQLAlchemy()
migrate = Migrate()
socketio = SocketIO(async_mode=None)


def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)
    flask_app.logger.setLevel(flask_app.config.get('LOG_LEVEL', 'INFO'))

    db.init_app(flask_app)
    migrate.init_app(flask_app, db)
    allowed_origins = flask_app.config.get('CORS_ORIGINS', '*')
    CORS(flask_app, origins=allowed_origins)

    # Initialize Socket.IO after app is created
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    # Import and register blueprints here
    from countdown.main import main
    flask_app.register_blueprint(main)

    from countdown.api.timer import timer
    flask_app.register_blueprint(timer, url_prefix='/api/timer')

    from countdown import models  # noqa: F401
    from countdown.store import TimerStore
    from countdown.broadcast import Broadcaster
    from countdown.services.timer import DurationCalculator, TimerEngine
    from countdown.services.timer.dispatch import EventQueue

    namespace = flask_app.config.get('SOCKETIO_NAMESPACE', '/')
    store = TimerStore(logger=flask_app.logger)
    calculator = DurationCalculator(flask_app.config.get('TIMER_MULTIPLIERS'))
    broadcaster = Broadcaster(socketio, namespace=namespace)

    with flask_app.app_context():
        if flask_app.config.get('AUTO_CREATE_TABLES'):
            db.create_all()
        engine = TimerEngine.restore(
            store, broadcaster, calculator,
            default_base_time=int(flask_app.config.get('TIMER_BASE_TIME', 60)),
            graph_max_samples=int(flask_app.config.get('GRAPH_MAX_SAMPLES', 120)),
            logger=flask_app.logger,
        )

    events = EventQueue(flask_app, inline=flask_app.config.get('TESTING', False), logger=flask_app.logger)

    from countdown.socketio_events import register_socketio_handlers
    register_socketio_handlers(engine, namespace=namespace)

    from countdown.chat import register_chat_handlers
    router, chat_client, on_chat_event = register_chat_handlers(flask_app, engine, events)

    flask_app.extensions['countdown'] = {
        'engine': engine,
        'events': events,
        'router': router,
        'chat_client': chat_client,
        'on_chat_event': on_chat_event,
    }

    @flask_app.errorhandler(404)
    def not_found(_error):
        return jsonify({'error': 'Not found'}), 404

    @click.command('timer-reset')
    def timer_reset_command():
        """Drops and recreates all timer tables."""
        with flask_app.app_context():
            store.clear()
            print('Timer history and settings have been reset!')

    @click.command('timer-status')
    def timer_status_command():
        """Prints the timer state restored from the database."""
        with flask_app.app_context():
            for key, value in engine.to_dict().items():
                print(f'{key}: {value}')

    flask_app.cli.add_command(timer_reset_command)
    flask_app.cli.add_command(timer_status_command)

    return flask_app


def start_services(flask_app):
    """Start the event queue worker, graph snapshots and chat connection."""
    from countdown.services.timer.snapshots import schedule_graph_snapshots

    ctx = flask_app.extensions['countdown']
    ctx['events'].start()
    schedule_graph_snapshots(flask_app, ctx['engine'], ctx['events'])
    client = ctx['chat_client']
    if client is not None:
        socketio.start_background_task(client.run_forever)
        if flask_app.config.get('TWITCH_USE_MOCK'):
            # fdgt answers a plain "bits" message with a fake cheer
            def _emulate_cheer():
                socketio.sleep(5)
                if client.say('bits'):
                    flask_app.logger.info("[chat-mock] bits emulated")
            socketio.start_background_task(_emulate_cheer)
