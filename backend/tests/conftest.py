import os
import sys
import pytest

# Ensure the backend root (containing the `countdown` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from countdown import create_app, db, socketio


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    AUTO_CREATE_TABLES = True
    CHAT_ENABLED = False
    TIMER_ADMINS = ['streamer', 'modfriend']
    TIMER_BASE_TIME = 60
    TIMER_MULTIPLIERS = {
        'tier_1': 1.0,
        'tier_2': 2.0,
        'tier_3': 5.0,
        'bits': 0.5,
        'donation': 0.2,
    }
    GRAPH_MAX_SAMPLES = 120


class FakeClock:
    """Millisecond clock that only moves when told to."""

    def __init__(self, now=1_700_000_000_000):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += int(seconds * 1000)


class RecordingBroadcaster:
    def __init__(self):
        self.sent = []

    def timer(self, ending_at, forced=False):
        payload = {'ending_at': ending_at}
        if forced:
            payload['forced'] = True
        self.sent.append(('update_timer', payload))

    def uptime(self, started_at):
        self.sent.append(('update_uptime', {'started_at': started_at}))

    def incentives(self, amounts):
        self.sent.append(('update_incentives', dict(amounts)))

    def names(self):
        return [name for name, _ in self.sent]


class MemoryStore:
    def __init__(self, settings=None, latest=None, fail=False):
        self.settings = dict(settings or {})
        self.latest = latest
        self.fail = fail
        self.subs = []
        self.cheers = []
        self.sub_bombs = []
        self.graph = []

    def load_settings(self):
        return dict(self.settings)

    def save_setting(self, key, value):
        if self.fail:
            return False
        self.settings[key] = value
        return True

    def latest_ending_at(self):
        return self.latest

    def record_subscription(self, timestamp, ending_at, seconds, plan, user_name):
        self.subs.append((timestamp, ending_at, seconds, plan or 'undefined', user_name))
        return not self.fail

    def record_cheer(self, timestamp, ending_at, bits, user_name):
        self.cheers.append((timestamp, ending_at, bits, user_name))
        return not self.fail

    def record_sub_bomb(self, timestamp, amount_subs, plan, user_name):
        self.sub_bombs.append((timestamp, amount_subs, plan, user_name))
        return not self.fail

    def add_graph_sample(self, timestamp, ending_at, keep=120):
        self.graph.append((timestamp, ending_at))
        del self.graph[:-keep]
        return True


@pytest.fixture()
def clock():
    return FakeClock()


@pytest.fixture()
def broadcaster():
    return RecordingBroadcaster()


@pytest.fixture()
def memory_store():
    return MemoryStore()


@pytest.fixture()
def engine(memory_store, broadcaster, clock):
    from countdown.services.timer import DurationCalculator, TimerEngine
    return TimerEngine(memory_store, broadcaster, DurationCalculator(TestConfig.TIMER_MULTIPLIERS),
                       base_time=60, clock=clock)


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    with application.app_context():
        db.create_all()
        yield application
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def app_engine(flask_app):
    return flask_app.extensions['countdown']['engine']


@pytest.fixture()
def sio_client(flask_app):
    test_client = socketio.test_client(
        flask_app,
        flask_test_client=flask_app.test_client(),
    )
    yield test_client
    try:
        test_client.disconnect()
    except Exception:
        pass
