from countdown.services.timer.dispatch import EventQueue


def test_queued_tasks_run_in_order(flask_app):
    events = EventQueue(flask_app)
    seen = []
    events.submit(seen.append, 1)
    events.submit(seen.append, 2)
    assert seen == []
    assert events.drain() == 2
    assert seen == [1, 2]


def test_inline_queue_runs_immediately(flask_app):
    events = EventQueue(flask_app, inline=True)
    seen = []
    events.submit(seen.append, 'now')
    assert seen == ['now']


def test_failing_task_does_not_stop_queue(flask_app, caplog):
    events = EventQueue(flask_app)
    seen = []

    def boom():
        raise RuntimeError('boom')

    events.submit(boom)
    events.submit(seen.append, 'after')
    events.drain()
    assert seen == ['after']
    assert '[queue-error] task boom failed' in caplog.text


def test_app_queue_is_inline_under_testing(flask_app):
    assert flask_app.extensions['countdown']['events'].inline is True
