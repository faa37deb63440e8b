import time

from countdown import socketio


def schedule_graph_snapshots(app, engine, events) -> bool:
    """Submit `engine.snapshot` to the event queue every GRAPH_INTERVAL_SEC.

    No-ops in TESTING mode; tests call `engine.snapshot()` directly.
    """
    if app.config.get('TESTING') and not app.config.get('ENABLE_SCHEDULER_IN_TESTS'):
        return False

    interval = int(app.config.get('GRAPH_INTERVAL_SEC', 60))
    if interval <= 0:
        app.logger.info("[graph-disabled] GRAPH_INTERVAL_SEC <= 0")
        return False

    def _worker():
        while True:
            time.sleep(interval)
            events.submit(engine.snapshot)

    app.logger.info(f"[graph-schedule] interval={interval}s keep={engine.graph_max_samples}")
    socketio.start_background_task(_worker)
    return True
