import logging
import queue
from typing import Any, Callable, Optional, Tuple

from countdown import socketio


Task = Tuple[Callable[..., Any], tuple]


class EventQueue:
    """Single consumer FIFO that serializes every timer mutation.

    Chat events, operator commands and periodic snapshots are all submitted
    here, so the engine only ever sees one caller at a time. With
    `inline=True` (testing) tasks run immediately in the caller's thread.
    """

    def __init__(self, app, inline: bool = False, logger: Optional[logging.Logger] = None):
        self.app = app
        self.inline = inline
        self.logger = logger or logging.getLogger(__name__)
        self._tasks: 'queue.Queue[Optional[Task]]' = queue.Queue()
        self._running = False

    def submit(self, fn: Callable[..., Any], *args) -> None:
        if self.inline:
            self._run(fn, args)
            return
        self._tasks.put((fn, args))

    def _run(self, fn, args) -> None:
        with self.app.app_context():
            try:
                fn(*args)
            except Exception:
                # A failing task must not stop the queue
                self.logger.exception(f"[queue-error] task {getattr(fn, '__name__', fn)} failed")

    def drain(self) -> int:
        """Run everything currently queued in the calling thread."""
        count = 0
        while True:
            try:
                task = self._tasks.get_nowait()
            except queue.Empty:
                return count
            if task is None:
                continue
            self._run(*task)
            count += 1

    def _worker(self) -> None:
        self.logger.info("[queue-start] event queue worker running")
        while self._running:
            task = self._tasks.get()
            if task is None:
                break
            self._run(*task)
        self.logger.info("[queue-stop] event queue worker stopped")

    def start(self) -> None:
        if self.inline or self._running:
            return
        self._running = True
        socketio.start_background_task(self._worker)

    def stop(self) -> None:
        self._running = False
        self._tasks.put(None)
