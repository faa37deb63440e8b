import logging
import time
from typing import Callable, Dict, Optional

from countdown.store import SETTING_STARTED_AT, SETTING_BASE_TIME
from .durations import DurationCalculator


def now_ms() -> int:
    return int(time.time() * 1000)


class TimerEngine:
    """Authoritative countdown state.

    All mutation goes through the public operations below. Each one updates
    the in-memory fields first, then writes through to the store and emits
    to viewers, so later readers always see the newest `ending_at` even if
    a write is slow or fails.

    Expiry gating for contributions is the caller's job; `add_time` and
    `force_time` apply unconditionally.
    """

    def __init__(self, store, broadcaster, calculator: DurationCalculator, *,
                 is_started: bool = False, started_at: int = 0, ending_at: int = 0,
                 base_time: int = 60, graph_max_samples: int = 120,
                 clock: Callable[[], int] = now_ms, logger: Optional[logging.Logger] = None):
        self.store = store
        self.broadcaster = broadcaster
        self.calculator = calculator
        self.is_started = is_started
        self.started_at = started_at
        self.ending_at = ending_at
        self.base_time = base_time
        self.graph_max_samples = graph_max_samples
        self.clock = clock
        self.logger = logger or logging.getLogger(__name__)

    @classmethod
    def restore(cls, store, broadcaster, calculator: DurationCalculator, *,
                default_base_time: int = 60, **kwargs) -> 'TimerEngine':
        """Rebuild state from persisted settings and the newest history row."""
        logger = kwargs.get('logger') or logging.getLogger(__name__)
        settings = store.load_settings()

        is_started = False
        started_at = 0
        if settings.get(SETTING_STARTED_AT) is not None:
            is_started = True
            started_at = int(settings[SETTING_STARTED_AT])
            logger.info(f"[timer-restore] started_at={started_at}")

        base_time = default_base_time
        if settings.get(SETTING_BASE_TIME) is not None:
            base_time = int(settings[SETTING_BASE_TIME])
            logger.info(f"[timer-restore] base_time={base_time}")

        ending_at = store.latest_ending_at() or 0
        if ending_at:
            logger.info(f"[timer-restore] ending_at={ending_at}")

        return cls(store, broadcaster, calculator, is_started=is_started, started_at=started_at,
                   ending_at=ending_at, base_time=base_time, **kwargs)

    # ---- queries ----

    def is_expired(self, now: Optional[int] = None) -> bool:
        return self.ending_at < (self.clock() if now is None else now)

    def incentives(self) -> Dict[str, int]:
        return self.calculator.incentives(self.base_time)

    def to_dict(self) -> dict:
        return {
            'is_started': self.is_started,
            'started_at': self.started_at,
            'ending_at': self.ending_at,
            'base_time': self.base_time,
            'expired': self.is_expired(),
            'incentives': self.incentives(),
        }

    # ---- mutations ----

    def start(self, seconds: float) -> bool:
        """Start the countdown once. Returns False if it was already started."""
        if self.is_started:
            self.logger.info(f"[timer-start-skip] already started at {self.started_at}")
            return False
        self.is_started = True
        self.started_at = self.clock()
        self.force_time(seconds)
        self.store.save_setting(SETTING_STARTED_AT, self.started_at)
        self.broadcaster.uptime(self.started_at)
        self.logger.info(f"[timer-start] started_at={self.started_at} seconds={seconds}")
        return True

    def force_time(self, seconds: float) -> None:
        self.ending_at = self.clock() + int(round(seconds * 1000))
        self.broadcaster.timer(self.ending_at, forced=True)
        self.logger.info(f"[timer-force] seconds={seconds} ending_at={self.ending_at}")

    def add_time(self, seconds: float) -> None:
        self.ending_at = self.ending_at + int(round(seconds * 1000))
        self.broadcaster.timer(self.ending_at)
        self.logger.info(f"[timer-add] seconds={seconds} ending_at={self.ending_at}")

    def update_base_time(self, new_base_time: int) -> None:
        self.base_time = new_base_time
        self.store.save_setting(SETTING_BASE_TIME, new_base_time)
        self.broadcaster.incentives(self.incentives())
        self.logger.info(f"[timer-base-time] base_time={new_base_time}")

    def snapshot(self) -> bool:
        """Record a graph sample while the countdown is running."""
        now = self.clock()
        if not self.is_started or self.is_expired(now):
            return False
        return self.store.add_graph_sample(now, self.ending_at, keep=self.graph_max_samples)
