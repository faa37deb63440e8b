"""Countdown domain services.

The engine owns the timer state; the calculator prices contributions; the
command parser turns operator chat lines into engine calls. Transport
(chat, Socket.IO, HTTP) lives outside this package and calls in.
"""

from .durations import ContributionKind, DurationCalculator
from .commands import Command, parse_command, seconds_from
from .engine import TimerEngine, now_ms

__all__ = [
    'ContributionKind',
    'DurationCalculator',
    'Command',
    'parse_command',
    'seconds_from',
    'TimerEngine',
    'now_ms',
]
