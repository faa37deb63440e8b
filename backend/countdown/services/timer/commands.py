import re
from dataclasses import dataclass
from typing import Optional


START = 'start'
FORCE_TIMER = 'forcetimer'
SET_BASE_TIME = 'setbasetime'

_DURATION = r'((?:\d+:)?\d{2}:\d{2})'
_PATTERNS = (
    (START, re.compile(r'^\?start ' + _DURATION)),
    (FORCE_TIMER, re.compile(r'^\?forcetimer ' + _DURATION)),
    (SET_BASE_TIME, re.compile(r'^\?setbasetime (\d+)')),
)


@dataclass(frozen=True)
class Command:
    name: str
    seconds: int


def seconds_from(time_str: str) -> int:
    """Convert `MM:SS` or `HH:MM:SS` to seconds."""
    parts = [int(p, 10) for p in time_str.split(':')]
    if len(parts) == 3:
        hours, minutes, seconds = parts
    elif len(parts) == 2:
        hours = 0
        minutes, seconds = parts
    else:
        raise ValueError(f"expected MM:SS or HH:MM:SS, got {time_str!r}")
    return ((hours * 60) + minutes) * 60 + seconds


def parse_command(text: str) -> Optional[Command]:
    """Return the operator command in `text`, or None if it isn't one."""
    if not text or not text.startswith('?'):
        return None
    for name, pattern in _PATTERNS:
        match = pattern.match(text)
        if not match:
            continue
        if name == SET_BASE_TIME:
            return Command(name, int(match.group(1), 10))
        return Command(name, seconds_from(match.group(1)))
    return None
