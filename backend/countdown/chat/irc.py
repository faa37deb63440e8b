"""Twitch IRC line parsing.

Turns raw IRCv3 lines into the typed events in `countdown.chat.events`.
Lines that are not contribution or chat events, or that lack the fields
an event needs, parse to None.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from .events import (
    ChatEvent, ChatMessage, Subscription, Resub, GiftSubscription, MysteryGiftBundle, Cheer,
)


logger = logging.getLogger(__name__)

ANONYMOUS_GIFTER = 'ananonymousgifter'

_TAG_ESCAPES = {':': ';', 's': ' ', '\\': '\\', 'r': '\r', 'n': '\n'}


@dataclass
class IrcLine:
    tags: Dict[str, str] = field(default_factory=dict)
    prefix: str = ''
    command: str = ''
    params: List[str] = field(default_factory=list)

    @property
    def nick(self) -> str:
        return self.prefix.split('!', 1)[0].lower() if self.prefix else ''

    @property
    def trailing(self) -> str:
        return self.params[-1] if self.params else ''


def _unescape_tag(value: str) -> str:
    out = []
    i = 0
    while i < len(value):
        ch = value[i]
        if ch == '\\' and i + 1 < len(value):
            out.append(_TAG_ESCAPES.get(value[i + 1], value[i + 1]))
            i += 2
            continue
        if ch != '\\':
            out.append(ch)
        i += 1
    return ''.join(out)


def parse_tags(tag_str: str) -> Dict[str, str]:
    tags = {}
    for part in tag_str.split(';'):
        if not part:
            continue
        if '=' in part:
            k, v = part.split('=', 1)
            tags[k] = _unescape_tag(v)
        else:
            tags[part] = ''
    return tags


def split_line(raw: str) -> Optional[IrcLine]:
    line = raw.rstrip('\r\n')
    if not line:
        return None
    msg = IrcLine()
    if line.startswith('@'):
        if ' ' not in line:
            return None
        tag_part, line = line[1:].split(' ', 1)
        msg.tags = parse_tags(tag_part)
    if line.startswith(':'):
        if ' ' not in line:
            return None
        msg.prefix, line = line[1:].split(' ', 1)
    if ' :' in line:
        head, trailing = line.split(' :', 1)
        parts = head.split()
        parts.append(trailing)
    else:
        parts = line.split()
    if not parts:
        return None
    msg.command = parts[0].upper()
    msg.params = parts[1:]
    return msg


def _int_tag(tags: Dict[str, str], key: str, default: int = 0) -> int:
    try:
        return int(tags.get(key) or default)
    except ValueError:
        return default


def to_event(msg: IrcLine) -> Optional[ChatEvent]:
    tags = msg.tags
    if msg.command == 'PRIVMSG':
        username = tags.get('login') or msg.nick
        bits = _int_tag(tags, 'bits')
        if bits > 0:
            return Cheer(username=username or None, bits=bits, text=msg.trailing)
        if not username:
            return None
        return ChatMessage(username=username, text=msg.trailing)

    if msg.command != 'USERNOTICE':
        return None

    msg_id = tags.get('msg-id', '')
    plan = tags.get('msg-param-sub-plan') or None
    username = (tags.get('login') or '').lower()
    if msg_id.startswith('anon'):
        username = ANONYMOUS_GIFTER
    if not username:
        logger.debug(f"[irc-drop] {msg_id} without login")
        return None

    if msg_id == 'sub':
        return Subscription(username=username, plan=plan)
    if msg_id == 'resub':
        return Resub(username=username, plan=plan, months=_int_tag(tags, 'msg-param-cumulative-months'))
    if msg_id in ('subgift', 'anonsubgift'):
        return GiftSubscription(
            username=username,
            plan=plan,
            recipient=(tags.get('msg-param-recipient-user-name') or None),
        )
    if msg_id in ('submysterygift', 'anonsubmysterygift'):
        return MysteryGiftBundle(username=username, plan=plan, count=_int_tag(tags, 'msg-param-mass-gift-count'))
    return None


def parse_line(raw: str) -> Optional[ChatEvent]:
    msg = split_line(raw)
    if msg is None:
        logger.debug(f"[irc-drop] unparseable line {raw!r}")
        return None
    return to_event(msg)
