"""Typed chat events. The router only ever sees these shapes."""

from dataclasses import dataclass
from typing import Optional, Union


@dataclass(frozen=True)
class ChatMessage:
    username: str
    text: str


@dataclass(frozen=True)
class Subscription:
    username: str
    plan: Optional[str]


@dataclass(frozen=True)
class Resub:
    username: str
    plan: Optional[str]
    months: int = 0


@dataclass(frozen=True)
class GiftSubscription:
    username: str
    plan: Optional[str]
    recipient: Optional[str] = None


@dataclass(frozen=True)
class MysteryGiftBundle:
    username: str
    plan: Optional[str]
    count: int


@dataclass(frozen=True)
class Cheer:
    username: Optional[str]
    bits: int
    text: str = ''


ChatEvent = Union[ChatMessage, Subscription, Resub, GiftSubscription, MysteryGiftBundle, Cheer]
