import logging
from typing import Iterable, Optional

from countdown.services.timer.commands import parse_command, START, FORCE_TIMER, SET_BASE_TIME
from countdown.services.timer.durations import ContributionKind
from .events import (
    ChatEvent, ChatMessage, Subscription, Resub, GiftSubscription, MysteryGiftBundle, Cheer,
)


_SUB_KINDS = {
    Subscription: ContributionKind.SUBSCRIPTION,
    Resub: ContributionKind.RESUB,
    GiftSubscription: ContributionKind.GIFT_SUBSCRIPTION,
}


class ChatEventRouter:
    """Applies chat events to the engine.

    Contributions only move the timer while it has not expired. Operator
    commands are accepted from allow-listed logins only; anything else is
    ignored without a reply.
    """

    def __init__(self, engine, admins: Iterable[str], logger: Optional[logging.Logger] = None):
        self.engine = engine
        self.admins = {a.lower() for a in admins}
        self.logger = logger or logging.getLogger(__name__)

    def handle(self, event: ChatEvent) -> None:
        if isinstance(event, ChatMessage):
            self.handle_message(event)
        elif isinstance(event, (Subscription, Resub, GiftSubscription)):
            self.handle_subscription(event)
        elif isinstance(event, Cheer):
            self.handle_cheer(event)
        elif isinstance(event, MysteryGiftBundle):
            self.handle_mystery_gift(event)

    __call__ = handle

    def handle_message(self, event: ChatMessage) -> None:
        if not event.text.startswith('?') or event.username.lower() not in self.admins:
            return
        command = parse_command(event.text)
        if command is None:
            return
        engine = self.engine
        self.logger.info(f"[command] user={event.username} {command.name} {command.seconds}")
        if command.name == START:
            if not engine.is_started:
                engine.start(command.seconds)
        elif command.name == FORCE_TIMER:
            # Allowed after expiry; only requires a started timer
            if engine.is_started:
                engine.force_time(command.seconds)
        elif command.name == SET_BASE_TIME:
            engine.update_base_time(command.seconds)

    def handle_subscription(self, event) -> None:
        engine = self.engine
        if engine.is_expired():
            return
        seconds = engine.calculator.seconds_for(_SUB_KINDS[type(event)], engine.base_time, plan=event.plan)
        engine.add_time(seconds)
        engine.store.record_subscription(engine.clock(), engine.ending_at, seconds, event.plan, event.username)

    def handle_cheer(self, event: Cheer) -> None:
        engine = self.engine
        if engine.is_expired():
            return
        seconds = engine.calculator.seconds_for(ContributionKind.CHEER, engine.base_time, quantity=event.bits)
        engine.add_time(seconds)
        engine.store.record_cheer(engine.clock(), engine.ending_at, event.bits, event.username)

    def handle_mystery_gift(self, event: MysteryGiftBundle) -> None:
        # Each gifted sub in the bundle also arrives as its own GiftSubscription
        self.logger.info(f"[sub-bomb] user={event.username} count={event.count} plan={event.plan}")
        self.engine.store.record_sub_bomb(self.engine.clock(), event.count, event.plan, event.username)
