"""Chat platform adapter: Twitch IRC in, typed events out."""

from .events import (
    ChatEvent, ChatMessage, Subscription, Resub, GiftSubscription, MysteryGiftBundle, Cheer,
)
from .irc import parse_line
from .client import TwitchChatClient
from .router import ChatEventRouter


def register_chat_handlers(app, engine, events):
    """Wire the chat client to the engine through the event queue.

    Returns (router, client, on_event). The client is not started yet and
    is None when chat is disabled or no channel is configured.
    """
    router = ChatEventRouter(engine, app.config.get('TIMER_ADMINS', []), logger=app.logger)

    def on_event(event):
        events.submit(router.handle, event)

    client = None
    if app.config.get('CHAT_ENABLED') and app.config.get('TWITCH_CHANNEL'):
        client = TwitchChatClient.from_config(app.config, on_event, logger=app.logger)
    else:
        app.logger.warning("[chat-disabled] no TWITCH_CHANNEL configured or CHAT_ENABLED is off")
    return router, client, on_event
