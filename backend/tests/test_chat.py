from countdown.chat import (
    ChatEventRouter, ChatMessage, Subscription, Resub, GiftSubscription, MysteryGiftBundle, Cheer,
    TwitchChatClient, parse_line,
)
from countdown.chat.irc import ANONYMOUS_GIFTER


ADMINS = ['streamer', 'modfriend']


def _router(engine):
    return ChatEventRouter(engine, ADMINS)


# ---- IRC parsing ----

def test_parse_privmsg():
    line = '@badges=;display-name=Streamer;login=streamer :streamer!streamer@streamer.tmi.twitch.tv PRIVMSG #chan :?start 01:00:00'
    assert parse_line(line) == ChatMessage(username='streamer', text='?start 01:00:00')


def test_parse_privmsg_without_tags_uses_prefix_nick():
    line = ':Someone!someone@someone.tmi.twitch.tv PRIVMSG #chan :hello there'
    assert parse_line(line) == ChatMessage(username='someone', text='hello there')


def test_parse_cheer():
    line = '@bits=250;display-name=Fan :fan!fan@fan.tmi.twitch.tv PRIVMSG #chan :cheer250 go go'
    assert parse_line(line) == Cheer(username='fan', bits=250, text='cheer250 go go')


def test_parse_sub_and_resub():
    sub = '@login=alice;msg-id=sub;msg-param-sub-plan=2000 :tmi.twitch.tv USERNOTICE #chan'
    resub = ('@login=bob;msg-id=resub;msg-param-sub-plan=Prime;msg-param-cumulative-months=7 '
             ':tmi.twitch.tv USERNOTICE #chan :still here')
    assert parse_line(sub) == Subscription(username='alice', plan='2000')
    assert parse_line(resub) == Resub(username='bob', plan='Prime', months=7)


def test_parse_gifts():
    gift = ('@login=carol;msg-id=subgift;msg-param-sub-plan=1000;msg-param-recipient-user-name=dave '
            ':tmi.twitch.tv USERNOTICE #chan')
    anon = '@login=ananonymousgifter;msg-id=anonsubgift;msg-param-sub-plan=3000 :tmi.twitch.tv USERNOTICE #chan'
    bomb = '@login=erin;msg-id=submysterygift;msg-param-sub-plan=1000;msg-param-mass-gift-count=5 :tmi.twitch.tv USERNOTICE #chan'
    assert parse_line(gift) == GiftSubscription(username='carol', plan='1000', recipient='dave')
    assert parse_line(anon) == GiftSubscription(username=ANONYMOUS_GIFTER, plan='3000', recipient=None)
    assert parse_line(bomb) == MysteryGiftBundle(username='erin', plan='1000', count=5)


def test_parse_drops_irrelevant_and_incomplete_lines():
    assert parse_line('') is None
    assert parse_line(':tmi.twitch.tv 001 justinfan12345 :Welcome, GLHF!') is None
    assert parse_line('@msg-id=raid;login=x :tmi.twitch.tv USERNOTICE #chan') is None
    assert parse_line('@msg-id=sub :tmi.twitch.tv USERNOTICE #chan') is None


def test_parse_unescapes_tag_values():
    line = r'@login=alice;msg-id=sub;system-msg=alice\ssubscribed :tmi.twitch.tv USERNOTICE #chan'
    assert parse_line(line) == Subscription(username='alice', plan=None)


def test_client_answers_ping_and_forwards_chat():
    received = []
    client = TwitchChatClient('Chan', received.append, token='abc')
    sent = []
    client._send = sent.append
    client.handle_line('PING :tmi.twitch.tv')
    client.handle_line(':viewer!viewer@viewer.tmi.twitch.tv PRIVMSG #chan :hi')
    assert sent == ['PONG :tmi.twitch.tv']
    assert received == [ChatMessage(username='viewer', text='hi')]


def test_client_forwards_commands_from_channel_owner():
    received = []
    client = TwitchChatClient('streamer', received.append, token='oauth:abc')
    assert client.username == 'streamer'
    client._send = lambda line: None
    client.handle_line('@login=streamer :streamer!streamer@streamer.tmi.twitch.tv PRIVMSG #streamer :?start 01:00:00')
    assert received == [ChatMessage(username='streamer', text='?start 01:00:00')]


def test_client_without_token_logs_in_anonymously():
    client = TwitchChatClient('#SomeChannel', lambda e: None)
    assert client.channel == 'somechannel'
    assert client.username.startswith('justinfan')


# ---- routing ----

def test_tier_one_sub_adds_base_time(engine, broadcaster, memory_store, clock):
    engine.ending_at = clock.now + 10 * 60 * 1000
    before = engine.ending_at
    _router(engine).handle(Subscription(username='alice', plan='1000'))
    assert engine.ending_at - before == 60_000
    assert broadcaster.sent == [('update_timer', {'ending_at': before + 60_000})]
    assert memory_store.subs == [(clock.now, before + 60_000, 60.0, '1000', 'alice')]


def test_subs_use_plan_multiplier(engine, clock):
    engine.ending_at = clock.now + 1000
    before = engine.ending_at
    router = _router(engine)
    router.handle(Resub(username='a', plan='3000', months=3))
    router.handle(GiftSubscription(username='b', plan='2000', recipient='c'))
    router.handle(Subscription(username='d', plan=None))
    assert engine.ending_at - before == (300 + 120 + 60) * 1000


def test_missing_plan_persisted_as_undefined(engine, memory_store, clock):
    engine.ending_at = clock.now + 1000
    _router(engine).handle(Subscription(username='d', plan=None))
    assert memory_store.subs[0][3] == 'undefined'


def test_cheer_adds_bits_time(engine, memory_store, clock):
    engine.ending_at = clock.now + 1000
    before = engine.ending_at
    _router(engine).handle(Cheer(username='fan', bits=250))
    assert engine.ending_at - before == 75_000
    assert memory_store.cheers == [(clock.now, before + 75_000, 250, 'fan')]


def test_contributions_after_expiry_are_ignored(engine, broadcaster, memory_store, clock):
    engine.ending_at = clock.now - 1
    router = _router(engine)
    router.handle(Subscription(username='late', plan='1000'))
    router.handle(Cheer(username='late', bits=1000))
    assert engine.ending_at == clock.now - 1
    assert broadcaster.sent == []
    assert memory_store.subs == [] and memory_store.cheers == []


def test_mystery_gift_does_not_move_timer(engine, broadcaster, memory_store, clock):
    engine.ending_at = clock.now + 1000
    _router(engine).handle(MysteryGiftBundle(username='erin', plan='1000', count=5))
    assert engine.ending_at == clock.now + 1000
    assert broadcaster.sent == []
    assert memory_store.sub_bombs == [(clock.now, 5, '1000', 'erin')]


def test_admin_start_command(engine, clock):
    _router(engine).handle(ChatMessage(username='Streamer', text='?start 1:02:03'))
    assert engine.is_started
    assert engine.ending_at == clock.now + 3723 * 1000


def test_start_command_ignored_when_already_started(engine, clock):
    router = _router(engine)
    router.handle(ChatMessage(username='streamer', text='?start 01:00'))
    ending_at = engine.ending_at
    clock.advance(5)
    router.handle(ChatMessage(username='streamer', text='?start 05:00'))
    assert engine.ending_at == ending_at


def test_forcetimer_requires_started(engine, clock):
    router = _router(engine)
    router.handle(ChatMessage(username='streamer', text='?forcetimer 10:00'))
    assert engine.ending_at == 0
    router.handle(ChatMessage(username='streamer', text='?start 01:00'))
    router.handle(ChatMessage(username='streamer', text='?forcetimer 10:00'))
    assert engine.ending_at == clock.now + 600_000


def test_forcetimer_works_after_expiry(engine, clock):
    router = _router(engine)
    router.handle(ChatMessage(username='streamer', text='?start 00:10'))
    clock.advance(60)
    assert engine.is_expired()
    router.handle(ChatMessage(username='modfriend', text='?forcetimer 02:00'))
    assert engine.ending_at == clock.now + 120_000


def test_setbasetime_command(engine, memory_store):
    _router(engine).handle(ChatMessage(username='modfriend', text='?setbasetime 45'))
    assert engine.base_time == 45
    assert memory_store.settings['base_time'] == 45


def test_unauthorized_and_malformed_commands_are_inert(engine, broadcaster):
    router = _router(engine)
    router.handle(ChatMessage(username='random', text='?start 01:00'))
    router.handle(ChatMessage(username='random', text='?setbasetime 1'))
    router.handle(ChatMessage(username='streamer', text='?start'))
    router.handle(ChatMessage(username='streamer', text='just chatting'))
    assert not engine.is_started
    assert engine.base_time == 60
    assert broadcaster.sent == []


def test_say_retries_then_gives_up(monkeypatch):
    monkeypatch.setattr('countdown.chat.client.time.sleep', lambda s: None)
    client = TwitchChatClient('chan', lambda e: None, token='abc')
    attempts = []

    def failing_send(line):
        attempts.append(line)
        raise OSError('broken pipe')

    client._send = failing_send
    assert client.say('hello', retries=2) is False
    assert attempts == ['PRIVMSG #chan :hello'] * 3


def test_say_sends_privmsg():
    client = TwitchChatClient('chan', lambda e: None, token='abc')
    sent = []
    client._send = sent.append
    assert client.say('bits') is True
    assert sent == ['PRIVMSG #chan :bits']
