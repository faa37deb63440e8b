import logging
import socket
import ssl
import time
from typing import Callable, Optional

from .events import ChatEvent
from .irc import parse_line


MOCK_SERVER = 'irc.fdgt.dev'


class TwitchChatClient:
    """Read-mostly Twitch IRC connection that hands typed events to a callback.

    `run_forever` reconnects with exponential backoff. Nothing here raises to
    the caller; failures are logged so the web side keeps serving viewers
    from the last known state.
    """

    def __init__(self, channel: str, on_event: Callable[[ChatEvent], None], *,
                 username: Optional[str] = None, token: Optional[str] = None,
                 server: str = 'irc.chat.twitch.tv', port: int = 6697, secure: bool = True,
                 reconnect_max_sec: int = 60, logger: Optional[logging.Logger] = None):
        self.channel = channel.lower().lstrip('#')
        self.on_event = on_event
        self.token = token
        # Anonymous read-only login when no token is configured
        self.username = (username or self.channel).lower() if token else 'justinfan12345'
        self.server = server
        self.port = port
        self.secure = secure
        self.reconnect_max_sec = reconnect_max_sec
        self.logger = logger or logging.getLogger(__name__)
        self._sock = None
        self._running = False

    @classmethod
    def from_config(cls, config, on_event, logger=None) -> 'TwitchChatClient':
        if config.get('TWITCH_USE_MOCK'):
            return cls(config['TWITCH_CHANNEL'], on_event, username='test', token='oauth:test',
                       server=MOCK_SERVER, port=6697,
                       reconnect_max_sec=config.get('CHAT_RECONNECT_MAX_SEC', 60), logger=logger)
        return cls(
            config['TWITCH_CHANNEL'],
            on_event,
            token=config.get('TWITCH_TOKEN'),
            server=config.get('TWITCH_SERVER', 'irc.chat.twitch.tv'),
            port=config.get('TWITCH_PORT', 6697),
            reconnect_max_sec=config.get('CHAT_RECONNECT_MAX_SEC', 60),
            logger=logger,
        )

    def _send(self, line: str) -> None:
        self._sock.sendall((line + '\r\n').encode('utf-8'))

    def connect(self) -> None:
        raw = socket.create_connection((self.server, self.port), timeout=15)
        if self.secure:
            ctx = ssl.create_default_context()
            raw = ctx.wrap_socket(raw, server_hostname=self.server)
        # Chat can be idle for a long time; read timeouts are not fatal
        raw.settimeout(600)
        self._sock = raw
        self._send('CAP REQ :twitch.tv/tags twitch.tv/commands')
        if self.token:
            token = self.token if self.token.startswith('oauth:') else f'oauth:{self.token}'
            self._send(f'PASS {token}')
        self._send(f'NICK {self.username}')
        self._send(f'JOIN #{self.channel}')
        self.logger.info(f"[chat-connect] server={self.server} channel=#{self.channel} user={self.username}")

    def say(self, text: str, retries: int = 2) -> bool:
        for attempt in range(retries + 1):
            try:
                self._send(f'PRIVMSG #{self.channel} :{text}')
                return True
            except (OSError, AttributeError):
                self.logger.warning(f"[chat-say-retry] attempt={attempt + 1} text={text!r}")
                time.sleep(1)
        return False

    def handle_line(self, line: str) -> None:
        if line.startswith('PING'):
            self._send('PONG :tmi.twitch.tv')
            return
        if ' NOTICE ' in line and 'authentication failed' in line.lower():
            raise ConnectionError(f"chat login rejected: {line}")
        event = parse_line(line)
        if event is None:
            return
        # Twitch never echoes our own PRIVMSGs, so a line from the channel
        # login is the broadcaster typing in chat
        self.on_event(event)

    def _read_loop(self) -> None:
        buf = b''
        while self._running:
            try:
                chunk = self._sock.recv(4096)
            except socket.timeout:
                continue
            if not chunk:
                raise ConnectionError('chat connection closed')
            buf += chunk
            while b'\r\n' in buf:
                line, buf = buf.split(b'\r\n', 1)
                self.handle_line(line.decode('utf-8', errors='ignore'))

    def run_forever(self) -> None:
        self._running = True
        backoff = 2
        while self._running:
            try:
                self.connect()
                backoff = 2
                self._read_loop()
            except (OSError, ConnectionError) as exc:
                if not self._running:
                    break
                self.logger.warning(f"[chat-error] {exc}; reconnecting in {backoff}s")
                time.sleep(backoff)
                backoff = min(backoff * 2, self.reconnect_max_sec)
            finally:
                self._close()

    def _close(self) -> None:
        if self._sock is not None:
            try:
                self._sock.close()
            except OSError:
                pass
            self._sock = None

    def stop(self) -> None:
        self._running = False
        self._close()
