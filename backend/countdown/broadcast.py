from typing import Dict


class Broadcaster:
    """Fan-out of timer events to every connected viewer display."""

    def __init__(self, socketio, namespace: str = '/'):
        self.socketio = socketio
        self.namespace = namespace

    def timer(self, ending_at: int, forced: bool = False) -> None:
        payload = {'ending_at': ending_at}
        if forced:
            # Clients replace their countdown instead of animating the change
            payload['forced'] = True
        self.socketio.emit('update_timer', payload, namespace=self.namespace)

    def uptime(self, started_at: int) -> None:
        self.socketio.emit('update_uptime', {'started_at': started_at}, namespace=self.namespace)

    def incentives(self, amounts: Dict[str, int]) -> None:
        self.socketio.emit('update_incentives', dict(amounts), namespace=self.namespace)
