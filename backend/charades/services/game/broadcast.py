NAMESPACE = '/ws'


def room_channel(code: str) -> str:
    return f"room:{code}"


class SocketIOBroadcaster:
    """Delivery to a whole room or to exactly one connection over Socket.IO."""

    def __init__(self, socketio, namespace: str = NAMESPACE):
        self.socketio = socketio
        self.namespace = namespace

    def to_room(self, code, event, payload=None, skip_sid=None):
        self.socketio.emit(event, payload, to=room_channel(code), skip_sid=skip_sid, namespace=self.namespace)

    def to_sid(self, sid, event, payload=None):
        self.socketio.emit(event, payload, to=sid, namespace=self.namespace)


class RecordingBroadcaster:
    """Collects deliveries in memory; used when no transport is attached."""

    def __init__(self):
        self.sent = []

    def to_room(self, code, event, payload=None, skip_sid=None):
        self.sent.append(('room', code, event, payload, skip_sid))

    def to_sid(self, sid, event, payload=None):
        self.sent.append(('sid', sid, event, payload, None))

    def events(self, name=None):
        return [s for s in self.sent if name is None or s[2] == name]

    def clear(self):
        self.sent.clear()
