"""Broadcaster that keeps every published message, for tests and scripts."""

from ordering.broadcast.port import Broadcaster


class InMemoryBroadcaster(Broadcaster):
    def __init__(self) -> None:
        self.messages: list[tuple[str, dict]] = []
        self.fail_with: Exception | None = None

    def publish(self, channel, message):
        if self.fail_with is not None:
            raise self.fail_with
        self.messages.append((channel, message))

    def messages_for(self, channel) -> list[dict]:
        return [message for ch, message in self.messages if ch == channel]

    def events_for(self, channel) -> list[str]:
        return [message["event"] for message in self.messages_for(channel)]

    def clear(self) -> None:
        self.messages.clear()
