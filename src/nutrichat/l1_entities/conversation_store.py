"""Append-only conversation store: message threads, one per topic."""

from __future__ import annotations

from nutrichat.l1_entities.chat_message import ChatMessage, Sender, Topic


class ConversationStore:
    """Owns every topic's message sequence.

    Messages are created here, appended in call order and never reordered or
    removed. ``append`` does not suspend, so under a single event loop appends
    to one topic are serialized and readers only ever see whole messages.
    """

    def __init__(self) -> None:
        self._threads: dict[Topic, list[ChatMessage]] = {}

    def append(self, topic: Topic, text: str, sender: Sender) -> str:
        """Create a message at the end of *topic*'s thread. Returns its id."""
        message = ChatMessage(text=text, sender=sender, topic=topic)
        self._threads.setdefault(topic, []).append(message)
        return message.id

    def messages(self, topic: Topic) -> tuple[ChatMessage, ...]:
        """Snapshot of *topic*'s thread, oldest first."""
        return tuple(self._threads.get(topic, ()))

    def is_empty(self, topic: Topic) -> bool:
        return not self._threads.get(topic)

    def topics(self) -> list[Topic]:
        return [topic for topic, thread in self._threads.items() if thread]
