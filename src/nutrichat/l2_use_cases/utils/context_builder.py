"""Assemble the per-request ChatContext from the store and the settings collaborator."""

from __future__ import annotations

from nutrichat.l1_entities.chat_context import ChatContext
from nutrichat.l1_entities.chat_message import Topic
from nutrichat.l1_entities.conversation_store import ConversationStore
from nutrichat.l2_use_cases.ports.settings_provider import SettingsProvider


def build_chat_context(store: ConversationStore, topic: Topic, settings: SettingsProvider) -> ChatContext:
    """Snapshot *topic*'s history and read the current profile and goals.

    Settings are fetched on every call; nothing is cached between requests.
    """
    return ChatContext(
        user_profile=settings.user_profile(),
        current_goals=settings.nutrition_goals(),
        conversation_history=store.messages(topic),
    )
