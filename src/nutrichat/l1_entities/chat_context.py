"""Request payload handed to the analysis service. Built per request, never persisted."""

from __future__ import annotations

from pydantic import BaseModel

from nutrichat.l1_entities.chat_message import ChatMessage
from nutrichat.l1_entities.profile import NutritionGoals, UserProfile


class ChatContext(BaseModel):
    model_config = {'frozen': True}

    user_profile: UserProfile
    current_goals: NutritionGoals
    conversation_history: tuple[ChatMessage, ...] = ()
