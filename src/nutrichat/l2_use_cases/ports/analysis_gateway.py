"""Port: nutrition analysis service."""

from __future__ import annotations

from typing import Protocol

from nutrichat.l1_entities.chat_context import ChatContext
from nutrichat.l1_entities.meal_plan import MealPreferences
from nutrichat.l1_entities.nutrition import NutritionItem
from nutrichat.l1_entities.submission import Submission


class AnalysisGateway(Protocol):
    """Turns raw user input into nutrition data or coaching replies.

    Every method may raise; callers treat any exception as a failed request.
    """

    async def analyze(self, submission: Submission, context: ChatContext) -> list[NutritionItem]:
        """Extract nutrition items from a text or image submission."""
        ...

    async def send_message(self, text: str, context: ChatContext) -> str:
        """Return the coach's free-text reply to *text*."""
        ...

    async def generate_meal_plan(self, preferences: MealPreferences) -> str:
        """Return a meal plan as plain text."""
        ...
