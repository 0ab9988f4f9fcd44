"""Port: settings collaborator supplying the user's profile and goals."""

from __future__ import annotations

from typing import Protocol

from nutrichat.l1_entities.profile import NutritionGoals, UserProfile


class SettingsProvider(Protocol):
    """Read-only source of the current profile and goals. Queried per request."""

    def user_profile(self) -> UserProfile: ...

    def nutrition_goals(self) -> NutritionGoals: ...
