"""Meal plan request preferences."""

from __future__ import annotations

import enum

from pydantic import BaseModel, Field


class CookingTime(enum.Enum):
    QUICK = 'quick'
    MEDIUM = 'medium'
    LONG = 'long'


class Budget(enum.Enum):
    TIGHT = 'tight'
    MODERATE = 'moderate'
    GENEROUS = 'generous'


class MealPreferences(BaseModel):
    cuisines: list[str] = Field(default_factory=lambda: ['australian'])
    cooking_time: CookingTime = CookingTime.MEDIUM
    servings: int = Field(default=2, ge=1)
    budget: Budget = Budget.MODERATE
    goals: str = ''  # free-text goals typed by the user
