"""User profile and nutrition goal value objects, supplied by the settings collaborator."""

from __future__ import annotations

import enum

from pydantic import BaseModel, Field


class ActivityLevel(enum.Enum):
    SEDENTARY = 'sedentary'
    LIGHTLY_ACTIVE = 'lightly_active'
    MODERATELY_ACTIVE = 'moderately_active'
    VERY_ACTIVE = 'very_active'
    EXTRA_ACTIVE = 'extra_active'


class WeightGoal(enum.Enum):
    LOSE = 'lose'
    MAINTAIN = 'maintain'
    GAIN = 'gain'


class UserProfile(BaseModel):
    model_config = {'frozen': True}

    age: int = Field(default=30, gt=0)
    weight: float = Field(default=70.0, gt=0, description='Body weight in kg')
    height: float = Field(default=175.0, gt=0, description='Height in cm')
    activity_level: ActivityLevel = ActivityLevel.MODERATELY_ACTIVE
    dietary_restrictions: tuple[str, ...] = ()
    health_conditions: tuple[str, ...] = ()


class NutritionGoals(BaseModel):
    model_config = {'frozen': True}

    calorie_goal: int = Field(default=2000, ge=0)
    protein_goal: int = Field(default=150, ge=0)
    carb_goal: int = Field(default=250, ge=0)
    fat_goal: int = Field(default=65, ge=0)
    weight_goal: WeightGoal = WeightGoal.MAINTAIN
