"""Nutrition entities: analysis output items and persisted food entries."""

from __future__ import annotations

import enum
from datetime import datetime
from uuid import uuid4

from pydantic import BaseModel, Field

IMAGE_CONFIDENCE = 0.8


class InputMethod(enum.Enum):
    TEXT = 'text'
    IMAGE = 'image'
    VOICE = 'voice'


class NutritionItem(BaseModel):
    """One food recognised by the analysis service. Consumed immediately to build a FoodEntry."""

    description: str
    calories: float = Field(ge=0)
    protein: float = Field(default=0.0, ge=0)
    carbs: float = Field(default=0.0, ge=0)
    fat: float = Field(default=0.0, ge=0)
    sugar: float | None = Field(default=None, ge=0)
    fibre: float | None = Field(default=None, ge=0)
    saturated_fat: float | None = Field(default=None, ge=0)
    sodium: float | None = Field(default=None, ge=0)
    cholesterol: float | None = Field(default=None, ge=0)


class FoodEntry(NutritionItem):
    """A logged food. Never mutated after creation; owned by the food ledger once handed off."""

    model_config = {'frozen': True}

    user_id: str
    timestamp: datetime
    input_method: InputMethod
    confidence: float | None = Field(default=None, ge=0, le=1)
    id: str = Field(default_factory=lambda: uuid4().hex)

    @classmethod
    def from_item(
        cls,
        item: NutritionItem,
        *,
        user_id: str,
        timestamp: datetime,
        input_method: InputMethod,
        confidence: float | None = None,
    ) -> FoodEntry:
        return cls(
            **item.model_dump(),
            user_id=user_id,
            timestamp=timestamp,
            input_method=input_method,
            confidence=confidence,
        )
