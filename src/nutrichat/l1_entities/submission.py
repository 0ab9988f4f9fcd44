"""User submission entity -- one unit of input for the request orchestrator."""

from __future__ import annotations

import enum
from typing import Any

from pydantic import BaseModel, model_validator

from nutrichat.l1_entities.chat_message import FOOD_LOGGING, Topic
from nutrichat.l1_entities.nutrition import InputMethod

IMAGE_CAPTION = 'Photo upload'


class RequestKind(enum.Enum):
    FOOD = 'food'  # extract nutrition and log it
    COACHING = 'coaching'  # free-text conversation


class Submission(BaseModel):
    """Text and/or image input from the user.

    ``kind`` is optional: when omitted it is derived from the topic, and image
    submissions are always food-bearing.
    """

    model_config = {'frozen': True}

    text: str = ''
    image: bytes | None = None
    image_mime: str = 'image/jpeg'
    method: InputMethod = InputMethod.TEXT
    kind: RequestKind | None = None

    @model_validator(mode='before')
    @classmethod
    def _image_implies_image_method(cls, data: Any) -> Any:
        if isinstance(data, dict) and data.get('image') is not None and 'method' not in data:
            data = {**data, 'method': InputMethod.IMAGE}
        return data

    @property
    def is_blank(self) -> bool:
        return not self.text.strip() and not self.image

    @property
    def display_text(self) -> str:
        """Text recorded as the user's message in the conversation."""
        text = self.text.strip()
        if not text and self.image:
            return IMAGE_CAPTION
        return text

    def kind_for(self, topic: Topic) -> RequestKind:
        if self.kind is not None:
            return self.kind
        if self.image is not None or topic == FOOD_LOGGING:
            return RequestKind.FOOD
        return RequestKind.COACHING
