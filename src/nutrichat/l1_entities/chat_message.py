"""Conversation message entities: topic identifier, sender, and the message itself."""

from __future__ import annotations

import enum
import re
from datetime import datetime, timezone
from uuid import uuid4

from pydantic import BaseModel, Field, field_validator

_TOPIC_NAME = re.compile(r'^[a-z][a-z0-9-]*$')


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class Sender(enum.Enum):
    USER = 'user'
    COACH = 'coach'


class Topic(BaseModel):
    """Isolation boundary for one conversation thread (e.g. food-logging, coaching)."""

    model_config = {'frozen': True}

    name: str

    @field_validator('name')
    @classmethod
    def _validate_name(cls, value: str) -> str:
        if not _TOPIC_NAME.match(value):
            raise ValueError(f'Invalid topic name {value!r}: use lowercase letters, digits and hyphens')
        return value

    def __str__(self) -> str:
        return self.name


FOOD_LOGGING = Topic(name='food-logging')
COACHING = Topic(name='coaching')


class ChatMessage(BaseModel):
    """A single message in a topic's conversation. Immutable once created."""

    model_config = {'frozen': True}

    text: str
    sender: Sender
    topic: Topic
    id: str = Field(default_factory=lambda: uuid4().hex)
    timestamp: datetime = Field(default_factory=utc_now)
