"""LLM message entity -- what the analysis service sees, not what the user sees."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field


class LLMMessage(BaseModel):
    """A single message in an LLM conversation, optionally carrying images."""

    role: Literal['system', 'user', 'assistant']
    content: str
    images: list[bytes] = Field(default_factory=list)
    image_mime: str = 'image/jpeg'
