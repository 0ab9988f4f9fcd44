"""Configuration Pydantic models — pure schema, no infrastructure defaults."""

from __future__ import annotations

from pydantic import BaseModel


class AnalysisConfig(BaseModel):
    model: str
    vision_model: str


class CoachingConfig(BaseModel):
    model: str
    history_limit: int = 20  # most recent messages sent with each coaching request


class LedgerConfig(BaseModel):
    path: str


class UserConfig(BaseModel):
    user_id: str


class AppConfig(BaseModel):
    analysis: AnalysisConfig
    coaching: CoachingConfig
    ledger: LedgerConfig
    user: UserConfig
    template: str
