"""Infrastructure provider configs — lives in L4, not domain."""

from __future__ import annotations

import copy
from typing import Literal

from pydantic import BaseModel, Field

from nutrichat.l1_entities.config import AppConfig
from nutrichat.l3_interface_adapters.gateways.paths import DEFAULT_LEDGER_PATH
from nutrichat.l3_interface_adapters.gateways.yaml_config_loader import deep_merge

APP_CONFIG_DEFAULTS: dict = {
    'analysis': {
        'model': 'llama3.1:8b',
        'vision_model': 'llava:7b',
    },
    'coaching': {
        'model': 'llama3.1:8b',
        'history_limit': 20,
    },
    'ledger': {
        'path': str(DEFAULT_LEDGER_PATH),
    },
    'user': {
        'user_id': 'localUser',
    },
    'template': 'default_en',
}


def build_app_config(raw: dict) -> AppConfig:
    """Merge *raw* user overrides on top of defaults, then validate."""
    merged = copy.deepcopy(APP_CONFIG_DEFAULTS)
    deep_merge(merged, raw)
    return AppConfig.model_validate(merged)


class OllamaProviderConfig(BaseModel):
    host: str = 'http://localhost:11434'


class OpenAIProviderConfig(BaseModel):
    api_key: str | None = None  # None → SDK reads OPENAI_API_KEY env
    base_url: str = 'https://api.openai.com/v1'


class InfraConfig(BaseModel):
    """Groups all provider-specific settings outside the domain layer."""

    llm_provider: Literal['ollama', 'openai'] = 'ollama'
    ollama: OllamaProviderConfig = Field(default_factory=OllamaProviderConfig)
    openai: OpenAIProviderConfig = Field(default_factory=OpenAIProviderConfig)
