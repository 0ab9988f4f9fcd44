"""Shared path constants for configuration, templates and the food ledger."""

from __future__ import annotations

from platformdirs import user_config_path, user_data_path

CONFIG_DIR = user_config_path('nutrichat')
DATA_DIR = user_data_path('nutrichat')
USER_TEMPLATES_DIR = CONFIG_DIR / 'templates'

DEFAULT_CONFIG_PATHS = [
    CONFIG_DIR / 'config.yaml',
    CONFIG_DIR / 'config.yml',
]
DEFAULT_LEDGER_PATH = DATA_DIR / 'food_ledger.jsonl'
