"""Gateway: profile and goals from the YAML config — implements SettingsProvider port."""

from __future__ import annotations

from nutrichat.l1_entities.profile import NutritionGoals, UserProfile
from nutrichat.l3_interface_adapters.gateways.yaml_config_loader import YamlConfigLoader


class YamlSettingsProvider:
    """Reads the ``profile:`` and ``goals:`` sections on every call.

    Edits to the file show up in the next request without a restart. Missing
    sections fall back to the model defaults.
    """

    def __init__(self, config_path: str | None = None, loader: YamlConfigLoader | None = None) -> None:
        self._config_path = config_path
        self._loader = loader or YamlConfigLoader()

    def user_profile(self) -> UserProfile:
        return UserProfile.model_validate(self._section('profile'))

    def nutrition_goals(self) -> NutritionGoals:
        return NutritionGoals.model_validate(self._section('goals'))

    def _section(self, key: str) -> dict:
        return self._loader.load_raw(self._config_path).get(key) or {}
