"""Coach template Pydantic models — pure data, no I/O."""

from __future__ import annotations

from string import Formatter

from pydantic import BaseModel, Field, model_validator

# Prompts filled with str.format; every other brace must be doubled.
_PROMPT_PLACEHOLDERS: dict[str, set[str]] = {
    'coaching_system_prompt': {'profile', 'goals'},
    'meal_plan_prompt': {'cuisines', 'cooking_time', 'servings', 'budget', 'goals'},
}


def _placeholders(text: str) -> set[str]:
    return {field for _, field, _, _ in Formatter().parse(text) if field is not None}


class TemplateMetadata(BaseModel):
    name: str = ''
    description: str = ''
    locale: str = ''
    key: str = ''  # file key (set by loader, not stored in YAML)


class QuickAction(BaseModel):
    key: str
    label: str
    description: str = ''
    prompt: str


class CoachTemplate(BaseModel):
    metadata: TemplateMetadata = Field(default_factory=TemplateMetadata)
    welcome_message: str = ''
    coaching_system_prompt: str = ''
    food_text_prompt: str = ''
    food_image_prompt: str = ''
    meal_plan_prompt: str = ''
    quick_actions: list[QuickAction] = Field(default_factory=list)

    @model_validator(mode='after')
    def _validate_quick_actions(self) -> CoachTemplate:
        if len(self.quick_actions) > 5:
            raise ValueError(f'At most 5 quick_actions allowed, got {len(self.quick_actions)}')
        keys = [qa.key for qa in self.quick_actions]
        if len(set(keys)) != len(keys):
            raise ValueError(f'Duplicate quick action keys: {keys}')
        return self

    @model_validator(mode='after')
    def _validate_prompt_placeholders(self) -> CoachTemplate:
        for name, allowed in _PROMPT_PLACEHOLDERS.items():
            try:
                found = _placeholders(getattr(self, name))
            except ValueError as e:
                raise ValueError(f'{name}: {e} (write literal braces as {{{{ and }}}})') from e
            unknown = found - allowed
            if unknown:
                raise ValueError(
                    f'{name} has unknown placeholders {sorted(unknown)}; '
                    f'allowed: {sorted(allowed)} (write literal braces as {{{{ and }}}})'
                )
        return self
