"""Gateway: YAML coach template loader (built-in package templates and user templates)."""

from __future__ import annotations

from importlib import resources
from pathlib import Path

import yaml

from nutrichat.l1_entities.template import CoachTemplate, TemplateMetadata
from nutrichat.l3_interface_adapters.gateways.paths import USER_TEMPLATES_DIR

_TEMPLATES_DIR = resources.files('nutrichat') / 'templates'


def builtin_names() -> set[str]:
    """Discover built-in template names from the templates directory."""
    return {p.name.removesuffix('.yaml') for p in _TEMPLATES_DIR.iterdir() if p.name.endswith('.yaml')}


def user_template_names() -> set[str]:
    if not USER_TEMPLATES_DIR.is_dir():
        return set()
    return {p.name.removesuffix('.yaml') for p in USER_TEMPLATES_DIR.iterdir() if p.name.endswith('.yaml')}


def all_template_names() -> set[str]:
    return builtin_names() | user_template_names()


class YamlTemplateLoader:
    """Loads CoachTemplate from a YAML file path, the user templates dir, or built-ins."""

    def load(self, template_ref: str) -> CoachTemplate:
        # 1. Explicit file path
        path = Path(template_ref)
        if path.is_file():
            return _parse(path.read_text(encoding='utf-8'))
        # 2. User template (overrides built-in of the same name)
        if template_ref in user_template_names():
            return _load_user(template_ref)
        # 3. Built-in template
        if template_ref in builtin_names():
            return _load_builtin(template_ref)
        available = sorted(all_template_names())
        raise FileNotFoundError(f"Template not found: '{template_ref}'. Available templates: {', '.join(available)}")

    def list_templates(self) -> list[TemplateMetadata]:
        loaded: dict[str, TemplateMetadata] = {}
        for name in builtin_names():
            loaded[name] = _load_builtin(name).metadata
        for name in user_template_names():
            loaded[name] = _load_user(name).metadata
        return [loaded[k] for k in sorted(loaded)]


def _parse(text: str) -> CoachTemplate:
    return CoachTemplate.model_validate(yaml.safe_load(text) or {})


def _load_builtin(name: str) -> CoachTemplate:
    tmpl = _parse((_TEMPLATES_DIR / f'{name}.yaml').read_text(encoding='utf-8'))
    tmpl.metadata.key = name
    return tmpl


def _load_user(name: str) -> CoachTemplate:
    tmpl = _parse((USER_TEMPLATES_DIR / f'{name}.yaml').read_text(encoding='utf-8'))
    tmpl.metadata.key = name
    return tmpl
