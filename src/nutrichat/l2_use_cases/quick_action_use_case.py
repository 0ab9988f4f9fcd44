"""Use case: resolve a quick action to the prompt it submits."""

from __future__ import annotations

from nutrichat.l1_entities.template import CoachTemplate, QuickAction


def find_quick_action(key: str, template: CoachTemplate) -> QuickAction | None:
    """Look up a quick action by its key or its 1-based position."""
    for qa in template.quick_actions:
        if qa.key == key:
            return qa
    try:
        idx = int(key) - 1
    except ValueError:
        return None
    if 0 <= idx < len(template.quick_actions):
        return template.quick_actions[idx]
    return None
