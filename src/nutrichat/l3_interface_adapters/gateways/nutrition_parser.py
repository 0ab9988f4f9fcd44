"""Parse free-form model output into NutritionItem records.

Models wrap JSON in prose or code fences, use their own key names, and emit
numbers as strings with units. This module is tolerant of all of that, but
raises AnalysisParseError when no usable JSON is present at all.
"""

from __future__ import annotations

import json
import math
import re
from typing import Any

from pydantic import ValidationError

from nutrichat.l1_entities.errors import AnalysisParseError
from nutrichat.l1_entities.nutrition import NutritionItem

_FENCE_OPEN = re.compile(r'^```(?:json)?\s*', re.IGNORECASE)
_FENCE_CLOSE = re.compile(r'\s*```$')
_TRAILING_COMMA = re.compile(r',\s*([}\]])')
_NUMBER = re.compile(r'-?\d+(?:\.\d+)?')

_ITEM_KEYS = ('items', 'foods', 'food', 'nutrition')

_FIELD_ALIASES: dict[str, tuple[str, ...]] = {
    'calories': ('calories', 'calories_kcal', 'kcal', 'energy_kcal', 'energy'),
    'protein': ('protein', 'protein_g'),
    'carbs': ('carbs', 'carbs_g', 'carbohydrates', 'carbohydrates_g', 'carbohydrate'),
    'fat': ('fat', 'fat_g', 'total_fat'),
    'sugar': ('sugar', 'sugar_g', 'sugars'),
    'fibre': ('fibre', 'fiber', 'fibre_g', 'fiber_g'),
    'saturated_fat': ('saturated_fat', 'saturatedFat', 'saturated_fat_g', 'sat_fat'),
    'sodium': ('sodium', 'sodium_mg'),
    'cholesterol': ('cholesterol', 'cholesterol_mg'),
}
_DESCRIPTION_ALIASES = ('description', 'name', 'food', 'item', 'dish', 'title')
_OPTIONAL_FIELDS = {'sugar', 'fibre', 'saturated_fat', 'sodium', 'cholesterol'}


def parse_nutrition_items(raw: str) -> list[NutritionItem]:
    """Parse *raw* model output. An empty item list is a valid result."""
    items: list[NutritionItem] = []
    for entry in _load_item_list(raw):
        if not isinstance(entry, dict):
            continue
        try:
            items.append(NutritionItem.model_validate(_normalize_item(entry)))
        except ValidationError as e:
            raise AnalysisParseError(f'Invalid nutrition item {entry!r}: {e}') from e
    return items


def _strip_fences(text: str) -> str:
    cleaned = _FENCE_OPEN.sub('', text.strip())
    return _FENCE_CLOSE.sub('', cleaned)


def _sanitize(text: str) -> str:
    cleaned = text.replace('“', '"').replace('”', '"').replace('‘', "'").replace('’', "'")
    return _TRAILING_COMMA.sub(r'\1', cleaned)


def _json_candidates(text: str) -> list[str]:
    """Balanced top-level {...} or [...] spans, scanning past string literals."""
    candidates: list[str] = []
    in_str = False
    escaped = False
    stack: list[str] = []
    start: int | None = None
    closers = {'{': '}', '[': ']'}

    for i, ch in enumerate(text):
        if in_str:
            if escaped:
                escaped = False
            elif ch == '\\':
                escaped = True
            elif ch == '"':
                in_str = False
            continue
        if ch == '"':
            in_str = True
        elif ch in closers:
            if not stack:
                start = i
            stack.append(closers[ch])
        elif stack and ch == stack[-1]:
            stack.pop()
            if not stack and start is not None:
                candidates.append(text[start : i + 1])
                start = None
    return candidates


def _decode(candidate: str) -> Any:
    try:
        return json.loads(candidate)
    except json.JSONDecodeError:
        return json.loads(_sanitize(candidate))


def _load_item_list(raw: str) -> list[Any]:
    """Item list from the first JSON span in *raw* that carries food data.

    Spans that parse but hold no items (citation markers such as ``[1]``,
    error objects) are skipped in favour of later spans.
    """
    cleaned = _strip_fences(raw)
    if not cleaned:
        raise AnalysisParseError('Empty model output')

    last_error: Exception | None = None
    rejected: list[Any] = []
    for idx, candidate in enumerate([cleaned, *_json_candidates(cleaned)]):
        try:
            payload = _decode(candidate)
        except json.JSONDecodeError as e:
            last_error = e
            continue
        entries = _item_list(payload, whole_output=idx == 0)
        if entries is not None:
            return entries
        rejected.append(payload)

    if rejected:
        raise AnalysisParseError(f'No food items in model output: {str(rejected[-1])[:200]}')
    raise AnalysisParseError(f'Model output does not contain valid JSON: {last_error}')


def _item_list(payload: Any, *, whole_output: bool) -> list[Any] | None:
    """Entries of *payload*, or None when it does not look like food data.

    A bare list counts only if it holds at least one object, or if it is the
    entire (empty) reply.
    """
    if isinstance(payload, list):
        if any(isinstance(entry, dict) for entry in payload) or (whole_output and not payload):
            return payload
        return None
    if isinstance(payload, dict):
        for key in _ITEM_KEYS:
            value = payload.get(key)
            if isinstance(value, list):
                return value
        if _first_present(payload, _DESCRIPTION_ALIASES) is not None:
            return [payload]
    return None


def _first_present(obj: dict[str, Any], keys: tuple[str, ...]) -> Any:
    for key in keys:
        if obj.get(key) is not None:
            return obj[key]
    return None


def _coerce_float(value: Any) -> float | None:
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (int, float)):
        return float(value) if math.isfinite(value) else None
    if isinstance(value, str):
        match = _NUMBER.search(value.replace(',', ''))
        if match:
            return float(match.group())
    return None


def _normalize_item(raw: dict[str, Any]) -> dict[str, Any]:
    description = _first_present(raw, _DESCRIPTION_ALIASES)
    item: dict[str, Any] = {'description': str(description).strip() if description is not None else 'unknown'}
    for field, aliases in _FIELD_ALIASES.items():
        value = _coerce_float(_first_present(raw, aliases))
        if value is None:
            if field not in _OPTIONAL_FIELDS and field != 'calories':
                item[field] = 0.0
            continue
        item[field] = max(0.0, value)
    return item
