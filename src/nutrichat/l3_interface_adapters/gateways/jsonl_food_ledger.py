"""Gateway: JSON-lines food ledger — implements FoodLedger port."""

from __future__ import annotations

import logging
from pathlib import Path

from nutrichat.l1_entities.nutrition import FoodEntry

log = logging.getLogger('nutrichat.ledger')


class JsonlFoodLedger:
    """Appends one JSON object per entry to a single file."""

    def __init__(self, path: Path) -> None:
        self._path = path
        self._path.parent.mkdir(parents=True, exist_ok=True)

    @property
    def path(self) -> Path:
        return self._path

    def add(self, entry: FoodEntry) -> None:
        with self._path.open('a', encoding='utf-8') as f:
            f.write(entry.model_dump_json() + '\n')
        log.debug('Ledger += %s (%.0f kcal, %s)', entry.description, entry.calories, entry.input_method.value)

    def entries(self) -> list[FoodEntry]:
        """Read back every entry, oldest first."""
        if not self._path.exists():
            return []
        with self._path.open(encoding='utf-8') as f:
            return [FoodEntry.model_validate_json(line) for line in f if line.strip()]
