"""Port: food ledger for confirmed food entries."""

from __future__ import annotations

from typing import Protocol

from nutrichat.l1_entities.nutrition import FoodEntry


class FoodLedger(Protocol):
    """Append-only store of logged food. Validation is not its concern."""

    def add(self, entry: FoodEntry) -> None:
        """Persist one entry."""
        ...
