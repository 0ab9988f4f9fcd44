"""Use case: turn analysed items into food entries and hand them to the ledger."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from nutrichat.l1_entities.chat_message import utc_now
from nutrichat.l1_entities.nutrition import IMAGE_CONFIDENCE, FoodEntry, InputMethod, NutritionItem
from nutrichat.l2_use_cases.ports.food_ledger import FoodLedger

log = logging.getLogger('nutrichat.ledger')


def format_food_summary(count: int, total_calories: float) -> str:
    return f'Added {count} food item(s) with {int(total_calories)} calories to your log!'


@dataclass(frozen=True)
class FoodLogResult:
    """Entries written for one analysis call, in ledger order."""

    entries: tuple[FoodEntry, ...] = ()

    @property
    def total_calories(self) -> float:
        return sum(entry.calories for entry in self.entries)

    @property
    def summary(self) -> str:
        return format_food_summary(len(self.entries), self.total_calories)


class RecordFoodEntriesUseCase:
    """Builds one FoodEntry per item and adds each to the ledger in the order given.

    All entries from one call share a timestamp and input method. Image-derived
    entries carry a fixed confidence; text and voice entries leave it unset.
    A ledger error propagates after the entries already written.
    """

    def __init__(self, ledger: FoodLedger) -> None:
        self._ledger = ledger

    def execute(
        self,
        items: list[NutritionItem],
        *,
        user_id: str,
        method: InputMethod,
    ) -> FoodLogResult:
        timestamp = utc_now()
        confidence = IMAGE_CONFIDENCE if method is InputMethod.IMAGE else None
        entries: list[FoodEntry] = []
        for item in items:
            entry = FoodEntry.from_item(
                item,
                user_id=user_id,
                timestamp=timestamp,
                input_method=method,
                confidence=confidence,
            )
            self._ledger.add(entry)
            entries.append(entry)
        result = FoodLogResult(entries=tuple(entries))
        log.info('Logged %d food entries, %.0f kcal (method=%s)', len(entries), result.total_calories, method.value)
        return result
