"""Use case: generate a meal plan from the user's preferences."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from nutrichat.l1_entities.meal_plan import MealPreferences
from nutrichat.l2_use_cases.ports.analysis_gateway import AnalysisGateway

log = logging.getLogger('nutrichat.analysis')

MEAL_PLAN_FALLBACK = "Sorry, I couldn't generate a meal plan. Please try again."


@dataclass(frozen=True)
class MealPlanResult:
    """Result of a meal plan request: either the plan or a failure reason."""

    data: str | None = None
    error: str = ''

    @property
    def ok(self) -> bool:
        return self.data is not None

    @property
    def text(self) -> str:
        return self.data if self.data is not None else MEAL_PLAN_FALLBACK


class GenerateMealPlanUseCase:
    """Stateless request; failures are reported in the result, not raised."""

    def __init__(self, gateway: AnalysisGateway) -> None:
        self._gateway = gateway

    async def execute(self, preferences: MealPreferences) -> MealPlanResult:
        try:
            plan = await self._gateway.generate_meal_plan(preferences)
        except Exception as e:
            err = f'Meal plan error: {type(e).__name__}: {e}'
            log.error(err, exc_info=True)
            return MealPlanResult(error=err)

        if not plan.strip():
            log.warning('Empty meal plan from analysis service')
            return MealPlanResult(error='Empty response from analysis service')
        return MealPlanResult(data=plan.strip())
