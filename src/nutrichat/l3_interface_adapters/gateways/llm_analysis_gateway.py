"""Gateway: LLM-backed nutrition analysis — implements AnalysisGateway port."""

from __future__ import annotations

import logging

from nutrichat.l1_entities.chat_context import ChatContext
from nutrichat.l1_entities.config import AnalysisConfig, CoachingConfig
from nutrichat.l1_entities.meal_plan import MealPreferences
from nutrichat.l1_entities.nutrition import NutritionItem
from nutrichat.l1_entities.submission import Submission
from nutrichat.l1_entities.template import CoachTemplate
from nutrichat.l2_use_cases.ports.llm_client import LLMClient
from nutrichat.l2_use_cases.utils.prompt_builder import (
    build_coaching_messages,
    build_food_messages,
    build_meal_plan_prompt,
)
from nutrichat.l3_interface_adapters.gateways.nutrition_parser import parse_nutrition_items

log = logging.getLogger('nutrichat.llm')


class LLMAnalysisGateway:
    """Prompts an LLMClient with the coach template and parses what comes back."""

    def __init__(
        self,
        llm_client: LLMClient,
        template: CoachTemplate,
        *,
        analysis: AnalysisConfig,
        coaching: CoachingConfig,
    ) -> None:
        self._llm = llm_client
        self._template = template
        self._analysis = analysis
        self._coaching = coaching

    async def analyze(self, submission: Submission, context: ChatContext) -> list[NutritionItem]:
        model = self._analysis.vision_model if submission.image is not None else self._analysis.model
        messages = build_food_messages(self._template, submission)
        resp = await self._llm.chat(model=model, messages=messages)
        log.debug('LLM food analysis (%s, %d chars): %s', model, len(resp.content), resp.content[:500])
        return parse_nutrition_items(resp.content)

    async def send_message(self, text: str, context: ChatContext) -> str:
        messages = build_coaching_messages(
            self._template,
            context,
            text,
            history_limit=self._coaching.history_limit,
        )
        resp = await self._llm.chat(model=self._coaching.model, messages=messages)
        log.debug(
            'LLM coaching reply (%d chars, prompt_tokens=%d)',
            len(resp.content),
            resp.prompt_tokens,
        )
        return resp.content

    async def generate_meal_plan(self, preferences: MealPreferences) -> str:
        prompt = build_meal_plan_prompt(self._template, preferences)
        return await self._llm.chat_single(model=self._coaching.model, prompt=prompt)
