"""Use case: ask the analysis service for the nutrition content of a submission."""

from __future__ import annotations

import logging

from nutrichat.l1_entities.chat_context import ChatContext
from nutrichat.l1_entities.nutrition import NutritionItem
from nutrichat.l1_entities.submission import Submission
from nutrichat.l2_use_cases.ports.analysis_gateway import AnalysisGateway

log = logging.getLogger('nutrichat.analysis')


class AnalyzeFoodUseCase:
    """One gateway call per submission. Raises on gateway failure; never retries."""

    def __init__(self, gateway: AnalysisGateway) -> None:
        self._gateway = gateway

    async def execute(self, submission: Submission, context: ChatContext) -> list[NutritionItem]:
        log.info(
            'Food analysis request: method=%s, image=%s, history=%d',
            submission.method.value,
            submission.image is not None,
            len(context.conversation_history),
        )
        items = list(await self._gateway.analyze(submission, context))
        log.info('Food analysis returned %d item(s)', len(items))
        return items
