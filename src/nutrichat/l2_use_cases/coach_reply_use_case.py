"""Use case: get the coach's reply to a conversational message."""

from __future__ import annotations

import logging

from nutrichat.l1_entities.chat_context import ChatContext
from nutrichat.l1_entities.errors import GatewayError
from nutrichat.l2_use_cases.ports.analysis_gateway import AnalysisGateway

log = logging.getLogger('nutrichat.analysis')


class CoachReplyUseCase:
    """Single-turn call against the gateway with the assembled context."""

    def __init__(self, gateway: AnalysisGateway) -> None:
        self._gateway = gateway

    async def execute(self, text: str, context: ChatContext) -> str:
        """Return the reply text. Raises GatewayError on an empty reply, or whatever the gateway raises."""
        reply = await self._gateway.send_message(text, context)
        if not reply.strip():
            raise GatewayError('Empty reply from analysis service')
        log.debug('Coach reply (%d chars): %s', len(reply), reply[:200])
        return reply.strip()
