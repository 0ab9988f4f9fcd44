"""Tests for RequestOrchestrator — uses fakes, not mocks of concrete libs."""

from __future__ import annotations

import asyncio
import logging

import pytest

from nutrichat.l1_entities.chat_message import COACHING, FOOD_LOGGING, Sender, Topic
from nutrichat.l1_entities.errors import AnalysisParseError, GatewayError
from nutrichat.l1_entities.meal_plan import MealPreferences
from nutrichat.l1_entities.nutrition import InputMethod, NutritionItem
from nutrichat.l1_entities.submission import IMAGE_CAPTION, RequestKind, Submission
from nutrichat.l1_entities.topic_state import TopicState
from nutrichat.l3_interface_adapters.controllers.request_orchestrator import (
    COACHING_FALLBACK,
    FOOD_IMAGE_FALLBACK,
    FOOD_TEXT_FALLBACK,
    RequestOrchestrator,
    fallback_message,
)
from tests.conftest import FakeAnalysisGateway, FakeFoodLedger, FakeSettingsProvider, RecordingConversationStore

EGGS = NutritionItem(description='2 eggs', calories=140, protein=12, fat=10)
TOAST = NutritionItem(description='toast', calories=80, carbs=15)


def _texts(orch: RequestOrchestrator, topic: Topic) -> list[tuple[Sender, str]]:
    return [(m.sender, m.text) for m in orch.messages(topic)]


async def _until_called(calls: list, n: int = 1) -> None:
    for _ in range(50):
        if len(calls) >= n:
            return
        await asyncio.sleep(0)
    raise AssertionError('gateway was never called')


class TestFallbackMessage:
    def test_coaching(self):
        assert fallback_message(RequestKind.COACHING, InputMethod.TEXT) == COACHING_FALLBACK
        assert fallback_message(RequestKind.COACHING, InputMethod.IMAGE) == COACHING_FALLBACK

    def test_food_image(self):
        assert fallback_message(RequestKind.FOOD, InputMethod.IMAGE) == FOOD_IMAGE_FALLBACK

    @pytest.mark.parametrize('method', [InputMethod.TEXT, InputMethod.VOICE])
    def test_food_text_and_voice(self, method):
        assert fallback_message(RequestKind.FOOD, method) == FOOD_TEXT_FALLBACK


class TestFoodLogging:
    @pytest.mark.asyncio
    async def test_eggs_and_toast_scenario(self, orchestrator, fake_gateway, fake_ledger):
        fake_gateway.items = [EGGS, TOAST]

        accepted = await orchestrator.submit(FOOD_LOGGING, '2 eggs and toast')

        assert accepted is True
        assert len(fake_ledger.entries) == 2
        messages = orchestrator.messages(FOOD_LOGGING)
        assert [m.sender for m in messages] == [Sender.USER, Sender.COACH]
        assert messages[0].text == '2 eggs and toast'
        summary = messages[1].text
        assert '2' in summary
        assert '220' in summary
        assert summary == 'Added 2 food item(s) with 220 calories to your log!'
        assert orchestrator.state(FOOD_LOGGING) is TopicState.IDLE

    @pytest.mark.asyncio
    async def test_entries_carry_user_and_method(self, orchestrator, fake_gateway, fake_ledger, default_config):
        fake_gateway.items = [EGGS, TOAST]
        await orchestrator.submit(FOOD_LOGGING, Submission(text='2 eggs and toast', method=InputMethod.VOICE))

        assert {e.user_id for e in fake_ledger.entries} == {default_config.user.user_id}
        assert {e.input_method for e in fake_ledger.entries} == {InputMethod.VOICE}
        assert len({e.timestamp for e in fake_ledger.entries}) == 1
        assert all(e.confidence is None for e in fake_ledger.entries)

    @pytest.mark.asyncio
    async def test_image_entries_have_confidence(self, orchestrator, fake_gateway, fake_ledger):
        fake_gateway.items = [EGGS]
        await orchestrator.submit(COACHING, Submission(image=b'jpeg-bytes'))

        assert fake_ledger.entries[0].input_method is InputMethod.IMAGE
        assert fake_ledger.entries[0].confidence == 0.8
        assert _texts(orchestrator, COACHING)[0] == (Sender.USER, IMAGE_CAPTION)
        assert len(fake_gateway.analyze_calls) == 1
        assert fake_gateway.send_calls == []

    @pytest.mark.asyncio
    async def test_zero_items_is_success(self, orchestrator, fake_gateway, fake_ledger):
        fake_gateway.items = []
        await orchestrator.submit(FOOD_LOGGING, 'just water')

        assert fake_ledger.entries == []
        assert _texts(orchestrator, FOOD_LOGGING)[-1] == (
            Sender.COACH,
            'Added 0 food item(s) with 0 calories to your log!',
        )

    @pytest.mark.asyncio
    async def test_ledger_writes_precede_summary(self, default_config, default_template):
        timeline: list[str] = []
        orch = RequestOrchestrator(
            config=default_config,
            template=default_template,
            gateway=FakeAnalysisGateway(items=[EGGS, TOAST]),
            ledger=FakeFoodLedger(timeline=timeline),
            settings=FakeSettingsProvider(),
            store=RecordingConversationStore(timeline),
        )

        await orch.submit(FOOD_LOGGING, '2 eggs and toast')

        assert timeline == [
            'user:2 eggs and toast',
            'ledger:2 eggs',
            'ledger:toast',
            'coach:Added 2 food item(s) with 220 calories to your log!',
        ]

    @pytest.mark.asyncio
    async def test_context_includes_user_message(self, orchestrator, fake_gateway):
        await orchestrator.submit(FOOD_LOGGING, 'banana')
        _, context = fake_gateway.analyze_calls[0]
        assert [m.text for m in context.conversation_history] == ['banana']


class TestFailures:
    @pytest.mark.asyncio
    async def test_coaching_failure_scenario(self, orchestrator, fake_gateway, fake_ledger):
        fake_gateway.error = GatewayError('service unavailable')

        await orchestrator.submit(COACHING, 'How much protein do I need?')

        assert _texts(orchestrator, COACHING) == [
            (Sender.USER, 'How much protein do I need?'),
            (Sender.COACH, "Sorry, I'm having trouble processing your request. Please try again."),
        ]
        assert fake_ledger.entries == []
        assert orchestrator.state(COACHING) is TopicState.IDLE

    @pytest.mark.asyncio
    async def test_food_text_failure(self, orchestrator, fake_gateway, fake_ledger):
        fake_gateway.error = AnalysisParseError('no JSON')
        await orchestrator.submit(FOOD_LOGGING, 'mystery stew')

        assert _texts(orchestrator, FOOD_LOGGING)[-1] == (Sender.COACH, FOOD_TEXT_FALLBACK)
        assert fake_ledger.entries == []

    @pytest.mark.asyncio
    async def test_food_image_failure(self, orchestrator, fake_gateway):
        fake_gateway.error = GatewayError('vision model missing')
        await orchestrator.submit(FOOD_LOGGING, Submission(image=b'img'))

        assert _texts(orchestrator, FOOD_LOGGING)[-1] == (Sender.COACH, FOOD_IMAGE_FALLBACK)

    @pytest.mark.asyncio
    async def test_ledger_error_yields_fallback(self, default_config, default_template):
        ledger = FakeFoodLedger(fail_after=1)
        orch = RequestOrchestrator(
            config=default_config,
            template=default_template,
            gateway=FakeAnalysisGateway(items=[EGGS, TOAST]),
            ledger=ledger,
            settings=FakeSettingsProvider(),
        )

        assert await orch.submit(FOOD_LOGGING, '2 eggs and toast') is True

        assert len(ledger.entries) == 1
        assert _texts(orch, FOOD_LOGGING)[-1] == (Sender.COACH, FOOD_TEXT_FALLBACK)
        assert orch.state(FOOD_LOGGING) is TopicState.IDLE

    @pytest.mark.asyncio
    async def test_empty_coach_reply_yields_fallback(self, orchestrator, fake_gateway):
        fake_gateway.reply = '   '
        await orchestrator.submit(COACHING, 'hello?')
        assert _texts(orchestrator, COACHING)[-1] == (Sender.COACH, COACHING_FALLBACK)

    @pytest.mark.asyncio
    async def test_failure_is_logged_with_traceback(self, orchestrator, fake_gateway, caplog):
        fake_gateway.error = GatewayError('boom')
        with caplog.at_level(logging.ERROR, logger='nutrichat.orchestrator'):
            await orchestrator.submit(COACHING, 'hi')

        (record,) = [r for r in caplog.records if r.name == 'nutrichat.orchestrator']
        assert record.exc_info is not None
        assert 'coaching' in record.getMessage()

    @pytest.mark.asyncio
    async def test_topic_usable_after_failure(self, orchestrator, fake_gateway):
        fake_gateway.error = GatewayError('boom')
        await orchestrator.submit(COACHING, 'first')
        fake_gateway.error = None

        assert await orchestrator.submit(COACHING, 'second') is True
        assert _texts(orchestrator, COACHING)[-1] == (Sender.COACH, 'Eat more vegetables.')


class TestInputRejection:
    @pytest.mark.asyncio
    @pytest.mark.parametrize('text', ['', '   ', '\n\t'])
    async def test_blank_input_is_ignored(self, orchestrator, fake_gateway, text):
        assert await orchestrator.submit(COACHING, text) is False
        assert await orchestrator.submit(COACHING, text) is False

        assert orchestrator.is_empty(COACHING)
        assert fake_gateway.send_calls == []
        assert orchestrator.state(COACHING) is TopicState.IDLE

    @pytest.mark.asyncio
    async def test_user_text_is_trimmed(self, orchestrator):
        await orchestrator.submit(COACHING, '  hello coach  ')
        assert orchestrator.messages(COACHING)[0].text == 'hello coach'


class TestSingleFlight:
    @pytest.mark.asyncio
    async def test_second_submit_dropped_while_loading(self, orchestrator, fake_gateway):
        fake_gateway.gate = asyncio.Event()

        first = asyncio.create_task(orchestrator.submit(COACHING, 'first'))
        await _until_called(fake_gateway.send_calls)

        assert orchestrator.state(COACHING) is TopicState.LOADING
        assert orchestrator.is_loading(COACHING)
        assert await orchestrator.submit(COACHING, 'second') is False

        fake_gateway.gate.set()
        assert await first is True

        assert len(fake_gateway.send_calls) == 1
        assert _texts(orchestrator, COACHING) == [
            (Sender.USER, 'first'),
            (Sender.COACH, 'Eat more vegetables.'),
        ]
        assert not orchestrator.is_loading(COACHING)

    @pytest.mark.asyncio
    async def test_topics_are_independent(self, orchestrator, fake_gateway):
        fake_gateway.gate = asyncio.Event()
        fake_gateway.items = [EGGS]

        coaching = asyncio.create_task(orchestrator.submit(COACHING, 'tips?'))
        food = asyncio.create_task(orchestrator.submit(FOOD_LOGGING, 'eggs'))
        await _until_called(fake_gateway.send_calls)
        await _until_called(fake_gateway.analyze_calls)

        assert orchestrator.is_loading(COACHING)
        assert orchestrator.is_loading(FOOD_LOGGING)

        fake_gateway.gate.set()
        assert await coaching is True
        assert await food is True

        assert [m.topic for m in orchestrator.messages(COACHING)] == [COACHING, COACHING]
        assert [m.topic for m in orchestrator.messages(FOOD_LOGGING)] == [FOOD_LOGGING, FOOD_LOGGING]
        assert orchestrator.messages(COACHING)[-1].text == 'Eat more vegetables.'
        assert orchestrator.messages(FOOD_LOGGING)[-1].text.startswith('Added 1 food item(s)')


class TestStateListeners:
    @pytest.mark.asyncio
    async def test_transitions_in_order(self, orchestrator, fake_gateway):
        fake_gateway.items = [EGGS]
        seen: list[tuple[Topic, TopicState]] = []
        orchestrator.subscribe(lambda topic, state: seen.append((topic, state)))

        await orchestrator.submit(FOOD_LOGGING, 'eggs')

        assert seen == [
            (FOOD_LOGGING, TopicState.LOADING),
            (FOOD_LOGGING, TopicState.RESOLVING),
            (FOOD_LOGGING, TopicState.IDLE),
        ]

    @pytest.mark.asyncio
    async def test_failure_skips_resolving(self, orchestrator, fake_gateway):
        fake_gateway.error = GatewayError('boom')
        seen: list[TopicState] = []
        orchestrator.subscribe(lambda topic, state: seen.append(state))

        await orchestrator.submit(COACHING, 'hi')

        assert seen == [TopicState.LOADING, TopicState.IDLE]

    @pytest.mark.asyncio
    async def test_unsubscribe(self, orchestrator):
        seen: list[TopicState] = []
        unsubscribe = orchestrator.subscribe(lambda topic, state: seen.append(state))
        unsubscribe()

        await orchestrator.submit(COACHING, 'hi')

        assert seen == []

    @pytest.mark.asyncio
    async def test_failing_listener_does_not_stick_topic(self, orchestrator):
        def _broken(topic, state):
            raise RuntimeError('listener bug')

        orchestrator.subscribe(_broken)

        assert await orchestrator.submit(COACHING, 'hi') is True
        assert orchestrator.state(COACHING) is TopicState.IDLE
        assert _texts(orchestrator, COACHING)[-1] == (Sender.COACH, 'Eat more vegetables.')


class TestOpenTopic:
    def test_posts_welcome_once(self, orchestrator, default_template):
        orchestrator.open_topic(COACHING)
        orchestrator.open_topic(COACHING)

        assert _texts(orchestrator, COACHING) == [(Sender.COACH, default_template.welcome_message)]

    @pytest.mark.asyncio
    async def test_no_welcome_on_active_topic(self, orchestrator):
        await orchestrator.submit(COACHING, 'hi')
        assert orchestrator.open_topic(COACHING) is None
        assert len(orchestrator.messages(COACHING)) == 2


class TestQuickActions:
    @pytest.mark.asyncio
    async def test_submits_prompt(self, orchestrator, fake_gateway):
        assert await orchestrator.run_quick_action(COACHING, 'set-goals') is True

        assert fake_gateway.send_calls[0][0] == 'Help me set my nutrition goals'
        assert _texts(orchestrator, COACHING)[0] == (Sender.USER, 'Help me set my nutrition goals')

    @pytest.mark.asyncio
    async def test_unknown_action(self, orchestrator, fake_gateway):
        assert await orchestrator.run_quick_action(COACHING, 'nope') is False
        assert orchestrator.is_empty(COACHING)


class TestMealPlan:
    @pytest.mark.asyncio
    async def test_does_not_touch_conversation(self, orchestrator, fake_gateway):
        result = await orchestrator.generate_meal_plan(MealPreferences())

        assert result.ok
        assert result.text == 'Breakfast: porridge'
        assert orchestrator.is_empty(COACHING)
        assert orchestrator.is_empty(FOOD_LOGGING)

    @pytest.mark.asyncio
    async def test_failure_returns_fallback(self, orchestrator, fake_gateway):
        fake_gateway.error = GatewayError('boom')
        result = await orchestrator.generate_meal_plan(MealPreferences())
        assert result.text == "Sorry, I couldn't generate a meal plan. Please try again."
