"""Shared test fixtures and protocol-conforming fakes."""

from __future__ import annotations

import asyncio
from pathlib import Path

import pytest

from nutrichat.l1_entities.chat_context import ChatContext
from nutrichat.l1_entities.chat_message import Sender, Topic
from nutrichat.l1_entities.config import AppConfig
from nutrichat.l1_entities.conversation_store import ConversationStore
from nutrichat.l1_entities.llm_message import LLMMessage
from nutrichat.l1_entities.meal_plan import MealPreferences
from nutrichat.l1_entities.nutrition import FoodEntry, NutritionItem
from nutrichat.l1_entities.profile import NutritionGoals, UserProfile
from nutrichat.l1_entities.submission import Submission
from nutrichat.l1_entities.template import CoachTemplate
from nutrichat.l2_use_cases.ports.llm_client import ChatResponse
from nutrichat.l3_interface_adapters.controllers.request_orchestrator import RequestOrchestrator
from nutrichat.l3_interface_adapters.gateways.yaml_template_loader import YamlTemplateLoader
from nutrichat.l4_frameworks_and_drivers.infra_config import build_app_config

# --- Protocol-conforming Fakes ---


class FakeLLMClient:
    """Fake LLM client for gateway tests."""

    def __init__(self, response: str = 'Fake LLM response', prompt_tokens: int = 100):
        self._response = response
        self._prompt_tokens = prompt_tokens
        self.chat_calls: list[tuple[str, list[LLMMessage]]] = []
        self.chat_single_calls: list[tuple[str, str]] = []
        self._connectivity = (True, '')
        self._missing_models: list[str] = []

    async def chat(self, model: str, messages: list[LLMMessage]) -> ChatResponse:
        self.chat_calls.append((model, list(messages)))
        return ChatResponse(content=self._response, prompt_tokens=self._prompt_tokens)

    async def chat_single(self, model: str, prompt: str) -> str:
        self.chat_single_calls.append((model, prompt))
        return self._response

    def check_connectivity(self) -> tuple[bool, str]:
        return self._connectivity

    def set_response(self, response: str, prompt_tokens: int = 100) -> None:
        self._response = response
        self._prompt_tokens = prompt_tokens

    def check_models(self, models: list[str]) -> list[str]:
        return [m for m in models if m in self._missing_models]

    def set_connectivity(self, ok: bool, msg: str = '') -> None:
        self._connectivity = (ok, msg)

    def set_missing_models(self, models: list[str]) -> None:
        self._missing_models = list(models)


class FakeAnalysisGateway:
    """Fake analysis service for L2/L3 tests.

    Set ``error`` to make every call raise. Set ``gate`` to an asyncio.Event to
    hold calls in flight until the test releases it.
    """

    def __init__(
        self,
        items: list[NutritionItem] | None = None,
        reply: str = 'Eat more vegetables.',
        meal_plan: str = 'Breakfast: porridge',
        error: Exception | None = None,
    ):
        self.items = list(items or [])
        self.reply = reply
        self.meal_plan = meal_plan
        self.error = error
        self.gate: asyncio.Event | None = None
        self.analyze_calls: list[tuple[Submission, ChatContext]] = []
        self.send_calls: list[tuple[str, ChatContext]] = []
        self.meal_plan_calls: list[MealPreferences] = []

    async def _maybe_wait(self) -> None:
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error

    async def analyze(self, submission: Submission, context: ChatContext) -> list[NutritionItem]:
        self.analyze_calls.append((submission, context))
        await self._maybe_wait()
        return list(self.items)

    async def send_message(self, text: str, context: ChatContext) -> str:
        self.send_calls.append((text, context))
        await self._maybe_wait()
        return self.reply

    async def generate_meal_plan(self, preferences: MealPreferences) -> str:
        self.meal_plan_calls.append(preferences)
        await self._maybe_wait()
        return self.meal_plan


class FakeFoodLedger:
    """In-memory ledger. Optionally fails after ``fail_after`` successful writes."""

    def __init__(self, timeline: list[str] | None = None, fail_after: int | None = None):
        self.entries: list[FoodEntry] = []
        self._timeline = timeline
        self._fail_after = fail_after

    def add(self, entry: FoodEntry) -> None:
        if self._fail_after is not None and len(self.entries) >= self._fail_after:
            raise OSError('disk full')
        self.entries.append(entry)
        if self._timeline is not None:
            self._timeline.append(f'ledger:{entry.description}')


class FakeSettingsProvider:
    def __init__(self, profile: UserProfile | None = None, goals: NutritionGoals | None = None):
        self.profile = profile or UserProfile()
        self.goals = goals or NutritionGoals()
        self.calls = 0

    def user_profile(self) -> UserProfile:
        self.calls += 1
        return self.profile

    def nutrition_goals(self) -> NutritionGoals:
        return self.goals


class RecordingConversationStore(ConversationStore):
    """ConversationStore that also records appends on a shared timeline."""

    def __init__(self, timeline: list[str]) -> None:
        super().__init__()
        self._timeline = timeline

    def append(self, topic: Topic, text: str, sender: Sender) -> str:
        self._timeline.append(f'{sender.value}:{text}')
        return super().append(topic, text, sender)


# --- Standard Fixtures ---


@pytest.fixture
def default_config(tmp_path: Path) -> AppConfig:
    return build_app_config({'ledger': {'path': str(tmp_path / 'ledger.jsonl')}})


@pytest.fixture
def default_template() -> CoachTemplate:
    return YamlTemplateLoader().load('default_en')


@pytest.fixture
def fake_llm() -> FakeLLMClient:
    return FakeLLMClient()


@pytest.fixture
def fake_gateway() -> FakeAnalysisGateway:
    return FakeAnalysisGateway()


@pytest.fixture
def fake_ledger() -> FakeFoodLedger:
    return FakeFoodLedger()


@pytest.fixture
def fake_settings() -> FakeSettingsProvider:
    return FakeSettingsProvider()


@pytest.fixture
def orchestrator(default_config, default_template, fake_gateway, fake_ledger, fake_settings) -> RequestOrchestrator:
    return RequestOrchestrator(
        config=default_config,
        template=default_template,
        gateway=fake_gateway,
        ledger=fake_ledger,
        settings=fake_settings,
    )


@pytest.fixture
def sample_config_yaml(tmp_path: Path) -> Path:
    content = f"""\
analysis:
  model: "qwen2.5:7b"
  vision_model: "llava:13b"
coaching:
  model: "qwen2.5:7b"
  history_limit: 6
ledger:
  path: "{tmp_path / 'food.jsonl'}"
user:
  user_id: "alice"
profile:
  age: 41
  weight: 82.5
  height: 180
  activity_level: "very_active"
  dietary_restrictions: ["vegetarian"]
goals:
  calorie_goal: 2400
  weight_goal: "lose"
"""
    p = tmp_path / 'config.yaml'
    p.write_text(content, encoding='utf-8')
    return p
