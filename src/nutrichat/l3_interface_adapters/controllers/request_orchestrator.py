"""Per-topic single-flight controller over the conversation store."""

from __future__ import annotations

import logging
from collections.abc import Callable

from nutrichat.l1_entities.chat_message import ChatMessage, Sender, Topic
from nutrichat.l1_entities.config import AppConfig
from nutrichat.l1_entities.conversation_store import ConversationStore
from nutrichat.l1_entities.meal_plan import MealPreferences
from nutrichat.l1_entities.nutrition import InputMethod
from nutrichat.l1_entities.submission import RequestKind, Submission
from nutrichat.l1_entities.template import CoachTemplate
from nutrichat.l1_entities.topic_state import TopicState
from nutrichat.l2_use_cases.analyze_food_use_case import AnalyzeFoodUseCase
from nutrichat.l2_use_cases.coach_reply_use_case import CoachReplyUseCase
from nutrichat.l2_use_cases.meal_plan_use_case import GenerateMealPlanUseCase, MealPlanResult
from nutrichat.l2_use_cases.ports.analysis_gateway import AnalysisGateway
from nutrichat.l2_use_cases.ports.food_ledger import FoodLedger
from nutrichat.l2_use_cases.ports.settings_provider import SettingsProvider
from nutrichat.l2_use_cases.quick_action_use_case import find_quick_action
from nutrichat.l2_use_cases.record_food_use_case import RecordFoodEntriesUseCase
from nutrichat.l2_use_cases.utils.context_builder import build_chat_context

log = logging.getLogger('nutrichat.orchestrator')

FOOD_IMAGE_FALLBACK = (
    "Sorry, I couldn't read the nutritional information from your photo. Please try again or provide more details."
)
FOOD_TEXT_FALLBACK = "Sorry, I couldn't analyze that food. Please try again."
COACHING_FALLBACK = "Sorry, I'm having trouble processing your request. Please try again."

StateListener = Callable[[Topic, TopicState], None]


def fallback_message(kind: RequestKind, method: InputMethod) -> str:
    """Fixed apology posted when a request of this kind fails."""
    if kind is RequestKind.COACHING:
        return COACHING_FALLBACK
    if method is InputMethod.IMAGE:
        return FOOD_IMAGE_FALLBACK
    return FOOD_TEXT_FALLBACK


class RequestOrchestrator:
    """Central orchestrator between the presentation layer and the analysis service.

    Owns the ConversationStore (the only writable reference to it) and one
    TopicState per topic. A topic accepts a new submission only while IDLE;
    anything submitted while its request is in flight is dropped, not queued.
    Topics never wait on each other.
    """

    def __init__(
        self,
        config: AppConfig,
        template: CoachTemplate,
        gateway: AnalysisGateway,
        ledger: FoodLedger,
        settings: SettingsProvider,
        store: ConversationStore | None = None,
    ) -> None:
        self._config = config
        self._template = template
        self._settings = settings
        self._store = store if store is not None else ConversationStore()

        self._analyze_uc = AnalyzeFoodUseCase(gateway)
        self._record_uc = RecordFoodEntriesUseCase(ledger)
        self._coach_uc = CoachReplyUseCase(gateway)
        self._meal_plan_uc = GenerateMealPlanUseCase(gateway)

        self._states: dict[Topic, TopicState] = {}
        self._listeners: list[StateListener] = []

    # --- Queries ---

    def state(self, topic: Topic) -> TopicState:
        return self._states.get(topic, TopicState.IDLE)

    def is_loading(self, topic: Topic) -> bool:
        return self.state(topic) is not TopicState.IDLE

    def messages(self, topic: Topic) -> tuple[ChatMessage, ...]:
        return self._store.messages(topic)

    def is_empty(self, topic: Topic) -> bool:
        return self._store.is_empty(topic)

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """Register *listener* for state transitions. Returns an unsubscribe callable."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    # --- Commands ---

    def open_topic(self, topic: Topic) -> str | None:
        """Greet with the template's welcome message if *topic* has no messages yet."""
        if not self._template.welcome_message or not self._store.is_empty(topic):
            return None
        return self._store.append(topic, self._template.welcome_message, Sender.COACH)

    async def submit(self, topic: Topic, submission: Submission | str) -> bool:
        """Run one request on *topic*. Returns False when the submission was ignored.

        Blank input, or input for a topic that is not IDLE, is dropped without
        touching the conversation. Otherwise the user's message is appended,
        exactly one coach message follows it, and the topic is IDLE again on
        return, whatever happened in between.
        """
        if isinstance(submission, str):
            submission = Submission(text=submission)
        if submission.is_blank:
            log.debug('Ignoring blank submission on %s', topic)
            return False
        if self.state(topic) is not TopicState.IDLE:
            log.debug('Ignoring submission on %s: request already in flight', topic)
            return False

        kind = submission.kind_for(topic)
        self._store.append(topic, submission.display_text, Sender.USER)
        self._set_state(topic, TopicState.LOADING)
        try:
            try:
                reply = await self._run(topic, submission, kind)
            except Exception:
                log.error(
                    'Request on %s failed (kind=%s, method=%s)',
                    topic,
                    kind.value,
                    submission.method.value,
                    exc_info=True,
                )
                reply = fallback_message(kind, submission.method)
            self._store.append(topic, reply, Sender.COACH)
        finally:
            self._set_state(topic, TopicState.IDLE)
        return True

    async def run_quick_action(self, topic: Topic, key: str) -> bool:
        """Submit a quick action's prompt as if the user had typed it."""
        qa = find_quick_action(key, self._template)
        if qa is None:
            log.debug('Unknown quick action %r', key)
            return False
        return await self.submit(topic, Submission(text=qa.prompt))

    async def generate_meal_plan(self, preferences: MealPreferences) -> MealPlanResult:
        return await self._meal_plan_uc.execute(preferences)

    # --- Internals ---

    async def _run(self, topic: Topic, submission: Submission, kind: RequestKind) -> str:
        context = build_chat_context(self._store, topic, self._settings)

        if kind is RequestKind.FOOD:
            items = await self._analyze_uc.execute(submission, context)
            self._set_state(topic, TopicState.RESOLVING)
            result = self._record_uc.execute(
                items,
                user_id=self._config.user.user_id,
                method=submission.method,
            )
            return result.summary

        reply = await self._coach_uc.execute(submission.display_text, context)
        self._set_state(topic, TopicState.RESOLVING)
        return reply

    def _set_state(self, topic: Topic, state: TopicState) -> None:
        if state is TopicState.IDLE:
            self._states.pop(topic, None)
        else:
            self._states[topic] = state
        log.debug('%s -> %s', topic, state.value)
        for listener in list(self._listeners):
            try:
                listener(topic, state)
            except Exception:
                log.warning('State listener failed for %s -> %s', topic, state.value, exc_info=True)
