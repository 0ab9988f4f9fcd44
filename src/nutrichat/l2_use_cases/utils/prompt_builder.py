"""Pure functions for building LLM prompts from templates."""

from __future__ import annotations

from nutrichat.l1_entities.chat_context import ChatContext
from nutrichat.l1_entities.chat_message import ChatMessage, Sender
from nutrichat.l1_entities.llm_message import LLMMessage
from nutrichat.l1_entities.meal_plan import MealPreferences
from nutrichat.l1_entities.profile import NutritionGoals, UserProfile
from nutrichat.l1_entities.submission import Submission
from nutrichat.l1_entities.template import CoachTemplate


def describe_profile(profile: UserProfile) -> str:
    lines = [
        f'Age: {profile.age}',
        f'Weight: {profile.weight:g} kg',
        f'Height: {profile.height:g} cm',
        f'Activity level: {profile.activity_level.value.replace("_", " ")}',
    ]
    if profile.dietary_restrictions:
        lines.append(f'Dietary restrictions: {", ".join(profile.dietary_restrictions)}')
    if profile.health_conditions:
        lines.append(f'Health conditions: {", ".join(profile.health_conditions)}')
    return '\n'.join(lines)


def describe_goals(goals: NutritionGoals) -> str:
    return (
        f'Daily calories: {goals.calorie_goal} kcal\n'
        f'Protein: {goals.protein_goal} g, carbs: {goals.carb_goal} g, fat: {goals.fat_goal} g\n'
        f'Weight goal: {goals.weight_goal.value}'
    )


def history_to_llm(history: tuple[ChatMessage, ...] | list[ChatMessage]) -> list[LLMMessage]:
    """Map conversation messages onto LLM roles (user -> user, coach -> assistant)."""
    return [
        LLMMessage(role='user' if m.sender is Sender.USER else 'assistant', content=m.text)
        for m in history
    ]


def build_coaching_messages(
    template: CoachTemplate,
    context: ChatContext,
    text: str,
    *,
    history_limit: int = 20,
) -> list[LLMMessage]:
    """System prompt with profile and goals, recent history, and *text* as the last user turn."""
    system = template.coaching_system_prompt.format(
        profile=describe_profile(context.user_profile),
        goals=describe_goals(context.current_goals),
    )
    recent = context.conversation_history[-history_limit:] if history_limit > 0 else ()
    messages = [LLMMessage(role='system', content=system), *history_to_llm(recent)]
    last = messages[-1]
    if last.role != 'user' or last.content != text:
        messages.append(LLMMessage(role='user', content=text))
    return messages


def build_food_messages(template: CoachTemplate, submission: Submission) -> list[LLMMessage]:
    """Extraction request for a text or image submission."""
    if submission.image is not None:
        prompt = template.food_image_prompt
        note = submission.text.strip()
        if note:
            prompt += f'\n\nUser note: {note}'
        return [
            LLMMessage(
                role='user',
                content=prompt,
                images=[submission.image],
                image_mime=submission.image_mime,
            )
        ]
    return [
        LLMMessage(role='system', content=template.food_text_prompt),
        LLMMessage(role='user', content=submission.text.strip()),
    ]


def build_meal_plan_prompt(template: CoachTemplate, preferences: MealPreferences) -> str:
    return template.meal_plan_prompt.format(
        cuisines=', '.join(preferences.cuisines) or 'any',
        cooking_time=preferences.cooking_time.value,
        servings=preferences.servings,
        budget=preferences.budget.value,
        goals=preferences.goals.strip() or '(none given)',
    )
