"""CLI entry point for nutrichat."""

from __future__ import annotations

import asyncio
import mimetypes
import sys
from pathlib import Path

import click

from nutrichat import __version__


@click.command()
@click.option(
    '-c',
    '--config',
    'config_path',
    default=None,
    type=click.Path(exists=True),
    help='Path to YAML config file (also holds your profile and goals).',
)
@click.option(
    '-t',
    '--topic',
    'topic_name',
    default='coaching',
    show_default=True,
    help="Conversation topic, e.g. 'food-logging' or 'coaching'.",
)
@click.option(
    '-i',
    '--image',
    'image_path',
    default=None,
    type=click.Path(exists=True, dir_okay=False),
    help='Photo of a meal, nutrition label or dietitian slip to log.',
)
@click.option('-q', '--quick', 'quick_key', default=None, help='Run a quick action by key or number.')
@click.option(
    '--voice',
    is_flag=True,
    help='Record MESSAGE as dictated speech rather than typed text (ignored with --image).',
)
@click.option('--meal-plan', is_flag=True, help='Generate a one-day meal plan; MESSAGE is used as your goals.')
@click.option(
    '--ledger',
    'ledger_path',
    default=None,
    type=click.Path(dir_okay=False),
    help='Food ledger file (JSON lines); overrides ledger.path from the config.',
)
@click.option(
    '--template',
    'template_ref',
    default=None,
    help='Coach template name or YAML path; overrides template from the config.',
)
@click.option('--list-templates', is_flag=True, help='List the available coach templates and exit.')
@click.option('--list-actions', is_flag=True, help='List the quick actions of the active template and exit.')
@click.option(
    '--log-dir',
    default=None,
    type=click.Path(file_okay=False),
    help='Write a debug log into this directory.',
)
@click.argument('message', required=False)
@click.version_option(version=__version__)
def cli(
    config_path,
    topic_name,
    image_path,
    quick_key,
    voice,
    meal_plan,
    ledger_path,
    template_ref,
    list_templates,
    list_actions,
    log_dir,
    message,
):
    """nutrichat -- chat with an AI nutrition coach and log food from text or photos.

    With MESSAGE (or --image / --quick) a single request is sent; without, an
    interactive session starts on the chosen topic.
    """
    from pydantic import ValidationError  # noqa: PLC0415 -- deferred: not needed for --help

    from nutrichat.l1_entities.chat_message import Topic  # noqa: PLC0415 -- deferred: not needed for --help
    from nutrichat.l3_interface_adapters.gateways.yaml_config_loader import (  # noqa: PLC0415 -- deferred: yaml stack not loaded on --help
        YamlConfigLoader,
    )
    from nutrichat.l3_interface_adapters.gateways.yaml_template_loader import (  # noqa: PLC0415 -- deferred: yaml stack not loaded on --help
        YamlTemplateLoader,
    )
    from nutrichat.l4_frameworks_and_drivers.infra_config import (  # noqa: PLC0415 -- deferred: not needed for --help
        InfraConfig,
        build_app_config,
    )

    try:
        topic = Topic(name=topic_name)
    except ValidationError:
        raise click.BadParameter(f"'{topic_name}' is not a valid topic name", param_hint='--topic') from None

    template_loader = YamlTemplateLoader()
    if list_templates:
        for meta in template_loader.list_templates():
            click.echo(f'{meta.key:<16} {meta.name} -- {meta.description}')
        return

    try:
        overrides: dict = {}
        if ledger_path:
            overrides['ledger'] = {'path': ledger_path}
        if template_ref:
            overrides['template'] = template_ref
        raw = YamlConfigLoader().load_raw(config_path, overrides=overrides if overrides else None)
        config = build_app_config(raw)
        infra = InfraConfig.model_validate(raw)
        template = template_loader.load(config.template)
    except (FileNotFoundError, ValueError) as e:
        click.echo(f'Error: {e}', err=True)
        sys.exit(1)

    if list_actions:
        for idx, qa in enumerate(template.quick_actions, start=1):
            click.echo(f'{idx}. {qa.key:<12} {qa.label} -- {qa.description}')
        return

    if log_dir:
        from nutrichat.l4_frameworks_and_drivers.logging_setup import (  # noqa: PLC0415 -- deferred: only with --log-dir
            setup_file_logging,
        )

        setup_file_logging(Path(log_dir))

    from nutrichat.l4_frameworks_and_drivers.container import (  # noqa: PLC0415 -- deferred: LLM SDKs not loaded for --help
        DependencyContainer,
    )

    container = DependencyContainer(config, template, infra=infra, config_path=config_path)
    _preflight_llm(container.llm_client, config)

    asyncio.run(
        _run_session(
            container.orchestrator,
            topic,
            message=message,
            image=_read_image(image_path) if image_path else None,
            voice=voice,
            quick_key=quick_key,
            meal_plan=meal_plan,
        )
    )


def _read_image(image_path: str) -> tuple[bytes, str]:
    mime, _ = mimetypes.guess_type(image_path)
    return Path(image_path).read_bytes(), mime or 'image/jpeg'


def _preflight_llm(client, config) -> list[str]:
    """Warn about an unreachable provider or missing models. Returns the missing model names."""
    ok, err = client.check_connectivity()
    if not ok:
        click.echo(f'Warning: LLM provider not reachable ({err}).', err=True)
        click.echo('Requests will be answered with fallback messages.', err=True)
        return []

    models = list(dict.fromkeys([config.analysis.model, config.analysis.vision_model, config.coaching.model]))
    missing = client.check_models(models)
    for model in missing:
        click.echo(f'Warning: model not available: {model}', err=True)
    return missing


def _echo_coach_replies(orchestrator, topic, seen: int) -> int:
    """Print coach messages appended since *seen*. Returns the new message count."""
    from nutrichat.l1_entities.chat_message import Sender  # noqa: PLC0415 -- deferred: not needed for --help

    messages = orchestrator.messages(topic)
    for msg in messages[seen:]:
        if msg.sender is Sender.COACH:
            click.echo(f'coach> {msg.text}')
    return len(messages)


async def _run_session(
    orchestrator,
    topic,
    *,
    message: str | None,
    image: tuple[bytes, str] | None,
    voice: bool,
    quick_key: str | None,
    meal_plan: bool,
) -> None:
    from nutrichat.l1_entities.meal_plan import MealPreferences  # noqa: PLC0415 -- deferred: not needed for --help
    from nutrichat.l1_entities.nutrition import InputMethod  # noqa: PLC0415 -- deferred: not needed for --help
    from nutrichat.l1_entities.submission import Submission  # noqa: PLC0415 -- deferred: not needed for --help

    if meal_plan:
        result = await orchestrator.generate_meal_plan(MealPreferences(goals=message or ''))
        click.echo(result.text)
        return

    orchestrator.open_topic(topic)
    seen = _echo_coach_replies(orchestrator, topic, 0)

    if quick_key is not None:
        if not await orchestrator.run_quick_action(topic, quick_key):
            click.echo(f"Unknown quick action: '{quick_key}'", err=True)
        _echo_coach_replies(orchestrator, topic, seen)
        return

    if message or image is not None:
        fields: dict = {'text': message or ''}
        if image is not None:
            fields['image'], fields['image_mime'] = image
        elif voice:
            fields['method'] = InputMethod.VOICE
        await orchestrator.submit(topic, Submission(**fields))
        _echo_coach_replies(orchestrator, topic, seen)
        return

    await _interactive(orchestrator, topic, seen)


async def _interactive(orchestrator, topic, seen: int) -> None:
    click.echo(f'[{topic}] Type a message, /<action> for a quick action, /quit to exit.')
    while True:
        try:
            line = await asyncio.to_thread(click.prompt, 'you', default='', show_default=False, prompt_suffix='> ')
        except click.Abort:
            break
        line = line.strip()
        if line in {'/quit', '/exit'}:
            break
        if line.startswith('/'):
            if not await orchestrator.run_quick_action(topic, line[1:]):
                click.echo(f"Unknown quick action: '{line[1:]}'", err=True)
        else:
            await orchestrator.submit(topic, line)
        seen = _echo_coach_replies(orchestrator, topic, seen)
