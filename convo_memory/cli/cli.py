"""
Main CLI application for Convo Memory.

Inspects saved conversations: reports context usage, previews what would be
sent to a model after compression, and exports conversations.
"""

import asyncio
import json
import logging
from typing import Any, List, Optional

import click
from rich.console import Console

from ..context.compression import prepare_messages_for_context, simple_summarize
from ..context.export import export_conversation
from ..context.message import Message, messages_from_dicts
from ..context.status import get_context_status
from .config import get_config
from .formatting import get_formatter

# Configure logging
logging.basicConfig(
    level=logging.WARNING,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


@click.group()
@click.option('--env-file', default=None, help='Path to .env file')
@click.option('--debug', is_flag=True, help='Enable debug logging')
@click.option('--verbose', '-v', is_flag=True, help='Enable verbose/info logging')
@click.option('--output', type=click.Choice(['text', 'json']), default='text',
              help='Output format')
@click.pass_context
def cli(ctx, env_file: Optional[str], debug: bool, verbose: bool, output: str):
    """
    Convo Memory CLI - inspect context usage of saved conversations.

    FILE arguments are JSON files holding either a list of messages
    ({"role", "content", "timestamp"}) or an export with a "messages" key.

    Settings are loaded from a .env file with variables:
    - CONVO_MEMORY_DEFAULT_MODEL: Model ID used when --model is omitted
    - CONVO_MEMORY_CONFIG: JSON file with "context" and "model_limits" overrides
    """
    ctx.ensure_object(dict)

    if debug:
        logging.getLogger('convo_memory').setLevel(logging.DEBUG)
        logger.debug("Debug logging enabled")
    elif verbose:
        logging.getLogger('convo_memory').setLevel(logging.INFO)
        logger.info("Verbose logging enabled")

    ctx.obj['config'] = get_config(env_file=env_file)
    ctx.obj['formatter'] = get_formatter(output)


def _emit(output: Any):
    if isinstance(output, str):
        click.echo(output)
    else:
        Console().print(output)


def _load_messages(path: str) -> List[Message]:
    """
    Load messages from a JSON file.

    Raises click.ClickException if the file cannot be read or parsed.
    """
    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
        if isinstance(data, dict):
            data = data.get('messages', [])
        if not isinstance(data, list):
            raise ValueError("expected a list of messages")
        return messages_from_dicts(data)
    except (OSError, ValueError) as e:
        raise click.ClickException(f"Failed to load messages from {path}: {e}")


def _resolve(ctx, model: Optional[str]):
    config = ctx.obj['config']
    try:
        context_config = config.context_config
    except ValueError as e:
        raise click.ClickException(f"Invalid context configuration: {e}")
    return model or config.default_model, context_config


@cli.command()
@click.argument('file', type=click.Path(exists=True, dir_okay=False))
@click.option('--model', '-m', default=None, help='Model ID (defaults to CONVO_MEMORY_DEFAULT_MODEL)')
@click.pass_context
def status(ctx, file: str, model: Optional[str]):
    """Show estimated context usage of a conversation."""
    model_id, context_config = _resolve(ctx, model)
    messages = _load_messages(file)

    context_status = get_context_status(messages, model_id, context_config)
    _emit(ctx.obj['formatter'].format_status(context_status, model_id))


@cli.command()
@click.argument('file', type=click.Path(exists=True, dir_okay=False))
@click.option('--model', '-m', default=None, help='Model ID (defaults to CONVO_MEMORY_DEFAULT_MODEL)')
@click.pass_context
def prepare(ctx, file: str, model: Optional[str]):
    """
    Preview the messages that would be sent to the model.

    Runs the compression policy with an offline keyword summary in place
    of an LLM call.
    """
    model_id, context_config = _resolve(ctx, model)
    messages = _load_messages(file)
    keep = context_config.resolve(model_id).min_recent_messages
    older = messages[:-keep]

    def summarize(prompt: str) -> str:
        return simple_summarize(older)

    result = asyncio.run(
        prepare_messages_for_context(messages, model_id, summarize, context_config)
    )
    _emit(ctx.obj['formatter'].format_prepare_result(result))


@cli.command()
@click.argument('file', type=click.Path(exists=True, dir_okay=False))
@click.option('--model', '-m', default=None, help='Model ID recorded in the export')
@click.option('--title', '-t', default=None, help='Chat title recorded in the export')
@click.pass_context
def export(ctx, file: str, model: Optional[str], title: Optional[str]):
    """Export a conversation snapshot as JSON."""
    model_id, _ = _resolve(ctx, model)
    messages = _load_messages(file)

    export_data = export_conversation(messages, {'chatTitle': title, 'model': model_id})
    _emit(ctx.obj['formatter'].format_export(export_data))
