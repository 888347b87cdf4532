"""
Compression policy for conversation history.

Implements rolling summarization when a conversation approaches the model's
context limit: the most recent messages are kept verbatim and everything
older is replaced by a single system message carrying an LLM-generated
summary.
"""

import inspect
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, List, Optional, Sequence, Union

from .message import Message, Role, message_content, message_role
from .profiles import ContextConfig, DEFAULT_CONFIG
from .token_estimation import estimate_messages_tokens

logger = logging.getLogger(__name__)

SUMMARY_PREFIX = "Previous conversation summary: "

SUMMARIZATION_PROMPT = """Summarize this conversation concisely, preserving:
- Key facts and information shared
- User preferences mentioned
- Important context needed for future responses
- Any decisions or conclusions reached

Keep the summary under 200 words.

Conversation:
{conversation}

Summary:"""

Summarizer = Callable[[str], Union[str, Awaitable[str]]]


@dataclass
class PrepareResult:
    """
    Messages ready for a completion call.

    Attributes:
        messages: Messages to submit (the input list when nothing changed)
        summarized: Whether older history was replaced by a summary
        summary: Raw summary text when summarized, otherwise None
    """
    messages: Sequence[Any]
    summarized: bool = False
    summary: Optional[str] = None

    @property
    def summary_context(self) -> Optional[str]:
        """System message text carrying the summary."""
        if self.summary is None:
            return None
        return f"{SUMMARY_PREFIX}{self.summary}"


def build_summarization_prompt(messages: Sequence[Any]) -> str:
    """
    Create the summarization prompt for older messages.

    Args:
        messages: Messages to summarize

    Returns:
        Prompt text with one "<Role>: <content>" block per message
    """
    conversation = "\n\n".join(
        f"{message_role(msg).capitalize()}: {message_content(msg)}"
        for msg in messages
    )
    return SUMMARIZATION_PROMPT.format(conversation=conversation)


async def _call_summarizer(summarize: Summarizer, prompt: str) -> str:
    result = summarize(prompt)
    if inspect.isawaitable(result):
        result = await result
    if not isinstance(result, str):
        raise TypeError(f"Summarizer returned {type(result).__name__}, expected str")
    return result


async def prepare_messages_for_context(
    messages: Sequence[Any],
    model_id: Optional[str],
    summarize: Summarizer,
    config: Optional[ContextConfig] = None,
) -> PrepareResult:
    """
    Prepare messages for a completion call with context management.

    Below the summarization threshold the input is returned untouched.
    Above it, older messages are summarized and replaced by a system message;
    if there is nothing older than the recent window, or summarization fails,
    the conversation is truncated to the recent window instead.

    Args:
        messages: Full message history (Message objects or dicts), oldest first
        model_id: Current model ID
        summarize: Callable taking a prompt and returning summary text
            (may be a coroutine function)
        config: Context configuration (defaults to DEFAULT_CONFIG)

    Returns:
        PrepareResult with the messages to submit
    """
    config = config or DEFAULT_CONFIG
    profile = config.resolve(model_id)

    if estimate_messages_tokens(messages, config) <= profile.target_tokens:
        return PrepareResult(messages=messages)

    logger.debug(f"Context limit approaching for {model_id}, initiating summarization")

    keep = profile.min_recent_messages
    recent: List[Message] = [Message.coerce(m) for m in messages[-keep:]]
    older = messages[:-keep]

    if not older:
        # Nothing left to compress; send the recent window only
        return PrepareResult(messages=recent)

    prompt = build_summarization_prompt(older)

    try:
        summary = await _call_summarizer(summarize, prompt)
    except Exception as e:
        logger.warning(f"Summarization failed, keeping last {len(recent)} messages: {e}")
        return PrepareResult(messages=recent)

    processed = [Message(role=Role.SYSTEM, content=f"{SUMMARY_PREFIX}{summary}")] + recent

    logger.info(
        f"Summarization complete. Reduced from {len(messages)} to {len(processed)} messages"
    )
    return PrepareResult(messages=processed, summarized=True, summary=summary)


def simple_summarize(messages: Sequence[Any]) -> str:
    """
    Simple fallback summarization without an LLM.

    Collects up to ten distinct longer words from user messages.

    Args:
        messages: Messages to summarize

    Returns:
        Short summary text
    """
    key_phrases = []
    for msg in messages:
        if message_role(msg) != Role.USER.value:
            continue
        words = [w for w in message_content(msg).split() if len(w) > 5]
        key_phrases.extend(words[:3])

    unique_phrases = list(dict.fromkeys(key_phrases))[:10]

    return (
        f"The conversation covered topics including: {', '.join(unique_phrases)}. "
        f"{len(messages)} messages were exchanged between user and assistant."
    )
