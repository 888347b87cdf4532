"""
Streaming reply helpers.

Streams a chat completion as a lazy, finite sequence of text fragments that
the caller folds into an accumulating buffer. Cancelling the token stops
consumption and closes the upstream request.
"""

import inspect
import logging
from typing import Any, AsyncIterator, Callable, Iterable, Optional

from ..context.message import content_text, messages_to_langchain

logger = logging.getLogger(__name__)

REPLY_TEMPERATURE = 0.7
REPLY_MAX_TOKENS = 512


class CancellationToken:
    """Flag shared between a stream consumer and whoever may abandon it."""

    def __init__(self):
        self._cancelled = False

    def cancel(self):
        self._cancelled = True

    @property
    def cancelled(self) -> bool:
        return self._cancelled


async def stream_completion(
    llm: Any,
    messages: Iterable[Any],
    token: Optional[CancellationToken] = None,
    **generation_kwargs
) -> AsyncIterator[str]:
    """
    Stream a chat completion as text fragments.

    Args:
        llm: LangChain chat model supporting astream()
        messages: Messages to send (Message objects or dicts)
        token: Optional cancellation token checked between fragments
        **generation_kwargs: Generation parameters (temperature, max_tokens, ...)

    Yields:
        Non-empty text fragments in arrival order
    """
    params = {'temperature': REPLY_TEMPERATURE, 'max_tokens': REPLY_MAX_TOKENS}
    params.update(generation_kwargs)

    stream = llm.astream(messages_to_langchain(messages), **params)
    try:
        async for chunk in stream:
            if token is not None and token.cancelled:
                logger.debug("Stream cancelled by consumer")
                break
            text = content_text(chunk)
            if text:
                yield text
    finally:
        aclose = getattr(stream, 'aclose', None)
        if aclose is not None:
            await aclose()


async def collect_stream(
    fragments: AsyncIterator[str],
    on_fragment: Optional[Callable[[str], Any]] = None,
) -> str:
    """
    Fold streamed fragments into the full text.

    Args:
        fragments: Async iterator of text fragments
        on_fragment: Optional callback receiving the text accumulated so far
            (may be a coroutine function)

    Returns:
        Accumulated text
    """
    full_text = ''
    async for fragment in fragments:
        full_text += fragment
        if on_fragment is not None:
            result = on_fragment(full_text)
            if inspect.isawaitable(result):
                await result
    return full_text
