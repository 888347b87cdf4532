"""
Token estimation utilities for context management.

Uses a character-based heuristic rather than a real tokenizer: the inference
backend does its own exact tokenization, this estimate only has to trigger
compression before the backend rejects or truncates a request.
"""

import math
from typing import Any, Iterable, Optional

from .message import message_content
from .profiles import ContextConfig, DEFAULT_CONFIG


def estimate_tokens(text: Optional[str], config: Optional[ContextConfig] = None) -> int:
    """
    Estimate token count for a string.

    Approximates ~3.5 characters per token.

    Args:
        text: Text to estimate (None or empty yields 0)
        config: Configuration providing chars_per_token

    Returns:
        Estimated token count
    """
    if not text:
        return 0
    chars_per_token = (config or DEFAULT_CONFIG).chars_per_token
    return math.ceil(len(text) / chars_per_token)


def estimate_messages_tokens(messages: Iterable[Any], config: Optional[ContextConfig] = None) -> int:
    """
    Estimate total tokens for a list of messages.

    Each message adds a fixed overhead for role and formatting tokens.

    Args:
        messages: Message objects or dicts with a 'content' key
        config: Configuration providing chars_per_token and overhead

    Returns:
        Total estimated token count
    """
    config = config or DEFAULT_CONFIG
    overhead = config.message_overhead_tokens
    return sum(
        estimate_tokens(message_content(msg), config) + overhead
        for msg in messages
    )
