"""
Context status reporting for UI display.
"""

import math
from dataclasses import dataclass
from typing import Any, Dict, Optional, Sequence

from .profiles import ContextConfig, DEFAULT_CONFIG
from .token_estimation import estimate_messages_tokens


@dataclass(frozen=True)
class ContextStatus:
    """
    Snapshot of context window usage.

    Attributes:
        current: Estimated tokens used by the messages
        max: Context limit of the model
        percentage: Rounded percentage of the limit in use
        needs_summarization: Next prepare will compress history
        is_near_limit: Context is nearly full
    """
    current: int
    max: int
    percentage: int
    needs_summarization: bool
    is_near_limit: bool

    @property
    def label(self) -> str:
        """Short status hint for display."""
        if self.is_near_limit:
            return 'Context nearly full'
        if self.needs_summarization:
            return 'Will summarize soon'
        return ''

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            'current': self.current,
            'max': self.max,
            'percentage': self.percentage,
            'needsSummarization': self.needs_summarization,
            'isNearLimit': self.is_near_limit,
        }


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def get_context_status(
    messages: Sequence[Any],
    model_id: Optional[str],
    config: Optional[ContextConfig] = None,
) -> ContextStatus:
    """
    Get context status for UI display.

    Pure query, safe to call on every render.

    Args:
        messages: Current messages
        model_id: Current model ID
        config: Context configuration (defaults to DEFAULT_CONFIG)

    Returns:
        ContextStatus with token usage and threshold flags
    """
    config = config or DEFAULT_CONFIG
    profile = config.resolve(model_id)
    current = estimate_messages_tokens(messages, config)
    percentage = _round_half_up(current / profile.context_limit * 100)

    return ContextStatus(
        current=current,
        max=profile.context_limit,
        percentage=percentage,
        needs_summarization=percentage > profile.summarize_percentage,
        is_near_limit=percentage > profile.near_limit_percentage,
    )


def needs_summarization(
    messages: Sequence[Any],
    model_id: Optional[str],
    config: Optional[ContextConfig] = None,
) -> bool:
    """
    Check if the messages exceed the summarization threshold.

    Args:
        messages: Current messages
        model_id: Current model ID
        config: Context configuration (defaults to DEFAULT_CONFIG)

    Returns:
        Whether summarization is needed
    """
    config = config or DEFAULT_CONFIG
    profile = config.resolve(model_id)
    current = estimate_messages_tokens(messages, config)
    return current > profile.context_limit * profile.summarize_threshold
