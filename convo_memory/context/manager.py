"""
Context Manager for a single conversation.

Binds token estimation, status reporting and the compression policy to the
currently selected model and keeps the last summary produced for display.
"""

import logging
from typing import Any, Optional, Sequence

from .compression import PrepareResult, Summarizer, prepare_messages_for_context
from .profiles import ContextConfig, DEFAULT_CONFIG
from .status import ContextStatus, get_context_status, needs_summarization

logger = logging.getLogger(__name__)


class ContextManager:
    """
    Manages the context window for one open conversation.

    The manager holds no reference to message storage; messages are passed in
    on every call. Callers must serialize prepare() calls per conversation and
    call clear_summary() whenever the conversation switches.
    """

    def __init__(self, model_id: Optional[str], config: Optional[ContextConfig] = None):
        """
        Initialize context manager.

        Args:
            model_id: Initial model ID
            config: Context configuration (defaults to DEFAULT_CONFIG)
        """
        self.config = config or DEFAULT_CONFIG
        self._model_id = model_id
        self._last_summary: Optional[str] = None

    @property
    def model_id(self) -> Optional[str]:
        return self._model_id

    @property
    def max_tokens(self) -> int:
        """Get context limit of the current model."""
        return self.config.get_context_limit(self._model_id)

    @property
    def last_summary(self) -> Optional[str]:
        """Most recent summary produced by prepare(), if any."""
        return self._last_summary

    def set_model(self, model_id: Optional[str]):
        """
        Switch the active model profile.

        Already prepared messages and the last summary are left untouched.
        """
        logger.debug(f"Context model switched from {self._model_id} to {model_id}")
        self._model_id = model_id

    def get_summary(self) -> Optional[str]:
        return self._last_summary

    def clear_summary(self):
        """Forget the last summary (call on conversation switch)."""
        self._last_summary = None

    def get_status(self, messages: Sequence[Any]) -> ContextStatus:
        return get_context_status(messages, self._model_id, self.config)

    def needs_summarization(self, messages: Sequence[Any]) -> bool:
        return needs_summarization(messages, self._model_id, self.config)

    async def prepare(self, messages: Sequence[Any], summarize: Summarizer) -> PrepareResult:
        """
        Prepare messages for a completion call using the current model.

        Args:
            messages: Full message history, oldest first
            summarize: Callable producing summary text for a prompt

        Returns:
            PrepareResult from the compression policy
        """
        result = await prepare_messages_for_context(
            messages, self._model_id, summarize, self.config
        )
        if result.summarized:
            self._last_summary = result.summary
        return result
