"""
Chat session owning the state of one open conversation.

A session is constructed when a conversation is opened and discarded when it
closes. It keeps the message list, a ContextManager bound to the selected
model, and whatever summarization or streaming is in flight, so that
switching conversations cancels that work instead of letting its results
leak into the next conversation.
"""

import asyncio
import logging
from typing import Any, AsyncIterator, Callable, Dict, Iterable, List, Optional

from ..context.compression import PrepareResult, Summarizer
from ..context.export import export_conversation
from ..context.manager import ContextManager
from ..context.message import Message, Role, messages_from_dicts
from ..context.profiles import ContextConfig
from ..context.status import ContextStatus
from .streaming import CancellationToken, collect_stream, stream_completion
from .summarizer import make_summarizer

logger = logging.getLogger(__name__)


class SessionClosedError(RuntimeError):
    """Raised when a closed session is used."""


class ChatSession:
    """
    Conversation session around a LangChain chat model.

    Turns must be run one at a time; concurrent turns on the same session
    are not supported.
    """

    def __init__(
        self,
        llm: Any,
        model_id: Optional[str],
        config: Optional[ContextConfig] = None,
        conversation_id: Optional[str] = None,
        summarizer: Optional[Summarizer] = None,
        reply_kwargs: Optional[Dict[str, Any]] = None,
    ):
        """
        Initialize chat session.

        Args:
            llm: LangChain chat model used for replies
            model_id: Model ID used for context limits
            config: Context configuration
            conversation_id: ID of the open conversation
            summarizer: Summarization callable (defaults to an LLMSummarizer on llm)
            reply_kwargs: Generation parameters for replies
        """
        self.llm = llm
        self.context = ContextManager(model_id, config)
        self.summarize = summarizer or make_summarizer(llm)
        self.reply_kwargs = reply_kwargs or {}
        self.conversation_id = conversation_id
        self.last_result: Optional[PrepareResult] = None

        self._messages: List[Message] = []
        self._pending: Optional[asyncio.Future] = None
        self._stream_token: Optional[CancellationToken] = None
        self._closed = False

    @property
    def messages(self) -> List[Message]:
        """Copy of the conversation history, oldest first."""
        return list(self._messages)

    @property
    def closed(self) -> bool:
        return self._closed

    def _check_open(self):
        if self._closed:
            raise SessionClosedError("Chat session is closed")

    def _cancel_in_flight(self):
        if self._pending is not None and not self._pending.done():
            logger.debug(f"Cancelling in-flight preparation for conversation {self.conversation_id}")
            self._pending.cancel()
        self._pending = None
        if self._stream_token is not None:
            self._stream_token.cancel()
            self._stream_token = None

    def open_conversation(self, conversation_id: Optional[str], messages: Iterable[Any] = ()):
        """
        Switch to another conversation.

        Cancels any in-flight work, replaces the history and clears the
        summary of the previous conversation.

        Args:
            conversation_id: ID of the conversation to open
            messages: Its stored messages (Message objects or dicts)
        """
        self._check_open()
        self._cancel_in_flight()
        self.conversation_id = conversation_id
        self._messages = messages_from_dicts(messages)
        self.context.clear_summary()
        self.last_result = None
        logger.debug(f"Opened conversation {conversation_id} with {len(self._messages)} messages")

    def set_model(self, model_id: Optional[str]):
        self._check_open()
        self.context.set_model(model_id)

    def add_message(self, role: Any, content: str) -> Message:
        """Append a message to the conversation."""
        self._check_open()
        message = Message(role=role, content=content)
        self._messages.append(message)
        return message

    async def prepare_turn(self) -> Optional[PrepareResult]:
        """
        Prepare the current history for a completion call.

        Returns:
            PrepareResult, or None when the conversation was switched or the
            session closed while summarization was in flight
        """
        self._check_open()
        conversation_id = self.conversation_id
        task = asyncio.ensure_future(
            self.context.prepare(list(self._messages), self.summarize)
        )
        self._pending = task

        try:
            result = await task
        except asyncio.CancelledError:
            if self._closed or self.conversation_id != conversation_id:
                logger.warning(f"Discarded preparation for conversation {conversation_id}")
                return None
            raise
        finally:
            if self._pending is task:
                self._pending = None

        if self._closed or self.conversation_id != conversation_id:
            logger.warning(f"Discarded orphaned preparation for conversation {conversation_id}")
            if result.summarized and self.context.last_summary == result.summary:
                self.context.clear_summary()
            return None

        self.last_result = result
        return result

    async def stream_reply(self, token: Optional[CancellationToken] = None) -> AsyncIterator[str]:
        """
        Prepare the context and stream the assistant reply.

        The assistant message is appended once the stream completes, unless
        it was cancelled or the conversation changed meanwhile.

        Args:
            token: Optional cancellation token for the reply stream

        Yields:
            Reply text fragments
        """
        result = await self.prepare_turn()
        if result is None:
            return

        conversation_id = self.conversation_id
        token = token or CancellationToken()
        self._stream_token = token

        fragments = []
        try:
            async for fragment in stream_completion(self.llm, result.messages, token, **self.reply_kwargs):
                fragments.append(fragment)
                yield fragment
        finally:
            if self._stream_token is token:
                self._stream_token = None

        if token.cancelled or self._closed or self.conversation_id != conversation_id:
            logger.debug("Reply stream abandoned, not storing assistant message")
            return

        self._messages.append(Message(role=Role.ASSISTANT, content=''.join(fragments)))

    async def respond(self, text: str, on_fragment: Optional[Callable[[str], Any]] = None) -> str:
        """
        Add a user message and collect the streamed reply.

        Args:
            text: User message text
            on_fragment: Optional callback receiving the reply accumulated so far

        Returns:
            Full reply text
        """
        self.add_message(Role.USER, text)
        return await collect_stream(self.stream_reply(), on_fragment)

    def status(self) -> ContextStatus:
        return self.context.get_status(self._messages)

    def export(self, title: Optional[str] = None) -> Dict[str, Any]:
        """Export the conversation with its title and model."""
        return export_conversation(
            self._messages,
            {'chatTitle': title, 'model': self.context.model_id},
        )

    def close(self):
        """Cancel in-flight work and mark the session closed."""
        if self._closed:
            return
        self._cancel_in_flight()
        self._closed = True
