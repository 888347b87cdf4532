"""
Runtime integration with LangChain chat models.

Provides the summarization capability, streaming reply helpers and the
per-conversation chat session.
"""

from .summarizer import LLMSummarizer, make_summarizer
from .streaming import CancellationToken, stream_completion, collect_stream
from .session import ChatSession, SessionClosedError

__all__ = [
    'LLMSummarizer',
    'make_summarizer',
    'CancellationToken',
    'stream_completion',
    'collect_stream',
    'ChatSession',
    'SessionClosedError',
]
