"""
Context window management for chat history.

Provides token estimation, context status reporting, and rolling
summarization of older messages so conversations fit the model's
context limit.
"""

from .message import Role, Message, messages_from_dicts, messages_to_langchain
from .profiles import (
    MODEL_CONTEXT_LIMITS,
    DEFAULT_CONTEXT_LIMIT,
    MIN_RECENT_MESSAGES,
    DEFAULT_CONFIG,
    ContextConfig,
    ModelProfile,
    get_context_limit,
)
from .token_estimation import estimate_tokens, estimate_messages_tokens
from .status import ContextStatus, get_context_status, needs_summarization
from .compression import (
    PrepareResult,
    build_summarization_prompt,
    prepare_messages_for_context,
    simple_summarize,
)
from .manager import ContextManager
from .export import export_conversation, export_conversation_json

__all__ = [
    'Role',
    'Message',
    'messages_from_dicts',
    'messages_to_langchain',
    'MODEL_CONTEXT_LIMITS',
    'DEFAULT_CONTEXT_LIMIT',
    'MIN_RECENT_MESSAGES',
    'DEFAULT_CONFIG',
    'ContextConfig',
    'ModelProfile',
    'get_context_limit',
    'estimate_tokens',
    'estimate_messages_tokens',
    'ContextStatus',
    'get_context_status',
    'needs_summarization',
    'PrepareResult',
    'build_summarization_prompt',
    'prepare_messages_for_context',
    'simple_summarize',
    'ContextManager',
    'export_conversation',
    'export_conversation_json',
]
