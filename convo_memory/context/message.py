"""
Chat message model for context management.

Provides an immutable message class with conversion to/from plain dicts
and LangChain message formats.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union


class Role(str, Enum):
    """Message author role."""
    SYSTEM = 'system'
    USER = 'user'
    ASSISTANT = 'assistant'


@dataclass(frozen=True)
class Message:
    """
    Single chat message.

    Messages are immutable once created; a conversation only grows by
    appending new messages to the end.

    Attributes:
        role: Message role (system, user, assistant)
        content: Message content text
        timestamp: When the message was created (None when unknown)
    """
    role: Role
    content: str
    timestamp: Optional[datetime] = field(default_factory=lambda: datetime.now(timezone.utc))

    def __post_init__(self):
        if not isinstance(self.role, Role):
            object.__setattr__(self, 'role', _parse_role(self.role))
        if self.content is None:
            object.__setattr__(self, 'content', '')

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'Message':
        """
        Create a Message from a simple dict format.

        Args:
            data: Mapping with 'role' and 'content' keys and an optional
                'timestamp' (ISO string or datetime)

        Returns:
            Message instance

        Raises:
            ValueError: If the role is missing or unknown
        """
        if not isinstance(data, Mapping):
            raise ValueError(f"Expected a message mapping, got {type(data).__name__}")

        timestamp = data.get('timestamp')
        if isinstance(timestamp, str):
            timestamp = _parse_timestamp(timestamp)
        elif timestamp is not None and not isinstance(timestamp, datetime):
            raise ValueError(f"Unsupported timestamp value: {timestamp!r}")

        return cls(
            role=_parse_role(data.get('role')),
            content=data.get('content') or '',
            timestamp=timestamp,
        )

    @classmethod
    def coerce(cls, message: Union['Message', Mapping[str, Any]]) -> 'Message':
        """Return message as-is if already a Message, otherwise parse it."""
        if isinstance(message, Message):
            return message
        return cls.from_dict(message)

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert to a serializable dict.

        Returns:
            Dictionary with 'role', 'content' and ISO 'timestamp' (or None)
        """
        return {
            'role': self.role.value,
            'content': self.content,
            'timestamp': self.timestamp.isoformat() if self.timestamp else None,
        }

    def to_langchain_message(self) -> Any:
        """
        Convert to LangChain message format.

        Returns:
            SystemMessage, HumanMessage or AIMessage
        """
        from langchain_core.messages import HumanMessage, AIMessage, SystemMessage

        if self.role == Role.SYSTEM:
            return SystemMessage(content=self.content)
        elif self.role == Role.ASSISTANT:
            return AIMessage(content=self.content)
        return HumanMessage(content=self.content)

    @classmethod
    def from_langchain_message(cls, message: Any) -> 'Message':
        """
        Create Message from LangChain message.

        Unknown message types are treated as user messages.
        """
        from langchain_core.messages import AIMessage, SystemMessage

        content = message.content if hasattr(message, 'content') else str(message)
        if not isinstance(content, str):
            content = str(content)

        if isinstance(message, SystemMessage):
            role = Role.SYSTEM
        elif isinstance(message, AIMessage):
            role = Role.ASSISTANT
        else:
            role = Role.USER

        return cls(role=role, content=content)


def _parse_role(value: Any) -> Role:
    if isinstance(value, Role):
        return value
    try:
        return Role(value)
    except ValueError:
        raise ValueError(f"Unknown message role: {value!r}") from None


def _parse_timestamp(value: str) -> datetime:
    # fromisoformat only accepts a "Z" suffix from Python 3.11 on
    if value.endswith(('Z', 'z')):
        value = value[:-1] + '+00:00'
    return datetime.fromisoformat(value)


def message_content(message: Any) -> str:
    """
    Get the text content of a Message or a dict-like message.

    Missing or None content is returned as an empty string.
    """
    if isinstance(message, Message):
        return message.content
    if isinstance(message, Mapping):
        return message.get('content') or ''
    return getattr(message, 'content', None) or ''


def content_text(value: Any) -> str:
    """
    Get the plain text of a LangChain message, chunk or raw content.

    List content (content blocks from multimodal providers) is joined from
    its string items and text blocks; anything else yields an empty string.
    """
    content = getattr(value, 'content', value)
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        parts = []
        for item in content:
            if isinstance(item, str):
                parts.append(item)
            elif isinstance(item, dict) and item.get('type') == 'text':
                parts.append(item.get('text', ''))
        return ''.join(parts)
    return ''


def message_role(message: Any) -> str:
    """Get the role name of a Message or a dict-like message."""
    if isinstance(message, Message):
        return message.role.value
    if isinstance(message, Mapping):
        role = message.get('role', '')
    else:
        role = getattr(message, 'role', '')
    return role.value if isinstance(role, Role) else str(role or '')


def messages_from_dicts(messages: Iterable[Mapping[str, Any]]) -> List[Message]:
    """Convert a list of message dicts to Message objects."""
    return [Message.coerce(msg) for msg in messages]


def messages_to_langchain(messages: Iterable[Any]) -> List[Any]:
    """
    Convert messages (Message objects or dicts) to LangChain messages.

    Args:
        messages: Messages to convert

    Returns:
        List of LangChain message objects
    """
    return [Message.coerce(msg).to_langchain_message() for msg in messages]
