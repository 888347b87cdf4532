"""
Conversation export.

Produces a serializable snapshot of a conversation; writing it anywhere is
left to the caller.
"""

import json
from datetime import datetime, timezone
from typing import Any, Dict, Mapping, Optional, Sequence

from .message import Message


def export_conversation(
    messages: Sequence[Any],
    metadata: Optional[Mapping[str, Any]] = None,
) -> Dict[str, Any]:
    """
    Export a conversation as a plain dictionary.

    Args:
        messages: Messages to export (Message objects or dicts)
        metadata: Additional keys such as chatTitle or model

    Returns:
        Dict with exportedAt, messageCount, the metadata keys and messages
    """
    export_data: Dict[str, Any] = {
        'exportedAt': datetime.now(timezone.utc).isoformat(),
        'messageCount': len(messages),
    }
    export_data.update(metadata or {})
    export_data['messages'] = [Message.coerce(m).to_dict() for m in messages]
    return export_data


def export_conversation_json(
    messages: Sequence[Any],
    metadata: Optional[Mapping[str, Any]] = None,
    indent: Optional[int] = 2,
) -> str:
    """Export a conversation as JSON text."""
    return json.dumps(export_conversation(messages, metadata), indent=indent, default=str)
