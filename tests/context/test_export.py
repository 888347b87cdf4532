import json
from datetime import datetime, timezone

from convo_memory.context.export import export_conversation, export_conversation_json
from convo_memory.context.message import Message, Role


def _messages():
    return [
        Message(role=Role.USER, content="Hi", timestamp=datetime(2024, 1, 1, tzinfo=timezone.utc)),
        {'role': 'assistant', 'content': 'Hello!'},
    ]


def test_export_json_with_metadata():
    data = json.loads(export_conversation_json(_messages(), {'chatTitle': 'X', 'model': 'm'}))

    assert data['messageCount'] == 2
    assert data['chatTitle'] == 'X'
    assert data['model'] == 'm'
    assert datetime.fromisoformat(data['exportedAt']).tzinfo is not None
    assert data['messages'] == [
        {'role': 'user', 'content': 'Hi', 'timestamp': '2024-01-01T00:00:00+00:00'},
        {'role': 'assistant', 'content': 'Hello!', 'timestamp': None},
    ]


def test_export_without_metadata():
    data = export_conversation(_messages())
    assert set(data) == {'exportedAt', 'messageCount', 'messages'}


def test_export_empty_conversation():
    data = export_conversation([], {'chatTitle': None})
    assert data['messageCount'] == 0
    assert data['messages'] == []
    assert data['chatTitle'] is None


def test_export_key_order():
    data = export_conversation(_messages(), {'chatTitle': 'X'})
    assert list(data) == ['exportedAt', 'messageCount', 'chatTitle', 'messages']


def test_export_json_indent():
    text = export_conversation_json(_messages(), indent=2)
    assert text.startswith('{\n  "exportedAt"')
