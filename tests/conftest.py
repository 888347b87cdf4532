import pytest

from convo_memory.context.message import Message, Role


def build_messages(count, tokens_each=150):
    """Alternating user/assistant messages estimated at tokens_each tokens apiece."""
    content_chars = int((tokens_each - 4) * 3.5)
    messages = []
    for i in range(count):
        prefix = f"m{i:03d} "
        role = Role.USER if i % 2 == 0 else Role.ASSISTANT
        messages.append(Message(role=role, content=prefix + 'x' * (content_chars - len(prefix))))
    return messages


@pytest.fixture
def make_messages():
    return build_messages
