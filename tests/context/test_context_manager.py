import asyncio
from unittest.mock import AsyncMock

from convo_memory.context.manager import ContextManager


def test_initial_state():
    manager = ContextManager('Qwen3-0.6B-q4f16_1-MLC')
    assert manager.model_id == 'Qwen3-0.6B-q4f16_1-MLC'
    assert manager.max_tokens == 4096
    assert manager.last_summary is None
    assert manager.get_summary() is None


def test_set_model_changes_limit():
    manager = ContextManager('Qwen3-0.6B-q4f16_1-MLC')
    manager.set_model('Llama-3.2-3B-Instruct-q4f16_1-MLC')
    assert manager.max_tokens == 8192
    manager.set_model('not-a-model')
    assert manager.max_tokens == 4096


def test_prepare_stores_summary(make_messages):
    manager = ContextManager(None)
    result = asyncio.run(manager.prepare(make_messages(20), AsyncMock(return_value="Summary text.")))

    assert result.summarized
    assert manager.last_summary == "Summary text."


def test_prepare_below_threshold_keeps_previous_summary(make_messages):
    manager = ContextManager(None)
    asyncio.run(manager.prepare(make_messages(20), AsyncMock(return_value="first")))
    result = asyncio.run(manager.prepare(make_messages(2), AsyncMock()))

    assert not result.summarized
    assert manager.last_summary == "first"


def test_failed_summary_keeps_previous_summary(make_messages):
    manager = ContextManager(None)
    asyncio.run(manager.prepare(make_messages(20), AsyncMock(return_value="first")))
    asyncio.run(manager.prepare(make_messages(20), AsyncMock(side_effect=ValueError("bad"))))
    assert manager.last_summary == "first"


def test_set_model_does_not_clear_summary(make_messages):
    manager = ContextManager(None)
    asyncio.run(manager.prepare(make_messages(20), AsyncMock(return_value="kept")))
    manager.set_model('Llama-3.2-1B-Instruct-q4f16_1-MLC')
    assert manager.last_summary == "kept"


def test_clear_summary(make_messages):
    manager = ContextManager(None)
    asyncio.run(manager.prepare(make_messages(20), AsyncMock(return_value="gone")))
    manager.clear_summary()
    assert manager.last_summary is None


def test_prepare_uses_current_model(make_messages):
    manager = ContextManager('Llama-3.2-1B-Instruct-q4f16_1-MLC')
    messages = make_messages(20)
    summarize = AsyncMock(return_value="s")

    result = asyncio.run(manager.prepare(messages, summarize))
    assert result.messages is messages
    summarize.assert_not_called()

    manager.set_model('gemma-2-2b-it-q4f16_1-MLC')
    result = asyncio.run(manager.prepare(messages, summarize))
    assert result.summarized


def test_status_and_predicate(make_messages):
    manager = ContextManager('SmolLM2-1.7B-Instruct-q4f16_1-MLC')
    messages = make_messages(20)

    status = manager.get_status(messages)
    assert status.current == 3000
    assert status.max == 4096
    assert status.percentage == 73
    assert status.needs_summarization
    assert manager.needs_summarization(messages)

    manager.set_model('Phi-3.5-mini-instruct-q4f16_1-MLC')
    assert not manager.needs_summarization(messages)
    assert manager.get_status(messages).max == 8192
