import asyncio
from unittest.mock import AsyncMock, Mock

import pytest

from convo_memory.context.compression import (
    SUMMARY_PREFIX,
    PrepareResult,
    build_summarization_prompt,
    prepare_messages_for_context,
    simple_summarize,
)
from convo_memory.context.message import Message, Role
from convo_memory.context.profiles import ContextConfig, ModelProfile


def run(coro):
    return asyncio.run(coro)


class TestPrepareBelowThreshold:
    """Messages within the token budget are sent untouched."""

    def test_returns_input_unchanged(self, make_messages):
        messages = make_messages(10)
        summarize = AsyncMock(return_value="unused")

        result = run(prepare_messages_for_context(messages, 'Qwen3-0.6B-q4f16_1-MLC', summarize))

        assert result.messages is messages
        assert result.summarized is False
        assert result.summary is None
        summarize.assert_not_called()

    def test_same_result_when_called_twice(self, make_messages):
        messages = make_messages(4)
        first = run(prepare_messages_for_context(messages, None, AsyncMock()))
        second = run(prepare_messages_for_context(messages, None, AsyncMock()))
        assert first == second

    def test_larger_model_keeps_longer_history(self, make_messages):
        messages = make_messages(20)
        result = run(prepare_messages_for_context(messages, 'Llama-3.2-1B-Instruct-q4f16_1-MLC', AsyncMock()))
        assert result.messages is messages
        assert not result.summarized


class TestPrepareAboveThreshold:
    """Older history is summarized once the threshold is exceeded."""

    def test_summarizes_older_messages(self, make_messages):
        messages = make_messages(20)
        summarize = AsyncMock(return_value="Summary text.")

        result = run(prepare_messages_for_context(messages, 'unknown-model', summarize))

        assert result.summarized is True
        assert result.summary == "Summary text."
        assert len(result.messages) == 7
        first = result.messages[0]
        assert first.role is Role.SYSTEM
        assert first.content == "Previous conversation summary: Summary text."
        assert list(result.messages[1:]) == messages[-6:]
        assert result.summary_context == first.content
        summarize.assert_awaited_once()

    def test_prompt_contains_only_older_messages(self, make_messages):
        messages = make_messages(20)
        summarize = AsyncMock(return_value="ok")

        run(prepare_messages_for_context(messages, None, summarize))

        prompt = summarize.call_args.args[0]
        assert "Keep the summary under 200 words." in prompt
        assert "User: m000 " in prompt
        assert "Assistant: m013 " in prompt
        assert "m014 " not in prompt
        assert prompt.rstrip().endswith("Summary:")

    def test_accepts_plain_function(self, make_messages):
        messages = make_messages(20)
        result = run(prepare_messages_for_context(messages, None, lambda prompt: "sync summary"))
        assert result.summarized
        assert result.summary == "sync summary"

    def test_dict_messages_are_converted(self, make_messages):
        messages = [m.to_dict() for m in make_messages(20)]
        result = run(prepare_messages_for_context(messages, None, AsyncMock(return_value="s")))
        assert all(isinstance(m, Message) for m in result.messages)
        assert result.messages[-1].content == messages[-1]['content']

    def test_each_call_summarizes_again(self, make_messages):
        messages = make_messages(20)
        summarize = AsyncMock(side_effect=["first", "second"])

        first = run(prepare_messages_for_context(messages, None, summarize))
        second = run(prepare_messages_for_context(messages, None, summarize))

        assert first.summary == "first"
        assert second.summary == "second"
        assert summarize.await_count == 2

    def test_per_model_recent_window(self, make_messages):
        config = ContextConfig(profiles={
            'tiny': ModelProfile(context_limit=1000, min_recent_messages=2),
        })
        messages = make_messages(10)

        result = run(prepare_messages_for_context(messages, 'tiny', AsyncMock(return_value="s"), config))

        assert len(result.messages) == 3
        assert list(result.messages[1:]) == messages[-2:]


class TestPrepareDegradation:
    """Failures and short conversations fall back to the recent window."""

    def test_summarize_failure_truncates(self, make_messages):
        messages = make_messages(20)
        summarize = AsyncMock(side_effect=RuntimeError("backend down"))

        result = run(prepare_messages_for_context(messages, None, summarize))

        assert result.summarized is False
        assert result.summary is None
        assert list(result.messages) == messages[-6:]

    def test_malformed_summary_truncates(self, make_messages):
        messages = make_messages(20)
        result = run(prepare_messages_for_context(messages, None, AsyncMock(return_value=None)))
        assert not result.summarized
        assert len(result.messages) == 6

    def test_short_heavy_conversation_is_not_summarized(self):
        messages = [Message(role=Role.USER, content='y' * 5000) for _ in range(3)]
        summarize = Mock()

        result = run(prepare_messages_for_context(messages, None, summarize))

        assert list(result.messages) == messages
        assert result.summarized is False
        summarize.assert_not_called()

    def test_exactly_recent_window_is_not_summarized(self, make_messages):
        messages = make_messages(6, tokens_each=600)
        summarize = Mock()

        result = run(prepare_messages_for_context(messages, None, summarize))

        assert list(result.messages) == messages
        summarize.assert_not_called()


def test_prepare_result_summary_context_empty():
    assert PrepareResult(messages=[]).summary_context is None


def test_build_summarization_prompt_roles():
    prompt = build_summarization_prompt([
        {'role': 'system', 'content': 'be nice'},
        {'role': 'user', 'content': 'hello'},
        {'role': 'assistant', 'content': 'hi there'},
    ])
    assert "System: be nice\n\nUser: hello\n\nAssistant: hi there" in prompt
    assert "User preferences mentioned" in prompt


def test_summary_prefix():
    assert SUMMARY_PREFIX == "Previous conversation summary: "


def test_simple_summarize():
    summary = simple_summarize([
        Message(role=Role.USER, content="Tell me about quantum computing and entanglement"),
        Message(role=Role.ASSISTANT, content="Certainly, quantum mechanics underpins everything"),
    ])
    assert summary == (
        "The conversation covered topics including: quantum, computing, entanglement. "
        "2 messages were exchanged between user and assistant."
    )


def test_simple_summarize_limits_phrases():
    messages = [
        {'role': 'user', 'content': f"alpha{i}x beta{i}xx gamma{i}xx delta{i}xx"}
        for i in range(5)
    ]
    summary = simple_summarize(messages)
    topics = summary.split(': ', 1)[1].split('. ')[0].split(', ')
    assert len(topics) == 10
    assert 'delta0xx' not in topics
