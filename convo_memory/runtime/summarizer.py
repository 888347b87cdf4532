"""
LangChain-backed summarization capability.

Adapts a LangChain chat model into the single-shot async `prompt -> text`
callable expected by the compression policy.
"""

import logging
from typing import Any

from langchain_core.messages import HumanMessage

from ..context.message import content_text

logger = logging.getLogger(__name__)

SUMMARY_TEMPERATURE = 0.3
SUMMARY_MAX_TOKENS = 200


class LLMSummarizer:
    """
    Async callable producing a summary with a non-streaming LLM call.

    Generation parameters are fixed per instance: summaries use a lower
    temperature and a small token cap than normal chat replies.
    """

    def __init__(
        self,
        llm: Any,
        temperature: float = SUMMARY_TEMPERATURE,
        max_tokens: int = SUMMARY_MAX_TOKENS,
        **generation_kwargs
    ):
        """
        Args:
            llm: LangChain chat model (BaseChatModel or compatible runnable)
            temperature: Sampling temperature for summaries
            max_tokens: Token cap for summaries
            **generation_kwargs: Extra parameters passed to the model call
        """
        self.llm = llm
        self.generation_kwargs = {
            'temperature': temperature,
            'max_tokens': max_tokens,
            **generation_kwargs,
        }

    async def __call__(self, prompt: str) -> str:
        response = await self.llm.ainvoke(
            [HumanMessage(content=prompt)], **self.generation_kwargs
        )
        text = content_text(response)
        if not text:
            logger.debug("Summarizer returned empty content")
        return text


def make_summarizer(llm: Any, **kwargs) -> LLMSummarizer:
    """Create an LLMSummarizer for the given chat model."""
    return LLMSummarizer(llm, **kwargs)
