"""
Model context profiles and context management configuration.

Holds the static table of model context limits along with the tunable
thresholds used by token estimation, status reporting and compression.
"""

from typing import Dict, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field


# Conservative limits for 4-bit quantized models
MODEL_CONTEXT_LIMITS: Dict[str, int] = {
    'Qwen3-0.6B-q4f16_1-MLC': 4096,
    'Llama-3.2-1B-Instruct-q4f16_1-MLC': 8192,
    'SmolLM2-1.7B-Instruct-q4f16_1-MLC': 4096,
    'gemma-2-2b-it-q4f16_1-MLC': 4096,
    'Llama-3.2-3B-Instruct-q4f16_1-MLC': 8192,
    'Phi-3.5-mini-instruct-q4f16_1-MLC': 8192,
}

DEFAULT_CONTEXT_LIMIT = 4096

# Fraction of the context at which history gets compressed
SUMMARIZE_THRESHOLD = 0.7
# Fraction of the context reported as "nearly full"
NEAR_LIMIT_THRESHOLD = 0.9
# Messages always kept verbatim at the end of the conversation
MIN_RECENT_MESSAGES = 6
CHARS_PER_TOKEN = 3.5
# Role/formatting tokens per message
MESSAGE_OVERHEAD_TOKENS = 4


class ModelProfile(BaseModel):
    """
    Context profile for a single model.

    Threshold fields left as None fall back to the ContextConfig defaults.
    """
    model_config = ConfigDict(frozen=True)

    context_limit: int = Field(gt=0, description="Maximum tokens the model accepts in one request")
    summarize_threshold: Optional[float] = Field(default=None, gt=0, le=1)
    near_limit_threshold: Optional[float] = Field(default=None, gt=0, le=1)
    min_recent_messages: Optional[int] = Field(default=None, ge=1)


class ResolvedProfile(BaseModel):
    """Model profile with every threshold filled in."""
    model_config = ConfigDict(frozen=True, protected_namespaces=())

    model_id: Optional[str] = None
    context_limit: int = Field(gt=0)
    summarize_threshold: float
    near_limit_threshold: float
    min_recent_messages: int

    @property
    def target_tokens(self) -> int:
        """Token budget below which messages are sent as-is."""
        return int(self.context_limit * self.summarize_threshold)

    @property
    def summarize_percentage(self) -> float:
        """Usage percentage above which status reports summarization."""
        return round(self.summarize_threshold * 100, 6)

    @property
    def near_limit_percentage(self) -> float:
        """Usage percentage above which status reports a nearly full context."""
        return round(self.near_limit_threshold * 100, 6)


def _default_profiles() -> Dict[str, ModelProfile]:
    return {
        model_id: ModelProfile(context_limit=limit)
        for model_id, limit in MODEL_CONTEXT_LIMITS.items()
    }


class ContextConfig(BaseModel):
    """
    Context management configuration.

    Defaults:
    - default_context_limit: 4096 - Limit for models missing from profiles
    - summarize_threshold: 0.7 - Compress history above 70% of the limit
    - near_limit_threshold: 0.9 - Report "nearly full" above 90%
    - min_recent_messages: 6 - Messages kept verbatim when compressing
    - chars_per_token: 3.5 - Character heuristic for token estimation
    - message_overhead_tokens: 4 - Extra tokens counted per message
    """
    model_config = ConfigDict(frozen=True)

    default_context_limit: int = Field(default=DEFAULT_CONTEXT_LIMIT, gt=0)
    summarize_threshold: float = Field(default=SUMMARIZE_THRESHOLD, gt=0, le=1)
    near_limit_threshold: float = Field(default=NEAR_LIMIT_THRESHOLD, gt=0, le=1)
    min_recent_messages: int = Field(default=MIN_RECENT_MESSAGES, ge=1)
    chars_per_token: float = Field(default=CHARS_PER_TOKEN, gt=0)
    message_overhead_tokens: int = Field(default=MESSAGE_OVERHEAD_TOKENS, ge=0)
    profiles: Dict[str, ModelProfile] = Field(default_factory=_default_profiles)

    def get_context_limit(self, model_id: Optional[str]) -> int:
        """Get the context limit for a model, falling back to the default."""
        profile = self.profiles.get(model_id) if model_id else None
        if profile is None:
            return self.default_context_limit
        return profile.context_limit

    def resolve(self, model_id: Optional[str]) -> ResolvedProfile:
        """
        Resolve the effective profile for a model.

        Args:
            model_id: Model identifier (unknown ids get the default limit)

        Returns:
            ResolvedProfile with per-model overrides applied
        """
        profile = self.profiles.get(model_id) if model_id else None
        if profile is None:
            return ResolvedProfile(
                model_id=model_id,
                context_limit=self.default_context_limit,
                summarize_threshold=self.summarize_threshold,
                near_limit_threshold=self.near_limit_threshold,
                min_recent_messages=self.min_recent_messages,
            )

        return ResolvedProfile(
            model_id=model_id,
            context_limit=profile.context_limit,
            summarize_threshold=_pick(profile.summarize_threshold, self.summarize_threshold),
            near_limit_threshold=_pick(profile.near_limit_threshold, self.near_limit_threshold),
            min_recent_messages=_pick(profile.min_recent_messages, self.min_recent_messages),
        )

    def with_limits(self, limits: Mapping[str, int]) -> 'ContextConfig':
        """Return a copy with additional or overridden model context limits."""
        profiles = dict(self.profiles)
        for model_id, limit in limits.items():
            existing = profiles.get(model_id)
            if existing is not None:
                profiles[model_id] = ModelProfile.model_validate(
                    {**existing.model_dump(), 'context_limit': limit}
                )
            else:
                profiles[model_id] = ModelProfile(context_limit=limit)
        return self.model_copy(update={'profiles': profiles})


def _pick(value, default):
    return default if value is None else value


DEFAULT_CONFIG = ContextConfig()


def get_context_limit(model_id: Optional[str], config: Optional[ContextConfig] = None) -> int:
    """
    Get the context limit for a model.

    Args:
        model_id: Model identifier
        config: Configuration to use (defaults to DEFAULT_CONFIG)

    Returns:
        Token limit, DEFAULT_CONTEXT_LIMIT for unknown models
    """
    return (config or DEFAULT_CONFIG).get_context_limit(model_id)
