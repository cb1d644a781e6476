from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional

from .catalog import (
    ContentType,
    Difficulty,
    Provider,
    TargetAge,
    coerce_content_type,
    coerce_difficulty,
    coerce_target_age,
)
from .errors import UnsupportedProviderError, ValidationError

DEFAULT_CONTENT_LENGTH = 500


def parse_provider(value: Any) -> Provider:
    if isinstance(value, Provider):
        return value
    if isinstance(value, str):
        try:
            return Provider(value.strip().lower())
        except ValueError:
            pass
    raise UnsupportedProviderError(value)


def _pick(payload: Mapping[str, Any], camel: str, snake: str, default: Any = None) -> Any:
    if camel in payload:
        return payload[camel]
    return payload.get(snake, default)


@dataclass(frozen=True)
class GenerationRequest:
    provider: Provider
    prompt: str
    content_type: ContentType = ContentType.VOCABULARY
    difficulty: Difficulty = Difficulty.INTERMEDIATE
    target_age: TargetAge = TargetAge.ADULT
    content_length: int = DEFAULT_CONTENT_LENGTH
    user_id: Optional[str] = None

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "GenerationRequest":
        """Build a request from a wire payload (camelCase or snake_case keys).

        The prompt and provider are strict; content type, difficulty and target
        age fall back to their defaults when unrecognized.
        """
        prompt = payload.get("prompt")
        if not isinstance(prompt, str) or not prompt.strip():
            raise ValidationError("prompt is required")
        provider = parse_provider(payload.get("provider", Provider.GEMINI.value))

        raw_length = _pick(payload, "contentLength", "content_length", DEFAULT_CONTENT_LENGTH)
        if raw_length is None:
            raw_length = DEFAULT_CONTENT_LENGTH
        if isinstance(raw_length, bool) or not isinstance(raw_length, int) or raw_length <= 0:
            raise ValidationError("contentLength must be a positive integer")

        user_id = _pick(payload, "userId", "user_id")
        return cls(
            provider=provider,
            prompt=prompt,
            content_type=coerce_content_type(_pick(payload, "contentType", "content_type")),
            difficulty=coerce_difficulty(payload.get("difficulty")),
            target_age=coerce_target_age(_pick(payload, "targetAge", "target_age")),
            content_length=raw_length,
            user_id=str(user_id) if user_id is not None else None,
        )


@dataclass(frozen=True)
class ProviderReply:
    text: str
    provider: Provider
    # Backend-reported usage; None means the normalizer estimates it
    tokens_used: Optional[int] = None
    mock: bool = False


@dataclass
class GenerationResult:
    content: Dict[str, Any]
    provider: str
    timestamp: str
    tokens_used: int
    success: bool = True
    mock: bool = field(default=False, repr=False)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "content": self.content,
            "provider": self.provider,
            "timestamp": self.timestamp,
            "tokensUsed": self.tokens_used,
        }
