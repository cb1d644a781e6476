from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Mapping, Optional

from .domain import GenerationRequest, GenerationResult
from .errors import GenerationError, ProviderError, ValidationError
from .normalizer import normalize, tokens_for
from .prompts import compile_prompt
from .providers import ProviderAdapter
from .usage import UsageLogger

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ContentOrchestrator:
    """Runs one request through compile -> invoke -> normalize -> usage log.

    Holds no per-request state, so one instance serves concurrent requests.
    """

    def __init__(
        self,
        adapter: ProviderAdapter,
        usage_logger: Optional[UsageLogger] = None,
        *,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.adapter = adapter
        self.usage_logger = usage_logger or UsageLogger()
        self._clock = clock

    async def generate(self, request: GenerationRequest) -> GenerationResult:
        if not isinstance(request.prompt, str) or not request.prompt.strip():
            raise ValidationError("prompt is required")

        prompt = compile_prompt(request)
        logger.debug("Compiled %s prompt (%d chars)", request.content_type, len(prompt))
        try:
            reply = await self.adapter.invoke(request.provider, prompt)
        except ValidationError:
            raise
        except ProviderError as exc:
            logger.warning("Generation failed for provider=%s: %s", exc.provider, exc.message)
            raise GenerationError(exc.provider or getattr(request.provider, "value", str(request.provider)), exc.message) from exc

        content = normalize(reply, request.content_type)
        tokens_used = tokens_for(reply)
        now = self._clock()
        self.usage_logger.record(
            request.user_id,
            reply.provider.value,
            len(request.prompt),
            tokens_used,
            now,
        )
        return GenerationResult(
            content=content,
            provider=reply.provider.value,
            timestamp=now.isoformat().replace("+00:00", "Z"),
            tokens_used=tokens_used,
            mock=reply.mock,
        )

    async def generate_from_payload(self, payload: Mapping[str, Any]) -> GenerationResult:
        return await self.generate(GenerationRequest.from_payload(payload))

    def check_provider_status(self) -> Dict[str, Dict[str, Any]]:
        return self.adapter.status()

    async def aclose(self) -> None:
        await self.usage_logger.drain()
        await self.adapter.aclose()
