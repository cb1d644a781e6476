from __future__ import annotations
import httpx
from typing import Any, Dict, Optional
from .gemini_client import BackendOutput
from .settings import Settings, settings as default_settings


class ClaudeClient:
	def __init__(
		self,
		api_key: Optional[str] = None,
		*,
		config: Optional[Settings] = None,
		base_url: Optional[str] = None,
		model: Optional[str] = None,
		client: Optional[httpx.AsyncClient] = None,
	) -> None:
		config = config or default_settings
		self.api_key = api_key or config.claude_api_key
		if not self.api_key:
			raise ValueError("CLAUDE_API_KEY is not configured")
		self.model = model or config.claude_model
		self.base_url = base_url or config.claude_base_url
		self._headers = {
			"x-api-key": self.api_key,
			"anthropic-version": config.claude_api_version,
			"content-type": "application/json",
		}
		self._params: Dict[str, Any] = {
			"max_tokens": config.max_output_tokens,
			"temperature": config.temperature,
			"top_p": config.top_p,
			"top_k": config.top_k,
		}
		self._client = client or httpx.AsyncClient(timeout=config.request_timeout)

	async def generate(self, prompt: str) -> BackendOutput:
		payload: Dict[str, Any] = {
			"model": self.model,
			"messages": [{"role": "user", "content": prompt}],
			**self._params,
		}
		r = await self._client.post(self.base_url, headers=self._headers, json=payload)
		r.raise_for_status()
		try:
			data = r.json()
			# Messages API returns a list of content blocks; keep the text ones
			blocks = data["content"]
			text = "".join(b.get("text", "") for b in blocks if b.get("type") == "text")
		except (ValueError, KeyError, TypeError, AttributeError):
			raise RuntimeError(f"Unexpected Claude response: {r.text[:500]}")
		usage = (data.get("usage") or {}).get("output_tokens")
		return BackendOutput(text=text, usage=usage if isinstance(usage, int) and usage >= 0 else None)

	async def aclose(self) -> None:
		await self._client.aclose()
