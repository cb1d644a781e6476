from __future__ import annotations
import httpx
from dataclasses import dataclass
from typing import Any, Dict, Optional
from .settings import Settings, settings as default_settings


@dataclass(frozen=True)
class BackendOutput:
	text: str
	# Backend-reported output tokens, when the API returns them
	usage: Optional[int] = None


class GeminiClient:
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
		self.api_key = api_key or config.gemini_api_key
		if not self.api_key:
			raise ValueError("GEMINI_API_KEY is not configured")
		self.model = model or config.gemini_model
		self.provider = config.gemini_provider
		if self.provider == "vertex":
			region = config.vertex_region
			project = config.vertex_project
			if not project:
				raise ValueError("GEMINI_VERTEX_PROJECT is required for the vertex provider")
			# Vertex AI Generative REST endpoint (API key via header)
			self.base_url = base_url or (
				f"https://{region}-aiplatform.googleapis.com/v1/projects/{project}/locations/{region}/publishers/google/models/{self.model}:generateContent"
			)
			self._auth_in_query = False
		else:
			# Google AI Studio (Generative Language API)
			self.base_url = base_url or f"https://generativelanguage.googleapis.com/v1beta/models/{self.model}:generateContent"
			self._auth_in_query = True
		self._generation_config: Dict[str, Any] = {
			"temperature": config.temperature,
			"topP": config.top_p,
			"topK": config.top_k,
			"maxOutputTokens": config.max_output_tokens,
		}
		self._client = client or httpx.AsyncClient(timeout=config.request_timeout)

	async def generate(self, prompt: str) -> BackendOutput:
		payload: Dict[str, Any] = {
			"contents": [{"role": "user", "parts": [{"text": prompt}]}],
			"generationConfig": self._generation_config,
		}
		params: Dict[str, Any] = {}
		headers: Dict[str, str] = {}
		if self._auth_in_query:
			params["key"] = self.api_key
		else:
			headers["x-goog-api-key"] = self.api_key
		r = await self._client.post(self.base_url, params=params, headers=headers, json=payload)
		r.raise_for_status()
		try:
			data = r.json()
			text = data["candidates"][0]["content"]["parts"][0]["text"]
		except (ValueError, KeyError, IndexError, TypeError):
			raise RuntimeError(f"Unexpected Gemini response: {r.text[:500]}")
		usage = (data.get("usageMetadata") or {}).get("candidatesTokenCount")
		return BackendOutput(text=text, usage=usage if isinstance(usage, int) and usage >= 0 else None)

	async def aclose(self) -> None:
		await self._client.aclose()
