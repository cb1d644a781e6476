from __future__ import annotations

from typing import Any, Dict, Optional


class EduTextError(Exception):
	code = "EduTextError"
	status_code = 500

	def __init__(self, message: str) -> None:
		super().__init__(message)
		self.message = message

	def to_dict(self) -> Dict[str, Any]:
		return {"success": False, "error": self.code, "message": self.message}


class ValidationError(EduTextError):
	"""A request field is missing or malformed. Never retried."""

	code = "ValidationError"
	status_code = 400


class ProviderError(EduTextError):
	"""A backend call failed (network, auth, quota)."""

	code = "ProviderError"
	status_code = 502

	def __init__(self, provider: Optional[str], message: str) -> None:
		super().__init__(message)
		self.provider = provider


class UnsupportedProviderError(ValidationError, ProviderError):
	code = "UnsupportedProvider"
	status_code = 400

	def __init__(self, provider: Any) -> None:
		ProviderError.__init__(self, str(provider), f"Unsupported AI provider: {provider!r}")


class GenerationError(EduTextError):
	code = "GenerationError"
	status_code = 500

	def __init__(self, provider: str, message: str) -> None:
		super().__init__(f"{provider} content generation failed: {message}")
		self.provider = provider
		self.cause_message = message
