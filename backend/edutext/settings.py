from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field

class Settings(BaseSettings):
	# Provider A: Google Gemini
	gemini_api_key: str | None = Field(default=None, validation_alias="GEMINI_API_KEY")
	# Provider can be "vertex" (Vertex AI Express) or "ai_studio" (Generative Language API)
	gemini_provider: str = Field(default="ai_studio", validation_alias="GEMINI_PROVIDER")
	gemini_model: str = Field(default="gemini-1.5-pro", validation_alias="GEMINI_MODEL")
	vertex_region: str = Field(default="us-central1", validation_alias="GEMINI_VERTEX_REGION")
	vertex_project: str | None = Field(default=None, validation_alias="GEMINI_VERTEX_PROJECT")

	# Provider B: Anthropic Claude (Messages API)
	claude_api_key: str | None = Field(default=None, validation_alias="CLAUDE_API_KEY")
	claude_model: str = Field(default="claude-3-5-sonnet-20241022", validation_alias="CLAUDE_MODEL")
	claude_base_url: str = Field(default="https://api.anthropic.com/v1/messages", validation_alias="CLAUDE_BASE_URL")
	claude_api_version: str = Field(default="2023-06-01", validation_alias="CLAUDE_API_VERSION")

	# Generation parameters shared by both backends
	temperature: float = Field(default=0.7, validation_alias="EDUTEXT_TEMPERATURE")
	top_p: float = Field(default=0.8, validation_alias="EDUTEXT_TOP_P")
	top_k: int = Field(default=40, validation_alias="EDUTEXT_TOP_K")
	max_output_tokens: int = Field(default=4096, validation_alias="EDUTEXT_MAX_OUTPUT_TOKENS")
	# Seconds; aborts the in-flight backend call
	request_timeout: float = Field(default=60.0, validation_alias="EDUTEXT_REQUEST_TIMEOUT")

	# Database (usage log sink)
	database_url: str | None = Field(default=None, validation_alias="DATABASE_URL")
	# Usage rows older than this are purged at startup; 0 keeps everything
	usage_retention_days: int = Field(default=90, validation_alias="EDUTEXT_USAGE_RETENTION_DAYS")

	cors_origins: list[str] = Field(
		default=["http://localhost:3000", "http://localhost:5173"],
		validation_alias="EDUTEXT_CORS_ORIGINS",
	)
	log_level: str = Field(default="INFO", validation_alias="EDUTEXT_LOG_LEVEL")

	# pydantic-settings v2 style config
	model_config = SettingsConfigDict(env_file=".env", extra="ignore")

settings = Settings()
