from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field

class Settings(BaseSettings):
	anthropic_api_key: str | None = Field(default=None, validation_alias="ANTHROPIC_API_KEY")
	# Model used for every Claude call unless a router overrides it
	anthropic_model: str = Field(default="claude-3-5-haiku-20241022", validation_alias="ANTHROPIC_MODEL")
	anthropic_base_url: str = Field(default="https://api.anthropic.com/v1/messages", validation_alias="ANTHROPIC_BASE_URL")
	anthropic_version: str = Field(default="2023-06-01", validation_alias="ANTHROPIC_VERSION")

	# Upstream resilience: attempts include the first call; delay is base * 2**attempt
	llm_timeout_seconds: float = Field(default=30.0, validation_alias="LLM_TIMEOUT_SECONDS")
	llm_max_attempts: int = Field(default=3, validation_alias="LLM_MAX_ATTEMPTS")
	llm_retry_base_delay: float = Field(default=1.0, validation_alias="LLM_RETRY_BASE_DELAY")

	# Keystroke analysis
	keystroke_window_seconds: float = Field(default=45.0, validation_alias="KEYSTROKE_WINDOW_SECONDS")
	keystroke_pause_threshold_ms: int = Field(default=2000, validation_alias="KEYSTROKE_PAUSE_THRESHOLD_MS")
	keystroke_burst_threshold_ms: int = Field(default=100, validation_alias="KEYSTROKE_BURST_THRESHOLD_MS")
	keystroke_max_buffer: int = Field(default=2000, validation_alias="KEYSTROKE_MAX_BUFFER")

	# Database
	database_url: str | None = Field(default=None, validation_alias="DATABASE_URL")
	submission_retention_days: int = Field(default=7, validation_alias="SUBMISSION_RETENTION_DAYS")

	log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")

	# pydantic-settings v2 style config
	model_config = SettingsConfigDict(env_file=".env", extra="ignore")

settings = Settings()
