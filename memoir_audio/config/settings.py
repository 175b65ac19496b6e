from typing import Optional

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class AssemblyAIConfig(BaseSettings):
    """AssemblyAI (primary speech-to-text) configuration."""

    api_key: SecretStr | None = None
    speech_model: str = "universal"
    language_code: Optional[str] = Field(
        default=None,
        description="Locale hint; language detection is used when unset.",
    )
    http_timeout_seconds: float = Field(default=60.0, gt=0)

    model_config = SettingsConfigDict(
        env_prefix="ASSEMBLYAI_",
        env_file=".env",
        secrets_dir=".secrets",
        case_sensitive=False,
        extra="ignore",
    )


class TranscribeConfig(BaseSettings):
    """Amazon Transcribe Streaming (secondary speech-to-text) configuration."""

    region: str = "us-east-1"
    language_code: str = "en-US"
    media_sample_rate_hz: int = 16000
    access_key: Optional[str] = None
    secret_key: Optional[str] = None

    model_config = SettingsConfigDict(
        env_prefix="TRANSCRIBE_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )


class BedrockConfig(BaseSettings):
    """Amazon Bedrock configuration."""

    region: str = Field(
        default="us-east-1",
        validation_alias="BEDROCK_REGION",
    )
    model_id: str = Field(
        default="amazon.nova-micro-v1:0",
        validation_alias="BEDROCK_MODEL_ID",
    )
    max_tokens: int = Field(
        default=3000,
        validation_alias="BEDROCK_MAX_TOKENS",
        ge=1,
        le=8192,
    )
    temperature: float = Field(
        default=0.3,
        validation_alias="BEDROCK_TEMPERATURE",
        ge=0.0,
        le=1.0,
    )
    top_p: float = Field(
        default=0.9,
        validation_alias="BEDROCK_TOP_P",
        ge=0.0,
        le=1.0,
    )
    read_timeout_seconds: int = Field(
        default=60,
        validation_alias="BEDROCK_READ_TIMEOUT",
        ge=1,
    )
    max_attempts: int = Field(
        default=3,
        validation_alias="BEDROCK_MAX_ATTEMPTS",
        ge=1,
        le=10,
    )
    api_key: SecretStr | None = Field(
        default=None,
        validation_alias="BEDROCK_API_KEY",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        secrets_dir=".secrets",
        case_sensitive=False,
        extra="ignore",
    )


class AuphonicConfig(BaseSettings):
    """Auphonic audio-enhancement configuration."""

    api_key: SecretStr | None = None
    base_url: str = "https://auphonic.com"
    cleaner_preset_id: Optional[str] = None
    cutter_preset_id: Optional[str] = None
    request_timeout_seconds: float = Field(default=60.0, gt=0)
    transport_retries: int = Field(default=2, ge=0, le=5)
    poll_interval_seconds: float = Field(default=5.0, ge=0)
    max_poll_attempts: int = Field(default=36, ge=1)

    model_config = SettingsConfigDict(
        env_prefix="AUPHONIC_",
        env_file=".env",
        secrets_dir=".secrets",
        case_sensitive=False,
        extra="ignore",
    )


class SecurityConfig(BaseSettings):
    """JWT and application security configuration."""

    jwt_secret_key: SecretStr = Field(
        default=SecretStr("change-me"),
        validation_alias="JWT_SECRET",
    )
    jwt_algorithm: str = Field(default="HS256", validation_alias="JWT_ALGORITHM")
    access_token_expires_minutes: int = Field(
        default=60,
        validation_alias="JWT_EXPIRATION_MINUTES",
        ge=1,
    )
    ai_consent_denied_users: list[str] = Field(
        default_factory=list,
        validation_alias="AI_CONSENT_DENIED_USERS",
    )

    model_config = SettingsConfigDict(
        env_prefix="",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )


class RateLimitConfig(BaseSettings):
    """Sliding-window limits applied before expensive work."""

    enabled: bool = True
    max_requests: int = Field(default=30, ge=1)
    window_seconds: float = Field(default=60.0, gt=0)

    model_config = SettingsConfigDict(
        env_prefix="RATE_LIMIT_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )


class PipelineConfig(BaseSettings):
    """Limits, timeouts and cost rates for the audio pipelines."""

    staging_dir: str = "tmp/audio"
    max_transcribe_bytes: int = 25 * 1024 * 1024
    max_clean_bytes: int = 100 * 1024 * 1024
    comparison_timeout_seconds: float = Field(default=60.0, gt=0)
    comparison_cleanup_timeout_seconds: float = Field(default=150.0, gt=0)
    llm_input_cost_per_million: float = 0.035
    llm_output_cost_per_million: float = 0.14

    model_config = SettingsConfigDict(
        env_prefix="PIPELINE_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )


class Settings(BaseSettings):
    """Application settings"""

    app_name: str = "Memoir Audio Backend"
    app_version: str = "1.0.0"
    debug: bool = False
    host: str = "0.0.0.0"
    port: int = 8000
    log_file: str = "logs/app.log"
    audio_log_file: str = "logs/audio_pipeline.log"
    transcript_log_file: str = "logs/transcripts.log"

    # Speech-to-text
    assemblyai: AssemblyAIConfig = Field(default_factory=AssemblyAIConfig)
    transcribe: TranscribeConfig = Field(default_factory=TranscribeConfig)

    # Bedrock
    bedrock: BedrockConfig = Field(default_factory=BedrockConfig)

    # Auphonic
    auphonic: AuphonicConfig = Field(default_factory=AuphonicConfig)

    # Security
    security: SecurityConfig = Field(default_factory=SecurityConfig)
    rate_limit: RateLimitConfig = Field(default_factory=RateLimitConfig)

    pipeline: PipelineConfig = Field(default_factory=PipelineConfig)

    # CORS
    cors_origins: list[str] = ["*"]
    cors_allow_credentials: bool = True
    cors_allow_methods: list[str] = ["*"]
    cors_allow_headers: list[str] = ["*"]

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )


# Global settings instance
settings = Settings()
