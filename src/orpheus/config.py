"""
Configuration management for the Orpheus backend
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="ORPHEUS_",
        case_sensitive=False,
        extra="ignore",
    )

    # OpenAI
    openai_api_key: str | None = None
    text_model: str = "gpt-4-turbo-preview"
    image_model: str = "dall-e-3"
    image_size: str = "1024x1024"
    image_quality: str = "standard"
    image_style: str = "natural"
    speech_model: str = "gpt-4o-mini-tts"
    speech_voice: str = "echo"
    speech_instructions: str = (
        "Speak in a engaging and positive, yet professsional tone "
        "that is appealing to an academic audience."
    )

    # Token budgets for the language-model calls
    concept_max_tokens: int = 150
    prompt_max_tokens: int = 200
    script_max_tokens: int = 3000

    # Speech service input ceiling
    script_max_chars: int = 8000

    # Supabase (object storage + record store)
    supabase_url: str | None = None
    supabase_key: str | None = None
    storage_bucket: str = "podcasts"
    artifacts_table: str = "podcasts"
    image_proxy_url: str | None = None
    # Hosts the image proxy may fetch from; "*." entries match any subdomain
    image_proxy_allowed_hosts: list[str] = ["oaidalleapiprodscus.blob.core.windows.net"]

    # Upload retry policy (shared by cover and audio uploads)
    upload_max_attempts: int = 3
    upload_retry_base_delay: float = 1.0  # seconds, multiplied by the attempt number

    # None keeps the HTTP client's own default
    http_timeout: float | None = None

    # API Settings
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    cors_origins: list[str] = ["http://localhost:5173"]

    debug: bool = True

    def resolved_proxy_url(self) -> str | None:
        """Image proxy endpoint, defaulting to the Supabase edge function."""
        if self.image_proxy_url:
            return self.image_proxy_url
        if self.supabase_url:
            return f"{self.supabase_url.rstrip('/')}/functions/v1/fetch-image"
        return None


# Global settings instance
settings = Settings()
