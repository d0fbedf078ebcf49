"""Process-level configuration using Pydantic Settings."""

from pydantic_settings import BaseSettings, SettingsConfigDict

CLOUDFLARE_API_URL = "https://api.cloudflare.com/client/v4"


class Settings(BaseSettings):
    """Settings loaded from environment variables (and ``.env``).

    Plugin options passed in code take precedence; these values are the
    fallback used when an option is left unset.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Cloudflare credentials (CLOUDFLARE_ZONE_ID / CLOUDFLARE_API_TOKEN)
    cloudflare_zone_id: str = ""
    cloudflare_api_token: str = ""
    cloudflare_api_url: str = CLOUDFLARE_API_URL

    # Logging
    log_format: str = "json"  # 'json' or 'text'
    log_level: str = "INFO"
    service_name: str = "cloudflare-purge"


settings = Settings()
