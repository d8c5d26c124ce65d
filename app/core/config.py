from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=False, extra="ignore")

    app_name: str = "Tweet Sentiment API"
    # Value sent as Access-Control-Allow-Origin on every response.
    allowed_origin: str = "*"
    log_level: str = "INFO"

    # Cloudflare Workers AI credentials
    cloudflare_account_id: Optional[str] = None
    cloudflare_api_token: Optional[str] = None

    # Model gateway configuration
    ai_base_url: str = "https://api.cloudflare.com/client/v4"
    ai_model: str = "@cf/meta/llama-3.3-70b-instruct-fp8-fast"
    ai_timeout: float = 30.0


settings = Settings()
