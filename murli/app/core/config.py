from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Allowed browser origins
    CORS_ORIGINS: list[str] = ["http://localhost:3000"]
    LOG_LEVEL: str = "INFO"

    # Upstream translation provider (public gtx endpoint, no key)
    TRANSLATE_BASE_URL: str = "https://translate.googleapis.com/translate_a/single"
    TRANSLATE_TIMEOUT_SECONDS: float = 10.0
    TRANSLATE_MAX_RETRIES: int = 4
    TRANSLATE_BASE_DELAY_MS: int = 500
    TRANSLATE_MAX_DELAY_MS: int = 30000
    TRANSLATE_DEBUG: bool = True

    # In-memory result cache
    CACHE_MAX_ENTRIES: int = 500

    # Murli content store (Supabase REST)
    SUPABASE_URL: str = ""
    SUPABASE_SERVICE_ROLE_KEY: str = ""
    ADMIN_TOKEN: str = ""

    # Admin token brute-force guard
    ADMIN_MAX_ATTEMPTS: int = 5
    ADMIN_WINDOW_SECONDS: int = 60


settings = Settings()
