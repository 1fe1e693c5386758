from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # --- Runtime ---
    ENV: str = "dev"  # dev|prod
    DOD_DB_URL: str = "sqlite+aiosqlite:///./dealgame.db"

    # --- Minimal admin auth (API key) ---
    # Send: X-API-Key: <key>
    API_KEY: str | None = None

    # --- Gameplay ---
    CASE_TIME_LIMIT_S: int = 300
    # Optional override for the packaged case catalog (JSON list of cases)
    CASES_PATH: str | None = None

    # --- Daily challenge scheduling ---
    TIMEZONE: str = "America/New_York"
    DAILY_CHALLENGE_CRON: str = "1 0 * * *"  # 12:01 AM every day
    SCHEDULER_ENABLED: bool = False

    # --- Scenario generator (Azure OpenAI) ---
    AZURE_OPENAI_API_KEY: str | None = None
    AZURE_OPENAI_ENDPOINT: str | None = None
    AZURE_OPENAI_DEPLOYMENT: str = "gpt-4"
    AZURE_OPENAI_API_VERSION: str = "2024-08-01-preview"
    AZURE_OPENAI_MAX_TOKENS: int = 16000

    # --- Score persistence client (used by game hosts such as scripts/play.py) ---
    GAME_API_BASE_URL: str = "http://localhost:8000/api"
    HTTP_TIMEOUT_S: float = 10.0
    HTTP_MAX_RETRIES: int = 3
    HTTP_BACKOFF_BASE_S: float = 0.5


settings = Settings()
