from pydantic_settings import BaseSettings

# Used only when MEETMOGGER_JWT_SECRET is not set; never deploy with it.
DEV_JWT_SECRET = "meetmogger-dev-secret-change-this-in-production"


class Config(BaseSettings):
    """Application configuration loaded from environment variables."""

    database_url: str  # e.g. mongodb://localhost:27017/meetmogger
    host: str = "0.0.0.0"  # noqa: S104
    port: int = 3001
    debug: bool = False
    jwt_secret: str = DEV_JWT_SECRET
    bcrypt_rounds: int = 12
    database_timeout_ms: int = 10_000  # Per-operation MongoDB timeout (timeoutMS)
    database_max_pool_size: int = 10
    cors_origins: list[str] = []
    llm_model: str = "gemini/gemini-1.5-flash"
    llm_api_key: str = ""
    llm_timeout: float = 60.0  # Seconds
    analysis_max_transcript_chars: int = 100_000

    model_config = {
        "env_file": [".env"],
        "env_prefix": "MEETMOGGER_",
        "extra": "ignore",
    }

    @property
    def uses_insecure_jwt_secret(self) -> bool:
        return self.jwt_secret == DEV_JWT_SECRET
