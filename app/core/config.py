from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    DATABASE_URL: str = "sqlite:///./behavior_insights.db"
    APP_ENV: str = "development"
    LOG_LEVEL: str = "INFO"

    # Comma-separated allowed origins, or "*" to allow all.
    # Example: "https://myapp.com,https://api.myapp.com"
    CORS_ORIGINS: str = "*"

    # Insight policy defaults (see app/services/insight_policy.py)
    INSIGHT_TOP_STRATEGIES: int = 3
    INSIGHT_TOP_STRESSORS: int = 3
    INSIGHT_MIN_AFFECTED_CHILDREN: int = 2
    INSIGHT_MIN_PATTERN_FREQUENCY: int = 3
    INSIGHT_WEIGHT_HIGH: float = 6.0
    INSIGHT_WEIGHT_MEDIUM: float = 3.0
    INSIGHT_MAX_RECORDS: int = 50_000

    @property
    def cors_origins_list(self) -> list[str]:
        if self.CORS_ORIGINS.strip() == "*":
            return ["*"]
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]


settings = Settings()
