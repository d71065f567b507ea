from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite:///./peer_reads.db"
    JWT_SECRET: str = "change-me-super-secret"
    JWT_EXPIRATION_MINUTES: int = 60 * 24
    LOG_LEVEL: str = "INFO"
    SLOW_REQUEST_THRESHOLD_MS: int = 1000
    SEED_DEMO_DATA: bool = False
    DEFAULT_LOAN_DAYS: int = 30

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


settings = Settings()
