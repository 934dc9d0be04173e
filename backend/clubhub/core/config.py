from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=None, extra="ignore")

    ENV: str = "prod"
    LOG_LEVEL: str = "INFO"

    DATABASE_URL: str

    JWT_SECRET: str
    JWT_REFRESH_SECRET: str | None = None
    JWT_ACCESS_MINUTES: int = 15
    JWT_REFRESH_DAYS: int = 7

    EMAIL_VERIFICATION_TTL_HOURS: int = 24
    PASSWORD_RESET_TTL_MINUTES: int = 60
    TOKEN_RETENTION_DAYS: int = 30

    DB_POOL_SIZE: int = 5
    DB_MAX_OVERFLOW: int = 5
    DB_POOL_TIMEOUT_SECONDS: int = 30
    DB_POOL_RECYCLE_SECONDS: int = 1800

    ALLOWED_HOSTS: str = "localhost,127.0.0.1"
    CORS_ORIGINS: str = "http://localhost:4200"
    SECURITY_HEADERS_ENABLED: bool = True

    # Outbound mail (links only, delivery is logged)
    FRONTEND_BASE_URL: str = "http://localhost:4200"
    MAIL_FROM: str = "no-reply@clubhub.local"

    TRENDING_DEFAULT_LIMIT: int = 3
    TRENDING_MAX_LIMIT: int = 50

    @property
    def refresh_secret(self) -> str:
        return self.JWT_REFRESH_SECRET or self.JWT_SECRET

settings = Settings()
