from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings

HMAC_ALGORITHMS = ("HS256", "HS384", "HS512")


class Settings(BaseSettings):
    DB_HOST: str = "localhost"
    DB_PORT: int = 5432
    DB_USER: str = "postgres"
    DB_PASSWORD: str = "example"
    DB_NAME: str = "mingle_db"
    # Full DSN; takes precedence over the DB_* parts when set.
    DATABASE_URL: str | None = None

    JWT_SECRET: str = "change-me-in-production"
    JWT_ALGORITHM: str = "HS256"
    TOKEN_TTL_DAYS: int = 120
    BCRYPT_ROUNDS: int = 12

    HOST: str = "0.0.0.0"
    PORT: int = 8080
    APP_ENV: str = "development"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    CORS_ORIGINS: list[str] = ["*"]

    # Create missing tables on startup instead of running alembic.
    AUTO_CREATE_SCHEMA: bool = False

    model_config = {"env_file": ".env", "extra": "ignore"}

    @field_validator("JWT_ALGORITHM")
    @classmethod
    def validate_jwt_algorithm(cls, value: str) -> str:
        value = value.upper()
        if value not in HMAC_ALGORITHMS:
            raise ValueError(f"JWT_ALGORITHM must be one of {', '.join(HMAC_ALGORITHMS)}")
        return value

    @field_validator("TOKEN_TTL_DAYS", "BCRYPT_ROUNDS")
    @classmethod
    def validate_positive(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("Value must be greater than 0.")
        return value

    @property
    def database_dsn(self) -> str:
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return (
            f"postgresql+asyncpg://{self.DB_USER}:{self.DB_PASSWORD}"
            f"@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
