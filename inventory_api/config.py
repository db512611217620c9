import logging
import os
from functools import lru_cache

from pydantic import BaseModel


class Settings(BaseModel):
    database_url: str = "mongodb://localhost:27017"
    database_name: str = "inventory"
    jwt_secret: str = "dev-secret-change"
    jwt_algorithm: str = "HS256"
    token_expire_minutes: int = 60 * 24  # 1 day
    auth_header: str = "auth"
    log_level: str = "INFO"


@lru_cache
def get_settings() -> Settings:
    env = {
        "database_url": os.getenv("DATABASE_URL"),
        "database_name": os.getenv("DATABASE_NAME"),
        "jwt_secret": os.getenv("JWT_SECRET"),
        "token_expire_minutes": os.getenv("TOKEN_EXPIRE_MINUTES"),
        "auth_header": os.getenv("AUTH_HEADER"),
        "log_level": os.getenv("LOG_LEVEL"),
    }
    return Settings(**{k: v for k, v in env.items() if v is not None})


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
