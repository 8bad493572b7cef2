from pydantic import Field
from pydantic_settings import BaseSettings


class Config(BaseSettings):
    """Application configuration loaded from environment variables."""

    database_url: str  # MongoDB URL including the database name, e.g. mongodb://localhost/sessiongate
    host: str = "127.0.0.1"
    port: int = 8000
    debug: bool = False
    cors_origins: list[str] = []
    session_ttl_seconds: int = Field(default=24 * 60 * 60, gt=0)  # Sessions expire this long after issuance
    token_entropy_bytes: int = Field(default=24, ge=24)  # Random bytes drawn per id and per secret
    cookie_name: str = "session_token"
    cookie_secure: bool = True  # Disable only for plain-HTTP local development

    model_config = {
        "env_file": [".env"],
        "env_prefix": "SESSIONGATE_",
        "extra": "ignore",
    }
