import os

from dotenv import load_dotenv
from pydantic import BaseModel


class Settings(BaseModel):
    mongodb_uri: str = "mongodb://localhost:27017"
    db_name: str = "test"
    jwt_secret_key: str
    host: str = "0.0.0.0"
    port: int = 5000
    log_level: str = "INFO"


def load_settings() -> Settings:
    """Read settings from the environment (and a local .env file, if any)."""
    load_dotenv()

    secret = os.getenv("JWT_SECRET_KEY")
    if not secret:
        raise RuntimeError("JWT_SECRET_KEY is not set")

    return Settings(
        mongodb_uri=os.getenv("MONGODB_URI", "mongodb://localhost:27017"),
        db_name=os.getenv("DB_NAME", "test"),
        jwt_secret_key=secret,
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", 5000)),
        log_level=os.getenv("LOG_LEVEL", "INFO"),
    )
