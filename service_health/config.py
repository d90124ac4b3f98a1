import os
from dotenv import load_dotenv

load_dotenv()


class Settings:
    SERVER_NAME: str = os.getenv("SERVER_NAME", "service-health-mcp")
    SERVER_VERSION: str = os.getenv("SERVER_VERSION", "0.1.0")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()
    API_KEY: str | None = os.getenv("API_KEY") or None


settings = Settings()
