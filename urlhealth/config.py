import os
from dotenv import load_dotenv

load_dotenv()

__version__ = "0.1.0"


def _default_workers() -> int:
    return os.cpu_count() or 4


class Settings:
    WORKERS: int = int(os.getenv("URLHEALTH_WORKERS") or _default_workers())
    TIMEOUT_SECONDS: int = int(os.getenv("URLHEALTH_TIMEOUT_SECONDS", 5))
    RETRIES: int = int(os.getenv("URLHEALTH_RETRIES", 3))
    OUTPUT_PATH: str = os.getenv("URLHEALTH_OUTPUT_PATH", "status.json")
    LOG_LEVEL: str = os.getenv("URLHEALTH_LOG_LEVEL", "INFO").upper()
    USER_AGENT: str = os.getenv("URLHEALTH_USER_AGENT", f"urlhealth/{__version__}")


settings = Settings()
