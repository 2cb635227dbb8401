import os
from pydantic import BaseModel
from dotenv import load_dotenv

load_dotenv()

_DEFAULT_CONTENT_DIR = os.path.join(os.path.dirname(__file__), "content")

class Settings(BaseModel):
    immersive_url: str = os.getenv("IMMERSIVE_URL", "")
    content_dir: str = os.getenv("CONTENT_DIR", _DEFAULT_CONTENT_DIR)
    content_base_url: str | None = os.getenv("CONTENT_BASE_URL")
    content_timeout: float = float(os.getenv("CONTENT_TIMEOUT", "5.0"))
    default_locale: str = os.getenv("DEFAULT_LOCALE", "en-US")
    max_questions_per_quiz: int = int(os.getenv("MAX_QUESTIONS_PER_QUIZ", "10"))
    ssml_break_time: int = int(os.getenv("SSML_BREAK_TIME", "750"))
    log_level: str = os.getenv("LOG_LEVEL", "DEBUG")
    enable_debug: bool = os.getenv("ENABLE_DEBUG", "false").lower() == "true"

settings = Settings()
