import os
import logging
from pathlib import Path
from dotenv import load_dotenv

log = logging.getLogger("config")

BASE_DIR = Path(__file__).resolve().parent
ENV_PATH = BASE_DIR / ".env"

load_dotenv(dotenv_path=ENV_PATH, override=True)

LLM_PROVIDER = os.getenv("LLM_PROVIDER", "local").strip().lower()

# local OpenAI-compatible server (Ollama)
OPENAI_BASE_URL = os.getenv("OPENAI_BASE_URL", "http://localhost:11434/v1")
DEFAULT_MODEL = os.getenv("DEFAULT_MODEL", "qwen2.5:7b-instruct")

# remote OpenAI
OPENAI_API_URL = os.getenv("OPENAI_API_URL", "https://api.openai.com/v1")
OPENAI_MODEL = os.getenv("OPENAI_MODEL", "gpt-4.1-mini")
OPENAI_API_KEY = os.getenv("OPENAI_API_KEY", "")

GROQ_API_KEY = os.getenv("GROQ_API_KEY", "")
GROQ_BASE_URL = os.getenv("GROQ_BASE_URL", "https://api.groq.com/openai/v1")
GROQ_MODEL = os.getenv("GROQ_MODEL", "llama-3.1-8b-instant")

WEB_SESSION_SECRET = os.getenv("WEB_SESSION_SECRET", "")
ENV = os.getenv("ENV", "").strip().lower()
IS_PROD = ENV == "prod"
HOST = os.getenv("HOST", "127.0.0.1")
PORT = int(os.getenv("PORT", "8000"))

MIN_LECTURE_CHARS = int(os.getenv("MIN_LECTURE_CHARS", "50"))
MAX_UPLOAD_BYTES = int(os.getenv("MAX_UPLOAD_BYTES", str(8_000_000)))
MAX_QUESTIONS = int(os.getenv("MAX_QUESTIONS", "20"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").strip().upper()
LOG_DIR = os.getenv("LOG_DIR", "logs")

log.debug("BASE_DIR=%s", BASE_DIR)
log.debug("ENV_PATH=%s exists=%s", ENV_PATH, ENV_PATH.exists())
log.debug("LLM_PROVIDER=%s", LLM_PROVIDER)
log.debug("OPENAI_BASE_URL=%s", OPENAI_BASE_URL)
log.debug("DEFAULT_MODEL=%s", DEFAULT_MODEL)
log.debug("GROQ_MODEL=%s", GROQ_MODEL)
log.debug("SESSION_SECRET_LEN=%s", len(WEB_SESSION_SECRET or ""))
log.debug("MIN_LECTURE_CHARS=%s MAX_QUESTIONS=%s", MIN_LECTURE_CHARS, MAX_QUESTIONS)
