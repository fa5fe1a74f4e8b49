from __future__ import annotations

import logging
import os
import secrets

from fastapi import Request
from fastapi.templating import Jinja2Templates

import config
from lecturequiz.services.llm import build_llm_client
from lecturequiz.services.session import QuizSession, SessionRegistry
from lecturequiz.utils.logger_setup import bind_session

log = logging.getLogger("LectureQuiz")

# -----------------------------
# Settings / env
# -----------------------------
SESSION_SECRET = config.WEB_SESSION_SECRET
if not SESSION_SECRET:
    SESSION_SECRET = secrets.token_urlsafe(32)
    log.warning("WEB_SESSION_SECRET not set; using a random per-process secret.")

IS_PROD = config.IS_PROD

# -----------------------------
# Paths
# -----------------------------
CORE_DIR = os.path.dirname(os.path.abspath(__file__))
WEB_DIR = os.path.abspath(os.path.join(CORE_DIR, ".."))  # lecturequiz/web

TEMPLATES_DIR = os.getenv("TEMPLATES_DIR", os.path.join(WEB_DIR, "templates"))
STATIC_DIR = os.getenv("STATIC_DIR", os.path.join(WEB_DIR, "static"))

# -----------------------------
# Singletons
# -----------------------------
templates = Jinja2Templates(directory=TEMPLATES_DIR)

llm = build_llm_client(
    config.LLM_PROVIDER,
    openai_base_url=config.OPENAI_BASE_URL,
    default_model=config.DEFAULT_MODEL,
    openai_api_url=config.OPENAI_API_URL,
    openai_model=config.OPENAI_MODEL,
    openai_api_key=config.OPENAI_API_KEY,
    groq_base_url=config.GROQ_BASE_URL,
    groq_model=config.GROQ_MODEL,
    groq_api_key=config.GROQ_API_KEY,
)

sessions = SessionRegistry(max_sessions=1000)


# -----------------------------
# Session helpers
# -----------------------------
def sid(request: Request) -> str:
    s = request.session.get("sid")
    if s:
        bind_session(s)
        return s

    s = secrets.token_urlsafe(16)
    request.session["sid"] = s
    bind_session(s)
    log.debug("New browser session")
    return s


def quiz_session(request: Request) -> QuizSession:
    registry = getattr(request.app.state, "sessions", sessions)
    return registry.get(sid(request))


def get_llm(request: Request):
    return getattr(request.app.state, "llm", llm)
