from __future__ import annotations

from fastapi import APIRouter, Request
from fastapi.responses import HTMLResponse

import config
from lecturequiz.constants import (
    AI_FOOTER,
    APP_NAME,
    DEFAULT_DIFFICULTY,
    DEFAULT_NUM_QUESTIONS,
    DEFAULT_QUESTION_TYPE,
    DIFFICULTIES,
    QUESTION_TYPES,
)

router = APIRouter()


@router.get("/", response_class=HTMLResponse)
def quiz_page(request: Request):
    templates = request.app.state.templates

    return templates.TemplateResponse(
        request,
        "quiz.html",
        {
            "app_name": APP_NAME,
            "footer": AI_FOOTER,
            "min_chars": config.MIN_LECTURE_CHARS,
            "max_questions": config.MAX_QUESTIONS,
            "difficulties": DIFFICULTIES,
            "question_types": QUESTION_TYPES,
            "default_num": DEFAULT_NUM_QUESTIONS,
            "default_difficulty": DEFAULT_DIFFICULTY,
            "default_type": DEFAULT_QUESTION_TYPE,
        },
    )


@router.get("/health")
def health():
    return {"ok": True}
