# lecturequiz/web/routes/quiz_api.py
from __future__ import annotations

import logging
from typing import Any, Dict

from fastapi import APIRouter, Body, File, Request, UploadFile
from fastapi.responses import JSONResponse

import config
from lecturequiz.constants import (
    DEFAULT_DIFFICULTY,
    DEFAULT_NUM_QUESTIONS,
    DEFAULT_QUESTION_TYPE,
    ERR_UNEXPECTED,
)
from lecturequiz.services.documents import DocumentError, extract_text
from lecturequiz.services.explain_gen import generate_explanation
from lecturequiz.services.llm import LLMError
from lecturequiz.services.quiz_gen import QuizGenerationError, QuizInputError, create_quiz
from lecturequiz.services.scoring import tier_message
from lecturequiz.services.session import AlreadyAnsweredError, QuizStateError
from lecturequiz.web.core.deps import get_llm, quiz_session
from lecturequiz.web.core.ratelimit import limiter

log = logging.getLogger("LectureQuiz")

router = APIRouter(prefix="/api/quiz", tags=["quiz"])


def _error(msg: str, status_code: int) -> JSONResponse:
    return JSONResponse({"error": msg}, status_code=status_code)


def _int_field(payload: Dict[str, Any], key: str) -> int:
    v = payload.get(key)
    if isinstance(v, bool) or not isinstance(v, int):
        raise QuizStateError(f"{key} must be an integer")
    return v


def _state(request: Request) -> Dict[str, Any]:
    s = quiz_session(request)
    out = s.to_dict()
    out["feedback"] = tier_message(out["score"]["tier"])
    return out


@router.get("")
async def get_quiz(request: Request):
    s = quiz_session(request)
    if not s.has_quiz:
        return _error("No quiz yet.", 404)
    return JSONResponse({"ok": True, **_state(request)})


@router.post("/generate")
@limiter.limit("10/minute")
async def generate(request: Request, payload: Dict[str, Any] = Body(...)):
    s = quiz_session(request)

    try:
        quiz = await create_quiz(
            get_llm(request),
            lecture_text=str(payload.get("lecture_text") or ""),
            num_questions=payload.get("num_questions", DEFAULT_NUM_QUESTIONS),
            difficulty=str(payload.get("difficulty") or DEFAULT_DIFFICULTY),
            question_type=str(payload.get("question_type") or DEFAULT_QUESTION_TYPE),
        )
    except QuizInputError as e:
        return _error(str(e), 400)
    except QuizGenerationError as e:
        return _error(str(e), 422)
    except LLMError as e:
        log.error("Quiz generation failed: %s", e)
        return _error(ERR_UNEXPECTED, 502)
    except Exception:
        log.exception("Quiz generation crashed")
        return _error(ERR_UNEXPECTED, 500)

    s.load_quiz(quiz)
    log.info("Quiz ready | questions=%d | summary=%s", len(quiz.questions), bool(quiz.summary))
    return JSONResponse({"ok": True, **_state(request)})


@router.post("/upload")
@limiter.limit("10/minute")
async def upload(request: Request, file: UploadFile = File(...)):
    fname = (file.filename or "").strip()
    # read at most one byte past the cap
    data = await file.read(config.MAX_UPLOAD_BYTES + 1)

    try:
        text = extract_text(fname, data)
    except DocumentError as e:
        return _error(str(e), 400)

    if len(text) < config.MIN_LECTURE_CHARS:
        return _error(
            "The document has too little selectable text (maybe scanned images).", 400
        )

    return JSONResponse({"ok": True, "filename": fname, "chars": len(text), "text": text})


@router.post("/answer")
async def answer(request: Request, payload: Dict[str, Any] = Body(...)):
    s = quiz_session(request)
    if not s.has_quiz:
        return _error("No quiz yet.", 404)

    try:
        outcome = s.record_answer(
            _int_field(payload, "question_index"),
            _int_field(payload, "option_index"),
        )
    except AlreadyAnsweredError as e:
        return _error(str(e), 409)
    except QuizStateError as e:
        return _error(str(e), 400)

    snap = outcome.snapshot
    return JSONResponse(
        {
            "ok": True,
            "question_index": outcome.question_index,
            "option_index": outcome.option_index,
            "is_correct": outcome.is_correct,
            "correct_index": outcome.correct_index,
            "score": snap.to_dict(),
            "feedback": tier_message(snap.tier),
        }
    )


@router.post("/explain")
@limiter.limit("20/minute")
async def explain(request: Request, payload: Dict[str, Any] = Body(...)):
    s = quiz_session(request)
    if not s.has_quiz:
        return _error("No quiz yet.", 404)

    try:
        qi = _int_field(payload, "question_index")
    except QuizStateError as e:
        return _error(str(e), 400)

    if not (0 <= qi < len(s.quiz.questions)):
        return _error(f"Unknown question index {qi}.", 400)

    cached = s.explanations.get(qi)
    if cached:
        return JSONResponse({"ok": True, "question_index": qi, "explanation": cached, "cached": True})

    quiz = s.quiz
    q = quiz.questions[qi]
    try:
        text = await generate_explanation(get_llm(request), q.question, q.correct_answer or "")
    except LLMError as e:
        log.error("Explanation failed: %s", e)
        return _error("Could not generate an explanation. Please try again later.", 502)
    except Exception:
        log.exception("Explanation crashed")
        return _error("Could not generate an explanation. Please try again later.", 500)

    # the quiz may have been replaced while waiting on the model
    if s.quiz is quiz:
        s.explanations[qi] = text
    return JSONResponse({"ok": True, "question_index": qi, "explanation": text, "cached": False})


@router.post("/retry")
async def retry(request: Request):
    s = quiz_session(request)
    try:
        s.reset_attempt()
    except QuizStateError as e:
        return _error(str(e), 404)
    return JSONResponse({"ok": True, **_state(request)})


@router.post("/reset")
async def reset(request: Request):
    quiz_session(request).clear()
    return JSONResponse({"ok": True})
