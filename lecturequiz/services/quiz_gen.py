from __future__ import annotations

import logging
import re
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

import config
from lecturequiz.constants import (
    DEFAULT_DIFFICULTY,
    DEFAULT_NUM_QUESTIONS,
    DEFAULT_QUESTION_TYPE,
    DIFFICULTIES,
    ERR_EMPTY_QUIZ,
    ERR_TEXT_TOO_SHORT,
    MAX_OPTIONS,
    MIN_OPTIONS,
    QUESTION_TYPES,
)
from lecturequiz.models.quiz import Quiz, QuizQuestion
from lecturequiz.prompts.quiz_prompts import QUIZ_SYSTEM, build_quiz_prompt
from lecturequiz.services.summary_gen import generate_summary
from lecturequiz.services.llm import LLMClient, LLMError
from lecturequiz.utils.text import clamp, clean_text, extract_json_object, jaccard_sim, sanitize_lecture_text

log = logging.getLogger("LectureQuiz")

# -----------------------------
# Limits
# -----------------------------
MAX_Q_LEN = 400
MAX_OPTION_LEN = 200
JACCARD_Q_SIM = 0.85
TEMPERATURE = 0.6
MAX_ROUNDS = 2


class QuizInputError(ValueError):
    """Lecture text or options rejected before any model call."""


class QuizGenerationError(Exception):
    """The model produced no usable questions."""


# -----------------------------
# Response schema
# -----------------------------
_OPTION_PREFIX_RE = re.compile(r"^\s*([A-Da-d][\)\.\:]\s+|[-•]\s+)")


class QuestionSchema(BaseModel):
    question: str = Field(min_length=1, max_length=MAX_Q_LEN)
    options: List[str] = Field(min_length=MIN_OPTIONS, max_length=MAX_OPTIONS)
    correctAnswerIndex: int = Field(ge=0, le=MAX_OPTIONS - 1)

    @field_validator("question")
    @classmethod
    def _clean_question(cls, v: str) -> str:
        v = clean_text(v)
        if not v:
            raise ValueError("empty question")
        return v

    @field_validator("options")
    @classmethod
    def _clean_options(cls, v: List[str]) -> List[str]:
        out = []
        for o in v:
            s = _OPTION_PREFIX_RE.sub("", clean_text(str(o)))
            if not s:
                raise ValueError("empty option")
            out.append(s[:MAX_OPTION_LEN])
        return out

    @model_validator(mode="after")
    def _index_in_range(self) -> "QuestionSchema":
        if self.correctAnswerIndex >= len(self.options):
            raise ValueError("correctAnswerIndex out of range")
        return self


class QuizSchema(BaseModel):
    questions: List[Dict[str, Any]] = Field(default_factory=list)


# -----------------------------
# Input validation
# -----------------------------
def validate_request(
    lecture_text: str,
    *,
    num_questions: int = DEFAULT_NUM_QUESTIONS,
    difficulty: str = DEFAULT_DIFFICULTY,
    question_type: str = DEFAULT_QUESTION_TYPE,
    min_chars: Optional[int] = None,
    max_questions: Optional[int] = None,
) -> Dict[str, Any]:
    if min_chars is None:
        min_chars = config.MIN_LECTURE_CHARS
    if max_questions is None:
        max_questions = config.MAX_QUESTIONS

    text = (lecture_text or "").strip()
    if len(text) < min_chars:
        raise QuizInputError(ERR_TEXT_TOO_SHORT.format(n=min_chars))

    difficulty = (difficulty or DEFAULT_DIFFICULTY).strip().lower()
    if difficulty not in DIFFICULTIES:
        raise QuizInputError(f"Unknown difficulty '{difficulty}'.")

    question_type = (question_type or DEFAULT_QUESTION_TYPE).strip().lower()
    if question_type not in QUESTION_TYPES:
        raise QuizInputError(f"Unknown question type '{question_type}'.")

    try:
        n = int(num_questions)
    except (TypeError, ValueError):
        n = DEFAULT_NUM_QUESTIONS

    return {
        "lecture_text": sanitize_lecture_text(text),
        "num_questions": clamp(n, 1, max(1, int(max_questions))),
        "difficulty": difficulty,
        "question_type": question_type,
    }


# -----------------------------
# Parsing
# -----------------------------
def parse_quiz_payload(raw: str) -> List[QuizQuestion]:
    """
    Extracts the quiz JSON from raw model output and returns the questions
    that pass schema validation. Invalid items are dropped, not fatal.
    """
    obj, mode = extract_json_object(raw)
    if obj is None:
        log.warning("Quiz JSON not found (mode=%s). RAW (first 800): %r", mode, (raw or "")[:800])
        return []

    try:
        payload = QuizSchema.model_validate(obj)
    except ValidationError as e:
        log.warning("Quiz payload rejected: %s", e.errors()[:3])
        return []

    out: List[QuizQuestion] = []
    for i, item in enumerate(payload.questions):
        try:
            q = QuestionSchema.model_validate(item)
        except ValidationError as e:
            log.info("Dropping question %d: %s", i + 1, e.errors()[0].get("msg"))
            continue
        out.append(
            QuizQuestion(
                question=q.question,
                options=q.options,
                correct_answer_index=q.correctAnswerIndex,
            )
        )
    return out


def _accept_question(built: QuizQuestion, out: List[QuizQuestion]) -> bool:
    qn = built.question.lower()
    for prev in out:
        if prev.question.lower() == qn:
            return False
        if jaccard_sim(built.question, prev.question) >= JACCARD_Q_SIM:
            return False
    return True


# -----------------------------
# Main generator
# -----------------------------
async def create_quiz(
    llm: LLMClient,
    *,
    lecture_text: str,
    num_questions: int = DEFAULT_NUM_QUESTIONS,
    difficulty: str = DEFAULT_DIFFICULTY,
    question_type: str = DEFAULT_QUESTION_TYPE,
    with_summary: bool = True,
    min_chars: Optional[int] = None,
    max_questions: Optional[int] = None,
) -> Quiz:
    """
    Returns the quiz in generation order. Shuffling is the session's job.

    Raises QuizInputError for bad input, QuizGenerationError when no usable
    question came back, LLMError when the model call itself fails.
    """
    req = validate_request(
        lecture_text,
        num_questions=num_questions,
        difficulty=difficulty,
        question_type=question_type,
        min_chars=min_chars,
        max_questions=max_questions,
    )
    n = req["num_questions"]

    prompt = build_quiz_prompt(
        req["lecture_text"],
        num_questions=n,
        difficulty=req["difficulty"],
        question_type=req["question_type"],
    )
    max_tokens = min(4000, 400 + n * 220)

    out: List[QuizQuestion] = []
    hint = ""

    for round_i in range(MAX_ROUNDS):
        raw = await llm.ask(
            prompt=prompt + hint,
            system=QUIZ_SYSTEM,
            max_tokens=max_tokens,
            temperature=TEMPERATURE,
            json_mode=True,
        )

        parsed = parse_quiz_payload(raw)
        accepted = 0
        for q in parsed:
            if len(out) >= n:
                break
            if _accept_question(q, out):
                out.append(q)
                accepted += 1

        log.info(
            "Quiz round %d | parsed=%d | accepted=%d | total=%d/%d",
            round_i + 1,
            len(parsed),
            accepted,
            len(out),
            n,
        )

        if out:
            break
        hint = "\n\nFollow the exact JSON schema from the system message."

    if not out:
        raise QuizGenerationError(ERR_EMPTY_QUIZ)

    summary: Optional[str] = None
    if with_summary:
        try:
            summary = await generate_summary(llm, req["lecture_text"])
        except LLMError as e:
            log.warning("Summary generation failed: %s", e)

    return Quiz(questions=out, summary=summary or None)
