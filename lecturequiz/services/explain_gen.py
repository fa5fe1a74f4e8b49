from __future__ import annotations

import logging

from lecturequiz.prompts.quiz_prompts import EXPLANATION_SYSTEM, build_explanation_prompt
from lecturequiz.services.llm import LLMClient
from lecturequiz.services.summary_gen import parse_text_field

log = logging.getLogger("LectureQuiz")

FALLBACK_EXPLANATION = "No explanation available right now. Try again in a moment."


async def generate_explanation(llm: LLMClient, question: str, correct_answer: str) -> str:
    raw = await llm.ask(
        prompt=build_explanation_prompt(question, correct_answer),
        system=EXPLANATION_SYSTEM,
        max_tokens=400,
        temperature=0.3,
        json_mode=True,
    )
    explanation = parse_text_field(raw, "explanation")
    if not explanation:
        log.warning("Empty explanation for question %r", (question or "")[:80])
        return FALLBACK_EXPLANATION
    return explanation
