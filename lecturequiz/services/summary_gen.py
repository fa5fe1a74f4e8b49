from __future__ import annotations

import logging

from lecturequiz.prompts.quiz_prompts import SUMMARY_SYSTEM, build_summary_prompt
from lecturequiz.services.llm import LLMClient
from lecturequiz.utils.text import clean_text, extract_json_object, strip_code_fences

log = logging.getLogger("LectureQuiz")


def parse_text_field(raw: str, key: str) -> str:
    """
    Reads `key` from a JSON answer; falls back to the plain text
    when the model ignored the JSON instruction.
    """
    obj, _ = extract_json_object(raw)
    if obj is not None:
        return clean_text(str(obj.get(key) or ""))
    return clean_text(strip_code_fences(raw))


async def generate_summary(llm: LLMClient, lecture_text: str) -> str:
    raw = await llm.ask(
        prompt=build_summary_prompt(lecture_text),
        system=SUMMARY_SYSTEM,
        max_tokens=500,
        temperature=0.3,
        json_mode=True,
    )
    summary = parse_text_field(raw, "summary")
    if not summary:
        log.warning("Empty summary from model")
    return summary
