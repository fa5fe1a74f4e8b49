# lecturequiz/prompts/quiz_prompts.py
from __future__ import annotations

QUIZ_SYSTEM = """You are an expert quiz generator for students.

Rules:
- Use ONLY the provided lecture text. Do not invent facts.
- Exactly ONE correct option per question.
- Wrong options must be plausible but clearly incorrect.
- Output ONLY JSON. No markdown, no emojis, no extra text.

Schema:
{
  "questions": [
    {"question": "string", "options": ["string", "string", "string", "string"], "correctAnswerIndex": 0}
  ]
}
"""

_TYPE_RULES = {
    "multiple_choice": "Generate standard multiple-choice questions with 4 options.",
    "situational": "Generate questions that present a scenario and ask how to apply the knowledge. 4 options each.",
    "fill_in_the_blank": 'Generate sentences with a blank written as "_____" and 4 options to fill it.',
    "true_false": 'Generate statements that are either true or false. The options array must be exactly ["True", "False"].',
    "mixed": (
        "Generate a mix of multiple-choice, situational, fill-in-the-blank (blank written as \"_____\") "
        'and true/false questions (options exactly ["True", "False"]).'
    ),
}

SUMMARY_SYSTEM = """You are an expert in summarizing complex topics.

Rules:
- Use ONLY what is in the text.
- ONE paragraph, concise, capturing the main points.
- Output ONLY JSON: {"summary": "string"}
"""

EXPLANATION_SYSTEM = """You are an expert tutor.

Rules:
- Explain clearly and concisely why the given answer is correct.
- 2-5 sentences, no markdown.
- Output ONLY JSON: {"explanation": "string"}
"""


def question_type_rule(question_type: str) -> str:
    return _TYPE_RULES.get(question_type, _TYPE_RULES["multiple_choice"])


def build_quiz_prompt(
    lecture_text: str,
    *,
    num_questions: int,
    difficulty: str,
    question_type: str,
) -> str:
    lecture_text = (lecture_text or "").strip()
    return f"""Generate a quiz with EXACTLY {num_questions} question(s) with a difficulty of '{difficulty}'.

Question type: '{question_type}'.
- {question_type_rule(question_type)}
- For every question, set correctAnswerIndex to the index of the correct option.
- For all types except true/false, provide 4 options.
- Harder difficulty means closer, more challenging wrong options.

LECTURE TEXT:
{lecture_text}

Return only JSON in the schema."""


def build_summary_prompt(lecture_text: str) -> str:
    lecture_text = (lecture_text or "").strip()
    return f"""Summarize this lecture text in one paragraph.

LECTURE TEXT:
{lecture_text}

Return only JSON."""


def build_explanation_prompt(question: str, correct_answer: str) -> str:
    return f"""Question: {(question or '').strip()}
Correct Answer: {(correct_answer or '').strip()}

Explain why this answer is correct. Return only JSON."""
