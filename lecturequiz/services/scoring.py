from __future__ import annotations

from typing import Mapping

from lecturequiz.constants import TIER_HIGH_MIN, TIER_MEDIUM_MIN, TIER_MESSAGES
from lecturequiz.models.quiz import Quiz, ScoreSnapshot


def feedback_tier(percentage: float) -> str:
    if percentage >= TIER_HIGH_MIN:
        return "high"
    if percentage >= TIER_MEDIUM_MIN:
        return "medium"
    return "low"


def tier_message(tier: str) -> str:
    return TIER_MESSAGES.get(tier, TIER_MESSAGES["low"])


def is_correct(quiz: Quiz, question_index: int, option_index: int) -> bool:
    if not (0 <= question_index < len(quiz.questions)):
        return False
    return quiz.questions[question_index].correct_answer_index == option_index


def score_quiz(quiz: Quiz, answers: Mapping[int, int]) -> ScoreSnapshot:
    """
    Pure derivation of progress/score for one attempt.
    Answers for question positions the quiz does not have are counted as
    answered but never as correct.
    """
    total = len(quiz.questions)
    answered = len(answers)
    correct = sum(1 for qi, oi in answers.items() if is_correct(quiz, qi, oi))

    pct = (correct / total) * 100.0 if total > 0 else 0.0

    return ScoreSnapshot(
        correct_count=correct,
        answered_count=answered,
        total_count=total,
        percentage=round(pct, 2),
        is_complete=total > 0 and answered == total,
        tier=feedback_tier(pct),
    )
