"""
Question/option randomization for freshly generated quizzes.

Order is randomized with Fisher-Yates, so every permutation is equally likely.
The correct option is followed by position through the swaps; it is never
looked up again by text, which keeps duplicate option labels unambiguous.
"""

from __future__ import annotations

import random
from typing import List, Optional, Protocol, TypeVar

from lecturequiz.models.quiz import Quiz, QuizQuestion

T = TypeVar("T")

_TRUE_FALSE = {"true", "false"}

_default_rng = random.Random()


class RandomSource(Protocol):
    def randint(self, a: int, b: int) -> int: ...


def is_true_false(options: List[str]) -> bool:
    if len(options) != 2:
        return False
    return {(o or "").strip().lower() for o in options} == _TRUE_FALSE


def fisher_yates(items: List[T], rng: RandomSource) -> List[int]:
    """
    Shuffle `items` in place.
    Returns the permutation: perm[new_pos] = old_pos.
    """
    perm = list(range(len(items)))
    for i in range(len(items) - 1, 0, -1):
        j = rng.randint(0, i)
        if i != j:
            items[i], items[j] = items[j], items[i]
            perm[i], perm[j] = perm[j], perm[i]
    return perm


def shuffle_options(q: QuizQuestion, rng: Optional[RandomSource] = None) -> QuizQuestion:
    rng = rng or _default_rng
    options = list(q.options)

    if len(options) < 2 or is_true_false(options):
        return QuizQuestion(
            question=q.question,
            options=options,
            correct_answer_index=q.correct_answer_index,
        )

    perm = fisher_yates(options, rng)
    correct = q.correct_answer_index
    # perm maps new -> old, so the correct option sits where perm holds the old index
    new_correct = perm.index(correct) if 0 <= correct < len(perm) else correct

    return QuizQuestion(
        question=q.question,
        options=options,
        correct_answer_index=new_correct,
    )


def shuffle_quiz(quiz: Quiz, rng: Optional[RandomSource] = None) -> Quiz:
    """
    Returns a new Quiz with question order and (non true/false) option order
    randomized. The input quiz is not modified.
    """
    rng = rng or _default_rng

    questions = list(quiz.questions)
    fisher_yates(questions, rng)

    return Quiz(
        questions=[shuffle_options(q, rng) for q in questions],
        summary=quiz.summary,
    )
