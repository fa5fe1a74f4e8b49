from __future__ import annotations

import logging
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Dict, Optional

from lecturequiz.models.quiz import AnswerMap, Quiz, ScoreSnapshot
from lecturequiz.services.scoring import score_quiz
from lecturequiz.services.shuffle import RandomSource, shuffle_quiz

log = logging.getLogger("LectureQuiz")


class QuizStateError(Exception):
    """Raised when an operation does not fit the current attempt."""


class AlreadyAnsweredError(QuizStateError):
    pass


@dataclass(frozen=True)
class AnswerOutcome:
    question_index: int
    option_index: int
    is_correct: bool
    correct_index: int
    snapshot: ScoreSnapshot


class QuizSession:
    """
    Owns one quiz and its AnswerMap.

    Flow:
    - load_quiz -> shuffled once, answers reset
    - record_answer -> Unanswered -> Answered (no way back within the attempt)
    - reset_attempt -> same quiz, empty answers
    - clear -> no quiz
    """

    def __init__(self, *, rng: Optional[RandomSource] = None):
        self._rng = rng
        self.quiz: Optional[Quiz] = None
        self.answers: AnswerMap = {}
        self.explanations: Dict[int, str] = {}
        self.updated_at = time.time()

    @property
    def has_quiz(self) -> bool:
        return self.quiz is not None

    def _require_quiz(self) -> Quiz:
        if self.quiz is None:
            raise QuizStateError("No quiz loaded.")
        return self.quiz

    def _touch(self) -> None:
        self.updated_at = time.time()

    def load_quiz(self, quiz: Quiz) -> Quiz:
        shuffled = shuffle_quiz(quiz, self._rng)
        # quiz and answers are replaced together
        self.quiz, self.answers, self.explanations = shuffled, {}, {}
        self._touch()
        log.debug("Quiz loaded | questions=%d", len(shuffled.questions))
        return shuffled

    def record_answer(self, question_index: int, option_index: int) -> AnswerOutcome:
        quiz = self._require_quiz()

        qi = int(question_index)
        oi = int(option_index)

        if not (0 <= qi < len(quiz.questions)):
            raise QuizStateError(f"Unknown question index {qi}.")

        q = quiz.questions[qi]
        if not (0 <= oi < len(q.options)):
            raise QuizStateError(f"Option index {oi} out of range for question {qi}.")

        if qi in self.answers:
            raise AlreadyAnsweredError(f"Question {qi} was already answered.")

        self.answers[qi] = oi
        self._touch()

        return AnswerOutcome(
            question_index=qi,
            option_index=oi,
            is_correct=oi == q.correct_answer_index,
            correct_index=q.correct_answer_index,
            snapshot=self.snapshot(),
        )

    def reset_attempt(self) -> None:
        self._require_quiz()
        self.answers = {}
        self._touch()

    def clear(self) -> None:
        self.quiz, self.answers, self.explanations = None, {}, {}
        self._touch()

    def snapshot(self) -> ScoreSnapshot:
        return score_quiz(self._require_quiz(), self.answers)

    def to_dict(self) -> Dict[str, object]:
        quiz = self._require_quiz()
        return {
            "quiz": quiz.to_dict(),
            "answers": {str(k): v for k, v in sorted(self.answers.items())},
            "score": self.snapshot().to_dict(),
        }


class SessionRegistry:
    """
    Process-local map of browser session id -> QuizSession.
    Oldest sessions are evicted past `max_sessions`.
    """

    def __init__(self, *, max_sessions: int = 1000, rng: Optional[RandomSource] = None):
        self.max_sessions = max(1, int(max_sessions))
        self._rng = rng
        self._sessions: "OrderedDict[str, QuizSession]" = OrderedDict()

    def get(self, key: str) -> QuizSession:
        s = self._sessions.get(key)
        if s is None:
            s = QuizSession(rng=self._rng)
            self._sessions[key] = s
            while len(self._sessions) > self.max_sessions:
                old_key, _ = self._sessions.popitem(last=False)
                log.debug("Evicted quiz session %s", old_key[:6])
        else:
            self._sessions.move_to_end(key)
        return s

    def drop(self, key: str) -> None:
        self._sessions.pop(key, None)

    def __len__(self) -> int:
        return len(self._sessions)
