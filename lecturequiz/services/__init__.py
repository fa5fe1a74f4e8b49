from .shuffle import shuffle_quiz
from .scoring import feedback_tier, score_quiz
from .session import AlreadyAnsweredError, QuizSession, QuizStateError, SessionRegistry

__all__ = [
    "shuffle_quiz",
    "score_quiz",
    "feedback_tier",
    "QuizSession",
    "SessionRegistry",
    "QuizStateError",
    "AlreadyAnsweredError",
]
