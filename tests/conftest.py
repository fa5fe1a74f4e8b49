"""
Shared pytest fixtures for LectureQuiz tests.

Fixture Organization
--------------------
- **make_quiz**: Quiz builder from (options, correct_index) tuples
- **make_llm**: Scripted stand-in for LLMClient
- **scripted_rng**: Random source returning a fixed sequence of draws
- **client**: FastAPI TestClient with a scripted LLM and fresh sessions
"""

import json
import random
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

import pytest

from lecturequiz.models.quiz import Quiz, QuizQuestion


class FakeLLM:
    """Returns scripted replies in order; exceptions in the script are raised."""

    def __init__(self, replies: Optional[Sequence[Union[str, Exception]]] = None):
        self.replies = list(replies or [])
        self.calls: List[Dict[str, Any]] = []
        self.default_model = "fake-model"
        self.base_url = "http://fake"

    async def ask(self, **kwargs: Any) -> str:
        self.calls.append(kwargs)
        if not self.replies:
            return ""
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply


class ScriptedRng:
    """randint() returns the next scripted value."""

    def __init__(self, draws: Sequence[int]):
        self.draws = list(draws)
        self.requests: List[Tuple[int, int]] = []

    def randint(self, a: int, b: int) -> int:
        self.requests.append((a, b))
        v = self.draws.pop(0)
        assert a <= v <= b
        return v


def quiz_json(questions: List[Dict[str, Any]]) -> str:
    return json.dumps({"questions": questions})


LECTURE = (
    "Photosynthesis converts light energy into chemical energy. "
    "It takes place in the chloroplasts of plant cells, where chlorophyll "
    "absorbs light and water is split to release oxygen."
)

GENERATED = [
    {
        "question": "Where does photosynthesis take place?",
        "options": ["Mitochondria", "Chloroplasts", "Nucleus", "Ribosomes"],
        "correctAnswerIndex": 1,
    },
    {
        "question": "Which gas is released when water is split?",
        "options": ["Oxygen", "Nitrogen", "Carbon dioxide", "Hydrogen"],
        "correctAnswerIndex": 0,
    },
    {
        "question": "Chlorophyll absorbs light.",
        "options": ["True", "False"],
        "correctAnswerIndex": 0,
    },
]


@pytest.fixture
def make_quiz():
    def _make(items: Sequence[Tuple[List[str], int]], summary: Optional[str] = None) -> Quiz:
        return Quiz(
            questions=[
                QuizQuestion(question=f"Q{i}", options=list(opts), correct_answer_index=ci)
                for i, (opts, ci) in enumerate(items)
            ],
            summary=summary,
        )

    return _make


@pytest.fixture
def three_question_quiz(make_quiz) -> Quiz:
    """Quiz with correct indices [1, 0, 2]."""
    return make_quiz(
        [
            (["a", "b", "c"], 1),
            (["a", "b", "c"], 0),
            (["a", "b", "c"], 2),
        ]
    )


@pytest.fixture
def lecture_text() -> str:
    return LECTURE


@pytest.fixture
def generated_payload() -> str:
    """Model reply with three valid questions."""
    return quiz_json(GENERATED)


@pytest.fixture
def summary_payload() -> str:
    return json.dumps({"summary": "Plants turn light into chemical energy in chloroplasts."})


@pytest.fixture
def make_llm():
    return FakeLLM


@pytest.fixture
def scripted_rng():
    return ScriptedRng


@pytest.fixture
def seeded_rng() -> random.Random:
    return random.Random(1234)


@pytest.fixture
def client():
    """TestClient against the real app with a scripted LLM."""
    from fastapi.testclient import TestClient

    from lecturequiz.services.session import SessionRegistry
    from lecturequiz.web.core.ratelimit import limiter
    from lecturequiz.web.main import app

    fake = FakeLLM()
    old_llm, old_sessions = app.state.llm, app.state.sessions
    app.state.llm = fake
    app.state.sessions = SessionRegistry(rng=random.Random(7))
    limiter.enabled = False

    with TestClient(app) as c:
        c.fake_llm = fake
        yield c

    app.state.llm, app.state.sessions = old_llm, old_sessions
    limiter.enabled = True
