from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

# question position -> chosen option position
AnswerMap = Dict[int, int]


@dataclass
class QuizQuestion:
    question: str
    options: List[str]
    correct_answer_index: int

    def __post_init__(self):
        # each question owns its own options list
        self.options = [str(o) for o in (self.options or [])]
        self.correct_answer_index = int(self.correct_answer_index)

    @property
    def correct_answer(self) -> Optional[str]:
        if 0 <= self.correct_answer_index < len(self.options):
            return self.options[self.correct_answer_index]
        return None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "QuizQuestion":
        return cls(
            question=str(data.get("question", "") or ""),
            options=list(data.get("options") or []),
            correct_answer_index=int(data.get("correctAnswerIndex", 0)),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "question": self.question,
            "options": list(self.options),
            "correctAnswerIndex": self.correct_answer_index,
        }


@dataclass
class Quiz:
    questions: List[QuizQuestion] = field(default_factory=list)
    summary: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Quiz":
        questions = [QuizQuestion.from_dict(q) for q in (data.get("questions") or [])]
        summary = data.get("summary")
        return cls(questions=questions, summary=str(summary) if summary else None)

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"questions": [q.to_dict() for q in self.questions]}
        if self.summary:
            out["summary"] = self.summary
        return out


@dataclass(frozen=True)
class ScoreSnapshot:
    correct_count: int
    answered_count: int
    total_count: int
    percentage: float
    is_complete: bool
    tier: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "correctCount": self.correct_count,
            "answeredCount": self.answered_count,
            "totalCount": self.total_count,
            "percentage": self.percentage,
            "isComplete": self.is_complete,
            "tier": self.tier,
        }
