from typing import Dict, List

APP_NAME = "LectureQuiz"
APP_VERSION = "1.0.0"
AI_FOOTER = "AI generated - Verify with your course material"

DIFFICULTIES: List[str] = ["easy", "medium", "hard"]

QUESTION_TYPES: Dict[str, str] = {
    "multiple_choice": "Multiple choice",
    "situational": "Situational",
    "fill_in_the_blank": "Fill in the blank",
    "true_false": "True / False",
    "mixed": "Mixed",
}

DEFAULT_NUM_QUESTIONS = 5
DEFAULT_DIFFICULTY = "medium"
DEFAULT_QUESTION_TYPE = "multiple_choice"

MIN_OPTIONS = 2
MAX_OPTIONS = 4

# feedback tiers, lower bound inclusive
TIER_HIGH_MIN = 80.0
TIER_MEDIUM_MIN = 50.0

TIER_MESSAGES: Dict[str, str] = {
    "high": "Excellent work! You clearly know this material.",
    "medium": "Good effort. Review the questions you missed.",
    "low": "Keep studying. Re-read the summary and try again.",
}

# user-facing generation errors
ERR_TEXT_TOO_SHORT = (
    "Please provide a more substantial lecture text (at least {n} characters)."
)
ERR_EMPTY_QUIZ = (
    "The AI could not generate a quiz from the provided text. "
    "Please try refining your text."
)
ERR_UNEXPECTED = (
    "An unexpected error occurred while generating the quiz. "
    "Please try again later."
)
