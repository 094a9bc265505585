"""Shared fixtures for skill assessment tests."""

import pytest

from skill_assessment.catalog import AssessmentDefinition
from skill_assessment.models import Answer, Question


def choice(qid: str, skill: str, points: int, correct: int, options: int = 4) -> Question:
    return Question(
        id=qid,
        kind="single-choice",
        skill=skill,
        points=points,
        options=[f"Option {i}" for i in range(options)],
        correct_option_index=correct,
    )


def answers(**values) -> dict[str, Answer]:
    return {qid: Answer(question_id=qid, value=value) for qid, value in values.items()}


@pytest.fixture
def logic_questions() -> list[Question]:
    return [
        choice("q1", "Logic", 10, 1),
        choice("q2", "Logic", 10, 0),
        choice("q3", "Logic", 10, 2),
    ]


@pytest.fixture
def weekly_test() -> AssessmentDefinition:
    return AssessmentDefinition(
        id="week-1",
        name="Week 1",
        duration_minutes=30,
        passing_score=70,
        max_attempts=2,
        week=1,
        questions=[
            choice("q1", "Biology", 10, 0),
            choice("q2", "Biology", 10, 2),
            Question(id="q3", kind="short-answer", skill="Biology", points=15),
        ],
    )


@pytest.fixture(autouse=True)
def _no_ai_env(monkeypatch):
    """Keep a developer's environment from reaching real endpoints or configs."""
    for var in (
        "OPENAI_API_KEY",
        "LLM_BASE_URL",
        "LLM_MODEL",
        "OPENAI_MODEL",
        "OPENAI_TEMPERATURE",
        "ASSESSMENT_CONFIG",
    ):
        monkeypatch.delenv(var, raising=False)
