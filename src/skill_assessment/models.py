"""Pydantic models for assessments, answers and scoring results."""

from pydantic import BaseModel, Field


SINGLE_CHOICE = "single-choice"
FREE_TEXT = "free-text"

# Question types used by the assessment screens, mapped to (kind, credit rule)
QUESTION_KIND_ALIASES: dict[str, tuple[str, str | None]] = {
    "multiple-choice": (SINGLE_CHOICE, None),
    "true-false": (SINGLE_CHOICE, None),
    "coding": (FREE_TEXT, "attempt"),
    "scenario": (FREE_TEXT, "detail"),
    "short-answer": (FREE_TEXT, "presence"),
    "essay": (FREE_TEXT, "presence"),
}

STRENGTH_THRESHOLD = 80
WEAKNESS_THRESHOLD = 60


class Question(BaseModel):
    """A single statically authored assessment question."""

    id: str = Field(description="Identifier, unique within the assessment")
    kind: str = Field(description="single-choice, free-text, or a type alias")
    skill: str = Field(description="Skill label this question measures")
    points: int = Field(description="Maximum attainable credit")
    prompt: str = Field(default="", description="Question text shown to the user")
    options: list[str] = Field(
        default_factory=list,
        description="Ordered answer options (single-choice only)",
    )
    correct_option_index: int | None = Field(
        default=None,
        description="Index into options of the correct answer",
    )
    credit_rule: str | None = Field(
        default=None,
        description="Free-text partial credit rule: attempt, detail or presence",
    )
    minimum_length_for_credit: int | None = Field(
        default=None,
        description="Overrides the credit rule's length threshold",
    )
    difficulty: str = Field(default="Medium")
    explanation: str = Field(default="")


class Answer(BaseModel):
    """A user's answer to one question."""

    question_id: str
    value: int | str


class FreeTextRule(BaseModel):
    """Length threshold and credit share for a free-text credit rule."""

    threshold: int = Field(description="Trimmed length must exceed this")
    credit_percent: int = Field(description="Share of points awarded, 0-100")


class ScoredQuestion(BaseModel):
    """Credit awarded for one question."""

    question_id: str
    skill: str
    awarded: int
    max_points: int
    scorable: bool = True


class AssessmentResult(BaseModel):
    """Outcome of scoring one set of answers."""

    overall_score: int = Field(description="Overall percentage 0-100")
    tier: str = Field(description="Tier of the overall score")
    tier_scheme: str = Field(description="Name of the tier scheme applied")
    skill_breakdown: dict[str, int] = Field(
        description="Percentage per skill label"
    )
    skill_tiers: dict[str, str] = Field(description="Tier per skill label")
    strengths: list[str] = Field(default_factory=list)
    weaknesses: list[str] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)
    next_steps: list[str] = Field(default_factory=list)
    question_scores: list[ScoredQuestion] = Field(default_factory=list)
    scored_points: int = 0
    max_points: int = 0


class SkillGap(BaseModel):
    """A skill the user needs to grow for their career goals."""

    skill: str
    current_level: int = Field(ge=0, le=5)
    required_level: int = Field(ge=0, le=5)
    priority: str = Field(default="Medium")
    learning_path: list[str] = Field(default_factory=list)


class SkillGapAnalysis(BaseModel):
    """AI skill-gap analysis of an assessment result."""

    skill_gaps: list[SkillGap] = Field(default_factory=list)
    strengths: list[str] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)
    career_readiness: int = Field(ge=0, le=100)
    time_to_goal: str = Field(default="")


class PracticeQuestion(BaseModel):
    """A generated single-choice question, before it joins an assessment."""

    prompt: str
    options: list[str] = Field(min_length=2)
    correct_option_index: int = Field(ge=0)
    explanation: str = Field(default="")
    points: int = Field(default=10, gt=0)


class PracticeQuestionSet(BaseModel):
    """Generated practice questions for one skill."""

    questions: list[PracticeQuestion]
