"""Assessment catalog: statically authored assessments and their configuration."""

import logging
from pathlib import Path

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator

from .config import get_catalog_path
from .models import FreeTextRule, Question
from .scoring import DEFAULT_FREE_TEXT_RULES, TIER_SCHEMES

logger = logging.getLogger("skill_assessment.catalog")

DEFAULT_CONFIG_NAME = "assessment-config.yaml"


class AssessmentDefinition(BaseModel):
    """An assessment with its questions and attempt rules."""

    id: str
    name: str
    category: str = Field(default="general")
    description: str = Field(default="")
    difficulty: str = Field(default="Intermediate")
    duration_minutes: int | None = Field(
        default=None,
        description="Time limit; None means untimed",
    )
    questions: list[Question]
    skills_evaluated: list[str] = Field(default_factory=list)
    tier_scheme: str = Field(default="standard")
    certification: bool = Field(
        default=False,
        description="Certificate awarded when the overall score is at least 80",
    )
    passing_score: int | None = Field(default=None, ge=0, le=100)
    max_attempts: int | None = Field(default=None, ge=1)
    week: int | None = None

    @field_validator("tier_scheme")
    @classmethod
    def _known_tier_scheme(cls, value: str) -> str:
        if value not in TIER_SCHEMES:
            raise ValueError(
                f"unknown tier scheme '{value}' (expected one of: {', '.join(TIER_SCHEMES)})"
            )
        return value

    @model_validator(mode="after")
    def _unique_question_ids(self) -> "AssessmentDefinition":
        seen: set[str] = set()
        duplicates = []
        for question in self.questions:
            if question.id in seen:
                duplicates.append(question.id)
            seen.add(question.id)
        if duplicates:
            raise ValueError(
                f"assessment '{self.id}' has duplicate question ids: {', '.join(duplicates)}"
            )
        return self


class SelfRatingQuestion(BaseModel):
    """Self-rating question; option i corresponds to rating i + 1."""

    id: str
    prompt: str
    options: list[str] = Field(min_length=5, max_length=5)


class SelfRatingCategory(BaseModel):
    id: str
    title: str
    description: str = ""
    questions: list[SelfRatingQuestion]


class AssessmentCatalog(BaseModel):
    """All assessments available to the host, plus scoring configuration."""

    assessments: list[AssessmentDefinition]
    free_text_rules: dict[str, FreeTextRule] = Field(
        default_factory=lambda: dict(DEFAULT_FREE_TEXT_RULES)
    )
    self_rating: list[SelfRatingCategory] = Field(default_factory=list)

    def get(self, assessment_id: str) -> AssessmentDefinition:
        for assessment in self.assessments:
            if assessment.id == assessment_id:
                return assessment
        raise KeyError(f"Unknown assessment '{assessment_id}'")

    def weekly_tests(self) -> list[AssessmentDefinition]:
        return sorted(
            (a for a in self.assessments if a.week is not None),
            key=lambda a: a.week,
        )


DEFAULT_ASSESSMENTS: list[dict] = [
    {
        "id": "programming-fundamentals",
        "name": "Programming Fundamentals Assessment",
        "category": "technical",
        "description": "Evaluate your understanding of basic programming concepts and problem-solving skills",
        "difficulty": "Beginner",
        "duration_minutes": 45,
        "skills_evaluated": ["Programming", "Problem Solving", "Logic"],
        "certification": True,
        "questions": [
            {
                "id": "q1",
                "kind": "multiple-choice",
                "prompt": "What is the time complexity of binary search?",
                "options": ["O(n)", "O(log n)", "O(n²)", "O(1)"],
                "correct_option_index": 1,
                "points": 10,
                "skill": "Programming",
                "explanation": "Binary search halves the search space each iteration, giving O(log n).",
            },
            {
                "id": "q2",
                "kind": "coding",
                "prompt": "Write a function to reverse a string without using built-in reverse methods.",
                "points": 20,
                "difficulty": "Easy",
                "skill": "Programming",
            },
            {
                "id": "q3",
                "kind": "scenario",
                "prompt": (
                    "You need to store user data that requires fast lookups by user ID. "
                    "Which data structure would you choose and why?"
                ),
                "points": 15,
                "skill": "Problem Solving",
                "explanation": "A hash table gives O(1) average-case lookup by user ID.",
            },
        ],
    },
    {
        "id": "data-analysis-skills",
        "name": "Data Analysis & Interpretation",
        "category": "analytical",
        "description": "Test your ability to analyze data, draw insights, and make data-driven decisions",
        "duration_minutes": 60,
        "skills_evaluated": ["Data Analysis", "Critical Thinking", "Data Interpretation"],
        "questions": [
            {
                "id": "q1",
                "kind": "multiple-choice",
                "prompt": (
                    "Which statistical measure is most appropriate for describing the "
                    "central tendency of a highly skewed dataset?"
                ),
                "options": ["Mean", "Median", "Mode", "Range"],
                "correct_option_index": 1,
                "points": 10,
                "skill": "Data Analysis",
                "explanation": "The median is less affected by outliers in skewed distributions.",
            },
        ],
    },
    {
        "id": "communication-assessment",
        "name": "Professional Communication Skills",
        "category": "communication",
        "description": "Evaluate your written and verbal communication abilities in professional contexts",
        "duration_minutes": 40,
        "skills_evaluated": ["Written Communication", "Presentation"],
        "questions": [
            {
                "id": "q1",
                "kind": "scenario",
                "prompt": (
                    "You need to explain a complex technical concept to a non-technical "
                    "stakeholder. Describe your approach."
                ),
                "points": 20,
                "skill": "Written Communication",
            },
        ],
    },
    {
        "id": "week-1-medical-basics",
        "name": "Medical Science Fundamentals",
        "category": "weekly",
        "description": "Test your understanding of basic medical and biological concepts",
        "duration_minutes": 30,
        "passing_score": 70,
        "max_attempts": 3,
        "week": 1,
        "skills_evaluated": ["Medical Science"],
        "questions": [
            {
                "id": "q1",
                "kind": "multiple-choice",
                "prompt": "What is the basic unit of life?",
                "options": ["Cell", "Tissue", "Organ", "Organism"],
                "correct_option_index": 0,
                "points": 10,
                "skill": "Medical Science",
            },
            {
                "id": "q2",
                "kind": "multiple-choice",
                "prompt": (
                    "Which organ system is responsible for transporting nutrients "
                    "and oxygen throughout the body?"
                ),
                "options": [
                    "Respiratory System",
                    "Digestive System",
                    "Circulatory System",
                    "Nervous System",
                ],
                "correct_option_index": 2,
                "points": 10,
                "skill": "Medical Science",
            },
            {
                "id": "q3",
                "kind": "true-false",
                "prompt": "Bacteria are always harmful to humans.",
                "options": ["True", "False"],
                "correct_option_index": 1,
                "points": 10,
                "skill": "Medical Science",
            },
            {
                "id": "q4",
                "kind": "short-answer",
                "prompt": "What is the difference between a virus and bacteria?",
                "points": 15,
                "skill": "Medical Science",
            },
        ],
    },
]


def _rating_question(qid: str, prompt: str, *options: str) -> dict:
    return {"id": qid, "prompt": prompt, "options": list(options)}


DEFAULT_SELF_RATING: list[dict] = [
    {
        "id": "technical",
        "title": "Technical Skills",
        "description": "Programming, tools, and technical knowledge",
        "questions": [
            _rating_question(
                "1",
                "How comfortable are you with programming languages?",
                "Never programmed before",
                "Basic understanding of one language",
                "Comfortable with 1-2 languages",
                "Proficient in multiple languages",
                "Expert level programmer",
            ),
            _rating_question(
                "2",
                "How do you approach learning new technologies?",
                "I avoid new technologies",
                "I learn when required",
                "I'm curious about new tech",
                "I actively seek new technologies",
                "I'm an early adopter",
            ),
        ],
    },
    {
        "id": "analytical",
        "title": "Analytical Thinking",
        "description": "Problem-solving and logical reasoning",
        "questions": [
            _rating_question(
                "1",
                "When faced with a complex problem, what's your first approach?",
                "I feel overwhelmed and seek help immediately",
                "I try random solutions",
                "I break it down into smaller parts",
                "I analyze patterns and create systematic solutions",
                "I identify root causes and develop comprehensive strategies",
            ),
            _rating_question(
                "2",
                "How do you approach decision-making?",
                "I rely on others' decisions",
                "I make quick gut decisions",
                "I consider pros and cons",
                "I gather data and analyze options",
                "I use systematic frameworks and consider long-term impacts",
            ),
        ],
    },
    {
        "id": "communication",
        "title": "Communication",
        "description": "Written and verbal communication skills",
        "questions": [
            _rating_question(
                "1",
                "How comfortable are you presenting ideas to a group?",
                "I avoid presentations completely",
                "I'm very nervous but can manage",
                "I'm comfortable with small groups",
                "I enjoy presenting to any size group",
                "I'm a confident and engaging presenter",
            ),
            _rating_question(
                "2",
                "How do you handle conflicts or disagreements?",
                "I avoid conflicts at all costs",
                "I get defensive or emotional",
                "I try to find middle ground",
                "I facilitate productive discussions",
                "I turn conflicts into collaborative solutions",
            ),
        ],
    },
    {
        "id": "leadership",
        "title": "Leadership",
        "description": "Team management and leadership abilities",
        "questions": [
            _rating_question(
                "1",
                "How do you approach working in teams?",
                "I prefer to work alone",
                "I follow others' lead",
                "I contribute actively to team goals",
                "I often take initiative in group projects",
                "I naturally emerge as a team leader",
            ),
            _rating_question(
                "2",
                "How do you handle responsibility and accountability?",
                "I avoid taking responsibility",
                "I take responsibility when asked",
                "I'm reliable and accountable",
                "I proactively take ownership",
                "I inspire accountability in others",
            ),
        ],
    },
]


def _default_catalog() -> AssessmentCatalog:
    """Return the built-in assessments and self-rating questionnaire."""
    return AssessmentCatalog(
        assessments=DEFAULT_ASSESSMENTS,
        self_rating=DEFAULT_SELF_RATING,
    )


def load_catalog(path: Path | None = None) -> AssessmentCatalog:
    """
    Load the assessment catalog from YAML.

    If path is None, use ASSESSMENT_CONFIG, then assessment-config.yaml in the
    current directory. A missing or unreadable file yields the built-in
    catalog. Sections missing from the file fall back to the built-in ones;
    free_text_rules entries override the defaults rule by rule.
    """
    if path is None:
        path = get_catalog_path() or Path.cwd() / DEFAULT_CONFIG_NAME

    if not path.exists():
        logger.debug("No catalog at %s, using built-in assessments", path)
        return _default_catalog()

    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except (OSError, yaml.YAMLError) as e:
        logger.warning("Could not read %s (%s), using built-in assessments", path, e)
        return _default_catalog()

    if not isinstance(data, dict):
        logger.warning("%s is not a mapping, using built-in assessments", path)
        return _default_catalog()

    rules = dict(DEFAULT_FREE_TEXT_RULES)
    rules.update(
        {name: FreeTextRule(**rule) for name, rule in (data.get("free_text_rules") or {}).items()}
    )
    catalog = AssessmentCatalog(
        assessments=data.get("assessments", DEFAULT_ASSESSMENTS),
        free_text_rules=rules,
        self_rating=data.get("self_rating", DEFAULT_SELF_RATING),
    )
    logger.debug("Loaded %d assessments from %s", len(catalog.assessments), path)
    return catalog
