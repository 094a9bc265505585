"""Assessment scoring engine: per-question credit, skill breakdown and tiers."""

import logging
from collections.abc import Iterable, Mapping

from pydantic import BaseModel, Field

from .errors import InvalidAssessment, UnscorableAnswer
from .models import (
    FREE_TEXT,
    QUESTION_KIND_ALIASES,
    SINGLE_CHOICE,
    STRENGTH_THRESHOLD,
    WEAKNESS_THRESHOLD,
    Answer,
    AssessmentResult,
    FreeTextRule,
    Question,
    ScoredQuestion,
)

logger = logging.getLogger("skill_assessment.scoring")


DEFAULT_FREE_TEXT_RULES: dict[str, FreeTextRule] = {
    # Code-writing prompts: rewards submitting something non-trivial
    "attempt": FreeTextRule(threshold=20, credit_percent=70),
    # Scenario and reasoning prompts
    "detail": FreeTextRule(threshold=50, credit_percent=80),
    # Short answers in weekly tests
    "presence": FreeTextRule(threshold=10, credit_percent=80),
}


class TierScheme(BaseModel):
    """Named cutoff table mapping a percentage score to a tier."""

    name: str
    cutoffs: list[tuple[int, str]] = Field(
        description="(minimum score, tier) pairs, highest minimum first"
    )
    floor_tier: str = Field(description="Tier for scores below every cutoff")

    def classify(self, score: int) -> str:
        for minimum, tier in self.cutoffs:
            if score >= minimum:
                return tier
        return self.floor_tier


STANDARD_TIERS = TierScheme(
    name="standard",
    cutoffs=[(90, "Expert"), (80, "Advanced"), (70, "Intermediate"), (60, "Beginner")],
    floor_tier="Novice",
)

SELF_RATING_TIERS = TierScheme(
    name="self-rating",
    cutoffs=[(80, "Expert"), (60, "Advanced"), (40, "Intermediate"), (20, "Beginner")],
    floor_tier="Novice",
)

TIER_SCHEMES: dict[str, TierScheme] = {
    STANDARD_TIERS.name: STANDARD_TIERS,
    SELF_RATING_TIERS.name: SELF_RATING_TIERS,
}


def get_tier_scheme(name: str) -> TierScheme:
    """Look up a built-in tier scheme by name."""
    try:
        return TIER_SCHEMES[name]
    except KeyError:
        raise KeyError(
            f"Unknown tier scheme '{name}' (expected one of: {', '.join(TIER_SCHEMES)})"
        ) from None


def classify_tier(score: int, scheme: TierScheme = STANDARD_TIERS) -> str:
    """Classify an overall or per-skill percentage score into a tier."""
    return scheme.classify(score)


def percent(scored: int, maximum: int) -> int:
    """Return 100 * scored / maximum rounded half up, using integer arithmetic."""
    return (200 * scored + maximum) // (2 * maximum)


def _resolve_kind(question: Question) -> tuple[str, str | None]:
    if question.kind in QUESTION_KIND_ALIASES:
        kind, rule = QUESTION_KIND_ALIASES[question.kind]
        return kind, question.credit_rule or rule
    return question.kind, question.credit_rule


def _choice_index(value: int | str) -> int | None:
    """Convert a submitted option to an index; numeric strings are accepted."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    try:
        return int(value.strip())
    except ValueError:
        return None


def award_points(
    question: Question,
    answer: Answer | None,
    free_text_rules: Mapping[str, FreeTextRule] = DEFAULT_FREE_TEXT_RULES,
) -> int:
    """
    Award credit for a single question.

    Args:
        question: The question being scored
        answer: The user's answer, or None when unanswered
        free_text_rules: Length threshold and credit share per free-text rule

    Returns:
        Awarded points, between 0 and question.points

    Raises:
        UnscorableAnswer: The kind or credit rule is not recognized, the
            single-choice question has no valid correct option, or a free-text
            answer is not text.
    """
    kind, rule_name = _resolve_kind(question)

    if kind == SINGLE_CHOICE:
        correct = question.correct_option_index
        if correct is None:
            raise UnscorableAnswer(question.id, "single-choice question has no correct option")
        if question.options and not 0 <= correct < len(question.options):
            raise UnscorableAnswer(question.id, f"correct option {correct} is out of range")
        if answer is None:
            return 0
        return question.points if _choice_index(answer.value) == correct else 0

    if kind == FREE_TEXT:
        rule = free_text_rules.get(rule_name or "")
        if rule is None:
            raise UnscorableAnswer(question.id, f"unknown free-text credit rule '{rule_name}'")
        if answer is None:
            return 0
        if not isinstance(answer.value, str):
            raise UnscorableAnswer(question.id, "free-text answer is not text")
        threshold = (
            question.minimum_length_for_credit
            if question.minimum_length_for_credit is not None
            else rule.threshold
        )
        if len(answer.value.strip()) > threshold:
            return question.points * rule.credit_percent // 100
        return 0

    raise UnscorableAnswer(question.id, f"unknown question kind '{question.kind}'")


def _next_steps(overall_score: int) -> list[str]:
    if overall_score >= 80:
        return [
            "Consider taking advanced assessments in this area",
            "Explore specialized certifications",
        ]
    if overall_score >= 60:
        return [
            "Review weak areas and practice more",
            "Take supplementary learning modules",
        ]
    return [
        "Revisit fundamental concepts",
        "Consider taking prerequisite courses",
    ]


def score_assessment(
    questions: list[Question],
    answers: Mapping[str, Answer],
    tier_scheme: TierScheme = STANDARD_TIERS,
    free_text_rules: Mapping[str, FreeTextRule] = DEFAULT_FREE_TEXT_RULES,
) -> AssessmentResult:
    """
    Score a set of answers against an assessment's questions.

    Pure function: it never reads the clock and keeps no state, so the same
    questions and answers always produce an equal result.

    Args:
        questions: Non-empty ordered question list, every question with points > 0
        answers: Answers keyed by question id; entries for unknown ids are ignored
        tier_scheme: Cutoffs used for the overall and per-skill tiers
        free_text_rules: Length threshold and credit share per free-text rule

    Returns:
        AssessmentResult with overall score, skill breakdown and feedback

    Raises:
        InvalidAssessment: The question list is empty or a question has
            non-positive points
    """
    if not questions:
        raise InvalidAssessment("Assessment has no questions")
    for question in questions:
        if question.points <= 0:
            raise InvalidAssessment(
                f"Question '{question.id}' has non-positive points ({question.points})"
            )

    question_ids = {q.id for q in questions}
    stray = [qid for qid in answers if qid not in question_ids]
    if stray:
        logger.debug("Ignoring answers for unknown questions: %s", stray)

    scored_by_skill: dict[str, int] = {}
    max_by_skill: dict[str, int] = {}
    question_scores: list[ScoredQuestion] = []

    for question in questions:
        try:
            awarded = award_points(question, answers.get(question.id), free_text_rules)
            scorable = True
        except UnscorableAnswer as e:
            logger.warning("%s; awarding zero credit", e)
            awarded = 0
            scorable = False

        scored_by_skill[question.skill] = scored_by_skill.get(question.skill, 0) + awarded
        max_by_skill[question.skill] = max_by_skill.get(question.skill, 0) + question.points
        question_scores.append(
            ScoredQuestion(
                question_id=question.id,
                skill=question.skill,
                awarded=awarded,
                max_points=question.points,
                scorable=scorable,
            )
        )

    breakdown = {
        skill: percent(scored_by_skill[skill], max_by_skill[skill])
        for skill in max_by_skill
    }
    total_scored = sum(scored_by_skill.values())
    total_max = sum(max_by_skill.values())
    overall_score = percent(total_scored, total_max)

    strengths = sorted(
        (skill for skill, score in breakdown.items() if score >= STRENGTH_THRESHOLD),
        key=lambda skill: -breakdown[skill],
    )
    weaknesses = [skill for skill, score in breakdown.items() if score < WEAKNESS_THRESHOLD]

    logger.debug(
        "Scored %d/%d points (%d%%) across %d skills",
        total_scored,
        total_max,
        overall_score,
        len(breakdown),
    )

    return AssessmentResult(
        overall_score=overall_score,
        tier=tier_scheme.classify(overall_score),
        tier_scheme=tier_scheme.name,
        skill_breakdown=breakdown,
        skill_tiers={skill: tier_scheme.classify(score) for skill, score in breakdown.items()},
        strengths=strengths,
        weaknesses=weaknesses,
        recommendations=[
            f"Focus on improving {skill} through additional practice." for skill in weaknesses
        ],
        next_steps=_next_steps(overall_score),
        question_scores=question_scores,
        scored_points=total_scored,
        max_points=total_max,
    )


def score_self_rating(ratings: Iterable[int]) -> int:
    """
    Score a self-rating questionnaire category.

    Each rating is 1 (lowest) to 5 (highest); the score is the mean scaled to
    0-100. A category with no ratings scores 0.
    """
    values = list(ratings)
    for value in values:
        if not 1 <= value <= 5:
            raise ValueError(f"Rating must be between 1 and 5, got {value}")
    if not values:
        return 0
    # mean * 20 == 100 * sum / (5 * count)
    return percent(sum(values), 5 * len(values))
