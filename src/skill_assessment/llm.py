"""OpenAI integration for skill-gap analysis and practice question generation."""

import json
import logging
import re
from typing import Any, Literal

from openai import OpenAI, OpenAIError
from pydantic import BaseModel

from .config import get_api_key, get_base_url, get_model, get_temperature, is_ai_configured
from .models import (
    SINGLE_CHOICE,
    AssessmentResult,
    PracticeQuestionSet,
    Question,
    SkillGap,
    SkillGapAnalysis,
)

logger = logging.getLogger("skill_assessment.llm")


class Parsed(BaseModel):
    """The endpoint returned output that validated."""

    status: Literal["parsed"] = "parsed"
    data: Any


class Fallback(BaseModel):
    """Canned defaults were used instead of endpoint output."""

    status: Literal["fallback"] = "fallback"
    data: Any
    reason: str


class Failed(BaseModel):
    """No usable output and no defaults to fall back on."""

    status: Literal["failed"] = "failed"
    error: str


ParseOutcome = Parsed | Fallback | Failed


SYSTEM_PROMPT = """You are a career guidance advisor. You review skill assessment results and help learners plan their growth. Always answer with a single JSON object and nothing else."""


def _truncate(text: str, limit: int = 500) -> str:
    return text[:limit] + "..." if len(text) > limit else text


def _extract_json(text: str) -> str:
    """Extract JSON object from model output (handles markdown code blocks)."""
    text = text.strip()
    match = re.search(r"```(?:json)?\s*(\{[\s\S]*?\})\s*```", text)
    if match:
        return match.group(1)
    match = re.search(r"(\{[\s\S]*\})", text)
    if match:
        return match.group(1)
    return text


def parse_ai_response(
    content: str, model_cls: type[BaseModel], fallback: BaseModel | None = None
) -> ParseOutcome:
    """
    Strictly parse endpoint output into model_cls.

    Args:
        content: Raw completion text
        model_cls: Pydantic model the JSON object must validate against
        fallback: Defaults to use when the output does not parse

    Returns:
        Parsed on success, otherwise Fallback when defaults were given, else Failed
    """
    text = _extract_json(content or "")
    try:
        data = model_cls.model_validate(json.loads(text))
    except ValueError as e:
        # json.JSONDecodeError and pydantic.ValidationError are both ValueErrors
        logger.warning("Could not parse %s: %s. Content: %s", model_cls.__name__, e, text[:200])
        if fallback is not None:
            return Fallback(data=fallback, reason=f"unparseable output: {e}")
        return Failed(error=f"unparseable output: {e}")
    return Parsed(data=data)


def _complete(user_prompt: str) -> str:
    """Send one chat completion and return its text."""
    base_url = get_base_url()
    client = OpenAI(api_key=get_api_key(), base_url=base_url or None)
    model = get_model()
    temperature = get_temperature()
    kwargs: dict = {
        "model": model,
        "temperature": temperature,
        "messages": [
            {"role": "system", "content": SYSTEM_PROMPT},
            {"role": "user", "content": user_prompt},
        ],
    }
    logger.debug("LLM call: model=%s base_url=%s temperature=%s", model, base_url, temperature)
    logger.debug("User prompt (truncated): %s...", user_prompt[:200])

    if base_url:
        # Local servers have inconsistent response_format support; rely on the prompt
        response = client.chat.completions.create(**kwargs)
    else:
        try:
            response = client.chat.completions.create(
                **kwargs,
                response_format={"type": "json_object"},
            )
        except OpenAIError as e:
            logger.error("response_format failed, retrying without: %s", e)
            response = client.chat.completions.create(**kwargs)
    content = response.choices[0].message.content or ""
    logger.debug("Raw LLM response: %s", _truncate(content))
    return content


def default_skill_gap_analysis() -> SkillGapAnalysis:
    """Canned analysis used when the endpoint is unavailable."""
    return SkillGapAnalysis(
        skill_gaps=[
            SkillGap(
                skill="Machine Learning",
                current_level=2,
                required_level=4,
                priority="High",
                learning_path=[
                    "Complete Python for Data Science course",
                    "Learn scikit-learn fundamentals",
                    "Practice with real datasets",
                    "Build ML projects portfolio",
                ],
            ),
            SkillGap(
                skill="Cloud Computing",
                current_level=1,
                required_level=3,
                priority="Medium",
                learning_path=[
                    "AWS/GCP fundamentals",
                    "Docker containerization",
                    "Kubernetes basics",
                    "Deploy applications to cloud",
                ],
            ),
        ],
        strengths=[
            "Strong programming fundamentals",
            "Good problem-solving abilities",
            "Excellent communication skills",
        ],
        recommendations=[
            "Focus on building practical ML projects",
            "Join online coding communities",
            "Consider pursuing cloud certifications",
            "Practice technical interviews regularly",
        ],
        career_readiness=75,
        time_to_goal="6-8 months with consistent learning",
    )


def _format_result(result: AssessmentResult) -> str:
    lines = [f"Overall score: {result.overall_score}% ({result.tier})", "Skill breakdown:"]
    for skill, score in result.skill_breakdown.items():
        lines.append(f"  - {skill}: {score}% ({result.skill_tiers[skill]})")
    if result.strengths:
        lines.append(f"Strengths: {', '.join(result.strengths)}")
    if result.weaknesses:
        lines.append(f"Weaknesses: {', '.join(result.weaknesses)}")
    return "\n".join(lines)


def analyze_skill_gaps(result: AssessmentResult, career_goals: list[str]) -> ParseOutcome:
    """
    Ask the endpoint for a skill-gap analysis of an assessment result.

    Args:
        result: Scored assessment result
        career_goals: Roles or goals the learner is aiming for

    Returns:
        Parsed analysis, or Fallback with the canned analysis when the endpoint
        is not configured, the call fails, or its output does not validate
    """
    if not is_ai_configured():
        return Fallback(
            data=default_skill_gap_analysis(),
            reason="OPENAI_API_KEY or LLM_BASE_URL not set",
        )

    goals = ", ".join(career_goals) if career_goals else "not specified"
    user_prompt = f"""Career goals: {goals}

Assessment result:
---
{_format_result(result)}
---

Return a JSON object with this exact structure:
{{
  "skill_gaps": [{{"skill": "<skill>", "current_level": <0-5>, "required_level": <0-5>, "priority": "<High|Medium|Low>", "learning_path": ["<step>"]}}],
  "strengths": ["<strength>"],
  "recommendations": ["<recommendation>"],
  "career_readiness": <0-100>,
  "time_to_goal": "<estimate>"
}}"""

    try:
        content = _complete(user_prompt)
    except OpenAIError as e:
        logger.warning("Skill-gap analysis failed: %s", e, exc_info=True)
        return Fallback(data=default_skill_gap_analysis(), reason=f"request failed: {e}")
    return parse_ai_response(content, SkillGapAnalysis, fallback=default_skill_gap_analysis())


def generate_practice_questions(skill: str, count: int = 3) -> ParseOutcome:
    """
    Generate single-choice practice questions for a weak skill.

    Returns:
        Parsed with a list of Question tagged with the skill, or Failed
    """
    if not is_ai_configured():
        return Failed(error="OPENAI_API_KEY or LLM_BASE_URL not set")

    user_prompt = f"""Write {count} multiple-choice practice questions that test {skill}.

Return a JSON object with this exact structure:
{{
  "questions": [{{"prompt": "<question>", "options": ["<option>", "..."], "correct_option_index": <index into options>, "explanation": "<why>", "points": 10}}]
}}"""

    try:
        content = _complete(user_prompt)
    except OpenAIError as e:
        logger.warning("Practice question generation failed: %s", e, exc_info=True)
        return Failed(error=f"request failed: {e}")

    outcome = parse_ai_response(content, PracticeQuestionSet)
    if not isinstance(outcome, Parsed):
        return outcome

    questions = [
        Question(
            id=f"practice-{idx}",
            kind=SINGLE_CHOICE,
            skill=skill,
            points=q.points,
            prompt=q.prompt,
            options=q.options,
            correct_option_index=q.correct_option_index,
            explanation=q.explanation,
        )
        for idx, q in enumerate(outcome.data.questions, start=1)
        if q.correct_option_index < len(q.options)
    ]
    if not questions:
        return Failed(error="no usable questions in output")
    return Parsed(data=questions)
