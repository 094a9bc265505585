"""Tests for AI analysis parsing and fallbacks."""

import json

from openai import OpenAIError

from skill_assessment import llm
from skill_assessment.llm import (
    Failed,
    Fallback,
    Parsed,
    analyze_skill_gaps,
    default_skill_gap_analysis,
    generate_practice_questions,
    parse_ai_response,
)
from skill_assessment.models import SkillGapAnalysis
from skill_assessment.scoring import score_assessment

from conftest import answers

ANALYSIS = {
    "skill_gaps": [
        {
            "skill": "Logic",
            "current_level": 2,
            "required_level": 4,
            "priority": "High",
            "learning_path": ["Practice proofs"],
        }
    ],
    "strengths": ["Persistence"],
    "recommendations": ["Solve one puzzle a day"],
    "career_readiness": 55,
    "time_to_goal": "3 months",
}


def _result(logic_questions):
    return score_assessment(logic_questions, answers(q1=1))


class TestParseAiResponse:
    """Test parse_ai_response."""

    def test_plain_json(self):
        outcome = parse_ai_response(json.dumps(ANALYSIS), SkillGapAnalysis)
        assert isinstance(outcome, Parsed)
        assert outcome.data.career_readiness == 55

    def test_markdown_fence(self):
        content = f"Here you go:\n```json\n{json.dumps(ANALYSIS)}\n```"
        outcome = parse_ai_response(content, SkillGapAnalysis)
        assert isinstance(outcome, Parsed)
        assert outcome.data.skill_gaps[0].skill == "Logic"

    def test_invalid_with_fallback(self):
        default = default_skill_gap_analysis()
        outcome = parse_ai_response("not json at all", SkillGapAnalysis, fallback=default)
        assert isinstance(outcome, Fallback)
        assert outcome.data is default
        assert "unparseable" in outcome.reason

    def test_schema_mismatch_without_fallback(self):
        outcome = parse_ai_response(json.dumps({"career_readiness": 400}), SkillGapAnalysis)
        assert isinstance(outcome, Failed)
        assert outcome.status == "failed"


class TestAnalyzeSkillGaps:
    """Test analyze_skill_gaps."""

    def test_unconfigured_falls_back(self, logic_questions):
        outcome = analyze_skill_gaps(_result(logic_questions), ["Data Scientist"])
        assert isinstance(outcome, Fallback)
        assert outcome.data == default_skill_gap_analysis()

    def test_parsed(self, logic_questions, monkeypatch):
        monkeypatch.setenv("OPENAI_API_KEY", "sk-test-1234567890")
        prompts = []

        def fake_complete(prompt):
            prompts.append(prompt)
            return json.dumps(ANALYSIS)

        monkeypatch.setattr(llm, "_complete", fake_complete)
        outcome = analyze_skill_gaps(_result(logic_questions), ["Data Scientist"])
        assert isinstance(outcome, Parsed)
        assert outcome.data.time_to_goal == "3 months"
        assert "Data Scientist" in prompts[0]
        assert "Logic: 33%" in prompts[0]

    def test_request_failure_falls_back(self, logic_questions, monkeypatch):
        monkeypatch.setenv("LLM_BASE_URL", "http://localhost:1234/v1")

        def failing(prompt):
            raise OpenAIError("connection refused")

        monkeypatch.setattr(llm, "_complete", failing)
        outcome = analyze_skill_gaps(_result(logic_questions), [])
        assert isinstance(outcome, Fallback)
        assert "connection refused" in outcome.reason


class TestGeneratePracticeQuestions:
    """Test generate_practice_questions."""

    def test_unconfigured_fails(self):
        assert isinstance(generate_practice_questions("Logic"), Failed)

    def test_questions_tagged_with_skill(self, monkeypatch):
        monkeypatch.setenv("OPENAI_API_KEY", "sk-test-1234567890")
        payload = {
            "questions": [
                {"prompt": "2 + 2?", "options": ["3", "4"], "correct_option_index": 1},
                {"prompt": "Broken", "options": ["a", "b"], "correct_option_index": 5},
            ]
        }
        monkeypatch.setattr(llm, "_complete", lambda prompt: json.dumps(payload))
        outcome = generate_practice_questions("Arithmetic", 2)
        assert isinstance(outcome, Parsed)
        assert len(outcome.data) == 1
        question = outcome.data[0]
        assert question.id == "practice-1"
        assert question.skill == "Arithmetic"
        assert question.kind == "single-choice"
        assert question.points == 10

    def test_bad_output_fails(self, monkeypatch):
        monkeypatch.setenv("OPENAI_API_KEY", "sk-test-1234567890")
        monkeypatch.setattr(llm, "_complete", lambda prompt: "sorry, I can't")
        assert isinstance(generate_practice_questions("Logic"), Failed)
