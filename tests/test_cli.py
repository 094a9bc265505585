"""Tests for the command line interface."""

import json

import pytest
from typer.testing import CliRunner

from skill_assessment.cli import app

runner = CliRunner()

CONFIG = """
assessments:
  - id: logic-basics
    name: Logic Basics
    questions:
      - {id: q1, kind: single-choice, skill: Logic, points: 10, options: ["No", "Yes"], correct_option_index: 1}
      - {id: q2, kind: short-answer, skill: Reasoning, points: 10}
  - id: weekly-logic
    name: Weekly Logic
    week: 1
    passing_score: 70
    max_attempts: 2
    questions:
      - {id: q1, kind: true-false, skill: Logic, points: 10, options: ["True", "False"], correct_option_index: 0}
  - id: broken
    name: Broken
    questions:
      - {id: q1, kind: single-choice, skill: Logic, points: 0, options: ["a"], correct_option_index: 0}
"""


@pytest.fixture
def config(tmp_path):
    path = tmp_path / "assessment-config.yaml"
    path.write_text(CONFIG, encoding="utf-8")
    return path


class TestList:
    def test_lists_built_in_assessments(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        result = runner.invoke(app, ["list"])
        assert result.exit_code == 0
        assert "programming-fundamentals: Programming Fundamentals Assessment" in result.output
        assert "week 1 | pass 70% | 3 attempts" in result.output

    def test_lists_configured_assessments(self, config):
        result = runner.invoke(app, ["list", "--config", str(config)])
        assert result.exit_code == 0
        assert "logic-basics: Logic Basics" in result.output
        assert "programming-fundamentals" not in result.output


class TestScore:
    def test_score_answers_file(self, tmp_path, monkeypatch):
        """Built-in programming assessment: 24 of 45 points."""
        monkeypatch.chdir(tmp_path)
        answers = tmp_path / "answers.yaml"
        answers.write_text(
            "q1: 1\nq2: 'def rev(s): return s[::-1]'\n",
            encoding="utf-8",
        )
        result = runner.invoke(app, ["score", "programming-fundamentals", "--answers", str(answers)])
        assert result.exit_code == 0, result.output
        assert "Overall score: 53% (Novice)" in result.output
        assert "Programming: 80% - Advanced" in result.output
        assert "Focus on improving Problem Solving through additional practice." in result.output

    def test_json_output(self, config, tmp_path):
        answers = tmp_path / "answers.yaml"
        answers.write_text("q1: 1\nq2: A syllogism is a form of deduction\n", encoding="utf-8")
        result = runner.invoke(
            app, ["score", "logic-basics", "-i", str(answers), "--json", "--config", str(config)]
        )
        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["overall_score"] == 90
        assert data["skill_breakdown"] == {"Logic": 100, "Reasoning": 80}
        assert data["strengths"] == ["Logic", "Reasoning"]

    def test_numeric_free_text_answer(self, tmp_path, monkeypatch):
        """A coding answer YAML reads as a number is still scored as text."""
        monkeypatch.chdir(tmp_path)
        answers = tmp_path / "answers.yaml"
        answers.write_text("q1: 1\nq2: 1234567890123456789012345\n", encoding="utf-8")
        result = runner.invoke(
            app, ["score", "programming-fundamentals", "-i", str(answers), "--json"]
        )
        assert result.exit_code == 0, result.output
        scores = {q["question_id"]: q for q in json.loads(result.output)["question_scores"]}
        assert scores["q2"]["awarded"] == 14
        assert scores["q2"]["scorable"] is True
        assert scores["q1"]["awarded"] == 10

    def test_unknown_question(self, config, tmp_path):
        answers = tmp_path / "answers.yaml"
        answers.write_text("q9: 1\n", encoding="utf-8")
        result = runner.invoke(app, ["score", "logic-basics", "-i", str(answers), "--config", str(config)])
        assert result.exit_code == 2

    def test_unknown_assessment(self, config, tmp_path):
        answers = tmp_path / "answers.yaml"
        answers.write_text("q1: 1\n", encoding="utf-8")
        result = runner.invoke(app, ["score", "nope", "-i", str(answers), "--config", str(config)])
        assert result.exit_code == 2

    def test_invalid_assessment(self, config, tmp_path):
        answers = tmp_path / "answers.yaml"
        answers.write_text("q1: 0\n", encoding="utf-8")
        result = runner.invoke(app, ["score", "broken", "-i", str(answers), "--config", str(config)])
        assert result.exit_code == 1
        assert "Unable to score assessment" in result.output

    def test_pdf_report(self, config, tmp_path):
        answers = tmp_path / "answers.yaml"
        answers.write_text("q1: 1\n", encoding="utf-8")
        pdf = tmp_path / "report.pdf"
        result = runner.invoke(
            app, ["score", "logic-basics", "-i", str(answers), "-o", str(pdf), "--config", str(config)]
        )
        assert result.exit_code == 0, result.output
        assert pdf.read_bytes().startswith(b"%PDF")


class TestTake:
    def test_interactive(self, config):
        result = runner.invoke(
            app,
            ["take", "logic-basics", "--config", str(config)],
            input="2\nA syllogism is a form of deduction\n",
        )
        assert result.exit_code == 0, result.output
        assert "Question 1 of 2" in result.output
        assert "Overall score: 90% (Expert)" in result.output

    def test_invalid_choice_reprompts(self, config):
        result = runner.invoke(
            app,
            ["take", "logic-basics", "--config", str(config)],
            input="7\nabc\n1\n\n",
        )
        assert result.exit_code == 0, result.output
        assert "Choose between 1 and 2." in result.output
        assert "Enter the number of an option." in result.output
        assert "Overall score: 0% (Novice)" in result.output

    def test_retake_after_failing(self, config):
        result = runner.invoke(
            app,
            ["take", "weekly-logic", "--config", str(config)],
            input="2\ny\n1\n",
        )
        assert result.exit_code == 0, result.output
        assert "Not passed (passing score 70%)" in result.output
        assert "Retake the test? (1 attempts left)" in result.output
        assert "Passed (passing score 70%)" in result.output

    def test_analysis_fallback(self, config):
        result = runner.invoke(
            app,
            ["take", "logic-basics", "--analyze", "--goal", "Analyst", "--config", str(config)],
            input="2\n\n",
        )
        assert result.exit_code == 0, result.output
        assert "Skill-gap analysis:" in result.output
        assert "general guidance" in result.output
        assert "Career readiness: 75%" in result.output


class TestRate:
    def test_single_category(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        result = runner.invoke(app, ["rate", "--category", "technical"], input="5\n9\n4\n")
        assert result.exit_code == 0, result.output
        assert "Rating must be between 1 and 5." in result.output
        assert "Technical Skills: 90% - Expert" in result.output

    def test_unknown_category(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        result = runner.invoke(app, ["rate", "--category", "cooking"])
        assert result.exit_code == 2


class TestPractice:
    def test_unconfigured(self):
        result = runner.invoke(app, ["practice", "Logic"])
        assert result.exit_code == 1
        assert "Could not generate practice questions" in result.output
