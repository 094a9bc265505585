"""CLI entry point for the skill assessment tool."""

import logging
from pathlib import Path

import typer
import yaml

from .catalog import AssessmentCatalog, AssessmentDefinition, load_catalog
from .errors import AssessmentError, SessionClosed
from .llm import Failed, Fallback, analyze_skill_gaps, generate_practice_questions
from .models import QUESTION_KIND_ALIASES, SINGLE_CHOICE, AssessmentResult, Question, SkillGapAnalysis
from .pdf_generator import generate_pdf
from .scoring import SELF_RATING_TIERS, classify_tier, score_self_rating
from .session import AssessmentSession, AttemptLog, AttemptRecord

app = typer.Typer(help="Take skill assessments and get scored feedback.")

ConfigOption = typer.Option(
    None,
    "--config",
    "-cfg",
    path_type=Path,
    exists=True,
    help="Path to assessment-config.yaml (default: assessment-config.yaml in cwd)",
)
VerboseOption = typer.Option(False, "--verbose", "-v", help="Enable debug logging")


def _configure_logging(verbose: bool) -> None:
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(name)s | %(levelname)s | %(message)s",
        )
        logging.getLogger("skill_assessment").setLevel(logging.DEBUG)
        # Reduce noise from third-party libraries
        logging.getLogger("openai").setLevel(logging.WARNING)
        logging.getLogger("httpx").setLevel(logging.WARNING)
        logging.getLogger("httpcore").setLevel(logging.WARNING)


def _get_assessment(catalog: AssessmentCatalog, assessment_id: str) -> AssessmentDefinition:
    try:
        return catalog.get(assessment_id)
    except KeyError:
        known = ", ".join(a.id for a in catalog.assessments)
        raise typer.BadParameter(f"Unknown assessment '{assessment_id}'. Available: {known}")


def _is_choice(question: Question) -> bool:
    kind, _ = QUESTION_KIND_ALIASES.get(question.kind, (question.kind, None))
    return kind == SINGLE_CHOICE


def _answer_value(question: Question | None, value: object) -> int | str:
    """Normalize a YAML scalar; free-text answers are always text."""
    if question is not None and _is_choice(question) and isinstance(value, int):
        return value
    return str(value)


def _format_result_for_display(result: AssessmentResult, title: str) -> str:
    """Format a result for display in the terminal."""
    lines = [f"\n=== {title} ===\n"]
    lines.append(f"Overall score: {result.overall_score}% ({result.tier})")
    lines.append(f"Points: {result.scored_points}/{result.max_points}")
    lines.append("\nSkill breakdown:")
    for skill, score in result.skill_breakdown.items():
        lines.append(f"  {skill}: {score}% - {result.skill_tiers[skill]}")
    if result.strengths:
        lines.append("\nStrengths:")
        lines.extend(f"  - {s}" for s in result.strengths)
    if result.weaknesses:
        lines.append("\nAreas to improve:")
        lines.extend(f"  - {s}" for s in result.weaknesses)
    if result.recommendations:
        lines.append("\nRecommendations:")
        lines.extend(f"  - {r}" for r in result.recommendations)
    lines.append("\nNext steps:")
    lines.extend(f"  - {s}" for s in result.next_steps)
    lines.append("")
    return "\n".join(lines)


def _format_attempt_status(record: AttemptRecord, assessment: AssessmentDefinition) -> str:
    minutes, seconds = divmod(record.time_spent_seconds, 60)
    parts = [f"Time spent: {minutes}m {seconds:02d}s"]
    if record.timed_out:
        parts.append("time expired")
    if record.passed is not None:
        verdict = "Passed" if record.passed else "Not passed"
        parts.append(f"{verdict} (passing score {assessment.passing_score}%)")
    if record.certified:
        parts.append("Certificate earned")
    return " | ".join(parts)


def _record(session: AssessmentSession, question_id: str, value: int | str) -> None:
    try:
        session.record_answer(question_id, value)
    except SessionClosed:
        # the countdown submitted while the user was typing
        pass


def _ask_rating() -> int:
    while True:
        user_input = typer.prompt("Rating (1-5)")
        try:
            rating = int(user_input.strip())
        except ValueError:
            typer.echo("Enter a number from 1 to 5.")
            continue
        if 1 <= rating <= 5:
            return rating
        typer.echo("Rating must be between 1 and 5.")


def _ask_question(session: AssessmentSession, index: int, question: Question) -> None:
    total = len(session.assessment.questions)
    typer.echo(f"\nQuestion {index} of {total} [{question.skill}, {question.points} points]")
    typer.echo(question.prompt)
    if _is_choice(question):
        for number, option in enumerate(question.options, start=1):
            typer.echo(f"  {number}. {option}")
        while True:
            user_input = typer.prompt("Your answer (number, Enter to skip)", default="", show_default=False)
            if session.closed or not user_input.strip():
                return
            try:
                choice = int(user_input.strip())
            except ValueError:
                typer.echo("Enter the number of an option.")
                continue
            if 1 <= choice <= len(question.options):
                _record(session, question.id, choice - 1)
                return
            typer.echo(f"Choose between 1 and {len(question.options)}.")
    else:
        text = typer.prompt("Your answer (Enter to skip)", default="", show_default=False)
        if text.strip():
            _record(session, question.id, text)


def _run_session(session: AssessmentSession) -> AttemptRecord:
    """Prompt for every question, then submit unless the countdown already did."""
    session.start()
    remaining = session.time_remaining()
    if remaining is not None:
        typer.echo(f"You have {int(remaining // 60)} minutes. Unanswered questions score 0.")
    for index, question in enumerate(session.assessment.questions, start=1):
        if session.closed:
            break
        _ask_question(session, index, question)
    if session.closed and session.record is not None and session.record.timed_out:
        typer.echo("\nTime is up. Your answers were submitted automatically.")
    return session.submit()


def _print_analysis(analysis: SkillGapAnalysis) -> None:
    typer.echo(f"Career readiness: {analysis.career_readiness}%")
    if analysis.time_to_goal:
        typer.echo(f"Time to goal: {analysis.time_to_goal}")
    for gap in analysis.skill_gaps:
        typer.echo(f"  {gap.skill} ({gap.priority}): level {gap.current_level} -> {gap.required_level}")
        for step in gap.learning_path:
            typer.echo(f"    - {step}")
    for rec in analysis.recommendations:
        typer.echo(f"  * {rec}")


def _skill_gap_analysis(result: AssessmentResult, goals: list[str]) -> SkillGapAnalysis | None:
    outcome = analyze_skill_gaps(result, goals)
    typer.echo("\nSkill-gap analysis:")
    if isinstance(outcome, Failed):
        typer.echo(f"  Unavailable: {outcome.error}")
        return None
    if isinstance(outcome, Fallback):
        typer.echo(f"  (general guidance; {outcome.reason})")
    _print_analysis(outcome.data)
    return outcome.data


@app.command("list")
def list_assessments(config: Path | None = ConfigOption) -> None:
    """Show the available assessments."""
    catalog = load_catalog(config)
    for assessment in catalog.assessments:
        duration = f"{assessment.duration_minutes} min" if assessment.duration_minutes else "untimed"
        typer.echo(f"{assessment.id}: {assessment.name}")
        details = [
            assessment.difficulty,
            duration,
            f"{len(assessment.questions)} questions",
        ]
        if assessment.week is not None:
            details.append(f"week {assessment.week}")
        if assessment.passing_score is not None:
            details.append(f"pass {assessment.passing_score}%")
        if assessment.max_attempts is not None:
            details.append(f"{assessment.max_attempts} attempts")
        if assessment.certification:
            details.append("certification")
        typer.echo(f"  {' | '.join(details)}")
        if assessment.skills_evaluated:
            typer.echo(f"  Skills: {', '.join(assessment.skills_evaluated)}")


@app.command()
def take(
    assessment_id: str = typer.Argument(..., help="Assessment id (see 'list')"),
    output: Path | None = typer.Option(
        None,
        "--output",
        "-o",
        path_type=Path,
        help="Save a PDF report to this path",
    ),
    analyze: bool = typer.Option(
        False,
        "--analyze",
        "-a",
        help="Request an AI skill-gap analysis of the result",
    ),
    goal: list[str] = typer.Option(
        [],
        "--goal",
        "-g",
        help="Career goal for the skill-gap analysis (repeatable)",
    ),
    config: Path | None = ConfigOption,
    verbose: bool = VerboseOption,
) -> None:
    """Take an assessment interactively."""
    _configure_logging(verbose)
    catalog = load_catalog(config)
    assessment = _get_assessment(catalog, assessment_id)
    log = AttemptLog()

    typer.echo(f"{assessment.name}\n{assessment.description}")
    while True:
        try:
            session = log.new_session(assessment, free_text_rules=catalog.free_text_rules)
            record = _run_session(session)
        except AssessmentError as e:
            typer.echo(f"Unable to score assessment: {e}", err=True)
            raise typer.Exit(code=1)

        typer.echo(_format_result_for_display(record.result, assessment.name))
        typer.echo(_format_attempt_status(record, assessment))

        left = log.attempts_left(assessment)
        if record.passed is False and left:
            if typer.confirm(f"Retake the test? ({left} attempts left)", default=False):
                continue
        break

    analysis = _skill_gap_analysis(record.result, goal) if analyze else None
    if output is not None:
        generate_pdf(record.result, assessment, output, attempt=record, analysis=analysis)
        typer.echo(f"Report saved to {output}")


@app.command()
def score(
    assessment_id: str = typer.Argument(..., help="Assessment id (see 'list')"),
    answers: Path = typer.Option(
        ...,
        "--answers",
        "-i",
        path_type=Path,
        exists=True,
        help="YAML file mapping question ids to answers",
    ),
    output: Path | None = typer.Option(
        None,
        "--output",
        "-o",
        path_type=Path,
        help="Save a PDF report to this path",
    ),
    as_json: bool = typer.Option(False, "--json", help="Print the result as JSON"),
    config: Path | None = ConfigOption,
    verbose: bool = VerboseOption,
) -> None:
    """Score a prepared set of answers without prompting."""
    _configure_logging(verbose)
    catalog = load_catalog(config)
    assessment = _get_assessment(catalog, assessment_id)

    data = yaml.safe_load(answers.read_text(encoding="utf-8")) or {}
    if not isinstance(data, dict):
        raise typer.BadParameter("Answers file must map question ids to answers")

    questions = {q.id: q for q in assessment.questions}
    session = AssessmentSession(assessment, free_text_rules=catalog.free_text_rules)
    try:
        for question_id, value in data.items():
            question = questions.get(str(question_id))
            session.record_answer(str(question_id), _answer_value(question, value))
    except KeyError as e:
        raise typer.BadParameter(str(e.args[0]))
    try:
        record = session.submit()
    except AssessmentError as e:
        typer.echo(f"Unable to score assessment: {e}", err=True)
        raise typer.Exit(code=1)

    if as_json:
        typer.echo(record.result.model_dump_json(indent=2))
    else:
        typer.echo(_format_result_for_display(record.result, assessment.name))
    if output is not None:
        generate_pdf(record.result, assessment, output)
        typer.echo(f"Report saved to {output}")


@app.command()
def rate(
    category: list[str] = typer.Option(
        [],
        "--category",
        "-c",
        help="Only rate these categories (repeatable; default: all)",
    ),
    config: Path | None = ConfigOption,
) -> None:
    """Rate yourself on the self-assessment questionnaire."""
    catalog = load_catalog(config)
    categories = [c for c in catalog.self_rating if not category or c.id in category]
    if not categories:
        raise typer.BadParameter("No matching self-rating categories")

    scores: dict[str, int] = {}
    for cat in categories:
        typer.echo(f"\n{cat.title}: {cat.description}")
        ratings = []
        for question in cat.questions:
            typer.echo(f"\n{question.prompt}")
            for number, option in enumerate(question.options, start=1):
                typer.echo(f"  {number}. {option}")
            ratings.append(_ask_rating())
        scores[cat.title] = score_self_rating(ratings)

    typer.echo("\n=== Self-assessment ===\n")
    for title, value in scores.items():
        typer.echo(f"  {title}: {value}% - {classify_tier(value, SELF_RATING_TIERS)}")


@app.command()
def practice(
    skill: str = typer.Argument(..., help="Skill to practice"),
    count: int = typer.Option(3, "--count", "-n", min=1, max=10, help="Number of questions"),
    verbose: bool = VerboseOption,
) -> None:
    """Generate and take AI practice questions for one skill."""
    _configure_logging(verbose)
    outcome = generate_practice_questions(skill, count)
    if isinstance(outcome, Failed):
        typer.echo(f"Could not generate practice questions: {outcome.error}", err=True)
        raise typer.Exit(code=1)

    assessment = AssessmentDefinition(
        id=f"practice-{skill.lower().replace(' ', '-')}",
        name=f"{skill} Practice",
        questions=outcome.data,
        skills_evaluated=[skill],
    )
    record = _run_session(AssessmentSession(assessment))
    typer.echo(_format_result_for_display(record.result, assessment.name))
    for question in assessment.questions:
        if question.explanation:
            typer.echo(f"{question.prompt}\n  {question.explanation}")


def main() -> None:
    app()


if __name__ == "__main__":
    main()
