"""PDF result report generation using ReportLab."""

import logging
from pathlib import Path
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import cm
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from .catalog import AssessmentDefinition
from .models import AssessmentResult, SkillGapAnalysis
from .session import AttemptRecord

logger = logging.getLogger("skill_assessment.pdf_generator")


def _create_breakdown_table(
    result: AssessmentResult, col_widths: list[float], cell_style: ParagraphStyle
) -> Table:
    """Create a table with one row per skill."""
    data = [["Skill", "Score", "Tier"]]
    for skill, score in result.skill_breakdown.items():
        data.append([Paragraph(escape(skill), cell_style), f"{score}%", result.skill_tiers[skill]])

    table = Table(data, colWidths=col_widths)
    table.setStyle(
        TableStyle(
            [
                ("BACKGROUND", (0, 0), (-1, 0), colors.HexColor("#4472C4")),
                ("TEXTCOLOR", (0, 0), (-1, 0), colors.whitesmoke),
                ("ALIGN", (0, 0), (-1, -1), "LEFT"),
                ("ALIGN", (1, 0), (1, -1), "CENTER"),
                ("VALIGN", (0, 0), (-1, -1), "TOP"),
                ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
                ("GRID", (0, 0), (-1, -1), 0.5, colors.grey),
                ("ROWBACKGROUNDS", (0, 1), (-1, -1), [colors.white, colors.HexColor("#F2F2F2")]),
                ("FONTSIZE", (0, 0), (-1, -1), 9),
                ("LEFTPADDING", (0, 0), (-1, -1), 6),
                ("RIGHTPADDING", (0, 0), (-1, -1), 6),
                ("TOPPADDING", (0, 0), (-1, -1), 6),
                ("BOTTOMPADDING", (0, 0), (-1, -1), 6),
            ]
        )
    )
    return table


def _bullet_section(title: str, items: list[str], header: ParagraphStyle, body: ParagraphStyle) -> list:
    if not items:
        return []
    elements = [Paragraph(title, header)]
    elements.extend(Paragraph(f"- {escape(item)}", body) for item in items)
    elements.append(Spacer(1, 0.3 * cm))
    return elements


def generate_pdf(
    result: AssessmentResult,
    assessment: AssessmentDefinition,
    output_path: Path,
    attempt: AttemptRecord | None = None,
    analysis: SkillGapAnalysis | None = None,
) -> None:
    """
    Generate a PDF report for an assessment result.

    Args:
        result: The scored result
        assessment: The assessment that was taken
        output_path: Path where the PDF will be saved
        attempt: Attempt details (time spent, pass/fail) when scored in a session
        analysis: Optional skill-gap analysis to append
    """
    logger.debug("Generating PDF: %s (skills=%d)", output_path, len(result.skill_breakdown))
    doc = SimpleDocTemplate(
        str(output_path),
        pagesize=A4,
        rightMargin=1.5 * cm,
        leftMargin=1.5 * cm,
        topMargin=1.5 * cm,
        bottomMargin=1.5 * cm,
    )

    styles = getSampleStyleSheet()
    cell_style = ParagraphStyle("Cell", parent=styles["Normal"], fontSize=9, leading=11)
    title_style = ParagraphStyle("CustomTitle", parent=styles["Heading1"], fontSize=16, spaceAfter=6)
    section_header = ParagraphStyle("SectionHeader", parent=styles["Heading2"], fontSize=12, spaceAfter=6)
    body_style = ParagraphStyle("Body", parent=styles["Normal"], fontSize=10, spaceAfter=2)

    elements = [
        Paragraph(f"Assessment Report: {escape(assessment.name)}", title_style),
        Paragraph(
            f"Overall score: {result.overall_score}% ({result.tier}) - "
            f"{result.scored_points}/{result.max_points} points",
            styles["Normal"],
        ),
    ]
    if attempt is not None:
        minutes, seconds = divmod(attempt.time_spent_seconds, 60)
        status = f"Time spent: {minutes}m {seconds:02d}s"
        if attempt.timed_out:
            status += " (time expired)"
        if attempt.passed is not None:
            status += f" | {'Passed' if attempt.passed else 'Not passed'} (passing score {assessment.passing_score}%)"
        if attempt.certified:
            status += " | Certificate earned"
        elements.append(Paragraph(status, styles["Normal"]))
    elements.append(Spacer(1, 0.5 * cm))

    elements.append(Paragraph("Skill breakdown:", section_header))
    elements.append(_create_breakdown_table(result, [8 * cm, 3 * cm, 5 * cm], cell_style))
    elements.append(Spacer(1, 0.5 * cm))

    elements.extend(_bullet_section("Strengths:", result.strengths, section_header, body_style))
    elements.extend(_bullet_section("Areas to improve:", result.weaknesses, section_header, body_style))
    elements.extend(_bullet_section("Recommendations:", result.recommendations, section_header, body_style))
    elements.extend(_bullet_section("Next steps:", result.next_steps, section_header, body_style))

    if analysis is not None:
        elements.append(
            Paragraph(f"Career readiness: {analysis.career_readiness}%", section_header)
        )
        if analysis.time_to_goal:
            elements.append(Paragraph(f"Time to goal: {escape(analysis.time_to_goal)}", body_style))
        for gap in analysis.skill_gaps:
            elements.append(
                Paragraph(
                    f"<b>{escape(gap.skill)}</b> ({escape(gap.priority)} priority): level "
                    f"{gap.current_level} -> {gap.required_level}",
                    body_style,
                )
            )
            elements.extend(Paragraph(f"&nbsp;&nbsp;- {escape(step)}", cell_style) for step in gap.learning_path)
        elements.append(Spacer(1, 0.3 * cm))
        elements.extend(
            _bullet_section("Strengths to build on:", analysis.strengths, section_header, body_style)
        )
        elements.extend(
            _bullet_section("AI recommendations:", analysis.recommendations, section_header, body_style)
        )

    doc.build(elements)
    logger.debug("PDF saved to %s", output_path)
