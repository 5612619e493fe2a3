"""Render appeal letters as PDF documents for mailing or fax."""

from pathlib import Path
from typing import BinaryIO
from xml.sax.saxutils import escape

from reportlab.lib.pagesizes import letter
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import inch
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer

from ..schemas.appeal import AppealResult

styles = getSampleStyleSheet()
LETTER_STYLE = ParagraphStyle(
    name="AppealBody", parent=styles["Normal"], fontSize=10, leading=13
)


def _paragraph(line: str) -> Paragraph:
    """One letter line, keeping its leading indentation."""
    stripped = line.lstrip(" ")
    indent = "&nbsp;" * (len(line) - len(stripped))
    return Paragraph(indent + escape(stripped), LETTER_STYLE)


def render_appeal_pdf(appeal: AppealResult | str, target: str | Path | BinaryIO) -> None:
    """Write the appeal letter to ``target`` (a path or binary file object)."""
    text = appeal.letter_text if isinstance(appeal, AppealResult) else appeal
    destination = str(target) if isinstance(target, Path) else target

    doc = SimpleDocTemplate(
        destination,
        pagesize=letter,
        leftMargin=inch,
        rightMargin=inch,
        topMargin=inch,
        bottomMargin=inch,
        title="Appeal of Denied Claim",
    )

    story = []
    for line in text.splitlines():
        if line.strip():
            story.append(_paragraph(line))
        else:
            story.append(Spacer(1, 8))

    doc.build(story)
