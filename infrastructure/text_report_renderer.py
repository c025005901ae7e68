"""
Plain-text session report renderer.

Renders one text page per layout page, pages separated by a form feed.
Output is a pure function of the report, so identical input gives
byte-identical output.
"""

from typing import List

from domain.models import Exercise, Session
from domain.services.report_paginator import ItemKind, LayoutItem, SessionReport

FORM_FEED = "\f"


def _exercise_line(exercise: Exercise, number: int, grouped: bool) -> str:
    label = "    -" if grouped else f"  {number}."
    line = f"{label} {exercise.name or '(unnamed)'}"
    if exercise.sets:
        line += f"  {exercise.sets} x {exercise.metric}"
    if exercise.weight:
        line += f"  @ {exercise.weight:g} kg"
    return line


def _session_line(session: Session, position: int) -> str:
    number = session.session_number if session.session_number is not None else position
    line = f"Session {number}: {session.workout_name}"
    if session.is_completed and session.completed_date is not None:
        line += f" (completed {session.completed_date.date().isoformat()})"
    elif not session.is_completed:
        line += " (active)"
    return line


class TextReportRenderer:
    """ReportRenderer producing UTF-8 text."""

    content_type = "text/plain"

    def render(self, report: SessionReport) -> bytes:
        rendered_pages = []
        for page in report.pages:
            lines: List[str] = []
            if page.number == 1:
                lines.append(f"Training sessions: {report.client_name}")
                lines.append("")
            lines.extend(self._render_item(report, item) for item in page.items)
            lines.append("")
            lines.append(f"Page {page.number} of {report.page_count}")
            rendered_pages.append("\n".join(lines) + "\n")
        return FORM_FEED.join(rendered_pages).encode("utf-8")

    def _render_item(self, report: SessionReport, item: LayoutItem) -> str:
        session = report.sessions[item.session_position - 1]
        if item.kind == ItemKind.SESSION_HEADER:
            return _session_line(session, item.session_position)
        if item.kind == ItemKind.GROUP_HEADER:
            return f"  {item.display_number}. {item.group_type.value.capitalize()}"
        exercise = session.exercises[item.exercise_index]
        return _exercise_line(exercise, item.display_number, exercise.is_grouped)
