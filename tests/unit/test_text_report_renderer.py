"""
Unit tests for the plain-text report renderer.
"""

from datetime import datetime, timezone

import pytest

from domain.models import GroupType, Time
from domain.services.report_paginator import LayoutConfig, build_report
from infrastructure.text_report_renderer import FORM_FEED, TextReportRenderer
from tests.fakes import make_exercise, make_session

pytestmark = pytest.mark.unit


@pytest.fixture
def renderer():
    """Create a TextReportRenderer."""
    return TextReportRenderer()


@pytest.fixture
def small_pages():
    """Layout fitting nine rows per page and no reserved header."""
    return LayoutConfig(
        page_height=300,
        first_page_reserved=0,
        session_header_height=30,
        session_spacing=0,
        exercise_row_height=30,
        group_header_height=30,
    )


class TestTextReportRenderer:
    """Tests for TextReportRenderer.render()."""

    def test_content_type(self, renderer):
        """Test the declared content type."""
        assert renderer.content_type == "text/plain"

    def test_renders_title_sessions_and_groups(self, renderer):
        """Test the title, session lines, group headers and numbered rows."""
        session = make_session(
            "s1",
            workout_name="Upper Body",
            session_number=1,
            exercises=[
                make_exercise("Bench Press", sets=4, reps=8, weight=60),
                make_exercise("Curl", group_type=GroupType.SUPERSET, group_id="g1"),
                make_exercise("Dip", group_type=GroupType.SUPERSET, group_id="g1"),
            ],
        )
        text = renderer.render(build_report("Alex", [session])).decode("utf-8")

        assert text.startswith("Training sessions: Alex\n")
        assert "Session 1: Upper Body (active)" in text
        assert "  1. Bench Press  4 x 8 reps  @ 60 kg" in text
        assert "  2. Superset" in text
        assert "    - Curl  3 x 10 reps" in text
        assert "Page 1 of 1" in text
        assert FORM_FEED not in text

    def test_completed_session_shows_date(self, renderer):
        """Test that a completed session shows its completion date."""
        session = make_session("s1", workout_name="Legs", session_number=2).toggled_completion(
            datetime(2026, 3, 14, 9, 30, tzinfo=timezone.utc)
        )
        text = renderer.render(build_report("Alex", [session])).decode("utf-8")

        assert "Session 2: Legs (completed 2026-03-14)" in text

    def test_timed_exercise(self, renderer):
        """Test that a timed exercise shows seconds instead of reps."""
        plank = make_exercise("Plank").model_copy(update={"metric": Time(seconds=45)})
        text = renderer.render(build_report("Alex", [make_session("s1", exercises=[plank])]))

        assert b"Plank  3 x 45s" in text

    def test_one_form_feed_per_page_break(self, renderer, small_pages):
        """Test that pages are separated by exactly one form feed each."""
        exercises = [make_exercise(f"E{i}") for i in range(25)]
        report = build_report("Alex", [make_session("s1", exercises=exercises)], small_pages)

        text = renderer.render(report).decode("utf-8")

        assert report.page_count == 3
        assert text.count(FORM_FEED) == report.page_count - 1
        assert "Page 3 of 3" in text

    def test_output_is_deterministic(self, renderer, small_pages):
        """Test that rendering twice gives identical bytes."""
        exercises = [make_exercise(f"E{i}") for i in range(12)]
        sessions = [make_session("s1", exercises=exercises), make_session("s2")]

        first = renderer.render(build_report("Alex", sessions, small_pages))
        second = renderer.render(build_report("Alex", sessions, small_pages))

        assert first == second
