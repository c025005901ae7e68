"""
Report paginator for exporting a client's sessions.

Lays sessions out top-to-bottom across fixed-height pages. A session is a
header followed by its exercise rows, with a group header above every
superset or circuit. The paginator decides page breaks only; turning pages
into a document is the renderer's job.

Rules:
- Items (session header, group header, exercise row) are never split.
- A session's exercise list may continue on the next page.
- A header is only placed where the row that follows it also fits
  (keep-with-next), so headers are never stranded at a page bottom.
- Output depends only on the sessions and the layout constants.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Sequence

from pydantic import BaseModel, Field, model_validator

from domain.models import Exercise, GroupType, Session
from domain.services.grouping import count_group_headers, group_runs

logger = logging.getLogger(__name__)


class LayoutConfig(BaseModel):
    """Page and line-height constants, in points."""

    page_height: float = Field(default=692.0, gt=0, description="Content height of a page")
    first_page_reserved: float = Field(
        default=220.0, ge=0, description="Height taken by the title block on page 1"
    )
    session_header_height: float = Field(default=45.0, gt=0)
    session_spacing: float = Field(default=40.0, ge=0, description="Gap after each session")
    exercise_row_height: float = Field(default=30.0, gt=0)
    group_header_height: float = Field(default=40.0, gt=0)

    @model_validator(mode="after")
    def validate_fits_on_page(self) -> "LayoutConfig":
        """The tallest keep-together chain must fit on an empty page."""
        chain = self.session_header_height + self.group_header_height + self.exercise_row_height
        if chain > self.page_height:
            raise ValueError(
                f"session header, group header and one row ({chain}) exceed page height "
                f"({self.page_height})"
            )
        if self.first_page_reserved >= self.page_height:
            raise ValueError("first_page_reserved must leave room on the first page")
        return self

    @property
    def base_height(self) -> float:
        """Height of a session without any exercise content."""
        return self.session_header_height + self.session_spacing

    model_config = {"frozen": True}


class ItemKind(str, Enum):
    SESSION_HEADER = "session_header"
    GROUP_HEADER = "group_header"
    EXERCISE_ROW = "exercise_row"


@dataclass(frozen=True)
class LayoutItem:
    """One placed item; ``top`` is the offset from the page's content top."""

    kind: ItemKind
    session_id: str
    top: float
    height: float
    session_position: int
    exercise_index: Optional[int] = None
    display_number: Optional[int] = None
    group_type: Optional[GroupType] = None

    @property
    def bottom(self) -> float:
        return self.top + self.height


@dataclass
class Page:
    number: int
    items: List[LayoutItem] = field(default_factory=list)

    @property
    def used_height(self) -> float:
        return self.items[-1].bottom if self.items else 0.0

    def exercise_rows(self) -> List[LayoutItem]:
        return [item for item in self.items if item.kind == ItemKind.EXERCISE_ROW]


@dataclass
class SessionReport:
    """Ordered sessions of one client together with their page layout."""

    client_name: str
    sessions: List[Session]
    pages: List[Page]

    @property
    def page_count(self) -> int:
        return len(self.pages)


def order_sessions_for_report(sessions: Sequence[Session]) -> List[Session]:
    """
    Order sessions by session number, completed after active on ties.

    Sessions without a number use their 1-based position in the input.
    The sort is stable.
    """
    keyed = []
    for position, session in enumerate(sessions):
        number = session.session_number if session.session_number is not None else position + 1
        keyed.append((number, session.is_completed, position, session))
    keyed.sort(key=lambda entry: entry[:3])
    return [entry[3] for entry in keyed]


def block_height(session: Session, config: LayoutConfig) -> float:
    """Unbroken height of one session block."""
    return (
        config.base_height
        + config.exercise_row_height * len(session.exercises)
        + config.group_header_height * count_group_headers(session.exercises)
    )


class ReportPaginator:
    """
    Greedy top-to-bottom page layout.

    Usage:
        >>> paginator = ReportPaginator(LayoutConfig())
        >>> pages = paginator.layout(order_sessions_for_report(sessions))
    """

    def __init__(self, config: Optional[LayoutConfig] = None) -> None:
        self._config = config or LayoutConfig()

    @property
    def config(self) -> LayoutConfig:
        return self._config

    def layout(self, sessions: Sequence[Session]) -> List[Page]:
        """
        Lay out sessions in the given order.

        Args:
            sessions: Sessions, already ordered by the caller.

        Returns:
            Pages in order. Always at least one page (the title page).
        """
        config = self._config
        pages = [Page(number=1)]
        cursor = config.first_page_reserved

        def place(item_kind: ItemKind, height: float, keep_with: float, **fields) -> None:
            nonlocal cursor
            if cursor + height + keep_with > config.page_height and cursor > 0:
                pages.append(Page(number=len(pages) + 1))
                cursor = 0.0
            pages[-1].items.append(LayoutItem(kind=item_kind, top=cursor, height=height, **fields))
            cursor += height

        for position, session in enumerate(sessions, start=1):
            exercises = session.exercises
            runs = group_runs(exercises)

            place(
                ItemKind.SESSION_HEADER,
                config.session_header_height,
                self._lead_height(exercises, runs),
                session_id=session.id,
                session_position=position,
            )
            for run in runs:
                if run.is_group:
                    place(
                        ItemKind.GROUP_HEADER,
                        config.group_header_height,
                        config.exercise_row_height,
                        session_id=session.id,
                        session_position=position,
                        display_number=run.display_number,
                        group_type=run.group_type,
                    )
                for index in range(run.start, run.end + 1):
                    place(
                        ItemKind.EXERCISE_ROW,
                        config.exercise_row_height,
                        0.0,
                        session_id=session.id,
                        session_position=position,
                        exercise_index=index,
                        display_number=run.display_number,
                        group_type=run.group_type,
                    )
            cursor += config.session_spacing

        logger.debug(f"Laid out {len(sessions)} sessions on {len(pages)} pages")
        return pages

    def _lead_height(self, exercises: Sequence[Exercise], runs) -> float:
        """Height that must follow a session header on the same page."""
        if not exercises:
            return 0.0
        lead = self._config.exercise_row_height
        if runs[0].is_group:
            lead += self._config.group_header_height
        return lead


def build_report(
    client_name: str,
    sessions: Sequence[Session],
    config: Optional[LayoutConfig] = None,
) -> SessionReport:
    """Order a client's sessions and paginate them."""
    ordered = order_sessions_for_report(sessions)
    pages = ReportPaginator(config).layout(ordered)
    return SessionReport(client_name=client_name, sessions=ordered, pages=pages)
