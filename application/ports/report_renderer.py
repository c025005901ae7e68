"""
Report Renderer Interface (Port).

Page-break placement is decided by ``domain.services.report_paginator``;
a renderer turns the laid-out report into a document byte stream with
exactly one document page per layout page.
"""
from typing import Protocol

from domain.services.report_paginator import SessionReport


class ReportRenderer(Protocol):
    """Renders a paginated session report."""

    content_type: str

    def render(self, report: SessionReport) -> bytes:
        """
        Render the report.

        Args:
            report: Ordered sessions and their page layout.

        Returns:
            Document bytes.
        """
        ...
