"""
Domain services: pure logic over the session models.

- grouping: display numbering and superset/circuit structure
- report_paginator: page-break placement for session reports
"""

from domain.services.grouping import (
    GroupingError,
    GroupRun,
    append_to_circuit,
    compute_numbering,
    display_number,
    group_runs,
    is_first_in_group,
    is_last_in_group,
    new_group,
    remove_at,
    set_group_sets,
    validate_grouping,
)
from domain.services.report_paginator import (
    ItemKind,
    LayoutConfig,
    LayoutItem,
    Page,
    ReportPaginator,
    SessionReport,
    block_height,
    build_report,
    order_sessions_for_report,
)

__all__ = [
    # Grouping
    "GroupingError",
    "GroupRun",
    "append_to_circuit",
    "compute_numbering",
    "display_number",
    "group_runs",
    "is_first_in_group",
    "is_last_in_group",
    "new_group",
    "remove_at",
    "set_group_sets",
    "validate_grouping",
    # Report
    "ItemKind",
    "LayoutConfig",
    "LayoutItem",
    "Page",
    "ReportPaginator",
    "SessionReport",
    "block_height",
    "build_report",
    "order_sessions_for_report",
]
