"""Session usage tracking public surface."""

from bedlaunch.usage.query import (
    UsageQuery,
    UsageQueryError,
    build_query,
    month_window,
    today_window,
    week_window,
)
from bedlaunch.usage.tracker import (
    EXPORT_COLUMNS,
    NullUsageSink,
    SessionRecord,
    SqliteUsageSink,
    UsageSink,
    UsageSummary,
)

__all__ = [
    "EXPORT_COLUMNS",
    "NullUsageSink",
    "SessionRecord",
    "SqliteUsageSink",
    "UsageQuery",
    "UsageQueryError",
    "UsageSink",
    "UsageSummary",
    "build_query",
    "month_window",
    "today_window",
    "week_window",
]
