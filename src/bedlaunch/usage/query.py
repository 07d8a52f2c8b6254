"""Filters and date windows for stored session queries."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta

from bedlaunch.catalog.grammar import to_friendly_name


class UsageQueryError(ValueError):
    """Raised when a usage filter cannot be parsed."""


@dataclass(frozen=True)
class UsageQuery:
    """Session filter; ``None`` fields match everything.

    ``start`` and ``end`` are inclusive bounds on the session start time.
    Naive datetimes are read as local time.
    """

    profile_name: str | None = None
    model: str | None = None
    start: datetime | None = None
    end: datetime | None = None

    def matches_model(self, model: str) -> bool:
        """Return whether a stored main model satisfies the model filter.

        Full identifiers and friendly names match each other, so
        ``anthropic.claude-sonnet-4-5`` selects every geography's Sonnet 4.5.
        """
        if not self.model:
            return True
        if model == self.model:
            return True
        return bool(model) and to_friendly_name(model) == to_friendly_name(self.model)

    def describe(self) -> str:
        """Render the date window for headings."""
        if self.start and self.end:
            return f"{self.start:%Y-%m-%d} to {self.end:%Y-%m-%d}"
        if self.start:
            return f"Since {self.start:%Y-%m-%d}"
        if self.end:
            return f"Until {self.end:%Y-%m-%d}"
        return "All time"


def _start_of(day: date, now: datetime) -> datetime:
    return datetime.combine(day, time.min, tzinfo=now.tzinfo)


def _end_of(day: date, now: datetime) -> datetime:
    return datetime.combine(day, time.max, tzinfo=now.tzinfo)


def today_window(now: datetime) -> tuple[datetime, datetime]:
    """Return the calendar day containing ``now``."""
    return _start_of(now.date(), now), _end_of(now.date(), now)


def week_window(now: datetime) -> tuple[datetime, datetime]:
    """Return Monday 00:00 of the current week through ``now``."""
    monday = now.date() - timedelta(days=now.weekday())
    return _start_of(monday, now), now


def month_window(month: str, now: datetime) -> tuple[datetime, datetime]:
    """Return the whole calendar month named ``YYYY-MM``.

    Args:
        month: Month in ``YYYY-MM`` form.
        now: Reference time supplying the timezone.

    Returns:
        First and last instant of the month.

    Raises:
        UsageQueryError: If ``month`` is not ``YYYY-MM``.
    """
    try:
        first = datetime.strptime(month, "%Y-%m").date()
    except ValueError as exc:
        raise UsageQueryError(f"invalid month '{month}', use YYYY-MM") from exc
    following = (first.replace(day=28) + timedelta(days=4)).replace(day=1)
    return _start_of(first, now), _end_of(following - timedelta(days=1), now)


def parse_day(value: str, flag: str) -> date:
    """Parse a ``YYYY-MM-DD`` option value.

    Raises:
        UsageQueryError: If ``value`` is not a date.
    """
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError as exc:
        raise UsageQueryError(f"invalid --{flag} date '{value}', use YYYY-MM-DD") from exc


def build_query(
    *,
    now: datetime,
    profile_name: str | None = None,
    model: str | None = None,
    since: str | None = None,
    until: str | None = None,
    month: str | None = None,
    today: bool = False,
    week: bool = False,
) -> UsageQuery:
    """Build a query from ``stats`` options.

    ``--today`` wins over ``--week``, which wins over ``--month``; the
    explicit ``--since``/``--until`` pair applies only when none is given.
    ``--until`` includes the whole named day.

    Args:
        now: Current local time.
        profile_name: Profile filter.
        model: Model filter.
        since: First day, ``YYYY-MM-DD``.
        until: Last day, ``YYYY-MM-DD``.
        month: Month, ``YYYY-MM``.
        today: Restrict to the current day.
        week: Restrict to the current week.

    Returns:
        Query for the sink.

    Raises:
        UsageQueryError: If a date option is malformed.
    """
    start: datetime | None = None
    end: datetime | None = None
    if today:
        start, end = today_window(now)
    elif week:
        start, end = week_window(now)
    elif month:
        start, end = month_window(month, now)
    else:
        if since:
            start = _start_of(parse_day(since, "since"), now)
        if until:
            end = _end_of(parse_day(until, "until"), now)
    return UsageQuery(profile_name=profile_name, model=model, start=start, end=end)
