"""Session usage recording backed by SQLite."""

from __future__ import annotations

import csv
import logging
import sqlite3
from collections import Counter
from collections.abc import Sequence
from contextlib import closing
from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path
from typing import Protocol

from bedlaunch.usage.query import UsageQuery

_LOGGER = logging.getLogger(__name__)

EXPORT_COLUMNS = (
    "Start Time",
    "End Time",
    "Duration (min)",
    "Profile Name",
    "Model",
    "Fast Model",
    "Heavy Model",
    "Exit Code",
    "Working Directory",
)


class UsageSink(Protocol):
    """Protocol for collaborators that record finished sessions."""

    def record_session(
        self,
        *,
        profile_name: str,
        identifiers: Sequence[str],
        start: datetime,
        end: datetime,
        exit_code: int,
    ) -> None:
        """Record one finished assistant session."""


class NullUsageSink:
    """UsageSink that drops everything; used when tracking is disabled."""

    def record_session(
        self,
        *,
        profile_name: str,
        identifiers: Sequence[str],
        start: datetime,
        end: datetime,
        exit_code: int,
    ) -> None:
        """Ignore the session."""
        del profile_name, identifiers, start, end, exit_code


@dataclass(frozen=True)
class SessionRecord:
    """One stored session row."""

    profile_name: str
    model: str
    fast_model: str
    heavy_model: str
    started_at: str
    ended_at: str
    duration_seconds: float
    exit_code: int
    working_directory: str


@dataclass(frozen=True)
class UsageSummary:
    """Aggregate statistics over stored sessions."""

    total_sessions: int = 0
    total_duration_seconds: float = 0.0
    failed_sessions: int = 0
    model_breakdown: dict[str, int] = field(default_factory=dict)
    profile_breakdown: dict[str, int] = field(default_factory=dict)

    @property
    def average_session_minutes(self) -> float:
        """Return mean session length in minutes."""
        if not self.total_sessions:
            return 0.0
        return self.total_duration_seconds / self.total_sessions / 60


class SqliteUsageSink:
    """SQLite-backed store of launched assistant sessions."""

    def __init__(self, sqlite_path: Path, *, working_directory: Path | None = None) -> None:
        """Create store and ensure required schema exists.

        Args:
            sqlite_path: SQLite file path for session rows.
            working_directory: Directory recorded with each session.
        """
        self._sqlite_path = sqlite_path
        self._working_directory = working_directory or Path.cwd()
        self._sqlite_path.parent.mkdir(parents=True, exist_ok=True)
        self._initialize()

    def record_session(
        self,
        *,
        profile_name: str,
        identifiers: Sequence[str],
        start: datetime,
        end: datetime,
        exit_code: int,
    ) -> None:
        """Insert one session row.

        Args:
            profile_name: Launcher profile used.
            identifiers: ``(model, fast_model, heavy_model)`` in use.
            start: Session start time.
            end: Session end time.
            exit_code: Assistant exit code.
        """
        model, fast_model, heavy_model = (tuple(identifiers) + ("", "", ""))[:3]
        with closing(self._connect()) as conn:
            conn.execute(
                (
                    "INSERT INTO sessions "
                    "(profile_name, model, fast_model, heavy_model, started_at, "
                    "ended_at, duration_seconds, exit_code, working_directory) "
                    "VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)"
                ),
                (
                    profile_name,
                    model,
                    fast_model,
                    heavy_model,
                    _stamp(start),
                    _stamp(end),
                    max((end - start).total_seconds(), 0.0),
                    exit_code,
                    str(self._working_directory),
                ),
            )
            conn.commit()

    def list_sessions(self, query: UsageQuery | None = None) -> tuple[SessionRecord, ...]:
        """List stored sessions, oldest first.

        Args:
            query: Optional profile, model and start-time filter.

        Returns:
            Session rows.
        """
        query = query or UsageQuery()
        sql = (
            "SELECT profile_name, model, fast_model, heavy_model, started_at, "
            "ended_at, duration_seconds, exit_code, working_directory FROM sessions "
            "WHERE 1=1"
        )
        params: list[str] = []
        if query.profile_name is not None:
            sql += " AND profile_name = ?"
            params.append(query.profile_name)
        if query.start is not None:
            sql += " AND started_at >= ?"
            params.append(_stamp(query.start))
        if query.end is not None:
            sql += " AND started_at <= ?"
            params.append(_stamp(query.end))
        sql += " ORDER BY started_at, id"
        with closing(self._connect()) as conn:
            rows = conn.execute(sql, params).fetchall()
        records = (
            SessionRecord(
                profile_name=str(row[0]),
                model=str(row[1]),
                fast_model=str(row[2]),
                heavy_model=str(row[3]),
                started_at=str(row[4]),
                ended_at=str(row[5]),
                duration_seconds=float(row[6]),
                exit_code=int(row[7]),
                working_directory=str(row[8]),
            )
            for row in rows
        )
        return tuple(record for record in records if query.matches_model(record.model))

    def summarize(self, query: UsageQuery | None = None) -> UsageSummary:
        """Aggregate stored sessions.

        Args:
            query: Optional filter.

        Returns:
            Usage summary.
        """
        sessions = self.list_sessions(query)
        if not sessions:
            return UsageSummary()
        models = Counter(session.model for session in sessions if session.model)
        profiles = Counter(session.profile_name for session in sessions)
        return UsageSummary(
            total_sessions=len(sessions),
            total_duration_seconds=sum(session.duration_seconds for session in sessions),
            failed_sessions=sum(1 for session in sessions if session.exit_code != 0),
            model_breakdown=dict(models.most_common()),
            profile_breakdown=dict(profiles.most_common()),
        )

    def export_csv(self, path: Path, query: UsageQuery | None = None) -> int:
        """Write matching sessions to a CSV file.

        Args:
            path: Destination file; parent directories are created.
            query: Optional filter.

        Returns:
            Number of exported sessions.
        """
        sessions = self.list_sessions(query)
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("w", encoding="utf-8", newline="") as handle:
            writer = csv.writer(handle)
            writer.writerow(EXPORT_COLUMNS)
            for session in sessions:
                writer.writerow(
                    [
                        session.started_at,
                        session.ended_at,
                        f"{session.duration_seconds / 60:.1f}",
                        session.profile_name,
                        session.model,
                        session.fast_model,
                        session.heavy_model,
                        session.exit_code,
                        session.working_directory,
                    ]
                )
        _LOGGER.info("Exported %d usage session(s) to %s", len(sessions), path)
        return len(sessions)

    def reset(self) -> int:
        """Delete every stored session.

        Returns:
            Number of deleted rows.
        """
        with closing(self._connect()) as conn:
            cursor = conn.execute("DELETE FROM sessions")
            conn.commit()
        deleted = cursor.rowcount
        _LOGGER.info("Deleted %d usage session(s)", deleted)
        return deleted

    def _initialize(self) -> None:
        """Create required session schema if missing."""
        with closing(self._connect()) as conn:
            conn.execute(
                "CREATE TABLE IF NOT EXISTS sessions ("
                "id INTEGER PRIMARY KEY AUTOINCREMENT,"
                "profile_name TEXT NOT NULL,"
                "model TEXT NOT NULL,"
                "fast_model TEXT NOT NULL,"
                "heavy_model TEXT NOT NULL,"
                "started_at TEXT NOT NULL,"
                "ended_at TEXT NOT NULL,"
                "duration_seconds REAL NOT NULL,"
                "exit_code INTEGER NOT NULL,"
                "working_directory TEXT NOT NULL"
                ")"
            )
            conn.commit()

    def _connect(self) -> sqlite3.Connection:
        """Open a SQLite connection."""
        return sqlite3.connect(self._sqlite_path)


def _stamp(moment: datetime) -> str:
    """Render a fixed-width UTC timestamp; naive values are read as local time."""
    return moment.astimezone(UTC).isoformat(timespec="microseconds")
