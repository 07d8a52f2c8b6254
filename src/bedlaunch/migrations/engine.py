"""Versioned profile migration engine."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from bedlaunch.catalog.errors import CatalogError
from bedlaunch.config.models import ProfileConfig
from bedlaunch.config.versions import is_dev_version, version_lt
from bedlaunch.migrations.steps import (
    DEFAULT_STEPS,
    MigrationStep,
    MissingResolverError,
    ResolverFactory,
)

_LOGGER = logging.getLogger(__name__)

_UNVERSIONED = "0.0.0"


class MigrationError(RuntimeError):
    """Raised when a migration step fails; nothing has been persisted."""

    def __init__(
        self,
        message: str,
        *,
        step: str,
        from_version: str,
        to_version: str,
    ) -> None:
        """Create migration failure.

        Args:
            message: Human-readable error message.
            step: Name of the failing step.
            from_version: Profile version before migration.
            to_version: Version the engine was migrating to.
        """
        super().__init__(message)
        self.step = step
        self.from_version = from_version
        self.to_version = to_version


@dataclass(frozen=True)
class MigrationResult:
    """Migrated profile plus the steps that changed it."""

    config: ProfileConfig
    applied: tuple[str, ...] = ()
    stamped: bool = False

    @property
    def changed(self) -> bool:
        """Return whether the caller must persist ``config``."""
        return self.stamped or bool(self.applied)


class MigrationEngine:
    """Run pending migration steps against a profile copy."""

    def __init__(
        self,
        running_version: str,
        *,
        resolver_for: ResolverFactory | None = None,
        steps: Sequence[MigrationStep] = DEFAULT_STEPS,
    ) -> None:
        """Store version and step configuration.

        Args:
            running_version: Version of the running CLI.
            resolver_for: Builds a model resolver for a profile's coordinates.
            steps: Ordered migration steps; order is dependency order.
        """
        self.running_version = running_version
        self._resolver_for = resolver_for
        self._steps = tuple(steps)

    def needs_migration(self, config: ProfileConfig) -> bool:
        """Return whether ``config`` predates the running version.

        Development builds never migrate. An unversioned profile with no
        models is a fresh install and is left alone.

        Args:
            config: Loaded profile.

        Returns:
            ``True`` when :meth:`migrate` would run steps and stamp.
        """
        if is_dev_version(self.running_version):
            return False
        if not config.version:
            return not config.models_unset()
        return version_lt(config.version, self.running_version)

    def pending_steps(self, config: ProfileConfig) -> tuple[MigrationStep, ...]:
        """Return steps newer than the profile and not newer than the CLI."""
        if not self.needs_migration(config):
            return ()
        base = config.version or _UNVERSIONED
        return tuple(
            step
            for step in self._steps
            if version_lt(base, step.target_version)
            and not version_lt(self.running_version, step.target_version)
        )

    def migrate(self, config: ProfileConfig) -> MigrationResult:
        """Migrate a copy of ``config`` to the running version.

        The input is never mutated, so a failure leaves the caller's copy
        (and whatever is persisted) untouched.

        Args:
            config: Loaded profile.

        Returns:
            Migration result; ``changed`` tells the caller to persist.

        Raises:
            MigrationError: If any step fails.
        """
        if not self.needs_migration(config):
            return MigrationResult(config=config)
        from_version = config.version
        working = config.model_copy(deep=True)
        applied: list[str] = []
        for step in self.pending_steps(config):
            try:
                changed = step.apply(working, self._resolver_for)
            except (CatalogError, MissingResolverError) as exc:
                raise MigrationError(
                    (
                        f"failed to migrate profile from {from_version or 'unversioned'} "
                        f"to {self.running_version} ({step.description or step.name}): "
                        f"{exc}\nPlease re-run configuration: bedlaunch config set <key> <value>"
                    ),
                    step=step.name,
                    from_version=from_version,
                    to_version=self.running_version,
                ) from exc
            if changed:
                applied.append(step.name)
        working.version = self.running_version
        if applied:
            _LOGGER.info(
                "Migrated profile from %s to %s: %s",
                from_version or "unversioned",
                self.running_version,
                ", ".join(applied),
            )
        return MigrationResult(config=working, applied=tuple(applied), stamped=True)
