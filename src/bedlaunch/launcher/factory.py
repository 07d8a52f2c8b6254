"""Wiring of collaborators for one CLI invocation."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from pathlib import Path

from pydantic import BaseModel, ConfigDict

from bedlaunch.catalog.fetchers import ApiModelFetcher, BedrockCatalogFetcher
from bedlaunch.catalog.resolver import CatalogFetcher, ModelResolver
from bedlaunch.catalog.validation import (
    ValidationReport,
    Validator,
    validate_api_models,
    validate_bedrock_identifiers,
)
from bedlaunch.config.models import ApiRouting, ProfileConfig, ProfileConfigError
from bedlaunch.config.settings import LauncherSettings, usage_db_path
from bedlaunch.config.store import ProfileStore
from bedlaunch.launcher.coordinator import LaunchCoordinator
from bedlaunch.launcher.process import ProcessRunner, SubprocessRunner
from bedlaunch.migrations.engine import MigrationEngine
from bedlaunch.usage.tracker import NullUsageSink, SqliteUsageSink, UsageSink

FetcherFactory = Callable[[ProfileConfig, str | None], CatalogFetcher]


class LauncherContext(BaseModel):
    """Explicit per-invocation state built once at the CLI entry point."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    home: Path
    running_version: str
    settings: LauncherSettings = LauncherSettings()
    environ: dict[str, str] = {}


def resolve_api_key(
    config: ProfileConfig, environ: Mapping[str, str], override: str | None = None
) -> str | None:
    """Return the API key for API profiles, ``None`` for Bedrock.

    Raises:
        ProfileConfigError: If an API profile has no key available.
    """
    routing = config.routing()
    if not isinstance(routing, ApiRouting):
        return None
    if override:
        return override
    key = environ.get(routing.api_key_env, "").strip()
    if not key:
        raise ProfileConfigError(
            f"API key not found: set ${routing.api_key_env} or pass --api-key"
        )
    return key


class LauncherFactory:
    """Construct stores, resolvers, validators, and coordinators."""

    def __init__(
        self,
        context: LauncherContext,
        *,
        fetcher_factory: FetcherFactory | None = None,
        runner: ProcessRunner | None = None,
        usage_sink: UsageSink | None = None,
    ) -> None:
        """Store context and optional collaborator overrides.

        Args:
            context: Invocation context.
            fetcher_factory: Builds a catalog fetcher for a profile and API key.
            runner: Process runner for launches.
            usage_sink: Session recorder.
        """
        self.context = context
        self._fetcher_factory = fetcher_factory or self._default_fetcher
        self._runner = runner
        self._usage_sink = usage_sink

    def _default_fetcher(self, config: ProfileConfig, api_key: str | None) -> CatalogFetcher:
        timeout = self.context.settings.catalog_timeout_seconds
        routing = config.routing()
        if isinstance(routing, ApiRouting):
            return ApiModelFetcher(
                base_url=routing.base_url,
                api_key=api_key or "",
                timeout_seconds=timeout,
            )
        return BedrockCatalogFetcher(
            aws_profile=routing.aws_profile,
            region=routing.region,
            timeout_seconds=timeout,
        )

    def store(self) -> ProfileStore:
        """Return the profile store under the launcher home."""
        return ProfileStore(self.context.home)

    def fetcher_for(self, config: ProfileConfig, api_key: str | None = None) -> CatalogFetcher:
        """Return the catalog fetcher for ``config``."""
        return self._fetcher_factory(config, api_key)

    def resolver_for(self, config: ProfileConfig) -> ModelResolver:
        """Return a model resolver bound to ``config``'s coordinates."""
        return ModelResolver(self.fetcher_for(config))

    def migration_engine(self) -> MigrationEngine:
        """Return the migration engine for the running version."""
        return MigrationEngine(
            self.context.running_version,
            resolver_for=self.resolver_for,
        )

    def validator_for(self, config: ProfileConfig, api_key: str | None = None) -> Validator:
        """Return the validation callable raced against the assistant."""
        fetcher = self.fetcher_for(config, api_key)
        models = config.models()
        if isinstance(config.routing(), ApiRouting):

            def validate_api() -> ValidationReport:
                return validate_api_models(models, fetcher)

            return validate_api

        def validate_bedrock() -> ValidationReport:
            return validate_bedrock_identifiers(models, fetcher)

        return validate_bedrock

    def usage_sink(self) -> UsageSink:
        """Return the configured usage sink."""
        if self._usage_sink is not None:
            return self._usage_sink
        if not self.context.settings.usage.enabled:
            return NullUsageSink()
        return SqliteUsageSink(usage_db_path(self.context.home, self.context.settings))

    def coordinator(self, config: ProfileConfig, api_key: str | None = None) -> LaunchCoordinator:
        """Return a coordinator wired for one launch."""
        return LaunchCoordinator(
            runner=self._runner or SubprocessRunner(),
            validator=self.validator_for(config, api_key),
            usage_sink=self.usage_sink(),
            validation_timeout_seconds=self.context.settings.validation_timeout_seconds,
        )
