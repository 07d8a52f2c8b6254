"""Unit tests for versioned profile migrations."""

from __future__ import annotations

import pytest

from bedlaunch.config.models import ProfileConfig, ProfileType
from bedlaunch.migrations.engine import MigrationEngine, MigrationError
from bedlaunch.migrations.steps import (
    DEFAULT_STEPS,
    add_heavy_model,
    add_provider_prefix,
    backfill_profile_type,
    cache_profile_identifiers,
    normalize_model_names,
)
from tests.unit.helpers import (
    HAIKU_ID,
    SONNET_ID,
    StaticFetcher,
    api_profile,
    resolver_factory,
)


@pytest.mark.unit
def test_normalize_model_names_adds_provider_prefix() -> None:
    """Bare model names gain their provider; empty fields stay empty."""
    # Arrange - unversioned profile with a bare model
    config = ProfileConfig(version="", model="claude-sonnet-4-5", fast_model="")

    # Act - run the step
    changed = normalize_model_names(config, None)

    # Assert - prefixed
    assert changed is True
    assert config.model == "anthropic.claude-sonnet-4-5"
    assert config.fast_model == ""


@pytest.mark.unit
@pytest.mark.parametrize(
    ("model", "expected"),
    [
        ("llama3-70b", "meta.llama3-70b"),
        ("titan-text", "amazon.titan-text"),
        ("j2-ultra", "ai21.j2-ultra"),
        ("command-r", "cohere.command-r"),
        ("mistral-large", "mistral.mistral-large"),
        ("jamba-1-5", "ai21.jamba-1-5"),
        ("nova-pro", "anthropic.nova-pro"),
        ("amazon.nova-pro", "amazon.nova-pro"),
        ("", ""),
    ],
)
def test_add_provider_prefix(model: str, expected: str) -> None:
    """Known prefixes map to providers; unknown ones default to anthropic."""
    assert add_provider_prefix(model) == expected


@pytest.mark.unit
def test_cache_step_resolves_friendly_names() -> None:
    """Migrating 0.3.0 to 0.4.0 replaces friendly names with identifiers."""
    # Arrange - friendly model, resolver returning the sonnet identifier
    config = ProfileConfig(
        version="0.3.0",
        model="anthropic.claude-sonnet-4-5",
        profile_type=ProfileType.BEDROCK,
    )
    engine = MigrationEngine("0.4.0", resolver_for=resolver_factory(StaticFetcher([SONNET_ID])))

    # Act - migrate
    result = engine.migrate(config)

    # Assert - resolved and stamped, input untouched
    assert result.config.model == SONNET_ID
    assert result.config.version == "0.4.0"
    assert result.applied == ("cache_profile_identifiers",)
    assert result.changed is True
    assert config.model == "anthropic.claude-sonnet-4-5"


@pytest.mark.unit
def test_full_upgrade_from_unversioned_runs_steps_in_order() -> None:
    """An unversioned profile runs every step and ends fully migrated."""
    # Arrange - unversioned bare names, no profile type
    config = ProfileConfig(model="claude-sonnet-4-5", fast_model="claude-haiku-4-5")
    fetcher = StaticFetcher()
    engine = MigrationEngine("0.7.0", resolver_for=resolver_factory(fetcher))

    # Act - migrate
    result = engine.migrate(config)

    # Assert - every transformation applied
    migrated = result.config
    assert migrated.profile_type == ProfileType.BEDROCK
    assert migrated.model == SONNET_ID
    assert migrated.fast_model == HAIKU_ID
    assert migrated.heavy_model == SONNET_ID
    assert migrated.version == "0.7.0"
    assert result.applied == tuple(step.name for step in DEFAULT_STEPS)


@pytest.mark.unit
def test_migration_is_idempotent() -> None:
    """Migrating an already-migrated profile changes nothing."""
    # Arrange - migrate once
    engine = MigrationEngine("0.7.0", resolver_for=resolver_factory(StaticFetcher()))
    first = engine.migrate(ProfileConfig(model="claude-sonnet-4-5")).config

    # Act - migrate again
    second = engine.migrate(first)

    # Assert - no-op
    assert second.changed is False
    assert second.config == first


@pytest.mark.unit
def test_steps_are_noops_when_reapplied() -> None:
    """Each step checks its field before setting it."""
    # Arrange - already migrated profile
    config = ProfileConfig(
        profile_type=ProfileType.BEDROCK,
        model=SONNET_ID,
        fast_model=HAIKU_ID,
        heavy_model=SONNET_ID,
    )

    # Act / Assert - nothing changes
    assert normalize_model_names(config, None) is False
    assert backfill_profile_type(config, None) is False
    assert cache_profile_identifiers(config, None) is False
    assert add_heavy_model(config, None) is False


@pytest.mark.unit
def test_fresh_install_is_not_migrated() -> None:
    """Unversioned profiles with no models are left alone."""
    engine = MigrationEngine("0.7.0")

    result = engine.migrate(ProfileConfig())

    assert engine.needs_migration(ProfileConfig()) is False
    assert result.changed is False


@pytest.mark.unit
def test_dev_build_never_migrates() -> None:
    """Development builds neither migrate nor stamp."""
    engine = MigrationEngine("dev")
    config = ProfileConfig(version="0.1.0", model="claude-sonnet-4-5")

    result = engine.migrate(config)

    assert result.changed is False
    assert result.config.model == "claude-sonnet-4-5"


@pytest.mark.unit
def test_pending_steps_respect_version_window() -> None:
    """Only steps after the profile version and up to the CLI version run."""
    # Arrange - profile at 0.4.0, CLI at 0.5.0
    engine = MigrationEngine("0.5.0")
    config = ProfileConfig(version="0.4.0", model=SONNET_ID)

    # Act - compute pending
    names = [step.name for step in engine.pending_steps(config)]

    # Assert - only the heavy-model step
    assert names == ["add_heavy_model"]


@pytest.mark.unit
def test_api_profiles_skip_bedrock_only_steps() -> None:
    """API profiles never touch the catalog or gain a heavy default."""
    # Arrange - old api profile, fetcher that fails if used
    config = api_profile(version="0.5.0", heavy_model="")
    fetcher = StaticFetcher(error=OSError("must not fetch"))
    engine = MigrationEngine("0.7.0", resolver_for=resolver_factory(fetcher))

    # Act - migrate
    result = engine.migrate(config)

    # Assert - only stamped
    assert result.config.heavy_model == ""
    assert result.config.model == "anthropic/claude-sonnet-4-5"
    assert result.config.version == "0.7.0"
    assert fetcher.calls == 0


@pytest.mark.unit
def test_failed_step_raises_with_reconfigure_hint() -> None:
    """Catalog failures abort migration and point to reconfiguration."""
    # Arrange - friendly model that does not exist
    config = ProfileConfig(
        version="0.3.0",
        model="anthropic.claude-unknown",
        profile_type=ProfileType.BEDROCK,
    )
    engine = MigrationEngine("0.7.0", resolver_for=resolver_factory(StaticFetcher()))

    # Act - migrate
    with pytest.raises(MigrationError) as exc_info:
        engine.migrate(config)

    # Assert - error fields and untouched input
    error = exc_info.value
    assert error.step == "cache_profile_identifiers"
    assert error.from_version == "0.3.0"
    assert error.to_version == "0.7.0"
    assert "bedlaunch config set" in str(error)
    assert config.model == "anthropic.claude-unknown"


@pytest.mark.unit
def test_missing_resolver_is_a_migration_error() -> None:
    """Resolution without a catalog raises a migration error."""
    engine = MigrationEngine("0.7.0")

    with pytest.raises(MigrationError):
        engine.migrate(ProfileConfig(version="0.3.0", model="anthropic.claude-sonnet-4-5"))
