"""Profile schema migration public surface."""

from bedlaunch.migrations.engine import MigrationEngine, MigrationError, MigrationResult
from bedlaunch.migrations.steps import (
    DEFAULT_PROVIDER,
    DEFAULT_STEPS,
    MODEL_PREFIX_PROVIDERS,
    MigrationStep,
    MissingResolverError,
    ResolverFactory,
    add_heavy_model,
    add_provider_prefix,
    backfill_profile_type,
    cache_profile_identifiers,
    normalize_model_names,
)

__all__ = [
    "DEFAULT_PROVIDER",
    "DEFAULT_STEPS",
    "MODEL_PREFIX_PROVIDERS",
    "MigrationEngine",
    "MigrationError",
    "MigrationResult",
    "MigrationStep",
    "MissingResolverError",
    "ResolverFactory",
    "add_heavy_model",
    "add_provider_prefix",
    "backfill_profile_type",
    "cache_profile_identifiers",
    "normalize_model_names",
]
