"""Individual profile schema migration steps.

Each step mutates the profile it is given and returns whether anything
changed. Steps check the field they would set first, so re-running a step
on an already-migrated profile is a no-op.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass

from bedlaunch.catalog.grammar import is_full_identifier
from bedlaunch.catalog.resolver import ModelResolver
from bedlaunch.config.models import (
    MODEL_KEYS,
    ApiRouting,
    BedrockRouting,
    ProfileConfig,
    ProfileType,
)

_LOGGER = logging.getLogger(__name__)

ResolverFactory = Callable[[ProfileConfig], ModelResolver]

# Unknown prefixes fall back to the default provider rather than failing.
MODEL_PREFIX_PROVIDERS: tuple[tuple[str, str], ...] = (
    ("claude", "anthropic"),
    ("llama", "meta"),
    ("titan", "amazon"),
    ("j2", "ai21"),
    ("command", "cohere"),
    ("mistral", "mistral"),
    ("jamba", "ai21"),
)
DEFAULT_PROVIDER = "anthropic"

_MODEL_ATTRIBUTES = ("model", "fast_model", "heavy_model")


class MissingResolverError(RuntimeError):
    """Raised when a step needs catalog access the engine was not given."""


@dataclass(frozen=True)
class MigrationStep:
    """One schema transformation keyed by the version that introduced it."""

    target_version: str
    name: str
    apply: Callable[[ProfileConfig, ResolverFactory | None], bool]
    description: str = ""


def add_provider_prefix(model: str) -> str:
    """Prefix a bare model name with its inferred provider.

    Args:
        model: Model name, possibly already ``provider.model``.

    Returns:
        ``provider.model``; dotted and empty names pass through unchanged.
    """
    if not model or "." in model:
        return model
    for prefix, provider in MODEL_PREFIX_PROVIDERS:
        if model.startswith(prefix):
            return f"{provider}.{model}"
    return f"{DEFAULT_PROVIDER}.{model}"


def normalize_model_names(config: ProfileConfig, resolver_for: ResolverFactory | None) -> bool:
    """Add provider prefixes to every bare model field."""
    del resolver_for
    changed = False
    for attribute in _MODEL_ATTRIBUTES:
        current = getattr(config, attribute)
        updated = add_provider_prefix(current)
        if updated != current:
            setattr(config, attribute, updated)
            changed = True
    return changed


def backfill_profile_type(config: ProfileConfig, resolver_for: ResolverFactory | None) -> bool:
    """Default a missing profile type to Bedrock, the only pre-typed behavior."""
    del resolver_for
    if config.profile_type is not None:
        return False
    config.profile_type = ProfileType.BEDROCK
    _LOGGER.info("Added profile type support (set to bedrock)")
    return True


def cache_profile_identifiers(
    config: ProfileConfig, resolver_for: ResolverFactory | None
) -> bool:
    """Replace friendly model names with resolved full identifiers.

    Raises:
        CatalogError: If the catalog is unavailable or a model has no match.
        MissingResolverError: If resolution is needed but no resolver exists.
    """
    routing = config.routing()
    if isinstance(routing, ApiRouting):
        return False
    pending = [
        (key, attribute)
        for key, attribute in zip(MODEL_KEYS, _MODEL_ATTRIBUTES, strict=True)
        if getattr(config, attribute) and not is_full_identifier(getattr(config, attribute))
    ]
    if not pending:
        return False
    if resolver_for is None:
        raise MissingResolverError("model resolution required but no catalog is configured")
    _LOGGER.info("Upgrading config to cache model profile IDs...")
    resolver = resolver_for(config)
    for key, attribute in pending:
        friendly = getattr(config, attribute)
        identifier = resolver.resolve(routing.geography, friendly)
        setattr(config, attribute, identifier)
        _LOGGER.info("Cached %s: %s -> %s", key, friendly, identifier)
    return True


def add_heavy_model(config: ProfileConfig, resolver_for: ResolverFactory | None) -> bool:
    """Default an empty heavy model to the current main model.

    The heavy tier initially aliases the main model so existing profiles keep
    launching; users pick a dedicated heavy model later.
    """
    del resolver_for
    if not isinstance(config.routing(), BedrockRouting):
        return False
    if config.heavy_model or not config.model:
        return False
    config.heavy_model = str(config.model)
    _LOGGER.info("Added heavy model support (set to default model)")
    return True


DEFAULT_STEPS: tuple[MigrationStep, ...] = (
    MigrationStep(
        target_version="0.2.0",
        name="normalize_model_names",
        apply=normalize_model_names,
        description="add provider prefix to model names",
    ),
    MigrationStep(
        target_version="0.6.0",
        name="backfill_profile_type",
        apply=backfill_profile_type,
        description="add profile type",
    ),
    MigrationStep(
        target_version="0.4.0",
        name="cache_profile_identifiers",
        apply=cache_profile_identifiers,
        description="cache full inference profile identifiers",
    ),
    MigrationStep(
        target_version="0.5.0",
        name="add_heavy_model",
        apply=add_heavy_model,
        description="add heavy model tier",
    ),
)
