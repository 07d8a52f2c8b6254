"""Match friendly model names against a fetched identifier catalog."""

from __future__ import annotations

from collections.abc import Iterable

from bedlaunch.catalog.errors import NoMatchingProfileError
from bedlaunch.catalog.grammar import parse_identifier


def find_match(catalog: Iterable[str], geography: str, friendly_model: str) -> str:
    """Return the first catalog identifier prefixed by ``geography.friendly_model``.

    Catalog order decides ties: the first identifier carrying the prefix wins.

    Args:
        catalog: Identifiers in the order the fetch returned them.
        geography: Routing geography (``us``, ``eu``, ``global``).
        friendly_model: ``provider.model-slug`` name.

    Returns:
        Matching full identifier.

    Raises:
        NoMatchingProfileError: If nothing matches; carries the full listing.
    """
    identifiers = tuple(catalog)
    prefix = f"{geography}.{friendly_model}"
    for identifier in identifiers:
        if identifier.startswith(prefix):
            return identifier
    raise NoMatchingProfileError(
        model=friendly_model,
        geography=geography,
        available=identifiers,
    )


def group_by_provider(catalog: Iterable[str], geography: str) -> dict[str, tuple[str, ...]]:
    """Group the catalog's friendly names by provider for one geography.

    Identifiers from other geographies, or outside the grammar, are skipped.
    Providers and the names under each are sorted so output is reproducible.

    Args:
        catalog: Identifiers as fetched.
        geography: Geography to keep.

    Returns:
        Mapping of provider to sorted, de-duplicated friendly names.
    """
    buckets: dict[str, set[str]] = {}
    for identifier in catalog:
        parsed = parse_identifier(identifier, geography)
        if parsed is None:
            continue
        buckets.setdefault(parsed.provider, set()).add(parsed.friendly_name)
    return {provider: tuple(sorted(buckets[provider])) for provider in sorted(buckets)}


def friendly_names(catalog: Iterable[str], geography: str) -> tuple[str, ...]:
    """Return every friendly name for a geography, sorted by (provider, slug)."""
    grouped = group_by_provider(catalog, geography)
    return tuple(name for names in grouped.values() for name in names)
