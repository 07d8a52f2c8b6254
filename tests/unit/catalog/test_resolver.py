"""Unit tests for the model resolver."""

from __future__ import annotations

import pytest

from bedlaunch.catalog.errors import CatalogError, CatalogErrorCode
from bedlaunch.catalog.resolver import ModelResolver, resolve_model
from tests.unit.helpers import HAIKU_ID, SONNET_ID, StaticFetcher


@pytest.mark.unit
def test_resolve_full_identifier_skips_catalog_fetch() -> None:
    """Full identifiers should pass through without a network call."""
    # Arrange - fetcher that would fail if called
    fetcher = StaticFetcher(error=RuntimeError("should not be called"))
    resolver = ModelResolver(fetcher)

    # Act - resolve a full identifier
    resolved = resolver.resolve("global", SONNET_ID)

    # Assert - unchanged, no fetch
    assert resolved == SONNET_ID
    assert fetcher.calls == 0


@pytest.mark.unit
def test_resolve_friendly_name_fetches_fresh_catalog_each_call() -> None:
    """Each resolve should fetch the catalog again."""
    # Arrange - static catalog
    fetcher = StaticFetcher()
    resolver = ModelResolver(fetcher)

    # Act - resolve twice
    first = resolver.resolve("global", "anthropic.claude-sonnet-4-5")
    second = resolver.resolve("global", "anthropic.claude-haiku-4-5")

    # Assert - both resolved, two fetches
    assert first == SONNET_ID
    assert second == HAIKU_ID
    assert fetcher.calls == 2


@pytest.mark.unit
def test_resolve_wraps_unexpected_fetch_failure_as_unavailable() -> None:
    """Collaborator exceptions should surface as catalog_unavailable."""
    # Arrange - failing fetcher
    resolver = ModelResolver(StaticFetcher(error=OSError("network down")))

    # Act - resolve
    with pytest.raises(CatalogError) as exc_info:
        resolver.resolve("global", "anthropic.claude-sonnet-4-5")

    # Assert - normalized code with cause recorded
    assert exc_info.value.code == CatalogErrorCode.UNAVAILABLE
    assert "network down" in str(exc_info.value)
    assert exc_info.value.data["cause"] == "OSError"


@pytest.mark.unit
def test_available_models_groups_catalog_for_geography() -> None:
    """Listing should only include the requested geography."""
    grouped = ModelResolver(StaticFetcher()).available_models("us")

    assert grouped == {"anthropic": ("anthropic.claude-haiku-4-5",)}


@pytest.mark.unit
def test_resolve_model_helper_and_to_friendly() -> None:
    """Module helper and static conversion should agree with the resolver."""
    assert resolve_model("global", "anthropic.claude-opus-4-1", StaticFetcher()).startswith(
        "global.anthropic.claude-opus-4-1-"
    )
    assert ModelResolver.to_friendly(SONNET_ID) == "anthropic.claude-sonnet-4-5"
