"""Resolve friendly model names to full inference-profile identifiers."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Protocol

from bedlaunch.catalog.errors import CatalogError, catalog_unavailable
from bedlaunch.catalog.grammar import is_full_identifier, to_friendly_name
from bedlaunch.catalog.matcher import find_match, group_by_provider

_LOGGER = logging.getLogger(__name__)


class CatalogFetcher(Protocol):
    """Protocol for collaborators that list identifier-shaped strings."""

    def fetch(self) -> Sequence[str]:
        """Fetch the current catalog.

        Raises:
            CatalogError: If the catalog cannot be fetched.
        """


class ModelResolver:
    """Resolve models against a freshly fetched catalog per call."""

    def __init__(self, fetcher: CatalogFetcher) -> None:
        """Store catalog collaborator.

        Args:
            fetcher: Catalog source queried on every non-trivial resolve.
        """
        self._fetcher = fetcher

    def fetch_catalog(self) -> tuple[str, ...]:
        """Fetch the catalog, normalizing collaborator failures.

        Returns:
            Identifiers in fetch order.

        Raises:
            CatalogError: ``catalog_unavailable`` on any fetch failure.
        """
        try:
            return tuple(self._fetcher.fetch())
        except CatalogError:
            raise
        except Exception as exc:  # noqa: BLE001 - collaborator failures are opaque
            raise catalog_unavailable("failed to list inference profiles", cause=exc) from exc

    def resolve(self, geography: str, model: str) -> str:
        """Resolve a friendly name (or pass through a full identifier).

        Full identifiers short-circuit without touching the catalog.

        Args:
            geography: Routing geography.
            model: Friendly name or full identifier.

        Returns:
            Full identifier.

        Raises:
            CatalogError: If the catalog is unavailable or nothing matches.
        """
        if is_full_identifier(model):
            return model
        catalog = self.fetch_catalog()
        identifier = find_match(catalog, geography, model)
        _LOGGER.debug("Resolved %s (%s) to %s", model, geography, identifier)
        return identifier

    def available_models(self, geography: str) -> dict[str, tuple[str, ...]]:
        """Return friendly names grouped by provider for ``geography``."""
        return group_by_provider(self.fetch_catalog(), geography)

    @staticmethod
    def to_friendly(identifier: str) -> str:
        """Return the friendly name for ``identifier``."""
        return to_friendly_name(identifier)


def resolve_model(geography: str, model: str, fetcher: CatalogFetcher) -> str:
    """Resolve one model through a throwaway resolver."""
    return ModelResolver(fetcher).resolve(geography, model)
