"""Membership checks of configured models against a live catalog."""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from http import HTTPStatus

from bedlaunch.catalog.errors import CatalogError
from bedlaunch.catalog.resolver import CatalogFetcher, ModelResolver


@dataclass(frozen=True)
class ValidationReport:
    """Outcome of validating configured identifiers."""

    passed: bool
    invalid: tuple[str, ...] = ()
    available: tuple[str, ...] = ()
    skipped_reason: str | None = None

    @classmethod
    def ok(cls, *, skipped_reason: str | None = None) -> ValidationReport:
        """Construct a passing report."""
        return cls(passed=True, skipped_reason=skipped_reason)


Validator = Callable[[], ValidationReport]


def _requested(identifiers: Iterable[str]) -> tuple[str, ...]:
    return tuple(identifier for identifier in identifiers if identifier)


def _check(requested: tuple[str, ...], available: tuple[str, ...]) -> ValidationReport:
    known = set(available)
    invalid = tuple(dict.fromkeys(item for item in requested if item not in known))
    if invalid:
        return ValidationReport(passed=False, invalid=invalid, available=available)
    return ValidationReport.ok()


def validate_bedrock_identifiers(
    identifiers: Iterable[str], fetcher: CatalogFetcher
) -> ValidationReport:
    """Check that every non-empty identifier is present in the catalog.

    Args:
        identifiers: Full identifiers in use for this launch.
        fetcher: Catalog source.

    Returns:
        Report naming invalid identifiers and the available listing.

    Raises:
        CatalogError: If the catalog cannot be fetched.
    """
    available = ModelResolver(fetcher).fetch_catalog()
    return _check(_requested(identifiers), available)


def validate_api_models(models: Iterable[str], fetcher: CatalogFetcher) -> ValidationReport:
    """Check API model IDs against a ``/v1/models`` listing.

    A 404 from the listing endpoint means the API cannot be validated and
    yields a passing report.

    Args:
        models: Model IDs in use for this launch.
        fetcher: Model-list source.

    Returns:
        Validation report.

    Raises:
        CatalogError: If the listing fails for any reason other than 404.
    """
    try:
        available = tuple(fetcher.fetch())
    except CatalogError as exc:
        if exc.data.get("status_code") == HTTPStatus.NOT_FOUND:
            return ValidationReport.ok(skipped_reason="model listing endpoint not found")
        raise
    return _check(_requested(models), available)
