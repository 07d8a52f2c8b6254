"""Unit tests for catalog membership validation."""

from __future__ import annotations

import pytest

from bedlaunch.catalog.errors import CatalogError, CatalogErrorCode
from bedlaunch.catalog.validation import validate_api_models, validate_bedrock_identifiers
from tests.unit.helpers import CATALOG, HAIKU_ID, SONNET_ID, StaticFetcher


@pytest.mark.unit
def test_validate_bedrock_passes_when_all_present() -> None:
    """Configured identifiers present in the catalog pass."""
    report = validate_bedrock_identifiers((SONNET_ID, HAIKU_ID, ""), StaticFetcher())

    assert report.passed is True
    assert report.invalid == ()


@pytest.mark.unit
def test_validate_bedrock_reports_missing_identifiers_once() -> None:
    """Missing identifiers are listed once alongside the full catalog."""
    # Arrange - stale identifier used twice
    stale = "global.anthropic.claude-3-opus-20240229-v1:0"

    # Act - validate
    report = validate_bedrock_identifiers((stale, HAIKU_ID, stale), StaticFetcher())

    # Assert - failing report
    assert report.passed is False
    assert report.invalid == (stale,)
    assert report.available == CATALOG


@pytest.mark.unit
def test_validate_bedrock_propagates_catalog_unavailable() -> None:
    """Fetch failures are not validation failures."""
    with pytest.raises(CatalogError) as exc_info:
        validate_bedrock_identifiers((SONNET_ID,), StaticFetcher(error=OSError("down")))

    assert exc_info.value.code == CatalogErrorCode.UNAVAILABLE


@pytest.mark.unit
def test_validate_api_models_skips_on_missing_endpoint() -> None:
    """A 404 from the listing endpoint skips validation."""
    # Arrange - listing endpoint absent
    error = CatalogError(CatalogErrorCode.UNAVAILABLE, "404", data={"status_code": 404})

    # Act - validate
    report = validate_api_models(("any/model",), StaticFetcher(error=error))

    # Assert - passing, with a reason
    assert report.passed is True
    assert report.skipped_reason is not None


@pytest.mark.unit
def test_validate_api_models_reraises_other_http_errors() -> None:
    """Non-404 listing failures propagate."""
    error = CatalogError(CatalogErrorCode.UNAVAILABLE, "500", data={"status_code": 500})

    with pytest.raises(CatalogError):
        validate_api_models(("any/model",), StaticFetcher(error=error))


@pytest.mark.unit
def test_validate_api_models_flags_unknown_model() -> None:
    """Unknown API model IDs fail validation."""
    fetcher = StaticFetcher(["anthropic/claude-sonnet-4-5"])

    report = validate_api_models(("anthropic/claude-sonnet-4-5", "bogus/model"), fetcher)

    assert report.passed is False
    assert report.invalid == ("bogus/model",)
