"""Deterministic catalog error contracts."""

from __future__ import annotations

from enum import StrEnum


class CatalogErrorCode(StrEnum):
    """Stable catalog fetch/resolution error codes."""

    UNAVAILABLE = "catalog_unavailable"
    NO_MATCHING_PROFILE = "no_matching_profile"
    EMPTY = "catalog_empty"


class CatalogError(RuntimeError):
    """Catalog failure with stable deterministic code."""

    def __init__(
        self,
        code: CatalogErrorCode,
        message: str,
        *,
        data: dict[str, object] | None = None,
    ) -> None:
        """Create catalog failure.

        Args:
            code: Stable catalog error code.
            message: Human-readable error message.
            data: Optional structured payload for diagnostics.
        """
        super().__init__(message)
        self.code = code
        self.data = data or {}


class NoMatchingProfileError(CatalogError):
    """Raised when no catalog identifier matches a geography/model query."""

    def __init__(
        self,
        *,
        model: str,
        geography: str,
        available: tuple[str, ...],
    ) -> None:
        """Create no-match failure carrying the full available listing.

        Args:
            model: Requested friendly model name.
            geography: Requested routing geography.
            available: Every identifier present in the fetched catalog.
        """
        listing = "\n".join(f"  - {identifier}" for identifier in available)
        super().__init__(
            CatalogErrorCode.NO_MATCHING_PROFILE,
            (
                f"could not find inference profile for model '{model}' "
                f"with cross-region '{geography}'\n"
                f"Available profiles:\n{listing}"
            ),
            data={"model": model, "geography": geography, "available": list(available)},
        )
        self.model = model
        self.geography = geography
        self.available = available


def catalog_unavailable(message: str, *, cause: BaseException | None = None) -> CatalogError:
    """Build a catalog-unavailable error with the underlying cause attached.

    Args:
        message: Human-readable context for the failed fetch.
        cause: Optional underlying exception.

    Returns:
        Catalog error with ``catalog_unavailable`` code.
    """
    detail = f"{message}: {cause}" if cause is not None else message
    data: dict[str, object] = {}
    if cause is not None:
        data["cause"] = type(cause).__name__
    return CatalogError(CatalogErrorCode.UNAVAILABLE, detail, data=data)
