"""Inference-profile catalog public surface."""

from bedlaunch.catalog.errors import (
    CatalogError,
    CatalogErrorCode,
    NoMatchingProfileError,
)
from bedlaunch.catalog.fetchers import (
    ApiModelFetcher,
    ApiModelInfo,
    BedrockCatalogFetcher,
    api_friendly_name,
    api_provider,
    is_recommended,
    normalize_base_url,
)
from bedlaunch.catalog.grammar import (
    GEOGRAPHIES,
    Geography,
    ParsedIdentifier,
    extract_model_slug,
    is_full_identifier,
    parse_identifier,
    to_friendly_name,
)
from bedlaunch.catalog.matcher import find_match, friendly_names, group_by_provider
from bedlaunch.catalog.resolver import CatalogFetcher, ModelResolver, resolve_model
from bedlaunch.catalog.validation import (
    ValidationReport,
    Validator,
    validate_api_models,
    validate_bedrock_identifiers,
)

__all__ = [
    "GEOGRAPHIES",
    "ApiModelFetcher",
    "ApiModelInfo",
    "BedrockCatalogFetcher",
    "CatalogError",
    "CatalogErrorCode",
    "CatalogFetcher",
    "Geography",
    "ModelResolver",
    "NoMatchingProfileError",
    "ParsedIdentifier",
    "ValidationReport",
    "Validator",
    "api_friendly_name",
    "api_provider",
    "extract_model_slug",
    "find_match",
    "friendly_names",
    "group_by_provider",
    "is_full_identifier",
    "is_recommended",
    "normalize_base_url",
    "parse_identifier",
    "resolve_model",
    "to_friendly_name",
    "validate_api_models",
    "validate_bedrock_identifiers",
]
