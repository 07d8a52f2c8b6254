"""Inference-profile identifier grammar.

Identifiers look like ``{geography}.{provider}.{model-slug}-{date}-{version}``,
for example ``global.anthropic.claude-sonnet-4-5-20250929-v1:0``. A friendly
name is the ``{provider}.{model-slug}`` part alone. Nothing here raises: parse
failures are reported as ``None`` and formatting falls back to its input.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum


class Geography(StrEnum):
    """Cross-region routing geographies."""

    US = "us"
    EU = "eu"
    GLOBAL = "global"


GEOGRAPHIES = frozenset(item.value for item in Geography)

_DATE_STAMP_LENGTH = 8


@dataclass(frozen=True)
class ParsedIdentifier:
    """Provider and model slug extracted from a full identifier."""

    provider: str
    model_slug: str

    @property
    def friendly_name(self) -> str:
        """Return ``provider.model_slug``."""
        return f"{self.provider}.{self.model_slug}"


def is_full_identifier(value: str) -> bool:
    """Return whether ``value`` starts with a known geography segment.

    Args:
        value: Candidate identifier or friendly name.

    Returns:
        ``True`` when the text before the first ``.`` is a geography.
    """
    head, sep, _ = value.partition(".")
    return bool(sep) and head in GEOGRAPHIES


def _is_terminator(token: str) -> bool:
    if len(token) == _DATE_STAMP_LENGTH and token.isdigit():
        return True
    return token.startswith("v") or ":" in token


def extract_model_slug(model_with_suffix: str) -> str:
    """Strip the date/version suffix from a ``model-slug-date-version`` string.

    Args:
        model_with_suffix: Text after the provider segment.

    Returns:
        Slug tokens joined by ``-``; empty string when none precede a terminator.
    """
    tokens: list[str] = []
    for token in model_with_suffix.split("-"):
        if _is_terminator(token):
            break
        tokens.append(token)
    return "-".join(tokens)


def parse_identifier(identifier: str, expected_geography: str) -> ParsedIdentifier | None:
    """Parse a full identifier for one geography.

    Args:
        identifier: Full identifier to parse.
        expected_geography: Geography the identifier must start with.

    Returns:
        Parsed provider/slug, or ``None`` when the identifier does not match.
    """
    prefix = f"{expected_geography}."
    if not identifier.startswith(prefix):
        return None
    provider, sep, rest = identifier[len(prefix) :].partition(".")
    if not sep or not provider or provider in GEOGRAPHIES:
        return None
    slug = extract_model_slug(rest)
    if not slug:
        return None
    return ParsedIdentifier(provider=provider, model_slug=slug)


def geography_of(identifier: str) -> str | None:
    """Return the geography segment of a full identifier, else ``None``."""
    if not is_full_identifier(identifier):
        return None
    return identifier.partition(".")[0]


def to_friendly_name(value: str) -> str:
    """Convert a full identifier to its friendly name.

    Already-friendly input and unparseable identifiers are returned unchanged.

    Args:
        value: Full identifier or friendly name.

    Returns:
        ``provider.model-slug`` for parseable identifiers, else ``value``.
    """
    geography = geography_of(value)
    if geography is None:
        return value
    parsed = parse_identifier(value, geography)
    if parsed is None:
        return value
    return parsed.friendly_name
