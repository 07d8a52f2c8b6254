"""Per-run overrides applied on top of a loaded profile."""

from __future__ import annotations

from dataclasses import dataclass

from bedlaunch.catalog.fetchers import normalize_base_url
from bedlaunch.catalog.grammar import GEOGRAPHIES, is_full_identifier
from bedlaunch.config.models import ProfileConfig, ProfileConfigError, ProfileType

_EXAMPLE_IDS = {
    "model": "global.anthropic.claude-sonnet-4-5-20250929-v1:0",
    "fast-model": "global.anthropic.claude-haiku-4-5-20251001-v1:0",
    "heavy-model": "global.anthropic.claude-opus-4-1-20250805-v1:0",
}


@dataclass(frozen=True)
class LaunchOverrides:
    """Values given on the command line for a single run."""

    profile: str | None = None
    profile_type: str | None = None
    model: str | None = None
    fast_model: str | None = None
    heavy_model: str | None = None
    aws_profile: str | None = None
    region: str | None = None
    cross_region: str | None = None
    base_url: str | None = None
    api_key: str | None = None

    def describe(self) -> list[tuple[str, str]]:
        """Return ``(label, value)`` rows for every override given."""
        rows = [
            ("Profile Type", self.profile_type),
            ("AWS Profile", self.aws_profile),
            ("Region", self.region),
            ("Cross Region", self.cross_region),
            ("Base URL", self.base_url),
            ("API Key", "<provided via flag>" if self.api_key else None),
            ("Model", self.model),
            ("Fast Model", self.fast_model),
            ("Heavy Model", self.heavy_model),
        ]
        return [(label, value) for label, value in rows if value]


def _require_type(config: ProfileConfig, expected: ProfileType, flag: str) -> None:
    if config.routing_type != expected:
        raise ProfileConfigError(
            f"--{flag} can only be used with {expected.value} profile type"
        )


def _require_full_id(config: ProfileConfig, key: str, value: str) -> None:
    if config.routing_type == ProfileType.BEDROCK and not is_full_identifier(value):
        raise ProfileConfigError(
            f"--{key} must be a full profile ID for bedrock "
            f"(e.g., '{_EXAMPLE_IDS[key]}')\n"
            "Run 'bedlaunch models list' to see available models"
        )


def apply_overrides(config: ProfileConfig, overrides: LaunchOverrides) -> ProfileConfig:
    """Return a copy of ``config`` with run overrides applied.

    Args:
        config: Loaded profile; never mutated.
        overrides: Command-line overrides.

    Returns:
        Overridden profile copy.

    Raises:
        ProfileConfigError: If an override does not fit the profile type.
    """
    result = config.model_copy(deep=True)
    if overrides.profile_type:
        try:
            result.profile_type = ProfileType(overrides.profile_type)
        except ValueError as exc:
            raise ProfileConfigError(
                "--profile-type must be either 'bedrock' or 'api'"
            ) from exc
    if overrides.aws_profile:
        _require_type(result, ProfileType.BEDROCK, "aws-profile")
        result.aws_profile = overrides.aws_profile
    if overrides.region:
        _require_type(result, ProfileType.BEDROCK, "region")
        result.region = overrides.region
    if overrides.cross_region:
        _require_type(result, ProfileType.BEDROCK, "cross-region")
        if overrides.cross_region not in GEOGRAPHIES:
            raise ProfileConfigError(
                f"invalid cross-region: {overrides.cross_region} "
                "(must be one of: us, eu, global)"
            )
        result.cross_region = overrides.cross_region
    if overrides.base_url:
        _require_type(result, ProfileType.API, "base-url")
        result.base_url = normalize_base_url(overrides.base_url)
    if overrides.api_key:
        _require_type(result, ProfileType.API, "api-key")
    for key, attribute in (
        ("model", "model"),
        ("fast-model", "fast_model"),
        ("heavy-model", "heavy_model"),
    ):
        value = getattr(overrides, attribute)
        if value:
            _require_full_id(result, key, value)
            setattr(result, attribute, value)
    return result
