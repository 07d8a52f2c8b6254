"""Persisted launcher profile models."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field

from bedlaunch.catalog.fetchers import normalize_base_url
from bedlaunch.catalog.grammar import GEOGRAPHIES, Geography

DEFAULT_REGION = "us-east-1"
DEFAULT_API_KEY_ENV = "BEDLAUNCH_API_KEY"


class ProfileType(StrEnum):
    """Supported profile routing schemes."""

    BEDROCK = "bedrock"
    API = "api"


class ProfileConfigError(RuntimeError):
    """Raised when a profile is incomplete or a key/value is invalid."""


@dataclass(frozen=True)
class BedrockRouting:
    """Cloud-routed profile coordinates."""

    aws_profile: str
    region: str
    geography: str


@dataclass(frozen=True)
class ApiRouting:
    """Direct HTTP API profile coordinates."""

    base_url: str
    api_key_env: str


Routing = BedrockRouting | ApiRouting


class ProfileConfig(BaseModel):
    """One persisted launcher profile.

    ``profile_type`` is absent on records written before profile types
    existed; such records route through Bedrock.
    """

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    version: str = ""
    profile_type: ProfileType | None = Field(default=None, alias="profile-type")
    aws_profile: str = Field(default="", alias="profile")
    region: str = DEFAULT_REGION
    cross_region: str = Field(default=Geography.GLOBAL.value, alias="cross-region")
    model: str = ""
    fast_model: str = Field(default="", alias="fast-model")
    heavy_model: str = Field(default="", alias="heavy-model")
    base_url: str = Field(default="", alias="base-url")
    api_key_env: str = Field(default=DEFAULT_API_KEY_ENV, alias="api-key-env")

    @property
    def routing_type(self) -> ProfileType:
        """Return the effective profile type; unset means Bedrock."""
        return self.profile_type or ProfileType.BEDROCK

    def routing(self) -> Routing:
        """Return the tagged routing view for this profile."""
        if self.routing_type == ProfileType.API:
            return ApiRouting(base_url=self.base_url, api_key_env=self.api_key_env)
        return BedrockRouting(
            aws_profile=self.aws_profile,
            region=self.region,
            geography=self.cross_region,
        )

    def models(self) -> tuple[str, str, str]:
        """Return ``(model, fast_model, heavy_model)``."""
        return (self.model, self.fast_model, self.heavy_model)

    def models_unset(self) -> bool:
        """Return whether no model field is populated."""
        return not any(self.models())

    def validate_complete(self) -> None:
        """Ensure every field needed to launch is present and valid.

        Raises:
            ProfileConfigError: Naming the first missing or invalid field.
        """
        routing = self.routing()
        if isinstance(routing, BedrockRouting):
            if not routing.region:
                raise ProfileConfigError("region is required")
            if not routing.geography:
                raise ProfileConfigError("cross-region is required")
            _check_geography(routing.geography)
        else:
            if not routing.base_url:
                raise ProfileConfigError("base-url is required")
            if not routing.api_key_env:
                raise ProfileConfigError("api-key-env is required")
        for key, value in zip(MODEL_KEYS, self.models(), strict=True):
            if not value:
                raise ProfileConfigError(f"{key} is required")

    def is_incomplete(self) -> bool:
        """Return whether :meth:`validate_complete` would fail."""
        try:
            self.validate_complete()
        except ProfileConfigError:
            return True
        return False

    def get(self, key: str) -> str:
        """Return a user-visible setting by its hyphenated key.

        Raises:
            ProfileConfigError: If the key is unknown.
        """
        attr = _attribute_for(key)
        value = getattr(self, attr)
        if value is None:
            return ""
        return str(value)

    def set(self, key: str, value: str) -> None:
        """Update a user-visible setting in place.

        Args:
            key: Hyphenated setting key.
            value: New value.

        Raises:
            ProfileConfigError: If the key is unknown or the value invalid.
        """
        attr = _attribute_for(key)
        if key == "cross-region":
            _check_geography(value)
        if key == "profile-type":
            try:
                setattr(self, attr, ProfileType(value))
            except ValueError as exc:
                raise ProfileConfigError(
                    f"invalid profile-type: {value} (must be one of: bedrock, api)"
                ) from exc
            return
        if key == "base-url":
            value = normalize_base_url(value)
        setattr(self, attr, value)


MODEL_KEYS = ("model", "fast-model", "heavy-model")
SETTING_KEYS = (
    "profile-type",
    "profile",
    "region",
    "cross-region",
    *MODEL_KEYS,
    "base-url",
    "api-key-env",
)


def _attribute_for(key: str) -> str:
    if key not in SETTING_KEYS:
        raise ProfileConfigError(f"unknown config key: {key}")
    field_name = key.replace("-", "_")
    if key == "profile":
        field_name = "aws_profile"
    return field_name


def _check_geography(value: str) -> None:
    if value not in GEOGRAPHIES:
        raise ProfileConfigError(
            f"invalid cross-region: {value} (must be one of: us, eu, global)"
        )
