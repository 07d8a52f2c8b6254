"""Named profile persistence and current-profile tracking."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import TYPE_CHECKING

from pydantic import ValidationError

from bedlaunch.config.models import ProfileConfig, ProfileType
from bedlaunch.config.versions import is_dev_version

if TYPE_CHECKING:
    from bedlaunch.migrations.engine import MigrationEngine

_LOGGER = logging.getLogger(__name__)

DEFAULT_PROFILE = "default"
_PROFILES_DIR = "profiles"
_CURRENT_FILE = "current-profile.txt"
_LEGACY_CONFIG = "config.json"


class ProfileStoreError(RuntimeError):
    """Base persistence error for profile store operations."""


class ProfileNotFoundError(ProfileStoreError):
    """Raised when a named profile does not exist."""


class ProfileDecodeError(ProfileStoreError):
    """Raised when a persisted profile cannot be decoded/validated."""


class ProfileStore:
    """File-backed store of named launcher profiles."""

    def __init__(self, home: Path) -> None:
        """Store root paths.

        Args:
            home: Launcher home directory.
        """
        self.home = home
        self.profiles_dir = home / _PROFILES_DIR
        self.current_file = home / _CURRENT_FILE

    def profile_path(self, name: str) -> Path:
        """Return the JSON path for profile ``name``."""
        return self.profiles_dir / f"{name}.json"

    def list_profiles(self) -> list[str]:
        """Return sorted profile names."""
        if not self.profiles_dir.exists():
            return []
        return sorted(path.stem for path in self.profiles_dir.glob("*.json"))

    def exists(self, name: str) -> bool:
        """Return whether profile ``name`` is persisted."""
        return self.profile_path(name).is_file()

    def load(self, name: str) -> ProfileConfig:
        """Load one profile without migrating it.

        Args:
            name: Profile name.

        Returns:
            Decoded profile.

        Raises:
            ProfileNotFoundError: If the profile file is missing.
            ProfileDecodeError: If JSON decode or validation fails.
        """
        path = self.profile_path(name)
        if not path.is_file():
            raise ProfileNotFoundError(f"profile '{name}' does not exist")
        return _decode_profile(path)

    def save(self, name: str, config: ProfileConfig) -> None:
        """Validate completeness, then persist.

        Raises:
            ProfileConfigError: If the profile is incomplete.
        """
        config.validate_complete()
        self.save_unvalidated(name, config)

    def save_unvalidated(self, name: str, config: ProfileConfig) -> None:
        """Persist a profile atomically without completeness checks.

        Args:
            name: Profile name.
            config: Profile payload.
        """
        path = self.profile_path(name)
        path.parent.mkdir(parents=True, exist_ok=True)
        temp_path = path.with_name(f"{path.name}.tmp")
        temp_path.write_text(
            config.model_dump_json(indent=2, by_alias=True, exclude_none=True),
            encoding="utf-8",
        )
        temp_path.replace(path)

    def current(self) -> str:
        """Return the active profile name, defaulting to ``default``."""
        if not self.current_file.is_file():
            return DEFAULT_PROFILE
        name = self.current_file.read_text(encoding="utf-8").strip()
        return name or DEFAULT_PROFILE

    def set_current(self, name: str) -> None:
        """Mark ``name`` as the active profile.

        Raises:
            ProfileNotFoundError: If the profile does not exist.
        """
        if not self.exists(name):
            raise ProfileNotFoundError(f"profile '{name}' does not exist")
        self.home.mkdir(parents=True, exist_ok=True)
        self.current_file.write_text(name, encoding="utf-8")

    def delete(self, name: str) -> None:
        """Delete a non-default, inactive profile.

        Raises:
            ProfileStoreError: If ``name`` is the default or active profile.
            ProfileNotFoundError: If the profile does not exist.
        """
        if name == DEFAULT_PROFILE:
            raise ProfileStoreError("cannot delete default profile")
        if self.current() == name:
            raise ProfileStoreError(
                "cannot delete active profile, switch to another profile first"
            )
        path = self.profile_path(name)
        if not path.is_file():
            raise ProfileNotFoundError(f"profile '{name}' does not exist")
        path.unlink()

    def rename(self, old_name: str, new_name: str) -> None:
        """Rename a profile, following the active-profile pointer.

        Raises:
            ProfileStoreError: If renaming the default or onto an existing name.
            ProfileNotFoundError: If ``old_name`` does not exist.
        """
        if old_name == DEFAULT_PROFILE:
            raise ProfileStoreError("cannot rename default profile")
        if not self.exists(old_name):
            raise ProfileNotFoundError(f"profile '{old_name}' does not exist")
        if self.exists(new_name):
            raise ProfileStoreError(f"profile '{new_name}' already exists")
        was_current = self.current() == old_name
        self.profile_path(old_name).replace(self.profile_path(new_name))
        if was_current:
            self.set_current(new_name)

    def copy(self, source: str, destination: str) -> None:
        """Copy ``source`` to a new profile ``destination``.

        Raises:
            ProfileStoreError: If ``destination`` already exists.
            ProfileNotFoundError: If ``source`` does not exist.
        """
        if self.exists(destination):
            raise ProfileStoreError(f"profile '{destination}' already exists")
        config = self.load(source)
        self.save_unvalidated(destination, config)

    def create_default(self, running_version: str) -> ProfileConfig:
        """Build a fresh profile; models stay empty until configured."""
        return ProfileConfig(
            version="" if is_dev_version(running_version) else running_version,
            profile_type=ProfileType.BEDROCK,
        )

    def migrate_legacy_config(self) -> bool:
        """Move a single-file legacy config into ``profiles/default.json``.

        Returns:
            ``True`` when a legacy config was migrated.

        Raises:
            ProfileDecodeError: If the legacy config cannot be decoded.
        """
        legacy_path = self.home / _LEGACY_CONFIG
        if not legacy_path.is_file() or self.exists(DEFAULT_PROFILE):
            return False
        config = _decode_profile(legacy_path)
        self.save_unvalidated(DEFAULT_PROFILE, config)
        self.set_current(DEFAULT_PROFILE)
        try:
            legacy_path.replace(legacy_path.with_name(f"{legacy_path.name}.bak"))
        except OSError as exc:
            _LOGGER.warning("Could not rename legacy config to .bak: %s", exc)
        _LOGGER.info("Migrated configuration from config.json to profiles/default.json")
        return True

    def load_migrated(self, name: str, engine: MigrationEngine) -> ProfileConfig:
        """Load a profile and persist it only if migration fully succeeds.

        Raises:
            ProfileNotFoundError: If the profile does not exist.
            ProfileDecodeError: If the profile cannot be decoded.
            MigrationError: If a migration step fails; nothing is written.
        """
        config = self.load(name)
        result = engine.migrate(config)
        if result.changed:
            self.save_unvalidated(name, result.config)
        return result.config

    def load_current(self, engine: MigrationEngine) -> tuple[str, ProfileConfig]:
        """Load (creating or migrating as needed) the active profile.

        Args:
            engine: Migration engine for the running version.

        Returns:
            Active profile name and its migrated config.

        Raises:
            ProfileDecodeError: If a persisted profile cannot be decoded.
            MigrationError: If migration fails; nothing is written.
        """
        self.migrate_legacy_config()
        name = self.current()
        if not self.exists(name):
            config = self.create_default(engine.running_version)
            self.save_unvalidated(name, config)
            self.set_current(name)
            return name, config
        return name, self.load_migrated(name, engine)


def _decode_profile(path: Path) -> ProfileConfig:
    raw = path.read_text(encoding="utf-8")
    try:
        decoded = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ProfileDecodeError(f"Invalid profile JSON in {path.name}: {exc}") from exc
    if not isinstance(decoded, dict):
        raise ProfileDecodeError(f"Invalid profile payload in {path.name}: expected JSON object.")
    try:
        return ProfileConfig.model_validate(decoded)
    except ValidationError as exc:
        raise ProfileDecodeError(f"Invalid profile payload in {path.name}: {exc}") from exc
