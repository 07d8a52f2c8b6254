"""Launcher profile and settings public surface."""

from bedlaunch.config.models import (
    DEFAULT_API_KEY_ENV,
    DEFAULT_REGION,
    MODEL_KEYS,
    SETTING_KEYS,
    ApiRouting,
    BedrockRouting,
    ProfileConfig,
    ProfileConfigError,
    ProfileType,
    Routing,
)
from bedlaunch.config.settings import (
    HOME_ENV_VAR,
    LauncherSettings,
    SettingsError,
    UsageSettings,
    default_home,
    load_settings,
    settings_file,
    usage_db_path,
)
from bedlaunch.config.store import (
    DEFAULT_PROFILE,
    ProfileDecodeError,
    ProfileNotFoundError,
    ProfileStore,
    ProfileStoreError,
)
from bedlaunch.config.versions import (
    DEV_VERSION,
    compare_versions,
    is_dev_version,
    version_lt,
)

__all__ = [
    "DEFAULT_API_KEY_ENV",
    "DEFAULT_PROFILE",
    "DEFAULT_REGION",
    "DEV_VERSION",
    "HOME_ENV_VAR",
    "MODEL_KEYS",
    "SETTING_KEYS",
    "ApiRouting",
    "BedrockRouting",
    "LauncherSettings",
    "ProfileConfig",
    "ProfileConfigError",
    "ProfileDecodeError",
    "ProfileNotFoundError",
    "ProfileStore",
    "ProfileStoreError",
    "ProfileType",
    "Routing",
    "SettingsError",
    "UsageSettings",
    "compare_versions",
    "default_home",
    "is_dev_version",
    "load_settings",
    "settings_file",
    "usage_db_path",
    "version_lt",
]
