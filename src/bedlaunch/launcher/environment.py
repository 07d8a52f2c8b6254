"""Environment variables injected into the assistant process."""

from __future__ import annotations

from collections.abc import Mapping

from bedlaunch.config.models import ApiRouting, ProfileConfig

BEDROCK_ENV_VARS = ("CLAUDE_CODE_USE_BEDROCK", "AWS_PROFILE", "AWS_REGION")
API_ENV_VARS = ("ANTHROPIC_BASE_URL", "ANTHROPIC_AUTH_TOKEN", "ANTHROPIC_API_KEY")


def _model_env(config: ProfileConfig) -> dict[str, str]:
    return {
        "ANTHROPIC_MODEL": config.model,
        "ANTHROPIC_SMALL_FAST_MODEL": config.fast_model,
        "ANTHROPIC_DEFAULT_SONNET_MODEL": config.model,
        "ANTHROPIC_DEFAULT_HAIKU_MODEL": config.fast_model,
        "ANTHROPIC_DEFAULT_OPUS_MODEL": config.heavy_model,
    }


def build_launch_environment(
    config: ProfileConfig,
    base_env: Mapping[str, str],
    *,
    api_key: str | None = None,
) -> dict[str, str]:
    """Build the child environment for one profile.

    Bedrock and API profiles set disjoint variable sets; variables belonging
    to the other scheme are removed from the inherited environment.

    Args:
        config: Complete profile.
        base_env: Inherited environment.
        api_key: API key for API profiles.

    Returns:
        Environment mapping for the child process.
    """
    env = dict(base_env)
    routing = config.routing()
    if isinstance(routing, ApiRouting):
        for name in BEDROCK_ENV_VARS:
            env.pop(name, None)
        env["ANTHROPIC_BASE_URL"] = routing.base_url
        env["ANTHROPIC_AUTH_TOKEN"] = api_key or ""
        env.pop("ANTHROPIC_API_KEY", None)
    else:
        for name in API_ENV_VARS:
            env.pop(name, None)
        env["CLAUDE_CODE_USE_BEDROCK"] = "1"
        env["AWS_REGION"] = routing.region
        if routing.aws_profile:
            env["AWS_PROFILE"] = routing.aws_profile
    env.update({name: value for name, value in _model_env(config).items() if value})
    return env
