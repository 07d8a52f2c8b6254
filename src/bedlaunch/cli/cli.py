"""Typer CLI entrypoint for bedlaunch."""

from __future__ import annotations

import logging
import os
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.logging import RichHandler

from bedlaunch import __version__
from bedlaunch.catalog.errors import CatalogError
from bedlaunch.catalog.fetchers import ApiModelFetcher, api_provider
from bedlaunch.catalog.grammar import geography_of, to_friendly_name
from bedlaunch.cli.rendering import (
    render_api_models,
    render_bedrock_models,
    render_error,
    render_overrides,
    render_profile_config,
    render_profiles,
    render_usage_summary,
)
from bedlaunch.config.models import (
    MODEL_KEYS,
    ApiRouting,
    ProfileConfig,
    ProfileConfigError,
    ProfileType,
)
from bedlaunch.config.settings import (
    SettingsError,
    default_home,
    load_settings,
    settings_file,
    usage_db_path,
)
from bedlaunch.config.store import ProfileStoreError
from bedlaunch.launcher.coordinator import (
    CONFIG_ERROR_EXIT_CODE,
    LaunchFailed,
    LaunchRequest,
)
from bedlaunch.launcher.environment import build_launch_environment
from bedlaunch.launcher.factory import LauncherContext, LauncherFactory, resolve_api_key
from bedlaunch.launcher.overrides import LaunchOverrides, apply_overrides
from bedlaunch.launcher.process import ExecutableNotFoundError, find_executable
from bedlaunch.migrations.engine import MigrationError
from bedlaunch.usage.query import UsageQueryError, build_query
from bedlaunch.usage.tracker import SqliteUsageSink

app = typer.Typer(help="Launch the coding assistant against Bedrock or an HTTP API.")
models_app = typer.Typer(help="Inspect available models.")
config_app = typer.Typer(help="Show and edit profile settings.")
profiles_app = typer.Typer(help="Manage named profiles.")
stats_app = typer.Typer(help="Show or reset session usage.")
app.add_typer(models_app, name="models")
app.add_typer(config_app, name="config")
app.add_typer(profiles_app, name="profiles")
app.add_typer(stats_app, name="stats")

_CONSOLE = Console()
_USER_ERRORS = (
    CatalogError,
    ExecutableNotFoundError,
    MigrationError,
    ProfileConfigError,
    ProfileStoreError,
    SettingsError,
    UsageQueryError,
)

ProfileOption = Annotated[
    str | None,
    typer.Option("--profile", help="Profile name; defaults to the active profile."),
]


def _configure_logging() -> None:
    """Configure Rich-backed logging; a no-op once the root logger has handlers."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(message)s",
        handlers=[RichHandler(show_path=False, rich_tracebacks=True)],
    )


def _build_factory() -> LauncherFactory:
    """Build the per-invocation factory from the process environment.

    Returns:
        Factory bound to the launcher home and loaded settings.

    Raises:
        SettingsError: If the settings file is invalid.
    """
    home = default_home()
    context = LauncherContext(
        home=home,
        running_version=__version__,
        settings=load_settings(settings_file(home)),
        environ=dict(os.environ),
    )
    return LauncherFactory(context)


@contextmanager
def _user_errors(exit_code: int = 1) -> Iterator[None]:
    """Render known launcher errors and exit with ``exit_code``.

    Raises:
        Exit: When a known launcher error is raised inside the block.
    """
    try:
        yield
    except _USER_ERRORS as exc:
        render_error(_CONSOLE, str(exc))
        raise typer.Exit(code=exit_code) from exc


def _load_profile(
    factory: LauncherFactory, profile: str | None
) -> tuple[str, ProfileConfig]:
    store = factory.store()
    engine = factory.migration_engine()
    if profile:
        return profile, store.load_migrated(profile, engine)
    return store.load_current(engine)


@app.callback()
def main_callback() -> None:
    """Initialize logging for every command."""
    _configure_logging()


@app.command("version")
def version_command() -> None:
    """Print the launcher version."""
    _CONSOLE.print(f"bedlaunch {__version__}")


@app.command(
    "run",
    context_settings={"allow_extra_args": True, "ignore_unknown_options": True},
)
def run_command(  # noqa: PLR0913
    ctx: typer.Context,
    profile: ProfileOption = None,
    profile_type: Annotated[
        str | None, typer.Option("--profile-type", help="Override profile type.")
    ] = None,
    model: Annotated[
        str | None, typer.Option("--model", help="Override the main model.")
    ] = None,
    fast_model: Annotated[
        str | None, typer.Option("--fast-model", help="Override the fast model.")
    ] = None,
    heavy_model: Annotated[
        str | None, typer.Option("--heavy-model", help="Override the heavy model.")
    ] = None,
    aws_profile: Annotated[
        str | None, typer.Option("--aws-profile", help="Override the AWS profile.")
    ] = None,
    region: Annotated[
        str | None, typer.Option("--region", help="Override the AWS region.")
    ] = None,
    cross_region: Annotated[
        str | None,
        typer.Option("--cross-region", help="Override geography: us, eu, global."),
    ] = None,
    base_url: Annotated[
        str | None, typer.Option("--base-url", help="Override the API base URL.")
    ] = None,
    api_key: Annotated[
        str | None, typer.Option("--api-key", help="API key for this run only.")
    ] = None,
) -> None:
    """Launch the assistant; extra arguments are passed through unchanged.

    Raises:
        Exit: With the assistant's exit code, or 78 on configuration errors.
    """
    overrides = LaunchOverrides(
        profile=profile,
        profile_type=profile_type,
        model=model,
        fast_model=fast_model,
        heavy_model=heavy_model,
        aws_profile=aws_profile,
        region=region,
        cross_region=cross_region,
        base_url=base_url,
        api_key=api_key,
    )
    with _user_errors(CONFIG_ERROR_EXIT_CODE):
        factory = _build_factory()
        name, loaded = _load_profile(factory, profile)
        config = apply_overrides(loaded, overrides)
        try:
            config.validate_complete()
        except ProfileConfigError as exc:
            raise ProfileConfigError(
                f"Profile '{name}' is incomplete: {exc}\n"
                "Configure it with 'bedlaunch config set <key> <value>'"
            ) from exc
        rows = overrides.describe()
        if rows:
            render_overrides(_CONSOLE, rows)
        environ = factory.context.environ
        key = resolve_api_key(config, environ, overrides.api_key)
        executable = find_executable(
            factory.context.settings.assistant_binary, path=environ.get("PATH")
        )
        env = build_launch_environment(config, environ, api_key=key)
        outcome = factory.coordinator(config, key).launch(
            LaunchRequest(
                profile_name=name,
                executable=executable,
                args=tuple(ctx.args),
                env=env,
                identifiers=config.models(),
            )
        )
    if isinstance(outcome, LaunchFailed):
        render_error(_CONSOLE, outcome.message, title="Launch aborted")
    raise typer.Exit(code=outcome.host_exit_code)


@models_app.command("list")
def models_list_command(
    profile: ProfileOption = None,
    provider: Annotated[
        str | None, typer.Option("--provider", help="Only show this provider.")
    ] = None,
    region: Annotated[
        str | None, typer.Option("--region", help="Query this AWS region.")
    ] = None,
    cross_region: Annotated[
        str | None,
        typer.Option("--cross-region", help="Query this geography: us, eu, global."),
    ] = None,
    api_key: Annotated[
        str | None, typer.Option("--api-key", help="API key for this query only.")
    ] = None,
) -> None:
    """List models available to a profile."""
    with _user_errors():
        factory = _build_factory()
        _, loaded = _load_profile(factory, profile)
        config = apply_overrides(
            loaded,
            LaunchOverrides(region=region, cross_region=cross_region, api_key=api_key),
        )
        routing = config.routing()
        if isinstance(routing, ApiRouting):
            if not routing.base_url:
                raise ProfileConfigError(
                    "base-url is required: bedlaunch config set base-url <url>"
                )
            key = resolve_api_key(config, factory.context.environ, api_key)
            fetcher = ApiModelFetcher(
                base_url=routing.base_url,
                api_key=key or "",
                timeout_seconds=factory.context.settings.catalog_timeout_seconds,
            )
            models = fetcher.fetch_models()
            if provider:
                wanted = provider.lower()
                models = [model for model in models if api_provider(model.id) == wanted]
                if not models:
                    _CONSOLE.print(f"[yellow]No models found for provider '{provider}'.[/yellow]")
                    return
            render_api_models(_CONSOLE, models)
            return
        grouped = factory.resolver_for(config).available_models(routing.geography)
        if provider:
            wanted = provider.lower()
            grouped = {name: items for name, items in grouped.items() if name == wanted}
            if not grouped:
                _CONSOLE.print(f"[yellow]No models found for provider '{provider}'.[/yellow]")
                return
        render_bedrock_models(
            _CONSOLE, grouped, region=routing.region, geography=routing.geography
        )


@config_app.command("show")
def config_show_command(profile: ProfileOption = None) -> None:
    """Show every setting of a profile."""
    with _user_errors():
        factory = _build_factory()
        name, config = _load_profile(factory, profile)
        render_profile_config(_CONSOLE, name, config)


@config_app.command("get")
def config_get_command(
    key: Annotated[str, typer.Argument(help="Setting key, e.g. model or region.")],
    profile: ProfileOption = None,
) -> None:
    """Print one setting value."""
    with _user_errors():
        factory = _build_factory()
        _, config = _load_profile(factory, profile)
        typer.echo(config.get(key))


def _reresolve_models(factory: LauncherFactory, config: ProfileConfig) -> None:
    """Point populated model identifiers at ``config``'s current geography."""
    geography = config.cross_region
    stale = [
        key
        for key in MODEL_KEYS
        if config.get(key) and geography_of(config.get(key)) not in (None, geography)
    ]
    if not stale:
        return
    resolver = factory.resolver_for(config)
    for key in stale:
        resolved = resolver.resolve(geography, to_friendly_name(config.get(key)))
        config.set(key, resolved)
        _CONSOLE.print(f"{key} -> [bold]{resolved}[/bold]")


@config_app.command("set")
def config_set_command(
    key: Annotated[str, typer.Argument(help="Setting key, e.g. model or region.")],
    value: Annotated[str, typer.Argument(help="New value.")],
    profile: ProfileOption = None,
) -> None:
    """Update one setting, resolving Bedrock model names to profile IDs."""
    with _user_errors():
        factory = _build_factory()
        name, config = _load_profile(factory, profile)
        config.set(key, value)
        if config.routing_type == ProfileType.BEDROCK:
            if key in MODEL_KEYS:
                resolved = factory.resolver_for(config).resolve(config.cross_region, value)
                config.set(key, resolved)
                if resolved != value:
                    _CONSOLE.print(f"Resolved '{value}' -> [bold]{resolved}[/bold]")
            elif key == "cross-region":
                _reresolve_models(factory, config)
        factory.store().save_unvalidated(name, config)
        _CONSOLE.print(f"[green]Set {key} for profile '{name}'.[/green]")


@profiles_app.command("list")
def profiles_list_command() -> None:
    """List profiles and mark the active one."""
    with _user_errors():
        store = _build_factory().store()
        store.migrate_legacy_config()
        render_profiles(_CONSOLE, store.list_profiles(), store.current())


@profiles_app.command("use")
def profiles_use_command(
    name: Annotated[str, typer.Argument(help="Profile to activate.")],
) -> None:
    """Switch the active profile."""
    with _user_errors():
        _build_factory().store().set_current(name)
        _CONSOLE.print(f"[green]Switched to profile '{name}'.[/green]")


@profiles_app.command("create")
def profiles_create_command(
    name: Annotated[str, typer.Argument(help="New profile name.")],
    profile_type: Annotated[
        ProfileType, typer.Option("--type", help="Profile type.")
    ] = ProfileType.BEDROCK,
) -> None:
    """Create an empty profile to fill in with ``config set``."""
    with _user_errors():
        factory = _build_factory()
        store = factory.store()
        if store.exists(name):
            raise ProfileStoreError(f"profile '{name}' already exists")
        config = store.create_default(factory.context.running_version)
        config.profile_type = profile_type
        store.save_unvalidated(name, config)
        _CONSOLE.print(
            f"[green]Created {profile_type.value} profile '{name}'.[/green] "
            f"Configure it with 'bedlaunch config set <key> <value> --profile {name}'."
        )


@profiles_app.command("delete")
def profiles_delete_command(
    name: Annotated[str, typer.Argument(help="Profile to delete.")],
) -> None:
    """Delete an inactive, non-default profile."""
    with _user_errors():
        _build_factory().store().delete(name)
        _CONSOLE.print(f"[green]Deleted profile '{name}'.[/green]")


@profiles_app.command("rename")
def profiles_rename_command(
    old_name: Annotated[str, typer.Argument(help="Existing profile.")],
    new_name: Annotated[str, typer.Argument(help="New name.")],
) -> None:
    """Rename a profile."""
    with _user_errors():
        _build_factory().store().rename(old_name, new_name)
        _CONSOLE.print(f"[green]Renamed profile '{old_name}' to '{new_name}'.[/green]")


@profiles_app.command("copy")
def profiles_copy_command(
    source: Annotated[str, typer.Argument(help="Profile to copy.")],
    destination: Annotated[str, typer.Argument(help="New profile name.")],
) -> None:
    """Copy a profile under a new name."""
    with _user_errors():
        _build_factory().store().copy(source, destination)
        _CONSOLE.print(f"[green]Copied profile '{source}' to '{destination}'.[/green]")


def _usage_store(factory: LauncherFactory) -> SqliteUsageSink:
    context = factory.context
    return SqliteUsageSink(usage_db_path(context.home, context.settings))


@stats_app.callback(invoke_without_command=True)
def stats_command(  # noqa: PLR0913
    ctx: typer.Context,
    profile: Annotated[
        str | None, typer.Option("--profile", help="Only count this profile.")
    ] = None,
    model: Annotated[
        str | None,
        typer.Option("--model", help="Only count this main model (ID or friendly name)."),
    ] = None,
    since: Annotated[
        str | None, typer.Option("--since", help="First day, YYYY-MM-DD.")
    ] = None,
    until: Annotated[
        str | None, typer.Option("--until", help="Last day, YYYY-MM-DD.")
    ] = None,
    month: Annotated[
        str | None, typer.Option("--month", help="Calendar month, YYYY-MM.")
    ] = None,
    today: Annotated[bool, typer.Option("--today", help="Only today's sessions.")] = False,
    week: Annotated[bool, typer.Option("--week", help="Only this week's sessions.")] = False,
    export: Annotated[
        Path | None, typer.Option("--export", help="Write matching sessions to a CSV file.")
    ] = None,
) -> None:
    """Show recorded session usage."""
    if ctx.invoked_subcommand is not None:
        return
    with _user_errors():
        query = build_query(
            now=datetime.now().astimezone(),
            profile_name=profile,
            model=model,
            since=since,
            until=until,
            month=month,
            today=today,
            week=week,
        )
        factory = _build_factory()
        if not factory.context.settings.usage.enabled:
            _CONSOLE.print("[yellow]Usage tracking is disabled.[/yellow]")
            return
        store = _usage_store(factory)
        if export is not None:
            count = store.export_csv(export, query)
            _CONSOLE.print(f"[green]Exported {count} sessions to {export}.[/green]")
            return
        summary = store.summarize(query)
        if summary.total_sessions == 0:
            _CONSOLE.print("No sessions found matching the criteria.")
            return
        render_usage_summary(_CONSOLE, summary, period=query.describe())


@stats_app.command("reset")
def stats_reset_command(
    yes: Annotated[bool, typer.Option("--yes", help="Skip confirmation.")] = False,
) -> None:
    """Delete all recorded sessions."""
    if not yes and not typer.confirm("Delete all recorded sessions?"):
        raise typer.Exit(code=1)
    with _user_errors():
        removed = _usage_store(_build_factory()).reset()
        _CONSOLE.print(f"[green]Removed {removed} recorded sessions.[/green]")


def main() -> None:
    """Console-script entrypoint."""
    app()
