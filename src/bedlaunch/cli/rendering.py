"""Rich views for launcher CLI output."""

from __future__ import annotations

from collections.abc import Mapping, Sequence

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from bedlaunch.catalog.fetchers import ApiModelInfo, api_friendly_name, is_recommended
from bedlaunch.catalog.grammar import to_friendly_name
from bedlaunch.config.models import MODEL_KEYS, SETTING_KEYS, ApiRouting, ProfileConfig
from bedlaunch.usage.tracker import UsageSummary


def model_indicator(name: str) -> str:
    """Return a short hint for well-known model tiers."""
    lower = name.lower()
    if "haiku" in lower:
        return "fast"
    if "sonnet-4-5" in lower or "sonnet-4.5" in lower:
        return "recommended"
    return ""


def render_error(console: Console, message: str, *, title: str = "Error") -> None:
    """Render an error panel."""
    console.print(Panel(message, title=title, border_style="red", expand=True))


def render_bedrock_models(
    console: Console,
    grouped: Mapping[str, Sequence[str]],
    *,
    region: str,
    geography: str,
) -> None:
    """Render friendly names grouped by provider.

    Args:
        console: Rich console.
        grouped: Provider to friendly names, already sorted.
        region: AWS region queried.
        geography: Cross-region geography queried.
    """
    table = Table(
        title=f"Available models in {region} ({geography} cross-region)",
        show_header=True,
        header_style="bold cyan",
    )
    table.add_column("Provider", style="bold")
    table.add_column("Model")
    table.add_column("Note", style="green")
    total = 0
    for provider, names in grouped.items():
        for name in names:
            table.add_row(provider.title(), name, model_indicator(name))
            total += 1
    console.print(table)
    console.print(f"Found {total} models across {len(grouped)} providers.")


def render_api_models(console: Console, models: Sequence[ApiModelInfo]) -> None:
    """Render an HTTP API model listing."""
    table = Table(title="Available models", show_header=True, header_style="bold cyan")
    table.add_column("ID", style="bold")
    table.add_column("Name")
    table.add_column("Recommended for", style="green")
    for model in models:
        contexts = [ctx for ctx in ("main", "fast", "heavy") if is_recommended(model, ctx)]
        table.add_row(model.id, model.name or api_friendly_name(model.id), ", ".join(contexts))
    console.print(table)
    console.print(f"Found {len(models)} models.")


def render_profile_config(console: Console, name: str, config: ProfileConfig) -> None:
    """Render every user-visible setting of one profile."""
    table = Table(
        title=f"Configuration (profile: {name})",
        show_header=True,
        header_style="bold cyan",
    )
    table.add_column("Key", style="bold")
    table.add_column("Value")
    show_friendly = not isinstance(config.routing(), ApiRouting)
    for key in SETTING_KEYS:
        value = config.get(key)
        if show_friendly and key in MODEL_KEYS and value:
            friendly = to_friendly_name(value)
            if friendly != value:
                value = f"{value} [dim]({friendly})[/dim]"
        table.add_row(key, value)
    table.add_row("version", config.version or "[dim]unversioned[/dim]")
    console.print(table)


def render_profiles(console: Console, names: Sequence[str], current: str) -> None:
    """Render the profile list, marking the active one."""
    table = Table(title="Profiles", show_header=True, header_style="bold cyan")
    table.add_column("Active", style="green", no_wrap=True)
    table.add_column("Profile", style="bold")
    for name in names:
        table.add_row("yes" if name == current else "", name)
    console.print(table)


def render_overrides(console: Console, rows: Sequence[tuple[str, str]]) -> None:
    """Render per-run overrides."""
    table = Table(title="Using overrides", show_header=False)
    table.add_column("Setting", style="bold")
    table.add_column("Value")
    for label, value in rows:
        table.add_row(label, value)
    console.print(table)


def render_usage_summary(
    console: Console, summary: UsageSummary, *, period: str = "All time"
) -> None:
    """Render aggregate session usage for the named period."""
    console.print(f"[bold]Usage[/bold] ({period})")
    table = Table(show_header=False)
    table.add_column("Metric", style="bold")
    table.add_column("Value")
    table.add_row("Sessions", str(summary.total_sessions))
    table.add_row("Failed sessions", str(summary.failed_sessions))
    table.add_row("Total hours", f"{summary.total_duration_seconds / 3600:.2f}")
    table.add_row("Avg session (min)", f"{summary.average_session_minutes:.1f}")
    console.print(table)
    if summary.model_breakdown:
        models = Table(title="Sessions by model", header_style="bold cyan")
        models.add_column("Model")
        models.add_column("Sessions", justify="right")
        for model, count in summary.model_breakdown.items():
            models.add_row(to_friendly_name(model), str(count))
        console.print(models)
    if summary.profile_breakdown:
        profiles = Table(title="Sessions by profile", header_style="bold cyan")
        profiles.add_column("Profile")
        profiles.add_column("Sessions", justify="right")
        for profile, count in summary.profile_breakdown.items():
            profiles.add_row(profile, str(count))
        console.print(profiles)
