"""
Command Line Interface for lifeflow.

Developer tool for inspecting the layout engine: reads an event snapshot
from a JSON file and prints the computed timeline or river layout.

Event files hold either a list of event objects or {"events": [...]}.
"""

import json
import logging
import sys
from pathlib import Path
from typing import Any, List, Optional

import click
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from lifeflow import __version__
from lifeflow.config import AppConfig, ConfigError, get_config, load_config
from lifeflow.core.errors import InvalidInputError
from lifeflow.core.models import TimelineEvent
from lifeflow.core.nodes import ClusterNode, LayoutNode
from lifeflow.core.view_state import TimelineDisplayMode, TimelineOrientation
from lifeflow.core.zoom import MAX_ZOOM_LEVEL, calculate_pixels_per_day, tier_ranges
from lifeflow.engine.clustering import ClusteringEngine
from lifeflow.engine.layout import LayoutEngine
from lifeflow.engine.pipeline import render_river, render_timeline
from lifeflow.engine.render_config import TimelineRenderConfig
from lifeflow.engine.river import RiverFlowBuilder, RiverFlowLayout
from lifeflow.utils.logging import LogContext, setup_logging

logger = logging.getLogger(__name__)

console = Console()


# =============================================================================
# HELPER FUNCTIONS
# =============================================================================


def print_header(text: str) -> None:
    """Print a styled header."""
    console.print()
    console.print(Panel(text, style="bold blue", expand=False))
    console.print()


def print_success(text: str) -> None:
    """Print green success message."""
    console.print(f"[bold green]✓[/bold green] {text}")


def print_warning(text: str) -> None:
    """Print yellow warning message."""
    console.print(f"[bold yellow]⚠[/bold yellow] {text}")


def print_error(text: str) -> None:
    """Print red error message."""
    console.print(f"[bold red]✗[/bold red] {text}")


def load_events(path: Path) -> List[TimelineEvent]:
    """Read events from a JSON snapshot.

    Args:
        path: JSON file holding a list of events or {"events": [...]}.

    Returns:
        Parsed events.

    Raises:
        InvalidInputError: If the file is not valid JSON or an event is malformed.
    """
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise InvalidInputError(f"{path} is not valid JSON: {e}") from e

    if isinstance(payload, dict):
        payload = payload.get("events", [])
    if not isinstance(payload, list):
        raise InvalidInputError(f"{path} must hold a list of events")

    events = []
    for index, item in enumerate(payload):
        try:
            events.append(TimelineEvent.model_validate(item))
        except ValidationError as e:
            raise InvalidInputError(
                f"Event #{index} in {path} is invalid: {e.error_count()} error(s)"
            ) from e
    return events


def _app_config(ctx: click.Context) -> AppConfig:
    return ctx.obj["config"]


def print_layout_table(layout_nodes: List[LayoutNode]) -> None:
    """Print positioned nodes as a table."""
    table = Table(title="Timeline Layout")
    table.add_column("Node", style="cyan")
    table.add_column("Kind")
    table.add_column("Label", style="green")
    table.add_column("Start")
    table.add_column("Position", justify="right")
    table.add_column("Card")

    for layout_node in layout_nodes:
        node = layout_node.node
        marker = "★ " if layout_node.is_selected else ""
        label = escape(node.label)
        if not layout_node.is_label_visible:
            label = f"[dim]{label}[/dim]"
        table.add_row(
            f"{marker}{node.id}",
            node.kind,
            label,
            node.start.date().isoformat(),
            f"{node.primary_px:.1f}",
            "yes" if layout_node.has_card else "-",
        )

    console.print(table)


def print_river_table(river: RiverFlowLayout) -> None:
    """Print river paths as a table."""
    table = Table(title="River Flow")
    table.add_column("Lane", justify="right")
    table.add_column("Person", style="cyan")
    table.add_column("Name")
    table.add_column("Color")
    table.add_column("Events", justify="right")

    for path in river.paths:
        hex_color = path.color.to_hex()
        table.add_row(
            str(path.lane_index),
            path.person_id,
            path.person_name,
            f"[#{hex_color[1:7]}]{hex_color}[/]",
            str(len(path.nodes)),
        )

    console.print(table)


# =============================================================================
# MAIN CLI GROUP
# =============================================================================


@click.group()
@click.version_option(__version__, prog_name="lifeflow")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output")
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.option("--config", "config_path", type=click.Path(), help="Custom config file")
@click.pass_context
def lifeflow(ctx: click.Context, verbose: bool, debug: bool, config_path: Optional[str]) -> None:
    """
    lifeflow - Semantic-zoom layout engine for life timelines.

    Inspect how events cluster and lay out at different zoom levels.
    """
    try:
        config = load_config(Path(config_path)) if config_path else get_config()
    except ConfigError as e:
        print_error(str(e))
        sys.exit(1)

    if debug:
        level = "DEBUG"
    elif verbose:
        level = "INFO"
    else:
        level = config.log_level
    setup_logging(level=level)

    ctx.ensure_object(dict)
    ctx.obj["config"] = config
    ctx.obj["verbose"] = verbose
    ctx.obj["debug"] = debug


# =============================================================================
# TIERS COMMAND
# =============================================================================


@lifeflow.command()
def tiers() -> None:
    """
    Show zoom tiers with their zoom ranges and scale.

    Example:
        lifeflow tiers
    """
    table = Table(title="Zoom Tiers")
    table.add_column("Tier", style="cyan")
    table.add_column("Zoom range")
    table.add_column("Pixels/day", justify="right")

    for tier, lower, upper in tier_ranges():
        closing = "]" if upper == MAX_ZOOM_LEVEL else ")"
        table.add_row(
            tier.value,
            f"[{lower:.2f}, {upper:.2f}{closing}",
            f"{calculate_pixels_per_day(lower):.1f} - {calculate_pixels_per_day(upper):.1f}",
        )

    console.print(table)


# =============================================================================
# LAYOUT COMMAND
# =============================================================================


@lifeflow.command()
@click.argument("events_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--zoom", "-z", type=click.FloatRange(0.0, 1.0), help="Zoom level (0.0 - 1.0)")
@click.option(
    "--mode",
    type=click.Choice([m.value for m in TimelineDisplayMode]),
    help="Display mode",
)
@click.option(
    "--orientation",
    type=click.Choice([o.value for o in TimelineOrientation]),
    help="Axis orientation",
)
@click.option("--expand", "-e", multiple=True, help="Cluster id to expand (repeatable)")
@click.option("--select", "selected", help="Event id to select")
@click.option("--show-private", is_flag=True, help="Include private events")
@click.option("--json", "output_json", is_flag=True, help="Output as JSON")
@click.pass_context
def layout(
    ctx: click.Context,
    events_file: Path,
    zoom: Optional[float],
    mode: Optional[str],
    orientation: Optional[str],
    expand: tuple,
    selected: Optional[str],
    show_private: bool,
    output_json: bool,
) -> None:
    """
    Cluster and lay out events at a zoom level.

    Example:
        lifeflow layout events.json --zoom 0.3 --mode minimal
    """
    config = _app_config(ctx)
    try:
        events = load_events(events_file)
    except InvalidInputError as e:
        print_error(str(e))
        sys.exit(1)

    view_state = config.view.to_view_state()
    if zoom is not None:
        view_state = view_state.with_zoom_level(zoom)
    if mode:
        view_state = view_state.with_display_mode(TimelineDisplayMode(mode))
    if orientation:
        view_state = view_state.with_orientation(TimelineOrientation(orientation))
    if selected:
        view_state = view_state.select_event(selected)
    if expand:
        view_state = view_state.with_expanded_clusters(expand)

    render_config = TimelineRenderConfig(show_private_events=show_private)
    with LogContext(f"Laying out {len(events)} events", level=logging.DEBUG):
        result = render_timeline(
            events,
            view_state,
            render_config,
            viewport=config.view.viewport,
            clustering=ClusteringEngine(config.clustering),
            layout=LayoutEngine(config.layout),
        )

    if output_json:
        payload: dict[str, Any] = {
            "tier": result.tier.value,
            "pixels_per_day": view_state.pixels_per_day,
            "min_date": result.min_date.isoformat() if result.min_date else None,
            "nodes": [n.model_dump(mode="json") for n in result.layout_nodes],
        }
        click.echo(json.dumps(payload, indent=2))
        return

    print_header(f"Tier: {result.tier.value}  ·  {view_state.pixels_per_day:.1f} px/day")
    if result.is_empty:
        print_warning("No events to lay out")
        return

    print_layout_table(result.layout_nodes)
    clusters = [n.node for n in result.layout_nodes if isinstance(n.node, ClusterNode)]
    print_success(
        f"{len(result.layout_nodes)} nodes ({len(clusters)} clusters) "
        f"from {result.filtered_events} events"
    )


# =============================================================================
# RIVER COMMAND
# =============================================================================


@lifeflow.command()
@click.argument("events_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--person", "-p", "people", multiple=True, help="Only draw these people")
@click.option("--show-private", is_flag=True, help="Include private events")
@click.option("--json", "output_json", is_flag=True, help="Output as JSON")
@click.pass_context
def river(
    ctx: click.Context,
    events_file: Path,
    people: tuple,
    show_private: bool,
    output_json: bool,
) -> None:
    """
    Build the multi-person river view.

    Example:
        lifeflow river events.json --person alice --person bob
    """
    config = _app_config(ctx)
    try:
        events = load_events(events_file)
    except InvalidInputError as e:
        print_error(str(e))
        sys.exit(1)

    result = render_river(
        events,
        TimelineRenderConfig(show_private_events=show_private),
        builder=RiverFlowBuilder(config.river),
        person_ids=people or None,
    )

    if output_json:
        click.echo(result.model_dump_json(indent=2))
        return

    print_header("River Flow")
    if result.is_empty:
        print_warning("No people to draw")
        return

    print_river_table(result)
    print_success(f"{len(result.paths)} streams, {len(result.intersections)} shared moments")


def main() -> None:
    """Entry point for the console script."""
    lifeflow()


if __name__ == "__main__":
    main()
