"""CLI for the Technology Comparison Engine.

Compares technologies from a catalog file (or the bundled default catalog)
and renders scores, radar chart data and KPI metrics.
"""

import json
import sys
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from . import __version__
from .app_logging import setup_logging
from .config import find_config_file, get_config, load_config
from .engine import ComparisonOrchestrator
from .errors import NotFoundError
from .narrative import TemplateNarrativeProvider
from .repository import InMemoryTechnologyRepository, load_catalog, load_default_repository
from .schema import ComparisonResult, TechnologyScore, UserConstraints

console = Console()


def _configure(config_path: Optional[str], verbose: bool, quiet: bool = False) -> None:
    """Load configuration and set up console logging for a command."""
    path = Path(config_path) if config_path else find_config_file()
    if path:
        load_config(path)

    logging_config = get_config().logging
    if verbose:
        level = "DEBUG"
    elif quiet:
        level = "WARNING"
    else:
        level = logging_config.level
    setup_logging(level=level, dev_mode=verbose or logging_config.dev_mode)


def _load_repository(catalog: Optional[str]) -> InMemoryTechnologyRepository:
    if catalog:
        return InMemoryTechnologyRepository.from_file(catalog)
    return load_default_repository()


def _build_constraints(
    priority_tag: tuple,
    project_type: Optional[str] = None,
    team_size: Optional[str] = None,
    timeline: Optional[str] = None,
) -> UserConstraints:
    return UserConstraints(
        priority_tags=list(priority_tag),
        project_type=project_type,
        team_size=team_size,
        timeline=timeline,
    )


catalog_option = click.option(
    "--catalog", "-c",
    type=click.Path(exists=True),
    help="Path to a technology catalog (JSON or YAML). Defaults to the bundled catalog"
)
priority_tag_option = click.option(
    "--priority-tag", "-p",
    multiple=True,
    help="Priority tag; technologies carrying it get their strengths weighted up (repeatable)"
)
config_option = click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True),
    help="Path to a comparison-config.yaml file"
)
verbose_option = click.option(
    "--verbose", "-v",
    is_flag=True,
    help="Show detailed output and debug logging"
)


@click.group()
@click.version_option(version=__version__, prog_name="tech-compare")
def main():
    """Technology Comparison Engine.

    Scores 2-5 technologies against weighted criteria and produces radar
    chart data, KPI metrics and a short recommendation.
    """
    pass


@main.command("compare")
@click.argument("names", nargs=-1, required=True)
@catalog_option
@priority_tag_option
@click.option("--project-type", help="Project type hint passed to the recommendation")
@click.option("--team-size", help="Team size hint passed to the recommendation")
@click.option("--timeline", help="Timeline hint passed to the recommendation")
@click.option(
    "--json-output", "-j",
    is_flag=True,
    help="Output raw JSON instead of formatted text"
)
@click.option(
    "--out", "-o",
    type=click.Path(),
    help="Output file for JSON results"
)
@verbose_option
@config_option
def compare_cmd(
    names: tuple,
    catalog: Optional[str],
    priority_tag: tuple,
    project_type: Optional[str],
    team_size: Optional[str],
    timeline: Optional[str],
    json_output: bool,
    out: Optional[str],
    verbose: bool,
    config_path: Optional[str],
):
    """Compare technologies by name.

    Examples:
        tech-compare compare React Vue.js
        tech-compare compare React Vue.js Angular -p frontend -v
        tech-compare compare Redis PostgreSQL -c catalog.json -j -o result.json
    """
    try:
        _configure(config_path, verbose, quiet=json_output)
        repository = _load_repository(catalog)
        orchestrator = ComparisonOrchestrator(
            repository,
            narrative_provider=TemplateNarrativeProvider(),
        )
        constraints = _build_constraints(priority_tag, project_type, team_size, timeline)

        result = orchestrator.generate_comparison_by_names(list(names), constraints)

        if json_output:
            output_json(result, out)
        else:
            display_result(result, verbose)
            if out:
                output_json(result, out)
                console.print(f"\n[green]Results saved to {out}[/green]")

    except Exception as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)


@main.command("score")
@click.argument("name")
@catalog_option
@priority_tag_option
@verbose_option
@config_option
def score_cmd(
    name: str,
    catalog: Optional[str],
    priority_tag: tuple,
    verbose: bool,
    config_path: Optional[str],
):
    """Score a single technology on its own.

    Count metrics cannot be compared against anything, so a single
    technology's scores are not comparable with comparison scores.
    """
    try:
        _configure(config_path, verbose)
        repository = _load_repository(catalog)
        technology = repository.find_technology_by_name(name)
        if technology is None:
            raise NotFoundError(f"Technology not found: {name}", missing=[name])

        orchestrator = ComparisonOrchestrator(repository)
        score = orchestrator.score_technology(technology.id, _build_constraints(priority_tag))

        console.print(f"\n[bold blue]{score.technology_name}[/bold blue] ({technology.category})")
        console.print(f"Overall score: [bold]{score.overall_score:.1f}[/bold]\n")
        console.print(_criterion_table([score]))

    except Exception as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)


@main.command("inspect")
@catalog_option
@click.option(
    "--category",
    help="Only list technologies in this category"
)
def inspect_cmd(catalog: Optional[str], category: Optional[str]):
    """List the technologies and active criteria in a catalog."""
    try:
        repository = _load_repository(catalog)
        technologies = repository.list_technologies(category)

        console.print(f"\n[bold blue]Technology Catalog[/bold blue]")
        console.print(f"Source: {catalog or 'bundled default catalog'}")
        console.print(f"Showing {len(technologies)} technologies:\n")

        table = Table(show_header=True, header_style="bold")
        table.add_column("ID", style="cyan", no_wrap=True)
        table.add_column("Name")
        table.add_column("Category")
        table.add_column("Tags")
        table.add_column("Metrics", justify="right")

        for tech in technologies:
            table.add_row(
                str(tech.id),
                tech.name,
                tech.category,
                ", ".join(sorted(tech.tags)),
                str(len(tech.metrics)),
            )
        console.print(table)

        criteria = repository.get_active_criteria()
        console.print(f"\n[bold]Active Criteria ({len(criteria)}):[/bold]")
        for criterion in criteria:
            console.print(f"  • {criterion.name} [dim]({criterion.type.value}, weight {criterion.weight:g})[/dim]")

    except Exception as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)


@main.command("validate")
@click.option(
    "--catalog", "-c",
    required=True,
    type=click.Path(),
    help="Path to the catalog file to validate"
)
def validate_cmd(catalog: str):
    """Validate a technology catalog file.

    Example:
        tech-compare validate -c catalog.json
    """
    try:
        cat = load_catalog(catalog)
    except Exception as e:
        console.print(f"[red]✗ Catalog invalid: {catalog}[/red]")
        console.print(f"  - {e}")
        sys.exit(1)

    console.print(f"[green]✓ Catalog valid: {catalog}[/green]")
    console.print(f"  {len(cat.technologies)} technologies, {len(cat.criteria)} criteria")

    without_metrics = [t.name for t in cat.technologies if not t.has_metrics]
    if without_metrics:
        console.print(f"[yellow]⚠ Technologies without metrics: {', '.join(without_metrics)}[/yellow]")
    if not any(c.active for c in cat.criteria):
        console.print("[yellow]⚠ No active criteria; comparisons need metrics on every technology[/yellow]")


def _criterion_table(scores: list[TechnologyScore]) -> Table:
    table = Table(show_header=True, header_style="bold")
    table.add_column("Criterion")
    for s in scores:
        table.add_column(s.technology_name, justify="right")

    criterion_names = list(scores[0].criterion_scores) if scores else []
    for name in criterion_names:
        cells = []
        for s in scores:
            value = s.criterion_score(name)
            weight = s.effective_weights.get(name)
            cell = f"{value:.1f}" if value is not None else "-"
            if weight is not None and weight != 1.0:
                cell += f" [dim]×{weight:g}[/dim]"
            cells.append(cell)
        table.add_row(name, *cells)
    return table


def display_result(result: ComparisonResult, verbose: bool):
    """Display a comparison result in formatted text."""
    top = result.top_score()
    tags = ", ".join(sorted(result.constraints.priority_tags)) or "none"

    console.print(Panel(
        f"Compared: [bold]{', '.join(result.technology_names)}[/bold]\n\n"
        f"Top Scorer: [bold cyan]{top.technology_name}[/bold cyan] ({top.overall_score:.1f})\n"
        f"Priority Tags: {tags}",
        title="Comparison Summary",
    ))

    console.print("\n[bold]Overall Scores:[/bold]\n")
    for i, s in enumerate(result.sorted_scores(), 1):
        console.print(f"  [bold cyan]{i}. {s.technology_name}[/bold cyan] [bold]{s.overall_score:.1f}[/bold]")

    console.print("\n[bold]Criterion Scores:[/bold]")
    console.print(_criterion_table(result.scores))

    if verbose:
        console.print("\n[bold]Radar Chart Data:[/bold]")
        radar = Table(show_header=True, header_style="bold")
        radar.add_column("Subject")
        for slot, name in zip("ABCDE", result.technology_names):
            radar.add_column(f"{slot} ({name})", justify="right")
        for entry in result.radar_data:
            radar.add_row(entry.subject, *(f"{v:.1f}" for v in entry.slots))
        console.print(radar)

        console.print("\n[bold]KPI Metrics:[/bold]")
        for name in result.technology_names:
            console.print(f"  [bold]{name}[/bold]")
            for metric in result.kpi_metrics_for(name):
                console.print(f"    {metric.name}: {metric.formatted_display}")

    if result.has_recommendation:
        console.print(f"\n[green]•[/green] {result.recommendation_summary}")


def output_json(result: ComparisonResult, out_path: Optional[str]):
    """Output result as JSON using the camelCase field names."""
    json_str = json.dumps(result.model_dump(by_alias=True, mode="json"), indent=2)

    if out_path:
        with open(out_path, "w", encoding="utf-8") as f:
            f.write(json_str)
    else:
        print(json_str)


@main.command("init-config")
@click.option(
    "--out", "-o",
    type=click.Path(),
    default="comparison-config.yaml",
    help="Output path for the configuration file"
)
@click.option(
    "--force", "-f",
    is_flag=True,
    help="Overwrite existing config file"
)
def init_config_cmd(out: str, force: bool):
    """Generate a default configuration file.

    Example:
        tech-compare init-config --out my-config.yaml
    """
    from .config import save_default_config

    out_path = Path(out)
    if out_path.exists() and not force:
        console.print(f"[red]Error:[/red] Config file already exists: {out}")
        console.print("Use --force to overwrite")
        sys.exit(1)

    try:
        save_default_config(out_path)
        console.print(f"[green]✓[/green] Config file created: {out}")
        console.print("\nThe engine will look for config in this order:")
        console.print("  1. COMPARISON_ENGINE_CONFIG environment variable")
        console.print("  2. ./comparison-config.yaml (current directory)")
        console.print("  3. ~/.config/comparison-engine/config.yaml")
    except Exception as e:
        console.print(f"[red]Error creating config:[/red] {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
