"""Typer CLI: init, check, status, run commands."""

from __future__ import annotations

import logging
from pathlib import Path

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from funrotate import __version__

app = typer.Typer(
    name="funrotate",
    help="Rotate log files according to per-file policies.",
    no_args_is_help=True,
)
console = Console()

STATUS_STYLES = {
    "rotated": "green",
    "skipped": "dim",
    "failed": "red bold",
}


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"funrotate v{__version__}")
        raise typer.Exit()


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def _format_size(size: int) -> str:
    for unit in ("B", "KB", "MB"):
        if size < 1024:
            return f"{size}{unit}" if unit == "B" else f"{size:.1f}{unit}"
        size /= 1024
    return f"{size:.1f}GB"


@app.callback()
def main(
    version: bool = typer.Option(
        False, "--version", "-V", help="Show version.", callback=_version_callback, is_eager=True
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log every rotation step."),
) -> None:
    """funrotate - per-file log rotation."""
    _setup_logging(verbose)


@app.command()
def init(
    force: bool = typer.Option(False, "--force", help="Overwrite existing config"),
    project_dir: Path = typer.Option(Path.cwd(), "--dir", help="Project directory"),
) -> None:
    """Write a starter funrotate.yaml."""
    from funrotate.config import CONFIG_FILENAMES, DEFAULT_CONFIG, EXAMPLE_FILE, save_config

    config_path = project_dir / CONFIG_FILENAMES[0]
    if config_path.exists() and not force:
        console.print(f"  [yellow]Config already exists:[/yellow] {config_path} (use --force)")
        raise typer.Exit(1)

    config = {**DEFAULT_CONFIG, "files": [dict(EXAMPLE_FILE)]}
    save_config(config, project_dir)
    console.print(Panel(f"Config written to [cyan]{config_path}[/cyan]", title="Ready", style="green"))


@app.command()
def check(
    project_dir: Path = typer.Option(Path.cwd(), "--dir", help="Project directory"),
    config_file: Path = typer.Option(None, "--config", "-c", help="Config file path"),
) -> None:
    """Validate the config and list configured policies."""
    from funrotate.config import get_config_path, read_config, validate_config
    from funrotate.policy import ConfigError

    config_path = config_file or get_config_path(project_dir)
    if not config_path.exists():
        console.print(f"  Config: [red]not found[/red] ({config_path}, run `funrotate init`)")
        raise typer.Exit(1)

    try:
        config = read_config(config_path)
    except ConfigError as exc:
        console.print(f"  [red]Config error: {escape(str(exc))}[/red]")
        raise typer.Exit(1)
    errors = validate_config(config, config_path.parent)
    if errors:
        for e in errors:
            console.print(f"  [red]Config error: {escape(e)}[/red]")
        raise typer.Exit(1)

    table = Table(title=str(config_path))
    for column in ("Path", "Interval", "Size", "Max files", "Compress", "Strategy"):
        table.add_column(column)
    for record in config["files"]:
        table.add_row(
            escape(record["path"]),
            record["interval"],
            _format_size(record["size"]),
            str(record["max_files"]),
            "yes" if record["compress"] else "no",
            record["strategy"],
        )
    console.print(table)
    console.print(f"  Config: [green]valid[/green] ({len(config['files'])} files)")


@app.command()
def status(
    project_dir: Path = typer.Option(Path.cwd(), "--dir", help="Project directory"),
    config_file: Path = typer.Option(None, "--config", "-c", help="Config file path"),
) -> None:
    """Show which files are due for rotation, without touching them."""
    from funrotate.config import load_policies
    from funrotate.policy import ConfigError
    from funrotate.rotation import list_archives
    from funrotate.trigger import file_age_seconds, rotation_reason, stat_target

    try:
        policies = load_policies(project_dir, config_file)
    except ConfigError as exc:
        console.print(f"  [red]Config error: {escape(str(exc))}[/red]")
        raise typer.Exit(1)

    table = Table(title="Rotation Status")
    for column in ("Path", "Size", "Age", "Interval", "Archives", "Due"):
        table.add_column(column)

    for policy in policies:
        try:
            file_stat = stat_target(policy.path)
            archives = list_archives(Path(policy.path)) if file_stat is not None else []
        except OSError as exc:
            table.add_row(
                escape(policy.path), "-", "-", policy.interval.value, "-",
                f"[red]error: {escape(str(exc))}[/red]",
            )
            continue
        if file_stat is None:
            table.add_row(escape(policy.path), "-", "-", policy.interval.value, "-", "[dim]missing[/dim]")
            continue
        reason = rotation_reason(policy, file_stat)
        age_hours = file_age_seconds(file_stat) / 3600
        table.add_row(
            escape(policy.path),
            f"{_format_size(file_stat.st_size)} / {_format_size(policy.size)}",
            f"{age_hours:.1f}h",
            policy.interval.value,
            f"{len(archives)}/{policy.max_files}",
            f"[yellow]{reason}[/yellow]" if reason else "[green]no[/green]",
        )
    console.print(table)


@app.command()
def run(
    project_dir: Path = typer.Option(Path.cwd(), "--dir", help="Project directory"),
    config_file: Path = typer.Option(None, "--config", "-c", help="Config file path"),
    report_path: Path = typer.Option(None, "--report", "-r", help="Write a markdown report"),
    json_output: bool = typer.Option(False, "--json", help="Print results as JSON"),
) -> None:
    """Run one rotation pass over every configured file."""
    from funrotate.config import load_policies
    from funrotate.driver import run_once, summarize
    from funrotate.exporters.json_export import results_to_json_string
    from funrotate.policy import ConfigError
    from funrotate.report import generate_report

    try:
        policies = load_policies(project_dir, config_file)
    except ConfigError as exc:
        console.print(f"  [red]Config error: {escape(str(exc))}[/red]")
        raise typer.Exit(1)

    results = list(run_once(policies))

    if json_output:
        typer.echo(results_to_json_string(results))
    else:
        table = Table(title="Rotation Results", show_lines=True)
        table.add_column("Status", style="bold", width=8)
        table.add_column("Path")
        table.add_column("Reason")
        table.add_column("Archive")
        table.add_column("Detail")
        for r in results:
            style = STATUS_STYLES[r.status.value]
            detail = r.error if r.error else (f"pruned {len(r.pruned)}" if r.pruned else "")
            table.add_row(
                f"[{style}]{r.status.value.upper()}[/{style}]",
                escape(r.path),
                r.reason,
                escape(r.archive or ""),
                escape(detail),
            )
        console.print(table)
        counts = summarize(results)
        console.print(
            f"\n[bold]Results:[/bold] [green]{counts['rotated']} rotated[/green], "
            f"{counts['skipped']} skipped, [red]{counts['failed']} failed[/red] / {len(results)} total"
        )

    if report_path:
        generate_report(results, report_path)
        if not json_output:
            console.print(f"\n[green]Report saved to:[/green] {report_path}")

    if any(not r.ok for r in results):
        raise typer.Exit(1)
