"""Command-line interface for TestSplit."""

import functools
import logging
import sys
from pathlib import Path
from typing import Any, Callable, Optional

import click
from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table

from testsplit import __version__
from testsplit.config import ConfigurationError, TestSplitConfig, create_example_config
from testsplit.core.models import Partition


console = Console()
err_console = Console(stderr=True)


def print_banner() -> None:
    """Print the TestSplit banner."""
    err_console.print(
        Panel.fit(
            "[bold blue]TestSplit[/bold blue] - duration-balanced CI test splitting",
            subtitle=f"v{__version__}",
        )
    )


def setup_logging(verbosity: int) -> None:
    """Route library logging to stderr at a level chosen by -v count."""
    if verbosity >= 2:
        level = logging.DEBUG
    elif verbosity == 1:
        level = logging.INFO
    else:
        level = logging.WARNING

    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


def fail(message: str) -> None:
    """Print an error and exit with status 1."""
    err_console.print(f"[red]Error:[/red] {message}")
    sys.exit(1)


def split_options(func: Callable) -> Callable:
    """Options shared by the commands that compute a partition."""
    options = [
        click.argument("input_path", required=False, type=click.Path(file_okay=False)),
        click.option("--config", "config_path", type=click.Path(exists=False), help="Path to configuration file (default: testsplit.json)"),
        click.option("--access-token", "-t", help="CircleCI access token"),
        click.option("--user", "-u", help="Project owner [env: CIRCLE_PROJECT_USERNAME]"),
        click.option("--project", "-p", help="Project name [env: CIRCLE_PROJECT_REPONAME]"),
        click.option("--branch", "-b", help="Branch of the previous run (default: master)"),
        click.option("--regexp", "-r", help="Artifact url pattern"),
        click.option("--node-total", "-c", type=int, help="Count of nodes (workers) [env: CIRCLE_NODE_TOTAL]"),
        click.option(
            "--timing-source",
            "-s",
            type=click.Choice(["console", "json"], case_sensitive=False),
            help="Format of the previous run's output",
        ),
        click.option("-v", "verbosity", count=True, help="Verbosity level (repeat for more)"),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def load_config(config_path: Optional[str], overrides: dict[str, Any]) -> TestSplitConfig:
    """Load configuration from file and apply command-line overrides."""
    if config_path:
        config = TestSplitConfig.from_file(config_path)
    else:
        config = TestSplitConfig.find_and_load()

    data = config.model_dump()
    for dotted, value in overrides.items():
        if value is None:
            continue
        section, key = dotted.split(".")
        data[section][key] = value

    return TestSplitConfig.model_validate(data)


def prepare(
    input_path: Optional[str],
    config_path: Optional[str],
    overrides: dict[str, Any],
) -> tuple[TestSplitConfig, Path]:
    """Validate options, exiting with status 1 on any configuration problem."""
    try:
        config = load_config(config_path, overrides)
        config.validate_for_run()
        if not input_path:
            raise ConfigurationError("Path to tests is missing")
    except FileNotFoundError as e:
        fail(str(e))
    except ValidationError as e:
        fail(f"Invalid configuration:\n{e}")
    except ConfigurationError as e:
        fail(str(e))

    input_root = Path(input_path)
    if not input_root.is_dir():
        fail(f"Test directory not found: {input_root}")
    return config, input_root


def cli_overrides(**kwargs: Any) -> dict[str, Any]:
    """Map command-line option names onto configuration fields."""
    mapping = {
        "access_token": "circleci.access_token",
        "user": "circleci.user",
        "project": "circleci.project",
        "branch": "circleci.branch",
        "regexp": "circleci.artifact_pattern",
        "node_total": "split.node_total",
        "node_index": "split.node_index",
        "mode": "split.mode",
        "timing_source": "timing.source",
    }
    return {mapping[name]: value for name, value in kwargs.items() if name in mapping}


def with_overrides(func: Callable) -> Callable:
    @functools.wraps(func)
    def wrapper(**kwargs: Any) -> Any:
        kwargs["overrides"] = cli_overrides(**kwargs)
        return func(**kwargs)

    return wrapper


def _show_help(ctx: click.Context, param: click.Parameter, value: bool) -> None:
    if not value or ctx.resilient_parsing:
        return
    click.echo(ctx.get_help(), color=ctx.color)
    ctx.exit(1)


class HelpExitMixin:
    """Makes ``--help`` print usage and exit with status 1."""

    def get_help_option(self, ctx: click.Context) -> Optional[click.Option]:
        names = self.get_help_option_names(ctx)
        if not names or not self.add_help_option:
            return None
        return click.Option(
            names,
            is_flag=True,
            is_eager=True,
            expose_value=False,
            callback=_show_help,
            help="Show this message and exit.",
        )


class SplitCommand(HelpExitMixin, click.Command):
    """Command whose help output exits with status 1."""

    pass


class SplitGroup(HelpExitMixin, click.Group):
    """Command group that exits with status 1 on usage errors and help."""

    command_class = SplitCommand

    def parse_args(self, ctx: click.Context, args: list[str]) -> list[str]:
        if not args and self.no_args_is_help and not ctx.resilient_parsing:
            click.echo(ctx.get_help(), color=ctx.color)
            ctx.exit(1)
        try:
            return super().parse_args(ctx, args)
        except click.UsageError as e:
            e.exit_code = 1
            raise

    def invoke(self, ctx: click.Context) -> Any:
        try:
            return super().invoke(ctx)
        except click.UsageError as e:
            e.exit_code = 1
            raise


@click.group(cls=SplitGroup)
@click.version_option(version=__version__, prog_name="testsplit")
def main() -> None:
    """TestSplit - split test files into equal-duration groups for parallel CI.

    Weights each test file by its duration in the previous CircleCI run
    and distributes the files across workers so they finish together.
    """
    pass


@main.command()
@split_options
@click.argument("output_path", required=False, type=click.Path(file_okay=False))
@click.option("--node-index", "-i", type=int, help="Only distribute this bucket [env: CIRCLE_NODE_INDEX]")
@click.option(
    "--mode",
    "-m",
    type=click.Choice(["copy", "delete"], case_sensitive=False),
    help="copy buckets into OUTPUT_PATH/<index>, or delete files outside the bucket",
)
@with_overrides
def split(
    input_path: Optional[str],
    output_path: Optional[str],
    config_path: Optional[str],
    verbosity: int,
    overrides: dict[str, Any],
    **_: Any,
) -> None:
    """Split the tests in INPUT_PATH and copy or prune the files."""
    setup_logging(verbosity)
    config, input_root = prepare(input_path, config_path, overrides)

    from testsplit.pipeline import SplitPipeline

    pipeline = SplitPipeline(config)
    result = pipeline.run(
        input_root,
        output_root=output_path,
        node_index=config.split.node_index,
    )

    if verbosity >= 1:
        print_banner()
        _display_partition(result.partition)

    report = result.report
    if config.split.mode == "copy":
        console.print(f"[green]Copied {len(report.copied)} files[/green]")
    else:
        console.print(f"[green]Deleted {len(report.deleted)} files[/green]")

    if not report.success:
        console.print(f"[red]{len(report.failures)} file operations failed:[/red]")
        for failure in report.failures[:10]:
            console.print(f"  [red]✗[/red] {failure.action} {failure.path}: {failure.error}")
        if len(report.failures) > 10:
            console.print(f"  ... and {len(report.failures) - 10} more")
        sys.exit(1)


@main.command()
@split_options
@with_overrides
def plan(
    input_path: Optional[str],
    config_path: Optional[str],
    verbosity: int,
    overrides: dict[str, Any],
    **_: Any,
) -> None:
    """Show how the tests in INPUT_PATH would be split, without moving files."""
    setup_logging(verbosity)
    config, input_root = prepare(input_path, config_path, overrides)

    from testsplit.pipeline import SplitPipeline

    pipeline = SplitPipeline(config)
    partition = pipeline.plan(input_root)

    print_banner()
    console.print(
        f"[dim]{pipeline.history_matched} tests with historical durations, "
        f"default {config.timing.default_duration_ms}ms for the rest[/dim]"
    )
    _display_partition(partition)


@main.command()
@click.option(
    "--output",
    "-o",
    type=click.Path(),
    default="testsplit.json",
    help="Output path for configuration file",
)
@click.option("--force", "-f", is_flag=True, help="Overwrite existing configuration")
def init(output: str, force: bool) -> None:
    """Initialize a new TestSplit configuration file."""
    print_banner()

    output_path = Path(output)
    if output_path.exists() and not force:
        console.print(
            f"[yellow]Configuration file already exists:[/yellow] {output_path}"
        )
        console.print("Use --force to overwrite")
        sys.exit(1)

    try:
        create_example_config(output_path)
        console.print(f"[green]Created configuration file:[/green] {output_path}")
    except OSError as e:
        console.print(f"[red]Error creating configuration:[/red] {e}")
        sys.exit(1)


def _display_partition(partition: Partition) -> None:
    """Display one row per bucket with its total and files."""
    if not len(partition):
        console.print("[yellow]No test files found[/yellow]")
        return

    table = Table(title="Test Split")
    table.add_column("Bucket", style="cyan", justify="right")
    table.add_column("Files", justify="right")
    table.add_column("Total (ms)", justify="right")
    table.add_column("Tests", style="dim")

    for index, (bucket, total) in enumerate(zip(partition, partition.totals)):
        table.add_row(
            str(index),
            str(len(bucket)),
            str(total),
            ", ".join(item.identifier for item in bucket),
        )

    console.print(table)
    console.print(f"Makespan: [bold]{partition.makespan}ms[/bold]")


if __name__ == "__main__":
    main()
