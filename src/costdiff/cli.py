"""Main CLI interface for costdiff."""

import logging
import sys
from typing import Any, Dict, Optional

import click
from rich.console import Console
from rich.panel import Panel
from rich.text import Text

from . import __version__
from .config import ConfigManager
from .data_exporter import ExportManager
from .exceptions import CostDiffError, ConfigurationError, format_error_message
from .models import Config, OutputFormat, OutputOptions
from .report_pipeline import ReportContext, ReportPipeline, group_header
from .validation import parse_group_by


# Console for spinners, messages and errors; stdout carries only the report
console = Console(stderr=True)

LOG_FORMAT = "[%(levelname)s] %(name)s: %(message)s"


COMMON_OPTIONS = [
    click.option("--from", "-f", "from_period", help="Start period (YYYY-MM or YYYY-MM-DD)"),
    click.option("--to", "-t", "to_period", help="End period (YYYY-MM or YYYY-MM-DD)"),
    click.option(
        "--group", "-g", "group",
        help="Group by: service|usage-type|region|account|tag (or tag:<key>)",
    ),
    click.option("--tag", "tag_key", help="Tag key when grouping by tag"),
    click.option("--top", "-n", "top_n", type=int, help="Number of results to show"),
    click.option("--format", "-o", "output_format", help="Output format: table|json|csv"),
    click.option("--profile", "-p", help="AWS profile name"),
    click.option("--region", "-r", help="AWS region"),
    click.option("--threshold", type=float, help="Only show changes above $X"),
    click.option(
        "--min-cost", "min_cost", type=float,
        help="Only show items where from or to cost >= $X",
    ),
    click.option(
        "--metric", "-m",
        help="Cost metric: net-amortized|amortized|unblended|blended|net-unblended|normalized|usage-quantity",
    ),
    click.option("--sort", "-s", "sort_by", help="Sort by: diff|diff-pct|cost|name"),
    click.option("--service", "service_filter", help="Only include costs for this service"),
    click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output"),
    click.option("--verbose", "-v", is_flag=True, help="Enable debug output"),
    click.option("--no-color", is_flag=True, help="Disable colored output"),
    click.option(
        "--config-file", "-c", type=click.Path(exists=True),
        help="Path to configuration file",
    ),
]

FLAG_OPTIONS = ("quiet", "verbose", "no_color")


def common_options(func):
    """Attach the shared options so they work before or after the subcommand."""
    for option in reversed(COMMON_OPTIONS):
        func = option(func)
    return func


def _merge_options(ctx: click.Context, options: Dict[str, Any]) -> Dict[str, Any]:
    """Combine group-level options with subcommand-level ones; the latter win."""
    merged = dict(ctx.obj.get("options", {}))
    for name, value in options.items():
        if name in FLAG_OPTIONS:
            merged[name] = bool(merged.get(name)) or bool(value)
        elif value is not None:
            merged[name] = value
    return merged


def configure_logging(verbose: bool, quiet: bool) -> None:
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.ERROR
    else:
        level = logging.WARNING
    logging.basicConfig(level=level, format=LOG_FORMAT, stream=sys.stderr, force=True)


def load_config(config_file: Optional[str]) -> Config:
    """Load and validate configuration, falling back to defaults."""
    config_manager = ConfigManager()
    try:
        config = config_manager.load_config(config_file)
    except (ValueError, FileNotFoundError) as e:
        raise ConfigurationError(str(e), config_file)
    config_manager.validate_config(config)
    return config


def _fail(error: CostDiffError) -> None:
    console.print(
        Text(format_error_message(error, include_suggestions=True), style="red"),
        soft_wrap=True,
    )
    sys.exit(1)


def run_report(ctx: click.Context, kind: str, options: Dict[str, Any]) -> None:
    """Build and render one report; any CostDiffError exits with status 1."""
    options = _merge_options(ctx, options)
    configure_logging(options.get("verbose", False), options.get("quiet", False))

    try:
        config = load_config(options.get("config_file"))

        context = ReportContext.from_config(
            config,
            from_period=options.get("from_period"),
            to_period=options.get("to_period"),
            group=options.get("group"),
            tag_key=options.get("tag_key"),
            metric=options.get("metric"),
            top_n=options.get("top_n"),
            output_format=options.get("output_format"),
            sort_by=options.get("sort_by"),
            threshold=options.get("threshold"),
            min_cost=options.get("min_cost"),
            service_filter=options.get("service_filter"),
            profile=options.get("profile"),
            region=options.get("region"),
            days=options.get("days"),
        )

        output_options = OutputOptions(
            quiet=options.get("quiet", False),
            verbose=options.get("verbose", False),
            color=not options.get("no_color", False),
        )

        pipeline = ctx.obj.get("pipeline") or ReportPipeline()
        builders = {
            "diff": pipeline.build_comparison,
            "top": pipeline.build_top,
            "watch": pipeline.build_trend,
        }

        show_spinner = not output_options.quiet and context.output_format == OutputFormat.TABLE.value
        if show_spinner:
            message = "Fetching daily cost data..." if kind == "watch" else "Fetching cost data..."
            with console.status(message):
                result = builders[kind](context)
        else:
            result = builders[kind](context)

        name_header = "Service"
        if kind != "watch":
            name_header = group_header(parse_group_by(context.group, context.tag_key))

        ExportManager(output_options).render(
            result, OutputFormat(context.output_format), sys.stdout, name_header
        )

    except CostDiffError as e:
        _fail(e)
    except KeyboardInterrupt:
        console.print("\nCancelled by user")
        sys.exit(130)


@click.group(invoke_without_command=True)
@click.version_option(version=__version__, prog_name="costdiff")
@common_options
@click.pass_context
def cli(ctx, **options):
    """Compare AWS costs between time periods.

    Identifies cost changes, top cost drivers and daily trends in your
    AWS spending using the Cost Explorer API.

    Examples:
        costdiff                              # Compare last month vs current month
        costdiff --from 2024-10 --to 2024-12  # Compare specific months
        costdiff -g tag --tag team            # Group by tag
        costdiff top                          # Show top cost drivers
        costdiff watch                        # Show daily cost trend
    """
    ctx.ensure_object(dict)
    ctx.obj["options"] = options

    if ctx.invoked_subcommand is None:
        run_report(ctx, "diff", {})


@cli.command()
@common_options
@click.pass_context
def diff(ctx, **options):
    """Compare costs between two periods (the default command)."""
    run_report(ctx, "diff", options)


@cli.command()
@common_options
@click.pass_context
def top(ctx, **options):
    """Show top cost drivers for the current month (or the --from period).

    Examples:
        costdiff top                # Top 10 services this month
        costdiff top -n 20          # Top 20 services
        costdiff top -g region      # Top costs by region
        costdiff top --from 2024-10 # Top costs for October 2024
    """
    run_report(ctx, "top", options)


@cli.command()
@click.option("--days", type=int, help="Number of days to show (default: 7)")
@common_options
@click.pass_context
def watch(ctx, days: Optional[int], **options):
    """Show the daily cost trend.

    Examples:
        costdiff watch              # Last 7 days
        costdiff watch --days 30    # Last 30 days
    """
    options["days"] = days
    run_report(ctx, "watch", options)


@cli.command()
def version():
    """Print the costdiff version."""
    click.echo(f"costdiff {__version__}")


@cli.command("show-config")
@click.option(
    "--config-file",
    "-c",
    type=click.Path(exists=True),
    help="Path to configuration file",
)
def show_config(config_file: Optional[str]):
    """Show the effective configuration."""
    config_manager = ConfigManager()
    try:
        config = config_manager.load_config(config_file)
    except (ValueError, FileNotFoundError) as e:
        _fail(ConfigurationError(str(e), config_file))
        return

    out = Console()
    out.print(Panel(Text("Current Configuration", style="bold blue"), border_style="blue"))

    source = config_manager.config_path or "defaults and environment"
    out.print(f"Config file: {source}")
    out.print(f"Metric: {config.metric}")
    out.print(f"Group by: {config.group_by}")
    out.print(f"Output format: {config.output_format}")
    out.print(f"Sort by: {config.sort_by}")
    out.print(f"Top: {config.top_n}")
    out.print(f"Watch days: {config.watch_days}")
    if config.default_profile:
        out.print(f"Default profile: {config.default_profile}")
    if config.region:
        out.print(f"Region: {config.region}")


def main():
    """Entry point for the CLI application."""
    cli()


if __name__ == "__main__":
    main()
