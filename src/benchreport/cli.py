"""Command-line interface for benchreport.

Subcommands:
    benchreport report   Compute statistics for a sample file and print them
    benchreport system   Print the system banner
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

import click

from benchreport import __version__
from benchreport.config import ReportConfig, config_from_profile, load_profile, validate_config
from benchreport.logging import setup_logging
from benchreport.units import STRATEGIES

log = logging.getLogger("benchreport")


@click.group()
@click.version_option(version=__version__)
def main() -> None:
    """benchreport: compare benchmark scenarios from raw samples."""


def _check_config(config: ReportConfig) -> None:
    """Log warnings and fail on configuration errors."""
    errors = validate_config(config)
    for w in errors:
        if w.severity == "warning":
            log.warning("Config warning: %s: %s", w.field, w.message)
    fatal = [e for e in errors if e.severity == "error"]
    if fatal:
        messages = [f"  {e.field}: {e.message}" for e in fatal]
        raise click.ClickException("Invalid report configuration:\n" + "\n".join(messages))


# ---------------------------------------------------------------------------
# report
# ---------------------------------------------------------------------------


@main.command()
@click.argument("samples_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--profile",
    "profile_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="YAML profile with report settings.",
)
@click.option(
    "--unit-scaling",
    type=click.Choice(STRATEGIES),
    default=None,
    help="Unit selection strategy (default: best).",
)
@click.option(
    "--comparison/--no-comparison",
    default=None,
    help="Show the comparison against the reference job (default: on).",
)
@click.option(
    "--extended-statistics/--no-extended-statistics",
    default=None,
    help="Show minimum, maximum, sample size, and mode.",
)
@click.option(
    "--reference-job",
    type=str,
    default=None,
    help="Scenario to compare against (default: first scenario shown).",
)
@click.option(
    "--percentile",
    "percentiles",
    type=float,
    multiple=True,
    help="Percentile rank to report (repeatable, default: 50 and 99).",
)
@click.option(
    "--sort/--no-sort",
    default=None,
    help="Order scenarios fastest first (default: on).",
)
@click.option("--workers", type=int, default=None, help="Parallel statistics workers.")
@click.option(
    "--system/--no-system",
    "show_system",
    default=None,
    help="Print system information above the report.",
)
@click.option("--json", "as_json", is_flag=True, help="Print statistics as JSON.")
@click.option("-v", "--verbose", is_flag=True, help="Show detailed output.")
@click.option("-q", "--quiet", is_flag=True, help="Only show errors.")
@click.option("--log-file", type=click.Path(path_type=Path), default=None)
def report(
    samples_file: Path,
    profile_path: Path | None,
    unit_scaling: str | None,
    comparison: bool | None,
    extended_statistics: bool | None,
    reference_job: str | None,
    percentiles: tuple[float, ...],
    sort: bool | None,
    workers: int | None,
    show_system: bool | None,
    as_json: bool,
    verbose: bool,
    quiet: bool,
    log_file: Path | None,
) -> None:
    """Compute statistics for SAMPLES_FILE and print a comparison report.

    SAMPLES_FILE is a JSON or JSONL file of scenarios with raw run time
    samples in nanoseconds (and optional memory samples in bytes).
    """
    from benchreport.display import format_report
    from benchreport.parallel import compute_all
    from benchreport.scenario import load_scenarios
    from benchreport.stats import EmptySampleSetError
    from benchreport.system import capture_system_profile

    setup_logging(verbose=verbose, quiet=quiet, log_file=log_file)

    try:
        profile_data = load_profile(profile_path) if profile_path else {}
        config = config_from_profile(
            profile_data,
            cli_overrides={
                "unit_scaling": unit_scaling,
                "comparison": comparison,
                "extended_statistics": extended_statistics,
                "reference_job": reference_job,
                "percentiles": percentiles or None,
                "sort": sort,
                "workers": workers,
                "show_system": show_system,
            },
        )
    except ValueError as exc:
        raise click.ClickException(str(exc)) from exc
    _check_config(config)

    try:
        scenarios = load_scenarios(samples_file)
    except ValueError as exc:
        raise click.ClickException(str(exc)) from exc

    if not scenarios:
        click.echo("No scenarios to report.")
        return

    try:
        compute_all(scenarios, workers=config.workers, percentiles=config.percentiles)
    except EmptySampleSetError as exc:
        raise click.ClickException(f"{exc} (check the samples in {samples_file})") from exc
    except ValueError as exc:
        # Typically a --json report fed back in: its statistics are already computed.
        raise click.ClickException(
            f"{exc}. {samples_file} must hold raw samples without precomputed statistics."
        ) from exc

    if as_json:
        click.echo(json.dumps({"scenarios": [s.to_dict() for s in scenarios]}, indent=2))
        return

    system = capture_system_profile() if config.show_system else None
    click.echo(format_report(scenarios, config, system=system))


# ---------------------------------------------------------------------------
# system
# ---------------------------------------------------------------------------


@main.command("system")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON.")
def system_cmd(as_json: bool) -> None:
    """Print the system information shown above reports."""
    from benchreport.system import capture_system_profile, format_system_banner

    profile = capture_system_profile()
    if as_json:
        click.echo(profile.to_json())
    else:
        click.echo(format_system_banner(profile))
