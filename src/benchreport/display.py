"""Terminal display formatting for scenario statistics.

Produces column-aligned text for one set of scenarios:

- the run time table (ips, average, deviation, median, percentiles),
- a comparison block ranking every scenario against a reference,
- an optional extended statistics table (minimum, maximum, sample size,
  mode),
- the same tables for memory usage when memory was measured.

Every renderer returns a list of lines without trailing newlines; blank
separator lines are empty strings.  Column widths are fixed per column
kind, except the name column, which fits the longest scenario name.
"""

from __future__ import annotations

import logging
from typing import Callable, Sequence

from benchreport.config import ReportConfig
from benchreport.scenario import NO_INPUT, Scenario, group_by_input
from benchreport.stats import SingleMode, Statistics, TiedMode, sort_scenarios
from benchreport.system import SystemProfile, format_system_banner
from benchreport.units import (
    COUNT,
    ReportUnits,
    Unit,
    format_value,
    natural_unit,
    select_units,
)

log = logging.getLogger("benchreport")

_IPS_WIDTH = 13
_AVERAGE_WIDTH = 15
_DEVIATION_WIDTH = 11
_MEDIAN_WIDTH = 15
_PERCENTILE_WIDTH = 15
_MINIMUM_WIDTH = 15
_MAXIMUM_WIDTH = 15
_SAMPLE_SIZE_WIDTH = 15
_MODE_WIDTH = 25
_NAME_HEADER = "Name"

_StatsGetter = Callable[[Scenario], "Statistics | None"]


def _run_time(scenario: Scenario) -> Statistics | None:
    return scenario.statistics


def _memory(scenario: Scenario) -> Statistics | None:
    return scenario.memory_statistics


# ---------------------------------------------------------------------------
# Cell formatting
# ---------------------------------------------------------------------------


def label_width(scenarios: Sequence[Scenario]) -> int:
    """Width of the name column: the longest name plus one space."""
    longest = max((len(s.name) for s in scenarios), default=0)
    return max(longest, len(_NAME_HEADER)) + 1


def format_deviation(stats: Statistics) -> str:
    """Deviation as a percentage of the average, e.g. ``'±10.00%'``."""
    if stats.degenerate:
        return "N/A"
    return f"±{stats.std_dev_ratio * 100:.2f}%"


def format_ips(stats: Statistics, unit: Unit) -> str:
    """Iterations per second in the shared count unit."""
    if stats.degenerate:
        return "N/A"
    return format_value(stats.ips, unit)


def format_mode(stats: Statistics, unit: Unit) -> str:
    """Render the mode: one value, tied values, or ``'none'``."""
    mode = stats.mode
    if isinstance(mode, SingleMode):
        return format_value(mode.value, unit)
    if isinstance(mode, TiedMode):
        return ", ".join(format_value(v, unit) for v in mode.values)
    return "none"


def percentile_label(rank: float) -> str:
    """Column header for a percentile rank: ``99 -> '99th %'``."""
    if float(rank).is_integer():
        number = int(rank)
        if number % 100 in (11, 12, 13):
            suffix = "th"
        else:
            suffix = {1: "st", 2: "nd", 3: "rd"}.get(number % 10, "th")
        return f"{number}{suffix} %"
    return f"{rank}th %"


def _descriptor(title: str) -> list[str]:
    return ["", f"{title}:"]


def _require(stats: Statistics | None, scenario: Scenario) -> Statistics:
    if stats is None:
        raise ValueError(f"Scenario '{scenario.name}' has no statistics to render")
    return stats


def _measured(scenarios: Sequence[Scenario], getter: _StatsGetter) -> bool:
    """True if any scenario has at least one sample for this quantity."""
    for scenario in scenarios:
        stats = getter(scenario)
        if stats is not None and stats.sample_size > 0:
            return True
    return False


# ---------------------------------------------------------------------------
# Run time report
# ---------------------------------------------------------------------------


def render(
    scenarios: Sequence[Scenario],
    units: ReportUnits,
    config: ReportConfig,
) -> list[str]:
    """Render the run time report for *scenarios*.

    Scenarios are rendered in the given order.  Returns an empty list
    when no scenario has run time statistics.

    Args:
        scenarios: Scenarios with statistics attached, in presentation order.
        units: Shared display units (see :func:`select_units`).
        config: Which optional tables to emit.

    Returns:
        The report lines.
    """
    if not _measured(scenarios, _run_time):
        return []

    width = label_width(scenarios)
    lines = [""]
    lines.append(_run_time_header(width, config))
    for scenario in scenarios:
        lines.append(_run_time_row(scenario, units, width, config))

    lines.extend(_run_time_comparison(scenarios, units, width, config))

    if config.extended_statistics:
        lines.extend(_extended_report(scenarios, _run_time, units.run_time, width))

    return lines


def _run_time_header(width: int, config: ReportConfig) -> str:
    header = (
        f"{_NAME_HEADER:<{width}}{'ips':>{_IPS_WIDTH}}{'average':>{_AVERAGE_WIDTH}}"
        f"{'deviation':>{_DEVIATION_WIDTH}}{'median':>{_MEDIAN_WIDTH}}"
    )
    for rank in config.display_percentiles:
        header += f"{percentile_label(rank):>{_PERCENTILE_WIDTH}}"
    return header


def _run_time_row(
    scenario: Scenario,
    units: ReportUnits,
    width: int,
    config: ReportConfig,
) -> str:
    stats = _require(scenario.statistics, scenario)
    row = (
        f"{scenario.name:<{width}}"
        f"{format_ips(stats, units.ips):>{_IPS_WIDTH}}"
        f"{format_value(stats.average, units.run_time):>{_AVERAGE_WIDTH}}"
        f"{format_deviation(stats):>{_DEVIATION_WIDTH}}"
        f"{format_value(stats.median, units.run_time):>{_MEDIAN_WIDTH}}"
    )
    for rank in config.display_percentiles:
        value = stats.percentiles.get(rank)
        cell = "N/A" if value is None else format_value(value, units.run_time)
        row += f"{cell:>{_PERCENTILE_WIDTH}}"
    return row


def find_reference(
    scenarios: Sequence[Scenario],
    reference_job: str | None,
) -> tuple[Scenario, list[Scenario]]:
    """Split *scenarios* into the reference and everything else.

    The reference is the scenario named *reference_job*, or the first
    scenario when no name is given or no scenario has that name.
    """
    reference = scenarios[0]
    if reference_job is not None:
        for scenario in scenarios:
            if scenario.name == reference_job:
                reference = scenario
                break
        else:
            log.debug(
                "Reference job '%s' not found; comparing against '%s'",
                reference_job,
                reference.name,
            )
    others = [s for s in scenarios if s is not reference]
    return reference, others


def slowdown(reference: Statistics, other: Statistics) -> float | None:
    """How many times slower *other* is than *reference*.

    Returns None when either record is degenerate.
    """
    if reference.degenerate or other.degenerate:
        return None
    return reference.ips / other.ips


def _run_time_comparison(
    scenarios: Sequence[Scenario],
    units: ReportUnits,
    width: int,
    config: ReportConfig,
) -> list[str]:
    if len(scenarios) < 2 or not config.comparison:
        return []

    reference, others = find_reference(scenarios, config.reference_job)
    ref_stats = _require(reference.statistics, reference)

    lines = _descriptor("Comparison")
    lines.append(f"{reference.name:<{width}}{format_ips(ref_stats, units.ips):>{_IPS_WIDTH}}")
    for scenario in others:
        stats = _require(scenario.statistics, scenario)
        ratio = slowdown(ref_stats, stats)
        ratio_text = "N/A" if ratio is None else f"{ratio:.2f}x slower"
        ips = format_ips(stats, units.ips)
        lines.append(f"{scenario.name:<{width}}{ips:>{_IPS_WIDTH}} - {ratio_text}")
    return lines


# ---------------------------------------------------------------------------
# Extended statistics
# ---------------------------------------------------------------------------


def _extended_report(
    scenarios: Sequence[Scenario],
    getter: _StatsGetter,
    value_unit: Unit,
    width: int,
) -> list[str]:
    measured: list[tuple[Scenario, Statistics]] = []
    for scenario in scenarios:
        stats = getter(scenario)
        if stats is not None:
            measured.append((scenario, stats))

    lines = _descriptor("Extended statistics")
    lines.append("")
    lines.append(
        f"{_NAME_HEADER:<{width}}{'minimum':>{_MINIMUM_WIDTH}}{'maximum':>{_MAXIMUM_WIDTH}}"
        f"{'sample size':>{_SAMPLE_SIZE_WIDTH}}{'mode':>{_MODE_WIDTH}}"
    )
    for scenario, stats in measured:
        # Each count gets its own natural unit, independent of unit_scaling.
        size_unit = natural_unit(stats.sample_size, COUNT)
        lines.append(
            f"{scenario.name:<{width}}"
            f"{format_value(stats.minimum, value_unit):>{_MINIMUM_WIDTH}}"
            f"{format_value(stats.maximum, value_unit):>{_MAXIMUM_WIDTH}}"
            f"{format_value(stats.sample_size, size_unit):>{_SAMPLE_SIZE_WIDTH}}"
            f"{format_mode(stats, value_unit):>{_MODE_WIDTH}}"
        )
    return lines


# ---------------------------------------------------------------------------
# Memory report
# ---------------------------------------------------------------------------


def render_memory(
    scenarios: Sequence[Scenario],
    units: ReportUnits,
    config: ReportConfig,
) -> list[str]:
    """Render the memory usage report.

    Returns an empty list when no scenario measured memory.
    """
    if not _measured(scenarios, _memory):
        return []

    width = label_width(scenarios)
    measured = [s for s in scenarios if s.memory_statistics is not None]

    lines = _descriptor("Memory usage statistics")
    lines.append("")
    header = (
        f"{_NAME_HEADER:<{width}}{'average':>{_AVERAGE_WIDTH}}"
        f"{'deviation':>{_DEVIATION_WIDTH}}{'median':>{_MEDIAN_WIDTH}}"
    )
    for rank in config.display_percentiles:
        header += f"{percentile_label(rank):>{_PERCENTILE_WIDTH}}"
    lines.append(header)

    for scenario in measured:
        stats = _require(scenario.memory_statistics, scenario)
        row = (
            f"{scenario.name:<{width}}"
            f"{format_value(stats.average, units.memory):>{_AVERAGE_WIDTH}}"
            f"{format_deviation(stats):>{_DEVIATION_WIDTH}}"
            f"{format_value(stats.median, units.memory):>{_MEDIAN_WIDTH}}"
        )
        for rank in config.display_percentiles:
            value = stats.percentiles.get(rank)
            cell = "N/A" if value is None else format_value(value, units.memory)
            row += f"{cell:>{_PERCENTILE_WIDTH}}"
        lines.append(row)

    lines.extend(_memory_comparison(measured, units, width, config))

    if config.extended_statistics:
        lines.extend(_extended_report(measured, _memory, units.memory, width))

    return lines


def _memory_comparison(
    scenarios: Sequence[Scenario],
    units: ReportUnits,
    width: int,
    config: ReportConfig,
) -> list[str]:
    if len(scenarios) < 2 or not config.comparison:
        return []

    reference, others = find_reference(scenarios, config.reference_job)
    ref_stats = _require(reference.memory_statistics, reference)

    lines = _descriptor("Comparison")
    ref_average = format_value(ref_stats.average, units.memory)
    lines.append(f"{reference.name:<{width}}{ref_average:>{_AVERAGE_WIDTH}}")
    for scenario in others:
        stats = _require(scenario.memory_statistics, scenario)
        average = format_value(stats.average, units.memory)
        if ref_stats.average == 0:
            ratio_text = "N/A"
        else:
            diff = stats.average - ref_stats.average
            sign = "+" if diff >= 0 else "-"
            ratio_text = (
                f"{stats.average / ref_stats.average:.2f}x memory usage "
                f"{sign}{format_value(abs(diff), units.memory)}"
            )
        lines.append(f"{scenario.name:<{width}}{average:>{_AVERAGE_WIDTH}} - {ratio_text}")
    return lines


# ---------------------------------------------------------------------------
# Full console report
# ---------------------------------------------------------------------------


def format_report(
    scenarios: Sequence[Scenario],
    config: ReportConfig,
    *,
    system: SystemProfile | None = None,
) -> str:
    """Format the complete console report.

    Scenarios are grouped by input.  Each group is sorted fastest first
    (unless ``config.sort`` is off), gets its own units, and renders its
    run time and memory reports.

    Args:
        scenarios: Scenarios with statistics attached.
        config: Report configuration.
        system: If given, a system banner is printed first.

    Returns:
        The report text.
    """
    lines: list[str] = []
    if system is not None:
        lines.extend(format_system_banner(system, config).splitlines())

    for input_label, group in group_by_input(scenarios).items():
        if config.sort:
            group = sort_scenarios(group)
        units = select_units(group, config.unit_scaling)

        if input_label != NO_INPUT:
            lines.append("")
            lines.append(f"##### With input {input_label} #####")
        lines.extend(render(group, units, config))
        lines.extend(render_memory(group, units, config))

    return "\n".join(lines)
