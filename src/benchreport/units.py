"""Display units for durations, counts, and memory sizes.

One unit is chosen per quantity kind for a whole report, so every value
in a column is printed in the same unit.  Selection strategies:

- ``best``: the most common natural unit (ties go to the larger unit).
- ``largest``: the largest natural unit among the values.
- ``smallest``: the smallest natural unit among the values.
- ``none``: always the base unit.

The natural unit of a single value is the largest unit in which the value
is at least 1.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from typing import TYPE_CHECKING, Iterable, Sequence

if TYPE_CHECKING:
    from benchreport.scenario import Scenario

STRATEGIES = ("best", "largest", "smallest", "none")


@dataclass(frozen=True)
class Unit:
    """A display unit relative to its family's base unit."""

    name: str
    magnitude: float
    label: str


# Families are ordered from the base unit upwards.
DURATION: tuple[Unit, ...] = (
    Unit("nanosecond", 1, "ns"),
    Unit("microsecond", 1_000, "μs"),
    Unit("millisecond", 1_000_000, "ms"),
    Unit("second", 1_000_000_000, "s"),
    Unit("minute", 60_000_000_000, "min"),
    Unit("hour", 3_600_000_000_000, "h"),
)

COUNT: tuple[Unit, ...] = (
    Unit("one", 1, ""),
    Unit("thousand", 1_000, "K"),
    Unit("million", 1_000_000, "M"),
    Unit("billion", 1_000_000_000, "B"),
)

MEMORY: tuple[Unit, ...] = (
    Unit("byte", 1, "B"),
    Unit("kilobyte", 1024, "KB"),
    Unit("megabyte", 1024**2, "MB"),
    Unit("gigabyte", 1024**3, "GB"),
    Unit("terabyte", 1024**4, "TB"),
)


def natural_unit(value: float, family: Sequence[Unit]) -> Unit:
    """Return the largest unit of *family* in which *value* is >= 1."""
    chosen = family[0]
    for unit in family:
        if abs(value) >= unit.magnitude:
            chosen = unit
    return chosen


def best_unit(
    values: Iterable[float],
    family: Sequence[Unit],
    strategy: str = "best",
) -> Unit:
    """Pick one display unit for all *values*.

    Args:
        values: The values that will share the unit.
        family: Unit family, ordered from base unit upwards.
        strategy: One of ``best``, ``largest``, ``smallest``, ``none``.

    Returns:
        The chosen unit.  An empty *values* yields the base unit.

    Raises:
        ValueError: If *strategy* is unknown.
    """
    if strategy not in STRATEGIES:
        raise ValueError(
            f"Unknown unit scaling strategy '{strategy}'. Valid: {', '.join(STRATEGIES)}"
        )

    naturals = [natural_unit(v, family) for v in values]
    if strategy == "none" or not naturals:
        return family[0]
    if strategy == "largest":
        return max(naturals, key=lambda u: u.magnitude)
    if strategy == "smallest":
        return min(naturals, key=lambda u: u.magnitude)

    counts = Counter(naturals)
    return max(counts, key=lambda u: (counts[u], u.magnitude))


def scale(value: float, unit: Unit) -> float:
    """Express a base-unit *value* in *unit*."""
    return value / unit.magnitude


def unscale(value: float, unit: Unit) -> float:
    """Convert a value expressed in *unit* back to the base unit."""
    return value * unit.magnitude


def format_number(value: float) -> str:
    """Format a number with two decimals, dropping them when whole.

    Examples: ``5.0 -> '5'``, ``2.5 -> '2.50'``, ``10.101 -> '10.10'``.
    """
    rounded = round(value, 2)
    if rounded == int(rounded):
        return f"{int(rounded)}"
    return f"{rounded:.2f}"


def format_value(value: float, unit: Unit) -> str:
    """Scale a base-unit *value* to *unit* and format it with the label."""
    number = format_number(scale(value, unit))
    if not unit.label:
        return number
    return f"{number} {unit.label}"


# ---------------------------------------------------------------------------
# Per-report unit selection
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ReportUnits:
    """The units shared by every row of one report."""

    run_time: Unit
    ips: Unit
    memory: Unit


def select_units(scenarios: Sequence[Scenario], strategy: str = "best") -> ReportUnits:
    """Choose one unit per quantity kind across all *scenarios*.

    Run time units follow the averages, ips units the ips values, and
    memory units the memory averages.  Degenerate records are ignored.
    """
    run_stats = [s.statistics for s in scenarios if s.statistics and not s.statistics.degenerate]
    memory_stats = [s.memory_statistics for s in scenarios if s.memory_statistics]

    return ReportUnits(
        run_time=best_unit([st.average for st in run_stats], DURATION, strategy),
        ips=best_unit([st.ips for st in run_stats], COUNT, strategy),
        memory=best_unit([st.average for st in memory_stats], MEMORY, strategy),
    )
