"""Descriptive statistics for benchmark samples.

Reduces one scenario's raw samples (run times in nanoseconds, or memory
in bytes) to a :class:`Statistics` record: mean, population standard
deviation, iterations per second, median, mode, extremes, and
percentiles.

Percentiles use linear interpolation between the closest ranks of the
sorted samples (position ``(n - 1) * p / 100``), the same method as
``numpy.percentile`` with ``method="linear"``.  Rank 50 always equals the
median.

A record whose average is zero is *degenerate*: the deviation ratio and
every ips-derived value are undefined.  Those fields are stored as
``0.0`` and the record is flagged with ``degenerate=True`` so that
renderers can print ``N/A`` instead of a misleading number.
"""

from __future__ import annotations

import logging
import math
from collections import Counter
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Sequence, Union

if TYPE_CHECKING:
    from benchreport.scenario import Scenario

log = logging.getLogger("benchreport")

NANOSECONDS_PER_SECOND = 1_000_000_000
DEFAULT_PERCENTILES: tuple[float, ...] = (50, 99)


class EmptySampleSetError(ValueError):
    """Raised when statistics are requested for an empty sample set."""


# ---------------------------------------------------------------------------
# Mode
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SingleMode:
    """Exactly one value occurs most often."""

    value: float


@dataclass(frozen=True)
class TiedMode:
    """Several values share the highest occurrence count.

    Values are kept in the order they first appear in the raw samples.
    """

    values: tuple[float, ...]


# None when no value occurs more than once.
Mode = Union[SingleMode, TiedMode, None]


def compute_mode(samples: Sequence[float]) -> Mode:
    """Return the most frequent sample value(s).

    Returns None if no value repeats, a SingleMode for one winner, and a
    TiedMode (first-encounter order) when several values tie.
    """
    if not samples:
        return None

    # Counter keeps insertion order, so ties come out in encounter order.
    counts = Counter(samples)
    top = max(counts.values())
    if top < 2:
        return None

    winners = tuple(value for value, count in counts.items() if count == top)
    if len(winners) == 1:
        return SingleMode(winners[0])
    return TiedMode(winners)


def _mode_to_json(mode: Mode) -> Any:
    if isinstance(mode, SingleMode):
        return mode.value
    if isinstance(mode, TiedMode):
        return list(mode.values)
    return None


def _mode_from_json(data: Any) -> Mode:
    if data is None:
        return None
    if isinstance(data, list):
        if len(data) == 1:
            return SingleMode(data[0])
        return TiedMode(tuple(data))
    return SingleMode(data)


# ---------------------------------------------------------------------------
# Statistics record
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Statistics:
    """Summary statistics for one scenario's samples."""

    average: float
    ips: float  # iterations per second
    std_dev: float  # population standard deviation
    std_dev_ratio: float  # std_dev / average
    std_dev_ips: float  # ips * std_dev_ratio
    median: float
    mode: Mode
    minimum: float
    maximum: float
    sample_size: int
    percentiles: dict[float, float] = field(default_factory=dict)
    degenerate: bool = False  # average == 0; ratio and ips are undefined

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a JSON-compatible dict with rounded values."""
        return {
            "average": round(self.average, 6),
            "ips": round(self.ips, 6),
            "std_dev": round(self.std_dev, 6),
            "std_dev_ratio": round(self.std_dev_ratio, 6),
            "std_dev_ips": round(self.std_dev_ips, 6),
            "median": round(self.median, 6),
            "mode": _mode_to_json(self.mode),
            "minimum": self.minimum,
            "maximum": self.maximum,
            "sample_size": self.sample_size,
            "percentiles": {_rank_key(p): round(v, 6) for p, v in self.percentiles.items()},
            "degenerate": self.degenerate,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Statistics:
        """Deserialize from a dict produced by :meth:`to_dict`."""
        return cls(
            average=data["average"],
            ips=data["ips"],
            std_dev=data["std_dev"],
            std_dev_ratio=data["std_dev_ratio"],
            std_dev_ips=data["std_dev_ips"],
            median=data["median"],
            mode=_mode_from_json(data.get("mode")),
            minimum=data["minimum"],
            maximum=data["maximum"],
            sample_size=data["sample_size"],
            percentiles={float(p): v for p, v in data.get("percentiles", {}).items()},
            degenerate=data.get("degenerate", False),
        )


def _rank_key(rank: float) -> str:
    """JSON object keys are strings; keep ``99`` rather than ``99.0``."""
    if float(rank).is_integer():
        return str(int(rank))
    return str(rank)


# ---------------------------------------------------------------------------
# Reduction
# ---------------------------------------------------------------------------


def reduce(
    samples: Sequence[float],
    *,
    percentiles: Sequence[float] = DEFAULT_PERCENTILES,
    units_per_second: float = NANOSECONDS_PER_SECOND,
) -> Statistics:
    """Compute statistics for one scenario's samples.

    Args:
        samples: Raw measurements, in any order.  Must not be empty.
        percentiles: Percentile ranks to compute, each in ``[0, 100]``.
        units_per_second: How many sample units make one second; used to
            derive iterations per second from the average.

    Returns:
        A Statistics record.

    Raises:
        EmptySampleSetError: If *samples* is empty.
        ValueError: If a percentile rank is outside ``[0, 100]``.
    """
    n = len(samples)
    if n == 0:
        raise EmptySampleSetError("Cannot compute statistics for an empty sample set")

    sorted_v = sorted(samples)
    average = sum(sorted_v) / n
    variance = sum((x - average) ** 2 for x in sorted_v) / n
    std_dev = math.sqrt(variance)

    degenerate = average == 0
    if degenerate:
        log.warning(
            "All %d samples are zero; deviation ratio and ips are undefined",
            n,
        )
        ips = 0.0
        std_dev_ratio = 0.0
    else:
        ips = units_per_second / average
        std_dev_ratio = std_dev / average

    return Statistics(
        average=average,
        ips=ips,
        std_dev=std_dev,
        std_dev_ratio=std_dev_ratio,
        std_dev_ips=ips * std_dev_ratio,
        median=_median(sorted_v),
        mode=compute_mode(samples),
        minimum=sorted_v[0],
        maximum=sorted_v[-1],
        sample_size=n,
        percentiles={p: _percentile(sorted_v, p) for p in percentiles},
        degenerate=degenerate,
    )


def _median(sorted_values: list[float]) -> float:
    """Middle value, or mean of the two middle values for even counts."""
    n = len(sorted_values)
    middle = n // 2
    if n % 2:
        return float(sorted_values[middle])
    return (sorted_values[middle - 1] + sorted_values[middle]) / 2


def _percentile(sorted_values: list[float], rank: float) -> float:
    """Compute the *rank*-th percentile using linear interpolation.

    Equivalent to numpy.percentile with method='linear'.
    Assumes sorted_values is already sorted in ascending order.
    """
    if not 0 <= rank <= 100:
        raise ValueError(f"Percentile rank must be between 0 and 100 (got {rank})")

    n = len(sorted_values)
    if n == 1:
        return float(sorted_values[0])

    k = (n - 1) * rank / 100
    f = math.floor(k)
    c = math.ceil(k)
    if f == c:
        return float(sorted_values[int(k)])
    d = k - f
    return sorted_values[f] * (1 - d) + sorted_values[c] * d


# ---------------------------------------------------------------------------
# Ordering
# ---------------------------------------------------------------------------


def sort_scenarios(scenarios: Sequence[Scenario]) -> list[Scenario]:
    """Sort scenarios fastest first by average run time.

    The sort is stable: scenarios with equal averages keep their order.

    Raises:
        ValueError: If a scenario has no statistics yet.
    """
    for scenario in scenarios:
        if scenario.statistics is None:
            raise ValueError(f"Scenario '{scenario.name}' has no statistics to sort by")
    return sorted(scenarios, key=lambda s: s.statistics.average)  # type: ignore[union-attr]
