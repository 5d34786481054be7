"""Parallel statistics computation across scenarios.

Each scenario is reduced in its own task.  Tasks share no mutable state:
each reads one scenario's samples and writes one indexed result slot.
Statistics are attached only after every task has finished, so the
returned order always matches the input order and a failed batch leaves
the scenarios untouched.
"""

from __future__ import annotations

import logging
import os
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from typing import Sequence

from benchreport.scenario import Scenario
from benchreport.stats import DEFAULT_PERCENTILES, EmptySampleSetError, Statistics, reduce

log = logging.getLogger("benchreport")


def _reduce_scenario(
    scenario: Scenario,
    percentiles: Sequence[float],
) -> tuple[Statistics, Statistics | None]:
    """Compute run time (and, if measured, memory) statistics."""
    if not scenario.samples:
        raise EmptySampleSetError(f"Scenario '{scenario.name}' has no run time samples")
    run_time = reduce(scenario.samples, percentiles=percentiles)
    memory = None
    if scenario.memory_samples:
        memory = reduce(scenario.memory_samples, percentiles=percentiles)
    return run_time, memory


def compute_all(
    scenarios: Sequence[Scenario],
    *,
    workers: int | None = None,
    percentiles: Sequence[float] = DEFAULT_PERCENTILES,
) -> list[Scenario]:
    """Attach statistics to every scenario, in parallel.

    Args:
        scenarios: Scenarios with raw samples and no statistics yet.
        workers: Maximum concurrent tasks.  Defaults to the CPU count;
            1 reduces sequentially in the calling thread.
        percentiles: Percentile ranks to compute for each scenario.

    Returns:
        The same scenario objects, in input order, with statistics set.

    Raises:
        EmptySampleSetError: If any scenario has no samples.
        ValueError: If any scenario already has statistics.

    No scenario is modified when an error is raised.
    """
    if not scenarios:
        return []

    for scenario in scenarios:
        if scenario.statistics is not None:
            raise ValueError(f"Scenario '{scenario.name}' already has statistics attached")

    workers = max(1, min(len(scenarios), workers or os.cpu_count() or 1))
    slots: list[tuple[Statistics, Statistics | None] | None] = [None] * len(scenarios)

    if workers == 1:
        for index, scenario in enumerate(scenarios):
            slots[index] = _reduce_scenario(scenario, percentiles)
    else:
        log.debug("Computing statistics for %d scenarios with %d workers", len(scenarios), workers)
        with ThreadPoolExecutor(max_workers=workers) as pool:
            futures: dict[Future[tuple[Statistics, Statistics | None]], int] = {
                pool.submit(_reduce_scenario, scenario, percentiles): index
                for index, scenario in enumerate(scenarios)
            }
            for future in as_completed(futures):
                index = futures[future]
                try:
                    slots[index] = future.result()
                except Exception as exc:
                    log.error(
                        "Statistics failed for scenario %s: %s", scenarios[index].name, exc
                    )
                    for pending in futures:
                        pending.cancel()
                    raise

    for scenario, slot in zip(scenarios, slots):
        scenario.attach_statistics(*slot)  # type: ignore[misc]

    return list(scenarios)
