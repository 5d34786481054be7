"""Scenario data structures and sample file loading.

A scenario is one benchmarked implementation under one input.  The
measurement harness produces its raw samples; this package attaches the
statistics and renders them.

Sample files are JSON or JSONL::

    {"scenarios": [
        {"name": "flat_map", "input": "small", "samples": [812, 790, 805],
         "memory_samples": [625, 625, 625]},
        ...
    ]}

A bare JSON list of scenario objects is accepted too, as is a ``.jsonl``
file with one scenario object per line.  Run times are in nanoseconds,
memory in bytes.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Sequence

from benchreport.stats import Statistics

log = logging.getLogger("benchreport")

NO_INPUT = "__no_input"


@dataclass
class Scenario:
    """One benchmarked implementation under one input."""

    name: str
    samples: tuple[float, ...] = ()
    input_label: str = NO_INPUT
    memory_samples: tuple[float, ...] = ()
    statistics: Statistics | None = None
    memory_statistics: Statistics | None = None

    def __post_init__(self) -> None:
        self.samples = tuple(self.samples)
        self.memory_samples = tuple(self.memory_samples)

    @property
    def has_input(self) -> bool:
        """True if the scenario ran with an explicit input."""
        return self.input_label != NO_INPUT

    def attach_statistics(
        self,
        statistics: Statistics,
        memory_statistics: Statistics | None = None,
    ) -> None:
        """Attach computed statistics.  Allowed exactly once.

        Raises:
            ValueError: If statistics were already attached.
        """
        if self.statistics is not None:
            raise ValueError(f"Scenario '{self.name}' already has statistics attached")
        self.statistics = statistics
        self.memory_statistics = memory_statistics

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a JSON-compatible dict."""
        d: dict[str, Any] = {
            "name": self.name,
            "input": None if self.input_label == NO_INPUT else self.input_label,
            "samples": list(self.samples),
        }
        if self.memory_samples:
            d["memory_samples"] = list(self.memory_samples)
        if self.statistics:
            d["statistics"] = self.statistics.to_dict()
        if self.memory_statistics:
            d["memory_statistics"] = self.memory_statistics.to_dict()
        return d

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Scenario:
        """Deserialize from a dict, ignoring unknown fields.

        Raises:
            ValueError: If the name or samples are missing or invalid.
        """
        name = data.get("name")
        if not isinstance(name, str) or not name.strip():
            raise ValueError(f"Scenario needs a non-empty 'name' (got {name!r})")

        samples = _validate_samples(name, "samples", data.get("samples"))
        memory_samples = _validate_samples(name, "memory_samples", data.get("memory_samples", []))

        input_label = data.get("input")
        scenario = cls(
            name=name,
            samples=tuple(samples),
            input_label=NO_INPUT if input_label is None else str(input_label),
            memory_samples=tuple(memory_samples),
        )
        if data.get("statistics"):
            memory = data.get("memory_statistics")
            scenario.attach_statistics(
                Statistics.from_dict(data["statistics"]),
                Statistics.from_dict(memory) if memory else None,
            )
        return scenario


def _validate_samples(name: str, key: str, values: Any) -> list[float]:
    """Check that *values* is a list of non-negative numbers."""
    if not isinstance(values, list):
        raise ValueError(f"Scenario '{name}': '{key}' must be a list of numbers")
    for v in values:
        if isinstance(v, bool) or not isinstance(v, (int, float)):
            raise ValueError(f"Scenario '{name}': '{key}' contains a non-number: {v!r}")
        if v < 0:
            raise ValueError(f"Scenario '{name}': '{key}' contains a negative value: {v}")
    return values


# ---------------------------------------------------------------------------
# Loading
# ---------------------------------------------------------------------------


def load_scenarios(path: Path) -> list[Scenario]:
    """Load scenarios from a JSON or JSONL sample file.

    Raises:
        FileNotFoundError: If *path* does not exist.
        ValueError: If the file content is malformed.
    """
    if not path.exists():
        raise FileNotFoundError(f"Sample file not found: {path}")

    text = path.read_text(encoding="utf-8")
    if path.suffix == ".jsonl":
        entries = _parse_jsonl(text, path)
    else:
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            raise ValueError(f"Invalid JSON in {path}: {exc}") from exc
        if isinstance(data, dict):
            data = data.get("scenarios")
        if not isinstance(data, list):
            raise ValueError(f"{path} must hold a list of scenarios or a 'scenarios' list")
        entries = data

    scenarios: list[Scenario] = []
    for entry in entries:
        if not isinstance(entry, dict):
            raise ValueError(f"Scenario entries must be objects, got {type(entry).__name__}")
        scenarios.append(Scenario.from_dict(entry))

    log.debug("Loaded %d scenarios from %s", len(scenarios), path)
    return scenarios


def _parse_jsonl(text: str, path: Path) -> list[Any]:
    entries: list[Any] = []
    for lineno, line in enumerate(text.splitlines(), start=1):
        line = line.strip()
        if not line:
            continue
        try:
            entries.append(json.loads(line))
        except json.JSONDecodeError as exc:
            raise ValueError(f"Invalid JSON on line {lineno} of {path}: {exc}") from exc
    return entries


def group_by_input(scenarios: Sequence[Scenario]) -> dict[str, list[Scenario]]:
    """Group scenarios by input label.

    Labels keep the order in which they first appear, and scenarios keep
    their order within each group.
    """
    groups: dict[str, list[Scenario]] = {}
    for scenario in scenarios:
        groups.setdefault(scenario.input_label, []).append(scenario)
    return groups
