"""Report configuration and YAML profile loading.

Handles:
- The immutable ReportConfig threaded into the renderer.
- Loading report profiles from YAML files.
- Merging CLI options with profile defaults.
- Validating the final configuration before rendering.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from benchreport.stats import DEFAULT_PERCENTILES
from benchreport.units import STRATEGIES

log = logging.getLogger("benchreport")


# ---------------------------------------------------------------------------
# ReportConfig
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ReportConfig:
    """Resolved, read-only configuration for one report."""

    unit_scaling: str = "best"  # best / largest / smallest / none
    comparison: bool = True
    extended_statistics: bool = False
    reference_job: str | None = None
    percentiles: tuple[float, ...] = DEFAULT_PERCENTILES
    sort: bool = True  # fastest scenario first
    workers: int | None = None  # None = one per CPU
    show_system: bool = False

    @property
    def display_percentiles(self) -> tuple[float, ...]:
        """Percentile columns of the run time table (the median has its own)."""
        return tuple(p for p in self.percentiles if p != 50)


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


@dataclass
class ValidationError:
    """A single configuration validation error."""

    field: str
    message: str
    severity: str = "error"  # "error" or "warning"


def validate_config(config: ReportConfig) -> list[ValidationError]:
    """Validate a report configuration.

    Returns a list of validation errors.  Empty list means valid.
    """
    errors: list[ValidationError] = []

    if config.unit_scaling not in STRATEGIES:
        errors.append(
            ValidationError(
                field="unit_scaling",
                message=(
                    f"Unknown unit scaling '{config.unit_scaling}'. "
                    f"Choose one of: {', '.join(STRATEGIES)}."
                ),
            )
        )

    if not config.percentiles:
        errors.append(
            ValidationError(
                field="percentiles",
                message="At least one percentile rank is required (e.g. 99).",
            )
        )
    for rank in config.percentiles:
        if not 0 <= rank <= 100:
            errors.append(
                ValidationError(
                    field="percentiles",
                    message=f"Percentile ranks must be between 0 and 100 (got {rank}).",
                )
            )

    if config.workers is not None and config.workers < 1:
        errors.append(
            ValidationError(
                field="workers",
                message=f"Workers must be at least 1 (got {config.workers}).",
            )
        )

    if config.reference_job is not None and not config.comparison:
        errors.append(
            ValidationError(
                field="reference_job",
                message="A reference job has no effect while comparison is disabled.",
                severity="warning",
            )
        )

    return errors


# ---------------------------------------------------------------------------
# YAML profile loading
# ---------------------------------------------------------------------------


def load_profile(profile_path: Path) -> dict[str, Any]:
    """Load a report profile from a YAML file.

    Profile format::

        unit_scaling: smallest
        comparison: true
        extended_statistics: true
        reference_job: "flat_map"
        percentiles: [50, 95, 99]
        sort: false
        workers: 4

    Returns:
        The parsed YAML as a dict.
    """
    import yaml

    if not profile_path.exists():
        raise FileNotFoundError(f"Profile not found: {profile_path}")

    text = profile_path.read_text()
    data = yaml.safe_load(text)

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"Profile must be a YAML mapping, got {type(data).__name__}")

    return data


def config_from_profile(
    profile_data: dict[str, Any],
    *,
    cli_overrides: dict[str, Any] | None = None,
) -> ReportConfig:
    """Build a ReportConfig from a parsed profile.

    CLI overrides take precedence over profile values.  An override of
    ``None`` means "not given on the command line".

    Args:
        profile_data: Parsed YAML profile dict (may be empty).
        cli_overrides: Dict of CLI option values.  Keys match
            ReportConfig field names.

    Returns:
        The merged ReportConfig.
    """
    cli = cli_overrides or {}
    defaults = ReportConfig()

    def pick(key: str) -> Any:
        if cli.get(key) is not None:
            return cli[key]
        return profile_data.get(key, getattr(defaults, key))

    unknown = set(profile_data) - set(ReportConfig.__dataclass_fields__)
    if unknown:
        log.warning("Ignoring unknown profile keys: %s", ", ".join(sorted(unknown)))

    def flag(key: str) -> bool:
        value = pick(key)
        if not isinstance(value, bool):
            raise ValueError(f"'{key}' must be true or false, got {value!r}")
        return value

    percentiles = pick("percentiles")
    if not isinstance(percentiles, (list, tuple)):
        raise ValueError(f"'percentiles' must be a list of ranks, got {percentiles!r}")
    for rank in percentiles:
        # bool is an int subclass; YAML `yes` must not become rank 1.
        if isinstance(rank, bool) or not isinstance(rank, (int, float)):
            raise ValueError(f"Percentile ranks must be numbers, got {rank!r}")

    workers = pick("workers")
    if workers is not None and (isinstance(workers, bool) or not isinstance(workers, int)):
        raise ValueError(f"'workers' must be a whole number, got {workers!r}")

    reference_job = pick("reference_job")

    return ReportConfig(
        unit_scaling=str(pick("unit_scaling")),
        comparison=flag("comparison"),
        extended_statistics=flag("extended_statistics"),
        reference_job=None if reference_job is None else str(reference_job),
        percentiles=tuple(percentiles),
        sort=flag("sort"),
        workers=workers,
        show_system=flag("show_system"),
    )
