"""System information for the report banner.

Captures the host details printed above a report so readers know where
the numbers came from.  Supports Linux and macOS; other platforms get
defaults.  Every capture is best-effort.
"""

from __future__ import annotations

import json
import logging
import os
import platform
import subprocess
import sys
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from benchreport.config import ReportConfig

log = logging.getLogger("benchreport")


@dataclass
class SystemProfile:
    """The host a benchmark report was produced on."""

    os_name: str = ""
    cpu_model: str = "unknown"
    cpu_cores_logical: int = 0
    ram_total_gb: float = 0.0
    python_version: str = ""
    python_implementation: str = ""

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a JSON-compatible dict."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SystemProfile:
        """Deserialize from a dict, ignoring unknown fields."""
        known = {f.name for f in cls.__dataclass_fields__.values()}
        filtered = {k: v for k, v in data.items() if k in known}
        return cls(**filtered)

    def to_json(self, indent: int = 2) -> str:
        """Serialize to a JSON string."""
        return json.dumps(self.to_dict(), indent=indent)


# ---------------------------------------------------------------------------
# Capture
# ---------------------------------------------------------------------------


def capture_system_profile() -> SystemProfile:
    """Capture the host profile.

    Individual failures leave default values rather than raising.
    """
    profile = SystemProfile(
        os_name=_os_name(),
        cpu_cores_logical=os.cpu_count() or 0,
        python_version=platform.python_version(),
        python_implementation=platform.python_implementation(),
    )

    if sys.platform == "linux":
        _capture_linux(profile)
    elif sys.platform == "darwin":
        _capture_darwin(profile)
    else:
        log.debug("CPU and memory capture not supported on %s", sys.platform)

    return profile


def _os_name() -> str:
    if sys.platform == "darwin":
        return "macOS"
    if sys.platform.startswith("win"):
        return "Windows"
    return platform.system() or "unknown"


def _capture_linux(profile: SystemProfile) -> None:
    """Read CPU model and total memory from /proc."""
    try:
        for line in Path("/proc/cpuinfo").read_text().splitlines():
            if line.startswith("model name"):
                profile.cpu_model = line.split(":", 1)[1].strip()
                break
    except OSError as exc:
        log.debug("Cannot read /proc/cpuinfo: %s", exc)

    try:
        for line in Path("/proc/meminfo").read_text().splitlines():
            if line.startswith("MemTotal:"):
                # Values are in kB.
                profile.ram_total_gb = int(line.split()[1]) / (1024 * 1024)
                break
    except (OSError, ValueError, IndexError) as exc:
        log.debug("Cannot read /proc/meminfo: %s", exc)


def _sysctl(key: str) -> str | None:
    """Read a sysctl string value. Returns None on failure."""
    try:
        proc = subprocess.run(
            ["sysctl", "-n", key],
            capture_output=True,
            text=True,
            timeout=5,
        )
    except (OSError, subprocess.SubprocessError) as exc:
        log.debug("sysctl %s failed: %s", key, exc)
        return None
    if proc.returncode == 0 and proc.stdout.strip():
        return proc.stdout.strip()
    return None


def _capture_darwin(profile: SystemProfile) -> None:
    """Read CPU model and total memory with sysctl."""
    model = _sysctl("machdep.cpu.brand_string")
    if model:
        profile.cpu_model = model

    memsize = _sysctl("hw.memsize")
    if memsize:
        try:
            profile.ram_total_gb = int(memsize) / (1024**3)
        except ValueError:
            log.debug("Unexpected hw.memsize value: %r", memsize)


# ---------------------------------------------------------------------------
# Display
# ---------------------------------------------------------------------------


def format_system_banner(profile: SystemProfile, config: ReportConfig | None = None) -> str:
    """Format the host profile, and optionally the report settings."""
    lines = [
        f"Operating System: {profile.os_name}",
        f"CPU Information: {profile.cpu_model}",
        f"Number of Available Cores: {profile.cpu_cores_logical}",
        f"Available memory: {profile.ram_total_gb:.2f} GB",
        f"Python {profile.python_version} ({profile.python_implementation})",
    ]

    if config is not None:
        percentiles = ", ".join(f"{p:g}" for p in config.percentiles)
        lines.append("")
        lines.append("Report configuration:")
        lines.append(f"unit scaling: {config.unit_scaling}")
        lines.append(f"comparison: {'yes' if config.comparison else 'no'}")
        lines.append(f"extended statistics: {'yes' if config.extended_statistics else 'no'}")
        lines.append(f"percentiles: {percentiles}")
        if config.reference_job:
            lines.append(f"reference job: {config.reference_job}")

    return "\n".join(lines)
