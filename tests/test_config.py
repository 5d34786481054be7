"""Tests for benchreport.config — report configuration and YAML profiles."""

from __future__ import annotations

import tempfile
import unittest
from pathlib import Path

from benchreport.config import (
    ReportConfig,
    config_from_profile,
    load_profile,
    validate_config,
)


# ---------------------------------------------------------------------------
# ReportConfig tests
# ---------------------------------------------------------------------------


class TestReportConfig(unittest.TestCase):
    """Tests for the ReportConfig dataclass."""

    def test_defaults(self) -> None:
        config = ReportConfig()
        self.assertEqual(config.unit_scaling, "best")
        self.assertTrue(config.comparison)
        self.assertFalse(config.extended_statistics)
        self.assertIsNone(config.reference_job)
        self.assertEqual(config.percentiles, (50, 99))
        self.assertTrue(config.sort)
        self.assertIsNone(config.workers)
        self.assertFalse(config.show_system)

    def test_display_percentiles_skip_median(self) -> None:
        config = ReportConfig(percentiles=(50, 90, 99))
        self.assertEqual(config.display_percentiles, (90, 99))

    def test_frozen(self) -> None:
        config = ReportConfig()
        with self.assertRaises(AttributeError):
            config.comparison = False  # type: ignore[misc]


# ---------------------------------------------------------------------------
# Validation tests
# ---------------------------------------------------------------------------


class TestValidateConfig(unittest.TestCase):
    def test_defaults_valid(self) -> None:
        self.assertEqual(validate_config(ReportConfig()), [])

    def test_unknown_strategy(self) -> None:
        errors = validate_config(ReportConfig(unit_scaling="biggest"))
        self.assertEqual(len(errors), 1)
        self.assertEqual(errors[0].field, "unit_scaling")
        self.assertEqual(errors[0].severity, "error")

    def test_empty_percentiles(self) -> None:
        errors = validate_config(ReportConfig(percentiles=()))
        self.assertEqual([e.field for e in errors], ["percentiles"])

    def test_percentile_out_of_range(self) -> None:
        errors = validate_config(ReportConfig(percentiles=(50, 101, -1)))
        self.assertEqual(len(errors), 2)
        self.assertIn("101", errors[0].message)

    def test_workers_below_one(self) -> None:
        errors = validate_config(ReportConfig(workers=0))
        self.assertEqual(errors[0].field, "workers")

    def test_reference_without_comparison_warns(self) -> None:
        errors = validate_config(ReportConfig(reference_job="a", comparison=False))
        self.assertEqual(len(errors), 1)
        self.assertEqual(errors[0].severity, "warning")


# ---------------------------------------------------------------------------
# Profile loading tests
# ---------------------------------------------------------------------------


class TestLoadProfile(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.tmp = Path(self._tmp.name)

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def test_load(self) -> None:
        path = self.tmp / "profile.yaml"
        path.write_text(
            "unit_scaling: smallest\n"
            "extended_statistics: true\n"
            "percentiles: [50, 95, 99]\n"
            "reference_job: flat_map\n"
        )
        data = load_profile(path)
        self.assertEqual(data["unit_scaling"], "smallest")
        self.assertIs(data["extended_statistics"], True)
        self.assertEqual(data["percentiles"], [50, 95, 99])

    def test_empty_file(self) -> None:
        path = self.tmp / "empty.yaml"
        path.write_text("")
        self.assertEqual(load_profile(path), {})

    def test_not_a_mapping(self) -> None:
        path = self.tmp / "list.yaml"
        path.write_text("- a\n- b\n")
        with self.assertRaises(ValueError):
            load_profile(path)

    def test_missing_file(self) -> None:
        with self.assertRaises(FileNotFoundError):
            load_profile(self.tmp / "nope.yaml")


class TestConfigFromProfile(unittest.TestCase):
    def test_empty_profile_gives_defaults(self) -> None:
        self.assertEqual(config_from_profile({}), ReportConfig())

    def test_profile_values(self) -> None:
        config = config_from_profile(
            {"unit_scaling": "none", "sort": False, "percentiles": [90], "workers": 2}
        )
        self.assertEqual(config.unit_scaling, "none")
        self.assertFalse(config.sort)
        self.assertEqual(config.percentiles, (90,))
        self.assertEqual(config.workers, 2)

    def test_cli_overrides_profile(self) -> None:
        config = config_from_profile(
            {"unit_scaling": "none", "comparison": True},
            cli_overrides={"unit_scaling": "largest", "comparison": False},
        )
        self.assertEqual(config.unit_scaling, "largest")
        self.assertFalse(config.comparison)

    def test_none_override_keeps_profile(self) -> None:
        config = config_from_profile(
            {"reference_job": "flat_map"},
            cli_overrides={"reference_job": None, "percentiles": None},
        )
        self.assertEqual(config.reference_job, "flat_map")
        self.assertEqual(config.percentiles, (50, 99))

    def test_unknown_keys_warn(self) -> None:
        with self.assertLogs("benchreport", level="WARNING") as cm:
            config_from_profile({"colour": "red"})
        self.assertIn("colour", cm.output[0])

    def test_percentiles_must_be_list(self) -> None:
        with self.assertRaises(ValueError):
            config_from_profile({"percentiles": 99})

    def test_percentile_ranks_must_be_numbers(self) -> None:
        for ranks in (["99"], [50, None], [True]):
            with self.subTest(ranks=ranks):
                with self.assertRaises(ValueError):
                    config_from_profile({"percentiles": ranks})

    def test_workers_must_be_int(self) -> None:
        for workers in ("four", 2.5, True):
            with self.subTest(workers=workers):
                with self.assertRaises(ValueError) as cm:
                    config_from_profile({"workers": workers})
                self.assertIn("workers", str(cm.exception))

    def test_flags_must_be_bool(self) -> None:
        with self.assertRaises(ValueError) as cm:
            config_from_profile({"comparison": "off"})
        self.assertIn("comparison", str(cm.exception))
