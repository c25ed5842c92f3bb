import os
import tempfile
import unittest

import numpy as np

from lakegas.data.registry import ErrorRegistry, ErrorSpec, load_registry
from lakegas.exceptions import ConfigurationError


class PackagedRegistryTests(unittest.TestCase):
    def setUp(self):
        self.registry = load_registry()

    def test_pressure_is_mean_of_barometer_panel(self):
        spec = self.registry.lookup("pressure", "standard")
        self.assertAlmostEqual(spec.sd_at(99.0), 0.49 / 6, places=9)

    def test_thermometer_tiers(self):
        self.assertEqual(self.registry.tiers("temperature"), ["high_precision", "standard"])
        standard = self.registry.lookup("temperature", "standard").sd_at(23.0)
        lab = self.registry.lookup("temperature", "high_precision").sd_at(23.0)
        self.assertLess(lab, standard)

    def test_relative_dispersion_scales_with_center(self):
        spec = self.registry.lookup("gas_mole_fraction", "high_precision")
        self.assertAlmostEqual(spec.sd_at(0.31), 0.00031, places=12)
        self.assertAlmostEqual(spec.sd_at(0.031), 0.000031, places=12)

    def test_water_volume_sd(self):
        self.assertEqual(self.registry.lookup("water_volume").sd_at(105.0), 1.0)

    def test_missing_tier(self):
        with self.assertRaises(ConfigurationError):
            self.registry.lookup("pressure", "high_precision")


class ErrorSpecTests(unittest.TestCase):
    def test_draw_scales_standard_normals(self):
        spec = ErrorSpec("temperature", "standard", sd=0.5)
        drawn = spec.draw(20.0, np.array([-1.0, 0.0, 2.0]))
        np.testing.assert_allclose(drawn, [19.5, 20.0, 21.0])

    def test_negative_sd_rejected(self):
        with self.assertRaises(ConfigurationError):
            ErrorSpec("temperature", "standard", sd=-0.1).validate()

    def test_single_dispersion_required(self):
        with self.assertRaises(ConfigurationError):
            ErrorSpec("temperature", "standard", sd=0.1, cv=0.01).validate()
        with self.assertRaises(ConfigurationError):
            ErrorSpec("temperature", "standard").validate()

    def test_only_normal_supported(self):
        with self.assertRaises(ConfigurationError):
            ErrorSpec("temperature", "standard", sd=0.1, distribution="uniform").validate()

    def test_zero_sd_allowed(self):
        ErrorSpec("water_volume", "standard", sd=0.0).validate()


class RegistryMappingTests(unittest.TestCase):
    def test_from_mapping(self):
        registry = ErrorRegistry.from_mapping(
            {"meta": {"distribution": "normal"}, "pressure": {"standard": {"replicate_sd": [0.1, 0.3]}}}
        )
        self.assertAlmostEqual(registry.lookup("pressure").sd_at(99.0), 0.2)
        self.assertEqual(registry.variables(), ["pressure"])

    def test_unknown_setting_rejected(self):
        with self.assertRaises(ConfigurationError):
            ErrorRegistry.from_mapping({"pressure": {"standard": {"sigma": 0.1}}})

    def test_negative_replicate_rejected(self):
        with self.assertRaises(ConfigurationError):
            ErrorRegistry.from_mapping({"pressure": {"standard": {"replicate_sd": [0.1, -0.3]}}})

    def test_load_user_file(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = os.path.join(tmpdir, "calibration.yaml")
            with open(path, "w", encoding="utf-8") as handle:
                handle.write("temperature:\n  standard:\n    sd: 0.2\n")
            registry = load_registry(path)
        self.assertEqual(registry.lookup("temperature").sd_at(23.0), 0.2)

    def test_missing_file(self):
        with self.assertRaises(ConfigurationError):
            load_registry("/nonexistent/calibration.yaml")


if __name__ == "__main__":
    unittest.main()
