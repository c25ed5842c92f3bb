import os
import tempfile
import unittest

from lakegas.config import Config, config_from_mapping, load_config
from lakegas.data.schema import PhysicalSample
from lakegas.exceptions import ConfigurationError


class ConfigValidationTests(unittest.TestCase):
    def test_defaults_are_valid(self):
        config = Config()
        config.validate()
        self.assertEqual(config.draw_count, 100_000)
        self.assertEqual(config.mixing_ratios, [0.1, 0.25, 0.5, 0.9])

    def test_draw_count_must_be_positive(self):
        with self.assertRaises(ConfigurationError):
            Config(draw_count=0).validate()

    def test_mixing_ratio_bounds(self):
        for ratio in (0.0, 1.0, 1.5, -0.1):
            with self.assertRaises(ConfigurationError):
                Config(mixing_ratios=[ratio]).validate()

    def test_unknown_tiers(self):
        with self.assertRaises(ConfigurationError):
            Config(instrument_tiers=["laser"]).validate()
        with self.assertRaises(ConfigurationError):
            Config(thermometer_tiers=["cheap"]).validate()
        with self.assertRaises(ConfigurationError):
            Config(headspace_modes=["helium"]).validate()

    def test_unknown_perturbed_variable(self):
        with self.assertRaises(ConfigurationError):
            Config(perturbed_variables=["salinity"]).validate()

    def test_configuration_error_is_value_error(self):
        with self.assertRaises(ValueError):
            Config(draw_count=-5).validate()


class ConfigLoadingTests(unittest.TestCase):
    def test_load_yaml(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = os.path.join(tmpdir, "run.yaml")
            with open(path, "w", encoding="utf-8") as handle:
                handle.write("draw_count: 500\nmixing_ratios: [0.25]\npaired_draws: true\n")
            config = load_config(path)
        self.assertEqual(config.draw_count, 500)
        self.assertEqual(config.mixing_ratios, [0.25])
        self.assertTrue(config.paired_draws)

    def test_unknown_key_rejected(self):
        with self.assertRaises(ConfigurationError):
            config_from_mapping({"draws": 10})


class PhysicalSampleTests(unittest.TestCase):
    def test_reference_volumes(self):
        sample = PhysicalSample()
        self.assertAlmostEqual(sample.gas_volume_ml, 35.0)
        self.assertAlmostEqual(sample.water_volume_ml, 105.0)

    def test_with_mixing_ratio_copies(self):
        sample = PhysicalSample()
        other = sample.with_mixing_ratio(0.1)
        self.assertEqual(sample.mixing_ratio, 0.25)
        self.assertAlmostEqual(other.gas_volume_ml, 14.0)

    def test_invalid_mixing_ratio(self):
        with self.assertRaises(ConfigurationError):
            PhysicalSample(mixing_ratio=1.0).validate()


if __name__ == "__main__":
    unittest.main()
