import unittest

import numpy as np

from lakegas.config import CONCENTRATION, EQUILIBRIUM, PURE_GAS, SATURATION_RATIO
from lakegas.data.registry import ErrorRegistry, load_registry
from lakegas.data.schema import PhysicalSample
from lakegas.exceptions import ConfigurationError, DomainError
from lakegas.models import formulas
from lakegas.uncertainty import Scenario
from lakegas.uncertainty.propagation import draw_inputs, evaluate, simulate, true_inputs
from lakegas.uncertainty.summary import mean_error_bound


class TrueInputTests(unittest.TestCase):
    def setUp(self):
        self.sample = PhysicalSample()

    def test_true_concentration_matches_target(self):
        scenario = Scenario(CONCENTRATION)
        value = evaluate(scenario, self.sample, true_inputs(scenario, self.sample))
        self.assertAlmostEqual(value, 7.7, places=9)

    def test_target_is_held_across_modes_and_mixing_ratios(self):
        for mode in ("ambient_air", "pure_gas"):
            for ratio in (0.1, 0.25, 0.5, 0.9):
                scenario = Scenario(CONCENTRATION, headspace_mode=mode, mixing_ratio=ratio)
                value = evaluate(scenario, self.sample, true_inputs(scenario, self.sample))
                self.assertAlmostEqual(value, 7.7, places=9)

    def test_pure_gas_has_lower_headspace_reading(self):
        ambient = true_inputs(Scenario(CONCENTRATION), self.sample)
        pure = true_inputs(Scenario(CONCENTRATION, headspace_mode=PURE_GAS), self.sample)
        self.assertAlmostEqual(ambient["headspace_mole_fraction"], 0.307, places=3)
        self.assertLess(pure["headspace_mole_fraction"], ambient["headspace_mole_fraction"])

    def test_true_saturation_ratio(self):
        scenario = Scenario(SATURATION_RATIO)
        value = evaluate(scenario, self.sample, true_inputs(scenario, self.sample))
        equilibrium = formulas.equilibrium_concentration(99.0, 0.310, 0.00024, 23.0, 2700.0)
        self.assertAlmostEqual(value, 7.7e-9 / equilibrium, places=12)
        self.assertAlmostEqual(value, 0.9834, places=4)

    def test_mims_true_concentration_matches_target(self):
        scenario = Scenario(CONCENTRATION, instrument_tier="mims_standard_gc", headspace_mode=None, mixing_ratio=None)
        value = evaluate(scenario, self.sample, true_inputs(scenario, self.sample))
        self.assertAlmostEqual(value, 7.7, places=9)


class SimulationTests(unittest.TestCase):
    def setUp(self):
        self.registry = load_registry()

    def test_single_variable_unbiased(self):
        scenario = Scenario(
            CONCENTRATION, perturbed=frozenset(["pressure"]), draw_count=100_000, seed=12345
        )
        result = simulate(scenario, self.registry)
        self.assertEqual(result.perturbed, ("pressure",))
        self.assertLessEqual(abs(result.mean_error), mean_error_bound(result, 3.0))

    def test_nothing_perturbed_is_exact(self):
        scenario = Scenario(CONCENTRATION, perturbed=frozenset(), draw_count=50, seed=1)
        result = simulate(scenario, self.registry)
        self.assertEqual(result.simulated.shape, (50,))
        self.assertEqual(result.sd, 0.0)
        np.testing.assert_allclose(result.absolute_error, 0.0, atol=1e-12)

    def test_same_seed_is_reproducible(self):
        scenario = Scenario(SATURATION_RATIO, draw_count=1000, seed=99)
        first = simulate(scenario, self.registry)
        second = simulate(scenario, self.registry)
        np.testing.assert_array_equal(first.simulated, second.simulated)

    def test_elementwise_pairing_of_draws(self):
        scenario = Scenario(SATURATION_RATIO, draw_count=200, seed=5)
        sample = PhysicalSample()
        result = simulate(scenario, self.registry, sample, rng=np.random.default_rng(21))
        inputs = draw_inputs(scenario, self.registry, true_inputs(scenario, sample), np.random.default_rng(21))
        for i in (0, 17, 199):
            scalars = {
                name: (value[i] if isinstance(value, np.ndarray) else value)
                for name, value in inputs.items()
            }
            self.assertAlmostEqual(result.simulated[i], evaluate(scenario, sample, scalars), places=12)

    def test_thermometer_swap_shares_other_draws(self):
        truths = true_inputs(Scenario(SATURATION_RATIO), PhysicalSample())
        standard = Scenario(SATURATION_RATIO, thermometer_tier="standard", draw_count=500)
        lab = Scenario(SATURATION_RATIO, thermometer_tier="high_precision", draw_count=500)
        a = draw_inputs(standard, self.registry, truths, np.random.default_rng(8))
        b = draw_inputs(lab, self.registry, truths, np.random.default_rng(8))
        np.testing.assert_array_equal(a["pressure"], b["pressure"])
        np.testing.assert_array_equal(a["headspace_mole_fraction"], b["headspace_mole_fraction"])
        z_a = (a["temperature"] - 23.0) / 0.3
        z_b = (b["temperature"] - 23.0) / 0.01
        np.testing.assert_allclose(z_a, z_b, atol=1e-6)

    def test_high_precision_thermometer_narrows_error(self):
        temperature_only = frozenset(["temperature"])
        standard = simulate(
            Scenario(SATURATION_RATIO, perturbed=temperature_only, draw_count=5000, seed=2), self.registry
        )
        lab = simulate(
            Scenario(
                SATURATION_RATIO,
                thermometer_tier="high_precision",
                perturbed=temperature_only,
                draw_count=5000,
                seed=2,
            ),
            self.registry,
        )
        self.assertLess(lab.sd, standard.sd)

    def test_pure_gas_concentration_ignores_air_reading(self):
        scenario = Scenario(CONCENTRATION, headspace_mode=PURE_GAS)
        self.assertNotIn("air_mole_fraction", scenario.active_variables())
        self.assertIn("air_mole_fraction", Scenario(SATURATION_RATIO, headspace_mode=PURE_GAS).active_variables())

    def test_mims_scenario_runs(self):
        scenario = Scenario(
            SATURATION_RATIO,
            instrument_tier="mims_high_precision_gc",
            headspace_mode=None,
            mixing_ratio=None,
            draw_count=2000,
            seed=4,
        )
        result = simulate(scenario, self.registry)
        self.assertIn("ratio_sample", result.perturbed)
        self.assertNotIn("water_volume", result.perturbed)
        self.assertGreater(result.sd, 0.0)
        self.assertEqual(result.unit, "")

    def test_units(self):
        result = simulate(Scenario(EQUILIBRIUM, headspace_mode=None, mixing_ratio=None, draw_count=10, seed=1), self.registry)
        self.assertEqual(result.unit, "nmol/L")


class SimulationErrorTests(unittest.TestCase):
    def setUp(self):
        self.registry = load_registry()

    def test_invalid_draw_count(self):
        with self.assertRaises(ConfigurationError):
            simulate(Scenario(draw_count=0), self.registry)

    def test_invalid_mixing_ratio(self):
        with self.assertRaises(ConfigurationError):
            simulate(Scenario(mixing_ratio=1.2, draw_count=10), self.registry)

    def test_missing_error_model(self):
        registry = ErrorRegistry.from_mapping({"pressure": {"standard": {"sd": 0.1}}})
        with self.assertRaises(ConfigurationError):
            simulate(Scenario(draw_count=10), registry)

    def test_mims_rejects_equilibrium(self):
        with self.assertRaises(ConfigurationError):
            Scenario(EQUILIBRIUM, instrument_tier="mims_standard_gc").validate()

    def test_domain_error_propagates(self):
        scenario = Scenario(EQUILIBRIUM, headspace_mode=None, mixing_ratio=None, draw_count=10)
        with self.assertRaises(DomainError):
            simulate(scenario, self.registry, PhysicalSample(temperature_c=-273.15))


if __name__ == "__main__":
    unittest.main()
