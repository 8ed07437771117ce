import unittest

import railconsist as rc
from .mock_resources import *

G = rc.defaults.GRAVITATIONAL_ACCELERATION_MPS2


class TestUnitClassifier(unittest.TestCase):
    def setUp(self):
        self.classifier = rc.UnitClassifier()

    def test_engine_above_cab_car_threshold(self):
        unit = self.classifier.classify(engine(0), mock_engine_record(force_max_newtons=25000.1))

        self.assertTrue(unit.is_engine)
        self.assertFalse(unit.counts_as_wagon)
        self.assertEqual(unit.trailing_mass_kilograms, 0.0)
        self.assertEqual(unit.pwr_max_watts, 1.0e6)

    def test_cab_car_at_threshold(self):
        unit = self.classifier.classify(engine(0), mock_cab_car_record())

        self.assertFalse(unit.is_engine)
        self.assertTrue(unit.counts_as_wagon)
        self.assertEqual(unit.trailing_mass_kilograms, 40000.0)
        self.assertEqual(unit.pwr_max_watts, 0.0)
        self.assertEqual(unit.force_max_newtons, 0.0)
        self.assertEqual(unit.force_dyn_brake_max_newtons, 0.0)
        self.assertFalse(unit.operative_brake)

    def test_engine_without_engine_params_is_cab_car(self):
        record = mock_wagon_record()
        unit = self.classifier.classify(engine(0), record)

        self.assertFalse(unit.is_engine)
        self.assertTrue(unit.counts_as_wagon)
        # default drive axles plus declared idle axles
        self.assertEqual(unit.num_axles, 8)

    def test_drive_axle_fallbacks(self):
        self.assertEqual(self.classifier.drive_axles(rc.EngineParams(num_drive_axles=3)), 3)
        self.assertEqual(self.classifier.drive_axles(rc.EngineParams(num_eng_wheels=6)), 6)
        self.assertEqual(self.classifier.drive_axles(rc.EngineParams(num_eng_wheels=7)), 4)
        self.assertEqual(self.classifier.drive_axles(rc.EngineParams(num_eng_wheels=0)), 4)

    def test_idle_axle_fallbacks(self):
        self.assertEqual(self.classifier.idle_axles(wagon(0), mock_wagon_record(num_wag_axles=2)), 2)
        self.assertEqual(
            self.classifier.idle_axles(wagon(0), mock_wagon_record(num_wag_axles=0, num_wag_wheels=5)), 5
        )
        self.assertEqual(
            self.classifier.idle_axles(wagon(0), mock_wagon_record(num_wag_axles=0, num_wag_wheels=6)), 4
        )
        self.assertEqual(
            self.classifier.idle_axles(wagon(0), mock_wagon_record(num_wag_axles=0, num_wag_wheels=0)), 4
        )
        # engines keep a zero idle axle count
        self.assertEqual(self.classifier.idle_axles(engine(0), mock_engine_record(num_wag_axles=0)), 0)

    def test_steam_halving_fires_without_idle_axles(self):
        record = mock_engine_record(engine_type="Steam", num_drive_axles=6, num_wag_axles=0)
        unit = self.classifier.classify(engine(0), record)

        self.assertEqual(unit.num_axles, 3)

    def test_steam_halving_skipped_with_idle_axles(self):
        # literal condition `drive >= drive + idle` cannot hold once idle axles exist
        record = mock_engine_record(engine_type="Steam", num_drive_axles=6, num_wag_axles=2)
        unit = self.classifier.classify(engine(0), record)

        self.assertEqual(unit.num_axles, 8)

    def test_steam_halving_requires_exact_type(self):
        record = mock_engine_record(engine_type="steam", num_drive_axles=6, num_wag_axles=0)
        unit = self.classifier.classify(engine(0), record)

        self.assertEqual(unit.num_axles, 6)

    def test_steam_halving_rounds_down(self):
        record = mock_engine_record(engine_type="Steam", num_drive_axles=5, num_wag_axles=0)
        unit = self.classifier.classify(engine(0), record)

        self.assertEqual(unit.num_axles, 2)

    def test_declared_role_selects_sub_type(self):
        # a wagon-typed "Steam" record declared as an engine has no engine type
        record = mock_wagon_record(num_wag_axles=0, wagon_type="Steam")
        unit = self.classifier.classify(engine(0), record)

        self.assertEqual(unit.num_axles, 4)

        # engine parameters on a declared wagon never drive the steam correction
        record = rc.PhysicalRecord(
            mass_kilograms=30000.0,
            length_meters=12.0,
            wagon_type="Tender",
            engine=rc.EngineParams(num_drive_axles=6, engine_type="Steam"),
        )
        unit = self.classifier.classify(wagon(0), record)

        self.assertFalse(unit.is_engine)
        self.assertEqual(unit.num_axles, 4)

    def test_derail_force(self):
        self.assertAlmostEqual(self.classifier.derail_force(20000.0, 4), 20000.0 / 4 / 2 * G)
        self.assertIsNone(self.classifier.derail_force(1000.0, 4))
        self.assertIsNone(self.classifier.derail_force(20000.0, 0))
        # 1500 kg on 8 axles is below the degenerate-value floor
        self.assertIsNone(self.classifier.derail_force(1500.0, 8))

    def test_placeholder_has_no_counted_axles_or_derail_force(self):
        unit = self.classifier.classify(wagon(0, is_eot=True), mock_wagon_record())

        self.assertEqual(unit.num_axles, 4)
        self.assertEqual(unit.counted_axles, 0)
        self.assertIsNone(unit.derail_force_newtons)
        self.assertFalse(unit.counts_as_wagon)
        self.assertEqual(unit.coupler_strength_newtons, 1.0e6)

    def test_operative_brakes(self):
        for brake_type, force, expected in [
            ("air_single_pipe", 5000.0, True),
            ("vacuum_single_pipe", 5000.0, True),
            ("air_piped", 5000.0, False),
            ("vacuum_piped", 5000.0, False),
            ("manual_braking", 5000.0, False),
            (None, 5000.0, False),
            ("air_single_pipe", 0.0, False),
        ]:
            with self.subTest(brake_type=brake_type, force=force):
                unit = self.classifier.classify(
                    wagon(0),
                    mock_wagon_record(brake_system_type=brake_type, force_brake_max_newtons=force),
                )
                self.assertEqual(unit.operative_brake, expected)

    def test_config_overrides_thresholds(self):
        classifier = rc.UnitClassifier(rc.ClassifierConfig(cab_car_force_max_newtons=50000.0))
        unit = classifier.classify(engine(0), mock_engine_record(force_max_newtons=40000.0))

        self.assertFalse(unit.is_engine)
        self.assertTrue(unit.counts_as_wagon)


class TestCarFactory(unittest.TestCase):
    def test_make_car(self):
        car = rc.make_car(engine(12, "GP38", "GP38", flip=True), 113400.0)

        self.assertEqual(car.uid, "12")
        self.assertEqual(car.name, "GP38/GP38")
        self.assertEqual(car.direction, rc.Direction.BACKWARDS)
        self.assertTrue(car.is_engine)
        self.assertEqual(car.mass_kilograms, 113400.0)

    def test_make_car_defaults_to_massless(self):
        car = rc.make_car(wagon(3))

        self.assertEqual(car.direction, rc.Direction.FORWARDS)
        self.assertFalse(car.is_engine)
        self.assertEqual(car.mass_kilograms, 0.0)


if __name__ == "__main__":
    unittest.main()
