import tempfile
import unittest
from pathlib import Path

import numpy as np
import pandas as pd
import polars as pl

import railconsist as rc
from .mock_resources import *


def mock_definition() -> rc.ConsistDefinition:
    return rc.ConsistDefinition(
        name="Mixed",
        speed_max_meters_per_second=22.2,
        members=(engine(0), engine(1, flip=True), wagon(2), wagon(3, "EOT", is_eot=True)),
    )


class TestConsistDefinition(unittest.TestCase):
    def test_file_round_trip(self):
        definition = mock_definition()
        with tempfile.TemporaryDirectory() as tmp:
            for suffix in [".yaml", ".json", ".msgpack"]:
                with self.subTest(suffix=suffix):
                    path = Path(tmp) / f"mixed{suffix}"
                    definition.to_file(path)
                    self.assertEqual(rc.ConsistDefinition.from_file(path), definition)

    def test_optional_flags_default_to_false(self):
        definition = rc.ConsistDefinition.from_yaml(
            "name: Short\n"
            "speed_max_meters_per_second: 10\n"
            "members:\n"
            "  - {uid: 1, folder: Locos, name: Loco, is_engine: true}\n"
        )

        self.assertEqual(definition.members, (engine(1),))

    def test_missing_field_is_malformed(self):
        with self.assertRaises(rc.MalformedDefinition):
            rc.ConsistDefinition.from_pydict({"name": "No speed", "members": []})
        with self.assertRaises(rc.MalformedDefinition):
            rc.ConsistDefinition.from_pydict({
                "name": "Bad member",
                "speed_max_meters_per_second": 10.0,
                "members": [{"uid": 0, "folder": "Locos"}],
            })
        with self.assertRaises(rc.MalformedDefinition):
            rc.ConsistDefinition.from_pydict({
                "name": "Bad flag",
                "speed_max_meters_per_second": 10.0,
                "members": [{"uid": 0, "folder": "Locos", "name": "Loco", "is_engine": "yes"}],
            })

    def test_missing_file(self):
        with self.assertRaises(FileNotFoundError):
            rc.ConsistDefinition.from_file("does_not_exist.yaml")

    def test_unsupported_suffix(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "mixed.con"
            path.write_text("SIMISA@@@@@@@@@@JINX0D0t______")
            with self.assertRaises(ValueError):
                rc.ConsistDefinition.from_file(path)

    def test_from_polars_dataframe(self):
        df = pl.DataFrame({
            "UiD": [0, 1, 2],
            "Folder": ["Locos", "Wagons", "Wagons"],
            "Name": ["Loco", "Boxcar", "EOT"],
            "IsEngine": [True, False, False],
            "IsEOT": [False, False, True],
        })
        definition = rc.ConsistDefinition.from_dataframe(df, "Table", 15.0)

        self.assertEqual(definition.members, (engine(0), wagon(1), wagon(2, "EOT", is_eot=True)))

    def test_from_pandas_dataframe(self):
        definition = mock_definition()
        pdf = pd.DataFrame(definition.to_dataframe().to_dict(as_series=False))

        self.assertEqual(
            rc.ConsistDefinition.from_dataframe(pdf, definition.name, definition.speed_max_meters_per_second),
            definition,
        )

    def test_empty_flag_cells_default_to_false(self):
        pdf = pd.DataFrame({
            "UiD": [0, 1],
            "Folder": ["Locos", "Wagons"],
            "Name": ["Loco", "Boxcar"],
            "IsEngine": [True, False],
            "IsEOT": [np.nan, np.nan],
            "Flip": [None, True],
        })
        definition = rc.ConsistDefinition.from_dataframe(pdf, "Sparse", 15.0)

        self.assertEqual(
            definition.members,
            (engine(0), rc.MembershipEntry(uid=1, folder="Wagons", name="Boxcar", is_engine=False, flip=True)),
        )
        self.assertFalse(definition.members[1].is_eot)

    def test_non_boolean_flags_are_malformed(self):
        pdf = pd.DataFrame({
            "UiD": [0],
            "Folder": ["Locos"],
            "Name": ["Loco"],
            "IsEngine": ["False"],
        })
        with self.assertRaises(rc.MalformedDefinition):
            rc.ConsistDefinition.from_dataframe(pdf, "Strings", 15.0)

        df = pl.DataFrame({
            "UiD": [0],
            "Folder": ["Locos"],
            "Name": ["Loco"],
            "IsEngine": pl.Series([None], dtype=pl.Boolean),
        })
        with self.assertRaises(rc.MalformedDefinition):
            rc.ConsistDefinition.from_dataframe(df, "Nulls", 15.0)

    def test_dataframe_missing_columns(self):
        with self.assertRaises(rc.MalformedDefinition):
            rc.ConsistDefinition.from_dataframe(pl.DataFrame({"UiD": [0]}), "Bad", 1.0)

    def test_load_bundled_definitions(self):
        definitions = rc.load_definitions(rc.defaults.DEMO_CONSISTS_DIR)

        self.assertEqual(
            [d.name for d in definitions],
            ["Manifest with mid-train DPU", "Push-pull commuter", "Mogul branch freight"],
        )

    def test_load_definitions_missing_directory(self):
        with self.assertRaises(FileNotFoundError):
            rc.load_definitions(Path("no") / "such" / "dir")


if __name__ == "__main__":
    unittest.main()
