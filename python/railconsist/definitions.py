"""
Structured consist definitions: name, speed limit and ordered membership list.
"""
from __future__ import annotations
from dataclasses import dataclass, field
import math
from pathlib import Path
from typing import Dict, List, Tuple, Union

import numpy as np
import pandas as pd
import polars as pl
from typing_extensions import Self

from railconsist.records import MembershipEntry
from railconsist.serde import FILE_FORMATS, MalformedDefinition, SerdeAPI

MEMBER_COLUMNS = ["UiD", "Folder", "Name", "IsEngine", "IsEOT", "Flip"]


def _flag(value):
    # empty cells in optional flag columns read as unset
    if value is None or (isinstance(value, float) and math.isnan(value)):
        return None
    if isinstance(value, np.bool_):
        return bool(value)
    return value


def _member_pydict(row: Dict) -> Dict:
    pydict = {
        "uid": row["UiD"],
        "folder": row["Folder"],
        "name": row["Name"],
        "is_engine": _flag(row["IsEngine"]),
    }
    for column, key in (("IsEOT", "is_eot"), ("Flip", "flip")):
        value = _flag(row.get(column))
        if value is not None:
            pydict[key] = value
    return pydict


@dataclass(frozen=True)
class ConsistDefinition(SerdeAPI):
    """
    Input to the consist aggregator.

    Fields:
    - `name`: display name of the consist
    - `speed_max_meters_per_second`: maximum speed of the train configuration
    - `members`: units in train order
    """

    name: str
    speed_max_meters_per_second: float
    members: Tuple[MembershipEntry, ...] = field(default_factory=tuple)

    @classmethod
    def from_pydict(cls, pydict: Dict) -> Self:
        if not isinstance(pydict, dict):
            raise MalformedDefinition("consist definition must be a mapping")
        members = pydict.get("members", [])
        if not isinstance(members, list):
            raise MalformedDefinition("consist definition `members` must be a list")
        try:
            return cls(
                name=str(pydict["name"]),
                speed_max_meters_per_second=float(pydict["speed_max_meters_per_second"]),
                members=tuple(MembershipEntry.from_pydict(m) for m in members),
            )
        except MalformedDefinition:
            raise
        except KeyError as err:
            raise MalformedDefinition(f"consist definition is missing {err}") from err
        except (TypeError, ValueError) as err:
            raise MalformedDefinition(f"invalid consist definition: {err}") from err

    @classmethod
    def from_dataframe(
        cls,
        df: Union[pl.DataFrame, pd.DataFrame],
        name: str,
        speed_max_meters_per_second: float,
    ) -> Self:
        """
        Builds a definition from a table with one row per unit, in train order.

        # Arguments
        - `df`: polars or pandas dataframe with columns `UiD`, `Folder`, `Name`,
          `IsEngine` and optionally `IsEOT` and `Flip`
        - `name`: consist name
        - `speed_max_meters_per_second`: maximum speed
        """
        missing = [c for c in MEMBER_COLUMNS[:4] if c not in df.columns]
        if missing:
            raise MalformedDefinition(f"consist table is missing columns {missing}")
        if isinstance(df, pd.DataFrame):
            rows = df.to_dict(orient="records")
        else:
            rows = list(df.iter_rows(named=True))
        members = tuple(MembershipEntry.from_pydict(_member_pydict(row)) for row in rows)
        return cls(name, speed_max_meters_per_second, members)

    def to_dataframe(self) -> pl.DataFrame:
        return pl.DataFrame(
            [
                (m.uid, m.folder, m.name, m.is_engine, m.is_eot, m.flip)
                for m in self.members
            ],
            schema={
                "UiD": pl.Int64,
                "Folder": pl.Utf8,
                "Name": pl.Utf8,
                "IsEngine": pl.Boolean,
                "IsEOT": pl.Boolean,
                "Flip": pl.Boolean,
            },
            orient="row",
        )


def load_definitions(directory: Union[str, Path]) -> List[ConsistDefinition]:
    """
    Loads every consist definition file in `directory`, sorted by file name.
    """
    path = Path(directory)
    if not path.is_dir():
        raise FileNotFoundError(f"could not locate consist directory: {path}")
    return [
        ConsistDefinition.from_file(p)
        for p in sorted(path.iterdir())
        if p.is_file() and p.suffix.lower() in FILE_FORMATS
    ]
