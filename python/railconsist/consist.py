"""
Derived static summary of a train built from its ordered membership list.
"""
from __future__ import annotations
from dataclasses import dataclass, field, replace
from functools import reduce
from typing import TYPE_CHECKING, Dict, Iterable, Optional, Tuple, Union
import logging

import numpy as np
import numpy.typing as npt
import pandas as pd
import polars as pl
from typing_extensions import Self

from railconsist import defaults, utilities
from railconsist.cars import Car, Direction, make_car
from railconsist.classifier import ClassifierConfig, UnitClassifier, UnitContribution
from railconsist.records import MembershipEntry, NotFound
from railconsist.resolvers import RecordResolver, Resolution
from railconsist.serde import MalformedDefinition, SerdeAPI

if TYPE_CHECKING:
    from railconsist.definitions import ConsistDefinition

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class Consist(SerdeAPI):
    """
    Read-only snapshot of a consist's static physical characteristics.

    Fields:
    - `num_engines`: engine count per block of consecutive engines, joined with
      `"+"` (e.g. `"2+1"` for a distributed power unit); `"0"` when there are none
    - `num_cars`: wagon count, driving trailers included, EOT devices excluded
    - `trailing_mass_kilograms`: mass of everything counted as a wagon
    - `num_axles`: axles of real cars, EOT devices and placeholders excluded
    - `num_operative_brakes`: wagons with a power brake
    - `coupler_strength_min_newtons`, `derail_force_min_newtons`: weakest values
      observed, `defaults.FORCE_SENTINEL_NEWTONS` if nothing contributed
    - `cars`: roster, one entry per membership entry in train order
    - `unresolved`: references whose records could not be resolved
    """

    name: str
    speed_max_meters_per_second: float
    num_engines: str = "0"
    num_cars: str = "0"
    length_meters: float = 0.0
    mass_kilograms: float = 0.0
    trailing_mass_kilograms: float = 0.0
    num_axles: int = 0
    pwr_max_watts: float = 0.0
    force_max_newtons: float = 0.0
    force_max_continuous_newtons: float = 0.0
    force_dyn_brake_max_newtons: float = 0.0
    force_brake_max_newtons: float = 0.0
    num_operative_brakes: int = 0
    coupler_strength_min_newtons: float = defaults.FORCE_SENTINEL_NEWTONS
    derail_force_min_newtons: float = defaults.FORCE_SENTINEL_NEWTONS
    cars: Tuple[Car, ...] = field(default_factory=tuple)
    unresolved: Tuple[NotFound, ...] = field(default_factory=tuple)

    @classmethod
    def build(
        cls,
        definition: "ConsistDefinition",
        resolver: RecordResolver,
        config: Optional[ClassifierConfig] = None,
    ) -> Self:
        """
        Builds the consist summary for `definition`, resolving every member with `resolver`.
        """
        return ConsistBuilder(resolver, config).build(
            definition.name,
            definition.speed_max_meters_per_second,
            definition.members,
        )

    @property
    def hp_per_ton(self) -> float:
        return utilities.hp_per_ton(self.pwr_max_watts, self.mass_kilograms)

    def car_masses_kilograms(self) -> npt.NDArray[np.float64]:
        return np.array([car.mass_kilograms for car in self.cars], dtype=np.float64)

    def coupler_trailing_mass_kilograms(self) -> npt.NDArray[np.float64]:
        """
        Returns the static mass hauled through each coupler, front to rear.
        Element `i` is the mass behind car `i`; the array has one element fewer
        than the roster. Unresolved cars count as massless.
        """
        masses = self.car_masses_kilograms()
        if len(masses) < 2:
            return np.zeros(0)
        return masses[::-1].cumsum()[::-1][1:]

    def to_dataframe(self, pandas: bool = False) -> Union[pd.DataFrame, pl.DataFrame]:
        """
        Returns the car roster as a Polars or Pandas dataframe.

        # Arguments
        - `pandas`: returns pandas dataframe if True; otherwise, returns polars dataframe by default
        """
        roster = {
            "UiD": [car.uid for car in self.cars],
            "Name": [car.name for car in self.cars],
            "Direction": [car.direction.value for car in self.cars],
            "IsEngine": [car.is_engine for car in self.cars],
            "Mass_KG": [car.mass_kilograms for car in self.cars],
        }
        if pandas:
            return pd.DataFrame(roster)
        return pl.DataFrame(
            roster,
            schema={
                "UiD": pl.Utf8,
                "Name": pl.Utf8,
                "Direction": pl.Utf8,
                "IsEngine": pl.Boolean,
                "Mass_KG": pl.Float64,
            },
        )

    @classmethod
    def from_pydict(cls, pydict: Dict) -> Self:
        try:
            cars = tuple(
                Car(
                    uid=str(c["uid"]),
                    name=str(c["name"]),
                    direction=Direction[c["direction"]],
                    is_engine=bool(c["is_engine"]),
                    mass_kilograms=float(c["mass_kilograms"]),
                )
                for c in pydict.get("cars", [])
            )
            unresolved = tuple(NotFound(**u) for u in pydict.get("unresolved", []))
            scalars = {
                k: v for k, v in pydict.items() if k not in ("cars", "unresolved")
            }
            return cls(cars=cars, unresolved=unresolved, **scalars)
        except (KeyError, TypeError, AttributeError) as err:
            raise MalformedDefinition(f"invalid consist: {err}") from err


@dataclass(frozen=True)
class _Accumulator:
    """Running state threaded through the consist fold."""

    engine_run: int = 0
    engine_blocks: Tuple[int, ...] = ()
    num_wagons: int = 0
    length_meters: float = 0.0
    mass_kilograms: float = 0.0
    trailing_mass_kilograms: float = 0.0
    num_axles: int = 0
    pwr_max_watts: float = 0.0
    force_max_newtons: float = 0.0
    force_max_continuous_newtons: float = 0.0
    force_dyn_brake_max_newtons: float = 0.0
    force_brake_max_newtons: float = 0.0
    num_operative_brakes: int = 0
    coupler_strength_min_newtons: float = defaults.FORCE_SENTINEL_NEWTONS
    derail_force_min_newtons: float = defaults.FORCE_SENTINEL_NEWTONS

    def add(self, unit: UnitContribution) -> "_Accumulator":
        coupler_min = self.coupler_strength_min_newtons
        if unit.coupler_strength_newtons is not None:
            coupler_min = min(coupler_min, unit.coupler_strength_newtons)
        derail_min = self.derail_force_min_newtons
        if unit.derail_force_newtons is not None:
            derail_min = min(derail_min, unit.derail_force_newtons)

        return replace(
            self,
            num_wagons=self.num_wagons + int(unit.counts_as_wagon),
            length_meters=self.length_meters + unit.length_meters,
            mass_kilograms=self.mass_kilograms + unit.mass_kilograms,
            trailing_mass_kilograms=self.trailing_mass_kilograms + unit.trailing_mass_kilograms,
            num_axles=self.num_axles + unit.counted_axles,
            pwr_max_watts=self.pwr_max_watts + unit.pwr_max_watts,
            force_max_newtons=self.force_max_newtons + unit.force_max_newtons,
            force_max_continuous_newtons=(
                self.force_max_continuous_newtons + unit.force_max_continuous_newtons
            ),
            force_dyn_brake_max_newtons=(
                self.force_dyn_brake_max_newtons + unit.force_dyn_brake_max_newtons
            ),
            force_brake_max_newtons=self.force_brake_max_newtons + unit.force_brake_max_newtons,
            num_operative_brakes=self.num_operative_brakes + int(unit.operative_brake),
            coupler_strength_min_newtons=coupler_min,
            derail_force_min_newtons=derail_min,
        )

    def close_block(self) -> "_Accumulator":
        if self.engine_run == 0:
            return self
        return replace(
            self,
            engine_blocks=self.engine_blocks + (self.engine_run,),
            engine_run=0,
        )


class ConsistBuilder:
    """
    Folds an ordered membership list into a `Consist` in a single pass.

    Every entry gets a roster `Car`, even when its record cannot be resolved;
    an unresolved entry is tallied by its declared role and adds nothing else.
    """

    def __init__(
        self,
        resolver: RecordResolver,
        config: Optional[ClassifierConfig] = None,
    ):
        self.resolver = resolver
        self.classifier = UnitClassifier(config)

    def build(
        self,
        name: str,
        speed_max_meters_per_second: float,
        members: Iterable[MembershipEntry],
    ) -> Consist:
        resolved = [(entry, self._resolve(entry)) for entry in members]
        acc = reduce(self._step, resolved, _Accumulator()).close_block()

        if acc.engine_blocks:
            num_engines = defaults.ENGINE_BLOCK_SEPARATOR.join(
                str(n) for n in acc.engine_blocks
            )
        else:
            num_engines = "0"

        consist = Consist(
            name=name,
            speed_max_meters_per_second=speed_max_meters_per_second,
            num_engines=num_engines,
            num_cars=str(acc.num_wagons),
            length_meters=acc.length_meters,
            mass_kilograms=acc.mass_kilograms,
            trailing_mass_kilograms=acc.trailing_mass_kilograms,
            num_axles=acc.num_axles,
            pwr_max_watts=acc.pwr_max_watts,
            force_max_newtons=acc.force_max_newtons,
            force_max_continuous_newtons=acc.force_max_continuous_newtons,
            force_dyn_brake_max_newtons=acc.force_dyn_brake_max_newtons,
            force_brake_max_newtons=acc.force_brake_max_newtons,
            num_operative_brakes=acc.num_operative_brakes,
            coupler_strength_min_newtons=acc.coupler_strength_min_newtons,
            derail_force_min_newtons=acc.derail_force_min_newtons,
            cars=tuple(
                make_car(entry, 0.0 if isinstance(result, NotFound) else result.mass_kilograms)
                for entry, result in resolved
            ),
            unresolved=tuple(
                result for _, result in resolved if isinstance(result, NotFound)
            ),
        )
        log.info(
            f"{name}: {num_engines} engines, {consist.num_cars} cars, "
            f"{consist.mass_kilograms / utilities.KG_PER_TONNE:.1f} t, "
            f"{consist.length_meters:.1f} m, {len(consist.unresolved)} unresolved"
        )
        return consist

    def _resolve(self, entry: MembershipEntry) -> Resolution:
        try:
            return self.resolver.resolve(entry.folder, entry.name, entry.is_engine)
        except (MalformedDefinition, OSError) as err:
            return NotFound(entry.reference, str(err))

    def _step(
        self, acc: _Accumulator, item: Tuple[MembershipEntry, Resolution]
    ) -> _Accumulator:
        entry, result = item

        if isinstance(result, NotFound):
            log.warning(f"car {entry.uid} ({entry.reference}) unresolved: {result.reason}")
            acc = replace(acc, num_wagons=acc.num_wagons + int(not entry.is_engine))
            is_engine = entry.is_engine
        else:
            unit = self.classifier.classify(entry, result)
            log.debug(
                f"car {entry.uid} ({entry.reference}): engine={unit.is_engine} "
                f"wagon={unit.counts_as_wagon} axles={unit.num_axles} "
                f"derail_force={unit.derail_force_newtons}"
            )
            acc = acc.add(unit)
            is_engine = unit.is_engine

        if not entry.is_engine:
            acc = acc.close_block()
        if is_engine:
            acc = replace(acc, engine_run=acc.engine_run + 1)
        return acc
