"""
Per-unit role decisions and numeric contributions for the consist fold.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Optional, Tuple

from railconsist import defaults
from railconsist.records import EngineParams, MembershipEntry, PhysicalRecord


@dataclass
class ClassifierConfig:
    """
    Dataclass class for unit classification thresholds.

    Attributes:
    ----------
    - `cab_car_force_max_newtons`: engines at or below this tractive force are driving trailers
    - `placeholder_length_meters`: units at or below this length are not real cars
    - `drive_wheel_limit`: engine wheel counts below this stand in for missing drive axles
    - `idle_wheel_limit`: wagon wheel counts below this stand in for missing idle axles
    - `default_axles`: axle count used when neither axles nor a usable wheel count are declared
    - `derail_mass_min_kilograms`: lighter units contribute no derail force
    - `derail_force_min_newtons`: derail forces at or below this are discarded
    - `non_operative_brake_systems`: brake system types that do not brake the train
    """
    cab_car_force_max_newtons: float = defaults.CAB_CAR_FORCE_MAX_NEWTONS
    placeholder_length_meters: float = defaults.PLACEHOLDER_LENGTH_METERS
    drive_wheel_limit: int = defaults.DRIVE_WHEEL_LIMIT
    idle_wheel_limit: int = defaults.IDLE_WHEEL_LIMIT
    default_axles: int = defaults.DEFAULT_AXLES
    derail_mass_min_kilograms: float = defaults.DERAIL_MASS_MIN_KILOGRAMS
    derail_force_min_newtons: float = defaults.DERAIL_FORCE_MIN_NEWTONS
    non_operative_brake_systems: Tuple[str, ...] = field(
        default_factory=lambda: defaults.NON_OPERATIVE_BRAKE_SYSTEMS
    )


@dataclass(frozen=True)
class UnitContribution:
    """
    What one resolved unit adds to the consist totals.

    `is_engine` is the confirmed role: a declared engine that turns out to be a
    driving trailer has `is_engine=False` and `counts_as_wagon=True`.
    `num_axles` is the unit's own axle count; `counted_axles` is what it adds to
    the consist total (zero for EOT devices and placeholders).
    """

    is_engine: bool
    counts_as_wagon: bool
    mass_kilograms: float
    length_meters: float
    trailing_mass_kilograms: float
    num_axles: int
    counted_axles: int
    pwr_max_watts: float = 0.0
    force_max_newtons: float = 0.0
    force_max_continuous_newtons: float = 0.0
    force_dyn_brake_max_newtons: float = 0.0
    force_brake_max_newtons: float = 0.0
    operative_brake: bool = False
    coupler_strength_newtons: Optional[float] = None
    derail_force_newtons: Optional[float] = None


class UnitClassifier:
    def __init__(self, config: Optional[ClassifierConfig] = None):
        self.config = config if config is not None else ClassifierConfig()

    def is_placeholder(self, entry: MembershipEntry, record: PhysicalRecord) -> bool:
        """EOT devices and very short units are legacy placeholders, not real cars."""
        return entry.is_eot or record.length_meters <= self.config.placeholder_length_meters

    def drive_axles(self, engine: EngineParams) -> int:
        # see MSTSLocomotive.Initialize()
        if engine.num_drive_axles != 0:
            return engine.num_drive_axles
        if 0 < engine.num_eng_wheels < self.config.drive_wheel_limit:
            return engine.num_eng_wheels
        return self.config.default_axles

    def idle_axles(self, entry: MembershipEntry, record: PhysicalRecord) -> int:
        # see MSTSWagon.LoadFromWagFile()
        if record.num_wag_axles != 0 or entry.is_engine:
            return record.num_wag_axles
        if 0 < record.num_wag_wheels < self.config.idle_wheel_limit:
            return record.num_wag_wheels
        return self.config.default_axles

    def has_operative_brake(self, record: PhysicalRecord) -> bool:
        if record.force_brake_max_newtons <= 0.0 or record.brake_system_type is None:
            return False
        return not any(
            brake_type in record.brake_system_type
            for brake_type in self.config.non_operative_brake_systems
        )

    def derail_force(self, mass_kilograms: float, num_axles: int) -> Optional[float]:
        """
        Static vertical wheel load, used as the derailment threshold.
        Returns `None` for light units and degenerate results.
        """
        if num_axles <= 0 or mass_kilograms <= self.config.derail_mass_min_kilograms:
            return None
        force = mass_kilograms / num_axles / 2.0 * defaults.GRAVITATIONAL_ACCELERATION_MPS2
        if force <= self.config.derail_force_min_newtons:
            return None
        return force

    def classify(self, entry: MembershipEntry, record: PhysicalRecord) -> UnitContribution:
        placeholder = self.is_placeholder(entry, record)

        is_engine = False
        counts_as_wagon = False
        trailing_mass_kilograms = 0.0
        operative_brake = False
        num_drive_axles = 0
        engine_totals = {}
        sub_type = record.wagon_type

        if entry.is_engine:
            engine = record.engine if record.engine is not None else EngineParams()
            sub_type = engine.engine_type
            num_drive_axles = self.drive_axles(engine)
            if engine.force_max_newtons > self.config.cab_car_force_max_newtons:
                is_engine = True
                engine_totals = dict(
                    pwr_max_watts=engine.pwr_max_watts,
                    force_max_newtons=engine.force_max_newtons,
                    force_max_continuous_newtons=(
                        engine.force_max_continuous_newtons
                        if engine.force_max_continuous_newtons > 0.0
                        else engine.force_max_newtons
                    ),
                    force_dyn_brake_max_newtons=engine.force_dyn_brake_max_newtons,
                )
            else:
                # driving trailer / cab-car
                counts_as_wagon = True
                trailing_mass_kilograms = record.mass_kilograms
        elif not placeholder:
            counts_as_wagon = True
            trailing_mass_kilograms = record.mass_kilograms
            operative_brake = self.has_operative_brake(record)

        num_idle_axles = self.idle_axles(entry, record)

        # correction for steam engines; see TrainCar.Update()
        # only true when no idle axles are declared
        if sub_type == defaults.STEAM_ENGINE_TYPE and num_drive_axles >= (
            num_drive_axles + num_idle_axles
        ):
            num_drive_axles //= 2

        num_axles = num_drive_axles + num_idle_axles

        return UnitContribution(
            is_engine=is_engine,
            counts_as_wagon=counts_as_wagon,
            mass_kilograms=record.mass_kilograms,
            length_meters=record.length_meters,
            trailing_mass_kilograms=trailing_mass_kilograms,
            num_axles=num_axles,
            counted_axles=0 if placeholder else num_axles,
            force_brake_max_newtons=record.force_brake_max_newtons,
            operative_brake=operative_brake,
            coupler_strength_newtons=record.coupler_strength_min_newtons,
            derail_force_newtons=(
                None if placeholder else self.derail_force(record.mass_kilograms, num_axles)
            ),
            **engine_totals,
        )
