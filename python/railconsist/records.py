"""
Rolling-stock references and the physical records they resolve to.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple

from typing_extensions import Self

from railconsist.serde import MalformedDefinition, SerdeAPI


def _number(pydict: Dict, key: str, owner: str, default: Optional[float] = None) -> float:
    value = pydict.get(key, default)
    if value is None:
        raise MalformedDefinition(f"{owner} is missing `{key}`")
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise MalformedDefinition(f"{owner} `{key}` must be a number, got {value!r}")
    return float(value)


def _count(pydict: Dict, key: str, owner: str) -> int:
    value = _number(pydict, key, owner, default=0)
    if value < 0:
        raise MalformedDefinition(f"{owner} `{key}` must not be negative")
    if not value.is_integer():
        raise MalformedDefinition(f"{owner} `{key}` must be a whole number, got {value!r}")
    return int(value)


def _as_mapping(pydict: Any, owner: str) -> Dict:
    if not isinstance(pydict, dict):
        raise MalformedDefinition(f"{owner} must be a mapping, got {type(pydict).__name__}")
    return pydict


@dataclass(frozen=True)
class MembershipEntry(SerdeAPI):
    """
    One physical unit of a consist, in train order.

    Fields:
    - `uid`: unique id of the unit within its consist
    - `folder`, `name`: reference to the unit's record in the trainset
    - `is_engine`: declared role; engines resolve `.eng` records, wagons `.wag`
    - `is_eot`: end-of-train device
    - `flip`: unit is reversed in the consist
    """

    uid: int
    folder: str
    name: str
    is_engine: bool
    is_eot: bool = False
    flip: bool = False

    @property
    def reference(self) -> str:
        return f"{self.folder}/{self.name}"

    @classmethod
    def from_pydict(cls, pydict: Dict) -> Self:
        pydict = _as_mapping(pydict, "membership entry")
        for flag in ("is_engine", "is_eot", "flip"):
            if flag in pydict and not isinstance(pydict[flag], bool):
                raise MalformedDefinition(f"membership entry `{flag}` must be true or false")
        try:
            return cls(
                uid=int(pydict["uid"]),
                folder=str(pydict["folder"]),
                name=str(pydict["name"]),
                is_engine=bool(pydict["is_engine"]),
                is_eot=bool(pydict.get("is_eot", False)),
                flip=bool(pydict.get("flip", False)),
            )
        except KeyError as err:
            raise MalformedDefinition(f"membership entry is missing {err}") from err
        except (TypeError, ValueError) as err:
            raise MalformedDefinition(f"invalid membership entry: {err}") from err


@dataclass(frozen=True)
class EngineParams(SerdeAPI):
    """
    Engine-only part of a physical record.
    """

    pwr_max_watts: float = 0.0
    force_max_newtons: float = 0.0
    force_max_continuous_newtons: float = 0.0
    force_dyn_brake_max_newtons: float = 0.0
    num_drive_axles: int = 0
    num_eng_wheels: int = 0
    engine_type: str = ""

    @classmethod
    def from_pydict(cls, pydict: Dict) -> Self:
        owner = "engine params"
        pydict = _as_mapping(pydict, owner)
        return cls(
            pwr_max_watts=_number(pydict, "pwr_max_watts", owner, 0.0),
            force_max_newtons=_number(pydict, "force_max_newtons", owner, 0.0),
            force_max_continuous_newtons=_number(
                pydict, "force_max_continuous_newtons", owner, 0.0
            ),
            force_dyn_brake_max_newtons=_number(
                pydict, "force_dyn_brake_max_newtons", owner, 0.0
            ),
            num_drive_axles=_count(pydict, "num_drive_axles", owner),
            num_eng_wheels=_count(pydict, "num_eng_wheels", owner),
            engine_type=str(pydict.get("engine_type") or ""),
        )


@dataclass(frozen=True)
class PhysicalRecord(SerdeAPI):
    """
    Static physical characteristics of one engine or wagon.

    Fields:
    - `mass_kilograms`, `length_meters`: unit mass and length
    - `num_wag_axles`, `num_wag_wheels`: declared idle axles and wheels
    - `brake_system_type`: e.g. `"air_single_pipe"`, `"vacuum_piped"`; `None` if undeclared
    - `force_brake_max_newtons`: maximum brake force
    - `coupler_break_newtons`: break thresholds of the unit's couplers
    - `wagon_type`: wagon sub-type string, e.g. `"Freight"`
    - `engine`: engine parameters, `None` for wagons
    """

    mass_kilograms: float
    length_meters: float
    num_wag_axles: int = 0
    num_wag_wheels: int = 0
    brake_system_type: Optional[str] = None
    force_brake_max_newtons: float = 0.0
    coupler_break_newtons: Tuple[float, ...] = field(default_factory=tuple)
    wagon_type: str = ""
    engine: Optional[EngineParams] = None

    @property
    def coupler_strength_min_newtons(self) -> Optional[float]:
        """Weakest coupler break threshold, `None` if the record declares none."""
        if not self.coupler_break_newtons:
            return None
        return min(self.coupler_break_newtons)

    @classmethod
    def from_pydict(cls, pydict: Dict) -> Self:
        owner = "physical record"
        pydict = _as_mapping(pydict, owner)
        mass_kilograms = _number(pydict, "mass_kilograms", owner)
        length_meters = _number(pydict, "length_meters", owner)
        if mass_kilograms < 0.0 or length_meters < 0.0:
            raise MalformedDefinition(f"{owner} mass and length must not be negative")

        couplers = pydict.get("coupler_break_newtons") or []
        if isinstance(couplers, (int, float)):
            couplers = [couplers]
        if not isinstance(couplers, list):
            raise MalformedDefinition(f"{owner} `coupler_break_newtons` must be a list")
        coupler_break_newtons = tuple(
            _number({"value": c}, "value", f"{owner} coupler") for c in couplers
        )

        brake_system_type = pydict.get("brake_system_type")
        engine = pydict.get("engine")
        return cls(
            mass_kilograms=mass_kilograms,
            length_meters=length_meters,
            num_wag_axles=_count(pydict, "num_wag_axles", owner),
            num_wag_wheels=_count(pydict, "num_wag_wheels", owner),
            brake_system_type=None if brake_system_type is None else str(brake_system_type),
            force_brake_max_newtons=_number(pydict, "force_brake_max_newtons", owner, 0.0),
            coupler_break_newtons=coupler_break_newtons,
            wagon_type=str(pydict.get("wagon_type") or ""),
            engine=None if engine is None else EngineParams.from_pydict(engine),
        )


@dataclass(frozen=True)
class NotFound:
    """
    Result of a failed record resolution.

    Fields:
    - `reference`: `"<folder>/<name>"` that could not be resolved
    - `reason`: human readable cause, e.g. missing file or parse error
    """

    reference: str
    reason: str = "not found"
