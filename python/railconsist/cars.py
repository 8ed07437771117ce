from __future__ import annotations
from dataclasses import dataclass
from enum import Enum

from railconsist.records import MembershipEntry


class Direction(Enum):
    FORWARDS = "Forwards"
    BACKWARDS = "Backwards"


@dataclass(frozen=True)
class Car:
    """
    Roster entry for one unit of a consist.

    Fields:
    - `uid`: unit id as a string
    - `name`: `"<folder>/<name>"` of the unit's record
    - `direction`: `Direction.BACKWARDS` when the unit is flipped
    - `is_engine`: declared role
    - `mass_kilograms`: resolved mass, `0.0` if the record could not be resolved
    """

    uid: str
    name: str
    direction: Direction
    is_engine: bool
    mass_kilograms: float


def make_car(entry: MembershipEntry, mass_kilograms: float = 0.0) -> Car:
    return Car(
        uid=str(entry.uid),
        name=entry.reference,
        direction=Direction.BACKWARDS if entry.flip else Direction.FORWARDS,
        is_engine=entry.is_engine,
        mass_kilograms=mass_kilograms,
    )
