"""
Batch helpers for summarizing many consists at once.
"""
from typing import Iterable, List, Optional
import logging

import polars as pl

from railconsist import defaults, utilities
from railconsist.classifier import ClassifierConfig
from railconsist.consist import Consist
from railconsist.definitions import ConsistDefinition
from railconsist.resolvers import CachedResolver, RecordResolver

log = logging.getLogger(__name__)

summary_schema = {
    "Name": pl.Utf8,
    "Engines": pl.Utf8,
    "Cars": pl.Int64,
    "Max_Speed_KPH": pl.Float64,
    "Length_M": pl.Float64,
    "Mass_T": pl.Float64,
    "Trailing_Mass_T": pl.Float64,
    "Axles": pl.Int64,
    "Max_Power_KW": pl.Float64,
    "Max_Tractive_Force_KN": pl.Float64,
    "Max_Continuous_Tractive_Force_KN": pl.Float64,
    "Max_Dynamic_Brake_Force_KN": pl.Float64,
    "Max_Brake_Force_KN": pl.Float64,
    "Operative_Brakes": pl.Int64,
    "HP_Per_Ton": pl.Float64,
    "Min_Coupler_Strength_KN": pl.Float64,
    "Min_Derail_Force_KN": pl.Float64,
    "Unresolved": pl.Int64,
}


def build_consists(
    definitions: Iterable[ConsistDefinition],
    resolver: RecordResolver,
    config: Optional[ClassifierConfig] = None,
) -> List[Consist]:
    """
    Builds every definition against one shared, memoised resolver.
    """
    cached = resolver if isinstance(resolver, CachedResolver) else CachedResolver(resolver)
    consists = [Consist.build(d, cached, config) for d in definitions]
    log.info(f"built {len(consists)} consists")
    return consists


def _kilo(force_newtons: float) -> Optional[float]:
    # minimums nothing contributed to are reported as null
    if force_newtons >= defaults.FORCE_SENTINEL_NEWTONS:
        return None
    return force_newtons / utilities.N_PER_KN


def summarize_consists(consists: Iterable[Consist]) -> pl.DataFrame:
    """
    Returns one row per consist with totals in display units (t, kN, kW, km/h).
    """
    rows = [
        {
            "Name": c.name,
            "Engines": c.num_engines,
            "Cars": int(c.num_cars),
            "Max_Speed_KPH": c.speed_max_meters_per_second * utilities.KPH_PER_MPS,
            "Length_M": c.length_meters,
            "Mass_T": c.mass_kilograms / utilities.KG_PER_TONNE,
            "Trailing_Mass_T": c.trailing_mass_kilograms / utilities.KG_PER_TONNE,
            "Axles": c.num_axles,
            "Max_Power_KW": c.pwr_max_watts / 1.0e3,
            "Max_Tractive_Force_KN": c.force_max_newtons / utilities.N_PER_KN,
            "Max_Continuous_Tractive_Force_KN": c.force_max_continuous_newtons / utilities.N_PER_KN,
            "Max_Dynamic_Brake_Force_KN": c.force_dyn_brake_max_newtons / utilities.N_PER_KN,
            "Max_Brake_Force_KN": c.force_brake_max_newtons / utilities.N_PER_KN,
            "Operative_Brakes": c.num_operative_brakes,
            "HP_Per_Ton": c.hp_per_ton,
            "Min_Coupler_Strength_KN": _kilo(c.coupler_strength_min_newtons),
            "Min_Derail_Force_KN": _kilo(c.derail_force_min_newtons),
            "Unresolved": len(c.unresolved),
        }
        for c in consists
    ]
    return pl.DataFrame(rows, schema=summary_schema)
