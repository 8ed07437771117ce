"""Module for general functions and classes."""

from typing import Union
import logging

MPS_PER_MPH = 1.0 / 2.237
KPH_PER_MPS = 3.6
KG_PER_LB = 1.0 / 2.20462
W_PER_HP = 745.7
KG_PER_TON = KG_PER_LB * 2000.0
KG_PER_TONNE = 1.0e3
N_PER_KN = 1.0e3


def hp_per_ton(pwr_watts: float, mass_kg: float) -> float:
    """
    Returns power-to-weight ratio in horsepower per short ton.
    Returns 0.0 for a massless consist.
    """
    if mass_kg <= 0.0:
        return 0.0
    return (pwr_watts / W_PER_HP) / (mass_kg / KG_PER_TON)


def set_log_level(level: Union[str, int]):
    # Map string name to logging level
    if isinstance(level, str):
        level = logging._nameToLevel[level]
    # Set logging level
    logging.getLogger("").setLevel(level)


def disable_logging():
    set_log_level(logging.CRITICAL + 1)


def enable_logging():
    set_log_level(logging.WARNING)
