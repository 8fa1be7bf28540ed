# backend/app/services/units.py
"""Unit conversions for observation fields.

Every conversion passes the missing-value sentinel through untouched, so a
stored -999.99 never turns into a plausible-looking converted number.
"""

MISSING_VALUE = -999.99

FEET_PER_METER = 3.28084
MPH_PER_KMH = 0.6213712
INHG_PER_PA = 0.00029529983071445


def is_missing(value: float | None) -> bool:
    return value is None or value == MISSING_VALUE


def fahrenheit(celsius: float) -> float:
    if is_missing(celsius):
        return MISSING_VALUE
    return celsius * 9.0 / 5.0 + 32.0


def miles_per_hour(km_per_hour: float) -> float:
    if is_missing(km_per_hour):
        return MISSING_VALUE
    return km_per_hour * MPH_PER_KMH


def inches_of_mercury(pascals: float) -> float:
    if is_missing(pascals):
        return MISSING_VALUE
    return pascals * INHG_PER_PA


def feet(meters: float) -> float:
    # Elevation defaults to 0.0, not the sentinel, so no pass-through here
    return meters * FEET_PER_METER
