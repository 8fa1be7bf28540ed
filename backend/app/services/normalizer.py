# backend/app/services/normalizer.py
"""
Turns api.weather.gov station and observation documents into records.

Nothing in here raises on a malformed document: every field has a default.
  - station name     -> the station identifier (reported as a fallback)
  - latitude/longitude/elevation -> 0.0
  - numeric observation readings -> None internally, -999.99 in the record
  - timestamp / description      -> ''
"""
import json
import math
from typing import Any

from backend.app.schemas.weather_records import ObservationReadings, ObservationRecord

# Provider property key -> ObservationReadings field, for '{"value": ...}' measurements
MEASUREMENT_FIELDS = {
    "temperature": "temperature_C",
    "dewpoint": "dewpoint_C",
    "windDirection": "wind_dir",
    "windSpeed": "wind_spd_km_h",
    "windGust": "wind_gust_km_h",
    "barometricPressure": "baro_pres_pa",
    "relativeHumidity": "rel_humidity",
}

# Provider property key -> ObservationReadings field, for plain string properties
SCALAR_FIELDS = {
    "timestamp": "timestamp_UTC",
    "textDescription": "description",
}


def _merge_pairs(pairs: list[tuple[str, Any]]) -> dict:
    # Repeated keys: objects are merged, anything else is last-wins
    merged: dict = {}
    for key, value in pairs:
        existing = merged.get(key)
        if isinstance(existing, dict) and isinstance(value, dict):
            merged[key] = _deep_merge(existing, value)
        else:
            merged[key] = value
    return merged


def _deep_merge(left: dict, right: dict) -> dict:
    merged = dict(left)
    for key, value in right.items():
        if isinstance(merged.get(key), dict) and isinstance(value, dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def parse_document(text: str) -> Any:
    """
    json.loads with repeated object keys merged rather than overwritten.
    Raises ValueError (json.JSONDecodeError) on malformed input.
    """
    return json.loads(text, object_pairs_hook=_merge_pairs)


def _as_float(value: Any) -> float | None:
    """A JSON number as a finite float; None for anything else, including overflow."""
    if not isinstance(value, (int, float)) or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except OverflowError:
        return None
    return number if math.isfinite(number) else None


def _child(node: Any, key: str) -> Any:
    if isinstance(node, dict):
        return node.get(key)
    return None


def _properties(doc: Any) -> Any:
    return _child(doc, "properties")


def _coordinate(doc: Any, index: int) -> float:
    coordinates = _child(_child(doc, "geometry"), "coordinates")
    if isinstance(coordinates, list) and len(coordinates) > index:
        number = _as_float(coordinates[index])
        if number is not None:
            return number
    return 0.0


# --- Station metadata ---
def station_name(doc: Any, fallback: str) -> tuple[str, bool]:
    """Returns (name, used_fallback)."""
    name = _child(_properties(doc), "name")
    if isinstance(name, str):
        return name, False
    return fallback, True


def longitude(doc: Any) -> float:
    return _coordinate(doc, 0)


def latitude(doc: Any) -> float:
    return _coordinate(doc, 1)


def elevation_meters(doc: Any) -> float:
    value = _child(_child(_properties(doc), "elevation"), "value")
    number = _as_float(value)
    return 0.0 if number is None else number


# --- Observations ---
def measurement_value(doc: Any, key: str) -> float | None:
    """properties.<key>.value as a float, or None when absent/null/non-numeric."""
    value = _child(_child(_properties(doc), key), "value")
    return _as_float(value)


def scalar_text(doc: Any, key: str) -> str | None:
    value = _child(_properties(doc), key)
    return value if isinstance(value, str) else None


def observation_readings(doc: Any, station_id: str) -> ObservationReadings:
    data_dict: dict[str, Any] = {"station_id": station_id}
    for key, field in MEASUREMENT_FIELDS.items():
        data_dict[field] = measurement_value(doc, key)
    for key, field in SCALAR_FIELDS.items():
        data_dict[field] = scalar_text(doc, key)
    return ObservationReadings(**data_dict)


def normalize_observation(doc: Any, station_id: str) -> ObservationRecord:
    return observation_readings(doc, station_id).to_record()


def missing_observation_fields(doc: Any) -> list[str]:
    """Record field names that will fall back to a default for this document."""
    return observation_readings(doc, "").missing_fields()
