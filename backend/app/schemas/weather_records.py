# backend/app/schemas/weather_records.py
from pydantic import BaseModel, ConfigDict, Field

from backend.app.services.units import (
    MISSING_VALUE,
    fahrenheit,
    inches_of_mercury,
    miles_per_hour,
)


# --- Pydantic Models for persisted records ---
# These mirror the WeatherStation / StationObservation SQLAlchemy models and are
# what the collector hands to the storage layer and what the query API returns.
class StationRecord(BaseModel):
    model_config = ConfigDict(frozen=True, from_attributes=True)

    call_id: str = Field(..., min_length=1)
    name: str
    latitude_deg: float
    longitude_deg: float
    elevation_m: float
    url: str


class ObservationRecord(BaseModel):
    model_config = ConfigDict(frozen=True, from_attributes=True)

    station_id: str
    timestamp_UTC: str = "" # empty when the provider omitted it

    temperature_C: float = MISSING_VALUE
    temperature_F: float = MISSING_VALUE
    dewpoint_C: float = MISSING_VALUE
    dewpoint_F: float = MISSING_VALUE
    description: str = ""
    wind_dir: float = MISSING_VALUE
    wind_spd_km_h: float = MISSING_VALUE
    wind_spd_mi_h: float = MISSING_VALUE
    wind_gust_km_h: float = MISSING_VALUE
    wind_gust_mi_h: float = MISSING_VALUE
    baro_pres_pa: float = MISSING_VALUE
    baro_pres_inHg: float = MISSING_VALUE
    rel_humidity: float = MISSING_VALUE


class ObservationReadings(BaseModel):
    """
    Metric readings as parsed from the provider, None where absent.
    Sentinels only appear once this is turned into an ObservationRecord.
    """
    model_config = ConfigDict(frozen=True)

    station_id: str
    timestamp_UTC: str | None = None
    description: str | None = None
    temperature_C: float | None = None
    dewpoint_C: float | None = None
    wind_dir: float | None = None
    wind_spd_km_h: float | None = None
    wind_gust_km_h: float | None = None
    baro_pres_pa: float | None = None
    rel_humidity: float | None = None

    def missing_fields(self) -> list[str]:
        return [name for name, value in self if value is None]

    def to_record(self) -> ObservationRecord:
        def reading(value: float | None) -> float:
            return MISSING_VALUE if value is None else value

        temperature_c = reading(self.temperature_C)
        dewpoint_c = reading(self.dewpoint_C)
        wind_speed = reading(self.wind_spd_km_h)
        wind_gust = reading(self.wind_gust_km_h)
        pressure = reading(self.baro_pres_pa)

        return ObservationRecord(
            station_id=self.station_id,
            timestamp_UTC=self.timestamp_UTC or "",
            temperature_C=temperature_c,
            temperature_F=fahrenheit(temperature_c),
            dewpoint_C=dewpoint_c,
            dewpoint_F=fahrenheit(dewpoint_c),
            description=self.description or "",
            wind_dir=reading(self.wind_dir),
            wind_spd_km_h=wind_speed,
            wind_spd_mi_h=miles_per_hour(wind_speed),
            wind_gust_km_h=wind_gust,
            wind_gust_mi_h=miles_per_hour(wind_gust),
            baro_pres_pa=pressure,
            baro_pres_inHg=inches_of_mercury(pressure),
            rel_humidity=reading(self.rel_humidity),
        )
