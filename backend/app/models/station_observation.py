# backend/app/models/station_observation.py
from sqlalchemy import Column, String, Float

from backend.app.core.config import OBSERVATION_TABLE
from backend.app.db.session import Base

class StationObservation(Base):
    __tablename__ = OBSERVATION_TABLE # One row per (station, provider timestamp)

    # Composite natural key; a re-polled observation collides here and is ignored
    station_id = Column(String(20), primary_key=True)
    timestamp_UTC = Column(String(40), primary_key=True) # ISO-8601 string exactly as the provider sent it

    # Absent readings are stored as -999.99, never NULL
    temperature_C = Column(Float)
    temperature_F = Column(Float)
    dewpoint_C = Column(Float)
    dewpoint_F = Column(Float)
    description = Column(String(80)) # e.g. 'Mostly Cloudy'
    wind_dir = Column(Float) # degrees
    wind_spd_km_h = Column(Float)
    wind_spd_mi_h = Column(Float)
    wind_gust_km_h = Column(Float)
    wind_gust_mi_h = Column(Float)
    baro_pres_pa = Column(Float)
    baro_pres_inHg = Column(Float)
    rel_humidity = Column(Float) # percent

    def __repr__(self):
        return (
            f"<StationObservation(station_id='{self.station_id}', "
            f"time='{self.timestamp_UTC}', temp={self.temperature_C}°C)>"
        )
