# backend/app/models/weather_station.py
from sqlalchemy import Column, String, Float

from backend.app.core.config import STATION_TABLE
from backend.app.db.session import Base

class WeatherStation(Base):
    __tablename__ = STATION_TABLE # Static station metadata, one row per configured station

    call_id = Column(String(5), primary_key=True) # Provider station code, e.g. 'KBOS'
    name = Column(String(80), nullable=True)
    latitude_deg = Column(Float, nullable=True)
    longitude_deg = Column(Float, nullable=True)
    elevation_m = Column(Float, nullable=True)
    url = Column(String(255), nullable=True) # Metadata endpoint the row was fetched from

    def __repr__(self):
        return (
            f"<WeatherStation(call_id='{self.call_id}', name='{self.name}', "
            f"lat={self.latitude_deg}, lon={self.longitude_deg}, elev={self.elevation_m}m)>"
        )
