# backend/tests/conftest.py
import json
import os
import sys
from unittest.mock import MagicMock

import pytest
import requests
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# Go up to the project root
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..', '..')))

from backend.app.db.session import Base
from backend.app.models.station_observation import StationObservation
from backend.app.models.weather_station import WeatherStation


@pytest.fixture
def sqlite_engine():
    # One shared in-memory database for every session/thread in the test
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine, tables=[WeatherStation.__table__, StationObservation.__table__])
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(sqlite_engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=sqlite_engine)


@pytest.fixture
def db_session(session_factory):
    db = session_factory()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def station_metadata_json():
    # Trimmed api.weather.gov /stations/KBOS response
    return json.dumps({
        "id": "https://api.weather.gov/stations/KBOS",
        "type": "Feature",
        "geometry": {"type": "Point", "coordinates": [-71.0097, 42.3606]},
        "properties": {
            "@id": "https://api.weather.gov/stations/KBOS",
            "elevation": {"unitCode": "wmoUnit:m", "value": 6.096},
            "stationIdentifier": "KBOS",
            "name": "Boston, Logan International Airport",
            "timeZone": "America/New_York",
        },
    })


@pytest.fixture
def observation_json():
    # Trimmed api.weather.gov /stations/KBOS/observations/latest response
    return json.dumps({
        "id": "https://api.weather.gov/stations/KBOS/observations/2024-05-01T14:54:00+00:00",
        "type": "Feature",
        "geometry": {"type": "Point", "coordinates": [-71.0097, 42.3606]},
        "properties": {
            "station": "https://api.weather.gov/stations/KBOS",
            "timestamp": "2024-05-01T14:54:00+00:00",
            "textDescription": "Mostly Cloudy",
            "temperature": {"unitCode": "wmoUnit:degC", "value": 15.0, "qualityControl": "V"},
            "dewpoint": {"unitCode": "wmoUnit:degC", "value": 5.0, "qualityControl": "V"},
            "windDirection": {"unitCode": "wmoUnit:degree_(angle)", "value": 90, "qualityControl": "V"},
            "windSpeed": {"unitCode": "wmoUnit:km_h-1", "value": 20.0, "qualityControl": "V"},
            "windGust": {"unitCode": "wmoUnit:km_h-1", "value": None, "qualityControl": "Z"},
            "barometricPressure": {"unitCode": "wmoUnit:Pa", "value": 101320, "qualityControl": "V"},
            "relativeHumidity": {"unitCode": "wmoUnit:percent", "value": 51.2, "qualityControl": "V"},
        },
    })


@pytest.fixture
def make_response():
    """Factory for requests.Response stand-ins returned by patch('requests.get')."""
    def _make_response(text="", status_code=200):
        mock_response = MagicMock()
        mock_response.status_code = status_code
        mock_response.text = text
        if status_code >= 400:
            mock_response.raise_for_status.side_effect = requests.exceptions.HTTPError(f"{status_code} Error")
        else:
            mock_response.raise_for_status.return_value = None
        return mock_response
    return _make_response
