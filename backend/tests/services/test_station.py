# backend/tests/services/test_station.py
import logging
from unittest.mock import MagicMock, patch

import pytest

from backend.app.services.errors import (
    BodyReadError,
    MetadataParseError,
    ObservationBodyError,
    ObservationError,
    ObservationParseError,
    ObservationTransportError,
    TransportError,
    FatalCollectorError,
)
from backend.app.services.station import Station
from backend.app.services.units import MISSING_VALUE
from backend.app.services.weather_gov_client import WeatherGovClient

BASE_URL = "https://api.example/stations/"


@pytest.fixture
def mock_client():
    return MagicMock(spec=WeatherGovClient)


def test_urls_derived_from_identifier():
    station = Station("KXYZ0", BASE_URL)
    assert station.identifier == "KXYZ0"
    assert station.metadata_url == "https://api.example/stations/KXYZ0"
    assert station.observation_url == "https://api.example/stations/KXYZ0/observations/latest"


def test_identifier_cannot_be_reassigned():
    station = Station("KXYZ0", BASE_URL)
    with pytest.raises(AttributeError):
        station.identifier = "KABC"


def test_defaults_before_metadata_fetch():
    station = Station("KXYZ0", BASE_URL)
    assert station.name == ""
    assert station.latitude == 0.0
    assert station.longitude == 0.0
    assert station.elevation_meters == 0.0
    assert station.elevation_feet == 0.0
    assert station.last_raw_metadata_json == ""
    assert station.last_raw_observation_json == ""


def test_elevation_feet_follows_meters():
    station = Station("KXYZ0", BASE_URL)
    station.elevation_meters = 100.0
    assert station.elevation_feet == pytest.approx(328.084)
    station.elevation_meters = 1.0
    assert station.elevation_feet == pytest.approx(3.28084)


@patch('requests.get')
def test_metadata_end_to_end(mock_requests_get, make_response):
    metadata = (
        '{"properties":{"name":"Test Site"},"geometry":{"coordinates":[-71.05,42.36]},'
        '"properties":{"elevation":{"value":10.0}}}'
    )
    mock_requests_get.return_value = make_response(metadata)
    station = Station("KXYZ0", BASE_URL)

    record = station.fetch_metadata(WeatherGovClient(user_agent="test-agent/1.0"))

    assert mock_requests_get.call_args[0][0] == "https://api.example/stations/KXYZ0"
    assert record.call_id == "KXYZ0"
    assert record.name == "Test Site"
    assert record.latitude_deg == 42.36
    assert record.longitude_deg == -71.05
    assert record.elevation_m == 10.0
    assert record.url == "https://api.example/stations/KXYZ0"
    assert station.elevation_feet == pytest.approx(32.8084)
    assert station.last_raw_metadata_json == metadata


def test_metadata_fetch_populates_station(mock_client, station_metadata_json):
    mock_client.get.return_value = station_metadata_json
    station = Station("KBOS", "https://api.weather.gov/stations/")

    station.fetch_metadata(mock_client)

    mock_client.get.assert_called_once_with("https://api.weather.gov/stations/KBOS")
    assert station.name == "Boston, Logan International Airport"
    assert station.latitude == 42.3606
    assert station.longitude == -71.0097
    assert station.elevation_meters == 6.096


def test_metadata_without_name_uses_identifier_and_warns(mock_client, caplog):
    mock_client.get.return_value = '{"geometry": {"coordinates": [-71.0, 42.0]}}'
    station = Station("KXYZ0", BASE_URL)

    with caplog.at_level(logging.WARNING):
        record = station.fetch_metadata(mock_client)

    assert record.name == "KXYZ0"
    assert "properties.name" in caplog.text


def test_true_zero_coordinates_still_warn(mock_client, caplog):
    # A station really on the equator/prime meridian is indistinguishable from
    # a missing coordinate; both are kept as 0.0 and both warn.
    mock_client.get.return_value = '{"properties": {"name": "Null Island"}, "geometry": {"coordinates": [0.0, 0.0]}}'
    station = Station("KNUL", BASE_URL)

    with caplog.at_level(logging.WARNING):
        record = station.fetch_metadata(mock_client)

    assert record.latitude_deg == 0.0
    assert record.longitude_deg == 0.0
    assert "latitude parsed as 0.0" in caplog.text
    assert "longitude parsed as 0.0" in caplog.text


def test_metadata_refetch_replaces_all_fields(mock_client, station_metadata_json):
    station = Station("KBOS", BASE_URL)
    mock_client.get.return_value = station_metadata_json
    station.fetch_metadata(mock_client)

    mock_client.get.return_value = "{}"
    station.fetch_metadata(mock_client)

    assert station.name == "KBOS"
    assert station.latitude == 0.0
    assert station.longitude == 0.0
    assert station.elevation_meters == 0.0


@pytest.mark.parametrize("error", [TransportError(BASE_URL, "down"), BodyReadError(BASE_URL, "HTTP 500", 500)])
def test_metadata_acquisition_failure_leaves_state_unchanged(mock_client, station_metadata_json, error):
    station = Station("KBOS", BASE_URL)
    mock_client.get.return_value = station_metadata_json
    station.fetch_metadata(mock_client)

    mock_client.get.side_effect = error
    with pytest.raises(type(error)):
        station.fetch_metadata(mock_client)

    assert station.name == "Boston, Logan International Airport"
    assert station.latitude == 42.3606
    assert station.last_raw_metadata_json == station_metadata_json


def test_metadata_with_oversized_number_defaults_instead_of_raising(mock_client):
    huge = "1" + "0" * 400
    mock_client.get.return_value = (
        '{"properties": {"name": "Test Site", "elevation": {"value": ' + huge + '}},'
        ' "geometry": {"coordinates": [-71.05, 42.36]}}'
    )
    station = Station("KXYZ0", BASE_URL)

    record = station.fetch_metadata(mock_client)

    assert record.name == "Test Site"
    assert record.elevation_m == 0.0
    assert record.latitude_deg == 42.36
    assert station.elevation_feet == 0.0


def test_metadata_parse_failure_is_fatal(mock_client):
    mock_client.get.return_value = "<html>Bad Gateway</html>"
    station = Station("KBOS", BASE_URL)

    with pytest.raises(MetadataParseError) as exc_info:
        station.fetch_metadata(mock_client)

    assert isinstance(exc_info.value, FatalCollectorError)
    assert exc_info.value.station_id == "KBOS"
    assert station.name == ""
    assert station.last_raw_metadata_json == "<html>Bad Gateway</html>"


def test_latest_observation(mock_client, observation_json):
    mock_client.get.return_value = observation_json
    station = Station("KBOS", "https://api.weather.gov/stations/")

    record = station.fetch_latest_observation(mock_client)

    mock_client.get.assert_called_once_with("https://api.weather.gov/stations/KBOS/observations/latest")
    assert record.station_id == "KBOS"
    assert record.timestamp_UTC == "2024-05-01T14:54:00+00:00"
    assert record.temperature_F == 59.0
    assert station.last_raw_observation_json == observation_json


def test_observation_missing_fields_warn_once(mock_client, caplog):
    mock_client.get.return_value = '{"properties": {"temperature": {"value": 15.0}}}'
    station = Station("KXYZ0", BASE_URL)

    with caplog.at_level(logging.WARNING):
        record = station.fetch_latest_observation(mock_client)

    assert record.temperature_C == 15.0
    assert record.temperature_F == 59.0
    assert record.wind_gust_km_h == MISSING_VALUE
    assert record.wind_gust_mi_h == MISSING_VALUE
    warnings = [r for r in caplog.records if r.levelno == logging.WARNING]
    assert len(warnings) == 1
    assert "wind_gust_km_h" in warnings[0].getMessage()


@pytest.mark.parametrize("client_error,expected,kind", [
    (TransportError(BASE_URL, "timed out"), ObservationTransportError, "transport"),
    (BodyReadError(BASE_URL, "HTTP 404", 404), ObservationBodyError, "body"),
])
def test_observation_acquisition_errors_are_typed(mock_client, client_error, expected, kind):
    mock_client.get.side_effect = client_error
    station = Station("KBOS", BASE_URL)

    with pytest.raises(expected) as exc_info:
        station.fetch_latest_observation(mock_client)

    assert exc_info.value.kind == kind
    assert exc_info.value.station_id == "KBOS"
    assert station.last_raw_observation_json == ""


def test_observation_parse_error_is_not_fatal(mock_client):
    mock_client.get.return_value = '{"properties": '
    station = Station("KBOS", BASE_URL)

    with pytest.raises(ObservationParseError) as exc_info:
        station.fetch_latest_observation(mock_client)

    assert isinstance(exc_info.value, ObservationError)
    assert not isinstance(exc_info.value, FatalCollectorError)
    assert station.last_raw_observation_json == '{"properties": '
