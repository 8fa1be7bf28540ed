# backend/app/services/station.py
import logging

from backend.app.schemas.weather_records import ObservationRecord, StationRecord
from backend.app.services import normalizer
from backend.app.services.errors import (
    BodyReadError,
    MetadataParseError,
    ObservationBodyError,
    ObservationParseError,
    ObservationTransportError,
    TransportError,
)
from backend.app.services.units import feet
from backend.app.services.weather_gov_client import WeatherGovClient

logger = logging.getLogger(__name__)


class Station:
    """
    One configured weather.gov station.

    Holds the station's identity, its two endpoint URLs and whatever metadata
    the last metadata fetch produced. Name and position start out at their
    defaults ('' and 0.0) until fetch_metadata() succeeds.
    """

    def __init__(self, identifier: str, stations_url: str):
        self._identifier = identifier
        self._metadata_url = f"{stations_url}{identifier}"
        self._observation_url = f"{self._metadata_url}/observations/latest"

        self.name = ""
        self.latitude = 0.0
        self.longitude = 0.0
        self.elevation_meters = 0.0

        # Last payloads as received, kept for troubleshooting
        self.last_raw_metadata_json = ""
        self.last_raw_observation_json = ""

    @property
    def identifier(self) -> str:
        return self._identifier

    @property
    def metadata_url(self) -> str:
        return self._metadata_url

    @property
    def observation_url(self) -> str:
        return self._observation_url

    @property
    def elevation_feet(self) -> float:
        return feet(self.elevation_meters)

    def __repr__(self):
        return f"<Station(identifier='{self.identifier}', name='{self.name}')>"

    def to_station_record(self) -> StationRecord:
        return StationRecord(
            call_id=self.identifier,
            name=self.name,
            latitude_deg=self.latitude,
            longitude_deg=self.longitude,
            elevation_m=self.elevation_meters,
            url=self.metadata_url,
        )

    def fetch_metadata(self, client: WeatherGovClient) -> StationRecord:
        """
        Fetches station metadata and replaces name, position and elevation.

        Raises AcquisitionError (state untouched) if the request fails and
        MetadataParseError if the body is not JSON.
        """
        raw = client.get(self.metadata_url)
        self.last_raw_metadata_json = raw

        try:
            doc = normalizer.parse_document(raw)
        except ValueError as e:
            raise MetadataParseError(self.identifier, f"Station metadata is not valid JSON: {e}") from e

        name, used_fallback = normalizer.station_name(doc, self.identifier)
        lat = normalizer.latitude(doc)
        lon = normalizer.longitude(doc)
        elevation = normalizer.elevation_meters(doc)

        if used_fallback:
            logger.warning("Station %s: 'properties.name' missing, using the identifier as its name.", self.identifier)
        # 0.0 is also what a missing coordinate turns into, so it cannot be trusted either way
        if lat == 0.0:
            logger.warning("Station %s: latitude parsed as 0.0, coordinate may be missing.", self.identifier)
        if lon == 0.0:
            logger.warning("Station %s: longitude parsed as 0.0, coordinate may be missing.", self.identifier)

        self.name, self.latitude, self.longitude, self.elevation_meters = name, lat, lon, elevation

        logger.info(
            "Station %s metadata: name='%s' lat=%s lon=%s elevation=%.1fm (%.1fft)",
            self.identifier, self.name, self.latitude, self.longitude,
            self.elevation_meters, self.elevation_feet,
        )
        return self.to_station_record()

    def fetch_latest_observation(self, client: WeatherGovClient) -> ObservationRecord:
        """
        Fetches the latest observation for this station.
        Every failure is raised as an ObservationError subclass; none are fatal.
        """
        try:
            raw = client.get(self.observation_url)
        except TransportError as e:
            raise ObservationTransportError(self.identifier, str(e)) from e
        except BodyReadError as e:
            raise ObservationBodyError(self.identifier, str(e)) from e
        self.last_raw_observation_json = raw

        try:
            doc = normalizer.parse_document(raw)
        except ValueError as e:
            raise ObservationParseError(self.identifier, f"Observation is not valid JSON: {e}") from e

        readings = normalizer.observation_readings(doc, self.identifier)
        missing = readings.missing_fields()
        if missing:
            logger.warning("Station %s: observation missing %s, stored as defaults.", self.identifier, ", ".join(missing))
        return readings.to_record()
