# backend/app/services/data_collectors/station_observation_collector.py
"""
Polls api.weather.gov for the latest observation of every configured station
and stores each one once.

Run as:  python -m backend.app.services.data_collectors.station_observation_collector
"""
import enum
import logging
import sys
import time
from dataclasses import dataclass

from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from backend.app.core.config import POLL_INTERVAL_SECONDS, STATION_IDS, STATIONS_BASE_URL
from backend.app.core.log_setup import configure_logging
from backend.app.db.session import SessionLocal, engine as default_engine
from backend.app.services.errors import (
    AcquisitionError,
    BootstrapError,
    ConfigurationError,
    FatalCollectorError,
    ObservationError,
    StorageError,
)
from backend.app.services.station import Station
from backend.app.services.storage import (
    InsertOutcome,
    ensure_tables_exist,
    insert_observation,
    upsert_station,
)
from backend.app.services.weather_gov_client import WeatherGovClient

logger = logging.getLogger(__name__)


class CollectorState(str, enum.Enum):
    BOOTSTRAPPING = "bootstrapping"
    METADATA_PASS = "metadata_pass"
    STEADY_POLLING = "steady_polling"


@dataclass
class TickSummary:
    inserted: int = 0
    duplicates: int = 0
    fetch_failures: int = 0
    storage_failures: int = 0


class StationObservationCollector:
    """
    Bootstraps storage, stores every station's metadata once, then polls the
    latest observation of each station forever.

    Stations are visited one after another. A failure for one station is
    logged and the pass moves on; the next tick is that station's retry.
    The interval is slept after a pass completes, so slow passes push the
    following tick back.
    """

    def __init__(
        self,
        station_ids: list[str],
        stations_url: str = STATIONS_BASE_URL,
        interval_seconds: int = POLL_INTERVAL_SECONDS,
        client: WeatherGovClient | None = None,
        session_factory: sessionmaker = SessionLocal,
        engine: Engine = default_engine,
        sleep=time.sleep,
    ):
        self.station_ids = list(station_ids)
        self.stations_url = stations_url
        self.interval_seconds = interval_seconds
        self.client = client or WeatherGovClient()
        self.session_factory = session_factory
        self.engine = engine
        self.sleep = sleep

        self.state = CollectorState.BOOTSTRAPPING
        self.stations: list[Station] = []
        self.ticks = 0

    def bootstrap(self) -> None:
        self.state = CollectorState.BOOTSTRAPPING
        self.stations = [Station(station_id, self.stations_url) for station_id in self.station_ids]
        logger.info("Configured %d station(s): %s", len(self.stations), ", ".join(self.station_ids))
        try:
            ensure_tables_exist(self.engine)
        except StorageError as e:
            raise BootstrapError(f"Storage is not available: {e}") from e

    def run_metadata_pass(self) -> int:
        """
        Fetches and stores metadata for every station once.
        Returns the number of stations stored. MetadataParseError propagates.
        """
        self.state = CollectorState.METADATA_PASS
        stored = 0
        db: Session = self.session_factory()
        try:
            for station in self.stations:
                try:
                    record = station.fetch_metadata(self.client)
                except AcquisitionError as e:
                    logger.error("Station %s: metadata fetch failed, not stored: %s", station.identifier, e)
                    continue
                try:
                    upsert_station(db, record)
                    stored += 1
                except StorageError as e:
                    logger.error("Station %s: %s", station.identifier, e)
        finally:
            db.close()
        logger.info("Metadata pass complete: %d of %d station(s) stored.", stored, len(self.stations))
        return stored

    def _poll_station(self, db: Session, station: Station, summary: TickSummary) -> None:
        try:
            record = station.fetch_latest_observation(self.client)
        except ObservationError as e:
            summary.fetch_failures += 1
            logger.error("Station %s: %s error, skipping this tick: %s", station.identifier, e.kind, e)
            return

        try:
            outcome = insert_observation(db, record)
        except StorageError as e:
            summary.storage_failures += 1
            logger.error("Station %s: %s", station.identifier, e)
            return

        if outcome is InsertOutcome.DUPLICATE:
            summary.duplicates += 1
            logger.info("Station %s: observation %s already stored, ignored duplicate.", station.identifier, record.timestamp_UTC)
        else:
            summary.inserted += 1
            logger.info(
                "Station %s: stored observation %s (temperature_C=%s, %s).",
                station.identifier, record.timestamp_UTC, record.temperature_C, record.description or "no description",
            )

    def poll_once(self) -> TickSummary:
        """Fetches and stores the latest observation for every station, in order."""
        self.state = CollectorState.STEADY_POLLING
        summary = TickSummary()
        db: Session = self.session_factory()
        try:
            for station in self.stations:
                try:
                    self._poll_station(db, station, summary)
                except Exception:
                    # One station's surprise must not cost the others their poll
                    summary.fetch_failures += 1
                    logger.exception("Station %s: unexpected error while polling.", station.identifier)
        finally:
            db.close()
        self.ticks += 1
        logger.info(
            "Tick %d: %d new, %d duplicate, %d fetch failure(s), %d storage failure(s).",
            self.ticks, summary.inserted, summary.duplicates, summary.fetch_failures, summary.storage_failures,
        )
        return summary

    def run(self, max_ticks: int | None = None) -> None:
        """
        Bootstraps, runs the metadata pass, then polls until the process is
        stopped (or max_ticks passes have run).
        """
        self.bootstrap()
        self.run_metadata_pass()
        while max_ticks is None or self.ticks < max_ticks:
            self.poll_once()
            if max_ticks is not None and self.ticks >= max_ticks:
                break
            logger.debug("Sleeping %d seconds until the next tick.", self.interval_seconds)
            self.sleep(self.interval_seconds)


def main() -> int:
    configure_logging()

    try:
        if not STATION_IDS:
            raise ConfigurationError("STATION_IDS is not set. Aborting station observation collection.")
        logger.info(
            "Starting station observation collector (every %d s from %s).",
            POLL_INTERVAL_SECONDS, STATIONS_BASE_URL,
        )
        collector = StationObservationCollector(STATION_IDS)
        collector.run()
    except FatalCollectorError as e:
        logger.critical("Fatal: %s", e)
        return 1
    except KeyboardInterrupt:
        logger.info("Interrupted, stopping.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
