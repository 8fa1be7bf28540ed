# backend/app/services/storage.py
import enum
import logging

import tenacity
from sqlalchemy import insert
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, OperationalError, SQLAlchemyError
from sqlalchemy.orm import Session

from backend.app.db.session import Base
from backend.app.models.station_observation import StationObservation
from backend.app.models.weather_station import WeatherStation
from backend.app.schemas.weather_records import ObservationRecord, StationRecord
from backend.app.services.errors import StorageError

logger = logging.getLogger(__name__)

POSTGRES_UNIQUE_VIOLATION = "23505"
MYSQL_DUPLICATE_ENTRY = 1062


class InsertOutcome(str, enum.Enum):
    INSERTED = "inserted"
    DUPLICATE = "duplicate"


# --- Tenacity Retry Strategy ---
# Only the startup connection is retried; the database may still be coming up
# next to the collector (e.g. docker-compose).
connect_retry_strategy = tenacity.retry(
    stop=tenacity.stop_after_attempt(5), # 1 original + 4 retries
    wait=tenacity.wait_fixed(2),
    retry=tenacity.retry_if_exception_type(OperationalError),
    before_sleep=tenacity.before_sleep_log(logger, logging.WARNING),
    reraise=True,
)


@connect_retry_strategy
def _create_tables(engine: Engine) -> None:
    Base.metadata.create_all(
        bind=engine,
        tables=[WeatherStation.__table__, StationObservation.__table__],
        checkfirst=True,
    )


def ensure_tables_exist(engine: Engine) -> None:
    """Creates the station and observation tables if missing. Raises StorageError."""
    try:
        _create_tables(engine)
    except SQLAlchemyError as e:
        raise StorageError(f"Could not create tables: {e}") from e
    logger.info(
        "Tables '%s' and '%s' are ready.",
        WeatherStation.__tablename__, StationObservation.__tablename__,
    )


def upsert_station(db: Session, record: StationRecord) -> WeatherStation:
    """Inserts or overwrites the station row keyed on call_id."""
    try:
        existing_station = db.get(WeatherStation, record.call_id)
        station_data = record.model_dump()
        if existing_station:
            for key, value in station_data.items():
                setattr(existing_station, key, value)
            station = existing_station
            logger.info("Updated station row: %s", record.call_id)
        else:
            station = WeatherStation(**station_data)
            db.add(station)
            logger.info("Inserted station row: %s", record.call_id)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        raise StorageError(f"Station upsert failed for {record.call_id}: {e}") from e
    return station


def is_duplicate_key_error(error: IntegrityError) -> bool:
    orig = getattr(error, "orig", None)
    if getattr(orig, "pgcode", None) == POSTGRES_UNIQUE_VIOLATION:
        return True
    if getattr(orig, "sqlstate", None) == POSTGRES_UNIQUE_VIOLATION:
        return True
    args = getattr(orig, "args", ())
    if args and args[0] == MYSQL_DUPLICATE_ENTRY:
        return True
    message = str(orig if orig is not None else error).lower()
    return "unique constraint" in message or "duplicate key" in message or "duplicate entry" in message


def insert_observation(db: Session, record: ObservationRecord) -> InsertOutcome:
    """
    Appends one observation row.
    A row already stored under (station_id, timestamp_UTC) is reported as
    InsertOutcome.DUPLICATE; any other database error raises StorageError.
    """
    try:
        db.execute(insert(StationObservation).values(**record.model_dump()))
        db.commit()
    except IntegrityError as e:
        db.rollback()
        if is_duplicate_key_error(e):
            return InsertOutcome.DUPLICATE
        raise StorageError(f"Observation insert rejected for {record.station_id}: {e}") from e
    except SQLAlchemyError as e:
        db.rollback()
        raise StorageError(f"Observation insert failed for {record.station_id}: {e}") from e
    return InsertOutcome.INSERTED
