# backend/app/services/errors.py
"""Exception hierarchy for the station observation collector.

FatalCollectorError subclasses end the process (see the collector's main());
everything else is logged and the affected station is skipped.
"""


class CollectorError(Exception):
    """Base class for every error raised by the collector."""


# --- Acquisition (HTTP) ---
class AcquisitionError(CollectorError):
    def __init__(self, url: str, message: str):
        super().__init__(f"{message} [{url}]")
        self.url = url


class TransportError(AcquisitionError):
    """The request could not be sent or no response came back."""


class BodyReadError(AcquisitionError):
    """A response arrived but was not 2xx or its body could not be read."""

    def __init__(self, url: str, message: str, status_code: int | None = None):
        super().__init__(url, message)
        self.status_code = status_code


# --- Observation polling (recoverable, per station) ---
class ObservationError(CollectorError):
    kind = "unknown"

    def __init__(self, station_id: str, message: str):
        super().__init__(f"{station_id}: {message}")
        self.station_id = station_id


class ObservationTransportError(ObservationError):
    kind = "transport"


class ObservationBodyError(ObservationError):
    kind = "body"


class ObservationParseError(ObservationError):
    kind = "parse"


# --- Storage ---
class StorageError(CollectorError):
    """A database operation failed for a reason other than a duplicate key."""


# --- Fatal ---
class FatalCollectorError(CollectorError):
    """The collector cannot continue; main() logs it and exits non-zero."""


class ConfigurationError(FatalCollectorError):
    pass


class BootstrapError(FatalCollectorError):
    pass


class MetadataParseError(FatalCollectorError):
    def __init__(self, station_id: str, message: str):
        super().__init__(f"{station_id}: {message}")
        self.station_id = station_id
