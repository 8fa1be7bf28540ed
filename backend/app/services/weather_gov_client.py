# backend/app/services/weather_gov_client.py
import logging

import requests

from backend.app.core.config import HTTP_TIMEOUT_SECONDS, USER_AGENT
from backend.app.services.errors import BodyReadError, TransportError

logger = logging.getLogger(__name__)


class WeatherGovClient:
    """
    Builds and sends GET requests to api.weather.gov.

    No retries: a failed request is reported straight back to the caller, which
    decides whether it is fatal (station metadata) or skipped until the next
    tick (observations).
    """

    def __init__(self, user_agent: str = USER_AGENT, timeout: float | None = HTTP_TIMEOUT_SECONDS):
        if not user_agent or not user_agent.strip():
            raise ValueError("api.weather.gov requires a non-empty User-Agent")
        self.user_agent = user_agent
        self.timeout = timeout

    def headers(self) -> dict:
        return {
            "Content-Type": "application/json",
            "User-Agent": self.user_agent,
        }

    def get(self, url: str) -> str:
        """
        Fetches url and returns the response body as text.
        Raises TransportError if no response arrives, BodyReadError for non-2xx
        status codes or a body that cannot be read.
        """
        logger.debug("GET %s", url)
        try:
            # stream=True defers the body so read failures are told apart from transport failures
            response = requests.get(url, headers=self.headers(), timeout=self.timeout, stream=True)
        except requests.exceptions.RequestException as e:
            raise TransportError(url, f"Request failed: {e}") from e

        try:
            try:
                response.raise_for_status()
            except requests.exceptions.HTTPError as e:
                raise BodyReadError(url, f"HTTP {response.status_code}", status_code=response.status_code) from e
            try:
                text = response.text
            except requests.exceptions.RequestException as e:
                raise BodyReadError(url, f"Could not read response body: {e}", status_code=response.status_code) from e
        finally:
            response.close()

        logger.debug("GET %s -> %s (%d chars)", url, response.status_code, len(text))
        return text
