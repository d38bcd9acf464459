"""Outbound requests to the weather provider and payload decoding."""

from __future__ import annotations

import logging
from datetime import datetime, time, tzinfo
from functools import lru_cache
from typing import Any, Dict, Optional

import httpx
from pydantic import ValidationError

from models.provider import ProviderPayload
from models.records import WeatherReading
from services.errors import FetchError, PayloadError
from settings import get_settings

logger = logging.getLogger(__name__)


def build_provider_url(
    template: str, latitude: float, longitude: float, api_key: str
) -> str:
    return template.format(latitude=latitude, longitude=longitude, api_key=api_key)


def epoch_to_time_of_day(value: int, tz: Optional[tzinfo] = None) -> time:
    """Convert UTC epoch seconds to the local (or ``tz``) time of day."""
    return datetime.fromtimestamp(value, tz=tz).time()


def parse_provider_payload(
    payload: Dict[str, Any], tz: Optional[tzinfo] = None
) -> WeatherReading:
    """Decode a raw provider payload, failing if any required field is absent."""
    try:
        decoded = ProviderPayload.model_validate(payload)
    except ValidationError as exc:
        problems = "; ".join(
            f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
            for error in exc.errors()
        )
        raise PayloadError(f"Invalid provider payload: {problems}") from exc

    try:
        sunrise = epoch_to_time_of_day(decoded.sys.sunrise, tz)
        sunset = epoch_to_time_of_day(decoded.sys.sunset, tz)
    except (OverflowError, OSError, ValueError) as exc:
        raise PayloadError(f"Invalid sunrise/sunset timestamp: {exc}") from exc

    return WeatherReading(
        temperature=float(decoded.main.temp),
        humidity=float(decoded.main.humidity),
        sunrise=sunrise,
        sunset=sunset,
    )


class WeatherFetcher:
    """Performs one provider request per :meth:`fetch` call."""

    def __init__(
        self,
        url: str,
        timeout: float = 10.0,
        client: Optional[httpx.Client] = None,
    ) -> None:
        self.url = url
        self.timeout = timeout
        self._client = client or httpx.Client(timeout=timeout)

    def fetch(self) -> Dict[str, Any]:
        """Return the decoded JSON body of the provider response."""
        if self._client.is_closed:
            raise FetchError("Provider client is closed.")
        try:
            response = self._client.get(self.url, timeout=self.timeout)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise FetchError(
                f"Provider responded with status {exc.response.status_code}.",
                status_code=exc.response.status_code,
            ) from exc
        except httpx.HTTPError as exc:
            raise FetchError(f"Provider request failed: {exc}") from exc

        try:
            payload = response.json()
        except ValueError as exc:
            raise FetchError("Provider response is not valid JSON.") from exc

        if not isinstance(payload, dict):
            raise FetchError("Provider response is not a JSON object.")
        return payload

    def close(self) -> None:
        self._client.close()


@lru_cache
def build_default_fetcher() -> WeatherFetcher:
    settings = get_settings()
    if not settings.api_key:
        logger.warning("No provider API key configured; requests will likely be rejected.")
    url = build_provider_url(
        settings.provider_url,
        latitude=settings.latitude,
        longitude=settings.longitude,
        api_key=settings.api_key,
    )
    return WeatherFetcher(url=url, timeout=settings.request_timeout_seconds)
