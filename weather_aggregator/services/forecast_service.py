from __future__ import annotations

from datetime import timedelta
from typing import Dict, Optional

import structlog

from ..config import AppSettings
from ..errors import AggregationError
from ..geo import Coordinates, quantize
from ..providers.openmeteo import OpenMeteoClient
from ..providers.qweather import QWeatherClient
from ..providers.qweather_auth import QWeatherJWTSupplier
from ..providers.transport import RequestsTransport
from ..schemas.qweather import WarningResponse
from ..schemas.weather import WeatherResult
from .aggregator import ForecastAggregator
from .cache import CacheGateway, build_store, cache_key
from .codes import OPENMETEO, QWEATHER

logger = structlog.get_logger(__name__)

# Names callers may use for each provider
PROVIDER_ALIASES: Dict[str, str] = {
    "om": OPENMETEO,
    OPENMETEO: OPENMETEO,
    QWEATHER: QWEATHER,
}


def resolve_provider(source: str) -> str:
    try:
        return PROVIDER_ALIASES[source.strip().lower()]
    except (KeyError, AttributeError):
        raise ValueError(f"unsupported source: {source!r}") from None


def format_location(location: str) -> str:
    """Round a ``lon,lat`` string to 2 decimals; other spellings pass through."""
    parts = location.split(",")
    if len(parts) != 2:
        return location
    try:
        lon, lat = float(parts[0].strip()), float(parts[1].strip())
    except ValueError:
        return location
    qlat, qlon = quantize(lat, lon)
    return f"{qlon:.2f},{qlat:.2f}"


class ForecastService:
    """Cache-fronted entry point used by the HTTP layer.

    ``fetch_forecast`` never raises on upstream or cache failure: a failed
    aggregation yields the zero-valued `WeatherResult` and nothing is cached.
    """

    def __init__(
        self,
        aggregator: ForecastAggregator,
        cache: CacheGateway,
        ttl: timedelta = timedelta(minutes=30),
        warning_client: Optional[QWeatherClient] = None,
    ) -> None:
        self.aggregator = aggregator
        self.cache = cache
        self.ttl = ttl
        self.warning_client = warning_client

    def fetch_forecast(
        self,
        provider_id: str,
        latitude: str,
        longitude: str,
        language: str,
        unit: str,
    ) -> WeatherResult:
        provider_id = resolve_provider(provider_id)
        if not self.aggregator.supports(provider_id):
            raise ValueError(f"provider not configured: {provider_id}")
        coords = Coordinates.parse(latitude, longitude)
        key = cache_key(provider_id, coords, language, unit)

        cached, hit = self.cache.get(key, WeatherResult)
        if hit:
            return cached

        try:
            result = self.aggregator.aggregate(provider_id, coords, language, unit)
        except AggregationError as exc:
            logger.error("forecast_unavailable", provider=provider_id, key=key, sub_fetch=exc.failed)
            return WeatherResult()

        self.cache.put(key, result, self.ttl)
        return result

    def fetch_warnings(self, location: str, language: str = "zh") -> WarningResponse:
        """QWeather warnings for ``lon,lat``. Upstream errors propagate to the caller."""
        if not location or not location.strip():
            raise ValueError("location parameter is required")
        if self.warning_client is None:
            raise ValueError(f"provider not configured: {QWEATHER}")
        location = format_location(location.strip())
        key = f"qweather:warning:{location}:{language}"

        cached, hit = self.cache.get(key, WarningResponse)
        if hit:
            return cached

        warnings = self.warning_client.fetch_warnings(location, language)
        self.cache.put(key, warnings, self.ttl)
        return warnings

    def close(self) -> None:
        self.aggregator.close()


def build_forecast_service(settings: AppSettings) -> ForecastService:
    transport = RequestsTransport.from_settings(settings)
    providers = {OPENMETEO: OpenMeteoClient.from_settings(settings, transport)}
    warning_client: Optional[QWeatherClient] = None
    if settings.qweather_url:
        warning_client = QWeatherClient.from_settings(
            settings, transport, QWeatherJWTSupplier.from_settings(settings)
        )
        providers[QWEATHER] = warning_client
    else:
        logger.info("qweather_disabled", reason="qweather_url not set")

    aggregator = ForecastAggregator(providers, max_workers=settings.fetch_max_workers)
    cache = CacheGateway(build_store(settings), ttl=settings.cache_ttl)
    return ForecastService(aggregator, cache, ttl=settings.cache_ttl, warning_client=warning_client)


__all__ = ["ForecastService", "build_forecast_service", "resolve_provider", "format_location", "PROVIDER_ALIASES"]
