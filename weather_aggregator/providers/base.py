from __future__ import annotations

import gzip
import zlib
from typing import Any, Callable, Dict, List, Mapping, NamedTuple, Optional, Protocol, Type, TypeVar

import structlog
from pydantic import BaseModel, ValidationError

from ..errors import DecodeError, NetworkError
from ..geo import Coordinates
from ..schemas.weather import AirQuality, CurrentWeather, DailyWeather, HourlyWeather
from .transport import HttpResponse, HttpTransport

M = TypeVar("M", bound=BaseModel)


class WeatherFragments(NamedTuple):
    """Current, hourly and daily fragments decoded from one combined response."""

    current: CurrentWeather
    hourly: List[HourlyWeather]
    daily: List[DailyWeather]


class WeatherProvider(Protocol):
    """Provider-agnostic client interface.

    Every fetch raises ``NetworkError``, ``DecodeError`` or ``AuthError`` on
    failure. ``sub_fetches`` lists the independent calls that together make up
    one aggregation; the aggregator runs them concurrently and assembles the
    results by name (``weather`` or ``current``/``hourly``/``daily``, plus
    ``air_quality``).
    """

    provider_id: str

    def fetch_current(self, coords: Coordinates, language: str, unit: str) -> CurrentWeather: ...

    def fetch_hourly(self, coords: Coordinates, language: str, unit: str) -> List[HourlyWeather]: ...

    def fetch_daily(self, coords: Coordinates, language: str, unit: str) -> List[DailyWeather]: ...

    def fetch_air_quality(self, coords: Coordinates, language: str, unit: str) -> AirQuality: ...

    def sub_fetches(self, coords: Coordinates, language: str, unit: str) -> Dict[str, Callable[[], Any]]: ...


class BaseProviderClient:
    """Shared HTTP plumbing: status checks, gzip bodies and schema decoding."""

    provider_id: str = ""

    def __init__(self, transport: HttpTransport) -> None:
        self.transport = transport
        self._log = structlog.get_logger(self.__class__.__name__)

    def _get(
        self,
        url: str,
        schema: Type[M],
        params: Optional[Mapping[str, Any]] = None,
        headers: Optional[Mapping[str, str]] = None,
    ) -> M:
        response = self.transport.get(url, params=params, headers=headers)
        self._check_status(url, response)
        return self._decode(url, self._body(response), schema)

    def _check_status(self, url: str, response: HttpResponse) -> None:
        if response.status_code >= 400:
            self._log.error("provider_http_error", provider=self.provider_id, url=url, status=response.status_code)
            raise NetworkError(f"{self.provider_id} returned HTTP {response.status_code}")

    def _body(self, response: HttpResponse) -> bytes:
        if response.header("Content-Encoding").strip().lower() != "gzip":
            return response.body
        try:
            return gzip.decompress(response.body)
        except (OSError, EOFError, zlib.error) as exc:
            self._log.error("provider_gzip_failed", provider=self.provider_id, error=str(exc))
            raise DecodeError(f"{self.provider_id} sent an unreadable gzip body") from exc

    def _decode(self, url: str, body: bytes, schema: Type[M]) -> M:
        try:
            return schema.model_validate_json(body)
        except ValidationError as exc:
            self._log.error(
                "provider_decode_failed",
                provider=self.provider_id,
                url=url,
                schema=schema.__name__,
                errors=exc.error_count(),
            )
            raise DecodeError(f"{self.provider_id} returned an undecodable {schema.__name__}: {exc}") from exc


__all__ = ["BaseProviderClient", "WeatherFragments", "WeatherProvider"]
