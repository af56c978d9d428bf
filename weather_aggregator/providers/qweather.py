from __future__ import annotations

from functools import partial
from typing import Any, Callable, Dict, List, Mapping, Optional, Type

from ..config import AppSettings
from ..errors import NetworkError
from ..geo import Coordinates
from ..schemas.qweather import (
    QWeatherAirResponse,
    QWeatherDailyResponse,
    QWeatherEnvelope,
    QWeatherHourlyResponse,
    QWeatherNowResponse,
    WarningResponse,
)
from ..schemas.weather import AirQuality, CurrentWeather, DailyWeather, HourlyWeather
from ..services.codes import QWEATHER, normalize
from .base import M, BaseProviderClient
from .qweather_auth import TokenSupplier
from .transport import HttpTransport

# QWeather uses m(etric)/i(mperial); accept the c/f spelling as well
UNITS = {"c": "m", "f": "i"}

# 204 means the request succeeded but the region has no data
OK_CODES = frozenset({"200", "204"})


class QWeatherClient(BaseProviderClient):
    """QWeather v7 implementation of `WeatherProvider`.

    Every request carries a freshly issued bearer token and asks for a gzip
    body. Locations are sent as ``lon,lat``.
    """

    provider_id = QWEATHER

    def __init__(self, transport: HttpTransport, token_supplier: TokenSupplier, base_url: str) -> None:
        super().__init__(transport)
        self.token_supplier = token_supplier
        self.base_url = base_url.rstrip("/")

    @classmethod
    def from_settings(
        cls, settings: AppSettings, transport: HttpTransport, token_supplier: TokenSupplier
    ) -> "QWeatherClient":
        return cls(transport, token_supplier, settings.qweather_url)

    # Public API ---------------------------------------------------------
    def fetch_current(self, coords: Coordinates, language: str, unit: str) -> CurrentWeather:
        data = self._fetch("/v7/weather/now", QWeatherNowResponse, self._params(coords, language, unit))
        now = data.now
        return CurrentWeather(
            temperature=now.temp,
            apparent_temperature=now.feels_like,
            weather_code=normalize(QWEATHER, now.icon),
            wind_speed=now.wind_speed,
            wind_direction=now.wind360,
            humidity=now.humidity,
            surface_pressure=now.pressure,
            visibility=now.vis,
        )

    def fetch_air_quality(self, coords: Coordinates, language: str, unit: str) -> AirQuality:
        params = {"location": self._location(coords), "lang": language}
        now = self._fetch("/v7/air/now", QWeatherAirResponse, params).now
        return AirQuality(
            pm2_5=now.pm2p5,
            pm10=now.pm10,
            ozone=now.o3,
            nitrogen_dioxide=now.no2,
            sulfur_dioxide=now.so2,
            aqi=now.aqi,
        )

    def fetch_hourly(self, coords: Coordinates, language: str, unit: str) -> List[HourlyWeather]:
        data = self._fetch("/v7/weather/24h", QWeatherHourlyResponse, self._params(coords, language, unit))
        return [
            HourlyWeather(
                time=hour.fx_time,
                temperature=hour.temp,
                weather_code=normalize(QWEATHER, hour.icon),
                precipitation=hour.precip,
                wind_speed=hour.wind_speed,
                surface_pressure=hour.pressure,
            )
            for hour in data.hourly
        ]

    def fetch_daily(self, coords: Coordinates, language: str, unit: str) -> List[DailyWeather]:
        data = self._fetch("/v7/weather/7d", QWeatherDailyResponse, self._params(coords, language, unit))
        return [
            DailyWeather(
                date=day.fx_date,
                temp_max=day.temp_max,
                temp_min=day.temp_min,
                weather_code=normalize(QWEATHER, day.icon_day),
                uv_index_max=day.uv_index,
            )
            for day in data.daily
        ]

    def fetch_warnings(self, location: str, language: str) -> WarningResponse:
        """Active weather warnings for a ``lon,lat`` location string."""
        return self._fetch("/v7/warning/now", WarningResponse, {"location": location, "lang": language})

    def sub_fetches(self, coords: Coordinates, language: str, unit: str) -> Dict[str, Callable[[], Any]]:
        return {
            "current": partial(self.fetch_current, coords, language, unit),
            "air_quality": partial(self.fetch_air_quality, coords, language, unit),
            "hourly": partial(self.fetch_hourly, coords, language, unit),
            "daily": partial(self.fetch_daily, coords, language, unit),
        }

    # Helpers ------------------------------------------------------------
    def _fetch(self, path: str, schema: Type[M], params: Optional[Mapping[str, Any]] = None) -> M:
        token = self.token_supplier.issue_token()
        headers = {"Authorization": f"Bearer {token}", "Accept-Encoding": "gzip"}
        data = self._get(f"{self.base_url}{path}", schema, params=params, headers=headers)
        self._check_code(path, data)
        return data

    def _check_code(self, path: str, data: QWeatherEnvelope) -> None:
        # QWeather can answer HTTP 200 with an error code in the body
        if data.code is not None and data.code not in OK_CODES:
            self._log.error("qweather_error_code", path=path, code=data.code)
            raise NetworkError(f"qweather {path} returned code {data.code}")

    @staticmethod
    def _location(coords: Coordinates) -> str:
        return f"{coords.longitude},{coords.latitude}"

    def _params(self, coords: Coordinates, language: str, unit: str) -> Dict[str, str]:
        return {
            "location": self._location(coords),
            "lang": language,
            "unit": UNITS.get(unit.lower(), unit),
        }


__all__ = ["QWeatherClient", "OK_CODES", "UNITS"]
