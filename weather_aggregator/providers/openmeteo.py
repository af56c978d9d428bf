from __future__ import annotations

from functools import partial
from typing import Any, Callable, Dict, List, Optional, Sequence, TypeVar

from ..config import AppSettings
from ..geo import Coordinates
from ..schemas.openmeteo import (
    OpenMeteoAirQualityResponse,
    OpenMeteoCurrent,
    OpenMeteoDaily,
    OpenMeteoForecastResponse,
    OpenMeteoHourly,
)
from ..schemas.weather import AirQuality, CurrentWeather, DailyWeather, HourlyWeather
from ..services.codes import OPENMETEO, normalize
from .base import BaseProviderClient, WeatherFragments
from .transport import HttpTransport

T = TypeVar("T")

CURRENT_VARIABLES = [
    "apparent_temperature",
    "temperature_2m",
    "weather_code",
    "relative_humidity_2m",
    "wind_speed_10m",
    "winddirection_10m",
    "surface_pressure",
    "visibility",
]
HOURLY_VARIABLES = [
    "weather_code",
    "temperature_2m",
    "precipitation",
    "visibility",
    "wind_speed_10m",
    "pressure_msl",
    "surface_pressure",
]
DAILY_VARIABLES = ["temperature_2m_max", "temperature_2m_min", "weather_code", "uv_index_max"]
AIR_QUALITY_VARIABLES = ["pm2_5", "pm10", "ozone", "nitrogen_dioxide", "sulphur_dioxide", "european_aqi"]

# Open-Meteo spells temperature units out; QWeather's metric/imperial flags map too
TEMPERATURE_UNITS = {"c": "celsius", "m": "celsius", "f": "fahrenheit", "i": "fahrenheit"}


def _at(values: Sequence[Optional[T]], index: int, default: T) -> T:
    """Element ``index`` of a column, or ``default`` when short or null."""
    if index < len(values):
        value = values[index]
        if value is not None:
            return value
    return default


def _or_zero(value: Optional[float]) -> float:
    return 0.0 if value is None else float(value)


class OpenMeteoClient(BaseProviderClient):
    """Open-Meteo implementation of `WeatherProvider`.

    Notes
    -----
    - Unauthenticated. Current, hourly and daily data come from one forecast
      request; air quality comes from a separate endpoint.
    - Column arrays are pivoted into row records positionally, using ``time``
      as the row count. Short or null columns yield zeros.
    - Weather codes are already WMO, so normalization is the identity.
    """

    provider_id = OPENMETEO

    def __init__(
        self,
        transport: HttpTransport,
        forecast_url: str = "https://api.open-meteo.com/v1/forecast",
        air_quality_url: str = "https://air-quality-api.open-meteo.com/v1/air-quality",
    ) -> None:
        super().__init__(transport)
        self.forecast_url = forecast_url
        self.air_quality_url = air_quality_url

    @classmethod
    def from_settings(cls, settings: AppSettings, transport: HttpTransport) -> "OpenMeteoClient":
        return cls(
            transport,
            forecast_url=settings.openmeteo_forecast_url,
            air_quality_url=settings.openmeteo_air_quality_url,
        )

    # Public API ---------------------------------------------------------
    def fetch_weather(self, coords: Coordinates, language: str, unit: str) -> WeatherFragments:
        params = {
            "latitude": coords.latitude,
            "longitude": coords.longitude,
            "current": ",".join(CURRENT_VARIABLES),
            "hourly": ",".join(HOURLY_VARIABLES),
            "daily": ",".join(DAILY_VARIABLES),
            "timezone": "auto",
            "lang": language,
            "temperature_unit": TEMPERATURE_UNITS.get(unit.lower(), unit),
        }
        data = self._get(self.forecast_url, OpenMeteoForecastResponse, params=params)
        return WeatherFragments(
            current=self._current(data.current),
            hourly=self._hourly(data.hourly),
            daily=self._daily(data.daily),
        )

    def fetch_current(self, coords: Coordinates, language: str, unit: str) -> CurrentWeather:
        return self.fetch_weather(coords, language, unit).current

    def fetch_hourly(self, coords: Coordinates, language: str, unit: str) -> List[HourlyWeather]:
        return self.fetch_weather(coords, language, unit).hourly

    def fetch_daily(self, coords: Coordinates, language: str, unit: str) -> List[DailyWeather]:
        return self.fetch_weather(coords, language, unit).daily

    def fetch_air_quality(self, coords: Coordinates, language: str, unit: str) -> AirQuality:
        params = {
            "latitude": coords.latitude,
            "longitude": coords.longitude,
            "current": ",".join(AIR_QUALITY_VARIABLES),
            "timezone": "auto",
        }
        data = self._get(self.air_quality_url, OpenMeteoAirQualityResponse, params=params)
        current = data.current
        if current is None:
            return AirQuality()
        return AirQuality(
            pm2_5=_or_zero(current.pm2_5),
            pm10=_or_zero(current.pm10),
            ozone=_or_zero(current.ozone),
            nitrogen_dioxide=_or_zero(current.nitrogen_dioxide),
            sulfur_dioxide=_or_zero(current.sulphur_dioxide),
            aqi=_or_zero(current.european_aqi),
        )

    def sub_fetches(self, coords: Coordinates, language: str, unit: str) -> Dict[str, Callable[[], Any]]:
        return {
            "weather": partial(self.fetch_weather, coords, language, unit),
            "air_quality": partial(self.fetch_air_quality, coords, language, unit),
        }

    # Helpers ------------------------------------------------------------
    @staticmethod
    def _current(current: Optional[OpenMeteoCurrent]) -> CurrentWeather:
        if current is None:
            return CurrentWeather()
        return CurrentWeather(
            temperature=_or_zero(current.temperature_2m),
            weather_code=normalize(OPENMETEO, current.weather_code or 0),
            wind_speed=_or_zero(current.wind_speed_10m),
            wind_direction=_or_zero(current.winddirection_10m),
            apparent_temperature=_or_zero(current.apparent_temperature),
            humidity=_or_zero(current.relative_humidity_2m),
            surface_pressure=_or_zero(current.surface_pressure),
            visibility=_or_zero(current.visibility),
        )

    @staticmethod
    def _hourly(hourly: Optional[OpenMeteoHourly]) -> List[HourlyWeather]:
        if hourly is None:
            return []
        return [
            HourlyWeather(
                time=_at(hourly.time, i, ""),
                temperature=_at(hourly.temperature_2m, i, 0.0),
                weather_code=normalize(OPENMETEO, _at(hourly.weather_code, i, 0)),
                precipitation=_at(hourly.precipitation, i, 0.0),
                visibility=_at(hourly.visibility, i, 0.0),
                wind_speed=_at(hourly.wind_speed_10m, i, 0.0),
                pressure_msl=_at(hourly.pressure_msl, i, 0.0),
                surface_pressure=_at(hourly.surface_pressure, i, 0.0),
            )
            for i in range(len(hourly.time))
        ]

    @staticmethod
    def _daily(daily: Optional[OpenMeteoDaily]) -> List[DailyWeather]:
        if daily is None:
            return []
        return [
            DailyWeather(
                date=_at(daily.time, i, ""),
                temp_max=_at(daily.temperature_2m_max, i, 0.0),
                temp_min=_at(daily.temperature_2m_min, i, 0.0),
                weather_code=normalize(OPENMETEO, _at(daily.weather_code, i, 0)),
                uv_index_max=_at(daily.uv_index_max, i, 0.0),
            )
            for i in range(len(daily.time))
        ]


__all__ = ["OpenMeteoClient", "TEMPERATURE_UNITS"]
