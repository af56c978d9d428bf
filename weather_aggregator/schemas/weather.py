from __future__ import annotations

from typing import List

from pydantic import BaseModel, ConfigDict, Field


class AirQuality(BaseModel):
    """Air-quality fragment produced by the air-quality sub-fetch."""

    model_config = ConfigDict(frozen=True)

    pm2_5: float = 0.0
    pm10: float = 0.0
    ozone: float = 0.0
    nitrogen_dioxide: float = 0.0
    sulfur_dioxide: float = 0.0
    aqi: float = 0.0


class CurrentWeather(BaseModel):
    """Current conditions. Unavailable readings are reported as 0."""

    model_config = ConfigDict(frozen=True)

    temperature: float = 0.0
    weather_code: int = 0
    wind_speed: float = 0.0
    wind_direction: float = 0.0
    apparent_temperature: float = 0.0
    humidity: float = 0.0
    surface_pressure: float = 0.0
    pm2_5: float = 0.0
    pm10: float = 0.0
    ozone: float = 0.0
    nitrogen_dioxide: float = 0.0
    sulfur_dioxide: float = 0.0
    aqi: float = 0.0
    visibility: float = 0.0

    def with_air_quality(self, air: AirQuality) -> "CurrentWeather":
        return self.model_copy(update=air.model_dump())


class HourlyWeather(BaseModel):
    model_config = ConfigDict(frozen=True)

    time: str = ""
    temperature: float = 0.0
    weather_code: int = 0
    precipitation: float = 0.0
    visibility: float = 0.0
    wind_speed: float = 0.0
    pressure_msl: float = 0.0
    surface_pressure: float = 0.0


class DailyWeather(BaseModel):
    model_config = ConfigDict(frozen=True)

    date: str = ""
    temp_max: float = 0.0
    temp_min: float = 0.0
    weather_code: int = 0
    uv_index_max: float = 0.0


class WeatherResult(BaseModel):
    """Canonical aggregation result; the unit of caching and of the API response.

    ``hourly`` and ``daily`` keep the upstream ordering. The zero value
    (``WeatherResult()``) is what callers receive when aggregation fails.
    """

    model_config = ConfigDict(frozen=True)

    current: CurrentWeather = Field(default_factory=CurrentWeather)
    hourly: List[HourlyWeather] = Field(default_factory=list)
    daily: List[DailyWeather] = Field(default_factory=list)

    def is_empty(self) -> bool:
        return self == WeatherResult()


__all__ = [
    "AirQuality",
    "CurrentWeather",
    "HourlyWeather",
    "DailyWeather",
    "WeatherResult",
]
