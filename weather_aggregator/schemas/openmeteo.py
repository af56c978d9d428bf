"""Response schemas for the Open-Meteo forecast and air-quality endpoints.

Open-Meteo returns one object per section whose members are parallel arrays
(one array per variable). Any variable may be missing or null, and arrays may
be shorter than ``time``; those gaps decode to ``None`` here and become zeros
when pivoted into canonical rows.
"""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field


class OpenMeteoCurrent(BaseModel):
    temperature_2m: Optional[float] = None
    apparent_temperature: Optional[float] = None
    weather_code: Optional[int] = None
    relative_humidity_2m: Optional[float] = None
    wind_speed_10m: Optional[float] = None
    winddirection_10m: Optional[float] = None
    surface_pressure: Optional[float] = None
    visibility: Optional[float] = None


class OpenMeteoHourly(BaseModel):
    time: List[Optional[str]] = Field(default_factory=list)
    temperature_2m: List[Optional[float]] = Field(default_factory=list)
    weather_code: List[Optional[int]] = Field(default_factory=list)
    precipitation: List[Optional[float]] = Field(default_factory=list)
    visibility: List[Optional[float]] = Field(default_factory=list)
    wind_speed_10m: List[Optional[float]] = Field(default_factory=list)
    pressure_msl: List[Optional[float]] = Field(default_factory=list)
    surface_pressure: List[Optional[float]] = Field(default_factory=list)


class OpenMeteoDaily(BaseModel):
    time: List[Optional[str]] = Field(default_factory=list)
    temperature_2m_max: List[Optional[float]] = Field(default_factory=list)
    temperature_2m_min: List[Optional[float]] = Field(default_factory=list)
    weather_code: List[Optional[int]] = Field(default_factory=list)
    uv_index_max: List[Optional[float]] = Field(default_factory=list)


class OpenMeteoForecastResponse(BaseModel):
    current: Optional[OpenMeteoCurrent] = None
    hourly: Optional[OpenMeteoHourly] = None
    daily: Optional[OpenMeteoDaily] = None


class OpenMeteoAirQualityCurrent(BaseModel):
    pm2_5: Optional[float] = None
    pm10: Optional[float] = None
    ozone: Optional[float] = None
    nitrogen_dioxide: Optional[float] = None
    sulphur_dioxide: Optional[float] = None
    european_aqi: Optional[float] = None


class OpenMeteoAirQualityResponse(BaseModel):
    current: Optional[OpenMeteoAirQualityCurrent] = None
