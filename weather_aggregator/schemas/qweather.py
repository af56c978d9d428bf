"""Response schemas for the QWeather v7 endpoints.

QWeather stringifies most numbers (``"temp": "21"``) but not consistently, so
every numeric field goes through the tolerant decoder. Fields QWeather omits
default to zero; fields present but malformed fail validation.
"""

from __future__ import annotations

from typing import Annotated, Any, List, Optional

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field

from ..errors import DecodeError
from ..services.decoding import TolerantFloat, TolerantInt, decode_number


def _reading(value: Any) -> float:
    # Air-quality readings may be blank or "NA" for stations that do not
    # measure a pollutant; those count as 0.
    try:
        return decode_number(value, float)
    except DecodeError:
        return 0.0


Reading = Annotated[float, BeforeValidator(_reading)]


class _QWeatherModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class QWeatherEnvelope(_QWeatherModel):
    # "200" on success; absent on some mirrors
    code: Optional[str] = None


class QWeatherNow(_QWeatherModel):
    temp: TolerantFloat = 0.0
    feels_like: TolerantFloat = Field(0.0, alias="feelsLike")
    icon: TolerantInt = 0
    wind360: TolerantFloat = 0.0
    wind_speed: TolerantFloat = Field(0.0, alias="windSpeed")
    humidity: TolerantFloat = 0.0
    pressure: TolerantFloat = 0.0
    vis: TolerantFloat = 0.0


class QWeatherNowResponse(QWeatherEnvelope):
    now: QWeatherNow = Field(default_factory=QWeatherNow)


class QWeatherAirNow(_QWeatherModel):
    aqi: Reading = 0.0
    category: str = ""
    primary: str = ""
    pm10: Reading = 0.0
    pm2p5: Reading = 0.0
    no2: Reading = 0.0
    so2: Reading = 0.0
    co: Reading = 0.0
    o3: Reading = 0.0


class QWeatherAirResponse(QWeatherEnvelope):
    now: QWeatherAirNow = Field(default_factory=QWeatherAirNow)


class QWeatherDay(_QWeatherModel):
    fx_date: str = Field("", alias="fxDate")
    temp_max: TolerantFloat = Field(0.0, alias="tempMax")
    temp_min: TolerantFloat = Field(0.0, alias="tempMin")
    icon_day: TolerantInt = Field(0, alias="iconDay")
    uv_index: TolerantFloat = Field(0.0, alias="uvIndex")


class QWeatherDailyResponse(QWeatherEnvelope):
    daily: List[QWeatherDay] = Field(default_factory=list)


class QWeatherHour(_QWeatherModel):
    fx_time: str = Field("", alias="fxTime")
    temp: TolerantFloat = 0.0
    icon: TolerantInt = 0
    precip: TolerantFloat = 0.0
    wind_speed: TolerantFloat = Field(0.0, alias="windSpeed")
    pressure: TolerantFloat = 0.0


class QWeatherHourlyResponse(QWeatherEnvelope):
    hourly: List[QWeatherHour] = Field(default_factory=list)


class WeatherWarning(_QWeatherModel):
    id: str = ""
    sender: str = ""
    pub_time: str = Field("", alias="pubTime")
    title: str = ""
    start_time: str = Field("", alias="startTime")
    end_time: str = Field("", alias="endTime")
    status: str = ""
    level: str = ""
    severity: str = ""
    severity_color: str = Field("", alias="severityColor")
    type: str = ""
    type_name: str = Field("", alias="typeName")
    urgency: str = ""
    certainty: str = ""
    text: str = ""
    related: str = ""


class WarningRefer(_QWeatherModel):
    sources: List[str] = Field(default_factory=list)
    license: List[str] = Field(default_factory=list)


class WarningResponse(QWeatherEnvelope):
    """Active weather warnings, passed through to callers in QWeather's own shape."""

    update_time: str = Field("", alias="updateTime")
    fx_link: str = Field("", alias="fxLink")
    warning: List[WeatherWarning] = Field(default_factory=list)
    refer: WarningRefer = Field(default_factory=WarningRefer)
