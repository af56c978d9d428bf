"""Upstream weather providers.

Each client turns one provider's endpoints into canonical fragments
(current conditions, hourly and daily series, air quality).
"""

from .base import WeatherFragments, WeatherProvider
from .openmeteo import OpenMeteoClient
from .qweather import QWeatherClient
from .qweather_auth import QWeatherJWTSupplier, TokenSupplier
from .transport import HttpResponse, HttpTransport, RequestsTransport

__all__ = [
    "WeatherFragments",
    "WeatherProvider",
    "OpenMeteoClient",
    "QWeatherClient",
    "QWeatherJWTSupplier",
    "TokenSupplier",
    "HttpResponse",
    "HttpTransport",
    "RequestsTransport",
]
