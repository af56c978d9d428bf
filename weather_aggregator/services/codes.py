"""Weather condition codes.

The canonical code space is the WMO weather interpretation code table used by
Open-Meteo. QWeather icon codes are grouped into a small set of WMO buckets.
"""

from __future__ import annotations

from enum import IntEnum
from typing import Dict, Tuple

OPENMETEO = "openmeteo"
QWEATHER = "qweather"


class CanonicalCode(IntEnum):
    CLEAR = 0
    PARTLY_CLOUDY = 1
    OVERCAST = 3
    FOG = 45
    DRIZZLE = 51
    RAIN = 63
    FREEZING_RAIN = 67
    SNOW = 73
    RAIN_SHOWER = 80
    SLEET = 85
    THUNDERSTORM = 95


DEFAULT_CODE = CanonicalCode.PARTLY_CLOUDY

# QWeather icon codes grouped by the canonical bucket they fall into.
QWEATHER_CODE_GROUPS: Dict[CanonicalCode, Tuple[int, ...]] = {
    CanonicalCode.CLEAR: (100, 150),
    CanonicalCode.PARTLY_CLOUDY: (101, 102, 103, 151, 152, 153),
    CanonicalCode.OVERCAST: (104,),
    # fog, haze, sand and dust
    CanonicalCode.FOG: (500, 501, 502, 503, 504, 507, 508, 509, 510, 511, 512, 513, 514, 515),
    CanonicalCode.DRIZZLE: (309,),
    CanonicalCode.RAIN: (305, 306, 307, 308, 310, 311, 312, 314, 315, 316, 317, 318, 399),
    CanonicalCode.FREEZING_RAIN: (313,),
    CanonicalCode.RAIN_SHOWER: (300, 301, 350, 351),
    CanonicalCode.SNOW: (400, 401, 402, 403, 407, 408, 409, 410, 499),
    # rain and snow mixed, sleet
    CanonicalCode.SLEET: (404, 405, 406, 456, 457),
    CanonicalCode.THUNDERSTORM: (302, 303, 304),
}

QWEATHER_TO_CANONICAL: Dict[int, int] = {
    code: int(bucket) for bucket, codes in QWEATHER_CODE_GROUPS.items() for code in codes
}


def normalize(provider_id: str, provider_code: int) -> int:
    """Map a provider weather code into the canonical (WMO) code space.

    Open-Meteo already reports WMO codes and passes through unchanged. QWeather
    codes outside the known table (900 hot, 901 cold, 999 unknown and any code
    added upstream later) resolve to ``DEFAULT_CODE``, as do codes from an
    unknown provider.
    """
    if provider_id == OPENMETEO:
        return int(provider_code)
    if provider_id == QWEATHER:
        return QWEATHER_TO_CANONICAL.get(int(provider_code), int(DEFAULT_CODE))
    return int(DEFAULT_CODE)


__all__ = [
    "CanonicalCode",
    "DEFAULT_CODE",
    "OPENMETEO",
    "QWEATHER",
    "QWEATHER_CODE_GROUPS",
    "QWEATHER_TO_CANONICAL",
    "normalize",
]
