"""Coordinates as received from callers, and their quantized cache-grid form."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Tuple

# 2 decimal places is a grid cell of roughly 1.1 km
QUANTIZE_DECIMALS = 2


def quantize(latitude: float, longitude: float) -> Tuple[float, float]:
    """Round a coordinate pair onto the cache grid.

    Deterministic and idempotent: ``quantize(*quantize(lat, lon)) == quantize(lat, lon)``.
    """
    return (
        float(f"{latitude:.{QUANTIZE_DECIMALS}f}"),
        float(f"{longitude:.{QUANTIZE_DECIMALS}f}"),
    )


@dataclass(frozen=True)
class Coordinates:
    """A location as the caller spelled it.

    Upstream requests use the caller's strings verbatim; the cache key uses
    the parsed, quantized floats.
    """

    latitude: str
    longitude: str
    lat: float
    lon: float

    @classmethod
    def parse(cls, latitude: str, longitude: str) -> "Coordinates":
        try:
            lat = float(latitude)
            lon = float(longitude)
        except (TypeError, ValueError) as exc:
            raise ValueError(f"invalid coordinates: {latitude!r}, {longitude!r}") from exc
        if not (math.isfinite(lat) and math.isfinite(lon)):
            raise ValueError(f"invalid coordinates: {latitude!r}, {longitude!r}")
        if not (-90.0 <= lat <= 90.0 and -180.0 <= lon <= 180.0):
            raise ValueError(f"coordinates out of range: {lat}, {lon}")
        return cls(latitude=str(latitude).strip(), longitude=str(longitude).strip(), lat=lat, lon=lon)

    def quantized(self) -> Tuple[float, float]:
        return quantize(self.lat, self.lon)


__all__ = ["Coordinates", "quantize", "QUANTIZE_DECIMALS"]
