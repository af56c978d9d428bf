"""Weather aggregation and caching service.

Subpackages:
- providers: upstream clients (Open-Meteo, QWeather) and the HTTP transport.
- services: decoding, code normalization, aggregation and caching.
- schemas: canonical result models and upstream response schemas.
- api: thin FastAPI surface over the forecast service.
"""

__version__ = "0.1.0"
