"""Error taxonomy shared by the providers, the aggregator and the cache."""

from __future__ import annotations


class WeatherError(Exception):
    """Base class for every error raised by the aggregation core."""


class NetworkError(WeatherError):
    """Transport or connectivity failure, including HTTP error statuses."""


class DecodeError(WeatherError, ValueError):
    """Malformed or ambiguously-typed upstream payload.

    Also a ``ValueError`` so pydantic validators can raise it directly.
    """


class AuthError(WeatherError):
    """Bearer token could not be issued."""


class CacheError(WeatherError):
    """Cache store unreachable or holding an unreadable entry.

    Never surfaces to callers of the forecast service.
    """


class AggregationError(WeatherError):
    """A sub-fetch failed, so the composite result was discarded."""

    def __init__(self, provider_id: str, failed: str, cause: BaseException) -> None:
        super().__init__(f"{provider_id} aggregation failed in {failed}: {cause}")
        self.provider_id = provider_id
        self.failed = failed
        self.cause = cause
