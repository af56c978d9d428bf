from __future__ import annotations

from concurrent.futures import Executor, ThreadPoolExecutor
from typing import Any, Dict, Mapping, Optional

import structlog

from ..errors import AggregationError, WeatherError
from ..geo import Coordinates
from ..providers.base import WeatherFragments, WeatherProvider
from ..schemas.weather import WeatherResult
from .concurrency import FetchGroup, TaskFailed

logger = structlog.get_logger(__name__)


class ForecastAggregator:
    """Fans out a provider's sub-fetches and assembles one `WeatherResult`.

    All-or-nothing: if any sub-fetch fails the whole aggregation raises
    `AggregationError` and no partial data is returned.
    """

    def __init__(
        self,
        providers: Mapping[str, WeatherProvider],
        executor: Optional[Executor] = None,
        max_workers: int = 16,
    ) -> None:
        self.providers: Dict[str, WeatherProvider] = dict(providers)
        self._owns_executor = executor is None
        self._executor = executor or ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="subfetch")

    def supports(self, provider_id: str) -> bool:
        return provider_id in self.providers

    def aggregate(self, provider_id: str, coords: Coordinates, language: str, unit: str) -> WeatherResult:
        try:
            provider = self.providers[provider_id]
        except KeyError:
            raise ValueError(f"unsupported provider: {provider_id}") from None

        group = FetchGroup(self._executor)
        for name, fetch in provider.sub_fetches(coords, language, unit).items():
            group.spawn(name, fetch)

        try:
            results = group.join()
        except TaskFailed as exc:
            if not isinstance(exc.cause, WeatherError):
                raise exc.cause
            logger.warning(
                "aggregation_failed",
                provider=provider_id,
                sub_fetch=exc.name,
                error_type=type(exc.cause).__name__,
                error=str(exc.cause),
            )
            raise AggregationError(provider_id, exc.name, exc.cause) from exc.cause

        return self._assemble(results)

    @staticmethod
    def _assemble(results: Mapping[str, Any]) -> WeatherResult:
        if "weather" in results:
            fragments: WeatherFragments = results["weather"]
            current, hourly, daily = fragments
        else:
            current, hourly, daily = results["current"], results["hourly"], results["daily"]
        return WeatherResult(
            current=current.with_air_quality(results["air_quality"]),
            hourly=hourly,
            daily=daily,
        )

    def close(self) -> None:
        if self._owns_executor:
            self._executor.shutdown(wait=False, cancel_futures=True)


__all__ = ["ForecastAggregator"]
