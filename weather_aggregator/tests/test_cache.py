from datetime import timedelta
from unittest.mock import Mock

import pytest
import redis

from weather_aggregator.config import AppSettings
from weather_aggregator.errors import CacheError
from weather_aggregator.schemas.weather import CurrentWeather, DailyWeather, HourlyWeather, WeatherResult
from weather_aggregator.services.cache import CacheGateway, InMemoryStore, RedisStore, build_store

from weather_aggregator.tests.fakes import RecordingStore


class FakeClock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


def _result() -> WeatherResult:
    return WeatherResult(
        current=CurrentWeather(temperature=21.3, weather_code=3, humidity=40.0, pm2_5=35.2, aqi=48.0),
        hourly=[HourlyWeather(time="2025-05-01T12:00", temperature=21.3, weather_code=3)],
        daily=[DailyWeather(date="2025-05-01", temp_max=24.0, temp_min=12.1, weather_code=3, uv_index_max=6.5)],
    )


def test_inmemory_store_expiry():
    clock = FakeClock()
    store = InMemoryStore(time_func=clock)
    store.set("k1", b"v", ttl_s=60)
    assert store.get("k1") == b"v"
    clock.now += 59
    assert store.get("k1") == b"v"
    clock.now += 1
    assert store.get("k1") is None


def test_inmemory_overwrite_last_writer_wins():
    store = InMemoryStore()
    for i in range(3):
        store.set("k2", str(i).encode(), ttl_s=10)
    assert store.get("k2") == b"2"


def test_gateway_round_trip_is_deep_equal():
    gateway = CacheGateway(InMemoryStore(), ttl=timedelta(minutes=30))
    value = _result()
    gateway.put("weather:openmeteo:39.90:116.40:en:c", value)
    cached, hit = gateway.get("weather:openmeteo:39.90:116.40:en:c", WeatherResult)
    assert hit is True
    assert cached == value


def test_gateway_miss():
    gateway = CacheGateway(InMemoryStore())
    assert gateway.get("missing", WeatherResult) == (None, False)


def test_gateway_uses_configured_ttl():
    store = RecordingStore()
    gateway = CacheGateway(store, ttl=timedelta(minutes=30))
    gateway.put("k", _result())
    gateway.put("k2", _result(), ttl=timedelta(seconds=90))
    assert [w[2] for w in store.writes] == [1800, 90]


def test_read_failure_is_a_miss():
    gateway = CacheGateway(RecordingStore(fail_get=True))
    assert gateway.get("k", WeatherResult) == (None, False)


def test_write_failure_is_swallowed():
    store = RecordingStore(fail_set=True)
    gateway = CacheGateway(store)
    gateway.put("k", _result())
    assert store.writes == []


@pytest.mark.parametrize(
    "result",
    [
        WeatherResult(current=CurrentWeather(temperature=float("nan"))),
        WeatherResult(hourly=[HourlyWeather(time="2024-05-01T00:00", precipitation=float("inf"))]),
    ],
)
def test_non_finite_results_are_not_cached(result):
    store = RecordingStore()
    gateway = CacheGateway(store)
    gateway.put("k", result)
    assert store.writes == []
    assert gateway.get("k", WeatherResult) == (None, False)


def test_corrupt_entry_is_a_miss():
    store = InMemoryStore()
    store.set("k", b"{not json", ttl_s=60)
    gateway = CacheGateway(store)
    assert gateway.get("k", WeatherResult) == (None, False)


def test_redis_store_uses_setex_and_decodes():
    client = Mock()
    client.get.return_value = b'{"a":1}'
    store = RedisStore(client=client)
    store.set("k", b"payload", ttl_s=1800)
    client.setex.assert_called_once_with("k", 1800, b"payload")
    assert store.get("k") == b'{"a":1}'

    client.get.return_value = '{"a":1}'
    assert store.get("k") == b'{"a":1}'


def test_redis_store_without_ttl_sets_plain_key():
    client = Mock()
    RedisStore(client=client).set("k", b"v", ttl_s=0)
    client.set.assert_called_once_with("k", b"v")
    client.setex.assert_not_called()


def test_redis_errors_become_cache_errors():
    client = Mock()
    client.get.side_effect = redis.ConnectionError("refused")
    client.setex.side_effect = redis.ConnectionError("refused")
    store = RedisStore(client=client)
    with pytest.raises(CacheError):
        store.get("k")
    with pytest.raises(CacheError):
        store.set("k", b"v", ttl_s=10)

    gateway = CacheGateway(store)
    assert gateway.get("k", WeatherResult) == (None, False)
    gateway.put("k", _result())


def test_build_store_defaults_to_memory():
    assert isinstance(build_store(AppSettings(redis_url=None)), InMemoryStore)
    assert isinstance(build_store(AppSettings(redis_url="redis://localhost:6379/0")), RedisStore)
    assert isinstance(build_store(AppSettings(redis_url="not-a-redis-url")), InMemoryStore)
