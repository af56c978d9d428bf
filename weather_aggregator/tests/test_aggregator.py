import threading
import time
import unittest
from concurrent.futures import Executor, Future, ThreadPoolExecutor

import pytest

from weather_aggregator.errors import AggregationError, AuthError, DecodeError, NetworkError
from weather_aggregator.providers.openmeteo import OpenMeteoClient
from weather_aggregator.providers.qweather import QWeatherClient
from weather_aggregator.schemas.weather import WeatherResult
from weather_aggregator.services.aggregator import ForecastAggregator
from weather_aggregator.services.codes import OPENMETEO, QWEATHER
from weather_aggregator.services.concurrency import FetchGroup, TaskFailed

from weather_aggregator.tests.fakes import (
    QWEATHER_URL,
    FakeTransport,
    StaticTokenSupplier,
    json_response,
    openmeteo_routes,
    qweather_routes,
)


def test_qweather_four_sub_fetches_are_merged(qw_client, qw_transport, coords):
    aggregator = ForecastAggregator({QWEATHER: qw_client})
    try:
        result = aggregator.aggregate(QWEATHER, coords, "en", "c")
    finally:
        aggregator.close()

    paths = sorted(call[0].rsplit("/v7", 1)[1] for call in qw_transport.calls)
    assert paths == ["/air/now", "/weather/24h", "/weather/7d", "/weather/now"]
    assert result.current.temperature == 21.0
    assert result.current.weather_code == 1
    # air-quality fields merged into current conditions
    assert result.current.aqi == 52.0
    assert result.current.pm2_5 == 36.0
    assert result.current.sulfur_dioxide == 3.0
    assert len(result.hourly) == 2
    assert len(result.daily) == 2


def test_openmeteo_weather_and_air_are_merged(om_client, om_transport, coords):
    aggregator = ForecastAggregator({OPENMETEO: om_client})
    try:
        result = aggregator.aggregate(OPENMETEO, coords, "en", "c")
    finally:
        aggregator.close()

    assert len(om_transport.calls) == 2
    assert result.current.temperature == 21.3
    assert result.current.weather_code == 3
    assert result.current.aqi == 48.0
    assert result.current.nitrogen_dioxide == 22.5
    assert [h.weather_code for h in result.hourly] == [3, 2, 61]


@pytest.mark.parametrize(
    "failing,error",
    [
        ("/v7/weather/now", NetworkError("connection reset")),
        ("/v7/air/now", NetworkError("timeout")),
        ("/v7/weather/24h", json_response({"hourly": [{"temp": "??"}]})),
        ("/v7/weather/7d", json_response({}, status_code=502)),
    ],
)
def test_any_failed_sub_fetch_fails_the_aggregation(coords, failing, error):
    routes = qweather_routes()
    routes[failing] = error
    client = QWeatherClient(FakeTransport(routes), StaticTokenSupplier(), QWEATHER_URL)
    aggregator = ForecastAggregator({QWEATHER: client})
    try:
        with pytest.raises(AggregationError) as excinfo:
            aggregator.aggregate(QWEATHER, coords, "en", "c")
    finally:
        aggregator.close()
    assert excinfo.value.provider_id == QWEATHER
    assert isinstance(excinfo.value.cause, (NetworkError, DecodeError))


def test_auth_failure_fails_the_aggregation(qw_transport, coords):
    client = QWeatherClient(qw_transport, StaticTokenSupplier(fail=True), QWEATHER_URL)
    aggregator = ForecastAggregator({QWEATHER: client})
    try:
        with pytest.raises(AggregationError) as excinfo:
            aggregator.aggregate(QWEATHER, coords, "en", "c")
    finally:
        aggregator.close()
    assert isinstance(excinfo.value.cause, AuthError)


def test_openmeteo_air_failure_fails_the_aggregation(coords):
    routes = openmeteo_routes()
    routes["/v1/air-quality"] = json_response({}, status_code=503)
    aggregator = ForecastAggregator({OPENMETEO: OpenMeteoClient(FakeTransport(routes))})
    try:
        with pytest.raises(AggregationError) as excinfo:
            aggregator.aggregate(OPENMETEO, coords, "en", "c")
    finally:
        aggregator.close()
    assert excinfo.value.failed == "air_quality"


def test_unknown_provider(om_client, coords):
    aggregator = ForecastAggregator({OPENMETEO: om_client})
    try:
        assert not aggregator.supports(QWEATHER)
        with pytest.raises(ValueError):
            aggregator.aggregate(QWEATHER, coords, "en", "c")
    finally:
        aggregator.close()


def test_programming_errors_are_not_masked(coords):
    class Broken:
        provider_id = "broken"

        def sub_fetches(self, coords, language, unit):
            return {"current": lambda: 1 / 0}

    aggregator = ForecastAggregator({"broken": Broken()})
    try:
        with pytest.raises(ZeroDivisionError):
            aggregator.aggregate("broken", coords, "en", "c")
    finally:
        aggregator.close()


class ManualExecutor(Executor):
    """Runs the first submitted task inline and queues the rest until asked."""

    def __init__(self) -> None:
        self.queued = []
        self._started = False

    def submit(self, fn, *args, **kwargs):
        fut = Future()
        if self._started:
            self.queued.append((fut, lambda: fn(*args, **kwargs)))
            return fut
        self._started = True
        self._run(fut, lambda: fn(*args, **kwargs))
        return fut

    @staticmethod
    def _run(fut, call) -> None:
        if not fut.set_running_or_notify_cancel():
            return
        try:
            fut.set_result(call())
        except Exception as exc:
            fut.set_exception(exc)

    def run_queued(self) -> int:
        ran = 0
        for fut, call in self.queued:
            if not fut.cancelled():
                self._run(fut, call)
                ran += 1
        return ran


class TestFetchGroup(unittest.TestCase):
    def setUp(self) -> None:
        self.executor = ThreadPoolExecutor(max_workers=2)

    def tearDown(self) -> None:
        self.executor.shutdown(wait=True)

    def test_join_returns_every_result_by_name(self) -> None:
        group = FetchGroup(self.executor)
        group.spawn("a", lambda: 1)
        group.spawn("b", lambda: "two")
        group.spawn("c", lambda: [3])
        self.assertEqual(group.join(), {"a": 1, "b": "two", "c": [3]})

    def test_empty_group(self) -> None:
        self.assertEqual(FetchGroup(self.executor).join(), {})

    def test_duplicate_names_rejected(self) -> None:
        group = FetchGroup(self.executor)
        group.spawn("a", lambda: 1)
        with self.assertRaises(ValueError):
            group.spawn("a", lambda: 2)
        group.join()

    def test_first_failure_cancels_queued_tasks(self) -> None:
        executor = ManualExecutor()
        ran = []

        def fail():
            raise NetworkError("down")

        group = FetchGroup(executor)
        group.spawn("current", fail)
        group.spawn("hourly", lambda: ran.append("hourly"))
        group.spawn("daily", lambda: ran.append("daily"))
        with self.assertRaises(TaskFailed) as ctx:
            group.join()
        self.assertEqual(ctx.exception.name, "current")
        self.assertIsInstance(ctx.exception.cause, NetworkError)
        self.assertTrue(all(fut.cancelled() for fut, _ in executor.queued))
        self.assertEqual(executor.run_queued(), 0)
        self.assertEqual(ran, [])

    def test_running_tasks_finish_after_failure(self) -> None:
        finished = threading.Event()

        def slow():
            time.sleep(0.2)
            finished.set()
            return "late"

        def fail():
            raise DecodeError("bad payload")

        group = FetchGroup(self.executor)
        group.spawn("slow", slow)
        group.spawn("fail", fail)
        with self.assertRaises(TaskFailed) as ctx:
            group.join()
        self.assertEqual(ctx.exception.name, "fail")
        self.assertTrue(finished.wait(timeout=5))


def test_result_is_zero_value_type():
    assert WeatherResult().is_empty()
    assert not WeatherResult(hourly=[]).current.temperature
