import pytest

from weather_aggregator.geo import Coordinates
from weather_aggregator.providers.openmeteo import OpenMeteoClient
from weather_aggregator.providers.qweather import QWeatherClient

from weather_aggregator.tests.fakes import QWEATHER_URL, FakeTransport, StaticTokenSupplier, openmeteo_routes, qweather_routes


@pytest.fixture
def coords() -> Coordinates:
    return Coordinates.parse("39.90", "116.40")


@pytest.fixture
def token_supplier() -> StaticTokenSupplier:
    return StaticTokenSupplier()


@pytest.fixture
def om_transport() -> FakeTransport:
    return FakeTransport(openmeteo_routes())


@pytest.fixture
def qw_transport() -> FakeTransport:
    return FakeTransport(qweather_routes())


@pytest.fixture
def om_client(om_transport) -> OpenMeteoClient:
    return OpenMeteoClient(om_transport)


@pytest.fixture
def qw_client(qw_transport, token_supplier) -> QWeatherClient:
    return QWeatherClient(qw_transport, token_supplier, QWEATHER_URL)
