import asyncio
import threading

from client.position import (
    CallbackPositionProvider,
    Coordinates,
    FixedPositionProvider,
    Geolocator,
    Position,
    PositionError,
    PositionErrorCode,
    PositionOptions,
    PositionProvider,
)


class FailingProvider(PositionProvider):
    def __init__(self, error):
        self.error = error

    async def get_current_position(self, options):
        raise self.error


class SlowProvider(PositionProvider):
    async def get_current_position(self, options):
        await asyncio.sleep(5)


class CountingProvider(FixedPositionProvider):
    calls = 0

    async def get_current_position(self, options):
        self.calls += 1
        return await super().get_current_position(options)


def locate(provider, options=None, clock=None):
    geolocator = Geolocator(provider, clock=clock) if clock else Geolocator(provider)
    return asyncio.run(geolocator.get_current_position(options))


def test_default_options():
    options = PositionOptions()

    assert options.enable_high_accuracy is False
    assert options.timeout == 15.0
    assert options.maximum_age == 60.0


def test_fixed_provider_success():
    result = locate(FixedPositionProvider(37.0, -122.0))

    assert result.ok
    assert result.position.coords == Coordinates(37.0, -122.0)


def test_permission_denied():
    result = locate(FailingProvider(PositionError(PositionErrorCode.PERMISSION_DENIED)))

    assert not result.ok
    assert result.error == PositionErrorCode.PERMISSION_DENIED
    assert result.message == 'Permission denied. Please allow location to continue.'


def test_position_unavailable():
    result = locate(FailingProvider(PositionError(2)))

    assert result.message == 'Position unavailable.'


def test_timeout_is_enforced_by_geolocator():
    result = locate(SlowProvider(), PositionOptions(timeout=0.01))

    assert result.error == PositionErrorCode.TIMEOUT
    assert result.message == 'Location request timed out.'


def test_unexpected_provider_failure_is_other():
    result = locate(FailingProvider(RuntimeError('gps chip on fire')))

    assert result.error == PositionErrorCode.UNKNOWN
    assert result.message == 'Geolocation error occurred.'


def test_unknown_error_code_maps_to_other():
    assert PositionError(42).code == PositionErrorCode.UNKNOWN


def test_recent_fix_is_reused():
    now = [1000.0]
    provider = CountingProvider(10.0, 20.0, clock=lambda: now[0])
    geolocator = Geolocator(provider, clock=lambda: now[0])

    async def twice():
        first = await geolocator.get_current_position()
        now[0] += 30
        second = await geolocator.get_current_position()
        now[0] += 61
        third = await geolocator.get_current_position()
        return first, second, third

    first, second, third = asyncio.run(twice())

    assert first.position == second.position
    assert third.ok
    assert provider.calls == 2


def test_callback_provider_success_from_thread():
    def get_position(on_success, on_error, options):
        position = Position(Coordinates(1.5, 2.5), 0.0)
        threading.Thread(target=on_success, args=(position,)).start()

    result = locate(CallbackPositionProvider(get_position))

    assert result.position.coords.latitude == 1.5


def test_callback_provider_error_code():
    def get_position(on_success, on_error, options):
        on_error(PositionErrorCode.PERMISSION_DENIED)

    result = locate(CallbackPositionProvider(get_position))

    assert result.error == PositionErrorCode.PERMISSION_DENIED


def test_callback_provider_receives_options():
    received = []

    def get_position(on_success, on_error, options):
        received.append(options)
        on_success(Position(Coordinates(0.0, 0.0), 0.0))

    options = PositionOptions(timeout=3.0, maximum_age=0)
    locate(CallbackPositionProvider(get_position), options)

    assert received == [options]


def test_fix_stamped_in_the_future_is_not_reused():
    now = [1000.0]
    # millisecond stamp from a browser-style source
    provider = CountingProvider(10.0, 20.0, clock=lambda: now[0] * 1000)
    geolocator = Geolocator(provider, clock=lambda: now[0])

    async def twice():
        await geolocator.get_current_position()
        now[0] += 1
        return await geolocator.get_current_position()

    second = asyncio.run(twice())

    assert second.ok
    assert provider.calls == 2
