"""
One-shot position acquisition.

Providers expose a single coroutine, get_current_position(options), that
returns a Position or raises PositionError. Geolocator wraps a provider with
the request options (timeout, maximum cached age) and turns every outcome
into a PositionResult, so callers never see an exception.
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from enum import IntEnum
from typing import Callable, Optional

logger = logging.getLogger('position')


class PositionErrorCode(IntEnum):
    UNKNOWN = 0
    PERMISSION_DENIED = 1
    POSITION_UNAVAILABLE = 2
    TIMEOUT = 3


ERROR_MESSAGES = {
    PositionErrorCode.PERMISSION_DENIED: 'Permission denied. Please allow location to continue.',
    PositionErrorCode.POSITION_UNAVAILABLE: 'Position unavailable.',
    PositionErrorCode.TIMEOUT: 'Location request timed out.',
    PositionErrorCode.UNKNOWN: 'Geolocation error occurred.',
}


class PositionError(Exception):
    def __init__(self, code, message=''):
        try:
            code = PositionErrorCode(code)
        except ValueError:
            code = PositionErrorCode.UNKNOWN
        super().__init__(message or ERROR_MESSAGES[code])
        self.code = code


@dataclass(frozen=True)
class Coordinates:
    latitude: float
    longitude: float
    accuracy: Optional[float] = None


@dataclass(frozen=True)
class Position:
    coords: Coordinates
    timestamp: float  # epoch seconds


@dataclass(frozen=True)
class PositionOptions:
    enable_high_accuracy: bool = False
    timeout: float = 15.0       # seconds
    maximum_age: float = 60.0   # seconds


@dataclass(frozen=True)
class PositionResult:
    position: Optional[Position] = None
    error: Optional[PositionErrorCode] = None
    detail: str = ''

    @property
    def ok(self) -> bool:
        return self.position is not None

    @property
    def message(self) -> str:
        return ERROR_MESSAGES[self.error] if self.error is not None else ''


class PositionProvider:
    async def get_current_position(self, options: PositionOptions) -> Position:
        raise NotImplementedError


class FixedPositionProvider(PositionProvider):
    """Serves a known coordinate pair (manual entry, simulations)."""

    def __init__(self, latitude, longitude, accuracy=None, clock=time.time):
        self.coords = Coordinates(float(latitude), float(longitude), accuracy)
        self._clock = clock

    async def get_current_position(self, options):
        return Position(self.coords, self._clock())


class CallbackPositionProvider(PositionProvider):
    """
    Adapts a callback-style API, fn(on_success, on_error, options), to a
    coroutine. The callbacks may fire from another thread.
    on_success takes a Position; on_error takes a PositionError or an error code.
    Position.timestamp must be in epoch seconds, not browser milliseconds.
    """

    def __init__(self, get_position_fn: Callable):
        self._get_position_fn = get_position_fn

    async def get_current_position(self, options):
        loop = asyncio.get_running_loop()
        future = loop.create_future()

        def settle(setter, value):
            if not future.done():
                setter(value)

        def on_success(position):
            loop.call_soon_threadsafe(settle, future.set_result, position)

        def on_error(error):
            if not isinstance(error, PositionError):
                error = PositionError(error)
            loop.call_soon_threadsafe(settle, future.set_exception, error)

        self._get_position_fn(on_success, on_error, options)
        return await future


class Geolocator:
    def __init__(self, provider: PositionProvider, clock=time.time):
        self.provider = provider
        self._clock = clock
        self._last_position: Optional[Position] = None

    def _cached(self, options: PositionOptions) -> Optional[Position]:
        if self._last_position is None or options.maximum_age <= 0:
            return None
        age = self._clock() - self._last_position.timestamp
        # A fix stamped in the future (wrong unit or clock skew) is never reused
        if age < 0 or age > options.maximum_age:
            return None
        return self._last_position

    async def get_current_position(self, options: Optional[PositionOptions] = None) -> PositionResult:
        options = options or PositionOptions()

        cached = self._cached(options)
        if cached is not None:
            logger.debug("Reusing cached position")
            return PositionResult(position=cached)

        try:
            position = await asyncio.wait_for(
                self.provider.get_current_position(options), timeout=options.timeout
            )
        except asyncio.TimeoutError:
            return PositionResult(error=PositionErrorCode.TIMEOUT)
        except PositionError as e:
            return PositionResult(error=e.code, detail=str(e))
        except Exception as e:
            logger.exception("Position provider failed")
            return PositionResult(error=PositionErrorCode.UNKNOWN, detail=str(e))

        self._last_position = position
        return PositionResult(position=position)
