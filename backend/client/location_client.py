"""
Location Client — position -> reverse geocode -> backend submission

Drives a single "find my state" run and narrates it through a StateStore
(status text plus timestamped log lines). Every failure is caught here and
shown to the user; nothing is retried and nothing propagates to the caller.
"""

from __future__ import annotations

import contextlib
import datetime
import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

import httpx

from client.position import Geolocator, PositionOptions, PositionResult
from client.state import Phase, StateStore, append_log, fail, set_phase
from services.geocode_service import GeocodeResult, GeocodeService

logger = logging.getLogger('location_client')

DEFAULT_ENDPOINT = '/api/submit-location'
DEFAULT_USER_AGENT = 'find-my-state/1.0'


@dataclass(frozen=True)
class LocationReport:
    latitude: float
    longitude: float
    state: str
    timestamp: str
    user_agent: str

    def to_payload(self) -> Dict[str, Any]:
        return {
            'latitude': self.latitude,
            'longitude': self.longitude,
            'state': self.state,
            'timestamp': self.timestamp,
            'userAgent': self.user_agent,
        }


@dataclass(frozen=True)
class SubmissionResult:
    ok: bool
    data: Optional[Any] = None
    error: Optional[str] = None


def utc_timestamp(now: Optional[datetime.datetime] = None) -> str:
    """ISO-8601 UTC with milliseconds, e.g. 2024-05-01T10:20:30.123Z"""
    now = now or datetime.datetime.now(datetime.timezone.utc)
    return now.astimezone(datetime.timezone.utc).isoformat(timespec='milliseconds').replace('+00:00', 'Z')


class LocationClient:
    def __init__(
        self,
        geolocator: Optional[Geolocator],
        geocoder: GeocodeService,
        backend_url: str,
        endpoint: str = DEFAULT_ENDPOINT,
        user_agent: str = DEFAULT_USER_AGENT,
        store: Optional[StateStore] = None,
        timeout: float = 10.0,
        position_options: Optional[PositionOptions] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.geolocator = geolocator
        self.geocoder = geocoder
        self.backend_url = backend_url.rstrip('/')
        self.endpoint = endpoint
        self.user_agent = user_agent
        self.store = store or StateStore()
        self.timeout = timeout
        self.position_options = position_options or PositionOptions()
        self._transport = transport

    @classmethod
    def from_config(cls, config, geolocator=None, **kwargs):
        geocoder = GeocodeService(config.REVERSE_GEOCODE_URL, user_agent=config.CLIENT_USER_AGENT)
        return cls(
            geolocator,
            geocoder,
            backend_url=config.BACKEND_URL,
            endpoint=config.BACKEND_ENDPOINT,
            user_agent=config.CLIENT_USER_AGENT,
            timeout=config.HTTP_TIMEOUT_SECONDS,
            **kwargs,
        )

    @property
    def submit_url(self) -> str:
        return f"{self.backend_url}{self.endpoint}"

    # ── UI helpers ──

    def log(self, *parts):
        self.store.apply(append_log, *parts)

    def set_status(self, phase: Phase, text: Optional[str] = None):
        self.store.apply(set_phase, phase, text)

    def friendly_error(self, message: str):
        self.store.apply(fail, message)

    def _new_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=self.timeout,
            headers={'User-Agent': self.user_agent},
            transport=self._transport,
        )

    @contextlib.asynccontextmanager
    async def _session(self, client: Optional[httpx.AsyncClient]):
        if client is not None:
            yield client
            return
        async with self._new_client() as new_client:
            yield new_client

    # ── Flow steps ──

    async def request_location(self) -> PositionResult:
        self.set_status(Phase.REQUESTING_PERMISSION)
        self.log('🔒 Requesting location permission from user...')
        return await self.geolocator.get_current_position(self.position_options)

    async def reverse_geocode(self, latitude: float, longitude: float, client=None) -> GeocodeResult:
        self.log('⤴ Reverse geocoding...', f"(lat: {latitude:.5f}, lon: {longitude:.5f})")
        async with self._session(client) as session:
            result = await self.geocoder.reverse_geocode(session, latitude, longitude)
        if result.ok:
            self.log('✔ Reverse geocode result:', result.state)
        else:
            self.log('✖ Reverse geocode error:', result.error)
        return result

    async def send_to_backend(self, payload: Dict[str, Any], client=None) -> SubmissionResult:
        self.log('⤴ Sending location to backend...')
        try:
            async with self._session(client) as session:
                response = await session.post(self.submit_url, json=payload)
                if not response.is_success:
                    try:
                        text = response.text
                    except Exception:
                        text = ''
                    raise httpx.HTTPStatusError(
                        f"{response.status_code} {response.reason_phrase} {text}",
                        request=response.request,
                        response=response,
                    )
                try:
                    data = response.json()
                except ValueError:
                    data = {}
        except httpx.HTTPError as e:
            error = str(e) or e.__class__.__name__
            logger.warning(f"Backend submission failed: {error}")
            self.log('✖ Backend error:', error)
            return SubmissionResult(ok=False, error=error)

        self.log('✔ Backend response received.')
        return SubmissionResult(ok=True, data=data)

    async def handle_find_state(self) -> Optional[LocationReport]:
        """
        Run one full pass. Returns the submitted report, or None when the
        run stopped early; the store carries the user-facing outcome.
        """
        if self.geolocator is None:
            self.friendly_error('Geolocation not supported by this browser.')
            return None

        position = await self.request_location()
        if not position.ok:
            logger.warning(f"Geolocation error: {position.error.name} {position.detail}")
            self.friendly_error(position.message)
            return None

        try:
            async with self._new_client() as client:
                self.set_status(Phase.LOCATION_ACQUIRED)
                lat = position.position.coords.latitude
                lon = position.position.coords.longitude
                self.log('📍 Coordinates:', f"lat={lat:.6f}", f"lon={lon:.6f}")

                self.set_status(Phase.RESOLVING_STATE)
                geocoded = await self.reverse_geocode(lat, lon, client)

                report = LocationReport(
                    latitude=lat,
                    longitude=lon,
                    state=str(geocoded.state),
                    timestamp=utc_timestamp(),
                    user_agent=self.user_agent,
                )
                payload = report.to_payload()

                self.set_status(Phase.SENDING)
                result = await self.send_to_backend(payload, client)

            if not result.ok:
                self.set_status(Phase.FAILED)
                self.log('⚠ Failed to send payload to backend.')
                return None

            self.set_status(Phase.DONE)
            self.log('✅ Sent to backend:', json.dumps(payload, ensure_ascii=False, separators=(',', ':')))
            friendly = f"Your state: {report.state}"
            self.set_status(Phase.DONE, friendly)
            self.log('🎉', friendly)
            return report
        except Exception:
            logger.exception("Unexpected error while processing location")
            self.friendly_error('Unexpected error while processing location.')
            return None

    async def find_state(self) -> Optional[LocationReport]:
        """User trigger: marks the log, then runs a fresh, independent pass."""
        self.log('--- User triggered Find My State ---')
        self.set_status(Phase.STARTING)
        return await self.handle_find_state()
