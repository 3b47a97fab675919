"""
Resolve a state/province name from GPS coordinates via OSM Nominatim.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

import httpx

logger = logging.getLogger('geocode_service')

UNKNOWN_REGION = 'Unknown'

# Address keys tried in priority order
REGION_FIELDS = ('state', 'region', 'county', 'state_district', 'province', 'village')

# zoom 8 gives state-level granularity in most countries
REVERSE_GEOCODE_PARAMS = {'format': 'jsonv2', 'zoom': 8, 'addressdetails': 1}


@dataclass(frozen=True)
class GeocodeResult:
    state: str
    raw: Optional[Dict[str, Any]] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def resolve_region(response: Any) -> str:
    """
    Pick the region name out of a Nominatim reverse response.

    Falls back to display_name, then to 'Unknown'. Empty values are skipped.
    """
    if not isinstance(response, dict):
        return UNKNOWN_REGION
    address = response.get('address')
    if not isinstance(address, dict):
        address = {}

    for field in REGION_FIELDS:
        value = address.get(field)
        if value:
            return str(value)

    display_name = response.get('display_name')
    if display_name:
        return str(display_name)
    return UNKNOWN_REGION


class GeocodeService:
    def __init__(self, base_url, user_agent=None):
        self.base_url = base_url
        self.user_agent = user_agent

    @staticmethod
    def build_params(latitude: float, longitude: float) -> Dict[str, Any]:
        params = dict(REVERSE_GEOCODE_PARAMS)
        params['lat'] = str(latitude)
        params['lon'] = str(longitude)
        return params

    def headers(self) -> Dict[str, str]:
        headers = {'Accept': 'application/json'}
        if self.user_agent:
            headers['User-Agent'] = self.user_agent
        return headers

    async def reverse_geocode(self, client: httpx.AsyncClient, latitude: float, longitude: float) -> GeocodeResult:
        """
        Look up the region for a coordinate pair. Never raises: HTTP errors,
        network failures and undecodable bodies come back as an 'Unknown'
        result carrying the error text.
        """
        try:
            response = await client.get(
                self.base_url,
                params=self.build_params(latitude, longitude),
                headers=self.headers(),
            )
            if not response.is_success:
                raise httpx.HTTPStatusError(
                    f"Reverse geocode failed: {response.status_code} {response.reason_phrase}",
                    request=response.request,
                    response=response,
                )
            data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.warning(f"Reverse geocode failed for ({latitude}, {longitude}): {e}")
            return GeocodeResult(state=UNKNOWN_REGION, error=str(e) or e.__class__.__name__)

        return GeocodeResult(state=resolve_region(data), raw=data if isinstance(data, dict) else None)
