import argparse
import asyncio
import sys

from config import Config
from client.location_client import LocationClient
from client.position import FixedPositionProvider, Geolocator
from client.render import ConsoleRenderer
from client.state import Phase


def build_client(args: argparse.Namespace) -> LocationClient:
    geolocator = None
    if args.lat is not None and args.lon is not None:
        geolocator = Geolocator(FixedPositionProvider(args.lat, args.lon, accuracy=args.accuracy))

    config = Config()
    if args.backend_url:
        config.BACKEND_URL = args.backend_url
    if args.geocode_url:
        config.REVERSE_GEOCODE_URL = args.geocode_url
    return LocationClient.from_config(config, geolocator=geolocator)


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(
        description=(
            "Resolve the state/province for a coordinate pair and report it to the backend.\n"
            "Start app.py first, or point --backend-url at a running server."
        )
    )
    parser.add_argument("--lat", type=float, default=None, help="Latitude in decimal degrees")
    parser.add_argument("--lon", type=float, default=None, help="Longitude in decimal degrees")
    parser.add_argument("--accuracy", type=float, default=None, help="Fix accuracy in metres (optional)")
    parser.add_argument("--backend-url", default=None, help="Backend base URL (default: BACKEND_URL)")
    parser.add_argument("--geocode-url", default=None, help="Reverse geocode URL (default: REVERSE_GEOCODE_URL)")

    args = parser.parse_args(argv)
    if (args.lat is None) != (args.lon is None):
        parser.error("--lat and --lon must be given together")

    client = build_client(args)
    client.store.subscribe(ConsoleRenderer())
    asyncio.run(client.find_state())

    return 0 if client.store.state.phase == Phase.DONE else 1


if __name__ == "__main__":
    sys.exit(main())
