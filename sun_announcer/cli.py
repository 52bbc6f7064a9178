import argparse
import asyncio
import logging
import signal
from typing import Optional, Sequence

from .announcer import Announcer
from .astronomy import AstralSunOracle
from .errors import ConfigParseError, LocationError, SunAnnouncerError
from .location import IPLocationProvider, StaticLocationProvider
from .notifier import Notifier
from .settings import load_settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(level=logging.INFO if verbose else logging.WARNING, format=LOG_FORMAT)


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="sun-announcer",
        description="Notify (and speak) a few minutes before every sunrise and sunset at your location.",
    )
    ap.add_argument("--env-file", type=str, default=".env", help="Settings file (default: .env)")
    ap.add_argument("--lat", type=float, help="Latitude (decimal); skips IP geolocation")
    ap.add_argument("--lon", type=float, help="Longitude (decimal); skips IP geolocation")
    ap.add_argument("--once", action="store_true",
                    help="Print today's sunrise/sunset for the location and exit")
    return ap


def build_location_provider(args):
    if (args.lat is None) != (args.lon is None):
        raise SystemExit("Provide both --lat and --lon, or neither to use IP geolocation.")
    if args.lat is None:
        return IPLocationProvider()
    try:
        return StaticLocationProvider(args.lat, args.lon)
    except LocationError as e:
        raise SystemExit(str(e))


async def _print_once(announcer: Announcer) -> None:
    try:
        coords, times = await announcer.locate_and_compute()
    except SunAnnouncerError as e:
        raise SystemExit(f"Could not compute sun times ({e}).")
    print(f"Location: {coords.latitude}, {coords.longitude}")
    print(f"Sunrise:  {times.sunrise}")
    print(f"Sunset:   {times.sunset}")


async def _run(announcer: Announcer) -> None:
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, announcer.stop)
        except NotImplementedError:
            # Windows event loops have no signal handler support; Ctrl+C still raises
            pass
    await announcer.run_forever()


def main(argv: Optional[Sequence[str]] = None) -> None:
    args = build_parser().parse_args(argv)

    try:
        settings = load_settings(args.env_file)
    except ConfigParseError as e:
        raise SystemExit(f"Invalid configuration: {e}")

    configure_logging(settings.verbose)
    announcer = Announcer(
        settings,
        build_location_provider(args),
        AstralSunOracle(),
        Notifier(settings),
    )

    try:
        asyncio.run(_print_once(announcer) if args.once else _run(announcer))
    except KeyboardInterrupt:
        announcer.stop()


if __name__ == "__main__":
    main()
