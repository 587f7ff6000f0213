"""
Command-line entry point for the cyclist fall alert system.

Replays a recorded accelerometer trace, or reads live samples
(timestamp_ms,x,y,z per line) from stdin on a reader thread.
"""

import argparse
import logging
import signal
import sys
import threading

from cyclist_alert.config import get_settings
from cyclist_alert.host import CyclistAlertSystem
from cyclist_alert.sensors import CsvSampleSource, QueueSampleSource


def setup_logging(settings):
    """Setup logging configuration."""
    log_file = settings.LOG_DIR / "cyclist_alert.log"

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.FileHandler(log_file), logging.StreamHandler(sys.stdout)],
    )


logger = logging.getLogger(__name__)


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Cyclist fall detection and SMS alert")
    parser.add_argument(
        "--replay", type=str, default=None,
        help="CSV trace to replay (timestamp_ms,x,y,z); reads stdin when omitted",
    )
    parser.add_argument(
        "--sensitivity", type=float, default=None,
        help="Sensitivity factor (overrides FALL_SENSITIVITY)",
    )
    parser.add_argument(
        "--dry-run", action="store_true",
        help="Log alert messages instead of sending SMS",
    )
    parser.add_argument("--contact-name", type=str, default=None)
    parser.add_argument("--contact-number", type=str, default=None)
    parser.add_argument(
        "--location", type=float, nargs=2, metavar=("LAT", "LON"), default=None,
        help="Seed the last known location",
    )
    return parser.parse_args(argv)


def _read_stdin(source: QueueSampleSource):
    """Reader thread: push stdin lines into the sample source."""
    try:
        for line_no, line in enumerate(sys.stdin, start=1):
            line = line.strip()
            if not line or line.startswith("#"):
                continue
            try:
                ts, x, y, z = line.split(",")
                source.push_values(int(float(ts)), float(x), float(y), float(z))
            except (ValueError, OverflowError):
                logger.warning(f"Skipping malformed line {line_no}: {line!r}")
    finally:
        source.close()


def main(argv=None):
    """Main entry point."""
    args = parse_args(argv)
    settings = get_settings()
    setup_logging(settings)

    logger.info("=" * 80)
    logger.info("Cyclist Fall Alert")
    logger.info("=" * 80)
    settings.log_config()

    system = CyclistAlertSystem(settings=settings, dry_run=args.dry_run)

    if args.sensitivity is not None:
        system.adjust_sensitivity(args.sensitivity)
    if args.contact_number:
        system.set_contact(args.contact_name or "Unknown", args.contact_number)
    if args.location:
        system.on_location(*args.location)

    if args.replay:
        try:
            source = CsvSampleSource(args.replay)
        except (OSError, ValueError) as e:
            logger.error(f"Cannot load trace: {e}")
            return 1
    else:
        source = QueueSampleSource()
        threading.Thread(target=_read_stdin, args=(source,), daemon=True).start()

    # Setup signal handlers for graceful shutdown
    def signal_handler(sig, frame):
        logger.info(f"Received signal {sig}")
        source.close()

    signal.signal(signal.SIGTERM, signal_handler)
    signal.signal(signal.SIGINT, signal_handler)

    try:
        detected = system.run(source)
    except Exception as e:
        logger.error(f"Fatal error: {e}", exc_info=True)
        return 1

    logger.info(f"Session finished: {detected} fall(s) detected")
    return 0


if __name__ == "__main__":
    sys.exit(main())
