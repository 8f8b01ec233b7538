import logging
import signal
import sys

from pydantic import ValidationError

from diskwatch.config import load_settings
from diskwatch.logger import setup_logging
from diskwatch.scheduler import DiskMonitor


logger = logging.getLogger("diskwatch")


def main() -> int:
    try:
        settings = load_settings()
    except ValidationError as e:
        setup_logging()
        logger.critical("Invalid configuration: %s", e)
        return 1

    setup_logging(settings.LOG_LEVEL, settings.LOG_FILE)
    monitor = DiskMonitor(settings)

    def handle_sigterm(signum, frame):
        logger.info("Received signal %d, stopping monitor", signum)
        monitor.stop()

    signal.signal(signal.SIGTERM, handle_sigterm)

    try:
        monitor.run()
    except KeyboardInterrupt:
        logger.info("Interrupted, stopping monitor")
        monitor.stop()
    except Exception:
        logger.critical("Disk monitor aborted", exc_info=True)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
