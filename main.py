"""Log sink demo — several producer threads log through one batching writer."""

import argparse
import logging
import random
import signal
import sys
import threading
import time

import yaml

from logsink.config import load_config, load_yaml_config
from logsink.models import LogLevel
from logsink.writer import LogWriter

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [log-sink] %(levelname)s %(message)s",
    stream=sys.stderr,
)
logger = logging.getLogger(__name__)

_running = True


def _signal_handler(sig, _frame):
    global _running
    logger.info("Shutdown signal received (signal %d), stopping...", sig)
    _running = False


LEVELS = [LogLevel.INFO, LogLevel.INFO, LogLevel.INFO, LogLevel.DEBUG, LogLevel.WARNING, LogLevel.ERROR]
MODULES = ["auth-api", "order-svc", "payment-gw", "user-svc", "catalog-api"]
MESSAGES = {
    LogLevel.INFO: [
        "Request processed successfully",
        "Health check passed",
        "Cache hit for user session",
        "Database query completed in 12ms",
    ],
    LogLevel.DEBUG: [
        "Entering request handler",
        "Parsed request body",
        "Token validation started",
    ],
    LogLevel.WARNING: [
        "Slow query detected (>500ms)",
        "Connection pool nearing capacity",
        "Retry attempt 2 for upstream call",
    ],
    LogLevel.ERROR: [
        "Failed to connect to database",
        "Timeout waiting for upstream response",
        "Unhandled exception in request handler",
    ],
}


def build_cli_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Batching log sink demo")
    parser.add_argument("--config", default=None, help="Path to YAML writer config")
    parser.add_argument("--file", default=None, help="Destination file name")
    parser.add_argument("--dir", default=None, help="Destination folder (default: ./logs)")
    parser.add_argument("--mode", default=None,
                        help="disabled, only_file, only_console or full")
    parser.add_argument("--level", default=None, help="Minimum level (trace .. fatal)")
    parser.add_argument("--threads", type=int, default=4, help="Producer threads")
    parser.add_argument("--rate", type=float, default=20.0,
                        help="Messages per second per producer")
    parser.add_argument("--duration", type=float, default=0,
                        help="Seconds to run (0 = until interrupted)")
    return parser


def produce(writer: LogWriter, rate: float):
    delay = 1.0 / rate if rate > 0 else 0
    while _running:
        level = random.choice(LEVELS)
        writer.log(
            level,
            random.choice(MODULES),
            random.choice(MESSAGES[level]),
            function="produce",
            source_file="main.py",
        )
        time.sleep(delay)


def main():
    global _running
    signal.signal(signal.SIGINT, _signal_handler)
    signal.signal(signal.SIGTERM, _signal_handler)

    args = build_cli_parser().parse_args()
    try:
        config = load_config(args, load_yaml_config(args.config))
    except (ValueError, yaml.YAMLError) as e:
        logger.error("Invalid configuration: %s", e)
        sys.exit(2)

    writer = LogWriter(config)
    logger.info(
        "Config: destination=%s, mode=%s, level=%s, debounce=%dms, max_size=%d bytes, archive=%s",
        writer.destination, config.mode.value, config.level.text, config.debounce_ms,
        config.max_file_size_bytes, config.archive_enabled,
    )
    writer.start()

    producers = [
        threading.Thread(target=produce, args=(writer, args.rate), daemon=True)
        for _ in range(args.threads)
    ]
    for t in producers:
        t.start()

    deadline = time.monotonic() + args.duration if args.duration > 0 else None
    try:
        while _running:
            if deadline is not None and time.monotonic() >= deadline:
                break
            time.sleep(0.2)
    except KeyboardInterrupt:
        pass

    _running = False
    for t in producers:
        t.join(timeout=2)

    writer.close_destination()
    logger.info("Shut down cleanly. Status: %s", writer.status.snapshot())


if __name__ == "__main__":
    main()
