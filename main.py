"""Entry point for the GELF log adapter.

Reads JSON-lines container log records from stdin (or --input FILE) and
streams them to every configured route.
"""

import argparse
import logging
import signal
import sys
import threading

from gelf_adapter.adapter import AdapterConstructionError, create_adapter
from gelf_adapter.config import load_config, load_routes
from gelf_adapter.dashboard import create_dashboard_app, run_dashboard
from gelf_adapter.failure_tracker import FailureTracker
from gelf_adapter.metrics import Metrics
from gelf_adapter.source import RecordQueue, read_records


def _pump(stream, queues: list[RecordQueue], shutdown_event: threading.Event):
    """Fan records out to every adapter queue, then close them all."""
    try:
        for record in read_records(stream):
            if shutdown_event.is_set():
                break
            for q in queues:
                q.put(record)
    finally:
        for q in queues:
            q.close()


def main(argv=None):
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s - %(message)s",
        stream=sys.stderr,
    )
    logger = logging.getLogger(__name__)

    parser = argparse.ArgumentParser(description="GELF log adapter")
    parser.add_argument("--input", type=str, default=None,
                        help="JSON-lines record file (default: stdin)")
    args = parser.parse_args(argv)

    config = load_config()
    try:
        routes = load_routes(config)
    except (OSError, ValueError) as e:
        logger.error("Invalid route configuration: %s", e)
        return 1
    if not routes:
        logger.error("No routes configured, set ROUTE or ROUTES_FILE")
        return 1

    metrics = Metrics()
    failures = FailureTracker(config.max_failures)
    adapters = []
    for route in routes:
        try:
            adapters.append(create_adapter(route, config, metrics, failures))
        except AdapterConstructionError as e:
            logger.error("Cannot start adapter for %s: %s", route.address, e)
            for adapter in adapters:
                adapter.close()
            return 1

    shutdown_event = threading.Event()

    def signal_handler(signum, frame):
        logger.info("Received signal %d, shutting down...", signum)
        shutdown_event.set()

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    if config.dashboard_port:
        app = create_dashboard_app(metrics, failures, [r.address for r in routes])
        dash_thread = threading.Thread(target=run_dashboard, args=(app, config.dashboard_port), daemon=True)
        dash_thread.start()
        logger.info("Dashboard running on port %d", config.dashboard_port)

    queues = [RecordQueue() for _ in adapters]
    workers = [
        threading.Thread(target=adapter.stream, args=(q,), name=f"gelf-{adapter.route.address}")
        for adapter, q in zip(adapters, queues)
    ]
    for worker in workers:
        worker.start()

    logger.info("Host %s shipping to %d route(s)", config.hostname, len(adapters))
    stream = open(args.input, "r", encoding="utf-8") if args.input else sys.stdin
    pump = threading.Thread(target=_pump, args=(stream, queues, shutdown_event), daemon=True)
    pump.start()

    try:
        while pump.is_alive() and not shutdown_event.is_set():
            pump.join(timeout=0.5)
    finally:
        if pump.is_alive():
            # Pump is blocked on input; close the queues ourselves.
            for q in queues:
                q.close()
        for worker in workers:
            worker.join(timeout=5)
        for adapter in adapters:
            adapter.close()
        if args.input:
            stream.close()
        logger.info("Adapter stopped. Stats: %s", metrics.snapshot())
    return 0


if __name__ == "__main__":
    sys.exit(main())
