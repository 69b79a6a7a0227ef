#!/usr/bin/env python
"""
BandScrape discovery client.

Samples random Bandcamp track ids forever, one request per pacing interval,
and ships each batch of discoveries to the collector.

Usage: python scrape.py [--submit-url URL] [--batches N]
"""

import argparse
import logging
import signal
import sys

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

from config import Config
from bandscrape.observability import configure_logging
from bandscrape.settings import build_sampler, load_scraper_settings
from bandscrape.utils.cancellation import CancellationRequested, CancelToken

logger = logging.getLogger("bandscrape.scrape")


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Discover Bandcamp tracks by random id sampling.")
    parser.add_argument("--submit-url", help="collector ingestion endpoint (default: BANDSCRAPE_SUBMIT_URL)")
    parser.add_argument("--batch-size", type=int, help="sampling attempts per submitted batch")
    parser.add_argument("--pacing-ms", type=int, help="minimum milliseconds between requests")
    parser.add_argument("--batches", type=int, default=0, help="stop after N batches (0 = run forever)")
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)
    log_file_path = configure_logging(Config.LOG_DIR, level=Config.LOG_LEVEL, enable_console=True)
    logger.info("File logging initialized at %s", log_file_path)

    settings = load_scraper_settings({
        "submit_url": args.submit_url,
        "batch_size": args.batch_size,
        "pacing_ms": args.pacing_ms,
    })
    sampler = build_sampler(settings)

    token = CancelToken()

    def _stop(signum, frame):
        logger.info("Received signal %s, stopping after the current request", signum)
        token.cancel()

    signal.signal(signal.SIGINT, _stop)
    signal.signal(signal.SIGTERM, _stop)

    if args.batches > 0:
        try:
            for _ in range(args.batches):
                sampler.run_batch(token)
        except CancellationRequested:
            logger.info("Stopped; in-progress batch discarded")
    else:
        sampler.run_forever(token)

    logger.info("Final totals: %s", sampler.stats.to_dict())
    return 0


if __name__ == "__main__":
    sys.exit(main())
