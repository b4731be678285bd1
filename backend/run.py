"""
Paydesk Backend — Uvicorn Launcher

Usage:
    python run.py                  # serve on 0.0.0.0:8000
    python run.py --reload         # development, auto reload
    python run.py --init-db        # create tables and exit
"""
import argparse
import logging

import uvicorn

from paydesk.config import get_settings
from paydesk.database import init_db
from paydesk.logging_config import configure_logging

logger = logging.getLogger("paydesk.run")


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Paydesk payments & receipts API")
    parser.add_argument("--host", default="0.0.0.0", help="Bind host (default: 0.0.0.0)")
    parser.add_argument("--port", type=int, default=8000, help="Bind port (default: 8000)")
    parser.add_argument("--reload", action="store_true", help="Reload on code changes (single worker)")
    parser.add_argument("--workers", type=int, default=1, help="Worker processes (default: 1)")
    parser.add_argument("--init-db", action="store_true", help="Create database tables and exit")
    args = parser.parse_args(argv)

    if args.reload and args.workers > 1:
        parser.error("--reload cannot be combined with --workers > 1")
    return args


def main(argv=None):
    args = parse_args(argv)
    settings = get_settings()
    configure_logging()

    if args.init_db:
        init_db()
        logger.info("Tables created in %s", settings.DATABASE_URL)
        return

    if args.workers > 1:
        # The in-memory rate limiter is per process
        logger.warning("Running %d workers: rate limits apply per worker", args.workers)

    logger.info(
        "Serving %s on http://%s:%s (docs at /docs, gateway %s)",
        settings.APP_NAME, args.host, args.port,
        "simulated" if settings.gateway_simulated else "live",
    )
    uvicorn.run(
        "paydesk.main:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
        workers=args.workers,
        log_level="debug" if settings.DEBUG else "info",
    )


if __name__ == "__main__":
    main()
