#!/usr/bin/env python3
"""Salon POS - web API entry point

Starts the JSON API used by the point-of-sale and back-office clients:
appointments, checkout, customers, staff, services, reports.

Usage:
    python app.py

    # Custom port
    python app.py --port 8080

    # Custom database
    python app.py --db sqlite:///data/salon.db

    # Seed default staff and services on start-up
    python app.py --seed

Environment (or .env, see scripts/setup_env.py):
    DATABASE_URL   Database connection URL
    WEB_HOST       Listen address (default 0.0.0.0)
    WEB_PORT       Listen port (default 8080)
    LOG_LEVEL      Log level (default INFO)
    LOG_FILE       Optional rotating log file
"""
import argparse
import asyncio
import signal

from loguru import logger

from config.log_config import setup_logging
from config.settings import settings


async def _cleanup(web, db):
    """Stop the web server and close the database, releasing port and file handles."""
    logger.info("Cleaning up...")

    if web is not None:
        try:
            await web.shutdown()
        except Exception as e:
            logger.warning(f"Error while stopping web server: {e}")

    if db is not None:
        try:
            db.close()
        except Exception as e:
            logger.warning(f"Error while closing database: {e}")

    logger.info("Service stopped")


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Salon POS web API")
    parser.add_argument("--host", default=settings.web_host,
                        help=f"Listen address (default: {settings.web_host})")
    parser.add_argument("--port", type=int, default=settings.web_port,
                        help=f"Listen port (default: {settings.web_port})")
    parser.add_argument("--db", default=settings.database_url,
                        help="Database connection URL")
    parser.add_argument("--log-level", default=settings.log_level,
                        help=f"Log level (default: {settings.log_level})")
    parser.add_argument("--seed", action="store_true",
                        help="Seed default staff and services if the tables are empty")
    return parser.parse_args(argv)


async def main():
    args = parse_args()
    setup_logging(args.log_level, settings.log_file)

    web = None
    db = None

    try:
        from database import DatabaseManager
        db = DatabaseManager(args.db)
        db.create_tables()
        logger.info(f"Database connected: {db.database_url}")

        if args.seed:
            db.seed()

        from interface.web import WebServer
        web = WebServer(db, host=args.host, port=args.port)
        await web.startup()

        print()
        print("=" * 60)
        print("  Salon POS API started!")
        print(f"  URL:      http://localhost:{args.port}")
        print(f"  Docs:     http://localhost:{args.port}/docs")
        print(f"  Database: {db.database_url}")
        print("=" * 60)
        print("  Press Ctrl+C to stop")
        print()

        loop = asyncio.get_running_loop()
        shutdown_event = asyncio.Event()
        _shutdown_requested = False

        def signal_handler(signum):
            nonlocal _shutdown_requested
            if _shutdown_requested:
                # Second signal: stop waiting for a graceful shutdown
                logger.warning("Signal received again, forcing exit...")
                for task in asyncio.all_tasks(loop):
                    task.cancel()
                return
            _shutdown_requested = True
            logger.info(f"Received signal {signum}, shutting down...")
            shutdown_event.set()

        for sig in (signal.SIGINT, signal.SIGTERM):
            loop.add_signal_handler(sig, signal_handler, sig)

        await shutdown_event.wait()

    except asyncio.CancelledError:
        logger.info("Task cancelled, cleaning up...")
    except KeyboardInterrupt:
        logger.info("Keyboard interrupt received")
    finally:
        await _cleanup(web, db)


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except (KeyboardInterrupt, SystemExit):
        pass
    finally:
        print("\nStopped.")
