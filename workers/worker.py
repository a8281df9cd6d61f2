"""Zeebe job worker for the record lookup jobs.

Polls Camunda 8 for the job types below, resolves records from the local
store and reports the results back to the engine:
- match-customer-with-dri: customer lookup paired with its DRI employee
- search-employee: employee search by name, department and title
- query-for-company: external company search by name and city

Run with --job-type <type> (repeatable) to poll a subset of job types.
Run with --once to do a single poll cycle and exit.
"""

import argparse
import asyncio
import logging
from pathlib import Path
from typing import List, Optional

from zeebe_client import get_polling_config, get_records_db_path, get_zeebe_client
from connectors.zeebe import ZeebeConnectionService
from core.history import JobHistoryLedger
from core.observability.logging import configure_logging, get_logger
from records.db import DEFAULT_DB_PATH, init_records_db, seed_sample_records
from workers import JOB_TYPES, build_handlers
from workers.dispatch import JobPollingService


logger = get_logger(__name__)


async def run_worker(
    job_types: Optional[List[str]] = None,
    once: bool = False,
    seed: bool = False,
    db_path: Optional[Path] = None,
):
    """Start polling the given job types.

    Args:
        job_types: Job types to poll (default: all)
        once: Run a single poll cycle and return
        seed: Seed the sample records before polling
        db_path: Record store path (default: RECORDS_DB_PATH or records.db)

    Raises:
        ValueError: If the Zeebe configuration is incomplete
    """
    db_path = db_path or get_records_db_path() or DEFAULT_DB_PATH
    job_types = job_types or list(JOB_TYPES)

    init_records_db(db_path)
    if seed:
        seed_sample_records(db_path)

    ledger = JobHistoryLedger(db_path)
    handlers = build_handlers(db_path)
    client = None

    try:
        client = await get_zeebe_client()
        logger.info(f"Connected to Zeebe REST gateway: {client.config.rest_address}")

        connection = ZeebeConnectionService(client)
        service = JobPollingService(client, connection, ledger, get_polling_config())
        for job_type in job_types:
            service.register(job_type, handlers[job_type])
            logger.info(f"  Registered handler for job type: {job_type}")

        if once:
            service.start()
            counts = await service.tick()
            service.stop()
            logger.info(f"Single poll cycle processed: {counts}")
            return

        logger.info("Worker running... (Ctrl+C to stop)")
        await service.run()

    except asyncio.CancelledError:
        logger.info("Worker interrupted by user")
    except Exception as e:
        logger.error(f"Worker error: {e}", exc_info=True)
        raise
    finally:
        if client:
            await client.disconnect()
            logger.info("Client closed")


def main():
    """Entry point for worker with CLI args."""
    parser = argparse.ArgumentParser(description="Records Zeebe Job Worker")
    parser.add_argument(
        "--job-type", "-t",
        action="append",
        choices=list(JOB_TYPES),
        dest="job_types",
        help="Job type to poll (repeatable, default: all)"
    )
    parser.add_argument(
        "--once",
        action="store_true",
        help="Run a single poll cycle and exit"
    )
    parser.add_argument(
        "--seed",
        action="store_true",
        help="Seed sample records before polling"
    )
    parser.add_argument(
        "--json-logs",
        action="store_true",
        help="Emit JSON log lines"
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: INFO)"
    )

    args = parser.parse_args()
    configure_logging(level=getattr(logging, args.log_level), json_format=args.json_logs)

    try:
        asyncio.run(run_worker(job_types=args.job_types, once=args.once, seed=args.seed))
    except KeyboardInterrupt:
        logger.info("Worker interrupted by user")


if __name__ == "__main__":
    main()
