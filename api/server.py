"""FastAPI server for the records job worker.

Exposes connection status, worker status, job history, job metrics and the
stored records. With run_worker=True the job polling service runs inside
the API process.
"""

import asyncio
import os
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from api.routes import health, jobs, records
from core.history import JobHistoryLedger
from core.observability.logging import get_logger
from records.db import DEFAULT_DB_PATH, init_records_db, seed_sample_records
from records.exceptions import BusinessError
from workers import build_handlers
from workers.dispatch import JobPollingService


logger = get_logger(__name__)


async def _start_worker(app: FastAPI) -> None:
    """Create the Zeebe client and start polling every job type."""
    from connectors.zeebe import ZeebeConnectionService
    from zeebe_client import get_polling_config, get_zeebe_client

    client = await get_zeebe_client()
    connection = ZeebeConnectionService(client)
    service = JobPollingService(client, connection, app.state.ledger, get_polling_config())
    for job_type, handler in build_handlers(app.state.db_path).items():
        service.register(job_type, handler)

    app.state.zeebe_client = client
    app.state.connection = connection
    app.state.polling_service = service
    app.state.worker_task = asyncio.create_task(service.run())


async def _stop_worker(app: FastAPI) -> None:
    service = getattr(app.state, "polling_service", None)
    task = getattr(app.state, "worker_task", None)
    if service is not None:
        service.stop()
    if task is not None:
        await task
    client = getattr(app.state, "zeebe_client", None)
    if client is not None:
        await client.disconnect()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler."""
    logger.info("Records job worker API starting up...")
    if app.state.run_worker:
        await _start_worker(app)

    yield

    if app.state.run_worker:
        await _stop_worker(app)
    logger.info("Records job worker API shutting down...")


async def business_error_handler(request: Request, exc: BusinessError) -> JSONResponse:
    """Map record lookup errors to 404."""
    return JSONResponse(status_code=404, content={"detail": exc.message})


def create_app(
    db_path: Optional[Path] = None,
    polling_service: Optional[JobPollingService] = None,
    connection=None,
    run_worker: bool = False,
    seed: bool = False,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        db_path: Record store and ledger database (default: records.db)
        polling_service: Running polling service to report on
        connection: Connection monitor to report on
        run_worker: Start a polling service in the app's lifespan
        seed: Seed the sample records on creation
    """
    app = FastAPI(
        title="Records Job Worker API",
        description="Job history, worker status and record listings for the Zeebe record lookup worker",
        version="1.0.0",
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
    )

    db_path = db_path or DEFAULT_DB_PATH
    init_records_db(db_path)
    if seed:
        seed_sample_records(db_path)

    app.state.db_path = db_path
    app.state.ledger = JobHistoryLedger(db_path)
    app.state.polling_service = polling_service
    app.state.connection = connection
    app.state.run_worker = run_worker

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(BusinessError, business_error_handler)

    app.include_router(health.router, tags=["Health"])
    app.include_router(jobs.router, prefix="/api", tags=["Jobs"])
    app.include_router(records.router, prefix="/api", tags=["Records"])

    return app


if __name__ == "__main__":
    import uvicorn
    from zeebe_client import get_records_db_path

    uvicorn.run(
        create_app(
            db_path=get_records_db_path(),
            run_worker=os.getenv("API_RUN_WORKER", "false").lower() in ("true", "1", "yes"),
            seed=True,
        ),
        host="0.0.0.0",
        port=int(os.getenv("API_PORT", "8000")),
    )
