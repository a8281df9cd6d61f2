"""Job workers: handlers for each job type and the dispatch loop."""

from pathlib import Path
from typing import Dict

from records.db import DEFAULT_DB_PATH
from workers.dispatch import JobHandler, JobPollingService, JobTypePoller, PollingState
from workers.match_customer import MatchCustomerHandler
from workers.query_company import QueryCompanyHandler
from workers.search_employee import SearchEmployeeHandler


JOB_TYPES = (
    MatchCustomerHandler.job_type,
    SearchEmployeeHandler.job_type,
    QueryCompanyHandler.job_type,
)


def build_handlers(db_path: Path = DEFAULT_DB_PATH) -> Dict[str, JobHandler]:
    """Create one handler per supported job type."""
    handlers = (
        MatchCustomerHandler(db_path),
        SearchEmployeeHandler(db_path),
        QueryCompanyHandler(db_path),
    )
    return {handler.job_type: handler for handler in handlers}


__all__ = [
    "JOB_TYPES",
    "build_handlers",
    "JobHandler",
    "JobPollingService",
    "JobTypePoller",
    "PollingState",
    "MatchCustomerHandler",
    "QueryCompanyHandler",
    "SearchEmployeeHandler",
]
