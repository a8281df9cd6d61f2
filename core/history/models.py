"""Job History Data Models.

- JobStatus: Outcome of a processed job
- ExecutionRecord: One immutable ledger entry per processed job
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class JobStatus(str, Enum):
    """Outcome of a processed job."""
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"


class ExecutionRecord(BaseModel):
    """A processed job as stored in the execution ledger.

    Attributes:
        id: Ledger row id (assigned on append)
        job_type: Job type tag
        job_key: Engine key of the job
        status: COMPLETED or FAILED
        variables: JSON of the job's input variables
        result: JSON of the completion payload (completed jobs)
        error_message: Error reported to the engine (failed jobs)
        execution_time: Wall-clock time the job finished
        execution_time_ms: Time spent processing the job
    """
    id: Optional[int] = None
    job_type: str = Field(..., description="Job type tag")
    job_key: str = Field(..., description="Engine job key")
    status: JobStatus
    variables: Optional[str] = Field(default=None, description="Input variables as JSON")
    result: Optional[str] = Field(default=None, description="Completion payload as JSON")
    error_message: Optional[str] = None
    execution_time: datetime = Field(default_factory=datetime.now)
    execution_time_ms: Optional[int] = Field(default=None, ge=0)

    class Config:
        frozen = True
        from_attributes = True
