"""Zeebe REST API Models.

Pydantic models for the job payloads exchanged with the Camunda 8 REST API.
Field aliases follow the API's camelCase names.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator


class ActivatedJob(BaseModel):
    """A job handed out by the engine.

    Attributes:
        key: Engine job key (opaque; kept as a string)
        type: Job type tag
        variables: Flat map of process variables visible to the job
        retries: Remaining retry budget
        deadline: Activation deadline, epoch milliseconds
        process_instance_key: Owning process instance
        element_id: BPMN element that created the job
        worker: Worker name the job was activated for
        custom_headers: Task headers defined in the model
    """
    key: str = Field(..., alias="jobKey")
    type: str
    variables: Dict[str, Any] = Field(default_factory=dict)
    retries: int = Field(default=0, ge=0)
    deadline: Optional[int] = None
    process_instance_key: Optional[str] = Field(default=None, alias="processInstanceKey")
    element_id: Optional[str] = Field(default=None, alias="elementId")
    worker: Optional[str] = None
    custom_headers: Dict[str, Any] = Field(default_factory=dict, alias="customHeaders")

    @field_validator("key", "process_instance_key", mode="before")
    @classmethod
    def _key_to_str(cls, value):
        # Older gateways return keys as numbers
        return str(value) if value is not None else None

    @field_validator("variables", "custom_headers", mode="before")
    @classmethod
    def _none_to_empty(cls, value):
        return value or {}

    class Config:
        populate_by_name = True


class JobActivationRequest(BaseModel):
    """Body of POST /v2/jobs/activation."""
    type: str
    worker: str
    timeout: int = Field(..., description="Activation timeout in milliseconds")
    max_jobs_to_activate: int = Field(..., alias="maxJobsToActivate", gt=0)
    request_timeout: Optional[int] = Field(default=None, alias="requestTimeout")
    fetch_variable: Optional[List[str]] = Field(default=None, alias="fetchVariable")

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)

    class Config:
        populate_by_name = True


class JobActivationResponse(BaseModel):
    """Body returned by POST /v2/jobs/activation."""
    jobs: List[ActivatedJob] = Field(default_factory=list)
