"""Display view of ledger records.

Turns a stored ExecutionRecord into what the history API shows: formatted
time, human duration, worker display name, and the input parameters and
result highlights relevant to the job type.
"""

import json
import logging
from typing import Any, Callable, Dict, List, Optional

from pydantic import BaseModel, Field

from core.history.models import ExecutionRecord


logger = logging.getLogger(__name__)


WORKER_DISPLAY_NAMES = {
    "match-customer-with-dri": "Customer-DRI Matcher",
    "query-for-company": "Company Query Service",
    "search-employee": "Employee Search Service",
}

PROCESS_DEFINITION = "Internal Systems Process"

# Names listed in "Sample ..." result fields before eliding the rest
SAMPLE_NAME_LIMIT = 3


def format_duration(ms: Optional[int]) -> str:
    """Render a duration: "N ms" below a second, "N.N s" below a minute, else "N.N min"."""
    if ms is None:
        return "N/A"
    if ms < 1000:
        return f"{ms} ms"
    if ms < 60000:
        return f"{ms / 1000.0:.1f} s"
    return f"{ms / 60000.0:.1f} min"


def worker_display_name(job_type: str) -> str:
    return WORKER_DISPLAY_NAMES.get(job_type, job_type)


def _sample_names(items: List[Dict[str, Any]], render: Callable[[Dict[str, Any]], str]) -> str:
    names = [render(item) for item in items[:SAMPLE_NAME_LIMIT]]
    text = ", ".join(name for name in names if name)
    if len(items) > SAMPLE_NAME_LIMIT:
        text += "..."
    return text


def _present(data: Dict[str, Any], key: str) -> bool:
    return data.get(key) is not None


# =============================================================================
# Per job type extraction
# =============================================================================

def _customer_inputs(variables: Dict[str, Any]) -> Dict[str, Any]:
    inputs = {}
    if _present(variables, "customerId"):
        inputs["Customer ID"] = str(variables["customerId"])
    if _present(variables, "customerName"):
        inputs["Customer Name"] = str(variables["customerName"])
    return inputs


def _customer_results(result: Dict[str, Any]) -> Dict[str, Any]:
    results = {}
    matching = result.get("matchingResult") or {}
    if _present(matching, "status"):
        results["Status"] = matching["status"]

    pairs = matching.get("customers") or []
    if len(pairs) == 1:
        customer = pairs[0].get("customer") or {}
        employee = pairs[0].get("employee") or {}
        if _present(customer, "customerName"):
            results["Matched Customer"] = customer["customerName"]
        if _present(employee, "fullName"):
            results["Assigned DRI"] = employee["fullName"]
        if _present(employee, "department"):
            results["Department"] = employee["department"]
    elif pairs:
        results["Customers Found"] = len(pairs)
        results["Sample Customers"] = _sample_names(
            pairs, lambda pair: (pair.get("customer") or {}).get("customerName", "")
        )
    return results


def _company_inputs(variables: Dict[str, Any]) -> Dict[str, Any]:
    inputs = {}
    for key, label in (
        ("companyName", "Company Name"),
        ("industry", "Industry"),
        ("city", "City"),
        ("revenue", "Revenue"),
    ):
        if _present(variables, key):
            inputs[label] = str(variables[key])
    return inputs


def _company_results(result: Dict[str, Any]) -> Dict[str, Any]:
    results = {}
    search = result.get("companySearchResult") or {}
    if _present(search, "status"):
        results["Status"] = search["status"]

    companies = search.get("companies")
    if isinstance(companies, list):
        results["Companies Found"] = len(companies)
        sample = _sample_names(companies, lambda company: company.get("companyName", ""))
        if sample:
            results["Sample Companies"] = sample
    return results


def _employee_inputs(variables: Dict[str, Any]) -> Dict[str, Any]:
    inputs = {}
    for key, label in (
        ("employeeName", "Employee Name"),
        ("department", "Department"),
        ("jobTitle", "Job Title"),
    ):
        if _present(variables, key):
            inputs[label] = str(variables[key])
    if _present(variables, "exactMatch"):
        exact = str(variables["exactMatch"]).strip().lower() in ("true", "1", "yes")
        inputs["Exact Match"] = "Yes" if exact else "No"
    return inputs


def _employee_label(employee: Dict[str, Any]) -> str:
    name = employee.get("fullName") or ""
    if name and employee.get("department"):
        name += f" ({employee['department']})"
    return name


def _employee_results(result: Dict[str, Any]) -> Dict[str, Any]:
    results = {}
    search = result.get("employeeSearchResult") or {}
    if _present(search, "status"):
        results["Search Status"] = search["status"]
    if _present(search, "employeeCount"):
        results["Employees Found"] = search["employeeCount"]

    employees = search.get("employees") or []
    if employees:
        sample = _sample_names(employees, _employee_label)
        if sample:
            results["Sample Employees"] = sample

    # Flattened fields are only set when exactly one employee was found
    if isinstance(result.get("employeeName"), str):
        results["Employee Found"] = result["employeeName"]
    if isinstance(result.get("employeeTitle"), str):
        results["Job Title"] = result["employeeTitle"]
    if isinstance(result.get("employeeDepartment"), str):
        results["Department"] = result["employeeDepartment"]
    return results


_EXTRACTORS = {
    "match-customer-with-dri": (_customer_inputs, _customer_results),
    "query-for-company": (_company_inputs, _company_results),
    "search-employee": (_employee_inputs, _employee_results),
}


def _load_json(raw: Optional[str], record: ExecutionRecord) -> Optional[Dict[str, Any]]:
    if raw is None or not raw.strip():
        return {}
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        logger.warning(f"Failed to parse stored JSON for job history {record.id}: {e}")
        return None
    return data if isinstance(data, dict) else {}


# =============================================================================
# View model
# =============================================================================

class JobHistoryView(BaseModel):
    """A ledger record rendered for display."""
    id: Optional[int] = None
    job_type: str
    job_key: str
    status: str
    execution_time: str = Field(..., description="Formatted as YYYY-MM-DD HH:MM:SS")
    duration: str
    input_parameters: Dict[str, Any] = Field(default_factory=dict)
    results: Dict[str, Any] = Field(default_factory=dict)
    error_message: Optional[str] = None
    worker_name: str
    process_definition: str = PROCESS_DEFINITION

    @classmethod
    def from_record(cls, record: ExecutionRecord) -> "JobHistoryView":
        """Build the display view of a ledger record.

        Unparseable stored JSON is shown under a "raw" key instead of
        failing the whole history listing.
        """
        inputs: Dict[str, Any] = {}
        results: Dict[str, Any] = {}

        extract_inputs, extract_results = _EXTRACTORS.get(record.job_type, (None, None))

        variables = _load_json(record.variables, record)
        if variables is None:
            inputs["raw"] = record.variables
        elif extract_inputs is not None:
            inputs = extract_inputs(variables)

        payload = _load_json(record.result, record)
        if payload is None:
            results["raw"] = record.result
        elif extract_results is not None:
            results = extract_results(payload)

        return cls(
            id=record.id,
            job_type=record.job_type,
            job_key=record.job_key,
            status=record.status.value,
            execution_time=record.execution_time.strftime("%Y-%m-%d %H:%M:%S"),
            duration=format_duration(record.execution_time_ms),
            input_parameters=inputs,
            results=results,
            error_message=record.error_message,
            worker_name=worker_display_name(record.job_type),
        )
