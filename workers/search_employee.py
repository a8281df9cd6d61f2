"""search-employee job handler.

Inbound variables: employeeId, employeeName, department, jobTitle,
exactMatch, fuzzyMatching.
"""

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from connectors.zeebe.zeebe_models import ActivatedJob
from records.db import DEFAULT_DB_PATH
from records.models import Employee, SearchCriteria
from records.resolver import EmployeeResolver
from workers.variables import (
    extract_bool,
    extract_int,
    extract_string,
    search_parameters,
    timestamp,
)


logger = logging.getLogger(__name__)

JOB_TYPE = "search-employee"


def _employee_data(employee: Employee) -> Dict[str, Any]:
    return {
        "employeeId": employee.employee_id,
        "fullName": employee.full_name,
        "jobTitle": employee.job_title,
        "department": employee.department,
        "phoneNumber": employee.phone_number or "",
    }


def _payload(status: str, search_result: Dict[str, Any], employees: Optional[List[Employee]] = None) -> Dict[str, Any]:
    employees = employees or []
    single = employees[0] if len(employees) == 1 else None
    return {
        "employeeSearchResult": search_result,
        "searchStatus": status,
        "employees": [_employee_data(e) for e in employees],
        "employeeCount": len(employees),
        "employeeId": single.employee_id if single else None,
        "employeeName": single.full_name if single else None,
        "employeeTitle": single.job_title if single else None,
        "employeeDepartment": single.department if single else None,
        "employeePhone": (single.phone_number or "") if single else None,
    }


def _search_result(status: str, params: Dict[str, Any], employees: Optional[List[Employee]] = None, **extra) -> Dict[str, Any]:
    employees = employees or []
    result = {
        "status": status,
        "employeeCount": len(employees),
        "employees": [_employee_data(e) for e in employees],
        "timestamp": timestamp(),
        "searchParameters": params,
    }
    result.update(extra)
    return result


class SearchEmployeeHandler:
    """Handles search-employee jobs.

    exactMatch with a name does a single exact full-name lookup; otherwise
    the resolver cascade runs on name, department and title.
    """

    job_type = JOB_TYPE

    def __init__(self, db_path: Path = DEFAULT_DB_PATH, resolver: Optional[EmployeeResolver] = None):
        self.resolver = resolver or EmployeeResolver(db_path)

    def __call__(self, job: ActivatedJob) -> Dict[str, Any]:
        return self.handle(job.variables)

    def handle(self, variables: Dict[str, Any]) -> Dict[str, Any]:
        employee_id = extract_int(variables.get("employeeId"))
        employee_name = extract_string(variables.get("employeeName"))
        department = extract_string(variables.get("department"))
        job_title = extract_string(variables.get("jobTitle"))
        exact_match = extract_bool(variables.get("exactMatch"))
        fuzzy_matching = extract_bool(variables.get("fuzzyMatching"))

        params = search_parameters(
            employeeId=employee_id,
            employeeName=employee_name,
            department=department,
            jobTitle=job_title,
            exactMatch=exact_match,
            fuzzyMatching=fuzzy_matching,
        )

        if all(value is None for value in (employee_id, employee_name, department, job_title)):
            message = (
                "At least one search parameter (employeeId, employeeName, department, "
                "or jobTitle) must be provided"
            )
            logger.warning(f"Validation failed: {message}")
            return _payload("VALIDATION_ERROR", _search_result("VALIDATION_ERROR", params, message=message))

        logger.info(
            f"Searching employees - name='{employee_name}', department='{department}', "
            f"title='{job_title}', exact={exact_match}, fuzzy={fuzzy_matching}"
        )

        try:
            if exact_match and employee_name is not None:
                match = self.resolver.find_by_exact_name(employee_name)
                employees = [match] if match is not None else []
            else:
                employees = self.resolver.resolve(SearchCriteria(
                    identifier=employee_id,
                    name=employee_name,
                    department=department,
                    title=job_title,
                    allow_multiple=True,
                    fuzzy_matching=bool(fuzzy_matching),
                ))
        except Exception as e:
            logger.exception(f"Error during employee search: {e}")
            return _payload("ERROR", _search_result(
                "ERROR",
                params,
                message="An error occurred during employee search",
                errorDetails=str(e),
            ))

        if not employees:
            logger.info("No employees found with the provided search criteria")
            return _payload("NOT_FOUND", _search_result(
                "NOT_FOUND",
                params,
                message="No employees found matching the search criteria",
            ))

        logger.info(f"Found {len(employees)} employee(s)")
        return _payload("SUCCESS", _search_result("SUCCESS", params, employees), employees)
