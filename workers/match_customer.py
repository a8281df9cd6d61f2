"""match-customer-with-dri job handler.

Finds the customer(s) described by the job variables and pairs each with
its directly responsible employee (DRI).

Inbound variables: customerId, customerName, allowMultiple, fuzzyMatching.
"""

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from connectors.zeebe.zeebe_models import ActivatedJob
from records.db import DEFAULT_DB_PATH
from records.models import Customer, Employee, SearchCriteria
from records.resolver import CustomerResolver
from workers.variables import (
    extract_bool,
    extract_int,
    extract_string,
    search_parameters,
    timestamp,
)


logger = logging.getLogger(__name__)

JOB_TYPE = "match-customer-with-dri"

_SINGLE_FIELDS = (
    "customerId",
    "customerName",
    "employeeId",
    "employeeName",
    "employeeTitle",
    "employeeDepartment",
    "employeePhone",
)


def _customer_data(customer: Customer) -> Dict[str, Any]:
    return {
        "customerId": customer.customer_id,
        "customerName": customer.customer_name,
        "employeeId": customer.employee_id,
    }


def _employee_data(employee: Employee) -> Dict[str, Any]:
    return {
        "employeeId": employee.employee_id,
        "fullName": employee.full_name,
        "jobTitle": employee.job_title,
        "department": employee.department,
        "phoneNumber": employee.phone_number or "",
    }


def _payload(
    status: str,
    matching_result: Dict[str, Any],
    pairs: Optional[List[Dict[str, Any]]] = None,
) -> Dict[str, Any]:
    pairs = pairs or []
    result: Dict[str, Any] = {
        "matchingResult": matching_result,
        "matchStatus": status,
        "customers": pairs,
        "customerCount": len(pairs),
    }
    result.update({field: None for field in _SINGLE_FIELDS})

    if len(pairs) == 1:
        customer = pairs[0]["customer"]
        employee = pairs[0]["employee"]
        result.update({
            "customerId": customer["customerId"],
            "customerName": customer["customerName"],
            "employeeId": employee["employeeId"],
            "employeeName": employee["fullName"],
            "employeeTitle": employee["jobTitle"],
            "employeeDepartment": employee["department"],
            "employeePhone": employee["phoneNumber"],
        })
    return result


class MatchCustomerHandler:
    """Handles match-customer-with-dri jobs.

    Every outcome, including unexpected errors, is returned as a completion
    payload; the job is only failed if the payload cannot be delivered.
    """

    job_type = JOB_TYPE

    def __init__(self, db_path: Path = DEFAULT_DB_PATH, resolver: Optional[CustomerResolver] = None):
        self.resolver = resolver or CustomerResolver(db_path)

    def __call__(self, job: ActivatedJob) -> Dict[str, Any]:
        return self.handle(job.variables)

    def handle(self, variables: Dict[str, Any]) -> Dict[str, Any]:
        customer_id = extract_int(variables.get("customerId"))
        customer_name = extract_string(variables.get("customerName"))
        allow_multiple = extract_bool(variables.get("allowMultiple"))
        fuzzy_matching = extract_bool(variables.get("fuzzyMatching"))

        params = search_parameters(
            customerId=customer_id,
            customerName=customer_name,
            allowMultiple=allow_multiple,
            fuzzyMatching=fuzzy_matching,
        )

        if customer_id is None and customer_name is None:
            message = "Either customerId or customerName must be provided"
            logger.warning(f"Validation failed: {message}")
            return _payload("VALIDATION_ERROR", {
                "status": "VALIDATION_ERROR",
                "error": message,
                "timestamp": timestamp(),
                "searchParameters": params,
            })

        logger.info(f"Searching for customer with customerId={customer_id}, customerName='{customer_name}'")

        criteria = SearchCriteria(
            identifier=customer_id,
            name=customer_name,
            allow_multiple=bool(allow_multiple),
            fuzzy_matching=bool(fuzzy_matching),
        )

        try:
            if criteria.allow_multiple:
                customers = self.resolver.resolve(criteria)
            else:
                customer = self.resolver.resolve_one(criteria)
                customers = [customer] if customer is not None else []

            if not customers:
                logger.info(f"No customer found for {criteria.describe()}")
                return _payload("NOT_FOUND", {
                    "status": "NOT_FOUND",
                    "message": "No customer record could be found with the provided search criteria",
                    "timestamp": timestamp(),
                    "searchParameters": params,
                })

            pairs = [
                {
                    "customer": _customer_data(customer),
                    "employee": _employee_data(self.resolver.get_employee_for_customer(customer)),
                }
                for customer in customers
            ]

        except Exception as e:
            logger.exception(f"Error while matching customer with DRI: {e}")
            return _payload("ERROR", {
                "status": "ERROR",
                "error": str(e),
                "timestamp": timestamp(),
                "searchParameters": params,
            })

        logger.info(f"Matched {len(pairs)} customer(s) with their DRI employees")
        return _payload("SUCCESS", {
            "status": "SUCCESS",
            "customers": pairs,
            "customerCount": len(pairs),
            "timestamp": timestamp(),
            "searchParameters": params,
        }, pairs)
