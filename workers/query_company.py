"""query-for-company job handler.

Inbound variables: companyId, companyName, industry, city, revenue,
fuzzyMatching.

Unlike the customer and employee handlers, unexpected errors are not
turned into an ERROR payload; they propagate so the dispatch loop fails
the job and the engine retries it.
"""

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from connectors.zeebe.zeebe_models import ActivatedJob
from records.db import DEFAULT_DB_PATH
from records.models import ExternalCompany, SearchCriteria
from records.resolver import CompanyResolver
from workers.variables import (
    extract_bool,
    extract_int,
    extract_string,
    search_parameters,
    timestamp,
)


logger = logging.getLogger(__name__)

JOB_TYPE = "query-for-company"


def _company_data(company: ExternalCompany) -> Dict[str, Any]:
    return {
        "companyId": company.company_id,
        "companyName": company.company_name,
        "address": company.address or "",
        "contactPerson": company.contact_person or "",
        "phoneNumber": company.phone_number or "",
    }


def _payload(status: str, search_result: Dict[str, Any], companies: Optional[List[ExternalCompany]] = None) -> Dict[str, Any]:
    companies = companies or []
    single = companies[0] if len(companies) == 1 else None
    return {
        "companySearchResult": search_result,
        "searchStatus": status,
        "companies": [_company_data(c) for c in companies],
        "companyCount": len(companies),
        "companyId": single.company_id if single else None,
        "companyName": single.company_name if single else None,
        "companyAddress": (single.address or "") if single else None,
        "companyContactPerson": (single.contact_person or "") if single else None,
        "companyPhone": (single.phone_number or "") if single else None,
    }


class QueryCompanyHandler:
    """Handles query-for-company jobs."""

    job_type = JOB_TYPE

    def __init__(self, db_path: Path = DEFAULT_DB_PATH, resolver: Optional[CompanyResolver] = None):
        self.resolver = resolver or CompanyResolver(db_path)

    def __call__(self, job: ActivatedJob) -> Dict[str, Any]:
        return self.handle(job.variables)

    def handle(self, variables: Dict[str, Any]) -> Dict[str, Any]:
        company_id = extract_int(variables.get("companyId"))
        company_name = extract_string(variables.get("companyName"))
        industry = extract_string(variables.get("industry"))
        city = extract_string(variables.get("city"))
        revenue = extract_int(variables.get("revenue"))
        fuzzy_matching = extract_bool(variables.get("fuzzyMatching"))

        params = search_parameters(
            companyId=company_id,
            companyName=company_name,
            industry=industry,
            city=city,
            revenue=revenue,
            fuzzyMatching=fuzzy_matching,
        )

        if all(value is None for value in (company_id, company_name, industry, city, revenue)):
            message = "At least one search parameter must be provided"
            logger.warning(f"Validation failed: {message}")
            return _payload("VALIDATION_ERROR", {
                "status": "VALIDATION_ERROR",
                "message": message,
                "companies": [],
                "timestamp": timestamp(),
                "searchParameters": params,
            })

        logger.info(
            f"Querying companies - name={company_name}, industry={industry}, city={city}, "
            f"revenue={revenue}, fuzzy={fuzzy_matching}"
        )

        companies = self.resolver.resolve(SearchCriteria(
            identifier=company_id,
            name=company_name,
            city=city,
            industry=industry,
            revenue=revenue,
            allow_multiple=True,
            fuzzy_matching=bool(fuzzy_matching),
        ))

        if not companies:
            logger.info("No company records found with the provided search criteria")
            return _payload("NOT_FOUND", {
                "status": "NOT_FOUND",
                "message": "No company records could be found with the provided search criteria",
                "companies": [],
                "timestamp": timestamp(),
                "searchParameters": params,
            })

        logger.info(f"Found {len(companies)} company record(s)")
        return _payload("SUCCESS", {
            "status": "SUCCESS",
            "companies": [_company_data(c) for c in companies],
            "timestamp": timestamp(),
            "searchParameters": params,
        }, companies)
