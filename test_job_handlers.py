"""
Job Handler Tests

Each handler turns job variables into a completion payload:
- VALIDATION_ERROR when no usable search field was given
- NOT_FOUND / SUCCESS from the record resolvers
- ERROR for unexpected failures (customer and employee handlers only)
"""

import pytest

from connectors.zeebe.zeebe_models import ActivatedJob
from records.db import add_customer
from records.models import Customer
from records.resolver import CompanyResolver, EmployeeResolver
from workers import JOB_TYPES, build_handlers
from workers.match_customer import MatchCustomerHandler
from workers.query_company import QueryCompanyHandler
from workers.search_employee import SearchEmployeeHandler


class BrokenEmployeeResolver(EmployeeResolver):
    def resolve(self, criteria):
        raise RuntimeError("record store unavailable")


class BrokenCompanyResolver(CompanyResolver):
    def resolve(self, criteria):
        raise RuntimeError("record store unavailable")


def test_build_handlers_covers_every_job_type(records_db):
    handlers = build_handlers(records_db)
    assert set(handlers) == set(JOB_TYPES)
    assert set(JOB_TYPES) == {"match-customer-with-dri", "search-employee", "query-for-company"}


class TestMatchCustomerHandler:
    """match-customer-with-dri payloads."""

    def test_single_match_with_dri(self, records_db):
        result = MatchCustomerHandler(records_db).handle({"customerName": "Johnathan Doe"})

        assert result["matchStatus"] == "SUCCESS"
        assert result["customerCount"] == 1
        assert result["customerId"] == 1
        assert result["customerName"] == "Johnathan Doe"
        assert result["employeeId"] == 1
        assert result["employeeName"] == "Alice Smith"
        assert result["employeeTitle"] == "Account Manager"
        assert result["employeeDepartment"] == "Sales"
        assert result["employeePhone"] == "123-456-7890"
        assert result["customers"][0]["employee"]["fullName"] == "Alice Smith"
        assert result["matchingResult"]["searchParameters"] == {"customerName": "Johnathan Doe"}

    def test_string_identifier(self, records_db):
        result = MatchCustomerHandler(records_db).handle({"customerId": "100"})
        assert result["customerName"] == "Acme Corp"

    def test_fuzzy_match(self, records_db):
        result = MatchCustomerHandler(records_db).handle({
            "customerName": "Jon Doe",
            "fuzzyMatching": "true",
        })
        assert result["matchStatus"] == "SUCCESS"
        assert result["customerName"] == "Johnathan Doe"

    def test_multiple_matches_leave_flat_fields_unset(self, records_db):
        result = MatchCustomerHandler(records_db).handle({
            "customerName": "o",
            "allowMultiple": True,
        })

        assert result["matchStatus"] == "SUCCESS"
        assert result["customerCount"] == 2
        assert [p["customer"]["customerName"] for p in result["customers"]] == ["Johnathan Doe", "Acme Corp"]
        assert result["customerName"] is None
        assert result["employeeName"] is None

    def test_single_result_without_allow_multiple(self, records_db):
        result = MatchCustomerHandler(records_db).handle({"customerName": "o"})
        assert result["customerCount"] == 1
        assert result["customerName"] == "Johnathan Doe"

    def test_not_found(self, records_db):
        result = MatchCustomerHandler(records_db).handle({"customerName": "Nobody"})

        assert result["matchStatus"] == "NOT_FOUND"
        assert result["customerCount"] == 0
        assert result["customers"] == []
        assert result["customerId"] is None

    def test_validation_error(self, records_db):
        result = MatchCustomerHandler(records_db).handle({"customerName": "  ", "customerId": "abc"})

        assert result["matchStatus"] == "VALIDATION_ERROR"
        assert "customerId or customerName" in result["matchingResult"]["error"]

    def test_missing_dri_is_an_error_payload(self, records_db):
        add_customer(Customer(customer_name="Dangling Ltd", employee_id=42), records_db)
        result = MatchCustomerHandler(records_db).handle({"customerName": "Dangling Ltd"})

        assert result["matchStatus"] == "ERROR"
        assert "42" in result["matchingResult"]["error"]

    def test_callable_with_job(self, records_db):
        job = ActivatedJob(key="1", type="match-customer-with-dri", variables={"customerId": 200})
        result = MatchCustomerHandler(records_db)(job)
        assert result["employeeName"] == "Bob Johnson"


class TestSearchEmployeeHandler:
    """search-employee payloads."""

    def test_exact_match(self, records_db):
        result = SearchEmployeeHandler(records_db).handle({
            "employeeName": "Alice Smith",
            "exactMatch": "true",
        })

        assert result["searchStatus"] == "SUCCESS"
        assert result["employeeCount"] == 1
        assert result["employeeName"] == "Alice Smith"
        assert result["employeePhone"] == "123-456-7890"

    def test_exact_match_needs_full_name(self, records_db):
        result = SearchEmployeeHandler(records_db).handle({
            "employeeName": "Alice",
            "exactMatch": True,
        })
        assert result["searchStatus"] == "NOT_FOUND"
        assert result["employeeSearchResult"]["message"] == "No employees found matching the search criteria"

    def test_department_search(self, records_db):
        result = SearchEmployeeHandler(records_db).handle({"department": "support"})

        assert result["searchStatus"] == "SUCCESS"
        assert result["employees"][0]["fullName"] == "Bob Johnson"
        assert result["employeeDepartment"] == "Support"

    def test_fuzzy_title(self, records_db):
        result = SearchEmployeeHandler(records_db).handle({
            "jobTitle": "Acount Manager",
            "fuzzyMatching": True,
        })
        assert result["employeeName"] == "Alice Smith"

    def test_validation_error(self, records_db):
        result = SearchEmployeeHandler(records_db).handle({"exactMatch": True})

        assert result["searchStatus"] == "VALIDATION_ERROR"
        assert result["employeeCount"] == 0
        assert "At least one search parameter" in result["employeeSearchResult"]["message"]

    def test_error_payload(self, records_db):
        handler = SearchEmployeeHandler(records_db, resolver=BrokenEmployeeResolver(records_db))
        result = handler.handle({"department": "Sales"})

        assert result["searchStatus"] == "ERROR"
        assert result["employeeSearchResult"]["errorDetails"] == "record store unavailable"


class TestQueryCompanyHandler:
    """query-for-company payloads."""

    def test_single_company(self, records_db):
        result = QueryCompanyHandler(records_db).handle({"companyName": "Initech"})

        assert result["searchStatus"] == "SUCCESS"
        assert result["companyCount"] == 1
        assert result["companyId"] == 2000
        assert result["companyAddress"] == "42 Silicon Ave, Tech City"
        assert result["companyContactPerson"] == "John Roe"
        assert result["companyPhone"] == "555-333-4444"

    def test_industry_only_lists_every_company(self, records_db):
        result = QueryCompanyHandler(records_db).handle({"industry": "Software"})

        assert result["searchStatus"] == "SUCCESS"
        assert result["companyCount"] == 2
        assert result["companyId"] is None

    def test_not_found(self, records_db):
        result = QueryCompanyHandler(records_db).handle({"companyName": "Umbrella"})
        assert result["searchStatus"] == "NOT_FOUND"
        assert result["companies"] == []

    def test_validation_error(self, records_db):
        result = QueryCompanyHandler(records_db).handle({"revenue": "lots"})
        assert result["searchStatus"] == "VALIDATION_ERROR"

    def test_unexpected_errors_propagate(self, records_db):
        handler = QueryCompanyHandler(records_db, resolver=BrokenCompanyResolver(records_db))
        with pytest.raises(RuntimeError):
            handler.handle({"companyName": "Initech"})

    def test_oversized_identifier_counts_as_absent(self, records_db):
        handler = QueryCompanyHandler(records_db)

        result = handler.handle({"companyId": "99999999999999999999"})
        assert result["searchStatus"] == "VALIDATION_ERROR"

        result = handler.handle({"companyId": "99999999999999999999", "companyName": "Initech"})
        assert result["searchStatus"] == "SUCCESS"
        assert result["companyId"] == 2000
