"""
Execution Ledger Tests

Validates the append-only job history and its display view:
1. Appends assign ids and keep every field
2. Reads are newest first and counts are per type / per day
3. The view extracts per-job-type inputs and result highlights
"""

import json
from datetime import datetime, timedelta

import pytest

from core.history import (
    ExecutionRecord,
    JobHistoryLedger,
    JobHistoryView,
    JobStatus,
    format_duration,
    worker_display_name,
)
from workers.match_customer import MatchCustomerHandler
from workers.query_company import QueryCompanyHandler
from workers.search_employee import SearchEmployeeHandler


@pytest.fixture
def ledger(temp_db):
    return JobHistoryLedger(temp_db)


class TestLedger:
    """Append and read operations."""

    def test_append_assigns_id(self, ledger):
        stored = ledger.append(ExecutionRecord(
            job_type="search-employee",
            job_key="123",
            status=JobStatus.COMPLETED,
            execution_time_ms=12,
        ))

        assert stored.id is not None
        assert ledger.total_count() == 1

    def test_records_are_immutable(self):
        record = ExecutionRecord(job_type="t", job_key="1", status=JobStatus.COMPLETED)
        with pytest.raises(Exception):
            record.job_key = "2"

    def test_record_success_stores_json(self, ledger):
        ledger.record_success("query-for-company", "5", {"companyName": "Initech"}, {"searchStatus": "SUCCESS"}, 40)

        record = ledger.recent()[0]
        assert record.status == JobStatus.COMPLETED
        assert json.loads(record.variables) == {"companyName": "Initech"}
        assert json.loads(record.result) == {"searchStatus": "SUCCESS"}
        assert record.error_message is None
        assert record.execution_time_ms == 40

    def test_record_failure(self, ledger):
        ledger.record_failure("query-for-company", "6", {}, "boom", 3)

        record = ledger.recent()[0]
        assert record.status == JobStatus.FAILED
        assert record.error_message == "boom"
        assert record.result is None

    def test_recent_is_newest_first_and_limited(self, ledger):
        base = datetime(2025, 1, 1, 12, 0, 0)
        for i in range(5):
            ledger.append(ExecutionRecord(
                job_type="search-employee",
                job_key=str(i),
                status=JobStatus.COMPLETED,
                execution_time=base + timedelta(minutes=i),
            ))

        recent = ledger.recent(limit=3)
        assert [r.job_key for r in recent] == ["4", "3", "2"]

    def test_counts(self, ledger):
        yesterday = datetime.now() - timedelta(days=1)
        ledger.append(ExecutionRecord(
            job_type="search-employee", job_key="1", status=JobStatus.COMPLETED, execution_time=yesterday,
        ))
        ledger.record_success("search-employee", "2", {}, {}, 1)
        ledger.record_failure("query-for-company", "3", {}, "x", 1)

        assert ledger.total_count() == 3
        assert ledger.count_today() == 2
        assert ledger.count_by_type() == {"query-for-company": 1, "search-employee": 2}
        assert ledger.count_since(yesterday - timedelta(seconds=1)) == 3


class TestFormatting:

    def test_format_duration(self):
        assert format_duration(None) == "N/A"
        assert format_duration(250) == "250 ms"
        assert format_duration(1500) == "1.5 s"
        assert format_duration(90000) == "1.5 min"

    def test_worker_display_name(self):
        assert worker_display_name("match-customer-with-dri") == "Customer-DRI Matcher"
        assert worker_display_name("query-for-company") == "Company Query Service"
        assert worker_display_name("search-employee") == "Employee Search Service"
        assert worker_display_name("custom-type") == "custom-type"


class TestHistoryView:
    """Per job type extraction from stored payloads."""

    def _view(self, ledger, job_type, variables, result):
        ledger.record_success(job_type, "1", variables, result, 1200)
        return JobHistoryView.from_record(ledger.recent()[0])

    def test_customer_view(self, ledger, records_db):
        variables = {"customerName": "Johnathan Doe", "customerId": 1}
        result = MatchCustomerHandler(records_db).handle(variables)

        view = self._view(ledger, "match-customer-with-dri", variables, result)

        assert view.worker_name == "Customer-DRI Matcher"
        assert view.process_definition == "Internal Systems Process"
        assert view.duration == "1.2 s"
        assert view.status == "COMPLETED"
        assert view.input_parameters == {"Customer ID": "1", "Customer Name": "Johnathan Doe"}
        assert view.results == {
            "Status": "SUCCESS",
            "Matched Customer": "Johnathan Doe",
            "Assigned DRI": "Alice Smith",
            "Department": "Sales",
        }

    def test_customer_view_multiple(self, ledger, records_db):
        variables = {"customerName": "o", "allowMultiple": True}
        result = MatchCustomerHandler(records_db).handle(variables)

        view = self._view(ledger, "match-customer-with-dri", variables, result)

        assert view.results["Customers Found"] == 2
        assert view.results["Sample Customers"] == "Johnathan Doe, Acme Corp"

    def test_company_view(self, ledger, records_db):
        variables = {"industry": "Software", "city": "Metropolis"}
        result = QueryCompanyHandler(records_db).handle(variables)

        view = self._view(ledger, "query-for-company", variables, result)

        assert view.input_parameters == {"Industry": "Software", "City": "Metropolis"}
        assert view.results == {
            "Status": "SUCCESS",
            "Companies Found": 1,
            "Sample Companies": "Globex Inc",
        }

    def test_employee_view(self, ledger, records_db):
        variables = {"employeeName": "Bob Johnson", "exactMatch": "true"}
        result = SearchEmployeeHandler(records_db).handle(variables)

        view = self._view(ledger, "search-employee", variables, result)

        assert view.input_parameters == {"Employee Name": "Bob Johnson", "Exact Match": "Yes"}
        assert view.results["Search Status"] == "SUCCESS"
        assert view.results["Employees Found"] == 1
        assert view.results["Sample Employees"] == "Bob Johnson (Support)"
        assert view.results["Employee Found"] == "Bob Johnson"
        assert view.results["Job Title"] == "Support Lead"

    def test_sample_names_are_capped(self, ledger):
        companies = [{"companyName": f"Company {i}"} for i in range(5)]
        result = {"companySearchResult": {"status": "SUCCESS", "companies": companies}}

        view = self._view(ledger, "query-for-company", {"companyName": "Company"}, result)

        assert view.results["Companies Found"] == 5
        assert view.results["Sample Companies"] == "Company 0, Company 1, Company 2..."

    def test_failed_record(self, ledger):
        ledger.record_failure("search-employee", "9", {"department": "Sales"}, "boom", 5)
        view = JobHistoryView.from_record(ledger.recent()[0])

        assert view.status == "FAILED"
        assert view.error_message == "boom"
        assert view.input_parameters == {"Department": "Sales"}
        assert view.results == {}
        assert view.duration == "5 ms"

    def test_invalid_json_is_shown_raw(self):
        record = ExecutionRecord(
            id=1,
            job_type="search-employee",
            job_key="1",
            status=JobStatus.COMPLETED,
            variables="{not json",
            result="{\"employeeSearchResult\": {\"status\": \"SUCCESS\"}}",
            execution_time=datetime(2025, 1, 9, 12, 0, 0),
        )

        view = JobHistoryView.from_record(record)

        assert view.input_parameters == {"raw": "{not json"}
        assert view.results == {"Search Status": "SUCCESS"}
        assert view.execution_time == "2025-01-09 12:00:00"
        assert view.duration == "N/A"

    def test_unknown_job_type(self, ledger):
        view = self._view(ledger, "custom-type", {"a": 1}, {"b": 2})
        assert view.input_parameters == {}
        assert view.results == {}
        assert view.worker_name == "custom-type"
