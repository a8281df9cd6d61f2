"""
API Endpoint Tests

Runs the FastAPI app against a temporary record store and ledger.
"""

import pytest
from fastapi.testclient import TestClient

from api.server import create_app
from connectors.zeebe import ZeebeClient, ZeebeConfig, ZeebeConnectionService
from workers.dispatch import JobPollingService


class StubClient:
    worker_name = "api-test-worker"

    async def activate_jobs(self, job_type, max_jobs=5, timeout_ms=60000, request_timeout_ms=None):
        return []

    async def complete_job(self, job_key, variables=None):
        pass

    async def fail_job(self, job_key, retries, error_message):
        pass


@pytest.fixture
def app(records_db):
    return create_app(db_path=records_db)


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


class TestHealth:

    def test_health_without_worker(self, client):
        response = client.get("/health")
        assert response.status_code == 200

        data = response.json()
        assert data["status"] == "healthy"
        assert data["services"]["zeebe"] == "not configured"
        assert data["services"]["worker"] == "stopped"

    def test_probes(self, client):
        assert client.get("/ready").json() == {"status": "ready"}
        assert client.get("/live").json() == {"status": "alive"}


class TestStatusEndpoints:

    def test_connection_status_not_configured(self, client):
        data = client.get("/api/connection-status").json()
        assert data["configured"] is False
        assert data["connected"] is False

    def test_connection_status(self, records_db):
        connection = ZeebeConnectionService(ZeebeClient(ZeebeConfig(rest_address="http://zeebe:8080")))
        connection.record_success()

        with TestClient(create_app(db_path=records_db, connection=connection)) as client:
            data = client.get("/api/connection-status").json()
            health = client.get("/health").json()

        assert data["configured"] is True
        assert data["connected"] is True
        assert data["rest_address"] == "http://zeebe:8080"
        assert data["worker_name"] == "records-job-worker"
        assert data["last_checked"] is not None
        assert health["services"]["zeebe"] == "up"

    def test_worker_status(self, records_db):
        app = create_app(db_path=records_db)
        service = JobPollingService(StubClient(), None, app.state.ledger)
        service.register("search-employee", lambda job: {})
        service.start()
        app.state.polling_service = service

        with TestClient(app) as client:
            data = client.get("/api/worker-status").json()

        assert data["running"] is True
        assert data["worker_name"] == "api-test-worker"
        assert data["job_types"][0]["job_type"] == "search-employee"
        assert data["total_jobs"] == 0

    def test_worker_status_without_service(self, client):
        data = client.get("/api/worker-status").json()
        assert data["running"] is False
        assert data["job_types"] == []


class TestJobEndpoints:

    def test_job_history(self, app, client):
        ledger = app.state.ledger
        ledger.record_success("search-employee", "1", {"department": "Sales"}, {
            "employeeSearchResult": {"status": "SUCCESS", "employeeCount": 1},
        }, 15)
        ledger.record_failure("query-for-company", "2", {"companyName": "Initech"}, "boom", 20)

        data = client.get("/api/job-history").json()

        assert [entry["job_key"] for entry in data] == ["2", "1"]
        assert data[0]["status"] == "FAILED"
        assert data[0]["worker_name"] == "Company Query Service"
        assert data[0]["error_message"] == "boom"
        assert data[1]["input_parameters"] == {"Department": "Sales"}
        assert data[1]["results"] == {"Search Status": "SUCCESS", "Employees Found": 1}
        assert data[1]["duration"] == "15 ms"

    def test_job_history_limit(self, app, client):
        for i in range(3):
            app.state.ledger.record_success("search-employee", str(i), {}, {}, 1)

        assert len(client.get("/api/job-history", params={"limit": 2}).json()) == 2
        assert client.get("/api/job-history", params={"limit": 0}).status_code == 422

    def test_job_metrics(self, app, client):
        app.state.ledger.record_success("search-employee", "1", {}, {}, 1)
        app.state.ledger.record_success("search-employee", "2", {}, {}, 1)
        app.state.ledger.record_failure("query-for-company", "3", {}, "x", 1)

        data = client.get("/api/job-metrics").json()

        assert data["total_jobs"] == 3
        assert data["jobs_today"] == 3
        assert data["jobs_by_type"] == {"query-for-company": 1, "search-employee": 2}
        assert "polls" in data["runtime"]


class TestRecordEndpoints:

    def test_list_records(self, client):
        assert len(client.get("/api/customers").json()) == 3
        assert [e["full_name"] for e in client.get("/api/employees").json()] == ["Alice Smith", "Bob Johnson"]
        assert [c["company_id"] for c in client.get("/api/companies").json()] == [1000, 2000]

    def test_get_customer(self, client):
        data = client.get("/api/customers/100").json()
        assert data["customer_name"] == "Acme Corp"
        assert data["employee_id"] == 1

    def test_missing_records_are_404(self, client):
        response = client.get("/api/customers/999")
        assert response.status_code == 404
        assert "999" in response.json()["detail"]

        assert client.get("/api/employees/999").status_code == 404
        assert client.get("/api/companies/1").status_code == 404
