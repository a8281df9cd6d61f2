"""
Zeebe REST Client Tests

Runs the client against a fake aiohttp session:
1. Request bodies and URLs for activate / complete / fail
2. Status code mapping, with no resends besides the token refresh
3. Token fetch and one-time refresh on 401
4. Connection service caching
5. Environment based configuration
"""

import asyncio
import json
from typing import Any, Dict, List, Optional

import aiohttp
import pytest

from connectors.zeebe import (
    ZeebeAuthConfig,
    ZeebeAuthProvider,
    ZeebeClient,
    ZeebeConfig,
    ZeebeConnectionService,
)
from connectors.zeebe.zeebe_client import (
    ZeebeApiError,
    ZeebeAuthenticationError,
    ZeebeNotFoundError,
    ZeebeValidationError,
)


class FakeResponse:
    """Async context manager standing in for aiohttp's response."""

    def __init__(self, status: int = 200, body: Any = None):
        self.status = status
        self._body = body

    async def text(self) -> str:
        if self._body is None:
            return ""
        if isinstance(self._body, str):
            return self._body
        return json.dumps(self._body)

    async def json(self) -> Any:
        return self._body

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        return False


class FakeSession:
    """Returns queued responses (or raises queued exceptions) in order."""

    def __init__(self, responses: Optional[List[Any]] = None, token_responses: Optional[List[Any]] = None):
        self.responses = list(responses or [])
        self.token_responses = list(token_responses or [])
        self.requests: List[Dict[str, Any]] = []
        self.token_requests: List[Dict[str, Any]] = []
        self.closed = False

    def request(self, method, url, headers=None, json=None, timeout=None):
        self.requests.append({"method": method, "url": url, "headers": headers, "json": json})
        item = self.responses.pop(0)
        if isinstance(item, Exception):
            raise item
        return item

    def post(self, url, data=None, headers=None):
        self.token_requests.append({"url": url, "data": data})
        return self.token_responses.pop(0)

    async def close(self):
        self.closed = True


def make_client(session, auth_provider=None) -> ZeebeClient:
    config = ZeebeConfig(rest_address="http://localhost:8080/", worker_name="test-worker")
    return ZeebeClient(config, auth_provider=auth_provider, session=session)


def token(value="abc", expires_in=3600):
    return FakeResponse(200, {"access_token": value, "token_type": "Bearer", "expires_in": expires_in})


class TestConfig:

    def test_url_building(self):
        config = ZeebeConfig(rest_address="http://localhost:8080/")
        assert config.get_url("jobs/activation") == "http://localhost:8080/v2/jobs/activation"

    def test_saas_address(self):
        config = ZeebeConfig.for_saas("abc-123", "bru-2")
        assert config.rest_address == "https://bru-2.zeebe.camunda.io/abc-123"


class TestJobOperations:
    """Request shapes of the job operations."""

    def test_activate_jobs(self):
        session = FakeSession([FakeResponse(200, {"jobs": [{
            "jobKey": 2251799813685249,
            "type": "search-employee",
            "variables": {"employeeName": "Alice"},
            "retries": 3,
            "processInstanceKey": 2251799813685200,
            "customHeaders": None,
        }]})])
        client = make_client(session)

        jobs = asyncio.run(client.activate_jobs("search-employee", max_jobs=5, timeout_ms=60000))

        request = session.requests[0]
        assert request["method"] == "POST"
        assert request["url"] == "http://localhost:8080/v2/jobs/activation"
        assert request["json"] == {
            "type": "search-employee",
            "worker": "test-worker",
            "timeout": 60000,
            "maxJobsToActivate": 5,
        }
        assert "Authorization" not in request["headers"]

        assert len(jobs) == 1
        assert jobs[0].key == "2251799813685249"
        assert jobs[0].process_instance_key == "2251799813685200"
        assert jobs[0].variables == {"employeeName": "Alice"}
        assert jobs[0].custom_headers == {}

    def test_activate_with_long_poll(self):
        session = FakeSession([FakeResponse(200, {"jobs": []})])
        client = make_client(session)

        jobs = asyncio.run(client.activate_jobs("search-employee", request_timeout_ms=10000))

        assert jobs == []
        assert session.requests[0]["json"]["requestTimeout"] == 10000

    def test_complete_job(self):
        session = FakeSession([FakeResponse(204)])
        client = make_client(session)

        asyncio.run(client.complete_job("42", {"searchStatus": "SUCCESS"}))

        request = session.requests[0]
        assert request["url"] == "http://localhost:8080/v2/jobs/42/completion"
        assert request["json"] == {"variables": {"searchStatus": "SUCCESS"}}

    def test_fail_job(self):
        session = FakeSession([FakeResponse(204)])
        client = make_client(session)

        asyncio.run(client.fail_job("42", -1, "boom"))

        request = session.requests[0]
        assert request["url"] == "http://localhost:8080/v2/jobs/42/failure"
        assert request["json"] == {"retries": 0, "errorMessage": "boom"}

    def test_not_connected(self):
        client = ZeebeClient(ZeebeConfig(rest_address="http://localhost:8080"))
        with pytest.raises(ZeebeApiError):
            asyncio.run(client.topology())

    def test_disconnect_keeps_supplied_session_open(self):
        session = FakeSession()
        client = make_client(session)
        asyncio.run(client.disconnect())
        assert not session.closed


class TestErrorHandling:
    """Status code mapping; failed requests are sent exactly once."""

    @pytest.mark.parametrize("status,error", [
        (400, ZeebeValidationError),
        (404, ZeebeNotFoundError),
        (401, ZeebeAuthenticationError),
        (500, ZeebeApiError),
    ])
    def test_status_mapping(self, status, error):
        session = FakeSession([FakeResponse(status, "nope")])
        client = make_client(session)

        with pytest.raises(error) as exc_info:
            asyncio.run(client.complete_job("1", {}))
        assert exc_info.value.status_code == status

    def test_server_error_is_not_retried(self):
        session = FakeSession([FakeResponse(503, "busy"), FakeResponse(200, {"jobs": []})])
        client = make_client(session)

        with pytest.raises(ZeebeApiError) as exc_info:
            asyncio.run(client.activate_jobs("search-employee"))
        assert exc_info.value.status_code == 503
        assert len(session.requests) == 1

    def test_gateway_timeout_on_completion_is_not_resent(self):
        session = FakeSession([FakeResponse(504, "timeout"), FakeResponse(404, "gone")])
        client = make_client(session)

        with pytest.raises(ZeebeApiError) as exc_info:
            asyncio.run(client.complete_job("42", {"searchStatus": "SUCCESS"}))
        assert exc_info.value.status_code == 504
        assert not isinstance(exc_info.value, ZeebeNotFoundError)
        assert len(session.requests) == 1

    def test_transport_error_is_not_retried(self):
        session = FakeSession([aiohttp.ClientConnectionError("refused"), FakeResponse(200, {})])
        client = make_client(session)

        with pytest.raises(ZeebeApiError):
            asyncio.run(client.topology())
        assert len(session.requests) == 1


class TestAuthentication:
    """Bearer tokens."""

    def _auth(self):
        return ZeebeAuthProvider(ZeebeAuthConfig(client_id="id", client_secret="secret"))

    def test_token_is_fetched_once(self):
        session = FakeSession(
            [FakeResponse(200, {}), FakeResponse(200, {})],
            [token("abc")],
        )
        client = make_client(session, auth_provider=self._auth())

        asyncio.run(client.topology())
        asyncio.run(client.topology())

        assert len(session.token_requests) == 1
        assert session.token_requests[0]["data"]["audience"] == "zeebe.camunda.io"
        assert session.token_requests[0]["data"]["grant_type"] == "client_credentials"
        assert session.requests[1]["headers"]["Authorization"] == "Bearer abc"

    def test_refresh_once_on_401(self):
        session = FakeSession(
            [FakeResponse(401, "expired"), FakeResponse(200, {})],
            [token("old"), token("new")],
        )
        client = make_client(session, auth_provider=self._auth())

        asyncio.run(client.topology())

        assert len(session.token_requests) == 2
        assert session.requests[1]["headers"]["Authorization"] == "Bearer new"

    def test_second_401_raises(self):
        session = FakeSession(
            [FakeResponse(401, "no"), FakeResponse(401, "still no")],
            [token("old"), token("new")],
        )
        client = make_client(session, auth_provider=self._auth())

        with pytest.raises(ZeebeAuthenticationError):
            asyncio.run(client.topology())

    def test_token_failure(self):
        session = FakeSession([], [FakeResponse(400, "invalid_client")])
        auth = self._auth()
        client = make_client(session, auth_provider=auth)

        with pytest.raises(ZeebeAuthenticationError):
            asyncio.run(client.topology())
        assert "invalid_client" in auth.last_error

    def test_nearly_expired_token_is_refetched(self):
        session = FakeSession(
            [FakeResponse(200, {}), FakeResponse(200, {})],
            [token("short", expires_in=30), token("long")],
        )
        client = make_client(session, auth_provider=self._auth())

        asyncio.run(client.topology())
        asyncio.run(client.topology())

        assert len(session.token_requests) == 2


class TestConnectionService:
    """Cached connectivity checks."""

    def test_check_success_and_cache(self):
        session = FakeSession([FakeResponse(200, {"brokers": []})])
        service = ZeebeConnectionService(make_client(session), check_interval=60)

        assert asyncio.run(service.is_connected()) is True
        # cached, no second request
        assert asyncio.run(service.is_connected()) is True
        assert len(session.requests) == 1

    def test_check_failure(self):
        session = FakeSession([FakeResponse(500, "down")])
        service = ZeebeConnectionService(make_client(session), check_interval=60)

        assert asyncio.run(service.is_connected()) is False
        assert "500" in service.last_error

    def test_outcomes_update_state(self):
        service = ZeebeConnectionService(make_client(FakeSession()), check_interval=60)

        service.record_failure("gateway down")
        assert service.last_error == "gateway down"
        assert asyncio.run(service.is_connected()) is False

        service.record_success()
        assert asyncio.run(service.is_connected()) is True

        status = service.status()
        assert status["connected"] is True
        assert status["rest_address"] == "http://localhost:8080/"
        assert status["worker_name"] == "test-worker"


class TestEnvironmentConfig:
    """zeebe_client module helpers."""

    def test_rest_address(self, monkeypatch):
        from zeebe_client import get_zeebe_config
        monkeypatch.setenv("ZEEBE_REST_ADDRESS", "http://zeebe:8080")
        monkeypatch.setenv("ZEEBE_WORKER_NAME", "w1")

        config = get_zeebe_config()
        assert config.rest_address == "http://zeebe:8080"
        assert config.worker_name == "w1"

    def test_saas_cluster(self, monkeypatch):
        from zeebe_client import get_zeebe_config
        monkeypatch.delenv("ZEEBE_REST_ADDRESS", raising=False)
        monkeypatch.setenv("CAMUNDA_CLUSTER_ID", "abc")
        monkeypatch.setenv("CAMUNDA_CLUSTER_REGION", "bru-2")

        assert get_zeebe_config().rest_address == "https://bru-2.zeebe.camunda.io/abc"

    def test_missing_address(self, monkeypatch):
        from zeebe_client import get_zeebe_config
        for name in ("ZEEBE_REST_ADDRESS", "CAMUNDA_CLUSTER_ID", "CAMUNDA_CLUSTER_REGION"):
            monkeypatch.delenv(name, raising=False)

        with pytest.raises(ValueError):
            get_zeebe_config()

    def test_auth_provider(self, monkeypatch):
        from zeebe_client import get_auth_provider
        monkeypatch.delenv("CAMUNDA_CLIENT_ID", raising=False)
        assert get_auth_provider() is None

        monkeypatch.setenv("CAMUNDA_CLIENT_ID", "id")
        monkeypatch.delenv("CAMUNDA_CLIENT_SECRET", raising=False)
        with pytest.raises(ValueError):
            get_auth_provider()

        monkeypatch.setenv("CAMUNDA_CLIENT_SECRET", "secret")
        provider = get_auth_provider()
        assert provider.config.client_id == "id"

    def test_polling_config(self, monkeypatch):
        from zeebe_client import get_polling_config
        monkeypatch.setenv("JOB_MAX_ACTIVATE", "10")
        monkeypatch.setenv("JOB_POLL_INTERVAL_SECONDS", "0.5")

        config = get_polling_config()
        assert config.max_jobs_to_activate == 10
        assert config.poll_interval_seconds == 0.5

    @pytest.mark.parametrize("name,value", [
        ("JOB_MAX_ACTIVATE", "0"),
        ("JOB_MAX_ACTIVATE", "many"),
        ("JOB_TIMEOUT_SECONDS", "-1"),
    ])
    def test_invalid_polling_config(self, monkeypatch, name, value):
        from zeebe_client import get_polling_config
        monkeypatch.setenv(name, value)
        with pytest.raises(ValueError):
            get_polling_config()
