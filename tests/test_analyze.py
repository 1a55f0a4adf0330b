import asyncio
import time
from unittest.mock import patch

import pytest
from httpx import ASGITransport, AsyncClient

from app.features.lighthouse.models.job import Job
from app.features.lighthouse.services.dispatcher import JobDispatcher
from app.features.lighthouse.services.gateway import AnalysisGateway
from app.platform.config import settings
from app.platform.exceptions import DispatcherClosed


class TestAnalyzeValidation:
    @pytest.mark.parametrize("body", [{}, {"url": ""}, {"url": None}, {"url": 0}, {"url": False}, {"options": {"locale": "fr"}}, []])
    def test_missing_url(self, client, fake_runner, body):
        response = client.post("/analyze", json=body)

        assert response.status_code == 400
        assert response.json() == {"error": "URL required"}
        assert client.app.state.dispatcher.in_flight == 0
        fake_runner.execute.assert_not_called()

    def test_null_body_has_no_url(self, client, fake_runner):
        response = client.post(
            "/analyze",
            content="null",
            headers={"Content-Type": "application/json"},
        )

        assert response.status_code == 400
        assert response.json() == {"error": "URL required"}
        fake_runner.execute.assert_not_called()

    @pytest.mark.parametrize(
        "url",
        ["not-a-url", "example.com", "//example.com/page", "http://", "https://exa mple.com", "   ", 42],
    )
    def test_invalid_url(self, client, fake_runner, url):
        response = client.post("/analyze", json={"url": url})

        assert response.status_code == 400
        assert response.json() == {"error": "URL invalid"}
        assert client.app.state.dispatcher.in_flight == 0
        fake_runner.execute.assert_not_called()

    def test_malformed_json_is_a_generic_500(self, client, fake_runner):
        response = client.post(
            "/analyze",
            content="{not json",
            headers={"Content-Type": "application/json"},
        )

        assert response.status_code == 500
        assert response.json() == {"error": "Internal server error"}
        assert response.headers["access-control-allow-origin"] == "*"
        fake_runner.execute.assert_not_called()


class TestAnalyzeAccepted:
    def test_returns_pending_job(self, client):
        response = client.post("/analyze", json={"url": "https://example.com"})

        assert response.status_code == 200
        payload = response.json()
        assert payload["id"].startswith("test_")
        assert payload["status"] == "pending"
        assert payload["message"] == "Lighthouse test in progress..."

    def test_schedules_job_with_options(self, test_app, fake_runner):
        from fastapi.testclient import TestClient

        with patch("app.main.build_runner", return_value=fake_runner):
            with TestClient(test_app) as client:
                response = client.post(
                    "/analyze",
                    json={"url": "https://example.com/page", "options": {"formFactor": "desktop"}},
                )
        # Leaving the client runs the shutdown, which waits for the job

        fake_runner.execute.assert_awaited_once()
        job = fake_runner.execute.await_args.args[0]
        assert isinstance(job, Job)
        assert job.id == response.json()["id"]
        assert job.url == "https://example.com/page"
        assert job.options == {"formFactor": "desktop"}

    def test_responds_before_slow_audit_finishes(self, test_app, fake_runner, monkeypatch):
        from fastapi.testclient import TestClient

        async def slow_execute(job):
            await asyncio.sleep(30)

        fake_runner.execute.side_effect = slow_execute
        monkeypatch.setattr(settings, "SHUTDOWN_GRACE_PERIOD", 0.1)

        with patch("app.main.build_runner", return_value=fake_runner):
            with TestClient(test_app) as client:
                started = time.monotonic()
                response = client.post("/analyze", json={"url": "https://example.com"})
                elapsed = time.monotonic() - started

                assert response.status_code == 200
                assert elapsed < 5
                assert client.app.state.dispatcher.in_flight == 1

    def test_shutting_down_returns_503(self, client):
        dispatcher = client.app.state.dispatcher
        with patch.object(dispatcher, "submit", side_effect=DispatcherClosed("closed")):
            response = client.post("/analyze", json={"url": "https://example.com"})

        assert response.status_code == 503
        assert response.json() == {"error": "Service is shutting down"}


@pytest.mark.asyncio
async def test_concurrent_requests_get_unique_ids(fake_runner):
    from app.main import create_app

    app = create_app()
    dispatcher = JobDispatcher(fake_runner, max_concurrency=4)
    app.state.gateway = AnalysisGateway(dispatcher)

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://testserver",
    ) as ac:
        responses = await asyncio.gather(
            *(ac.post("/analyze", json={"url": f"https://example.com/{i}"}) for i in range(25))
        )

    await dispatcher.shutdown(grace_period=1)

    assert all(r.status_code == 200 for r in responses)
    ids = [r.json()["id"] for r in responses]
    assert all(ids)
    assert len(set(ids)) == 25
    assert fake_runner.execute.await_count == 25


def test_non_http_scheme_is_accepted(client):
    # Parses as an absolute URL; Lighthouse itself rejects it later
    response = client.post("/analyze", json={"url": "ftp://example.com"})

    assert response.status_code == 200
    assert response.json()["status"] == "pending"


def test_unexpected_error_is_500_with_cors_headers(test_app, fake_runner):
    from fastapi.testclient import TestClient

    with patch("app.main.build_runner", return_value=fake_runner):
        with TestClient(test_app, raise_server_exceptions=False) as client:
            gateway = client.app.state.gateway
            with patch.object(gateway, "accept", side_effect=RuntimeError("boom")):
                response = client.post("/analyze", json={"url": "https://example.com"})

    assert response.status_code == 500
    assert response.json() == {"error": "Internal server error"}
    assert response.headers["access-control-allow-origin"] == "*"
    assert response.headers["access-control-allow-methods"] == "GET, POST, OPTIONS"
    assert response.headers["access-control-allow-headers"] == "Content-Type"


class TestRouting:
    def test_unknown_path_lists_endpoints(self, client):
        response = client.get("/does-not-exist")

        assert response.status_code == 404
        payload = response.json()
        assert payload["error"] == "Endpoint not found"
        assert payload["availableEndpoints"] == [
            "POST /analyze - Start a Lighthouse test",
            "GET /health - Health check",
        ]
        assert response.headers["access-control-allow-origin"] == "*"

    def test_wrong_method_is_not_found(self, client):
        response = client.get("/analyze")

        assert response.status_code == 404
        assert response.json()["error"] == "Endpoint not found"

    def test_docs_are_not_exposed(self, client):
        assert client.get("/docs").status_code == 404

    @pytest.mark.parametrize("path", ["/analyze", "/health", "/anything/else"])
    def test_options_preflight(self, client, path):
        response = client.options(path)

        assert response.status_code == 200
        assert response.content == b""
        assert response.headers["access-control-allow-origin"] == "*"
        assert response.headers["access-control-allow-methods"] == "GET, POST, OPTIONS"
        assert response.headers["access-control-allow-headers"] == "Content-Type"
