"""
API tests for the console routes.

Tests cover:
- Health endpoints
- POST /api/workflow/run success and each failure mapping
- 409 while a run is in flight
- State, view, events, acknowledge and reset endpoints
"""

import asyncio
import json

import httpx
import pytest
from fastapi.testclient import TestClient

from services.console.app import create_app
from services.console.config import ConsoleConfig
from services.console.orchestrator import WorkflowOrchestrator
from services.console.routes.workflow import get_console_config, get_workflow_orchestrator

from conftest import UPLOAD_OK

DOCX = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"


@pytest.fixture
def console_config() -> ConsoleConfig:
    return ConsoleConfig(backend_url="http://svc.test")


@pytest.fixture
def api(orchestrator, console_config):
    app = create_app()
    app.dependency_overrides[get_workflow_orchestrator] = lambda: orchestrator
    app.dependency_overrides[get_console_config] = lambda: console_config
    with TestClient(app) as client:
        yield client


def run(api, **data):
    return api.post(
        "/api/workflow/run",
        files={"resume": ("resume.docx", b"PK\x03\x04docx", DOCX)},
        data=data,
    )


class TestHealth:

    def test_fast_health(self, api):
        response = api.get("/health/fast")
        assert response.status_code == 200
        assert response.json() == {"ok": True}

    def test_health_reports_configuration(self, api, monkeypatch):
        monkeypatch.setenv("CONSOLE_BACKEND_URL", "http://svc.test")
        body = api.get("/health").json()
        assert body["backend_configured"] is True
        assert body["service"] == "tailor-console"


class TestRunWorkflow:

    def test_success(self, api, service):
        response = run(api, jd_text="Senior backend engineer, Go, Kubernetes", jd_url="  ")

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["download_url"] == "https://svc/files/abc.docx"
        assert body["state"]["busy"] is False
        assert body["state"]["outcome"] == "done"
        assert body["state"]["result"]["fit_score"]["score"] == 72
        assert service.paths == ["/upload", "/tailor", "/export"]
        assert service.json_body("/tailor") == {
            "resume_id": "r-1",
            "jd_text": "Senior backend engineer, Go, Kubernetes",
        }

    def test_missing_resume(self, api, service):
        response = api.post("/api/workflow/run", data={"jd_text": "Go"})

        assert response.status_code == 400
        body = response.json()
        assert body["error"]["kind"] == "missing_input"
        assert body["error"]["message"] == "Select a resume .docx first"
        assert service.requests == []

    def test_upload_failure(self, api, service):
        service.replies["/upload"] = (500, {"detail": "boom"})
        response = run(api)

        assert response.status_code == 502
        body = response.json()
        assert body["error"]["kind"] == "upload_failed"
        assert body["state"]["outcome"] == "failed"
        assert service.paths == ["/upload"]

    def test_export_failure_returns_partial_state(self, api, service):
        service.replies["/export"] = (500, {})
        response = run(api, jd_text="Go")

        assert response.status_code == 502
        body = response.json()
        assert body["error"]["kind"] == "export_failed"
        assert body["state"]["result"]["change_log"]
        assert body["state"]["artifact"] is None

    def test_configuration_missing(self, service):
        app = create_app()
        unconfigured = WorkflowOrchestrator(service.client(base_url=""))
        app.dependency_overrides[get_workflow_orchestrator] = lambda: unconfigured
        with TestClient(app) as client:
            response = run(client)

        assert response.status_code == 503
        assert response.json()["error"]["kind"] == "configuration_missing"
        assert service.requests == []

    def test_conflict_while_busy(self, api, orchestrator, service):
        orchestrator._state.begin()
        response = run(api)

        assert response.status_code == 409
        assert service.requests == []


class TestStateEndpoints:

    def test_state_after_run(self, api):
        run(api, jd_text="Go")
        state = api.get("/api/workflow/state").json()
        assert state["phase"] == "idle"
        assert state["handle"]["resume_id"] == "r-1"
        assert state["artifact"]["download_url"] == "https://svc/files/abc.docx"

    def test_view_after_run(self, api):
        run(api, jd_text="Go")
        view = api.get("/api/workflow/view").json()
        assert view["run_control"]["enabled"] is True
        assert view["download"]["label"] == "tailored_resume.docx"
        assert view["fit_score"]["score_label"] == "72/100"
        assert [p["text"] for p in view["fit_score"]["found"]] == ["Go", "Kubernetes"]

    def test_view_download_label_follows_export_filename(self, orchestrator):
        app = create_app()
        app.dependency_overrides[get_workflow_orchestrator] = lambda: orchestrator
        app.dependency_overrides[get_console_config] = lambda: ConsoleConfig(
            backend_url="http://svc.test", export_filename="acme_resume.docx",
        )
        with TestClient(app) as client:
            run(client, jd_text="Go")
            view = client.get("/api/workflow/view").json()
        assert view["download"]["label"] == "acme_resume.docx"

    def test_view_unconfigured(self, orchestrator):
        app = create_app()
        app.dependency_overrides[get_workflow_orchestrator] = lambda: orchestrator
        app.dependency_overrides[get_console_config] = lambda: ConsoleConfig(backend_url="  ")
        with TestClient(app) as client:
            view = client.get("/api/workflow/view").json()
        assert view["run_control"]["enabled"] is False
        assert view["config_banner"]

    def test_events_when_idle(self, api):
        response = api.get("/api/workflow/events")
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/event-stream")
        assert response.text.count("event: state") == 1
        assert '"busy": false' in response.text

    @pytest.mark.asyncio
    async def test_events_stream_phases_until_idle(self, orchestrator, service, document, inputs):
        """The stream follows a run through every phase and ends once idle."""
        gate = asyncio.Event()

        async def slow_upload(request):
            await gate.wait()
            return httpx.Response(200, json=UPLOAD_OK)

        service.replies["/upload"] = slow_upload

        app = create_app()
        app.dependency_overrides[get_workflow_orchestrator] = lambda: orchestrator
        transport = httpx.ASGITransport(app=app)
        async with httpx.AsyncClient(transport=transport, base_url="http://console.test") as client:
            running = asyncio.create_task(orchestrator.run_workflow(document, inputs))
            while not service.requests:
                await asyncio.sleep(0)

            events = asyncio.create_task(client.get("/api/workflow/events"))
            while not orchestrator._listeners:
                await asyncio.sleep(0)

            gate.set()
            await running
            response = await asyncio.wait_for(events, timeout=5)

        snapshots = [
            json.loads(line[len("data: "):])
            for line in response.text.splitlines()
            if line.startswith("data: ")
        ]
        assert [s["phase"] for s in snapshots] == ["submitting", "tailoring", "exporting", "idle"]
        assert [s["busy"] for s in snapshots] == [True, True, True, False]
        assert snapshots[-1]["outcome"] == "done"
        assert orchestrator._listeners == []

    def test_acknowledge(self, api, service):
        service.replies["/upload"] = (500, {})
        run(api)

        body = api.post("/api/workflow/acknowledge").json()
        assert body["cleared"] is True
        assert body["state"]["error"] is None
        assert api.post("/api/workflow/acknowledge").json()["cleared"] is False

    def test_reset(self, api):
        run(api, jd_text="Go")
        body = api.post("/api/workflow/reset").json()
        assert body["reset"] is True
        assert body["state"]["handle"] is None

    def test_reset_conflict_while_busy(self, api, orchestrator):
        orchestrator._state.begin()
        assert api.post("/api/workflow/reset").status_code == 409
