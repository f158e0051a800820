"""Shared fixtures: a fake tailoring service behind httpx.MockTransport."""

import json
from typing import Any, Callable, Dict, List, Tuple, Union

import httpx
import pytest

from services.console.tailor_client import HttpTailorClient
from services.console.orchestrator import WorkflowOrchestrator
from shared.schemas.resume import ResumeDocument, TailoringInputs

BASE_URL = "http://svc.test"

UPLOAD_OK = {"resume_id": "r-1", "filename": "resume.docx"}

TAILOR_OK = {
    "tailored_text": "Jane Doe\nSenior Backend Engineer\nGo, Kubernetes, PostgreSQL",
    "change_log": [
        "Moved Go and Kubernetes to the top of Skills",
        "Rewrote summary for backend focus",
    ],
    "suggestions": ["Mention gRPC experience if you have it"],
    "ats_before": {"issues": [
        {"severity": "high", "issue": "Table layout detected", "fix": "Use plain paragraphs"},
    ]},
    "ats_after": {"issues": [
        {"severity": "low", "issue": "Header contains an icon", "fix": "Remove the icon"},
    ]},
    "fit_score": {
        "score": 72,
        "top_keywords": ["Go", "Kubernetes", "gRPC"],
        "present": ["Go", "Kubernetes"],
        "missing": ["gRPC"],
        "coverage_ratio": 0.67,
        "heading_bonus": 5,
        "note": "Strong overlap on core stack",
    },
}

EXPORT_OK = {"saved_to": "/srv/exports/abc.docx", "download_url": "https://svc/files/abc.docx"}

Reply = Union[Tuple[int, Any], Callable[[httpx.Request], Any]]


class FakeTailorService:
    """
    In-memory stand-in for the remote tailoring service.

    Replies are (status, json_body) tuples or callables taking the request
    (sync or async). Every request is recorded in order.
    """

    def __init__(self):
        self.requests: List[httpx.Request] = []
        self.replies: Dict[str, Reply] = {
            "/upload": (200, UPLOAD_OK),
            "/tailor": (200, TAILOR_OK),
            "/export": (200, EXPORT_OK),
        }

    @property
    def paths(self) -> List[str]:
        return [r.url.path for r in self.requests]

    def json_body(self, path: str) -> dict:
        for request in self.requests:
            if request.url.path == path:
                return json.loads(request.content)
        raise AssertionError(f"No request to {path}")

    def handler(self, request: httpx.Request):
        self.requests.append(request)
        reply = self.replies.get(request.url.path)
        if reply is None:
            return httpx.Response(404, json={"detail": "Not Found"})
        if callable(reply):
            return reply(request)
        status, body = reply
        return httpx.Response(status, json=body)

    def client(self, base_url: str = BASE_URL) -> HttpTailorClient:
        return HttpTailorClient(base_url, transport=httpx.MockTransport(self.handler))


@pytest.fixture
def service() -> FakeTailorService:
    return FakeTailorService()


@pytest.fixture
def http_client(service) -> HttpTailorClient:
    return service.client()


@pytest.fixture
def orchestrator(http_client) -> WorkflowOrchestrator:
    return WorkflowOrchestrator(http_client)


@pytest.fixture
def document() -> ResumeDocument:
    return ResumeDocument(content=b"PK\x03\x04fake-docx-bytes", filename="resume.docx")


@pytest.fixture
def inputs() -> TailoringInputs:
    return TailoringInputs(jd_text="Senior backend engineer, Go, Kubernetes")
