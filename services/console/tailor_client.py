"""
Client for the remote resume tailoring service.

The service exposes three endpoints, each wrapped by one adapter method on
BaseTailorClient:

- submit()  -> POST /upload   (multipart resume upload)
- tailor()  -> POST /tailor   (analysis + rewrite against a job description)
- export()  -> POST /export   (document generation)

Subclasses only implement the raw POST. HttpTailorClient talks to the real
service over httpx; SimulatedTailorClient returns canned responses for
development without a running service.
"""

import logging
import mimetypes
from typing import Any, Dict, Optional, Type, TypeVar
from dataclasses import dataclass
from abc import ABC, abstractmethod

import httpx
from pydantic import BaseModel, ValidationError

from shared.schemas.resume import (
    ResumeDocument,
    ResumeHandle,
    TailoringInputs,
    TailoringResult,
    ExportArtifact,
)
from .config import ConsoleConfig, get_config
from .errors import (
    ConfigurationMissing,
    MissingInput,
    StageFailed,
    UploadFailed,
    TailorFailed,
    ExportFailed,
)

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

OPTIONAL_TAILOR_FIELDS = ("jd_url", "jd_text", "company_url")


@dataclass
class ServiceResponse:
    """Raw outcome of one call to the tailoring service."""
    success: bool
    status_code: Optional[int] = None
    data: Any = None
    error: Optional[str] = None


def build_tailor_payload(handle: ResumeHandle, inputs: TailoringInputs) -> Dict[str, str]:
    """
    Build the /tailor request body.

    Blank or whitespace-only inputs are left out entirely so the service's
    own defaults apply; the rest are sent trimmed.
    """
    payload = {"resume_id": handle.resume_id}
    for key in OPTIONAL_TAILOR_FIELDS:
        value = getattr(inputs, key)
        if value and value.strip():
            payload[key] = value.strip()
    return payload


def decode_response(
    response: ServiceResponse,
    model: Type[ModelT],
    error_cls: Type[StageFailed],
) -> ModelT:
    """Turn a service response into a model, or raise the stage's error."""
    if not response.success:
        raise error_cls(status_code=response.status_code, detail=response.error)
    try:
        return model.model_validate(response.data)
    except ValidationError as e:
        logger.error(f"{error_cls.stage} response did not match {model.__name__}: {e}")
        raise error_cls(status_code=response.status_code, detail=str(e)) from e


class BaseTailorClient(ABC):
    """Abstract base class for tailoring service clients."""

    @abstractmethod
    async def post(
        self,
        path: str,
        json: Optional[Dict[str, Any]] = None,
        files: Optional[Dict[str, Any]] = None,
    ) -> ServiceResponse:
        """POST to a service endpoint."""
        pass

    def ensure_configured(self) -> None:
        """Raise ConfigurationMissing if the client cannot reach the service."""
        pass

    async def close(self) -> None:
        pass

    # Stage adapters

    async def submit(self, document: Optional[ResumeDocument]) -> ResumeHandle:
        """Upload a resume document and return its handle."""
        self.ensure_configured()
        if document is None:
            raise MissingInput()

        content_type = (
            document.content_type
            or mimetypes.guess_type(document.filename)[0]
            or "application/octet-stream"
        )
        logger.info(f"Uploading {document.filename} ({len(document.content)} bytes)")
        response = await self.post(
            "/upload",
            files={"file": (document.filename, document.content, content_type)},
        )
        handle = decode_response(response, ResumeHandle, UploadFailed)
        logger.info(f"Upload complete: resume_id={handle.resume_id}")
        return handle

    async def tailor(self, handle: ResumeHandle, inputs: TailoringInputs) -> TailoringResult:
        """Request a tailoring pass for a submitted resume."""
        self.ensure_configured()
        payload = build_tailor_payload(handle, inputs)
        logger.info(f"Tailoring {handle.resume_id} with fields: {sorted(payload)}")
        response = await self.post("/tailor", json=payload)
        result = decode_response(response, TailoringResult, TailorFailed)
        if result.fit_score:
            logger.info(f"Tailoring complete: fit score {result.fit_score.score}")
        else:
            logger.info("Tailoring complete: no fit score returned")
        return result

    async def export(self, content: str, filename: str, title: str) -> ExportArtifact:
        """Request an exported document for the given text."""
        self.ensure_configured()
        logger.info(f"Exporting {filename} ({len(content)} chars)")
        response = await self.post(
            "/export",
            json={"filename": filename, "title": title, "content": content},
        )
        artifact = decode_response(response, ExportArtifact, ExportFailed)
        logger.info(f"Export complete: {artifact.download_url}")
        return artifact


class HttpTailorClient(BaseTailorClient):
    """
    Client for a tailoring service reachable over HTTP.

    The underlying httpx.AsyncClient is created on first use and pooled
    across calls. Pass a transport to route requests elsewhere (tests use
    httpx.MockTransport).
    """

    def __init__(
        self,
        base_url: Optional[str],
        timeout: float = 120.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.strip().rstrip("/") if base_url and base_url.strip() else None
        self._timeout = timeout
        self._transport = transport
        self._http: Optional[httpx.AsyncClient] = None

    def ensure_configured(self) -> None:
        if not self.base_url:
            raise ConfigurationMissing()

    def _get_http(self) -> httpx.AsyncClient:
        if self._http is None:
            self._http = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self._timeout,
                follow_redirects=True,
                transport=self._transport,
            )
        return self._http

    async def post(
        self,
        path: str,
        json: Optional[Dict[str, Any]] = None,
        files: Optional[Dict[str, Any]] = None,
    ) -> ServiceResponse:
        self.ensure_configured()
        http = self._get_http()

        try:
            r = await http.post(path, json=json, files=files)
        except httpx.HTTPError as e:
            logger.error(f"POST {path} transport error: {e}")
            return ServiceResponse(success=False, error=str(e))

        if not r.is_success:
            logger.warning(f"POST {path} returned HTTP {r.status_code}")
            return ServiceResponse(success=False, status_code=r.status_code, error=r.text[:500])

        try:
            data = r.json()
        except ValueError as e:
            logger.error(f"POST {path} returned a non-JSON body: {e}")
            return ServiceResponse(success=False, status_code=r.status_code, error=f"Invalid JSON: {e}")

        return ServiceResponse(success=True, status_code=r.status_code, data=data)

    async def close(self) -> None:
        if self._http is not None:
            await self._http.aclose()
            self._http = None


class SimulatedTailorClient(BaseTailorClient):
    """
    Simulated client for testing and development.

    Answers every endpoint with a plausible response without any network
    traffic.
    """

    def __init__(self):
        self._call_count = 0
        self.calls: list = []

    async def post(
        self,
        path: str,
        json: Optional[Dict[str, Any]] = None,
        files: Optional[Dict[str, Any]] = None,
    ) -> ServiceResponse:
        self._call_count += 1
        self.calls.append(path)
        logger.info(f"[SIMULATED] call #{self._call_count}: POST {path}")

        if path == "/upload":
            filename = files["file"][0] if files and "file" in files else "resume.docx"
            return ServiceResponse(
                success=True,
                status_code=200,
                data={"resume_id": f"sim-{self._call_count}", "filename": filename},
            )

        if path == "/tailor":
            jd = (json or {}).get("jd_text") or (json or {}).get("jd_url") or ""
            return ServiceResponse(
                success=True,
                status_code=200,
                data={
                    "tailored_text": f"Simulated tailored resume for: {jd[:80]}".strip(),
                    "change_log": ["Simulated: reordered skills section"],
                    "suggestions": ["Simulated: quantify recent achievements"],
                    "ats_before": {"issues": [
                        {"severity": "medium", "issue": "Table detected", "fix": "Use plain paragraphs"},
                    ]},
                    "ats_after": {"issues": []},
                    "fit_score": {
                        "score": 50,
                        "top_keywords": [],
                        "present": [],
                        "missing": [],
                        "note": "Simulated score",
                    },
                },
            )

        if path == "/export":
            filename = (json or {}).get("filename", "tailored_resume.docx")
            return ServiceResponse(
                success=True,
                status_code=200,
                data={
                    "saved_to": f"/tmp/simulated/{filename}",
                    "download_url": f"http://simulated.local/files/{filename}",
                },
            )

        return ServiceResponse(success=False, status_code=404, error=f"Unknown endpoint {path}")


# Client factory
_tailor_client: Optional[BaseTailorClient] = None


def create_tailor_client(config: Optional[ConsoleConfig] = None) -> BaseTailorClient:
    """Build a client for the given configuration."""
    config = config or get_config()
    if config.use_simulation:
        logger.info("Using simulated tailoring client")
        return SimulatedTailorClient()
    logger.info(f"Using HTTP tailoring client (backend={config.backend_url or 'NOT SET'})")
    return HttpTailorClient(config.backend_url, timeout=config.request_timeout)


def get_tailor_client(config: Optional[ConsoleConfig] = None) -> BaseTailorClient:
    """Get or create the process-wide tailoring client."""
    global _tailor_client

    if _tailor_client is None:
        _tailor_client = create_tailor_client(config)

    return _tailor_client


async def shutdown_tailor_client() -> None:
    """Close the process-wide tailoring client."""
    global _tailor_client
    if _tailor_client:
        try:
            await _tailor_client.close()
        except Exception as e:
            logger.warning(f"Error closing tailoring client: {e}")
        _tailor_client = None
