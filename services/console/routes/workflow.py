import json
import asyncio
import logging
from typing import Optional, AsyncGenerator
from fastapi import APIRouter, Depends, HTTPException, Form, UploadFile, File
from fastapi.responses import JSONResponse, StreamingResponse

from shared.schemas.resume import ResumeDocument, TailoringInputs
from shared.schemas.workflow import WorkflowState, WorkflowErrorInfo
from shared.schemas.view import build_view
from ..config import ConsoleConfig, get_config
from ..errors import TailorConsoleError, ConfigurationMissing, MissingInput
from ..orchestrator import WorkflowOrchestrator, get_orchestrator

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/workflow", tags=["workflow"])


def get_console_config() -> ConsoleConfig:
    return get_config()


def get_workflow_orchestrator() -> WorkflowOrchestrator:
    return get_orchestrator()


def error_status(error: TailorConsoleError) -> int:
    """HTTP status for a workflow error returned by this console."""
    if isinstance(error, ConfigurationMissing):
        return 503
    if isinstance(error, MissingInput):
        return 400
    return 502


def _state_json(state: WorkflowState) -> dict:
    return state.model_dump(mode="json")


@router.post("/run")
async def run_workflow(
    resume: Optional[UploadFile] = File(None, description="Resume document (.docx)"),
    jd_url: str = Form("", description="Job description URL (optional)"),
    jd_text: str = Form("", description="Job description text (optional)"),
    company_url: str = Form("", description="Company URL (optional)"),
    orchestrator: WorkflowOrchestrator = Depends(get_workflow_orchestrator),
):
    """
    Run Upload → Tailor → Export and return the final state.

    Returns 409 if a workflow is already running. On failure the body
    carries the error and the state, including any partial results.
    """
    if orchestrator.busy:
        raise HTTPException(status_code=409, detail="Workflow already running")

    document = None
    if resume is not None and resume.filename:
        content = await resume.read()
        logger.info(f"Received resume: {resume.filename} ({len(content)} bytes)")
        document = ResumeDocument(
            content=content,
            filename=resume.filename,
            content_type=resume.content_type,
        )

    inputs = TailoringInputs(
        jd_url=jd_url or None,
        jd_text=jd_text or None,
        company_url=company_url or None,
    )

    try:
        artifact = await orchestrator.run_workflow(document, inputs)
    except TailorConsoleError as e:
        return JSONResponse(
            status_code=error_status(e),
            content={
                "success": False,
                "error": WorkflowErrorInfo.from_exception(e).model_dump(),
                "state": _state_json(orchestrator.state),
            },
        )
    except Exception as e:
        logger.error(f"Workflow execution failed: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=str(e))

    if artifact is None:
        raise HTTPException(status_code=409, detail="Workflow already running")

    return {
        "success": True,
        "download_url": artifact.download_url,
        "state": _state_json(orchestrator.state),
    }


@router.get("/state")
async def get_state(orchestrator: WorkflowOrchestrator = Depends(get_workflow_orchestrator)):
    """Current workflow state snapshot."""
    return _state_json(orchestrator.state)


@router.get("/view")
async def get_view(
    orchestrator: WorkflowOrchestrator = Depends(get_workflow_orchestrator),
    config: ConsoleConfig = Depends(get_console_config),
):
    """Display-ready view of the current state."""
    configured = config.backend_configured or config.use_simulation
    view = build_view(orchestrator.state, configured, download_label=config.export_filename)
    return view.model_dump(mode="json")


@router.get("/events")
async def stream_state(orchestrator: WorkflowOrchestrator = Depends(get_workflow_orchestrator)):
    """
    Stream state snapshots with Server-Sent Events (SSE).

    Sends the current state immediately, then every change until the
    orchestrator is idle again.
    """

    async def event_generator() -> AsyncGenerator[str, None]:
        queue: asyncio.Queue = asyncio.Queue()
        unsubscribe = orchestrator.subscribe(queue.put_nowait)
        try:
            snapshot = orchestrator.state
            yield f"event: state\ndata: {json.dumps(_state_json(snapshot))}\n\n"
            while snapshot.busy:
                snapshot = await queue.get()
                yield f"event: state\ndata: {json.dumps(_state_json(snapshot))}\n\n"
        finally:
            unsubscribe()

    return StreamingResponse(
        event_generator(),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
            "X-Accel-Buffering": "no",
        }
    )


@router.post("/acknowledge")
async def acknowledge_error(orchestrator: WorkflowOrchestrator = Depends(get_workflow_orchestrator)):
    """Dismiss the pending error."""
    cleared = orchestrator.acknowledge_error()
    return {"cleared": cleared, "state": _state_json(orchestrator.state)}


@router.post("/reset")
async def reset_session(orchestrator: WorkflowOrchestrator = Depends(get_workflow_orchestrator)):
    """Forget the current handle and results."""
    if not orchestrator.reset():
        raise HTTPException(status_code=409, detail="Workflow already running")
    return {"reset": True, "state": _state_json(orchestrator.state)}
