from typing import Optional, Literal
from enum import Enum
from pydantic import BaseModel, Field
from datetime import datetime, timezone

from .resume import ResumeHandle, TailoringResult, ExportArtifact


class WorkflowPhase(str, Enum):
    """Where the orchestrator is in the Upload → Tailor → Export pipeline."""
    IDLE = "idle"
    SUBMITTING = "submitting"
    TAILORING = "tailoring"
    EXPORTING = "exporting"


WorkflowOutcome = Literal["done", "failed"]


class WorkflowErrorInfo(BaseModel):
    """Serializable description of a surfaced workflow error."""

    kind: str = Field(..., description="Error kind, e.g. 'upload_failed'")
    message: str = Field(..., description="Operator-facing message")
    stage: Optional[str] = Field(None, description="Stage that failed (upload, tailor, export)")
    status_code: Optional[int] = Field(None, description="Remote HTTP status, diagnostics only")

    @classmethod
    def from_exception(cls, exc) -> "WorkflowErrorInfo":
        return cls(
            kind=exc.kind,
            message=exc.message,
            stage=exc.stage,
            status_code=getattr(exc, "status_code", None),
        )


class WorkflowState(BaseModel):
    """
    Snapshot of the single workflow session.

    busy is true exactly while phase is not IDLE; outcome records how the
    most recent run ended.
    """

    phase: WorkflowPhase = Field(WorkflowPhase.IDLE, description="Current pipeline phase")
    outcome: Optional[WorkflowOutcome] = Field(None, description="Result of the last finished run")
    busy: bool = Field(False, description="True while a run is in flight")
    handle: Optional[ResumeHandle] = Field(None, description="Handle from the latest submission")
    result: Optional[TailoringResult] = Field(None, description="Latest tailoring result")
    artifact: Optional[ExportArtifact] = Field(None, description="Latest export artifact")
    error: Optional[WorkflowErrorInfo] = Field(None, description="Error awaiting acknowledgement")
    started_at: Optional[datetime] = Field(None, description="When the current/last run started")
    completed_at: Optional[datetime] = Field(None, description="When the last run finished")

    @property
    def is_done(self) -> bool:
        return self.phase == WorkflowPhase.IDLE and self.outcome == "done"

    @property
    def is_failed(self) -> bool:
        return self.phase == WorkflowPhase.IDLE and self.outcome == "failed"

    def begin(self) -> None:
        """Start a run: stale results are dropped, the handle stays until superseded."""
        self.phase = WorkflowPhase.SUBMITTING
        self.busy = True
        self.outcome = None
        self.result = None
        self.artifact = None
        self.error = None
        self.started_at = datetime.now(timezone.utc)
        self.completed_at = None

    def advance(self, phase: WorkflowPhase) -> None:
        self.phase = phase
        self.busy = phase != WorkflowPhase.IDLE

    def complete(self, error: Optional[WorkflowErrorInfo] = None) -> None:
        """Return to idle, marking the run done or failed."""
        self.phase = WorkflowPhase.IDLE
        self.busy = False
        self.completed_at = datetime.now(timezone.utc)
        if error:
            self.outcome = "failed"
            self.error = error
        else:
            self.outcome = "done"
