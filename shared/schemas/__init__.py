from .resume import (
    ResumeDocument,
    ResumeHandle,
    TailoringInputs,
    AtsIssue,
    AtsReport,
    FitScore,
    TailoringResult,
    ExportArtifact,
)
from .workflow import WorkflowPhase, WorkflowState, WorkflowErrorInfo
from .view import WorkflowView, build_view

__all__ = [
    "ResumeDocument",
    "ResumeHandle",
    "TailoringInputs",
    "AtsIssue",
    "AtsReport",
    "FitScore",
    "TailoringResult",
    "ExportArtifact",
    "WorkflowPhase",
    "WorkflowState",
    "WorkflowErrorInfo",
    "WorkflowView",
    "build_view",
]
