"""
Display-ready view of the workflow state.

build_view() shapes a WorkflowState into exactly what a console front end
renders: run control, banners, score card, ATS card, change log and preview.
It is a pure function of the state and the configuration flag.
"""

import json
from typing import Optional, List
from pydantic import BaseModel, Field

from .resume import AtsReport, FitScore, TailoringResult
from .workflow import WorkflowState


MAX_KEYWORD_PILLS = 16
MAX_ATS_ISSUES = 8

RUN_LABEL = "Upload → Tailor → Export"
RUN_LABEL_BUSY = "Working…"
DOWNLOAD_LABEL = "tailored_resume.docx"
UNCONFIGURED_HINT = "Set CONSOLE_BACKEND_URL in .env"
UNCONFIGURED_BANNER = "Missing CONSOLE_BACKEND_URL. Add it to .env and restart the console."
SCORE_PLACEHOLDER = "Run tailoring to see score."
ATS_PLACEHOLDER = "Run tailoring to see ATS results."
NO_ISSUES_MESSAGE = "No issues detected."


class RunControl(BaseModel):
    label: str
    enabled: bool
    hint: str = ""


class DownloadLink(BaseModel):
    label: str
    url: str


class KeywordPill(BaseModel):
    text: str
    kind: str = Field(..., description="'good' for found keywords, 'bad' for missing ones")


class FitScoreCard(BaseModel):
    """Score card contents; placeholder is set instead when there is no score."""

    placeholder: Optional[str] = None
    score_label: Optional[str] = None
    bar_percent: float = 0.0
    coverage_label: str = "-"
    bonus_label: str = "-"
    note: Optional[str] = None
    found: List[KeywordPill] = Field(default_factory=list)
    missing: List[KeywordPill] = Field(default_factory=list)


class IssueRow(BaseModel):
    headline: str
    fix: str


class AtsCard(BaseModel):
    placeholder: Optional[str] = None
    empty_message: Optional[str] = None
    issues: List[IssueRow] = Field(default_factory=list)


class ResultPanels(BaseModel):
    change_log_json: str
    tailored_preview: str


class Alert(BaseModel):
    kind: str
    message: str


class WorkflowView(BaseModel):
    """Everything needed to render the console for one state snapshot."""

    busy: bool
    phase: str
    run_control: RunControl
    config_banner: Optional[str] = None
    download: Optional[DownloadLink] = None
    resume_id: Optional[str] = None
    fit_score: FitScoreCard
    ats_after: AtsCard
    panels: Optional[ResultPanels] = None
    alert: Optional[Alert] = None


def _format_number(value: Optional[float]) -> str:
    if value is None:
        return "-"
    return f"{value:g}"


def clamp_percent(score: Optional[float]) -> float:
    """Bar width for a score, clamped to [0, 100]."""
    return max(0.0, min(100.0, float(score or 0)))


def build_fit_score_card(fit: Optional[FitScore]) -> FitScoreCard:
    if fit is None:
        return FitScoreCard(placeholder=SCORE_PLACEHOLDER)

    return FitScoreCard(
        score_label=f"{_format_number(fit.score)}/100",
        bar_percent=clamp_percent(fit.score),
        coverage_label=_format_number(fit.coverage_ratio),
        bonus_label=_format_number(fit.heading_bonus),
        note=fit.note or None,
        found=[KeywordPill(text=k, kind="good") for k in (fit.present or [])[:MAX_KEYWORD_PILLS]],
        missing=[KeywordPill(text=k, kind="bad") for k in (fit.missing or [])[:MAX_KEYWORD_PILLS]],
    )


def build_ats_card(report: Optional[AtsReport]) -> AtsCard:
    if report is None:
        return AtsCard(placeholder=ATS_PLACEHOLDER)
    if not report.issues:
        return AtsCard(empty_message=NO_ISSUES_MESSAGE)

    return AtsCard(issues=[
        IssueRow(headline=f"{issue.severity.upper()}: {issue.issue}", fix=issue.fix)
        for issue in report.issues[:MAX_ATS_ISSUES]
    ])


def build_result_panels(result: Optional[TailoringResult]) -> Optional[ResultPanels]:
    if result is None:
        return None
    return ResultPanels(
        change_log_json=json.dumps(result.change_log, indent=2, ensure_ascii=False),
        tailored_preview=result.tailored_text,
    )


def build_view(state: WorkflowState, configured: bool, download_label: str = DOWNLOAD_LABEL) -> WorkflowView:
    """
    Shape a workflow state snapshot for display.

    download_label should be the filename the export was requested with.
    """
    result = state.result

    run_control = RunControl(
        label=RUN_LABEL_BUSY if state.busy else RUN_LABEL,
        enabled=configured and not state.busy,
        hint="" if configured else UNCONFIGURED_HINT,
    )

    download = None
    if state.artifact and state.artifact.download_url:
        download = DownloadLink(label=download_label, url=state.artifact.download_url)

    alert = None
    if state.error:
        alert = Alert(kind=state.error.kind, message=state.error.message)

    return WorkflowView(
        busy=state.busy,
        phase=state.phase.value,
        run_control=run_control,
        config_banner=None if configured else UNCONFIGURED_BANNER,
        download=download,
        resume_id=state.handle.resume_id if state.handle else None,
        fit_score=build_fit_score_card(result.fit_score if result else None),
        ats_after=build_ats_card(result.ats_after if result else None),
        panels=build_result_panels(result),
        alert=alert,
    )
