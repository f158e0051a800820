from typing import Optional, List
from pydantic import BaseModel, ConfigDict, Field, model_validator


class ResumeDocument(BaseModel):
    """A resume file selected for submission."""

    content: bytes = Field(..., description="Raw document bytes")
    filename: str = Field(..., min_length=1, description="Original filename")
    content_type: Optional[str] = Field(None, description="MIME type, guessed from filename when absent")


class ResumeHandle(BaseModel):
    """Opaque reference to a resume stored by the tailoring service."""

    model_config = ConfigDict(frozen=True)

    resume_id: str = Field(..., description="Server-issued identifier, echoed verbatim in later calls")
    filename: str = Field("", description="Original filename (informational)")


class TailoringInputs(BaseModel):
    """Job description and company inputs for a tailoring pass."""

    jd_url: Optional[str] = Field(None, description="Job description URL")
    jd_text: Optional[str] = Field(None, description="Pasted job description text")
    company_url: Optional[str] = Field(None, description="Company website URL")


class AtsIssue(BaseModel):
    """A single ATS compatibility problem and its suggested fix."""
    severity: str
    issue: str
    fix: str


class AtsReport(BaseModel):
    """ATS compliance report; issue order is kept as received."""
    issues: List[AtsIssue] = Field(default_factory=list)


class FitScore(BaseModel):
    """Keyword/heading alignment between the resume and the job description."""

    score: float = Field(..., ge=0, le=100, description="Fit score out of 100")
    top_keywords: List[str] = Field(default_factory=list, description="Most salient JD keywords, in order")
    present: List[str] = Field(default_factory=list, description="Keywords found in the resume")
    missing: List[str] = Field(default_factory=list, description="Keywords absent from the resume")
    coverage_ratio: Optional[float] = Field(None, description="Share of keywords covered")
    heading_bonus: Optional[float] = Field(None, description="Bonus for matching section headings")
    note: Optional[str] = Field(None, description="Free-form note from the scorer")

    @model_validator(mode="after")
    def check_disjoint(self) -> "FitScore":
        overlap = set(self.present) & set(self.missing)
        if overlap:
            raise ValueError(f"Keywords both present and missing: {sorted(overlap)}")
        return self


class TailoringResult(BaseModel):
    """Everything the tailoring pass returns for one resume."""

    tailored_text: str = Field(..., description="Rewritten resume body as plain text")
    change_log: List[str] = Field(default_factory=list, description="Human-readable changes, in order")
    suggestions: List[str] = Field(default_factory=list, description="Recommendations not applied")
    ats_before: Optional[AtsReport] = Field(None, description="ATS report for the original, when provided")
    ats_after: Optional[AtsReport] = Field(None, description="ATS report for the tailored text, when provided")
    fit_score: Optional[FitScore] = Field(None, description="Fit score, when the service provides one")


class ExportArtifact(BaseModel):
    """Location of an exported document."""

    model_config = ConfigDict(frozen=True)

    saved_to: str = Field("", description="Server-side path (informational)")
    download_url: str = Field(..., description="URL the client can download from")
