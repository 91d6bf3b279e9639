from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ats_matching.schemas import AnalysisResult, ScanRecord


class AnalyzeRequest(BaseModel):
    job_description: str = Field(..., description="Full job description text")
    cv_text: Optional[str] = Field(
        default=None,
        description="Plain CV text (use this or pdf)",
    )
    pdf: Optional[str] = Field(
        default=None,
        description="Base64-encoded PDF content of the CV (use this or cv_text)",
    )
    cv_file_name: str = Field(default="", description="Name of the uploaded CV file")
    user_id: Optional[str] = Field(
        default=None,
        description="User ID to save the scan to Firestore"
    )
    request_id: Optional[str] = Field(
        default=None,
        description="Client-chosen ID for polling /api/ats/progress while the analysis runs"
    )

    @field_validator("job_description")
    @classmethod
    def validate_job_description(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("Job description is required")
        return v


class AnalyzeResponse(BaseModel):
    request_id: str
    result: AnalysisResult
    processing_time: str


class ProgressStatus(BaseModel):
    request_id: str
    status: str = Field(description="IDLE|EXTRACTING_FACTS|SCORING|GENERATING_FEEDBACK|PERSISTING|DONE|FAILED")
    message: Optional[str] = None
    started_at: Optional[str] = None
    updated_at: Optional[str] = None
    error: Optional[str] = None


class Settings(BaseModel):
    model_config = ConfigDict(protected_namespaces=())
    openai_api_key: Optional[str] = None
    model_name: str = "gpt-4o"
    oracle_timeout_seconds: int = 60
    persist_timeout_seconds: int = 15
    rate_limit_requests_per_minute: int = 60


# Request models for scan history endpoints (POST requests)
class GetUserScansRequest(BaseModel):
    """Request model for listing a user's scans."""
    user_id: str = Field(..., description="The user ID to fetch scans for")


class GetUserScanRequest(BaseModel):
    """Request model for getting a specific scan."""
    user_id: str = Field(..., description="The user ID")
    scan_id: str = Field(..., description="The scan document ID")


class ScanListResponse(BaseModel):
    """Response model for listing user scans."""
    user_id: str
    scans: List[ScanRecord]
    count: int


class ScanResponse(BaseModel):
    """Response model for a single scan."""
    user_id: str
    scan: ScanRecord


class RewriteBulletRequest(BaseModel):
    bullet_point: str = Field(..., description="The resume bullet point to improve")
    job_title: str = Field(default="", description="Target job title")
    job_description: str = Field(default="", description="Job description for context")
    missing_keywords: List[str] = Field(default_factory=list)


class RewriteBulletResponse(BaseModel):
    original: str
    rewritten: str
    was_weak: bool
