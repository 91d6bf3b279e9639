from __future__ import annotations

import asyncio
import logging
import os
import time
import uuid
from datetime import datetime
from typing import Dict, List

from dotenv import load_dotenv
from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware

from ats_matching import AnalysisFailedError, AnalysisProgress, TextOracle, run_analysis
from ats_matching.bullet_analyzer import is_weak_bullet, rewrite_bullet_point
from ats_matching.document_text import decode_base64_pdf, extract_text_from_pdf_bytes
from ats_matching.errors import DocumentExtractionError, OracleError, PersistenceError
from models import (
    AnalyzeRequest,
    AnalyzeResponse,
    GetUserScanRequest,
    GetUserScansRequest,
    ProgressStatus,
    RewriteBulletRequest,
    RewriteBulletResponse,
    ScanListResponse,
    ScanResponse,
    Settings,
)

load_dotenv()

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO"),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

app = FastAPI(title="ATS CV Matching API", version="1.0.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# In-memory stores
REQUEST_PROGRESS: Dict[str, ProgressStatus] = {}
LAST_REQUESTS_BY_IP: Dict[str, List[float]] = {}


def now_iso() -> str:
    return datetime.utcnow().isoformat() + "Z"


def make_request_id() -> str:
    return uuid.uuid4().hex


def get_settings() -> Settings:
    return Settings(
        openai_api_key=os.getenv("OPENAI_API_KEY"),
        model_name=os.getenv("OPENAI_MODEL", "gpt-4o"),
        oracle_timeout_seconds=int(os.getenv("ORACLE_TIMEOUT_SECONDS", "60")),
        persist_timeout_seconds=int(os.getenv("PERSIST_TIMEOUT_SECONDS", "15")),
        rate_limit_requests_per_minute=int(os.getenv("RATE_LIMIT_RPM", "60")),
    )


def get_oracle(settings: Settings = Depends(get_settings)) -> TextOracle:
    return TextOracle(
        model_name=settings.model_name,
        api_key=settings.openai_api_key,
        timeout_seconds=settings.oracle_timeout_seconds,
    )


async def rate_limit(request: Request, settings: Settings = Depends(get_settings)):
    ip = request.client.host if request.client else "unknown"
    window = 60.0
    max_req = settings.rate_limit_requests_per_minute
    now = time.time()
    bucket = LAST_REQUESTS_BY_IP.setdefault(ip, [])
    # prune
    while bucket and now - bucket[0] > window:
        bucket.pop(0)
    if len(bucket) >= max_req:
        raise HTTPException(status_code=429, detail="Rate limit exceeded")
    bucket.append(now)


def get_scan_store():
    """Firestore scan store, or None when Firebase isn't configured."""
    try:
        from firebase_service import get_firebase_service
        return get_firebase_service()
    except Exception as e:
        logger.warning(f"Firebase unavailable, scans will not be saved: {e}")
        return None


def resolve_cv_text(data: AnalyzeRequest) -> str:
    if data.cv_text and data.cv_text.strip():
        return data.cv_text
    if data.pdf:
        return extract_text_from_pdf_bytes(decode_base64_pdf(data.pdf))
    raise DocumentExtractionError("Missing CV (plain text or base64 PDF)")


@app.get("/")
async def root():
    return {"status": "ok", "version": "1.0.0"}


@app.get("/api/ats/progress/{request_id}", response_model=ProgressStatus)
async def get_progress(request_id: str):
    status = REQUEST_PROGRESS.get(request_id)
    if not status:
        raise HTTPException(status_code=404, detail="Unknown request_id")
    return status


@app.post("/api/ats/analyze", response_model=AnalyzeResponse, dependencies=[Depends(rate_limit)])
async def analyze(
    data: AnalyzeRequest,
    settings: Settings = Depends(get_settings),
    oracle: TextOracle = Depends(get_oracle),
):
    """
    Score a CV against a job description.

    The CV comes either as plain text or as a base64 PDF. When user_id is set
    the finished scan is saved to the user's history (best effort).
    """
    request_id = data.request_id or make_request_id()
    started = time.time()
    REQUEST_PROGRESS[request_id] = ProgressStatus(
        request_id=request_id, status="IDLE", started_at=now_iso(), updated_at=now_iso()
    )

    def on_progress(progress: AnalysisProgress) -> None:
        REQUEST_PROGRESS[request_id] = REQUEST_PROGRESS[request_id].model_copy(update={
            "status": progress.state.value,
            "message": progress.label,
            "error": progress.error,
            "updated_at": now_iso(),
        })

    try:
        cv_text = await asyncio.to_thread(resolve_cv_text, data)
    except DocumentExtractionError as e:
        REQUEST_PROGRESS[request_id] = REQUEST_PROGRESS[request_id].model_copy(
            update={"status": "FAILED", "error": str(e), "updated_at": now_iso()}
        )
        raise HTTPException(status_code=400, detail=str(e))

    store = await asyncio.to_thread(get_scan_store) if data.user_id else None

    try:
        result = await run_analysis(
            cv_text,
            data.job_description,
            oracle=oracle,
            store=store,
            owner_id=data.user_id,
            source_file_name=data.cv_file_name,
            on_progress=on_progress,
            persist_timeout_seconds=settings.persist_timeout_seconds,
        )
    except AnalysisFailedError as e:
        raise HTTPException(status_code=502, detail=e.message)

    return AnalyzeResponse(
        request_id=request_id,
        result=result,
        processing_time=f"{time.time() - started:.2f}s",
    )


# Scan History Endpoints
@app.post("/api/ats/scans", response_model=ScanListResponse)
async def get_user_scans(request: GetUserScansRequest):
    """
    Fetch all scans for a user, newest first.

    Request Body:
        user_id: The user ID to fetch scans for
    """
    try:
        from firebase_service import get_firebase_service

        firebase_service = get_firebase_service()
        scans = firebase_service.list_scans(request.user_id)
        return ScanListResponse(user_id=request.user_id, scans=scans, count=len(scans))
    except PersistenceError as e:
        raise HTTPException(status_code=500, detail=f"Failed to fetch scans: {str(e)}")
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Firebase service not available: {str(e)}")


@app.post("/api/ats/scans/get", response_model=ScanResponse)
async def get_user_scan(request: GetUserScanRequest):
    """
    Fetch a specific scan by ID for a user.

    Request Body:
        user_id: The user ID
        scan_id: The scan document ID
    """
    try:
        from firebase_service import get_firebase_service

        firebase_service = get_firebase_service()
        scan = firebase_service.get_scan(request.user_id, request.scan_id)
    except PersistenceError as e:
        raise HTTPException(status_code=500, detail=f"Failed to fetch scan: {str(e)}")
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Firebase service not available: {str(e)}")

    if scan is None:
        raise HTTPException(
            status_code=404,
            detail=f"Scan not found for user {request.user_id}, scan {request.scan_id}"
        )
    return ScanResponse(user_id=request.user_id, scan=scan)


@app.post("/api/ats/bullets/rewrite", response_model=RewriteBulletResponse, dependencies=[Depends(rate_limit)])
async def rewrite_bullet(request: RewriteBulletRequest, oracle: TextOracle = Depends(get_oracle)):
    """Suggest a stronger version of one resume bullet point."""
    try:
        rewritten = await asyncio.to_thread(
            rewrite_bullet_point,
            request.bullet_point,
            request.job_title,
            request.job_description,
            oracle,
            request.missing_keywords,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except OracleError as e:
        logger.error(f"Bullet rewrite failed: {e}")
        raise HTTPException(status_code=502, detail="Failed to get suggestion. Please try again.")

    return RewriteBulletResponse(
        original=request.bullet_point,
        rewritten=rewritten,
        was_weak=is_weak_bullet(request.bullet_point),
    )


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=int(os.getenv("PORT", "8000")))
