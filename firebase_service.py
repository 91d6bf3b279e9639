"""
Firebase service for storing and reading ATS scans in Firestore.

Scans live under users/{user_id}/atsScans/{scan_id} and are append-only: a
re-analysis writes a new document, it never edits an old one.
"""
from __future__ import annotations

import json
import logging
import os
from typing import Any, Dict, List, Optional

import firebase_admin
from dotenv import load_dotenv
from firebase_admin import credentials, firestore
from pydantic import ValidationError

from ats_matching.config import SCANS_COLLECTION
from ats_matching.errors import PersistenceError
from ats_matching.schemas import AnalysisResult, ScanRecord

logger = logging.getLogger(__name__)

load_dotenv()


class FirebaseService:
    """Service for saving and fetching ATS scans in Firebase Firestore."""

    _app = None
    _db = None

    def __init__(self, db=None):
        """
        Initialize Firebase Admin SDK.

        Args:
            db: Optional Firestore client to use instead of the default app's
        """
        if db is not None:
            self.db = db
            return

        if FirebaseService._app is None:
            self._initialize_firebase()
        if FirebaseService._db is None:
            FirebaseService._db = firestore.client()
            logger.info("[Firebase] Firestore client created")
        self.db = FirebaseService._db

    def _initialize_firebase(self):
        """
        Initialize Firebase Admin SDK with credentials from environment variables.

        Priority:
        1. GOOGLE_APPLICATION_CREDENTIALS_JSON (JSON string directly in env var)
        2. GOOGLE_APPLICATION_CREDENTIALS (file path to JSON file)
        3. FIREBASE_PROJECT_ID (for Application Default Credentials)
        """
        try:
            FirebaseService._app = firebase_admin.get_app()
            logger.info("[Firebase] Firebase already initialized")
            return
        except ValueError:
            logger.info("[Firebase] Initializing Firebase...")

        firebase_json = os.getenv("GOOGLE_APPLICATION_CREDENTIALS_JSON")
        service_account_path = os.getenv("GOOGLE_APPLICATION_CREDENTIALS")
        project_id = os.getenv("FIREBASE_PROJECT_ID")

        try:
            if firebase_json:
                try:
                    cred_dict = json.loads(firebase_json)
                except json.JSONDecodeError as e:
                    raise ValueError(f"Invalid JSON in GOOGLE_APPLICATION_CREDENTIALS_JSON: {str(e)}")
                FirebaseService._app = firebase_admin.initialize_app(credentials.Certificate(cred_dict))
                logger.info("[Firebase] [OK] Firebase initialized from JSON string")
            elif service_account_path:
                path = os.path.abspath(os.path.normpath(service_account_path))
                if not os.path.exists(path):
                    raise FileNotFoundError(f"Service account file not found: {path}")
                FirebaseService._app = firebase_admin.initialize_app(credentials.Certificate(path))
                logger.info(f"[Firebase] [OK] Firebase initialized from file {path}")
            elif project_id:
                FirebaseService._app = firebase_admin.initialize_app(options={"projectId": project_id})
                logger.info(f"[Firebase] [OK] Firebase initialized with project ID {project_id}")
            else:
                raise ValueError(
                    "No Firebase credentials found. Please set one of:\n"
                    "  - GOOGLE_APPLICATION_CREDENTIALS_JSON (JSON string)\n"
                    "  - GOOGLE_APPLICATION_CREDENTIALS (file path)\n"
                    "  - FIREBASE_PROJECT_ID (for Application Default Credentials)"
                )
        except Exception as e:
            if isinstance(e, (ValueError, FileNotFoundError)):
                raise
            raise RuntimeError(f"Failed to initialize Firebase: {str(e)}")

    def _scans_ref(self, user_id: str):
        return self.db.collection("users").document(user_id).collection(SCANS_COLLECTION)

    def save_scan(
        self,
        user_id: str,
        analysis_result: AnalysisResult,
        job_title_snippet: str,
        cv_file_name: str,
    ) -> str:
        """
        Save an analysis result as a new scan document.

        Args:
            user_id: The owner of the scan
            analysis_result: The finished analysis
            job_title_snippet: Short job title for the history list
            cv_file_name: Name of the uploaded CV

        Returns:
            The document ID of the saved scan

        Raises:
            PersistenceError: the write failed
        """
        try:
            doc_ref = self._scans_ref(user_id).document()
            document_data = {
                "scanId": doc_ref.id,
                "overallScore": analysis_result.overall_score,
                "jobTitleSnippet": job_title_snippet,
                "cvFileName": cv_file_name or "",
                "createdAt": firestore.SERVER_TIMESTAMP,
                "fullResult": analysis_result.model_dump(mode="json", by_alias=True),
            }
            doc_ref.set(document_data)
        except Exception as e:
            raise PersistenceError(f"Failed to save scan for user {user_id}: {str(e)}") from e

        logger.info(f"[Firebase] [SAVE] Scan saved: users/{user_id}/{SCANS_COLLECTION}/{doc_ref.id}")
        return doc_ref.id

    def _to_record(self, doc_id: str, data: Dict[str, Any]) -> ScanRecord:
        data = dict(data)
        data.setdefault("scanId", doc_id)
        try:
            return ScanRecord.model_validate(data)
        except ValidationError as e:
            raise PersistenceError(f"Stored scan {doc_id} is malformed: {e}") from e

    def list_scans(self, user_id: str) -> List[ScanRecord]:
        """
        Fetch all scans for a user, newest first.

        Raises:
            PersistenceError: the read failed or a stored scan is malformed
        """
        try:
            query = self._scans_ref(user_id).order_by("createdAt", direction=firestore.Query.DESCENDING)
            docs = list(query.stream())
        except Exception as e:
            raise PersistenceError(f"Failed to fetch scans for user {user_id}: {str(e)}") from e

        return [self._to_record(doc.id, doc.to_dict() or {}) for doc in docs]

    def get_scan(self, user_id: str, scan_id: str) -> Optional[ScanRecord]:
        """
        Fetch one scan by ID.

        Returns:
            The scan, or None if it doesn't exist
        """
        try:
            doc = self._scans_ref(user_id).document(scan_id).get()
        except Exception as e:
            raise PersistenceError(f"Failed to fetch scan {scan_id} for user {user_id}: {str(e)}") from e

        if not doc.exists:
            return None
        return self._to_record(doc.id, doc.to_dict() or {})


# Singleton instance
_firebase_service: Optional[FirebaseService] = None


def get_firebase_service() -> FirebaseService:
    """Get or create the Firebase service instance."""
    global _firebase_service
    if _firebase_service is None:
        _firebase_service = FirebaseService()
    return _firebase_service
