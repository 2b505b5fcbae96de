"""
Audit record construction and persistence.

A record is saved at most once per process_content call, and only when its
audit result passes structural validation. Placeholders never reach a store.
"""

import json
import re
import traceback
import uuid
from typing import List, Optional

from google.cloud import storage
from google.oauth2 import service_account

from .analysis import validate_audit_result
from .config import SCOPES, Settings
from .models import AuditRecord, ContentType, Extraction, RawInput


def get_storage_client(settings: Settings):
    """Initialize Cloud Storage client."""
    creds_json = settings.google_service_account
    if creds_json:
        creds_dict = json.loads(creds_json)
        creds = service_account.Credentials.from_service_account_info(
            creds_dict,
            scopes=SCOPES
        )
        return storage.Client(credentials=creds, project=creds_dict.get('project_id'))
    else:
        # Use default credentials in Cloud Functions
        return storage.Client()


def build_record(user_id: str, content_type: ContentType, raw_input: RawInput,
                 extraction: Extraction, audit_result: dict) -> AuditRecord:
    return AuditRecord(
        user_id=user_id,
        content_type=content_type.value,
        original_input=raw_input.describe(),
        extracted_text=extraction.extracted_text,
        transcript=extraction.transcript,
        audit_result=audit_result,
    )


class InMemoryRecordStore:
    """Append-only store for tests and local runs."""

    def __init__(self):
        self.records: List[AuditRecord] = []

    def save(self, record: AuditRecord) -> str:
        self.records.append(record)
        return str(len(self.records))


class GcsRecordStore:
    """One JSON object per record at audits/<user>/<uuid>.json."""

    def __init__(self, settings: Settings, client_factory=None):
        self.settings = settings
        self.client_factory = client_factory or get_storage_client

    def blob_name(self, record: AuditRecord) -> str:
        safe_user = re.sub(r'[^A-Za-z0-9_-]', '_', record.user_id)
        return f"audits/{safe_user}/{uuid.uuid4().hex}.json"

    def save(self, record: AuditRecord) -> str:
        client = self.client_factory(self.settings)
        bucket = client.bucket(self.settings.gcs_bucket)
        blob_name = self.blob_name(record)
        blob = bucket.blob(blob_name)
        blob.upload_from_string(
            json.dumps(record.to_dict(), ensure_ascii=False),
            content_type='application/json'
        )
        return blob_name


class RecordPersister:
    """Persists at most one record. Create one per request."""

    def __init__(self, store):
        self.store = store
        self.attempted = False
        self.saved_id: Optional[str] = None

    def persist(self, record: AuditRecord) -> bool:
        if self.attempted:
            print('[Records] Skipped: record already persisted for this request')
            return False

        validation = validate_audit_result(record.audit_result)
        if not validation['valid']:
            print(f"[Records] Skipped: invalid audit result ({'; '.join(validation['errors'])})")
            return False

        self.attempted = True
        try:
            self.saved_id = self.store.save(record)
        except Exception as e:
            # The audit result is still returned to the caller
            print(f"[Records] Save failed: {e}")
            print(traceback.format_exc())
            return False

        print(f"[Records] Saved: {self.saved_id} ({record.content_type})")
        return True
