"""
Unit tests for audit record construction and persistence.
"""

import json
from datetime import datetime, timezone
from unittest.mock import MagicMock

from content_audit.config import Settings
from content_audit.models import AuditRecord, ContentType, Extraction, RawInput
from content_audit.records import (
    GcsRecordStore,
    InMemoryRecordStore,
    RecordPersister,
    build_record,
)

from tests.fakes import VALID_AUDIT, FailingRecordStore


def make_record(audit_result=None, user_id='user-1') -> AuditRecord:
    return build_record(
        user_id,
        ContentType.WEBPAGE,
        RawInput.from_url('https://example.com/post'),
        Extraction(extracted_text='Body text', transcript='', source_description='webpage:example.com'),
        dict(VALID_AUDIT) if audit_result is None else audit_result,
    )


class TestBuildRecord:

    def test_fields(self):
        record = make_record()
        assert record.user_id == 'user-1'
        assert record.content_type == 'webpage'
        assert record.original_input == 'https://example.com/post'
        assert record.extracted_text == 'Body text'
        assert record.transcript == ''
        assert record.created_at.tzinfo is not None

    def test_to_dict_uses_camel_case(self):
        record = AuditRecord(
            user_id='u', content_type='text', original_input='hi', extracted_text='hi',
            transcript='', audit_result=VALID_AUDIT,
            created_at=datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc),
        )
        assert record.to_dict() == {
            'userId': 'u',
            'contentType': 'text',
            'originalInput': 'hi',
            'extractedText': 'hi',
            'transcript': '',
            'auditResult': VALID_AUDIT,
            'createdAt': '2024-05-01T12:00:00Z',
        }

    def test_file_input_provenance(self):
        record = build_record(
            'u', ContentType.IMAGE, RawInput.from_file(b'x', 'image/png', 'ad.png'),
            Extraction(extracted_text='t'), VALID_AUDIT,
        )
        assert record.original_input == 'ad.png'


class TestRecordPersister:
    """At most one save per request, and only for valid audit results."""

    def test_saves_valid_record_once(self):
        store = InMemoryRecordStore()
        persister = RecordPersister(store)

        assert persister.persist(make_record()) is True
        assert persister.persist(make_record()) is False
        assert len(store.records) == 1

    def test_skips_invalid_result(self):
        store = InMemoryRecordStore()
        audit = {k: v for k, v in VALID_AUDIT.items() if k != 'violations'}
        assert RecordPersister(store).persist(make_record(audit)) is False
        assert store.records == []

    def test_store_failure_is_swallowed_and_not_retried(self):
        store = FailingRecordStore()
        persister = RecordPersister(store)
        assert persister.persist(make_record()) is False
        assert persister.persist(make_record()) is False
        assert store.attempts == 1


class TestGcsRecordStore:

    def test_uploads_json_under_user_prefix(self):
        client = MagicMock()
        store = GcsRecordStore(Settings(gcs_bucket='audits-bucket'), client_factory=lambda settings: client)

        blob_name = store.save(make_record(user_id='user/../42'))

        client.bucket.assert_called_once_with('audits-bucket')
        bucket = client.bucket.return_value
        bucket.blob.assert_called_once_with(blob_name)
        assert blob_name.startswith('audits/user____42/')
        assert blob_name.endswith('.json')

        blob = bucket.blob.return_value
        payload, = blob.upload_from_string.call_args[0]
        assert blob.upload_from_string.call_args[1] == {'content_type': 'application/json'}
        assert json.loads(payload)['userId'] == 'user/../42'

    def test_unique_keys(self):
        store = GcsRecordStore(Settings(), client_factory=lambda settings: MagicMock())
        record = make_record()
        assert store.blob_name(record) != store.blob_name(record)
