"""
Content Audit Cloud Function

Accepts text, a URL or an uploaded file and returns a compliance audit.

Responsibilities:
- Parse the request (JSON or multipart form)
- Build the RawInput and AuditContext
- Return the pipeline's audit result

Does NOT:
- Issue or verify auth tokens (the gateway sets X-User-Id)
- Query audit history
"""

import functions_framework
import json
import os
import sys
import traceback

# Add the package root to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))
from content_audit import AuditContext, RawInput, Settings, UnauthenticatedError, build_pipeline

# Built once per instance; SDK clients are created per call
pipeline = build_pipeline(Settings.from_env())

CORS_HEADERS = {
    'Access-Control-Allow-Origin': '*',
    'Access-Control-Allow-Methods': 'POST',
    'Access-Control-Allow-Headers': 'Content-Type, X-User-Id',
    'Access-Control-Max-Age': '3600'
}


def request_fields(request) -> dict:
    """JSON body, then form fields, then raw JSON data."""
    request_json = request.get_json(force=True, silent=True)
    if isinstance(request_json, dict):
        return request_json

    if request.form:
        return request.form.to_dict()

    raw_data = request.get_data()
    if isinstance(raw_data, bytes):
        raw_data = raw_data.decode('utf-8', errors='replace')
    if raw_data and raw_data.strip().startswith('{'):
        try:
            return json.loads(raw_data)
        except json.JSONDecodeError:
            return {}
    return {}


def raw_input_from_request(request, fields: dict):
    """RawInput for the first populated field: text, url, then file."""
    text = fields.get('text')
    if isinstance(text, str) and text.strip():
        return RawInput.from_text(text)

    url = fields.get('url')
    if isinstance(url, str) and url.strip():
        return RawInput.from_url(url.strip())

    upload = request.files.get('file') if request.files else None
    if upload is not None:
        return RawInput.from_file(upload.read(), upload.mimetype or None, upload.filename)

    return None


@functions_framework.http
def audit_content(request):
    """
    Main Cloud Function entry point.

    Expected input (JSON or multipart form):
    {
        "text": "...",  |  "url": "https://...",  |  file upload "file"
        "userId": "user-123",
        "category": "Healthcare",
        "analysisMode": "Standard"
    }
    """
    # Handle CORS
    if request.method == 'OPTIONS':
        return ('', 204, CORS_HEADERS)

    headers = {'Access-Control-Allow-Origin': '*'}

    try:
        fields = request_fields(request)
        raw_input = raw_input_from_request(request, fields)
        if raw_input is None:
            return ({'error': 'One of text, url or file is required'}, 400, headers)

        context = AuditContext(
            user_id=request.headers.get('X-User-Id') or fields.get('userId'),
            category=fields.get('category'),
            analysis_mode=fields.get('analysisMode'),
        )

        audit_result = pipeline.process_content(raw_input, context)
        return (audit_result, 200, headers)

    except UnauthenticatedError as e:
        return ({'error': str(e)}, 401, headers)
    except Exception as e:
        error_trace = traceback.format_exc()
        print(f"Error: {str(e)}\n{error_trace}")
        return ({'error': str(e)}, 500, headers)
