"""
Analysis utilities for the content audit pipeline.

Wraps the analysis collaborator, cleans and parses its JSON response and
validates the audit result structure. All required keys must be present and
violations must be a list before a result is accepted.
"""

import json
from typing import Any, Dict, List, Optional

from .errors import ErrorKind, Result
from .text_utils import extract_json_object, strip_code_fences

# Keys every audit result must carry
REQUIRED_AUDIT_KEYS = [
    'score',
    'status',
    'summary',
    'financialPenalty',
    'ethicalMarketing',
    'violations',
]

# Keys that mean the model answered with a file edit instead of an audit
FORBIDDEN_KEYS = ['file_path', 'modified_content']

NEEDS_REVIEW = 'Needs Review'


def placeholder_result(summary: str) -> Dict[str, Any]:
    """
    Well-formed audit result for content that could not be audited.

    Placeholders are returned to the caller but never persisted.
    """
    return {
        'score': 0,
        'status': NEEDS_REVIEW,
        'summary': summary,
        'transcription': '',
        'financialPenalty': {
            'riskLevel': 'Unknown',
            'description': 'Could not evaluate.',
        },
        'ethicalMarketing': {
            'score': 0,
            'assessment': 'Could not evaluate.',
        },
        'violations': [],
    }


def validate_audit_result(audit_result: Any, required_keys: List[str] = None) -> Dict:
    """
    Validate that an audit result has the structure callers rely on.

    Args:
        audit_result: Parsed analysis response
        required_keys: Keys to require (uses REQUIRED_AUDIT_KEYS if None)

    Returns:
        Dict with:
            valid: bool - True if the result can be returned and persisted
            missing: list - Required keys that are absent
            errors: list - Error messages
    """
    if required_keys is None:
        required_keys = REQUIRED_AUDIT_KEYS

    result = {
        'valid': True,
        'missing': [],
        'errors': []
    }

    if not isinstance(audit_result, dict):
        result['valid'] = False
        result['errors'].append(f"Audit result is not an object: {type(audit_result).__name__}")
        result['missing'] = list(required_keys)
        return result

    for key in required_keys:
        if key not in audit_result:
            result['missing'].append(key)
            result['errors'].append(f"Missing required key: {key}")
            result['valid'] = False

    if 'violations' in audit_result and not isinstance(audit_result['violations'], list):
        result['errors'].append('violations must be a list')
        result['valid'] = False

    for key in FORBIDDEN_KEYS:
        if audit_result.get(key):
            result['errors'].append(f"Response contains file modification key: {key}")
            result['valid'] = False

    return result


def parse_analysis_response(raw: Any) -> Optional[Any]:
    """
    Turn a raw analyzer response into a Python object.

    Dicts pass through. Strings are stripped of code fences and parsed as
    JSON, retrying once on the outermost {...} span. Returns None when
    nothing parses.
    """
    if isinstance(raw, dict):
        return raw
    if not isinstance(raw, str):
        return None

    cleaned = strip_code_fences(raw)
    try:
        return json.loads(cleaned)
    except json.JSONDecodeError:
        pass

    candidate = extract_json_object(cleaned)
    if not candidate:
        return None
    try:
        return json.loads(candidate)
    except json.JSONDecodeError:
        return None


class AnalysisInvoker:
    """Calls the analyzer once and returns a validated audit result."""

    def __init__(self, analyzer):
        self.analyzer = analyzer

    def invoke(self, text: str, meta: Dict[str, Any]) -> Result[Dict[str, Any]]:
        print(f"[Analysis] Attempt started: {meta.get('inputType')} ({len(text)} chars)")

        try:
            raw = self.analyzer.analyze(text, meta)
        except Exception as e:
            print(f"[Analysis] Failed: analyzer error: {e}")
            return Result.failure(ErrorKind.ANALYSIS_UNAVAILABLE, str(e))

        parsed = parse_analysis_response(raw)
        if parsed is None:
            print('[Analysis] Failed: response is not valid JSON')
            return Result.failure(ErrorKind.INVALID_ANALYSIS_SHAPE, 'Response is not valid JSON')

        validation = validate_audit_result(parsed)
        if not validation['valid']:
            print(f"[Analysis] Failed: {'; '.join(validation['errors'])}")
            return Result.failure(ErrorKind.INVALID_ANALYSIS_SHAPE, '; '.join(validation['errors']))

        print(f"[Analysis] Success: status={parsed.get('status')} score={parsed.get('score')}")
        return Result.success(parsed)
