"""
Text helpers shared by the extraction strategies and the analysis invoker.

Extracted text is normalized to single spaces and capped at word boundaries
so that limits never cut a word in half.
"""

import re
from typing import Tuple

# ```json ... ``` wrappers the model sometimes adds around its JSON
CODE_FENCE_PATTERN = re.compile(r'```(?:json|JSON)?')


def normalize_whitespace(text: str) -> str:
    """Collapse runs of whitespace to single spaces and trim."""
    if not text:
        return ''
    return re.sub(r'\s+', ' ', text).strip()


def truncate_text(text: str, max_length: int) -> Tuple[str, bool]:
    """
    Truncate text at a word boundary, not mid-word.

    Args:
        text: The text to truncate
        max_length: Maximum length in characters

    Returns:
        Tuple of (truncated_text, was_truncated)

    Examples:
        >>> truncate_text("Hello World", 70)
        ('Hello World', False)

        >>> truncate_text("This is a very long sentence that exceeds the limit", 20)
        ('This is a very long', True)
    """
    if not text:
        return ('', False)

    if len(text) <= max_length:
        return (text, False)

    truncated = text[:max_length]
    last_space = truncated.rfind(' ')

    # Single long token: hard cut
    if last_space <= 0:
        return (truncated, True)

    return (truncated[:last_space].rstrip(), True)


def strip_code_fences(text: str) -> str:
    """Remove markdown code-fence decoration around a JSON payload."""
    if not text:
        return ''
    return CODE_FENCE_PATTERN.sub('', text).strip()


def extract_json_object(text: str) -> str:
    """Return the outermost {...} span in text, or '' if there is none."""
    if not text:
        return ''
    match = re.search(r'\{[\s\S]*\}', text)
    return match.group() if match else ''
