"""
Claim extraction.

Reduces long content to the sentences that carry marketing or medical
claims before analysis. Off unless Settings.extract_claims is set.
"""

import re

EXTRACTION_THRESHOLD = 2000  # characters
MAX_CLAIMS_LENGTH = 5000
FALLBACK_LENGTH = 500
MIN_CLAIM_LENGTH = 10

CLAIM_PATTERNS = [
    # Health claims
    re.compile(r'(?:cure|cures|cured|curing)\s+[^.!?]+', re.IGNORECASE),
    re.compile(r'(?:treat|treats|treated|treating)\s+[^.!?]+', re.IGNORECASE),
    re.compile(r'(?:heal|heals|healed|healing)\s+[^.!?]+', re.IGNORECASE),
    re.compile(r'(?:prevent|prevents|prevented|preventing)\s+[^.!?]+', re.IGNORECASE),
    re.compile(r'(?:guarantee|guarantees|guaranteed)\s+[^.!?]+', re.IGNORECASE),
    re.compile(r'(?:promise|promises|promised)\s+[^.!?]+', re.IGNORECASE),
    re.compile(r'(?:assure|assures|assured)\s+[^.!?]+', re.IGNORECASE),
    re.compile(r'(?:ensure|ensures|ensured)\s+[^.!?]+', re.IGNORECASE),
    # Medical terms
    re.compile(r'(?:medicine|drug|pharmaceutical|treatment|therapy|diagnosis|symptom)[^.!?]*', re.IGNORECASE),
    # Effectiveness
    re.compile(r'(?:effective|efficacy|works|results|improves|enhances|boosts)[^.!?]*', re.IGNORECASE),
    # Comparisons
    re.compile(r'(?:better|best|faster|stronger|more effective)[^.!?]*', re.IGNORECASE),
    # Numbers
    re.compile(r'\d+%\s+(?:effective|success|improvement|cure|treat)[^.!?]*', re.IGNORECASE),
    re.compile(r'(?:in\s+)?\d+\s+(?:days|weeks|months|hours)[^.!?]*', re.IGNORECASE),
]

MEDICAL_KEYWORDS = ['health', 'medical', 'disease', 'symptom', 'treatment', 'cure', 'medicine']


def should_extract_claims(content: str) -> bool:
    return isinstance(content, str) and len(content) > EXTRACTION_THRESHOLD


def extract_claims(content: str) -> str:
    """
    Keep only claim-bearing fragments of content.

    Falls back to sentences with medical keywords, then to the first
    FALLBACK_LENGTH characters when nothing matches.
    """
    if not content or not isinstance(content, str):
        return content

    claims = []
    seen = set()

    for pattern in CLAIM_PATTERNS:
        for match in pattern.findall(content):
            claim = match.strip()
            if len(claim) > MIN_CLAIM_LENGTH and claim.lower() not in seen:
                claims.append(claim)
                seen.add(claim.lower())

    if not claims:
        for sentence in re.split(r'[.!?]+', content):
            sentence = sentence.strip()
            if not sentence:
                continue
            lowered = sentence.lower()
            if any(keyword in lowered for keyword in MEDICAL_KEYWORDS) and lowered not in seen:
                claims.append(sentence)
                seen.add(lowered)

    if not claims:
        return content[:FALLBACK_LENGTH] + ('...' if len(content) > FALLBACK_LENGTH else '')

    claims_text = '. '.join(claims) + '.'
    if len(claims_text) > MAX_CLAIMS_LENGTH:
        return claims_text[:MAX_CLAIMS_LENGTH] + '...'
    return claims_text
