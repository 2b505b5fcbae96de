"""
Webpage extraction strategy.

fetch -> strip non-content elements -> readability main-content extraction.

Readability is the only extraction technique. When it finds no usable
article text the page is treated as bot-protected or non-article, and there
is no fallback to raw DOM text.
"""

from typing import Optional, Tuple
from urllib.parse import urlparse

import requests
from bs4 import BeautifulSoup
from readability import Document
from readability.readability import Unparseable

from .config import Settings
from .errors import ErrorKind, Failure, Result
from .models import Extraction, ExtractionOutcome
from .text_utils import normalize_whitespace, truncate_text

NON_CONTENT_TAGS = ['script', 'style', 'noscript', 'nav', 'footer', 'header', 'aside', 'iframe', 'svg']


def browser_headers(settings: Settings) -> dict:
    return {
        'User-Agent': settings.user_agent,
        'Accept': 'text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8',
        'Accept-Language': 'en-US,en;q=0.9',
    }


def fetch_webpage(url: str, settings: Settings, session=None) -> Tuple[Optional[str], Optional[Failure]]:
    """Fetch webpage content. Returns (html, failure)."""
    http = session or requests
    try:
        response = http.get(
            url,
            headers=browser_headers(settings),
            timeout=settings.request_timeout,
            allow_redirects=True,
        )
    except requests.exceptions.Timeout:
        return None, Failure(ErrorKind.TIMEOUT, f"Request timed out after {settings.request_timeout}s")
    except requests.exceptions.RequestException as e:
        return None, Failure(ErrorKind.FETCH_FAILED, f"Request failed: {e}")

    if response.status_code == 403:
        return None, Failure(ErrorKind.ACCESS_DENIED, 'HTTP 403')
    if not 200 <= response.status_code < 300:
        return None, Failure(ErrorKind.FETCH_FAILED, f"HTTP error: {response.status_code}")

    return response.text, None


def extract_title(soup: BeautifulSoup) -> str:
    """Page title from og:title, <title> or the first <h1>."""
    og_title = soup.find('meta', property='og:title')
    title_tag = soup.find('title')
    h1_tag = soup.find('h1')

    title = (
        og_title.get('content') if og_title else
        title_tag.get_text(strip=True) if title_tag else
        h1_tag.get_text(strip=True) if h1_tag else
        ''
    )
    return normalize_whitespace(title or '')


def strip_non_content(soup: BeautifulSoup) -> BeautifulSoup:
    for element in soup.find_all(NON_CONTENT_TAGS):
        element.decompose()
    return soup


def extract_readable_content(html: str) -> Tuple[str, str]:
    """
    Run readability over the page after stripping non-content elements.

    Returns:
        Tuple of (title, body_text). body_text is '' when readability found
        nothing.
    """
    soup = BeautifulSoup(html, 'html.parser')
    title = extract_title(soup)
    strip_non_content(soup)

    document = Document(str(soup))
    summary_html = document.summary(html_partial=True)
    body = BeautifulSoup(summary_html, 'html.parser').get_text(separator=' ', strip=True)

    if not title:
        title = normalize_whitespace(document.short_title() or '')

    return title, normalize_whitespace(body)


def extract_webpage(url: str, settings: Settings, session=None) -> ExtractionOutcome:
    """Fetch a webpage and return its main article text."""
    print(f"[Webpage] Attempt started: {url}")

    html, failure = fetch_webpage(url, settings, session=session)
    if failure:
        print(f"[Webpage] Failed: {failure.kind.value} {failure.message}")
        return Result(error=failure)

    try:
        title, body = extract_readable_content(html or '')
    except Unparseable as e:
        print(f"[Webpage] Failed: unable to parse content: {e}")
        return Result.failure(ErrorKind.NO_CONTENT, f"Unable to parse content: {e}")

    if len(body) < settings.min_webpage_chars:
        print(f"[Webpage] Failed: no readable content ({len(body)} chars)")
        return Result.failure(
            ErrorKind.NO_CONTENT,
            'Unable to extract readable website content (bot protection or non-article page)'
        )

    body, was_truncated = truncate_text(body, settings.max_webpage_chars)
    if was_truncated:
        print(f"[Webpage] Content capped at {settings.max_webpage_chars} chars")

    text = f"{title}\n\n{body}" if title else body
    host = (urlparse(url).hostname or '').replace('www.', '')

    print(f"[Webpage] Success: {url} | Length: {len(text)} chars")
    return Result.success(Extraction(
        extracted_text=text,
        transcript='',
        source_description=f"webpage:{host}",
    ))
