"""Title and body text extraction from raw HTML.

Content extraction is pattern based on purpose: it strips tags rather than
building a DOM, and a pattern that does not match simply falls through to
the next candidate. None of these functions raise on malformed markup.
"""

import logging
import re
from typing import List, Optional
from urllib.parse import urljoin

from bs4 import BeautifulSoup

logger = logging.getLogger(__name__)

MIN_CONTENT_LENGTH = 50
UNTITLED = "Untitled"

_SCRIPT_RE = re.compile(r'<script[^>]*>.*?</script>', re.IGNORECASE | re.DOTALL)
_STYLE_RE = re.compile(r'<style[^>]*>.*?</style>', re.IGNORECASE | re.DOTALL)
_TITLE_RE = re.compile(r'<title[^>]*>(.*?)</title>', re.IGNORECASE | re.DOTALL)
_H1_RE = re.compile(r'<h1[^>]*>(.*?)</h1>', re.IGNORECASE | re.DOTALL)
_TAG_RE = re.compile(r'<[^>]*>')
_WS_RE = re.compile(r'\s+')

# Content regions, tried in order
_REGION_PATTERNS = [
    re.compile(r'<main[^>]*>(.*?)</main>', re.IGNORECASE | re.DOTALL),
    re.compile(r'<article[^>]*>(.*?)</article>', re.IGNORECASE | re.DOTALL),
    # Non-greedy: a nested element of the same tag name ends the region early
    re.compile(r'<([a-z][a-z0-9]*)\b[^>]*\bclass=["\'][^"\']*content[^"\']*["\'][^>]*>(.*?)</\1>',
               re.IGNORECASE | re.DOTALL),
]


def _collapse(text: str) -> str:
    return _WS_RE.sub(' ', text).strip()


def _strip_tags(markup: str) -> str:
    return _TAG_RE.sub(' ', markup)


def extract_title(html: str) -> str:
    """Return the page title: ``<title>``, else the first ``<h1>``, else "Untitled"."""
    match = _TITLE_RE.search(html)
    if match:
        title = _collapse(match.group(1))
        if title:
            return title

    match = _H1_RE.search(html)
    if match:
        title = _collapse(_strip_tags(match.group(1)))
        if title:
            return title

    return UNTITLED


def _isolate_region(html: str) -> str:
    for pattern in _REGION_PATTERNS:
        match = pattern.search(html)
        if match:
            # The last group is the inner markup for every pattern
            return match.group(match.lastindex)
    return html


def extract_content(html: str, min_length: int = MIN_CONTENT_LENGTH) -> Optional[str]:
    """Extract normalized plain text from the page's main content region.

    Args:
        html: Raw page markup
        min_length: Content of this length or shorter counts as absent

    Returns:
        Whitespace-collapsed text, or None for near-empty pages
    """
    cleaned = _SCRIPT_RE.sub('', html)
    cleaned = _STYLE_RE.sub('', cleaned)

    content = _collapse(_strip_tags(_isolate_region(cleaned)))
    if len(content) > min_length:
        return content
    return None


def extract_links(html: str, page_url: str, base_url: str) -> List[str]:
    """Collect unique links under ``base_url`` from the page's anchors.

    Root-relative hrefs resolve against the site, fragment-only hrefs against
    the page itself. Order of first appearance is kept.
    """
    base_url = base_url.rstrip('/')
    links = []
    seen = set()

    try:
        soup = BeautifulSoup(html, 'html.parser')
        anchors = soup.find_all('a', href=True)
    except Exception as e:
        logger.warning(f"Failed to parse links from {page_url}: {e}")
        return links

    for anchor in anchors:
        href = anchor['href'].strip()
        if not href:
            continue
        if href.startswith('#'):
            href = page_url.split('#', 1)[0] + href
        elif href.startswith('/'):
            href = urljoin(base_url + '/', href)

        if href.startswith(base_url) and href not in seen:
            seen.add(href)
            links.append(href)

    return links
