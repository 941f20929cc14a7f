"""HTTP fetching and URL filtering for documentation ingestion.

Fetches are single attempts: a failed URL is reported back to the caller,
never retried.
"""

import asyncio
import logging
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import List, Optional, Sequence
from urllib.parse import urlparse

import aiohttp

from .sitemap import parse_sitemap

logger = logging.getLogger(__name__)

DEFAULT_DOC_SEGMENTS = ('/docs/', '/reference/')

# Static assets and site infrastructure that never hold documentation text
CRAWL_DENYLIST = [
    re.compile(r'\.(pdf|jpg|jpeg|png|gif|svg|zip|tar|gz|css|js|woff|woff2)$', re.IGNORECASE),
    re.compile(r'/download/'),
    re.compile(r'/assets/'),
    re.compile(r'/static/'),
    re.compile(r'/_next/'),
    re.compile(r'/api/'),
]


@dataclass
class FetchResult:
    """Result of fetching a single URL."""
    url: str
    status_code: int
    text: Optional[str] = None
    error: Optional[str] = None
    fetched_at: Optional[datetime] = None

    def __post_init__(self):
        if self.fetched_at is None:
            self.fetched_at = datetime.now(timezone.utc)

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300 and self.text is not None


def is_candidate_url(url: str, base_url: str,
                     doc_segments: Sequence[str] = DEFAULT_DOC_SEGMENTS) -> bool:
    """Check if a sitemap URL belongs to the documentation being ingested."""
    base_url = base_url.rstrip('/')
    if not url.startswith(base_url):
        return False
    if url == base_url:
        return True
    return any(segment in url for segment in doc_segments)


def should_crawl_link(url: str, base_url: str,
                      doc_segments: Sequence[str] = DEFAULT_DOC_SEGMENTS) -> bool:
    """Check if a harvested link is eligible for recursive crawling.

    Not used by the sitemap-driven build.
    """
    base_url = base_url.rstrip('/')
    if not url.startswith(base_url):
        return False

    normalized = url.split('#', 1)[0].rstrip('/')
    if normalized == base_url:
        return False

    path = urlparse(normalized).path
    prefixes = ['/' + segment.strip('/') for segment in doc_segments]
    if not any(path == prefix or path.startswith(prefix + '/') for prefix in prefixes):
        return False

    if '?' in url or '#' in url:
        return False

    return not any(pattern.search(url) for pattern in CRAWL_DENYLIST)


class DocsCrawler:
    """Sequential HTTP fetcher backed by one aiohttp session."""

    def __init__(self,
                 base_url: str,
                 sitemap_url: Optional[str] = None,
                 request_timeout: float = 30,
                 user_agent: str = 'SocketDocsMCP/1.0'):
        """Initialize crawler.

        Args:
            base_url: Documentation site root
            sitemap_url: Sitemap location, defaults to ``<base_url>/sitemap.xml``
            request_timeout: Total timeout per request in seconds
            user_agent: User agent string
        """
        self.base_url = base_url.rstrip('/')
        self.sitemap_url = sitemap_url or f"{self.base_url}/sitemap.xml"
        self.request_timeout = request_timeout
        self.user_agent = user_agent
        self.session: Optional[aiohttp.ClientSession] = None

    async def __aenter__(self):
        """Async context manager entry."""
        await self.open()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.close()

    async def open(self):
        if self.session is None:
            timeout = aiohttp.ClientTimeout(total=self.request_timeout)
            self.session = aiohttp.ClientSession(
                timeout=timeout,
                headers={'User-Agent': self.user_agent}
            )

    async def close(self):
        """Close the crawler session."""
        if self.session:
            await self.session.close()
            self.session = None

    async def fetch_text(self, url: str) -> FetchResult:
        """Fetch ``url`` once and return its body text or the failure."""
        if not self.session:
            await self.open()

        try:
            async with self.session.get(url, allow_redirects=True) as response:
                if response.status < 200 or response.status >= 300:
                    return FetchResult(url=url, status_code=response.status,
                                       error=f"HTTP {response.status}")
                text = await response.text()
                return FetchResult(url=url, status_code=response.status, text=text)

        except asyncio.TimeoutError:
            return FetchResult(url=url, status_code=0, error="Timeout")
        except aiohttp.ClientError as e:
            return FetchResult(url=url, status_code=0, error=f"Client error: {e}")
        except UnicodeDecodeError as e:
            return FetchResult(url=url, status_code=0, error=f"Undecodable body: {e}")

    async def fetch_sitemap_urls(self) -> List[str]:
        """Fetch the sitemap and list its URLs; any failure gives an empty list."""
        result = await self.fetch_text(self.sitemap_url)
        if not result.ok:
            logger.warning(f"Failed to fetch sitemap {self.sitemap_url}: {result.error}")
            return []

        urls = parse_sitemap(result.text)
        if not urls:
            logger.warning(f"No URLs found in sitemap {self.sitemap_url}")
        return urls
