"""Corpus data model: pages, chunks and build metadata.

The persisted corpus is a single JSON document. Field names on disk use the
camelCase keys of the published corpus format (``lastUpdated``,
``totalPages``...), the dataclasses use snake_case.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)


def strip_fragment(url: str) -> str:
    """Return the URL without its ``#fragment`` part."""
    return url.split('#', 1)[0]


@dataclass
class Page:
    """A single ingested documentation page."""
    url: str
    title: str
    content: str
    last_updated: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            'url': self.url,
            'title': self.title,
            'content': self.content,
            'lastUpdated': self.last_updated
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Page':
        return cls(
            url=data['url'],
            title=data.get('title') or '',
            content=data.get('content') or '',
            last_updated=data.get('lastUpdated')
        )


@dataclass
class Chunk:
    """A bounded, citeable excerpt of a page."""
    url: str
    title: str
    content: str
    last_updated: str
    section: str = 'main'

    @property
    def base_url(self) -> str:
        """Canonical URL of the page this chunk belongs to."""
        return strip_fragment(self.url)

    def as_page(self) -> Page:
        """Page-shaped view of this chunk (``section`` dropped)."""
        return Page(
            url=self.url,
            title=self.title,
            content=self.content,
            last_updated=self.last_updated
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'url': self.url,
            'title': self.title,
            'content': self.content,
            'lastUpdated': self.last_updated,
            'section': self.section
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Chunk':
        return cls(
            url=data['url'],
            title=data.get('title') or '',
            content=data.get('content') or '',
            last_updated=data.get('lastUpdated'),
            section=data.get('section') or 'main'
        )


@dataclass
class CorpusMetadata:
    """Counters and timestamp describing one build run."""
    last_scraped: Optional[str] = None
    total_pages: int = 0
    total_chunks: int = 0
    sitemap_urls_found: int = 0
    valid_urls_attempted: int = 0
    successful_scrapes: int = 0
    failed_fetches: int = 0

    _KEYS = {
        'last_scraped': 'lastScraped',
        'total_pages': 'totalPages',
        'total_chunks': 'totalChunks',
        'sitemap_urls_found': 'sitemapUrlsFound',
        'valid_urls_attempted': 'validUrlsAttempted',
        'successful_scrapes': 'successfulScrapes',
        'failed_fetches': 'failedFetches'
    }

    def to_dict(self) -> Dict[str, Any]:
        return {json_key: getattr(self, attr) for attr, json_key in self._KEYS.items()}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'CorpusMetadata':
        values = {}
        for attr, json_key in cls._KEYS.items():
            if json_key in data:
                values[attr] = data[json_key]
        return cls(**values)


@dataclass
class Corpus:
    """Pages, their chunks, and the metadata of the build that produced them."""
    pages: List[Page] = field(default_factory=list)
    chunks: List[Chunk] = field(default_factory=list)
    metadata: CorpusMetadata = field(default_factory=CorpusMetadata)

    @classmethod
    def empty(cls) -> 'Corpus':
        return cls()

    @property
    def is_empty(self) -> bool:
        return not self.pages and not self.chunks

    def to_dict(self) -> Dict[str, Any]:
        return {
            'pages': [page.to_dict() for page in self.pages],
            'chunks': [chunk.to_dict() for chunk in self.chunks],
            'metadata': self.metadata.to_dict()
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Corpus':
        """Build a corpus from its JSON form, skipping malformed records."""
        pages = _parse_records(data.get('pages'), Page.from_dict, 'page')
        chunks = _parse_records(data.get('chunks'), Chunk.from_dict, 'chunk')

        raw_meta = data.get('metadata')
        metadata = CorpusMetadata.from_dict(raw_meta) if isinstance(raw_meta, dict) else CorpusMetadata()

        return cls(pages=pages, chunks=chunks, metadata=metadata)


# Optional text fields; a record carrying any of them with a non-string value is skipped
_TEXT_KEYS = ('title', 'content', 'lastUpdated', 'section')


def _is_well_formed(item: Any) -> bool:
    if not isinstance(item, dict) or not isinstance(item.get('url'), str):
        return False
    return all(item.get(key) is None or isinstance(item[key], str) for key in _TEXT_KEYS)


def _parse_records(raw: Any, factory, kind: str) -> list:
    if not isinstance(raw, list):
        return []

    records = []
    skipped = 0
    for item in raw:
        if not _is_well_formed(item):
            skipped += 1
            continue
        records.append(factory(item))

    if skipped:
        logger.warning(f"Skipped {skipped} malformed {kind} records")
    return records
