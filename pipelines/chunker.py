"""Page chunking for citeable search results.

Splits a page's text into bounded chunks on sentence boundaries.
"""

import logging
import re
from typing import Iterable, List

from indexer.models import Chunk, Page

logger = logging.getLogger(__name__)

MAX_CHUNK_SIZE = 1000
MAIN_SECTION = 'main'
SENTENCE_SEPARATOR = '. '

_SENTENCE_END_RE = re.compile(r'[.!?]+')


def split_sentences(text: str) -> List[str]:
    """Split on runs of sentence-terminal punctuation, dropping empty fragments."""
    fragments = (fragment.strip() for fragment in _SENTENCE_END_RE.split(text))
    return [fragment for fragment in fragments if fragment]


def _make_chunk(page: Page, index: int, content: str) -> Chunk:
    section = f"chunk-{index}"
    return Chunk(
        url=f"{page.url}#{section}",
        title=page.title,
        content=content,
        last_updated=page.last_updated,
        section=section
    )


def chunk_page(page: Page, max_chunk_size: int = MAX_CHUNK_SIZE) -> List[Chunk]:
    """Chunk a single page.

    A page that fits in ``max_chunk_size`` becomes one ``main`` chunk carrying
    the page URL. Longer pages are built greedily from whole sentences; a
    buffer is flushed as soon as the next sentence would push it past the
    limit, so chunks never split a sentence. A single sentence longer than
    the limit is kept whole in its own chunk.

    Args:
        page: Page to split
        max_chunk_size: Maximum chunk length in characters

    Returns:
        Chunks in sentence order
    """
    content = page.content
    if len(content) <= max_chunk_size:
        return [Chunk(
            url=page.url,
            title=page.title,
            content=content,
            last_updated=page.last_updated,
            section=MAIN_SECTION
        )]

    chunks = []
    current = ''
    for sentence in split_sentences(content):
        if current and len(current) + len(SENTENCE_SEPARATOR) + len(sentence) > max_chunk_size:
            chunks.append(_make_chunk(page, len(chunks), current))
            current = sentence
        else:
            current += (SENTENCE_SEPARATOR if current else '') + sentence

    if current:
        chunks.append(_make_chunk(page, len(chunks), current))

    logger.debug(f"Split {page.url} into {len(chunks)} chunks")
    return chunks


def chunk_pages(pages: Iterable[Page], max_chunk_size: int = MAX_CHUNK_SIZE) -> List[Chunk]:
    """Chunk pages in order, concatenating their chunks."""
    chunks = []
    for page in pages:
        chunks.extend(chunk_page(page, max_chunk_size))
    return chunks
