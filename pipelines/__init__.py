"""Pipelines package for documentation ingestion.

Provides content extraction, chunking, sitemap discovery, fetching and the
corpus build.
"""

from .extractor import extract_title, extract_content, extract_links
from .chunker import chunk_page, chunk_pages, split_sentences
from .sitemap import parse_sitemap
from .crawler import DocsCrawler, FetchResult, is_candidate_url, should_crawl_link
from .corpus_builder import build_corpus, run_build

__all__ = [
    # Extraction
    'extract_title',
    'extract_content',
    'extract_links',

    # Chunking
    'chunk_page',
    'chunk_pages',
    'split_sentences',

    # Discovery and fetching
    'parse_sitemap',
    'DocsCrawler',
    'FetchResult',
    'is_candidate_url',
    'should_crawl_link',

    # Build
    'build_corpus',
    'run_build'
]
