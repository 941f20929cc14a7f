"""Corpus build pipeline: sitemap discovery, fetch, extraction and chunking.

Every run is a full rebuild. URLs are fetched one at a time with a fixed
pause between requests; a URL that fails is logged, counted and skipped.

Usage:
    socket-docs-build [--config PATH] [--output PATH]
"""

import argparse
import asyncio
import logging
import sys
from datetime import datetime, timezone
from typing import List, Optional, Tuple

from config.settings import DocsConfig, load_config
from indexer.corpus_store import save_corpus
from indexer.models import Chunk, Corpus, CorpusMetadata, Page, strip_fragment
from observability.logging import setup_logging

from .chunker import chunk_page
from .crawler import DocsCrawler, FetchResult, is_candidate_url
from .extractor import extract_content, extract_title

logger = logging.getLogger(__name__)


def _today() -> str:
    return datetime.now(timezone.utc).date().isoformat()


def filter_candidate_urls(urls: List[str], config: DocsConfig) -> List[str]:
    """Keep sitemap URLs that point into the documentation."""
    return [url for url in urls if is_candidate_url(url, config.base_url, config.doc_segments)]


def page_from_html(url: str, html: str, config: DocsConfig, today: str) -> Optional[Page]:
    """Extract a page from fetched HTML, or None when it has no usable content."""
    content = extract_content(html, min_length=config.min_content_length)
    title = extract_title(html)
    if not content or not title:
        return None
    return Page(url=url, title=title, content=content, last_updated=today)


async def scrape_url(crawler, url: str, config: DocsConfig,
                     today: str) -> Tuple[FetchResult, Optional[Page]]:
    """Fetch one URL and turn it into a page."""
    result = await crawler.fetch_text(url)
    if not result.ok:
        return result, None
    return result, page_from_html(url, result.text, config, today)


async def build_corpus(config: DocsConfig, crawler) -> Corpus:
    """Build a fresh corpus from the documentation site.

    Args:
        config: Site and crawl settings
        crawler: Object with ``fetch_sitemap_urls()`` and ``fetch_text(url)``
            coroutines, normally a DocsCrawler

    Returns:
        Corpus with everything that was ingested successfully
    """
    today = _today()
    logger.info(f"Starting documentation build for {config.base_url}")

    sitemap_urls = await crawler.fetch_sitemap_urls()
    logger.info(f"Found {len(sitemap_urls)} URLs in sitemap")

    valid_urls = filter_candidate_urls(sitemap_urls, config)
    logger.info(f"Filtered to {len(valid_urls)} documentation URLs")

    pages: List[Page] = []
    chunks: List[Chunk] = []
    visited = set()
    successful = 0
    failed = 0

    for index, url in enumerate(valid_urls, start=1):
        canonical = strip_fragment(url)
        if canonical in visited:
            logger.debug(f"Skipping already visited {canonical}")
        else:
            visited.add(canonical)
            logger.info(f"[{index}/{len(valid_urls)}] Scraping: {canonical}")
            try:
                result, page = await scrape_url(crawler, canonical, config, today)
            except Exception as e:
                logger.error(f"Error scraping {canonical}: {e}")
                failed += 1
            else:
                if not result.ok:
                    logger.warning(f"Failed {canonical}: {result.error}")
                    failed += 1
                elif page is None:
                    logger.info(f"No content at {canonical}: missing title or content")
                else:
                    page_chunks = chunk_page(page, config.max_chunk_size)
                    pages.append(page)
                    chunks.extend(page_chunks)
                    successful += 1
                    logger.info(f"Success: {page.title[:50]!r} ({len(page_chunks)} chunks)")

            # duplicates are never fetched, so they get no delay
            await asyncio.sleep(config.request_delay)

        if index % config.progress_every == 0:
            logger.info(f"Progress: {index}/{len(valid_urls)} URLs processed, {successful} successful")

    metadata = CorpusMetadata(
        last_scraped=today,
        total_pages=len(pages),
        total_chunks=len(chunks),
        sitemap_urls_found=len(sitemap_urls),
        valid_urls_attempted=len(valid_urls),
        successful_scrapes=successful,
        failed_fetches=failed
    )

    logger.info(f"Build complete: {len(valid_urls)} URLs attempted, {successful} successful, "
                f"{failed} failed, {len(pages)} pages, {len(chunks)} chunks")

    return Corpus(pages=pages, chunks=chunks, metadata=metadata)


async def run_build(config: DocsConfig) -> Corpus:
    """Build with a live crawler session."""
    async with DocsCrawler(
        base_url=config.base_url,
        sitemap_url=config.sitemap_url,
        request_timeout=config.request_timeout,
        user_agent=config.user_agent
    ) as crawler:
        return await build_corpus(config, crawler)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Build the documentation corpus from the site sitemap")
    parser.add_argument("--config", help="Path to a YAML config file")
    parser.add_argument("--output", help="Corpus output path (overrides config)")
    parser.add_argument("--log-level", help="Log level (overrides config)")
    parser.add_argument("--json-logs", action="store_true", help="Emit JSON log lines")
    parser.add_argument("--log-file", help="Also append JSON log lines to this file")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    config = load_config(args.config)

    setup_logging(
        level=args.log_level or config.log_level,
        service_name="socket-docs-build",
        log_file=args.log_file or config.log_file,
        use_json=args.json_logs or config.json_logs
    )

    output = args.output or config.corpus_path
    try:
        corpus = asyncio.run(run_build(config))
        save_corpus(corpus, output)
    except Exception as e:
        logger.exception(f"Documentation build failed: {e}")
        return 1

    logger.info("Documentation build completed successfully")
    return 0


def run():
    sys.exit(main())


if __name__ == "__main__":
    run()
