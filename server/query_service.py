"""Query façade over the loaded corpus.

Wraps relevance search and document lookup and formats both into the answer
envelope returned to MCP clients::

    {"answer": str, "citations": [url, ...],
     "metadata": {"section_title": str, "last_updated": str | None}}
"""

import asyncio
import logging
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Sequence, Union

from config.settings import DocsConfig
from indexer.corpus_store import load_corpus, save_corpus
from indexer.locator import locate
from indexer.models import Chunk, Corpus, Page
from indexer.relevance import DEFAULT_BOOST_RULES, BoostRule, build_boost_rules, search

logger = logging.getLogger(__name__)

NO_RESULTS_ANSWER = "No relevant documentation found. Escalate or log feedback."
NO_RESULTS_TITLE = "No Results"
NOT_FOUND_TITLE = "Document Not Found"


def empty_envelope(section_title: str) -> Dict[str, Any]:
    return {
        "answer": NO_RESULTS_ANSWER,
        "citations": [],
        "metadata": {"section_title": section_title, "last_updated": None}
    }


def format_search_response(results: Sequence[Chunk]) -> Dict[str, Any]:
    """Answer with the top chunk and cite every distinct result URL."""
    if not results:
        return empty_envelope(NO_RESULTS_TITLE)

    top = results[0]
    # dict keeps first-appearance order
    citations = list(dict.fromkeys(chunk.url for chunk in results))
    return {
        "answer": top.content,
        "citations": citations,
        "metadata": {"section_title": top.title, "last_updated": top.last_updated}
    }


def format_document(doc: Optional[Page]) -> Dict[str, Any]:
    if doc is None:
        return empty_envelope(NOT_FOUND_TITLE)
    return {
        "answer": doc.content,
        "citations": [doc.url],
        "metadata": {"section_title": doc.title, "last_updated": doc.last_updated}
    }


class QueryService:
    """Holds the corpus for the process lifetime and answers queries over it.

    The corpus is loaded on first use. Concurrent first callers all await the
    same load task, so the file is read once.
    """

    def __init__(self,
                 corpus_path: Union[str, Path],
                 boosts: Sequence[BoostRule] = DEFAULT_BOOST_RULES,
                 default_limit: int = 5,
                 loader: Callable[[Path], Corpus] = load_corpus):
        self.corpus_path = Path(corpus_path)
        self.boosts = tuple(boosts)
        self.default_limit = default_limit
        self._loader = loader
        self._corpus: Optional[Corpus] = None
        self._load_task: Optional[asyncio.Future] = None

    @classmethod
    def from_config(cls, config: DocsConfig) -> 'QueryService':
        return cls(
            corpus_path=config.corpus_path,
            boosts=build_boost_rules(config.boosts),
            default_limit=config.default_limit
        )

    @property
    def loaded(self) -> bool:
        return self._corpus is not None

    async def _load(self) -> Corpus:
        try:
            corpus = await asyncio.to_thread(self._loader, self.corpus_path)
        except Exception as e:
            logger.error(f"Failed to load documentation corpus: {e}")
            corpus = Corpus.empty()

        # An update may have landed while the file was being read
        if self._corpus is None:
            self._corpus = corpus
        return self._corpus

    async def ensure_loaded(self) -> Corpus:
        """Return the corpus, loading it on the first call."""
        if self._corpus is not None:
            return self._corpus
        if self._load_task is None:
            self._load_task = asyncio.ensure_future(self._load())
        return await asyncio.shield(self._load_task)

    async def search(self, query: str, limit: Optional[int] = None) -> List[Chunk]:
        corpus = await self.ensure_loaded()
        if limit is None:
            limit = self.default_limit
        return search(corpus, query, limit, self.boosts)

    async def search_docs(self, query: str, limit: Optional[int] = None) -> Dict[str, Any]:
        """Search and format the ranked chunks as an envelope."""
        results = await self.search(query, limit)
        logger.info(f"search_docs {query!r}: {len(results)} results")
        return format_search_response(results)

    async def get_document(self, url: str) -> Optional[Page]:
        corpus = await self.ensure_loaded()
        return locate(corpus, url)

    async def get_doc(self, url: str) -> Dict[str, Any]:
        """Look up a page or chunk by URL and format it as an envelope."""
        doc = await self.get_document(url)
        if doc is None:
            logger.info(f"get_doc {url}: not found")
        return format_document(doc)

    async def update_corpus(self, corpus: Corpus) -> None:
        """Persist a new corpus and replace the in-memory one wholesale."""
        await asyncio.to_thread(save_corpus, corpus, self.corpus_path)
        self._corpus = corpus
        logger.info(f"Corpus replaced: {len(corpus.pages)} pages, {len(corpus.chunks)} chunks")
