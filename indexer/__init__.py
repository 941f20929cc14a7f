"""Indexer package: corpus model, storage, relevance ranking and lookup."""

from .models import Page, Chunk, Corpus, CorpusMetadata, strip_fragment
from .corpus_store import load_corpus, save_corpus
from .relevance import (
    BoostRule,
    DEFAULT_BOOST_RULES,
    build_boost_rules,
    score_chunk,
    search
)
from .locator import locate

__all__ = [
    # Model
    'Page',
    'Chunk',
    'Corpus',
    'CorpusMetadata',
    'strip_fragment',

    # Storage
    'load_corpus',
    'save_corpus',

    # Ranking
    'BoostRule',
    'DEFAULT_BOOST_RULES',
    'build_boost_rules',
    'score_chunk',
    'search',

    # Lookup
    'locate'
]
