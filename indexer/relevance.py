"""Lexical relevance scoring over corpus chunks.

Scores are additive integers: whole-phrase matches, per-token matches and a
table of independent topic boosts. Chunks scoring zero never appear in a
result list.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from .models import Chunk, Corpus

logger = logging.getLogger(__name__)

TITLE_PHRASE_SCORE = 100
CONTENT_PHRASE_SCORE = 50
TITLE_TOKEN_SCORE = 10
CONTENT_TOKEN_SCORE = 5
MIN_TOKEN_LENGTH = 3
DEFAULT_LIMIT = 5


@dataclass(frozen=True)
class BoostRule:
    """Adds ``weight`` when the query mentions a topic the chunk also covers.

    The rule fires if any of ``query_terms`` is in the query and either any
    of ``title_terms`` is in the title or any of ``content_terms`` is in the
    content. All comparisons are on lower-cased text.
    """
    name: str
    query_terms: Tuple[str, ...]
    title_terms: Tuple[str, ...]
    content_terms: Tuple[str, ...]
    weight: int

    def applies(self, query_lower: str, title_lower: str, content_lower: str) -> bool:
        if not any(term in query_lower for term in self.query_terms):
            return False
        return (any(term in title_lower for term in self.title_terms) or
                any(term in content_lower for term in self.content_terms))

    @classmethod
    def topic(cls, term: str, weight: int) -> 'BoostRule':
        """Rule where the same term triggers on query, title and content."""
        return cls(name=term, query_terms=(term,), title_terms=(term,),
                   content_terms=(term,), weight=weight)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'BoostRule':
        name = data.get('name')
        if not name:
            raise ValueError("Boost rule needs a name")
        query_terms = _terms(data.get('query_terms', [name]))
        if not query_terms:
            raise ValueError(f"Boost rule {name!r} has no query terms")
        weight = int(data.get('weight', 0))
        if weight <= 0:
            raise ValueError(f"Boost rule {name!r} must have a positive weight")
        return cls(
            name=name,
            query_terms=query_terms,
            title_terms=_terms(data.get('title_terms', query_terms)),
            content_terms=_terms(data.get('content_terms', query_terms)),
            weight=weight
        )


def _terms(values: Iterable[str]) -> Tuple[str, ...]:
    return tuple(str(v).lower() for v in values if str(v))


DEFAULT_BOOST_RULES: Tuple[BoostRule, ...] = (
    BoostRule.topic('api', 20),
    BoostRule.topic('config', 20),
    BoostRule.topic('sdk', 30),
    BoostRule.topic('python', 25),
    # Install/example/usage queries favour content hosted on GitHub
    BoostRule(
        name='github-examples',
        query_terms=('install', 'example', 'usage'),
        title_terms=('github',),
        content_terms=('github.com',),
        weight=15
    ),
)


def build_boost_rules(config: Optional[Sequence[Dict[str, Any]]]) -> Tuple[BoostRule, ...]:
    """Turn the configured boost table into rules; ``None`` keeps the defaults."""
    if config is None:
        return DEFAULT_BOOST_RULES
    return tuple(BoostRule.from_dict(entry) for entry in config)


@dataclass
class ScoredChunk:
    chunk: Chunk
    score: int


def score_chunk(chunk: Chunk, query_lower: str,
                boosts: Sequence[BoostRule] = DEFAULT_BOOST_RULES) -> int:
    """Compute the relevance of a chunk for an already lower-cased query."""
    score = 0
    content = (chunk.content or '').lower()
    title = (chunk.title or '').lower()

    if query_lower in title:
        score += TITLE_PHRASE_SCORE
    if query_lower in content:
        score += CONTENT_PHRASE_SCORE

    for token in query_lower.split():
        if len(token) < MIN_TOKEN_LENGTH:
            continue
        if token in title:
            score += TITLE_TOKEN_SCORE
        if token in content:
            score += CONTENT_TOKEN_SCORE

    for rule in boosts:
        if rule.applies(query_lower, title, content):
            score += rule.weight

    return score


def search(corpus: Optional[Corpus], query: str, limit: int = DEFAULT_LIMIT,
           boosts: Sequence[BoostRule] = DEFAULT_BOOST_RULES) -> List[Chunk]:
    """Rank corpus chunks against ``query``.

    Args:
        corpus: Loaded corpus; ``None`` or empty yields no results
        query: Free-text query, matched case-insensitively
        limit: Maximum number of chunks to return
        boosts: Topic boost table

    Returns:
        Chunks in descending score order, ties in corpus order
    """
    if corpus is None or not corpus.chunks or limit <= 0:
        return []

    query_lower = query.lower()
    scored: List[ScoredChunk] = []
    for chunk in corpus.chunks:
        score = score_chunk(chunk, query_lower, boosts)
        if score > 0:
            scored.append(ScoredChunk(chunk, score))

    # sorted() is stable, equal scores keep corpus order
    scored = sorted(scored, key=lambda item: item.score, reverse=True)

    logger.debug(f"Query {query!r} matched {len(scored)} of {len(corpus.chunks)} chunks")
    return [item.chunk for item in scored[:limit]]
