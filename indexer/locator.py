"""Resolve a page or chunk URL to a single document."""

from typing import Optional

from .models import Corpus, Page, strip_fragment


def locate(corpus: Optional[Corpus], url: str) -> Optional[Page]:
    """Find the document for ``url``.

    Resolution order, first match wins:
      1. a page with exactly this URL
      2. a page whose URL equals ``url`` without its fragment
      3. a chunk with exactly this URL, returned as a Page
    """
    if corpus is None:
        return None

    for page in corpus.pages:
        if page.url == url:
            return page

    canonical = strip_fragment(url)
    for page in corpus.pages:
        if page.url == canonical:
            return page

    for chunk in corpus.chunks:
        if chunk.url == url:
            return chunk.as_page()

    return None
