import os
import sys

import pytest

# Add the parent directory to the path so the top-level packages import
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from config.settings import DocsConfig
from indexer.models import Chunk, Corpus, CorpusMetadata, Page

BASE_URL = "https://docs.socket.dev"


@pytest.fixture
def docs_config(tmp_path):
    """Configuration with no request delay and a temporary corpus path."""
    return DocsConfig(
        base_url=BASE_URL,
        allowed_url_prefixes=[BASE_URL, "https://github.com"],
        corpus_path=tmp_path / "socket-docs.json",
        request_delay=0,
    )


@pytest.fixture
def sample_corpus():
    """Small corpus: two single-chunk pages and one page split into two chunks."""
    pages = [
        Page(
            url=f"{BASE_URL}/docs/api-keys",
            title="API Keys",
            content="Create an API key in the dashboard. Keys are scoped to an organization.",
            last_updated="2024-05-01",
        ),
        Page(
            url=f"{BASE_URL}/docs/socket-yml",
            title="socket.yml Configuration",
            content="Configure Socket for your repository with a socket.yml file at the root.",
            last_updated="2024-05-02",
        ),
        Page(
            url=f"{BASE_URL}/docs/cli",
            title="Socket CLI",
            content="Install the CLI with npm. Run socket scan to check dependencies.",
            last_updated="2024-05-03",
        ),
    ]
    chunks = [
        Chunk(url=pages[0].url, title=pages[0].title, content=pages[0].content,
              last_updated=pages[0].last_updated, section="main"),
        Chunk(url=pages[1].url, title=pages[1].title, content=pages[1].content,
              last_updated=pages[1].last_updated, section="main"),
        Chunk(url=f"{pages[2].url}#chunk-0", title=pages[2].title,
              content="Install the CLI with npm", last_updated=pages[2].last_updated,
              section="chunk-0"),
        Chunk(url=f"{pages[2].url}#chunk-1", title=pages[2].title,
              content="Run socket scan to check dependencies", last_updated=pages[2].last_updated,
              section="chunk-1"),
    ]
    metadata = CorpusMetadata(last_scraped="2024-05-03", total_pages=3, total_chunks=4)
    return Corpus(pages=pages, chunks=chunks, metadata=metadata)
