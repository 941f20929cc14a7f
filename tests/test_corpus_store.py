import json

import pytest

from indexer.corpus_store import load_corpus, save_corpus
from indexer.models import Corpus


def test_save_and_load_preserves_format(tmp_path, sample_corpus):
    """Test the on-disk keys and that a saved corpus loads back unchanged."""
    path = tmp_path / "nested" / "socket-docs.json"
    save_corpus(sample_corpus, path)

    data = json.loads(path.read_text(encoding="utf-8"))
    assert set(data) == {"pages", "chunks", "metadata"}
    assert data["pages"][0] == {
        "url": "https://docs.socket.dev/docs/api-keys",
        "title": "API Keys",
        "content": "Create an API key in the dashboard. Keys are scoped to an organization.",
        "lastUpdated": "2024-05-01",
    }
    assert data["chunks"][2]["section"] == "chunk-0"
    assert data["metadata"]["totalChunks"] == 4
    assert data["metadata"]["lastScraped"] == "2024-05-03"

    assert load_corpus(path) == sample_corpus


def test_save_leaves_no_temp_files(tmp_path, sample_corpus):
    path = tmp_path / "socket-docs.json"
    save_corpus(sample_corpus, path)
    save_corpus(Corpus.empty(), path)

    assert [p.name for p in tmp_path.iterdir()] == ["socket-docs.json"]
    assert load_corpus(path).is_empty


def test_missing_file_is_empty_corpus(tmp_path):
    assert load_corpus(tmp_path / "missing.json").is_empty


@pytest.mark.parametrize("raw", ["{not json", "[1, 2, 3]", "null", ""])
def test_malformed_file_is_empty_corpus(tmp_path, raw):
    path = tmp_path / "socket-docs.json"
    path.write_text(raw, encoding="utf-8")
    assert load_corpus(path).is_empty


def test_malformed_records_are_skipped(tmp_path):
    """Test tolerant loading of partially broken corpora."""
    path = tmp_path / "socket-docs.json"
    path.write_text(json.dumps({
        "pages": [{"url": "https://docs.socket.dev/docs/a", "title": "A", "content": "text",
                   "lastUpdated": "2024-05-01"}, "junk", {"title": "no url"}],
        "chunks": "not a list",
        "metadata": {"totalPages": 1, "unknownKey": True},
    }), encoding="utf-8")

    corpus = load_corpus(path)
    assert [p.url for p in corpus.pages] == ["https://docs.socket.dev/docs/a"]
    assert corpus.chunks == []
    assert corpus.metadata.total_pages == 1


def test_legacy_corpus_without_failed_counter(tmp_path):
    path = tmp_path / "socket-docs.json"
    path.write_text(json.dumps({"pages": [], "chunks": [], "metadata": {
        "lastScraped": "2024-01-01", "totalPages": 0, "totalChunks": 0,
        "sitemapUrlsFound": 10, "validUrlsAttempted": 8, "successfulScrapes": 0,
    }}), encoding="utf-8")

    meta = load_corpus(path).metadata
    assert meta.sitemap_urls_found == 10
    assert meta.failed_fetches == 0


@pytest.mark.parametrize("bad_field", [
    {"content": 123},
    {"title": ["API"]},
    {"lastUpdated": 20240501},
    {"section": {"name": "main"}},
])
def test_records_with_non_text_fields_are_skipped(tmp_path, bad_field):
    good = {"url": "https://docs.socket.dev/docs/a", "title": "API", "content": "api text",
            "lastUpdated": "2024-05-01", "section": "main"}
    bad = dict(good, url="https://docs.socket.dev/docs/b", **bad_field)
    path = tmp_path / "socket-docs.json"
    path.write_text(json.dumps({"pages": [good, bad], "chunks": [bad, good]}), encoding="utf-8")

    corpus = load_corpus(path)
    assert [p.url for p in corpus.pages] == ["https://docs.socket.dev/docs/a"]
    assert [c.url for c in corpus.chunks] == ["https://docs.socket.dev/docs/a"]
