import pytest

from indexer.models import Page
from pipelines.chunker import MAX_CHUNK_SIZE, chunk_page, chunk_pages, split_sentences

PAGE_URL = "https://docs.socket.dev/docs/guide"


def make_page(content, url=PAGE_URL):
    return Page(url=url, title="Guide", content=content, last_updated="2024-05-01")


def long_content(sentence_count=60):
    return " ".join(
        f"Sentence number {i} explains one more detail of the dependency scanner." for i in range(sentence_count)
    )


def test_short_page_is_single_main_chunk():
    """Test the scenario content under the max size stays whole."""
    content = "API rate limits apply. Configure your API key in the dashboard. See docs for details."
    assert len(content) < MAX_CHUNK_SIZE

    chunks = chunk_page(make_page(content))
    assert len(chunks) == 1
    chunk = chunks[0]
    assert chunk.content == content
    assert chunk.section == "main"
    assert chunk.url == PAGE_URL
    assert chunk.title == "Guide"
    assert chunk.last_updated == "2024-05-01"


def test_content_exactly_at_max_is_single_chunk():
    content = "a" * MAX_CHUNK_SIZE
    chunks = chunk_page(make_page(content))
    assert [c.section for c in chunks] == ["main"]


def test_long_page_is_split_on_sentences():
    """Test chunk sizes, sections and URLs for a multi-chunk page."""
    content = long_content()
    assert len(content) > MAX_CHUNK_SIZE

    chunks = chunk_page(make_page(content))
    assert len(chunks) > 1
    for index, chunk in enumerate(chunks):
        assert chunk.section == f"chunk-{index}"
        assert chunk.url == f"{PAGE_URL}#chunk-{index}"
        assert chunk.base_url == PAGE_URL
        assert len(chunk.content) <= MAX_CHUNK_SIZE
        assert chunk.title == "Guide"


def test_chunks_preserve_every_sentence_in_order():
    """Test that no sentence is dropped, duplicated or split."""
    content = long_content(80) + " Does it handle questions? Yes!! It does."
    chunks = chunk_page(make_page(content))

    rejoined = [s for chunk in chunks for s in split_sentences(chunk.content)]
    assert rejoined == split_sentences(content)


def test_oversized_sentence_is_kept_whole():
    """Test that a single sentence over the limit becomes its own chunk."""
    huge = "x" * (MAX_CHUNK_SIZE + 200)
    content = f"Short opener. {huge}. Short closer."
    chunks = chunk_page(make_page(content))

    assert [c.content for c in chunks] == ["Short opener", huge, "Short closer"]


def test_content_without_punctuation_over_limit():
    content = "word " * 300
    chunks = chunk_page(make_page(content.strip()))
    assert len(chunks) == 1
    assert chunks[0].section == "chunk-0"
    assert chunks[0].url == f"{PAGE_URL}#chunk-0"


def test_chunking_is_deterministic():
    page = make_page(long_content())
    assert chunk_page(page) == chunk_page(page)


@pytest.mark.parametrize("max_size", [100, 250, 500])
def test_custom_max_size(max_size):
    chunks = chunk_page(make_page(long_content(20)), max_chunk_size=max_size)
    assert all(len(c.content) <= max_size for c in chunks)


def test_split_sentences_collapses_punctuation_runs():
    assert split_sentences("One... Two?! Three.  ") == ["One", "Two", "Three"]


def test_chunk_pages_keeps_page_order():
    pages = [make_page("First page content.", url=f"{PAGE_URL}/a"),
             make_page(long_content(), url=f"{PAGE_URL}/b")]
    chunks = chunk_pages(pages)

    assert chunks[0].url == f"{PAGE_URL}/a"
    assert all(c.base_url == f"{PAGE_URL}/b" for c in chunks[1:])
