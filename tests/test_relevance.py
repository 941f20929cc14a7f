import pytest

from indexer.models import Chunk, Corpus
from indexer.relevance import (
    DEFAULT_BOOST_RULES,
    BoostRule,
    build_boost_rules,
    score_chunk,
    search,
)


def make_chunk(title, content, url="https://docs.socket.dev/docs/x"):
    return Chunk(url=url, title=title, content=content, last_updated="2024-05-01")


class TestScoring:
    def test_additive_composition(self):
        """Test token, phrase and topic boosts add up independently."""
        chunk = make_chunk("API Keys", "Configure your key in the dashboard.")
        # token "api" in title +10, token "config" in content +5,
        # api boost +20, config boost +20
        assert score_chunk(chunk, "api config") == 55

    def test_phrase_matches(self):
        chunk = make_chunk("Organization settings", "Manage organization settings from the dashboard.")
        # phrase in title +100, phrase in content +50,
        # "organization" and "settings" each +10 title and +5 content
        assert score_chunk(chunk, "organization settings") == 100 + 50 + 15 + 15

    def test_short_tokens_are_ignored(self):
        chunk = make_chunk("Go", "Use it in CI.")
        assert score_chunk(chunk, "is go ci") == 0

    def test_scoring_is_case_insensitive_on_chunk(self):
        chunk = make_chunk("SBOM EXPORT", "nothing")
        assert score_chunk(chunk, "sbom") == 100 + 10

    def test_github_examples_boost(self):
        chunk = make_chunk("socket-sdk-python", "See https://github.com/SocketDev/socket-sdk-python for details.")
        without = score_chunk(chunk, "install steps", boosts=())
        with_boost = score_chunk(chunk, "install steps")
        assert with_boost - without == 15

    def test_no_boosts_without_query_mention(self):
        chunk = make_chunk("API reference", "The API returns JSON.")
        assert score_chunk(chunk, "json") == score_chunk(chunk, "json", boosts=())


class TestSearch:
    def test_installation_query_without_matches_is_empty(self, sample_corpus):
        """Test the scenario: no chunk contains the query and no boost fires."""
        assert search(sample_corpus, "installation") == []

    def test_results_are_ranked_and_capped(self, sample_corpus):
        results = search(sample_corpus, "api key", limit=5)

        assert results[0].url == "https://docs.socket.dev/docs/api-keys"
        scores = [score_chunk(chunk, "api key") for chunk in results]
        assert scores == sorted(scores, reverse=True)
        assert all(score > 0 for score in scores)

    def test_limit_truncates(self, sample_corpus):
        assert len(search(sample_corpus, "socket", limit=1)) == 1
        assert search(sample_corpus, "socket", limit=0) == []

    def test_ties_keep_corpus_order(self):
        chunks = [make_chunk("Same", "scanner text", url=f"https://docs.socket.dev/docs/{i}") for i in range(4)]
        results = search(Corpus(chunks=chunks), "scanner")
        assert [c.url for c in results] == [c.url for c in chunks]

    def test_zero_scores_are_excluded(self, sample_corpus):
        results = search(sample_corpus, "npm")
        assert [c.url for c in results] == ["https://docs.socket.dev/docs/cli#chunk-0"]

    def test_search_is_idempotent(self, sample_corpus):
        assert search(sample_corpus, "socket config") == search(sample_corpus, "socket config")

    @pytest.mark.parametrize("corpus", [None, Corpus.empty()])
    def test_empty_corpus(self, corpus):
        assert search(corpus, "api") == []

    def test_results_do_not_expose_scores(self, sample_corpus):
        for chunk in search(sample_corpus, "api"):
            assert isinstance(chunk, Chunk)
            assert not hasattr(chunk, "score")


class TestBoostRules:
    def test_default_table(self):
        assert {rule.name: rule.weight for rule in DEFAULT_BOOST_RULES} == {
            "api": 20, "config": 20, "sdk": 30, "python": 25, "github-examples": 15,
        }

    def test_build_from_config(self):
        rules = build_boost_rules([
            {"name": "cli", "weight": 40},
            {"name": "policy", "query_terms": ["policy", "rules"], "content_terms": ["policy"], "weight": 12},
        ])
        assert rules[0] == BoostRule("cli", ("cli",), ("cli",), ("cli",), 40)
        assert rules[1].title_terms == ("policy", "rules")
        assert rules[1].content_terms == ("policy",)

    def test_none_keeps_defaults(self):
        assert build_boost_rules(None) is DEFAULT_BOOST_RULES

    @pytest.mark.parametrize("entry", [{"weight": 5}, {"name": "x", "weight": 0}, {"name": "x", "query_terms": []}])
    def test_invalid_rules_rejected(self, entry):
        with pytest.raises(ValueError):
            BoostRule.from_dict(entry)

    def test_configured_boost_changes_ranking(self):
        chunks = [make_chunk("Alerts", "alert types", url="https://docs.socket.dev/docs/a"),
                  make_chunk("Alerts", "alert types for the cli", url="https://docs.socket.dev/docs/b")]
        corpus = Corpus(chunks=chunks)
        boosts = build_boost_rules([{"name": "cli", "query_terms": ["alert"], "content_terms": ["cli"],
                                     "title_terms": [], "weight": 100}])

        assert search(corpus, "alert", boosts=())[0].url.endswith("/a")
        assert search(corpus, "alert", boosts=boosts)[0].url.endswith("/b")
