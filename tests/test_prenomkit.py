"""
Tests for PrenomKit Main Class
==============================
Tests for the PrenomKit facade: lookups, analysis, listings and
recommendations with and without external suggestions.
"""

import pytest

from prenomkit import (
    CandidateSource,
    Compatibility,
    ExternalSuggestion,
    PrenomKit,
    Sex,
    SuggestionServiceError,
)


class FakeSuggester:
    def __init__(self, names=(), error=None):
        self.names = names
        self.error = error

    def suggest(self, context):
        if self.error:
            raise self.error
        return [
            ExternalSuggestion(n, "fits the family", 0.9, Compatibility(0.8, 0.8, 0.8))
            for n in self.names
        ]


@pytest.fixture
def kit(data_dir, monkeypatch):
    monkeypatch.setenv("ANTHROPIC_API_KEY", "")
    monkeypatch.setattr("prenomkit.config.load_env", lambda env_path=None: {})
    return PrenomKit(data_dir=str(data_dir), reference_year=2024)


def names(items):
    return [item.name for item in items]


class TestPrenomKitInit:
    """Tests for PrenomKit initialization."""

    def test_init(self, kit):
        assert kit.store.reference_year == 2024
        assert kit.recommender.store is kit.store

    def test_no_suggester_without_key(self, kit):
        assert not kit.config.has_anthropic
        assert kit.suggester is None


class TestLookups:
    """Tests for find, get and analyze."""

    def test_find_folds_case_and_accents(self, kit):
        assert kit.find("lea").name == "Léa"
        assert kit.find("  RAPHAEL ").name == "Raphaël"
        assert kit.find("Zéphyrine") is None

    def test_find_with_sex(self, kit):
        assert kit.find("Emma", sex="M") is None
        assert kit.find("Emma", sex="F").sex is Sex.FEMALE

    def test_get(self, kit):
        assert kit.get("Milo", "M").most_recent_count == 1550

    def test_analyze_known(self, kit):
        info = kit.analyze("Milo")
        assert info["found"]
        assert info["letters"] == 4
        assert info["syllables"] == 2
        assert info["direction"] == "rising"
        assert info["popularity"] == "Popular"
        assert info["total_births"] == 2850

    def test_analyze_unknown(self, kit):
        info = kit.analyze("Zéphyrine")
        assert info == {"name": "Zéphyrine", "letters": 9, "syllables": 3, "found": False}


class TestListings:
    """Tests for facade listings."""

    def test_search(self, kit):
        assert names(kit.search(sex="F", sort_by="rarity", limit=2)) == ["Léa", "Eloise"]

    def test_popular_defaults_to_latest_year(self, kit):
        assert names(kit.popular(sex="M", limit=2)) == ["Gabriel", "Raphaël"]

    def test_trending(self, kit):
        assert names(kit.trending(sex="M", limit=1)) == ["Kylian"]

    def test_summary(self, kit):
        assert kit.summary()["total_names"] == 13


class TestRecommend:
    """Tests for PrenomKit.recommend()."""

    def test_local_only(self, kit):
        ranked = kit.recommend("Martin", gender="F")
        assert names(ranked) == ["Eloise", "Léa", "Louise", "Emma", "Jade"]

    def test_children_as_strings_and_dicts(self, kit):
        ranked = kit.recommend("Martin", children=["emma", {"name": "Jade", "sex": "F"}], gender="F")
        assert "Emma" not in names(ranked)
        assert "Jade" not in names(ranked)

    def test_use_ai_without_key_falls_back(self, kit):
        assert names(kit.recommend("Martin", gender="F", use_ai=True)) == names(kit.recommend("Martin", gender="F"))

    def test_use_ai_merges_suggestions(self, kit):
        kit._suggester = FakeSuggester(["Éloïse", "Zéphyrine"])
        ranked = kit.recommend("Martin", gender="F", use_ai=True)
        assert names(ranked)[:2] == ["Eloise", "Zéphyrine"]
        assert ranked[0].source is CandidateSource.BOTH
        assert ranked[1].is_placeholder

    def test_use_ai_failure_falls_back(self, kit):
        kit._suggester = FakeSuggester(error=SuggestionServiceError("quota"))
        ranked = kit.recommend("Martin", gender="F", use_ai=True)
        assert all(c.source is CandidateSource.LOCAL for c in ranked)

    def test_invalid_preference(self, kit):
        with pytest.raises(ValueError):
            kit.recommend("Martin", popularity="famous")


class TestSearchKeywords:
    """Tests for keyword searches through the facade."""

    def test_free_text_query(self, kit):
        assert names(kit.search(query="lou", sex="F", sort_by="rarity", limit=20)) == ["Louise"]

    def test_query_object(self, kit):
        from prenomkit import SearchQuery
        assert names(kit.search(SearchQuery(query="LOU"))) == ["Louise"]
