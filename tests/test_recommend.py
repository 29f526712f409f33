"""
Tests for Recommendation Scoring
================================
Tests for the sub-scores and NameRecommender in prenomkit/recommend.py.
"""

import pytest

from namestore import NameRecord, Sex
from prenomkit.models import (
    CandidateSource,
    Child,
    FamilyContext,
    PopularityBracket,
    Preferences,
    SiblingStyle,
)
from prenomkit.recommend import (
    NameRecommender,
    classify_popularity,
    last_name_compatibility,
    popularity_match,
    sibling_compatibility,
    trend_appeal,
)


def names(candidates):
    return [c.name for c in candidates]


class TestLastNameCompatibility:
    """Tests for first name / family name fit."""

    def test_favorable_alliteration(self):
        assert last_name_compatibility("Lucas", "Lefebvre") == pytest.approx(1.0)

    def test_unfavorable_alliteration(self):
        assert last_name_compatibility("Hugo", "Hernandez") == pytest.approx(0.79)

    def test_vowel_alliteration_with_hiatus(self):
        assert last_name_compatibility("Emma", "Eiffel") == pytest.approx(0.61)

    def test_hiatus_penalty(self):
        assert last_name_compatibility("Léa", "Aubert") == pytest.approx(0.67)
        assert last_name_compatibility("Léa", "Martin") == pytest.approx(0.91)

    def test_short_combination(self):
        assert last_name_compatibility("Al", "Ng") == pytest.approx(0.59)

    def test_accents_do_not_matter(self):
        assert last_name_compatibility("Élise", "Martin") == last_name_compatibility("Elise", "Martin")


class TestSiblingCompatibility:
    """Tests for sibling name fit."""

    def test_no_siblings_is_neutral(self):
        assert sibling_compatibility("Emma", []) == 0.5

    def test_any_style(self):
        assert sibling_compatibility("Emma", ["Louis"]) == pytest.approx(0.72)

    def test_near_duplicate_is_penalized(self):
        assert sibling_compatibility("Natan", ["Nathan"]) == pytest.approx(0.4167, abs=1e-3)

    def test_styles(self):
        similar = sibling_compatibility("Lucas", ["Louis"], SiblingStyle.SIMILAR)
        complementary = sibling_compatibility("Lucas", ["Louis"], "complementary")
        assert similar == pytest.approx(0.8)
        assert complementary == pytest.approx(0.45)

    def test_averages_over_siblings(self):
        both = sibling_compatibility("Emma", ["Louis", "Nathan"])
        one = sibling_compatibility("Emma", ["Louis"])
        other = sibling_compatibility("Emma", ["Nathan"])
        assert both == pytest.approx((one + other) / 2)


class TestPopularityMatch:
    """Tests for popularity bracket credit."""

    @pytest.mark.parametrize("count,bracket,expected", [
        (40, "rare", 1.0),
        (50, "rare", 1.0),
        (80, "rare", 0.6),
        (500, "rare", 0.2),
        (51, "uncommon", 1.0),
        (30, "uncommon", 0.6),
        (300, "uncommon", 0.6),
        (500, "moderate", 1.0),
        (1000, "popular", 1.0),
        (500, "popular", 0.6),
        (10, "popular", 0.2),
    ])
    def test_brackets(self, count, bracket, expected):
        assert popularity_match(count, bracket) == expected

    def test_any_is_neutral(self):
        assert popularity_match(12345, PopularityBracket.ANY) == 0.5

    def test_unknown_bracket(self):
        with pytest.raises(ValueError):
            popularity_match(10, "famous")

    @pytest.mark.parametrize("count,label", [
        (0, "Rare"), (50, "Rare"), (51, "Uncommon"), (200, "Uncommon"),
        (800, "Moderate"), (801, "Popular"),
    ])
    def test_classify_popularity(self, count, label):
        assert classify_popularity(count) == label


class TestTrendAppeal:
    """Tests for the trend sub-score."""

    def test_capped_ratio(self):
        milo = NameRecord("Milo", Sex.MALE, {2023: 1300, 2024: 1550}, reference_year=2024)
        assert trend_appeal(milo) == pytest.approx(0.5962, abs=1e-4)
        boom = NameRecord("Boom", Sex.MALE, {2023: 1000, 2024: 5000}, reference_year=2024)
        assert trend_appeal(boom) == 1.0

    def test_no_baseline_is_neutral(self):
        kylian = NameRecord("Kylian", Sex.MALE, {2024: 60}, reference_year=2024)
        assert trend_appeal(kylian) == 0.5


class TestFamilyContext:
    """Tests for request validation."""

    def test_children_from_dicts(self):
        context = FamilyContext("Martin", [{"name": "Louis", "sex": "M"}, {"name": " "}])
        assert context.existing_children == [Child("Louis", Sex.MALE)]

    def test_preferences_coercion(self):
        prefs = Preferences(gender="f", popularity="RARE", style="similar")
        assert prefs.gender is Sex.FEMALE
        assert prefs.popularity is PopularityBracket.RARE
        assert prefs.style is SiblingStyle.SIMILAR

    def test_invalid_preferences(self):
        with pytest.raises(ValueError):
            Preferences(popularity="famous")
        with pytest.raises(ValueError):
            Preferences(gender="X")


class TestNameRecommender:
    """Tests for ranking."""

    def test_ranking_for_girls(self, store):
        context = FamilyContext("Martin", preferences=Preferences(gender="F"))
        ranked = NameRecommender(store).recommend(context)
        assert names(ranked) == ["Eloise", "Léa", "Louise", "Emma", "Jade"]
        assert ranked[0].score == pytest.approx(0.6525, abs=1e-4)
        assert all(c.source is CandidateSource.LOCAL for c in ranked)
        assert all(not c.is_externally_sourced and c.insight is None for c in ranked)

    def test_breakdown(self, store):
        context = FamilyContext("Martin", preferences=Preferences(gender="F"))
        top = NameRecommender(store).recommend(context)[0]
        assert top.breakdown.last_name == pytest.approx(0.91)
        assert top.breakdown.siblings == 0.5
        assert top.breakdown.popularity == 0.5
        assert top.breakdown.trend == pytest.approx(0.75)
        assert top.breakdown.total == top.score

    def test_rare_preference(self, store):
        context = FamilyContext("Martin", preferences=Preferences(gender="F", popularity="rare"))
        ranked = NameRecommender(store).recommend(context)
        assert ranked[0].name == "Léa"
        assert ranked[0].score == pytest.approx(0.7608, abs=1e-4)

    def test_excludes_existing_children_case_insensitively(self, store):
        context = FamilyContext("Martin", [Child("emma"), Child("LOUISE")], Preferences(gender="F"))
        result = names(NameRecommender(store).recommend(context))
        assert "Emma" not in result
        assert "Louise" not in result

    def test_excludes_existing_children_ignoring_accents(self, store):
        context = FamilyContext("Martin", [Child("Éloïse"), Child("LEA")], Preferences(gender="F"))
        result = names(NameRecommender(store).recommend(context))
        assert "Eloise" not in result
        assert "Léa" not in result

    def test_excludes_names_without_recent_births(self, store):
        context = FamilyContext("Martin")
        result = names(NameRecommender(store).recommend(context))
        for gone in ("Ophélie", "Gaston", "Thierry"):
            assert gone not in result

    def test_max_letters(self, store):
        context = FamilyContext("Martin", preferences=Preferences(gender="F", max_letters=4))
        assert set(names(NameRecommender(store).recommend(context))) == {"Emma", "Léa", "Jade"}

    def test_both_sexes_when_no_gender(self, store):
        ranked = NameRecommender(store).recommend(FamilyContext("Dupont"))
        assert {c.record.sex for c in ranked} == {Sex.MALE, Sex.FEMALE}
        assert len(ranked) == 10

    def test_output_bounds(self, store):
        context = FamilyContext("Bernard", [Child("Nathan", "M")], Preferences(popularity="popular"))
        ranked = NameRecommender(store).recommend(context)
        assert len(ranked) <= 12
        assert all(0.0 <= c.score <= 1.0 for c in ranked)
        scores = [c.score for c in ranked]
        assert scores == sorted(scores, reverse=True)

    def test_top_n(self, store):
        recommender = NameRecommender(store, top_n=3)
        assert len(recommender.recommend(FamilyContext("Dupont"))) == 3
        assert len(recommender.recommend(FamilyContext("Dupont"), top_n=1)) == 1

    def test_empty_store(self, tmp_path):
        from namestore import NameStore
        empty = NameStore(str(tmp_path / "nothing"), reference_year=2024)
        assert NameRecommender(empty).recommend(FamilyContext("Martin")) == []
