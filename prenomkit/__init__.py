#!/usr/bin/env python3
"""
PrenomKit - French First-Name Analytics & Recommendations
=========================================================

Browse French first-name birth statistics, search them by shape and
trend, and get family-aware name recommendations, optionally enriched
with suggestions from Claude.

Quick Start
-----------
    from prenomkit import PrenomKit

    kit = PrenomKit()

    # Search
    names = kit.search(query="lou", sex="F", sort_by="rarity", limit=20)

    # Details and trend of one name
    info = kit.analyze("Louise", sex="F")

    # Recommendations for a family
    ranked = kit.recommend("Martin", children=["Louis", "Jade"], gender="F")

Modules
-------
    prenomkit.phonetics   - Letter and syllable counts
    prenomkit.similarity  - Name similarity scoring
    prenomkit.db          - Record store and search index
    prenomkit.search      - Filtering, sorting and listings
    prenomkit.trends      - Year-over-year growth
    prenomkit.recommend   - Family-aware scoring
    prenomkit.suggestions - Claude suggestion client
    prenomkit.reconcile   - Merging suggestions with local scores

CLI Usage
---------
    python -m prenomkit search --sex F --sort rarity --limit 20
    python -m prenomkit show Louise --sex F
    python -m prenomkit recommend Martin --child Louis --gender F
"""

__version__ = "0.1.0"
__author__ = "PrenomKit"

import logging
import sys
from pathlib import Path
from typing import List, Optional

# Ensure parent directory is in path for imports
_parent = Path(__file__).parent.parent
if str(_parent) not in sys.path:
    sys.path.insert(0, str(_parent))

# =============================================================================
# Submodule Imports
# =============================================================================

from . import db
from . import config

from .db import (
    Sex,
    NameRecord,
    SearchIndexEntry,
    DataCache,
    NameStore,
    build_index,
    get_namestore,
)
from .config import Config, get_config, load_env
from .phonetics import letter_count, syllable_count, strip_diacritics, fold_name
from .similarity import name_similarity
from .trends import (
    NEW_NAME_RATIO,
    TrendDirection,
    growth_ratio,
    percentage_change,
    trend_direction,
    recent_growth,
    recent_percentage_change,
    recent_direction,
    yearly_trend,
)
from .search import (
    SortKey,
    SearchQuery,
    search,
    similar_names,
    names_with_similar_characteristics,
    popular_by_year,
    trending_names,
    dataset_summary,
)
from .models import (
    PopularityBracket,
    SiblingStyle,
    Child,
    Preferences,
    FamilyContext,
    Compatibility,
    ExternalSuggestion,
    ScoreBreakdown,
    CandidateSource,
    ScoredCandidate,
)
from .recommend import NameRecommender, classify_popularity
from .suggestions import SuggestionClient, SuggestionServiceError, parse_suggestions
from .reconcile import reconcile, recommend_with_suggestions

logger = logging.getLogger(__name__)


# =============================================================================
# PrenomKit Main Class
# =============================================================================

class PrenomKit:
    """
    Main interface for first-name analytics and recommendations.

    Attributes
    ----------
    store : NameStore
        Cached access to the partitioned name data
    config : Config
        Application configuration with API key and data directory

    Examples
    --------
        >>> kit = PrenomKit("public/data")
        >>> for record in kit.trending(sex="M", limit=5):
        ...     print(record.name, record.most_recent_count)

        >>> ranked = kit.recommend("Dupont", children=["Hugo"], gender="F", popularity="rare")
    """

    def __init__(self, data_dir: str = None, reference_year: Optional[int] = None,
                 store: Optional[NameStore] = None):
        """
        Parameters
        ----------
        data_dir : str, optional
            Directory holding manifest.json, search_index.json and the
            partition files. Defaults to PRENOMKIT_DATA_DIR or app.yaml.
        reference_year : int, optional
            Latest year of the dataset. Defaults to app.yaml.
        """
        self._config = get_config()
        if store is None:
            store = NameStore(data_dir or self._config.data_dir, reference_year=reference_year)
        self._store = store
        self._recommender = NameRecommender(self._store)
        self._suggester = None

    # -------------------------------------------------------------------------
    # Properties
    # -------------------------------------------------------------------------

    @property
    def store(self) -> NameStore:
        return self._store

    @property
    def config(self) -> Config:
        return self._config

    @property
    def recommender(self) -> NameRecommender:
        return self._recommender

    @property
    def suggester(self) -> Optional[SuggestionClient]:
        """Claude suggestion client, or None without an API key."""
        if self._suggester is None and self._config.has_anthropic:
            self._suggester = SuggestionClient(api_key=self._config.anthropic_api_key)
        return self._suggester

    # -------------------------------------------------------------------------
    # Lookups
    # -------------------------------------------------------------------------

    def get(self, name: str, sex) -> Optional[NameRecord]:
        return self._store.get_record(name, sex)

    def find(self, name: str, sex=None) -> Optional[NameRecord]:
        """
        Case- and accent-insensitive lookup.

        Without a sex, the record with more births wins when the name is
        given to both boys and girls.
        """
        sex = Sex.coerce(sex)
        target = fold_name(name)
        matches = [r for r in self._store.load_all(sex) if fold_name(r.name) == target]
        if not matches:
            return None
        exact = [r for r in matches if r.name == name.strip()]
        return max(exact or matches, key=lambda r: r.total_births)

    def analyze(self, name: str, sex=None) -> dict:
        """Orthographic metrics of a name plus its statistics when it is in the dataset."""
        analysis = {
            'name': name,
            'letters': letter_count(name),
            'syllables': syllable_count(name),
        }
        record = self.find(name, sex)
        analysis['found'] = record is not None
        if record is None:
            return analysis

        analysis.update({
            'name': record.name,
            'sex': record.sex.value,
            'total_births': record.total_births,
            'latest_births': record.most_recent_count,
            'popularity': classify_popularity(record.most_recent_count),
            'first_year': record.first_year,
            'last_year': record.last_year,
            'peak_year': record.peak_year,
            'peak_births': record.peak_births,
            'growth_ratio': round(recent_growth(record), 4),
            'percentage_change': recent_percentage_change(record),
            'direction': recent_direction(record).value,
            'five_year_trend': yearly_trend(record, window=5),
        })
        return analysis

    # -------------------------------------------------------------------------
    # Search & listings
    # -------------------------------------------------------------------------

    def search(self, search_query: SearchQuery = None, **kwargs) -> list:
        """See prenomkit.search.SearchQuery for the available filters."""
        return search(self._store, search_query, **kwargs)

    def similar(self, name: str, sex, limit: int = None) -> list:
        return similar_names(self._store, name, sex, limit)

    def similar_characteristics(self, name: str, sex, limit: int = None) -> List[NameRecord]:
        return names_with_similar_characteristics(self._store, name, sex, limit)

    def popular(self, year: int = None, sex=None, limit: int = None) -> List[NameRecord]:
        if year is None:
            year = self._store.reference_year
        return popular_by_year(self._store, year, sex, limit)

    def trending(self, sex=None, limit: int = None) -> List[NameRecord]:
        return trending_names(self._store, sex, limit)

    def summary(self, top: int = 10) -> dict:
        return dataset_summary(self._store.load_all(), top=top)

    # -------------------------------------------------------------------------
    # Recommendations
    # -------------------------------------------------------------------------

    def recommend(self,
                  last_name: str,
                  children: list = None,
                  gender=None,
                  popularity=None,
                  max_letters: int = None,
                  meaning_weight: str = "medium",
                  style=None,
                  use_ai: bool = False,
                  sort_by_confidence: bool = False) -> List[ScoredCandidate]:
        """
        Rank names for a family.

        Parameters
        ----------
        last_name : str
            Family name
        children : list, optional
            Existing children, as names, Child objects or {"name", "sex"} dicts
        gender : str, optional
            "M", "F" or None for either
        popularity : str, optional
            rare, uncommon, moderate, popular or any
        use_ai : bool
            Merge in Claude suggestions (needs ANTHROPIC_API_KEY); any
            failure falls back to local recommendations

        Returns
        -------
        list of ScoredCandidate, best first (at most 12)
        """
        kids = []
        for child in children or []:
            kids.append(Child(child) if isinstance(child, str) else child)

        context = FamilyContext(
            last_name=last_name,
            existing_children=kids,
            preferences=Preferences(
                gender=gender,
                popularity=popularity,
                max_letters=max_letters,
                meaning_weight=meaning_weight,
                style=style,
            ),
        )

        suggester = None
        if use_ai:
            suggester = self.suggester
            if suggester is None:
                logger.warning("ANTHROPIC_API_KEY not configured, using local recommendations only")

        return recommend_with_suggestions(
            self._recommender, context, suggester, sort_by_confidence=sort_by_confidence,
        )


# =============================================================================
# Public API
# =============================================================================

__all__ = [
    # Version
    '__version__',

    # Main class
    'PrenomKit',

    # Store
    'Sex',
    'NameRecord',
    'SearchIndexEntry',
    'DataCache',
    'NameStore',
    'build_index',
    'get_namestore',

    # Config
    'Config',
    'get_config',
    'load_env',

    # Analysis
    'letter_count',
    'syllable_count',
    'strip_diacritics',
    'fold_name',
    'name_similarity',

    # Trends
    'NEW_NAME_RATIO',
    'TrendDirection',
    'growth_ratio',
    'percentage_change',
    'trend_direction',
    'recent_growth',
    'recent_percentage_change',
    'recent_direction',
    'yearly_trend',

    # Search
    'SortKey',
    'SearchQuery',
    'search',
    'similar_names',
    'names_with_similar_characteristics',
    'popular_by_year',
    'trending_names',
    'dataset_summary',

    # Recommendations
    'PopularityBracket',
    'SiblingStyle',
    'Child',
    'Preferences',
    'FamilyContext',
    'Compatibility',
    'ExternalSuggestion',
    'ScoreBreakdown',
    'CandidateSource',
    'ScoredCandidate',
    'NameRecommender',
    'classify_popularity',
    'SuggestionClient',
    'SuggestionServiceError',
    'parse_suggestions',
    'reconcile',
    'recommend_with_suggestions',
]
