#!/usr/bin/env python3
"""
Name Search
===========
Filters, sorts and truncates first-name records according to a SearchQuery.

Filters commute and are plain predicates over fields shared by
NameRecord and SearchIndexEntry, so a query that needs no yearly
detail is answered from the search index alone. Trend filters and the
"trending" sort need the previous year's births and load full records.

Usage:
    from prenomkit.search import SearchQuery, search

    results = search(store, SearchQuery(query="lou", sex="F", sort_by="rarity", limit=20))
"""

from collections import defaultdict
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterable, List, Optional, Tuple

from namestore import NameRecord, NameStore, Sex
from prenomkit.settings import get_setting
from prenomkit.phonetics import fold_name, letter_count, syllable_count
from prenomkit.similarity import name_similarity
from prenomkit.trends import recent_growth


class SortKey(Enum):
    """Result orderings"""
    POPULARITY = "popularity"
    ALPHABETICAL = "alphabetical"
    RARITY = "rarity"
    TRENDING = "trending"

    @classmethod
    def coerce(cls, value) -> 'SortKey':
        if isinstance(value, SortKey):
            return value
        if value is None:
            return cls.POPULARITY
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            valid = ', '.join(k.value for k in cls)
            raise ValueError(f"Unknown sort key '{value}'. Available: {valid}") from None


@dataclass
class SearchQuery:
    """
    Declarative search request. Every filter is optional.

    Ranges are inclusive and are not reordered: min > max simply matches
    nothing.
    """
    query: Optional[str] = None
    sex: Optional[Sex] = None
    min_year: Optional[int] = None
    max_year: Optional[int] = None
    min_total: Optional[int] = None
    min_letters: Optional[int] = None
    max_letters: Optional[int] = None
    min_syllables: Optional[int] = None
    max_syllables: Optional[int] = None
    min_recent_births: Optional[int] = None
    min_trend_rate: Optional[float] = None
    max_trend_rate: Optional[float] = None
    sort_by: SortKey = SortKey.POPULARITY
    limit: Optional[int] = None

    def __post_init__(self):
        self.sex = Sex.coerce(self.sex)
        self.sort_by = SortKey.coerce(self.sort_by)

    @property
    def needs_full_records(self) -> bool:
        """Whether yearly series are required (trend filter or trending sort)."""
        return (self.min_trend_rate is not None
                or self.max_trend_rate is not None
                or self.sort_by is SortKey.TRENDING)


# =============================================================================
# Filtering
# =============================================================================

def _predicates(query: SearchQuery) -> List[Callable]:
    checks = []

    if query.query:
        needle = query.query.lower()
        checks.append(lambda item: needle in item.name.lower())

    if query.sex is not None:
        checks.append(lambda item: item.sex is query.sex)

    # Year range overlap: active at some point inside [min_year, max_year]
    if query.min_year is not None:
        checks.append(lambda item: item.last_year is not None and item.last_year >= query.min_year)
    if query.max_year is not None:
        checks.append(lambda item: item.first_year is not None and item.first_year <= query.max_year)

    if query.min_total is not None:
        checks.append(lambda item: item.total_births >= query.min_total)

    if query.min_letters is not None:
        checks.append(lambda item: letter_count(item.name) >= query.min_letters)
    if query.max_letters is not None:
        checks.append(lambda item: letter_count(item.name) <= query.max_letters)

    if query.min_syllables is not None:
        checks.append(lambda item: syllable_count(item.name) >= query.min_syllables)
    if query.max_syllables is not None:
        checks.append(lambda item: syllable_count(item.name) <= query.max_syllables)

    if query.min_recent_births is not None:
        checks.append(lambda item: item.most_recent_count >= query.min_recent_births)

    if query.min_trend_rate is not None:
        checks.append(lambda item: recent_growth(item) >= query.min_trend_rate)
    if query.max_trend_rate is not None:
        checks.append(lambda item: recent_growth(item) <= query.max_trend_rate)

    return checks


def matches(item, query: SearchQuery) -> bool:
    """Whether a record (or index entry) passes every active filter."""
    return all(check(item) for check in _predicates(query))


# =============================================================================
# Sorting
# =============================================================================

def sort_items(items: Iterable, sort_by: SortKey) -> list:
    """
    Order items for display.

    popularity    most births in the latest year first; names with none
                  that year are ranked by their last active year instead
    alphabetical  accent-insensitive, case-insensitive name order
    rarity        fewest (but non-zero) births in the latest year first;
                  names with no births that year are dropped
    trending      highest growth ratio first, then most births
    """
    sort_by = SortKey.coerce(sort_by)
    items = list(items)

    if sort_by is SortKey.ALPHABETICAL:
        return sorted(items, key=lambda item: (fold_name(item.name), item.name))

    if sort_by is SortKey.RARITY:
        nonzero = [item for item in items if item.most_recent_count > 0]
        return sorted(nonzero, key=lambda item: item.most_recent_count)

    if sort_by is SortKey.TRENDING:
        return sorted(items, key=lambda item: (-recent_growth(item), -item.most_recent_count))

    return sorted(items, key=lambda item: (-item.most_recent_count, -item.last_active_count))


def filter_and_sort(items: Iterable, query: SearchQuery) -> list:
    checks = _predicates(query)
    results = [item for item in items if all(check(item) for check in checks)]
    results = sort_items(results, query.sort_by)
    if query.limit is not None:
        results = results[:query.limit]
    return results


def search(store: NameStore, search_query: Optional[SearchQuery] = None, **kwargs) -> list:
    """
    Run a search against the store.

    Returns NameRecords when the query needs yearly detail, otherwise
    SearchIndexEntries; both expose name, sex, total_births,
    most_recent_count, first_year and last_year.

    Filters are given either as a SearchQuery or as SearchQuery keyword
    arguments (search(store, query="lou", sex="F")), not both.
    """
    if search_query is None:
        query = SearchQuery(**kwargs)
    elif kwargs:
        raise TypeError("search() takes a SearchQuery or filter keywords, not both")
    else:
        query = search_query

    if query.needs_full_records:
        items = store.load_all(query.sex)
    else:
        items = store.load_index()

    return filter_and_sort(items, query)


# =============================================================================
# Related names and listings
# =============================================================================

def similar_names(store: NameStore, name: str, sex, limit: Optional[int] = None) -> List[Tuple[NameRecord, float]]:
    """Same-sex names that look most like `name`, with their similarity."""
    if limit is None:
        limit = get_setting("search.similar_limit", 6)
    target = fold_name(name)
    scored = [
        (record, name_similarity(name, record.name))
        for record in store.load_partition(sex)
        if fold_name(record.name) != target
    ]
    scored.sort(key=lambda pair: (-pair[1], -pair[0].most_recent_count))
    return scored[:limit]


def names_with_similar_characteristics(store: NameStore, name: str, sex,
                                       limit: Optional[int] = None) -> List[NameRecord]:
    """Same-sex names with the same syllable count and a letter count within one."""
    if limit is None:
        limit = get_setting("search.similar_limit", 6)
    target = fold_name(name)
    letters = letter_count(name)
    syllables = syllable_count(name)
    results = [
        record for record in store.load_partition(sex)
        if fold_name(record.name) != target
        and syllable_count(record.name) == syllables
        and abs(letter_count(record.name) - letters) <= 1
    ]
    results.sort(key=lambda record: -record.most_recent_count)
    return results[:limit]


def popular_by_year(store: NameStore, year: int, sex=None, limit: Optional[int] = None) -> List[NameRecord]:
    """Names with births in `year`, most births first."""
    if limit is None:
        limit = get_setting("search.popular_limit", 50)
    records = [record for record in store.load_all(sex) if record.births(year) > 0]
    records.sort(key=lambda record: -record.births(year))
    return records[:limit]


def trending_names(store: NameStore, sex=None, limit: Optional[int] = None) -> List[NameRecord]:
    if limit is None:
        limit = get_setting("search.trending_limit", 20)
    return search(store, SearchQuery(sex=sex, sort_by=SortKey.TRENDING, limit=limit))


def dataset_summary(records: Iterable[NameRecord], top: int = 10) -> dict:
    """Totals, year range and most popular names per sex."""
    records = list(records)
    years = [year for record in records for year in record.active_years]

    by_sex = defaultdict(list)
    for record in records:
        by_sex[record.sex].append(record)

    return {
        'total_names': len(records),
        'total_births': sum(record.total_births for record in records),
        'year_range': {
            'min': min(years) if years else None,
            'max': max(years) if years else None,
        },
        'top_names': {
            sex.value: [r.name for r in sort_items(by_sex[sex], SortKey.POPULARITY)[:top]]
            for sex in Sex
        },
    }


__all__ = [
    'SortKey',
    'SearchQuery',
    'matches',
    'sort_items',
    'filter_and_sort',
    'search',
    'similar_names',
    'names_with_similar_characteristics',
    'popular_by_year',
    'trending_names',
    'dataset_summary',
]
