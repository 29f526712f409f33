#!/usr/bin/env python3
"""
First-Name Record Store
=======================
In-memory access to the French first-name birth statistics:
- Gender-partitioned record files, whole or in fixed-size chunks
- A lightweight search index for queries that do not need yearly detail
- A manifest listing chunk counts

Every fetched resource is cached for the lifetime of the store. A missing
or malformed resource is logged and read as empty, so callers see
"no data" the same way they see "no match".

Storage layout (produced by the offline CSV ingestion):
    manifest.json
    search_index.json
    boys_names.json, girls_names.json
    boys_chunk_0.json, boys_chunk_1.json, ...
"""

import json
import logging
import os
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from settings import get_setting, require_setting, resolve_path

logger = logging.getLogger(__name__)


class Sex(Enum):
    """Sex as recorded in the birth statistics"""
    MALE = "M"
    FEMALE = "F"

    @classmethod
    def coerce(cls, value) -> Optional['Sex']:
        """
        Parse a sex filter.

        None, "any" and "all" mean no filter and return None.
        """
        if value is None or isinstance(value, Sex):
            return value
        text = str(value).strip()
        if text.lower() in ('', 'any', 'all'):
            return None
        try:
            return cls(text.upper())
        except ValueError:
            raise ValueError(f"Invalid sex '{value}'. Use M, F or any") from None


@dataclass(frozen=True)
class SearchIndexEntry:
    """Lightweight projection of a NameRecord used for quick searches"""
    name: str
    sex: Sex
    total_births: int
    most_recent_count: int
    last_active_count: int
    first_year: Optional[int]
    last_year: Optional[int]

    @property
    def key(self) -> tuple:
        return (self.name, self.sex)

    @staticmethod
    def is_legacy(data: dict) -> bool:
        """Whether an index item lacks the explicit reference-year count."""
        return 'recentCount' not in data

    @classmethod
    def from_dict(cls, data: dict, reference_year: Optional[int] = None) -> 'SearchIndexEntry':
        """
        Build an entry from its JSON form.

        Legacy items only carry "recent", the births of the latest or the
        previous year, whichever is non-zero. It counts as reference-year
        births only when the name was last given in the reference year.
        """
        last_year = data.get('lastYear')
        if cls.is_legacy(data):
            fallback = int(data.get('recent') or 0)
            in_reference_year = reference_year is None or last_year == reference_year
            most_recent = fallback if in_reference_year else 0
            last_active = int(data.get('lastActive', fallback) or 0)
        else:
            most_recent = int(data['recentCount'] or 0)
            last_active = int(data.get('lastActive', most_recent) or 0)

        return cls(
            name=data['name'],
            sex=Sex(data['sex']),
            total_births=int(data.get('totalCount') or 0),
            most_recent_count=most_recent,
            last_active_count=last_active,
            first_year=data.get('firstYear'),
            last_year=last_year,
        )

    def to_dict(self) -> dict:
        return {
            'name': self.name,
            'sex': self.sex.value,
            'totalCount': self.total_births,
            'recentCount': self.most_recent_count,
            'lastActive': self.last_active_count,
            'firstYear': self.first_year,
            'lastYear': self.last_year,
        }


@dataclass(frozen=True)
class NameRecord:
    """
    Yearly birth counts for one (name, sex) pair.

    Years are sparse: a missing year means zero births. Totals, first/last
    and peak years are derived from the series on demand.
    """
    name: str
    sex: Sex
    yearly_births: Dict[int, int] = field(default_factory=dict, hash=False)
    # Latest year of the dataset; "most recent" counts are read at this year
    reference_year: Optional[int] = field(default=None, compare=False, hash=False)

    @property
    def key(self) -> tuple:
        return (self.name, self.sex)

    def births(self, year: int) -> int:
        return self.yearly_births.get(year, 0)

    @property
    def active_years(self) -> List[int]:
        """Years with at least one birth, ascending."""
        return sorted(year for year, count in self.yearly_births.items() if count > 0)

    @property
    def total_births(self) -> int:
        return sum(self.yearly_births.values())

    @property
    def first_year(self) -> Optional[int]:
        years = self.active_years
        return years[0] if years else None

    @property
    def last_year(self) -> Optional[int]:
        years = self.active_years
        return years[-1] if years else None

    @property
    def peak_year(self) -> Optional[int]:
        """Year with the most births (earliest one on ties)."""
        years = self.active_years
        if not years:
            return None
        return max(years, key=lambda year: (self.yearly_births[year], -year))

    @property
    def peak_births(self) -> int:
        peak = self.peak_year
        return self.births(peak) if peak is not None else 0

    @property
    def current_year(self) -> Optional[int]:
        if self.reference_year is not None:
            return self.reference_year
        return max(self.yearly_births) if self.yearly_births else None

    @property
    def most_recent_count(self) -> int:
        """Births in the dataset's latest year."""
        year = self.current_year
        return self.births(year) if year is not None else 0

    @property
    def last_active_count(self) -> int:
        """Births in the latest year with births, up to the dataset's latest year."""
        limit = self.current_year
        years = [y for y in self.active_years if limit is None or y <= limit]
        return self.births(years[-1]) if years else 0

    def to_index_entry(self) -> SearchIndexEntry:
        return SearchIndexEntry(
            name=self.name,
            sex=self.sex,
            total_births=self.total_births,
            most_recent_count=self.most_recent_count,
            last_active_count=self.last_active_count,
            first_year=self.first_year,
            last_year=self.last_year,
        )

    @classmethod
    def from_dict(cls, data: dict, reference_year: Optional[int] = None) -> 'NameRecord':
        """
        Build a record from its JSON form.

        Stored totals and year bounds are ignored and re-derived from
        yearlyData; negative counts are read as zero.
        """
        yearly = {
            int(year): max(0, int(count or 0))
            for year, count in (data.get('yearlyData') or {}).items()
        }
        return cls(
            name=data['name'],
            sex=Sex(data['sex']),
            yearly_births=yearly,
            reference_year=reference_year,
        )

    def to_dict(self) -> dict:
        return {
            'name': self.name,
            'sex': self.sex.value,
            'totalCount': self.total_births,
            'firstYear': self.first_year,
            'lastYear': self.last_year,
            'peakYear': self.peak_year,
            'peakBirths': self.peak_births,
            'yearlyData': {str(year): count for year, count in sorted(self.yearly_births.items())},
        }


def build_index(records: List[NameRecord]) -> List[SearchIndexEntry]:
    """Derive search index entries from full records."""
    return [record.to_index_entry() for record in records]


class DataCache:
    """
    Process-lifetime cache of loaded resources, keyed by resource name.

    Each key is loaded at most once, even when several threads ask for it
    at the same time. Failed loads are not cached.
    """

    def __init__(self):
        self._data: Dict[str, Any] = {}
        self._locks: Dict[str, threading.Lock] = {}
        self._guard = threading.Lock()

    def get_or_load(self, key: str, loader: Callable[[], Any]) -> Any:
        if key in self._data:
            return self._data[key]

        with self._guard:
            lock = self._locks.setdefault(key, threading.Lock())

        with lock:
            if key not in self._data:
                self._data[key] = loader()
            return self._data[key]

    def __contains__(self, key: str) -> bool:
        return key in self._data

    def __len__(self) -> int:
        return len(self._data)

    def keys(self) -> List[str]:
        return list(self._data.keys())


class NameStore:
    """
    Read-only access to partitioned first-name data.

    Usage:
        store = NameStore("public/data")

        # Lightweight index (no yearly series)
        entries = store.load_index()

        # All girls' records, or one chunk of them
        girls = store.load_partition(Sex.FEMALE)
        first_chunk = store.load_partition("F", chunk=0)

        # Single record
        emma = store.get_record("Emma", "F")
    """

    def __init__(self, data_dir: str = None, reference_year: Optional[int] = None,
                 cache: Optional[DataCache] = None, max_workers: Optional[int] = None):
        if data_dir is None:
            data_dir = os.environ.get('PRENOMKIT_DATA_DIR') or require_setting("dataset.data_dir")
        self.data_dir = resolve_path(data_dir)

        if reference_year is None:
            reference_year = require_setting("dataset.reference_year")
        self.reference_year = int(reference_year)

        self._partitions = require_setting("dataset.partitions")
        self._files = require_setting("dataset.files")
        for key in ("manifest", "search_index", "full_pattern", "chunk_pattern"):
            if not self._files.get(key):
                raise ValueError(f"dataset.files.{key} must be set in app.yaml")

        if max_workers is None:
            max_workers = get_setting("dataset.max_workers", 2)
        self.max_workers = max_workers

        self._cache = cache if cache is not None else DataCache()
        self._lookups: Dict[Sex, Dict[str, NameRecord]] = {}
        self._lookup_lock = threading.Lock()

    # -------------------------------------------------------------------------
    # Resource loading
    # -------------------------------------------------------------------------

    def _read_json(self, filename: str) -> Any:
        path = self.data_dir / filename
        return json.loads(path.read_text(encoding='utf-8'))

    def _fetch(self, filename: str, parse: Callable[[Any], Any]) -> Optional[Any]:
        """Load, parse and cache a resource; None if it is missing or malformed."""
        try:
            return self._cache.get_or_load(filename, lambda: parse(self._read_json(filename)))
        except OSError as e:
            logger.warning(f"Data file {filename} unavailable: {e}")
        except (ValueError, KeyError, TypeError, AttributeError) as e:
            logger.warning(f"Data file {filename} is malformed: {e}")
        return None

    def _prefix(self, sex: Sex) -> str:
        prefix = self._partitions.get(sex.value)
        if not prefix:
            raise ValueError(f"dataset.partitions.{sex.value} must be set in app.yaml")
        return prefix

    def _parse_records(self, data: Any) -> List[NameRecord]:
        if isinstance(data, dict):
            data = data['names']
        if not isinstance(data, list):
            raise TypeError(f"expected a list of records, got {type(data).__name__}")
        return [NameRecord.from_dict(item, self.reference_year) for item in data]

    def load_manifest(self) -> dict:
        """File inventory and chunk counts; empty if unavailable."""
        manifest = self._fetch(self._files["manifest"], lambda data: dict(data))
        return manifest or {}

    def load_index(self) -> List[SearchIndexEntry]:
        """
        The lightweight search index; empty if unavailable.

        A legacy index (no reference-year counts) is rebuilt from the full
        records when they are available, so index and record searches agree.
        """
        def parse(data):
            entries = [SearchIndexEntry.from_dict(item, self.reference_year) for item in data]
            if any(SearchIndexEntry.is_legacy(item) for item in data):
                records = self.load_all()
                if records:
                    logger.info("Search index has no reference-year counts, rebuilding it from records")
                    return build_index(records)
                logger.warning("Search index has no reference-year counts and no records to rebuild it from")
            return entries

        return self._fetch(self._files["search_index"], parse) or []

    def _chunk_filename(self, sex: Sex, chunk: int) -> str:
        prefix = self._prefix(sex)
        chunk_info = (self.load_manifest().get('chunks') or {}).get(prefix) or {}
        pattern = chunk_info.get('pattern')
        if pattern:
            return pattern.replace('{index}', str(chunk))
        return self._files["chunk_pattern"].format(prefix=prefix, index=chunk)

    def load_partition(self, sex, chunk: Optional[int] = None) -> List[NameRecord]:
        """
        Records for one sex: the whole partition, or a single chunk.

        Returns an empty list when the file is missing or malformed.
        """
        sex = Sex.coerce(sex)
        if sex is None:
            raise ValueError("load_partition needs a sex (M or F)")

        if chunk is None:
            filename = self._files["full_pattern"].format(prefix=self._prefix(sex))
        else:
            filename = self._chunk_filename(sex, chunk)

        return self._fetch(filename, self._parse_records) or []

    def chunk_count(self, sex) -> int:
        sex = Sex.coerce(sex)
        if sex is None:
            raise ValueError("chunk_count needs a sex (M or F)")
        chunk_info = (self.load_manifest().get('chunks') or {}).get(self._prefix(sex)) or {}
        return int(chunk_info.get('count') or 0)

    def has_more(self, sex, chunk: int) -> bool:
        """Whether chunks after `chunk` exist for this sex."""
        return chunk < self.chunk_count(sex) - 1

    def load_all(self, sex=None) -> List[NameRecord]:
        """Full records for one sex, or both (boys first) when sex is None/any."""
        sex = Sex.coerce(sex)
        if sex is not None:
            return list(self.load_partition(sex))

        sexes = [Sex.MALE, Sex.FEMALE]
        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            partitions = list(executor.map(self.load_partition, sexes))

        records = []
        for partition in partitions:
            records.extend(partition)
        return records

    def get_record(self, name: str, sex) -> Optional[NameRecord]:
        """Exact (case-sensitive) lookup of one record; None if not found."""
        sex = Sex.coerce(sex)
        if sex is None:
            raise ValueError("get_record needs a sex (M or F)")

        lookup = self._lookups.get(sex)
        if lookup is None:
            records = self.load_partition(sex)
            lookup = {}
            for record in records:
                lookup.setdefault(record.name, record)
            # An empty partition may be a transient failure; retry next time
            if records:
                with self._lookup_lock:
                    self._lookups[sex] = lookup
        return lookup.get(name)

    def cache_status(self) -> dict:
        return {
            'size': len(self._cache),
            'keys': self._cache.keys(),
        }


_default_store = None


def get_namestore() -> NameStore:
    """Get default store instance"""
    global _default_store
    if _default_store is None:
        _default_store = NameStore()
    return _default_store


__all__ = [
    'Sex',
    'NameRecord',
    'SearchIndexEntry',
    'DataCache',
    'NameStore',
    'build_index',
    'get_namestore',
]
