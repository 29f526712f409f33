#!/usr/bin/env python3
"""
Data Store Module
=================
Re-exports the first-name record store.
"""

from namestore import (
    Sex,
    NameRecord,
    SearchIndexEntry,
    DataCache,
    NameStore,
    build_index,
    get_namestore,
)

__all__ = [
    'Sex',
    'NameRecord',
    'SearchIndexEntry',
    'DataCache',
    'NameStore',
    'build_index',
    'get_namestore',
]
