"""
Shared fixtures: a small partitioned first-name dataset written to tmp_path.

Latest year is 2024. Girls: Emma, Léa, Louise, Eloise, Ophélie (no births
since 2022), Jade. Boys: Milo, Gabriel, Nathan, Kylian (new in 2024),
Raphaël, Gaston and Thierry (no recent births).
"""

import json
import sys
from pathlib import Path

import pytest

# Ensure repo root is on path
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from namestore import NameRecord, NameStore, Sex, build_index

REFERENCE_YEAR = 2024

GIRLS = {
    "Emma": {2020: 2500, 2021: 2600, 2022: 2700, 2023: 2800, 2024: 2900},
    "Léa": {2023: 30, 2024: 40},
    "Louise": {2022: 2300, 2023: 2400, 2024: 2500},
    "Eloise": {2023: 100, 2024: 150},
    "Ophélie": {1990: 500, 2010: 200, 2022: 15},
    "Jade": {2023: 2000, 2024: 1800},
}

BOYS = {
    "Milo": {2023: 1300, 2024: 1550},
    "Gabriel": {2022: 2500, 2023: 2600, 2024: 2700},
    "Nathan": {2023: 900, 2024: 800},
    "Kylian": {2024: 60},
    "Raphaël": {2023: 2200, 2024: 2300},
    "Gaston": {1950: 800, 1960: 300},
    "Thierry": {1970: 3000, 2000: 100},
}

CHUNK_SIZE = 4


def make_records(names: dict, sex: Sex) -> list:
    return [
        NameRecord(name=name, sex=sex, yearly_births=dict(yearly), reference_year=REFERENCE_YEAR)
        for name, yearly in names.items()
    ]


def write_dataset(directory: Path, girls: dict = None, boys: dict = None,
                  chunk_size: int = CHUNK_SIZE) -> Path:
    """Write manifest, search index, full partitions and chunks the way the ETL does."""
    directory.mkdir(parents=True, exist_ok=True)
    partitions = {
        "boys": make_records(BOYS if boys is None else boys, Sex.MALE),
        "girls": make_records(GIRLS if girls is None else girls, Sex.FEMALE),
    }

    chunks = {}
    for prefix, records in partitions.items():
        payload = [r.to_dict() for r in records]
        (directory / f"{prefix}_names.json").write_text(
            json.dumps({"summary": {"totalNames": len(records)}, "names": payload}, ensure_ascii=False),
            encoding="utf-8",
        )
        count = 0
        for start in range(0, len(payload), chunk_size):
            (directory / f"{prefix}_chunk_{count}.json").write_text(
                json.dumps(payload[start:start + chunk_size], ensure_ascii=False), encoding="utf-8",
            )
            count += 1
        chunks[prefix] = {"count": count, "pattern": f"{prefix}_chunk_{{index}}.json"}

    index = build_index(partitions["boys"] + partitions["girls"])
    (directory / "search_index.json").write_text(
        json.dumps([entry.to_dict() for entry in index], ensure_ascii=False), encoding="utf-8",
    )
    (directory / "manifest.json").write_text(
        json.dumps({"version": "1.0", "chunks": chunks}), encoding="utf-8",
    )
    return directory


@pytest.fixture
def data_dir(tmp_path):
    return write_dataset(tmp_path / "data")


@pytest.fixture
def store(data_dir):
    return NameStore(str(data_dir), reference_year=REFERENCE_YEAR)
