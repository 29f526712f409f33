#!/usr/bin/env python3
"""
Terminal Rendering
==================
Rich tables and panels for search results, name details and
recommendations.

Usage:
    from prenomkit.ui import get_console, render_search_results

    console = get_console()
    render_search_results(results, console)
"""

import math
from typing import Iterable, List, Optional, Sequence, Tuple

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from namestore import NameRecord
from prenomkit.models import CandidateSource, ScoredCandidate
from prenomkit.phonetics import letter_count, syllable_count
from prenomkit.recommend import classify_popularity
from prenomkit.trends import TrendDirection, recent_direction, recent_percentage_change

SOURCE_STYLES = {
    CandidateSource.LOCAL: "dim",
    CandidateSource.EXTERNAL: "magenta",
    CandidateSource.BOTH: "bold green",
}

DIRECTION_STYLES = {
    TrendDirection.RISING: "green",
    TrendDirection.FALLING: "red",
    TrendDirection.STABLE: "dim",
}


def get_console(quiet: bool = False) -> Console:
    return Console(quiet=quiet, highlight=False)


def make_table(headers: Sequence[str], rows: Iterable[Sequence], title: str = None) -> Table:
    """Build a rich table from plain rows."""
    table = Table(title=title, box=box.SIMPLE_HEAVY, header_style="bold")
    for header in headers:
        table.add_column(str(header))
    for row in rows:
        table.add_row(*[c if isinstance(c, Text) else str(c) for c in row])
    return table


def format_change(percent: float) -> str:
    if math.isinf(percent):
        return "new"
    return f"{percent:+.1f}%"


def _years(item) -> str:
    if item.first_year is None:
        return "-"
    return f"{item.first_year}-{item.last_year}"


def render_search_results(items: List, console: Console, title: str = None):
    """Search results: records or index entries share the columns shown here."""
    rows = []
    for i, item in enumerate(items, 1):
        rows.append([
            i,
            item.name,
            item.sex.value,
            f"{item.most_recent_count:,}",
            f"{item.total_births:,}",
            _years(item),
            letter_count(item.name),
            syllable_count(item.name),
        ])
    console.print(make_table(
        ['#', 'Name', 'Sex', 'Latest', 'Total', 'Years', 'Letters', 'Syllables'],
        rows, title=title,
    ))
    console.print(f"Total: {len(items)}", style="dim")


def render_trending(records: List[NameRecord], console: Console, title: str = None):
    rows = []
    for i, record in enumerate(records, 1):
        direction = recent_direction(record)
        change = Text(format_change(recent_percentage_change(record)), style=DIRECTION_STYLES[direction])
        rows.append([i, record.name, record.sex.value, f"{record.most_recent_count:,}", change])
    console.print(make_table(['#', 'Name', 'Sex', 'Latest', 'Change'], rows, title=title))


def render_record(record: NameRecord, console: Console, years: int = 10):
    """Detail view of one name with its recent yearly births."""
    direction = recent_direction(record)
    lines = [
        f"[bold]{record.name}[/bold] ({record.sex.value})",
        f"Total births: {record.total_births:,}",
        f"Active: {_years(record)}",
        f"Peak: {record.peak_year} ({record.peak_births:,})" if record.peak_year else "Peak: -",
        f"Latest year: {record.most_recent_count:,} ({classify_popularity(record.most_recent_count)})",
        f"Change: [{DIRECTION_STYLES[direction]}]{format_change(recent_percentage_change(record))}[/]",
        f"Letters: {letter_count(record.name)}  Syllables: {syllable_count(record.name)}",
    ]
    console.print(Panel("\n".join(lines), box=box.ROUNDED, border_style="blue"))

    recent = sorted(record.yearly_births.items())[-years:]
    if recent:
        console.print(make_table(['Year', 'Births'], [[y, f"{c:,}"] for y, c in recent]))


def render_similar(pairs: List[Tuple[NameRecord, float]], console: Console, title: str = None):
    rows = [[record.name, f"{score:.2f}", f"{record.most_recent_count:,}"] for record, score in pairs]
    console.print(make_table(['Name', 'Similarity', 'Latest'], rows, title=title))


def render_recommendations(candidates: List[ScoredCandidate], console: Console,
                           show_reasoning: bool = True):
    rows = []
    for i, candidate in enumerate(candidates, 1):
        source = Text(candidate.source.value, style=SOURCE_STYLES[candidate.source])
        if candidate.is_placeholder:
            source.append(" (new)", style="dim")
        breakdown = candidate.breakdown
        rows.append([
            i,
            candidate.name,
            candidate.record.sex.value,
            f"{candidate.score:.2f}",
            f"{breakdown.last_name:.2f}" if breakdown else "-",
            f"{breakdown.siblings:.2f}" if breakdown else "-",
            source,
        ])
    console.print(make_table(['#', 'Name', 'Sex', 'Score', 'Last name', 'Siblings', 'Source'], rows))

    if show_reasoning:
        for candidate in candidates:
            if candidate.insight and candidate.insight.reasoning:
                console.print(f"[bold]{candidate.name}[/bold]: {candidate.insight.reasoning}")


def render_analysis(analysis: dict, console: Console):
    rows = [[key.replace('_', ' ').capitalize(), value] for key, value in analysis.items()
            if not isinstance(value, (list, dict))]
    console.print(make_table(['Metric', 'Value'], rows))


def render_summary(summary: dict, console: Console, cache: Optional[dict] = None):
    year_range = summary['year_range']
    lines = [
        f"Names: {summary['total_names']:,}",
        f"Births: {summary['total_births']:,}",
        f"Years: {year_range['min']}-{year_range['max']}" if year_range['min'] else "Years: -",
    ]
    for sex, names in summary['top_names'].items():
        lines.append(f"Top {sex}: {', '.join(names) if names else '-'}")
    if cache is not None:
        lines.append(f"Cached resources: {cache['size']}")
    console.print(Panel("\n".join(lines), title="Dataset", box=box.ROUNDED, border_style="blue"))


__all__ = [
    'get_console',
    'make_table',
    'format_change',
    'render_search_results',
    'render_trending',
    'render_record',
    'render_similar',
    'render_recommendations',
    'render_analysis',
    'render_summary',
]
