#!/usr/bin/env python3
"""
PrenomKit CLI
=============
Command-line interface for first-name statistics and recommendations.

Usage:
    prenomkit analyze "Éloïse"
    prenomkit search lou --sex F --sort rarity --limit 20
    prenomkit show Louise --sex F
    prenomkit recommend Martin --child Louis:M --gender F --popularity uncommon
    prenomkit stats
"""

import argparse
import json
import logging
import sys
from pathlib import Path

# Add parent to path
_parent = Path(__file__).parent.parent
if str(_parent) not in sys.path:
    sys.path.insert(0, str(_parent))

from prenomkit import __version__
from prenomkit import ui

# =============================================================================
# Constants
# =============================================================================

SEXES = ['M', 'F', 'any']
SORT_KEYS = ['popularity', 'alphabetical', 'rarity', 'trending']
POPULARITY_BRACKETS = ['rare', 'uncommon', 'moderate', 'popular', 'any']
SIBLING_STYLES = ['similar', 'complementary', 'any']
MEANING_WEIGHTS = ['low', 'medium', 'high']

# =============================================================================
# Utilities
# =============================================================================

class Output:
    """Handles CLI output with quiet mode support."""

    def __init__(self, quiet: bool = False):
        self.quiet = quiet
        self.console = ui.get_console(quiet=quiet)

    def print(self, *args, **kwargs):
        if not self.quiet:
            print(*args, **kwargs)

    def error(self, msg: str):
        print(f"Error: {msg}", file=sys.stderr)

    def success(self, msg: str):
        if not self.quiet:
            print(f"OK: {msg}")

    def json(self, data):
        """JSON goes to stdout even in quiet mode."""
        print(json.dumps(data, indent=2, ensure_ascii=False))

    def table(self, headers: list, rows: list, title: str = None):
        if self.quiet:
            return
        self.console.print(ui.make_table(headers, rows, title=title))


def get_kit(args):
    """Build a PrenomKit for the --data-dir given on the command line."""
    from prenomkit import PrenomKit

    data_dir = getattr(args, 'data_dir', None)
    if data_dir:
        data_dir = str(Path(data_dir).expanduser().resolve())
    return PrenomKit(data_dir=data_dir)


def parse_child(value: str):
    """Parse NAME or NAME:SEX."""
    from prenomkit import Child

    name, _, sex = value.partition(':')
    return Child(name, sex or None)


# =============================================================================
# Commands
# =============================================================================

def cmd_analyze(args, out: Output):
    """Letter/syllable counts and statistics of a name."""
    kit = get_kit(args)
    analysis = kit.analyze(args.name, sex=args.sex)

    if args.json:
        out.json(analysis)
        return 0

    ui.render_analysis(analysis, out.console)
    if not analysis['found']:
        out.print(f"\n'{args.name}' is not in the dataset.")
    return 0


def cmd_search(args, out: Output):
    """Search names."""
    from prenomkit import SearchQuery
    from prenomkit.settings import get_setting

    limit = args.limit
    if limit is None:
        limit = get_setting("search.query_limit" if args.query else "search.default_limit", 100)

    query = SearchQuery(
        query=args.query,
        sex=args.sex,
        min_year=args.min_year,
        max_year=args.max_year,
        min_total=args.min_total,
        min_letters=args.min_letters,
        max_letters=args.max_letters,
        min_syllables=args.min_syllables,
        max_syllables=args.max_syllables,
        min_recent_births=args.min_recent,
        min_trend_rate=args.min_trend,
        max_trend_rate=args.max_trend,
        sort_by=args.sort,
        limit=limit,
    )
    results = get_kit(args).search(query)

    if args.json:
        out.json([item.to_dict() for item in results])
        return 0

    if not results:
        out.print("No names found.")
        return 0

    ui.render_search_results(results, out.console)
    return 0


def cmd_show(args, out: Output):
    """Show one name's yearly births."""
    kit = get_kit(args)
    record = kit.find(args.name, sex=args.sex)
    if record is None:
        out.error(f"Name not found: {args.name}")
        return 1

    if args.json:
        out.json(record.to_dict())
        return 0

    ui.render_record(record, out.console, years=args.years)
    return 0


def cmd_similar(args, out: Output):
    """Names that look like a given name."""
    kit = get_kit(args)

    if args.characteristics:
        records = kit.similar_characteristics(args.name, args.sex, limit=args.limit)
        if args.json:
            out.json([r.to_index_entry().to_dict() for r in records])
            return 0
        if not records:
            out.print("No similar names found.")
            return 0
        ui.render_search_results(records, out.console, title=f"Shaped like {args.name}")
        return 0

    pairs = kit.similar(args.name, args.sex, limit=args.limit)
    if args.json:
        out.json([{'name': r.name, 'sex': r.sex.value, 'similarity': round(s, 4)} for r, s in pairs])
        return 0
    if not pairs:
        out.print("No similar names found.")
        return 0
    ui.render_similar(pairs, out.console, title=f"Similar to {args.name}")
    return 0


def cmd_trending(args, out: Output):
    """Fastest-growing names in the latest year."""
    records = get_kit(args).trending(sex=args.sex, limit=args.limit)

    if args.json:
        from prenomkit import recent_growth
        out.json([
            {'name': r.name, 'sex': r.sex.value, 'recent': r.most_recent_count,
             'growthRatio': round(recent_growth(r), 4)}
            for r in records
        ])
        return 0

    if not records:
        out.print("No names found.")
        return 0
    ui.render_trending(records, out.console, title="Trending")
    return 0


def cmd_popular(args, out: Output):
    """Most given names in a year."""
    kit = get_kit(args)
    year = args.year or kit.store.reference_year
    records = kit.popular(year=year, sex=args.sex, limit=args.limit)

    if args.json:
        out.json([{'name': r.name, 'sex': r.sex.value, 'births': r.births(year)} for r in records])
        return 0

    if not records:
        out.print(f"No births recorded for {year}.")
        return 0
    rows = [[i, r.name, r.sex.value, f"{r.births(year):,}"] for i, r in enumerate(records, 1)]
    out.table(['#', 'Name', 'Sex', 'Births'], rows, title=f"Most given names in {year}")
    return 0


def cmd_recommend(args, out: Output):
    """Recommend names for a family."""
    kit = get_kit(args)
    children = [parse_child(c) for c in args.child or []]

    if args.ai and not kit.config.has_anthropic:
        out.error("AI suggestions require ANTHROPIC_API_KEY in .env")
        return 1

    candidates = kit.recommend(
        args.last_name,
        children=children,
        gender=args.gender,
        popularity=args.popularity,
        max_letters=args.max_letters,
        meaning_weight=args.meaning,
        style=args.style,
        use_ai=args.ai,
        sort_by_confidence=args.by_confidence,
    )

    if args.json:
        out.json([c.to_dict() for c in candidates])
        return 0

    if not candidates:
        out.print("No candidates match these preferences.")
        return 0

    out.print(f"Recommendations for the {args.last_name} family:")
    ui.render_recommendations(candidates, out.console)
    return 0


def cmd_stats(args, out: Output):
    """Show dataset statistics."""
    kit = get_kit(args)
    summary = kit.summary()

    if args.json:
        out.json(summary)
        return 0

    ui.render_summary(summary, out.console, cache=kit.store.cache_status())
    return 0


# =============================================================================
# Main
# =============================================================================

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='prenomkit',
        description='PrenomKit - French first-name statistics & recommendations',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s analyze "Éloïse"
  %(prog)s search lou --sex F --sort rarity
  %(prog)s search --min-syllables 3 --min-trend 1.2 --sort trending
  %(prog)s show Gabriel --sex M
  %(prog)s similar Louise --sex F
  %(prog)s trending --sex M --limit 10
  %(prog)s popular --year 2000
  %(prog)s recommend Martin --child Louis:M --gender F --popularity uncommon
  %(prog)s stats
"""
    )

    parser.add_argument('--version', '-V', action='version', version=f'%(prog)s {__version__}')
    parser.add_argument('--quiet', '-q', action='store_true', help='Suppress non-essential output')
    parser.add_argument('--verbose', '-v', action='store_true', help='Debug logging')
    parser.add_argument('--data-dir', '-d', help='Directory with the name data files')

    subparsers = parser.add_subparsers(dest='command', help='Commands')

    # --- analyze ---
    p = subparsers.add_parser('analyze', aliases=['a'], help='Analyze a name')
    p.add_argument('name', help='First name')
    p.add_argument('--sex', '-s', choices=SEXES, help='Sex to look up (default: either)')
    p.add_argument('--json', '-j', action='store_true', help='Output as JSON')

    # --- search ---
    p = subparsers.add_parser('search', aliases=['find', 'f'], help='Search names')
    p.add_argument('query', nargs='?', help='Substring of the name (case-insensitive)')
    p.add_argument('--sex', '-s', choices=SEXES, help='Restrict to one sex')
    p.add_argument('--min-year', type=int, help='Active in or after this year')
    p.add_argument('--max-year', type=int, help='Active in or before this year')
    p.add_argument('--min-total', type=int, help='Minimum births over all years')
    p.add_argument('--min-letters', type=int)
    p.add_argument('--max-letters', type=int)
    p.add_argument('--min-syllables', type=int)
    p.add_argument('--max-syllables', type=int)
    p.add_argument('--min-recent', type=int, help='Minimum births in the latest year')
    p.add_argument('--min-trend', type=float, help='Minimum growth ratio over the previous year')
    p.add_argument('--max-trend', type=float, help='Maximum growth ratio over the previous year')
    p.add_argument('--sort', choices=SORT_KEYS, default='popularity', help='Sort order (default: popularity)')
    p.add_argument('--limit', '-n', type=int, help='Max results')
    p.add_argument('--json', '-j', action='store_true', help='Output as JSON')

    # --- show ---
    p = subparsers.add_parser('show', help='Show yearly births of a name')
    p.add_argument('name', help='First name')
    p.add_argument('--sex', '-s', choices=SEXES, help='Sex (default: the more given one)')
    p.add_argument('--years', type=int, default=10, help='Years to list (default: 10)')
    p.add_argument('--json', '-j', action='store_true', help='Output as JSON')

    # --- similar ---
    p = subparsers.add_parser('similar', aliases=['sim'], help='Names that look alike')
    p.add_argument('name', help='First name')
    p.add_argument('--sex', '-s', choices=['M', 'F'], required=True, help='Sex')
    p.add_argument('--characteristics', '-c', action='store_true',
                   help='Same syllables and about the same length instead of spelling similarity')
    p.add_argument('--limit', '-n', type=int, help='Max results (default: 6)')
    p.add_argument('--json', '-j', action='store_true', help='Output as JSON')

    # --- trending ---
    p = subparsers.add_parser('trending', aliases=['t'], help='Fastest-growing names')
    p.add_argument('--sex', '-s', choices=SEXES)
    p.add_argument('--limit', '-n', type=int, help='Max results (default: 20)')
    p.add_argument('--json', '-j', action='store_true', help='Output as JSON')

    # --- popular ---
    p = subparsers.add_parser('popular', aliases=['top'], help='Most given names in a year')
    p.add_argument('--year', '-y', type=int, help='Year (default: latest)')
    p.add_argument('--sex', '-s', choices=SEXES)
    p.add_argument('--limit', '-n', type=int, help='Max results (default: 50)')
    p.add_argument('--json', '-j', action='store_true', help='Output as JSON')

    # --- recommend ---
    p = subparsers.add_parser('recommend', aliases=['rec', 'r'], help='Recommend names for a family')
    p.add_argument('last_name', help='Family name')
    p.add_argument('--child', '-c', action='append', metavar='NAME[:SEX]', help='Existing child (repeatable)')
    p.add_argument('--gender', '-g', choices=SEXES, help='Sex of the new child (default: either)')
    p.add_argument('--popularity', '-p', choices=POPULARITY_BRACKETS, default='any')
    p.add_argument('--max-letters', type=int, help='Maximum letters in the first name')
    p.add_argument('--style', choices=SIBLING_STYLES, default='any', help='Relation to siblings\' names')
    p.add_argument('--meaning', choices=MEANING_WEIGHTS, default='medium',
                   help='Importance of meaning (passed to AI suggestions)')
    p.add_argument('--ai', action='store_true', help='Merge in Claude suggestions')
    p.add_argument('--by-confidence', action='store_true', help='Order AI suggestions by confidence')
    p.add_argument('--json', '-j', action='store_true', help='Output as JSON')

    # --- stats ---
    p = subparsers.add_parser('stats', help='Show dataset statistics')
    p.add_argument('--json', '-j', action='store_true', help='Output as JSON')

    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format='%(levelname)s %(name)s: %(message)s',
    )

    if not args.command:
        parser.print_help()
        return 0

    # Handle aliases
    cmd_map = {
        'a': 'analyze',
        'find': 'search', 'f': 'search',
        'sim': 'similar',
        't': 'trending',
        'top': 'popular',
        'rec': 'recommend', 'r': 'recommend',
    }
    command = cmd_map.get(args.command, args.command)

    # Output handler
    out = Output(quiet=args.quiet)

    # Dispatch
    commands = {
        'analyze': cmd_analyze,
        'search': cmd_search,
        'show': cmd_show,
        'similar': cmd_similar,
        'trending': cmd_trending,
        'popular': cmd_popular,
        'recommend': cmd_recommend,
        'stats': cmd_stats,
    }

    handler = commands.get(command)
    if handler:
        try:
            return handler(args, out)
        except KeyboardInterrupt:
            out.print("\nCancelled.")
            return 130
        except Exception as e:
            out.error(str(e))
            if args.verbose:
                import traceback
                traceback.print_exc()
            return 1

    parser.print_help()
    return 0


if __name__ == '__main__':
    sys.exit(main())
