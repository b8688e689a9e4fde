#!/usr/bin/env python3
"""
Scoresheet CLI

Scores a game session from a template and a file of recorded entries.
Entries either replay keypad keys into a cell, press one of a
column's quick add buttons, or set a value directly.

Entries file format:
    {
      "entries": [
        {"player": "Alice", "column": "sheep", "keys": ["3"]},
        {"player": "Alice", "column": "goods", "keys": ["1", "2", "next", "5"]},
        {"player": "Bob", "column": "begging", "add": 1},
        {"player": "Bob", "column": "first_player", "value": true}
      ]
    }

Usage:
    python score_session.py --template data/templates/farmstead.json --players Alice Bob
    python score_session.py -t data/templates/farmstead.json -p Alice Bob -e entries.json -o session.json
"""

import argparse
import logging
import sys
from pathlib import Path

from scoresheet import (
    ScoreSession,
    import_template,
    load_template,
    save_session,
    validate_template,
)
from scoresheet.config import get_default_factor_units
from scoresheet.logging_config import setup_logging
from scoresheet.models import describe_value
from scoresheet.storage import read_json


def apply_entries(scorer: ScoreSession, entries: list[dict]) -> list[str]:
    """Apply recorded entries to a session, returning problems found."""
    problems = []
    by_name = {p.name: p.id for p in scorer.players}

    for index, entry in enumerate(entries, 1):
        player_id = by_name.get(entry.get('player', ''))
        column_id = entry.get('column', '')
        if player_id is None:
            problems.append(f'Entry {index}: unknown player {entry.get("player")!r}')
            continue
        if scorer.template.get_column(column_id) is None:
            problems.append(f'Entry {index}: unknown column {column_id!r}')
            continue

        try:
            if 'keys' in entry:
                scorer.focus(player_id, column_id)
                for key in entry['keys']:
                    # Stop at a focus move so the keys stay in this entry's cell
                    if scorer.press(player_id, column_id, str(key)):
                        break
            elif 'add' in entry:
                scorer.quick_add(player_id, column_id, float(entry['add']))
            else:
                scorer.set_value(player_id, column_id, entry.get('value'))
        except ValueError as e:
            problems.append(f'Entry {index}: {e}')

    scorer.blur()
    return problems


def print_results(scorer: ScoreSession) -> None:
    columns = scorer.template.columns
    print('\n' + '=' * 60)
    print(scorer.template.name)
    print('=' * 60)

    for player in scorer.players:
        print(f'\n  {player.name}')
        breakdown = scorer.breakdown(player.id)
        for column in columns:
            stored = player.scores.get(column.id)
            if stored is None:
                continue
            points = breakdown.get(column.id, 0.0)
            suffix = f' -> {points:g}' if column.is_scoring and column.data_kind != 'text' else ''
            shown = describe_value(stored)
            if column.is_product:
                unit_a, unit_b = column.factor_units or get_default_factor_units()
                shown = f'{shown} ({unit_a} x {unit_b})'
            print(f'      {column.name or column.id}: {shown}{suffix}')
        print(f'    TOTAL: {player.total_score:g}')

    print('\n' + '=' * 60)
    print('FINAL STANDINGS')
    print('=' * 60)
    winners = set(scorer.winners())
    for rank, player in scorer.rankings():
        crown = ' *' if player.id in winners else ''
        print(f'  {rank}. {player.name}: {player.total_score:g}{crown}')


def main():
    parser = argparse.ArgumentParser(description='Score a tabletop game session from a template')
    parser.add_argument(
        '--template', '-t',
        required=True,
        help='Path to template JSON',
    )
    parser.add_argument(
        '--players', '-p',
        nargs='*',
        default=None,
        help='Player names (defaults to numbered players)',
    )
    parser.add_argument(
        '--entries', '-e',
        default=None,
        help='Path to recorded entries JSON',
    )
    parser.add_argument(
        '--output', '-o',
        default=None,
        help='Write the scored session JSON here',
    )
    parser.add_argument(
        '--import', dest='import_mode',
        action='store_true',
        help='Treat the template as a foreign export (fresh ids, repair missing column ids)',
    )
    parser.add_argument(
        '--validate-only',
        action='store_true',
        help='Only validate the template',
    )
    parser.add_argument(
        '--verbose', '-v',
        action='store_true',
        help='Debug logging',
    )

    args = parser.parse_args()
    setup_logging(level=logging.DEBUG if args.verbose else logging.WARNING, log_to_file=False)

    template_path = Path(args.template)
    if not template_path.exists():
        print(f'Template file not found: {template_path}')
        sys.exit(1)

    try:
        template = import_template(template_path) if args.import_mode else load_template(template_path)
    except ValueError as e:
        print(f'Invalid template: {e}')
        sys.exit(1)

    errors = validate_template(template)
    for error in errors:
        print(f'  ! {error}')
    if args.validate_only:
        sys.exit(1 if errors else 0)

    scorer = ScoreSession.start(template, player_names=args.players)

    if args.entries:
        data = read_json(args.entries)
        for problem in apply_entries(scorer, data.get('entries', [])):
            print(f'  ! {problem}')

    print_results(scorer)

    if args.output:
        save_session(scorer.session, args.output)
        print(f'\nSession saved: {args.output}')


if __name__ == '__main__':
    main()
