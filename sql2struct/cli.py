#!/usr/bin/env python3
"""
sql2struct CLI

Usage:
    sql2struct -s schema.sql -p UserInfoPO -e UserInfo
    sql2struct -s schema.sql -p UserInfoPO -e UserInfo -o ./internal/repo/
    sql2struct -s schema.sql -p UserInfoPO -e UserInfo --strict -v
"""

import argparse
import logging
import sys
from pathlib import Path

from ._logging import configure_logging
from .errors import ParseError, Sql2StructError
from .go_generator import DEFAULT_DATETIME_IMPORT, generate_go_file
from .parser import ENCRYPTION_MARKERS, ensure_clean, parse_file


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description='Generate Go PO/entity structs and converters from a SQL schema',
        prog='sql2struct'
    )
    parser.add_argument(
        '-s', '--sql',
        type=Path,
        required=True,
        help='Path to SQL schema file'
    )
    parser.add_argument(
        '-p', '--po',
        required=True,
        help='Name for the PO struct'
    )
    parser.add_argument(
        '-e', '--entity',
        required=True,
        help='Name for the entity struct'
    )
    parser.add_argument(
        '-o', '--output',
        type=Path,
        default=Path('.'),
        help='Output directory (default: current directory)'
    )
    parser.add_argument(
        '--datetime-import',
        default=DEFAULT_DATETIME_IMPORT,
        help='Go import path of the datetime package used by DATETIME columns'
    )
    parser.add_argument(
        '--encrypt-marker',
        action='append',
        dest='encrypt_markers',
        metavar='TEXT',
        help='Marker in a column definition that flags encrypted content '
             '(repeatable, default: %s)' % ', '.join(ENCRYPTION_MARKERS)
    )
    parser.add_argument(
        '--strict',
        action='store_true',
        help='Fail on unmapped SQL types and incomplete column definitions'
    )
    parser.add_argument(
        '-v', '--verbose',
        action='store_true',
        help='Print verbose output'
    )
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)

    configure_logging(level=logging.DEBUG if args.verbose else logging.WARNING)

    try:
        sql_path = args.sql.resolve()
        if args.verbose:
            print(f"Parsing {sql_path}...")

        context = parse_file(
            sql_path,
            struct_name=args.po,
            second_struct_name=args.entity,
            encrypt_markers=args.encrypt_markers or ENCRYPTION_MARKERS,
        )

        if args.verbose:
            print(f"  Table: {context.table_name or '(none)'}")
            print(f"  Columns: {len(context.columns)}")
            for column in context.columns:
                print(f"    {column.sql_name}: {column.sql_type} -> {column.target_type or '(unmapped)'}")

        if args.strict:
            ensure_clean(context)

        try:
            args.output.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            print(f"Error: Failed to create output directory {args.output}: {e}", file=sys.stderr)
            return 1

        path = generate_go_file(context, args.output, datetime_import=args.datetime_import)
        print(f"Generated: {path}")
        return 0

    except ParseError as e:
        print(f"Parse error: {e}", file=sys.stderr)
        return 1
    except Sql2StructError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == '__main__':
    sys.exit(main())
