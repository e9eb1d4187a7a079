"""Main CLI entry point for tfeval."""

import argparse
import sys
from typing import Optional

from .commands import check_expression, eval_expression


def _add_common_arguments(parser: argparse.ArgumentParser):
    parser.add_argument(
        'expression',
        type=str,
        help='Interpolation string, e.g. "${var.name}"'
    )
    parser.add_argument(
        '--log-level',
        choices=['debug', 'info', 'warn', 'error'],
        default='warn',
        help='Set log level'
    )


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser for the tfeval CLI."""
    parser = argparse.ArgumentParser(
        prog='tfeval',
        description='Static evaluator for configuration interpolations'
    )

    subparsers = parser.add_subparsers(dest='command', help='Commands')

    # Eval command
    eval_parser = subparsers.add_parser('eval', help='Evaluate an interpolation string')
    _add_common_arguments(eval_parser)
    eval_parser.add_argument(
        '-f', '--file',
        action='append',
        default=[],
        metavar='PATH',
        help='Configuration file declaring variables (can be specified multiple times)'
    )
    eval_parser.add_argument(
        '-d', '--dir',
        type=str,
        help='Directory to scan for *.tf.json / *.tf.yaml files'
    )
    eval_parser.add_argument(
        '--var-file',
        action='append',
        default=[],
        metavar='PATH',
        help='Variable-values file overriding defaults (can be specified multiple times)'
    )
    eval_parser.add_argument(
        '--config',
        type=str,
        help='Path to YAML evaluator config'
    )
    eval_parser.add_argument(
        '--env',
        type=str,
        help='Value of ${terraform.env} (overrides config)'
    )
    eval_parser.add_argument(
        '--workspace',
        type=str,
        help='Value of ${terraform.workspace} (overrides config)'
    )

    # Check command
    check_parser = subparsers.add_parser('check', help='Report whether a string is evaluable')
    _add_common_arguments(check_parser)

    return parser


def main(args: Optional[list] = None) -> int:
    """Main entry point for the CLI."""
    parser = create_parser()
    parsed_args = parser.parse_args(args)

    if not parsed_args.command:
        parser.print_help()
        return 1

    if parsed_args.command == 'eval':
        return eval_expression(parsed_args)
    elif parsed_args.command == 'check':
        return check_expression(parsed_args)
    else:
        parser.print_help()
        return 1


if __name__ == '__main__':
    sys.exit(main())
