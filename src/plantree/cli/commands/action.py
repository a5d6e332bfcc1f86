"""Inspect plan lines."""

import sys
from rich.console import Console

from plantree.core.actions import parse_action, get_action_name, get_action_params

console = Console()


def add_subparser(subparsers):
    parser = subparsers.add_parser("action", help="Split a plan line like '(move r2d2 kitchen hall):5'")
    parser.add_argument("line", help="Plan line")
    parser.set_defaults(func=run_action)


def run_action(args):
    try:
        expression, time = parse_action(args.line)
    except ValueError as e:
        console.print(f"[red]✗ {e}[/red]")
        sys.exit(1)
    
    console.print(f"name: {get_action_name(args.line)}", highlight=False)
    console.print(f"params: {' '.join(get_action_params(args.line))}", highlight=False)
    console.print(f"time: {time}", highlight=False)
    console.print(f"[dim]{expression}[/dim]", highlight=False)
