"""Check conditions and apply effects."""

import sys
from pathlib import Path
from rich.console import Console

import redis

from plantree.cli import deps
from plantree.core.evaluate import evaluate
from plantree.core.state import LocalState, format_state
from plantree.core.tokenize import ParseError

console = Console()


def add_subparser(subparsers):
    check_p = subparsers.add_parser("check", help="Check a condition against a state")
    deps.add_condition_args(check_p)
    deps.add_backend_args(check_p)
    check_p.set_defaults(func=run_check)
    
    apply_p = subparsers.add_parser("apply", help="Apply an effect to a state")
    deps.add_condition_args(apply_p)
    deps.add_backend_args(apply_p)
    apply_p.add_argument("-w", "--write", action="store_true", help="Write the result back to the .state file")
    apply_p.set_defaults(func=run_apply)


def _load(args):
    try:
        tree = deps.get_tree(args)
        backend = deps.get_backend(args)
    except (ParseError, ValueError, FileNotFoundError) as e:
        console.print(f"[red]✗ {e}[/red]")
        sys.exit(1)
    return tree, backend


def run_check(args):
    tree, backend = _load(args)
    
    try:
        result = evaluate(tree, backend, apply=False)
    except redis.RedisError as e:
        console.print(f"[red]✗ Redis error: {e}[/red]")
        sys.exit(1)
    
    if not result.success:
        console.print("[red]✗ Evaluation failed[/red]")
        sys.exit(1)
    
    if result.truth:
        console.print("[green]✓ true[/green]")
    else:
        console.print("[yellow]✗ false[/yellow]")
        sys.exit(2)


def run_apply(args):
    tree, backend = _load(args)
    
    try:
        result = evaluate(tree, backend, apply=True)
    except redis.RedisError as e:
        console.print(f"[red]✗ Redis error: {e}[/red]")
        sys.exit(1)
    
    if not result.success:
        console.print("[red]✗ Apply failed[/red]")
        sys.exit(1)
    
    console.print("[green]✓ Applied[/green]")
    
    if isinstance(backend, LocalState):
        text = format_state(backend)
        if args.write:
            Path(args.state_path).write_text(text)
            console.print(f"[dim]Wrote {args.state_path}[/dim]")
        else:
            console.print(text, highlight=False)
