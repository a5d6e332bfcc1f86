"""Parse and print conditions."""

import sys
from rich.console import Console
from rich.table import Table

from plantree.cli import deps
from plantree.core.conditions import parse as parse_text, format_condition, to_tree
from plantree.core.tokenize import ParseError
from plantree.core.tree import Tree, NodeType, to_string, format_number

console = Console()


def add_subparser(subparsers):
    parser = subparsers.add_parser("parse", help="Parse a condition and print it")
    deps.add_condition_args(parser)
    parser.add_argument("-t", "--tree", action="store_true", help="Show lowered tree nodes")
    parser.set_defaults(func=run_parse)


def run_parse(args):
    try:
        scope = deps.get_scope(args)
        cond = parse_text(args.condition, scope)
    except ParseError as e:
        console.print(f"[red]✗ Parse error: {e}[/red]")
        sys.exit(1)
    
    console.print(format_condition(cond, scope).expandtabs(4), highlight=False)
    
    tree = to_tree(cond, args.replace)
    console.print()
    console.print(f"[dim]{to_string(tree)}[/dim]", highlight=False)
    
    if args.tree:
        console.print()
        print_tree_table(tree)


def print_tree_table(tree: Tree):
    table = Table(title=f"Tree ({len(tree)} nodes)")
    table.add_column("id", justify="right")
    table.add_column("type")
    table.add_column("op")
    table.add_column("name")
    table.add_column("parameters")
    table.add_column("value", justify="right")
    table.add_column("children")
    
    for node in tree.nodes:
        table.add_row(
            str(node.node_id),
            node.node_type,
            node.expression_type or node.modifier_type,
            node.name,
            " ".join(p.name for p in node.parameters),
            format_number(node.value) if node.node_type == NodeType.NUMBER else "",
            ", ".join(str(c) for c in node.children),
        )
    
    console.print(table)
