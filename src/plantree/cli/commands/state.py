"""
Persistent problem state commands (Redis).
"""

import sys
from pathlib import Path
from rich.console import Console

import redis

from plantree.core.facts import Instance, parse_predicate, parse_function
from plantree.core.remote import RedisState, get_redis, get_namespace, set_namespace
from plantree.core.state import parse_state, format_state

console = Console()


def add_subparser(subparsers):
    parser = subparsers.add_parser("state", help="Persistent problem state")
    parser.add_argument("--db", type=int, default=0, help="Redis db")
    parser.add_argument("--namespace", default=None, help="Problem namespace (default: active namespace)")
    state_sub = parser.add_subparsers(dest="state_command", required=True)
    
    # instance
    inst_p = state_sub.add_parser("instance", help="Declare an object")
    inst_p.add_argument("name", help="Object name")
    inst_p.add_argument("type", nargs="?", default="object", help="Object type")
    inst_p.set_defaults(func=state_instance)
    
    # add
    add_p = state_sub.add_parser("add", help="Add a predicate, e.g. '(robot_at r2d2 kitchen)'")
    add_p.add_argument("predicate", help="Predicate text")
    add_p.set_defaults(func=state_add)
    
    # remove
    rm_p = state_sub.add_parser("remove", help="Remove a predicate")
    rm_p.add_argument("predicate", help="Predicate text")
    rm_p.set_defaults(func=state_remove)
    
    # set
    set_p = state_sub.add_parser("set", help="Set a function, e.g. '(= (battery r2d2) 80)'")
    set_p.add_argument("assignment", help="Function assignment text")
    set_p.set_defaults(func=state_set)
    
    # load
    load_p = state_sub.add_parser("load", help="Load facts from a .state file")
    load_p.add_argument("file", help="Path to .state file")
    load_p.set_defaults(func=state_load)
    
    # show
    show_p = state_sub.add_parser("show", help="Show the problem state")
    show_p.set_defaults(func=state_show)
    
    # clear
    clear_p = state_sub.add_parser("clear", help="Delete the problem state")
    clear_p.set_defaults(func=state_clear)
    
    # use
    use_p = state_sub.add_parser("use", help="Set the active namespace")
    use_p.add_argument("name", help="Namespace")
    use_p.set_defaults(func=state_use)


def _state(args) -> RedisState:
    return RedisState(get_redis(db=args.db), namespace=args.namespace)


def _run(action):
    try:
        action()
    except ValueError as e:
        console.print(f"[red]✗ {e}[/red]")
        sys.exit(1)
    except redis.RedisError as e:
        console.print(f"[red]✗ Redis error: {e}[/red]")
        sys.exit(1)


def state_instance(args):
    def action():
        _state(args).add_instance(Instance(args.name, args.type))
        console.print(f"✓ {args.name} - {args.type}")
    _run(action)


def state_add(args):
    def action():
        predicate = parse_predicate(args.predicate)
        if not _state(args).add(predicate):
            raise ValueError(f"Unknown instance in {predicate.key}")
        console.print(f"✓ Added {predicate.key}")
    _run(action)


def state_remove(args):
    def action():
        predicate = parse_predicate(args.predicate)
        _state(args).remove(predicate)
        console.print(f"✓ Removed {predicate.key}")
    _run(action)


def state_set(args):
    def action():
        function = parse_function(args.assignment)
        _state(args).write_function(function)
        console.print(f"✓ {function.to_assignment()}")
    _run(action)


def state_load(args):
    path = Path(args.file)
    if not path.exists():
        console.print(f"[red]✗ File not found: {args.file}[/red]")
        sys.exit(1)
    
    def action():
        local = parse_state(path.read_text())
        _state(args).load(local)
        console.print(f"✓ Loaded {len(local.predicates)} predicates, {len(local.functions)} functions")
    _run(action)


def state_show(args):
    def action():
        state = _state(args)
        console.print(f"[dim]namespace: {state.namespace}[/dim]")
        instances = state.get_instances()
        if instances:
            console.print("# Instances", highlight=False)
            for inst in instances:
                console.print(f"{inst.name} - {inst.type}", highlight=False)
            console.print()
        console.print(format_state(state.snapshot()), highlight=False)
    _run(action)


def state_clear(args):
    def action():
        state = _state(args)
        state.clear()
        console.print(f"✓ Cleared {state.namespace}")
    _run(action)


def state_use(args):
    def action():
        client = get_redis(db=args.db)
        set_namespace(client, args.name)
        console.print(f"✓ Active namespace: {get_namespace(client)}")
    _run(action)
