"""
Shared helpers for commands.
"""

from pathlib import Path

from plantree.core.conditions import compile_condition
from plantree.core.remote import RedisState, get_redis
from plantree.core.scope import VariableScope, scope_from_typed_list
from plantree.core.state import parse_state
from plantree.core.tree import Tree


def add_condition_args(parser):
    parser.add_argument("condition", help="Condition text, e.g. '(and (robot_at ?r ?l))'")
    parser.add_argument("--params", default="", help="Enclosing variables, e.g. '?r - robot ?l - room'")
    parser.add_argument("--replace", nargs="*", default=None, help="Objects bound to the enclosing variables, in order")


def add_backend_args(parser):
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--state", dest="state_path", help="Path to .state file")
    source.add_argument("--redis", action="store_true", help="Use the persistent state in Redis")
    parser.add_argument("--db", type=int, default=0, help="Redis db")
    parser.add_argument("--namespace", default=None, help="Problem namespace (default: active namespace)")


def get_scope(args) -> VariableScope:
    if not args.params:
        return VariableScope()
    return scope_from_typed_list(args.params)


def get_tree(args) -> Tree:
    return compile_condition(args.condition, get_scope(args), args.replace)


def get_redis_state(args) -> RedisState:
    return RedisState(get_redis(db=args.db), namespace=args.namespace)


def get_backend(args):
    if args.redis:
        return get_redis_state(args)
    
    path = Path(args.state_path)
    if not path.exists():
        raise FileNotFoundError(f"File not found: {args.state_path}")
    return parse_state(path.read_text())
