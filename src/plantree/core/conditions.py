# src/plantree/core/conditions.py
"""
Conditions: a small PDDL-like language that compiles to the tree IR.

Syntax:
  ( and <cond> ... )            ( or <cond> ... )          ( not <cond> )
  ( <pred> <arg> ... )          ( <cmp> <expr> <expr> )    cmp in >= > <= < =
  ( <mod> <func> <expr> )       mod in assign increase decrease scale-up scale-down
  ( exists ( ?v ... - type ... ) <cond> )
  ()                            no condition

  <expr> := <number> | ?var | constant | ( <func> <arg> ... ) | ( <op> <expr> <expr> )

Variables (?x) are resolved against a VariableScope to integer slots while
parsing; names only come back when printing with the same scope.
Every variant can be parsed, printed and lowered into a Tree.
"""

import re
from dataclasses import dataclass, field
from typing import Optional, Union

from plantree.core.scope import VariableScope
from plantree.core.tokenize import TokenReader, ParseError, parse_typed_list
from plantree.core.tree import (
    Tree, Node, NodeType, Param,
    COMPARISONS, ARITHMETIC, MODIFIERS,
    format_number, unbound,
)


UNSUPPORTED = ("forall", "imply", "when", "preference", "either")

# Plain decimal literals; words such as inf or nan stay constants
NUMBER_RE = re.compile(r"^[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?$")


# === Expression terms ===

@dataclass
class Number:
    value: float


@dataclass
class ParamRef:
    slot: int


@dataclass
class ConstantTerm:
    name: str


@dataclass
class FunctionTerm:
    name: str
    args: list[Union[int, str]] = field(default_factory=list)  # slot or constant


@dataclass
class Arith:
    op: str
    left: "Expression"
    right: "Expression"


Expression = Union[Number, ParamRef, ConstantTerm, FunctionTerm, Arith]


# === Conditions ===

@dataclass
class And:
    conditions: list["Condition"] = field(default_factory=list)


@dataclass
class Or:
    conditions: list["Condition"] = field(default_factory=list)


@dataclass
class Not:
    condition: "Condition"


@dataclass
class Atom:
    name: str
    args: list[Union[int, str]] = field(default_factory=list)  # slot or constant


@dataclass
class Compare:
    op: str
    left: Expression
    right: Expression


@dataclass
class Modifier:
    op: str
    function: FunctionTerm
    expression: Expression


@dataclass
class Exists:
    variables: list[tuple[str, str]]  # (name, type) in declaration order
    params: list[int]  # slots, offset by the enclosing scope's size
    condition: Optional["Condition"] = None


Condition = Union[And, Or, Not, Atom, Compare, Modifier, Exists]


# === Parsing ===

def parse(text: str, scope: VariableScope | None = None) -> Optional[Condition]:
    """Parse a single condition. Returns None for '()'."""
    reader = TokenReader.from_text(text)
    scope = scope if scope is not None else VariableScope()
    cond = parse_condition(reader, scope)
    if not reader.at_end():
        raise reader.error(f"Unexpected trailing input '{reader.peek()}'")
    return cond


def parse_condition(reader: TokenReader, scope: VariableScope) -> Optional[Condition]:
    """
    Condition factory: read '(' and dispatch on the keyword that follows.
    """
    reader.expect("(")
    if reader.peek() == ")":
        reader.next()
        return None

    name = reader.next()
    keyword = name.lower()

    if keyword in ("and", "or"):
        children = []
        while reader.peek() != ")":
            child = parse_condition(reader, scope)
            if child is not None:
                children.append(child)
        reader.expect(")")
        return And(children) if keyword == "and" else Or(children)

    if keyword == "not":
        child = parse_condition(reader, scope)
        if child is None:
            raise reader.error("'not' requires a condition")
        reader.expect(")")
        return Not(child)

    if keyword == "exists":
        return _parse_exists(reader, scope)

    if keyword in COMPARISONS:
        left = parse_expression(reader, scope)
        right = parse_expression(reader, scope)
        reader.expect(")")
        return Compare(keyword, left, right)

    if keyword in MODIFIERS:
        function = parse_expression(reader, scope)
        if not isinstance(function, FunctionTerm):
            raise reader.error(f"'{keyword}' must modify a function")
        expression = parse_expression(reader, scope)
        reader.expect(")")
        return Modifier(keyword, function, expression)

    if keyword in UNSUPPORTED:
        raise reader.error(f"Unsupported keyword: {keyword}")

    if name in ("(", ")") or name.startswith("?"):
        raise reader.error(f"Expected predicate name, got '{name}'")

    # Keywords are case-insensitive; predicate names keep their case
    args = _parse_args(reader, scope)
    return Atom(name, args)


def _parse_exists(reader: TokenReader, scope: VariableScope) -> Exists:
    reader.expect("(")
    local = parse_typed_list(reader)
    reader.expect(")")

    for name, _ in local.bindings:
        if not name.startswith("?"):
            raise reader.error(f"Quantified variable must start with '?': {name}")

    # Slots continue after the enclosing scope; siblings never see them
    params = [i + scope.size() for i in range(local.size())]
    inner = scope.extend(local)

    cond = parse_condition(reader, inner)
    reader.expect(")")
    return Exists(list(local.bindings), params, cond)


def _parse_args(reader: TokenReader, scope: VariableScope) -> list[Union[int, str]]:
    args = []
    while reader.peek() != ")":
        token = reader.next()
        if token == "(":
            raise reader.error("Unexpected '(' in argument list")
        args.append(_resolve(reader, scope, token))
    reader.expect(")")
    return args


def _resolve(reader: TokenReader, scope: VariableScope, token: str) -> Union[int, str]:
    if token.startswith("?"):
        slot = scope.index_of(token)
        if slot is None:
            raise reader.error(f"Unknown variable: {token}")
        return slot
    return token


def parse_expression(reader: TokenReader, scope: VariableScope) -> Expression:
    token = reader.peek()
    if token is None:
        raise reader.error("Expected expression, got end of input")

    if token == ")":
        raise reader.error("Expected expression, got ')'")

    if token == "(":
        reader.next()
        head = reader.next()
        if head in ARITHMETIC:
            left = parse_expression(reader, scope)
            right = parse_expression(reader, scope)
            reader.expect(")")
            return Arith(head, left, right)
        if head in ("(", ")") or head.startswith("?"):
            raise reader.error(f"Expected function name, got '{head}'")
        return FunctionTerm(head, _parse_args(reader, scope))

    reader.next()
    if token.startswith("?"):
        return ParamRef(_resolve(reader, scope, token))

    if NUMBER_RE.match(token):
        return Number(float(token))
    return ConstantTerm(token)


# === Printing ===

def _tabs(indent: int) -> str:
    return "\t" * indent


def _arg_name(arg: Union[int, str], scope: VariableScope) -> str:
    if isinstance(arg, int):
        if arg < scope.size():
            return scope.name(arg)
        return unbound(arg)
    return arg


def format_expression(expr: Expression, scope: VariableScope) -> str:
    if isinstance(expr, Number):
        return format_number(expr.value)
    elif isinstance(expr, ParamRef):
        return _arg_name(expr.slot, scope)
    elif isinstance(expr, ConstantTerm):
        return expr.name
    elif isinstance(expr, FunctionTerm):
        args = "".join(f" {_arg_name(a, scope)}" for a in expr.args)
        return f"( {expr.name}{args} )"
    elif isinstance(expr, Arith):
        left = format_expression(expr.left, scope)
        right = format_expression(expr.right, scope)
        return f"( {expr.op} {left} {right} )"
    raise TypeError(f"Not an expression: {expr!r}")


def format_typed_list(variables: list[tuple[str, str]]) -> str:
    return " ".join(f"{name} - {type_name}" for name, type_name in variables)


def format_condition(cond: Optional[Condition], scope: VariableScope | None = None, indent: int = 0) -> str:
    """Print a condition in bracketed, tab-indented PDDL form."""
    scope = scope if scope is not None else VariableScope()
    tabs = _tabs(indent)

    if cond is None:
        return f"{tabs}()"

    if isinstance(cond, (And, Or)):
        keyword = "and" if isinstance(cond, And) else "or"
        lines = [f"{tabs}( {keyword}"]
        for child in cond.conditions:
            lines.append(format_condition(child, scope, indent + 1))
        lines.append(f"{tabs})")
        return "\n".join(lines)

    if isinstance(cond, Not):
        return "\n".join([
            f"{tabs}( not",
            format_condition(cond.condition, scope, indent + 1),
            f"{tabs})",
        ])

    if isinstance(cond, Atom):
        args = "".join(f" {_arg_name(a, scope)}" for a in cond.args)
        return f"{tabs}( {cond.name}{args} )"

    if isinstance(cond, Compare):
        left = format_expression(cond.left, scope)
        right = format_expression(cond.right, scope)
        return f"{tabs}( {cond.op} {left} {right} )"

    if isinstance(cond, Modifier):
        function = format_expression(cond.function, scope)
        expression = format_expression(cond.expression, scope)
        return f"{tabs}( {cond.op} {function} {expression} )"

    if isinstance(cond, Exists):
        inner = scope.extend(VariableScope(list(cond.variables)))
        return "\n".join([
            f"{tabs}( exists ( {format_typed_list(cond.variables)} )",
            format_condition(cond.condition, inner, indent + 1),
            f"{tabs})",
        ])

    raise TypeError(f"Not a condition: {cond!r}")


# === Lowering ===

def _lower_arg(arg: Union[int, str], replace: list[str] | None) -> str:
    if isinstance(arg, int):
        if replace and arg < len(replace):
            return replace[arg]
        return unbound(arg)
    return arg


def lower_expression(expr: Expression, tree: Tree, replace: list[str] | None = None) -> Node:
    if isinstance(expr, Number):
        return tree.add(Node(NodeType.NUMBER, value=expr.value))

    if isinstance(expr, ParamRef):
        return tree.add(Node(
            NodeType.PARAMETER,
            parameters=[Param(_lower_arg(expr.slot, replace))],
        ))

    if isinstance(expr, ConstantTerm):
        return tree.add(Node(NodeType.CONSTANT, name=expr.name))

    if isinstance(expr, FunctionTerm):
        return tree.add(Node(
            NodeType.FUNCTION,
            name=expr.name,
            parameters=[Param(_lower_arg(a, replace)) for a in expr.args],
        ))

    if isinstance(expr, Arith):
        node = tree.add(Node(NodeType.EXPRESSION, expression_type=expr.op))
        _lower_children(node, [expr.left, expr.right], tree, replace, lower_expression)
        return node

    raise TypeError(f"Not an expression: {expr!r}")


def _lower_children(node: Node, items: list, tree: Tree, replace, lower) -> None:
    # Children are appended after their parent, then linked by id
    for item in items:
        child = lower(item, tree, replace)
        tree.nodes[node.node_id].children.append(child.node_id)


def lower_condition(cond: Condition, tree: Tree, replace: list[str] | None = None) -> Node:
    """
    Append cond to tree and return its root node.

    Slots below len(replace) become replace[slot]; the rest become '?<slot>'.
    """
    if isinstance(cond, (And, Or)):
        kind = NodeType.AND if isinstance(cond, And) else NodeType.OR
        node = tree.add(Node(kind))
        _lower_children(node, cond.conditions, tree, replace, lower_condition)
        return node

    if isinstance(cond, Not):
        node = tree.add(Node(NodeType.NOT))
        _lower_children(node, [cond.condition], tree, replace, lower_condition)
        return node

    if isinstance(cond, Atom):
        return tree.add(Node(
            NodeType.PREDICATE,
            name=cond.name,
            parameters=[Param(_lower_arg(a, replace)) for a in cond.args],
        ))

    if isinstance(cond, Compare):
        node = tree.add(Node(NodeType.EXPRESSION, expression_type=cond.op))
        _lower_children(node, [cond.left, cond.right], tree, replace, lower_expression)
        return node

    if isinstance(cond, Modifier):
        node = tree.add(Node(NodeType.FUNCTION_MODIFIER, modifier_type=cond.op))
        _lower_children(node, [cond.function, cond.expression], tree, replace, lower_expression)
        return node

    if isinstance(cond, Exists):
        node = tree.add(Node(
            NodeType.EXISTS,
            parameters=[
                Param(_lower_arg(slot, replace), type_name)
                for slot, (_, type_name) in zip(cond.params, cond.variables)
            ],
        ))
        if cond.condition is not None:
            _lower_children(node, [cond.condition], tree, replace, lower_condition)
        return node

    raise TypeError(f"Not a condition: {cond!r}")


def to_tree(cond: Optional[Condition], replace: list[str] | None = None) -> Tree:
    """Lower a condition into a fresh tree rooted at node 0."""
    tree = Tree()
    if cond is not None:
        lower_condition(cond, tree, replace)
    return tree


def compile_condition(text: str, scope: VariableScope | None = None, replace: list[str] | None = None) -> Tree:
    """Parse text and lower it in one step."""
    return to_tree(parse(text, scope), replace)


__all__ = [
    "Number", "ParamRef", "ConstantTerm", "FunctionTerm", "Arith", "Expression",
    "And", "Or", "Not", "Atom", "Compare", "Modifier", "Exists", "Condition",
    "ParseError",
    "parse", "parse_condition", "parse_expression",
    "format_condition", "format_expression",
    "lower_condition", "lower_expression", "to_tree", "compile_condition",
]
