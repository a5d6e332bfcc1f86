# src/plantree/core/tree.py
"""
Condition tree IR.

A Tree is an append-only arena of Nodes. Nodes reference each other by
node_id (their position in Tree.nodes), never by object reference.
Several independent roots may share one Tree.
"""

from dataclasses import dataclass, field, replace


class NodeType:
    AND = "and"
    OR = "or"
    NOT = "not"
    PREDICATE = "predicate"
    FUNCTION = "function"
    EXPRESSION = "expression"
    FUNCTION_MODIFIER = "function_modifier"
    NUMBER = "number"
    CONSTANT = "constant"
    PARAMETER = "parameter"
    EXISTS = "exists"


# Expression operators
COMP_GE = ">="
COMP_GT = ">"
COMP_LE = "<="
COMP_LT = "<"
COMP_EQ = "="
ARITH_ADD = "+"
ARITH_SUB = "-"
ARITH_MULT = "*"
ARITH_DIV = "/"

COMPARISONS = (COMP_GE, COMP_GT, COMP_LE, COMP_LT, COMP_EQ)
ARITHMETIC = (ARITH_ADD, ARITH_SUB, ARITH_MULT, ARITH_DIV)

# Function modifier operators
ASSIGN = "assign"
INCREASE = "increase"
DECREASE = "decrease"
SCALE_UP = "scale-up"
SCALE_DOWN = "scale-down"

MODIFIERS = (ASSIGN, INCREASE, DECREASE, SCALE_UP, SCALE_DOWN)

UNBOUND_MARKER = "?"


@dataclass(frozen=True)
class Param:
    name: str
    type: str = ""

    @property
    def is_bound(self) -> bool:
        return bool(self.name) and not self.name.startswith(UNBOUND_MARKER)


def unbound(slot: int) -> str:
    """Placeholder name for a variable that has not been grounded yet."""
    return f"{UNBOUND_MARKER}{slot}"


@dataclass
class Node:
    node_type: str
    node_id: int = -1
    children: list[int] = field(default_factory=list)
    expression_type: str = ""  # only for EXPRESSION
    modifier_type: str = ""  # only for FUNCTION_MODIFIER
    name: str = ""
    parameters: list[Param] = field(default_factory=list)
    value: float = 0.0


@dataclass
class Tree:
    nodes: list[Node] = field(default_factory=list)

    def add(self, node: Node) -> Node:
        """Append a node, assigning it the next id."""
        node.node_id = len(self.nodes)
        self.nodes.append(node)
        return node

    def copy(self) -> "Tree":
        return Tree([
            replace(n, children=list(n.children), parameters=list(n.parameters))
            for n in self.nodes
        ])

    @property
    def empty(self) -> bool:
        return not self.nodes

    def __len__(self) -> int:
        return len(self.nodes)


def format_number(value: float) -> str:
    """Shortest text that parses back to the same float; integers drop the '.0'."""
    text = repr(float(value))
    if text.endswith(".0"):
        return text[:-2]
    return text


def to_string(tree: Tree, node_id: int = 0) -> str:
    """Render the subtree rooted at node_id on a single line."""
    if tree.empty:
        return ""
    if not 0 <= node_id < len(tree.nodes):
        return f"<missing {node_id}>"

    node = tree.nodes[node_id]
    kind = node.node_type

    if kind in (NodeType.AND, NodeType.OR, NodeType.NOT):
        children = " ".join(to_string(tree, c) for c in node.children)
        return f"({kind} {children})"

    if kind in (NodeType.PREDICATE, NodeType.FUNCTION):
        args = "".join(f" {p.name}" for p in node.parameters)
        return f"({node.name}{args})"

    if kind == NodeType.EXPRESSION:
        operands = " ".join(to_string(tree, c) for c in node.children)
        return f"({node.expression_type} {operands})"

    if kind == NodeType.FUNCTION_MODIFIER:
        operands = " ".join(to_string(tree, c) for c in node.children)
        return f"({node.modifier_type} {operands})"

    if kind == NodeType.NUMBER:
        return format_number(node.value)

    if kind == NodeType.CONSTANT:
        return node.name

    if kind == NodeType.PARAMETER:
        return node.parameters[0].name if node.parameters else ""

    if kind == NodeType.EXISTS:
        params = " ".join(
            f"{p.name} - {p.type}" if p.type else p.name
            for p in node.parameters
        )
        body = " ".join(to_string(tree, c) for c in node.children)
        return f"(exists ({params}) {body})" if body else f"(exists ({params}))"

    return f"<{kind}>"


def roots(tree: Tree) -> list[int]:
    """Ids of nodes that are nobody's child."""
    referenced = {c for n in tree.nodes for c in n.children}
    return [n.node_id for n in tree.nodes if n.node_id not in referenced]
