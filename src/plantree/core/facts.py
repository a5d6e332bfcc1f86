# src/plantree/core/facts.py
"""
Ground facts held by a state backend.

  (robot_at r2d2 kitchen)          a predicate
  (= (battery r2d2) 80)            a function with its value

Predicates and functions compare equal on (name, parameters) only, so a
fact can be located in a collection regardless of tree bookkeeping or
current function value.
"""

import re
from dataclasses import dataclass, field

from plantree.core.tree import Node, format_number


@dataclass(frozen=True)
class Instance:
    name: str
    type: str = "object"


@dataclass(frozen=True)
class Predicate:
    name: str
    parameters: tuple[str, ...] = ()

    @property
    def key(self) -> str:
        args = "".join(f" {p}" for p in self.parameters)
        return f"({self.name}{args})"

    @classmethod
    def from_node(cls, node: Node) -> "Predicate":
        return cls(node.name, tuple(p.name for p in node.parameters))

    def __str__(self) -> str:
        return self.key


@dataclass(frozen=True)
class Function:
    name: str
    parameters: tuple[str, ...] = ()
    value: float = field(default=0.0, compare=False)

    @property
    def key(self) -> str:
        args = "".join(f" {p}" for p in self.parameters)
        return f"({self.name}{args})"

    def to_assignment(self) -> str:
        return f"(= {self.key} {format_number(self.value)})"

    @classmethod
    def from_node(cls, node: Node, value: float = 0.0) -> "Function":
        return cls(node.name, tuple(p.name for p in node.parameters), value)

    def __str__(self) -> str:
        return self.to_assignment()


_ATOM_RE = re.compile(r"^\(\s*([^\s()]+)((?:\s+[^\s()]+)*)\s*\)$")
_ASSIGN_RE = re.compile(r"^\(\s*=\s*(\([^()]*\))\s+([^\s()]+)\s*\)$")


def parse_predicate(text: str) -> Predicate:
    """Parse '(name a b ...)'."""
    match = _ATOM_RE.match(text.strip())
    if not match:
        raise ValueError(f"Expected predicate: (name arg ...), got: {text}")
    name, args = match.groups()
    if name.startswith("?") or name == "=":
        raise ValueError(f"Invalid predicate name: {name}")
    return Predicate(name, tuple(args.split()))


def parse_function(text: str) -> Function:
    """Parse a function assignment '(= (name a b ...) value)'."""
    match = _ASSIGN_RE.match(text.strip())
    if not match:
        raise ValueError(f"Expected function assignment: (= (name arg ...) value), got: {text}")
    atom, value_str = match.groups()
    head = parse_predicate(atom)
    try:
        value = float(value_str)
    except ValueError:
        raise ValueError(f"Function value must be numeric, got: {value_str}")
    return Function(head.name, head.parameters, value)


def is_function_assignment(text: str) -> bool:
    return re.match(r"^\(\s*=\s", text.strip()) is not None
