# src/plantree/core/state.py
"""
State backends: what the evaluator reads and mutates.

Two interchangeable implementations:
- LocalState: an in-memory snapshot (lists of predicates and functions)
- RedisState: persistent problem state (see plantree.core.remote)

The .state text format used for local snapshots:

  # comment
  (robot_at r2d2 kitchen)
  (= (battery r2d2) 80)
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field

from plantree.core.facts import (
    Predicate, Function,
    parse_predicate, parse_function, is_function_assignment,
)


class StateBackend(ABC):
    """Capability the evaluator is parameterized over."""

    @abstractmethod
    def exists(self, predicate: Predicate) -> bool:
        pass

    @abstractmethod
    def add(self, predicate: Predicate) -> bool:
        """Add a fact. Adding a present fact is not an error."""
        pass

    @abstractmethod
    def remove(self, predicate: Predicate) -> bool:
        """Remove a fact. Removing an absent fact is not an error."""
        pass

    @abstractmethod
    def read_function(self, key: str) -> float | None:
        """Current value of '(name a b ...)', or None if unknown."""
        pass

    @abstractmethod
    def write_function(self, function: Function) -> bool:
        pass

    @abstractmethod
    def instances(self) -> list[str]:
        """Objects an existential variable may be bound to."""
        pass


@dataclass
class LocalState(StateBackend):
    predicates: list[Predicate] = field(default_factory=list)
    functions: list[Function] = field(default_factory=list)

    def exists(self, predicate: Predicate) -> bool:
        return predicate in self.predicates

    def add(self, predicate: Predicate) -> bool:
        if predicate not in self.predicates:
            self.predicates.append(predicate)
        return True

    def remove(self, predicate: Predicate) -> bool:
        if predicate in self.predicates:
            self.predicates.remove(predicate)
        return True

    def read_function(self, key: str) -> float | None:
        for function in self.functions:
            if function.key == key:
                return function.value
        return None

    def write_function(self, function: Function) -> bool:
        # Only existing functions can be updated in a snapshot
        for i, existing in enumerate(self.functions):
            if existing == function:
                self.functions[i] = function
                return True
        return False

    def instances(self) -> list[str]:
        seen = []
        for predicate in self.predicates:
            for name in predicate.parameters:
                if name not in seen:
                    seen.append(name)
        return seen

    def copy(self) -> "LocalState":
        return LocalState(list(self.predicates), list(self.functions))


class StateParseError(ValueError):
    def __init__(self, message: str, line_num: int, line: str):
        self.line_num = line_num
        self.line = line
        super().__init__(f"Line {line_num}: {message}\n  {line}")


def parse_state(text: str) -> LocalState:
    """Parse a .state document into a local snapshot."""
    state = LocalState()

    lines = text.strip().split("\n")
    for i, line in enumerate(lines, 1):
        line = line.strip()

        if not line or line.startswith("#") or line.startswith(";"):
            continue

        try:
            if is_function_assignment(line):
                function = parse_function(line)
                if function in state.functions:
                    state.write_function(function)
                else:
                    state.functions.append(function)
            else:
                state.add(parse_predicate(line))
        except ValueError as e:
            raise StateParseError(str(e), i, line)

    return state


def format_state(state: LocalState) -> str:
    lines = []

    if state.predicates:
        lines.append("# Predicates")
        for predicate in state.predicates:
            lines.append(predicate.key)
        lines.append("")

    if state.functions:
        lines.append("# Functions")
        for function in state.functions:
            lines.append(function.to_assignment())
        lines.append("")

    return "\n".join(lines)
