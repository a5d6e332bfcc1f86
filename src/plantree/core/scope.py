# src/plantree/core/scope.py
"""
Variable scope used while parsing.

A scope is an ordered list of (name, type) bindings; a variable's slot is
its position in that list. Nested scopes are built by copy-extend, so a
slot keeps the same meaning in every scope derived from it.
"""

from dataclasses import dataclass, field

DEFAULT_TYPE = "object"


@dataclass
class VariableScope:
    bindings: list[tuple[str, str]] = field(default_factory=list)

    def append(self, name: str, type_name: str = DEFAULT_TYPE) -> int:
        self.bindings.append((name, type_name))
        return len(self.bindings) - 1

    def size(self) -> int:
        return len(self.bindings)

    def __len__(self) -> int:
        return len(self.bindings)

    def copy(self) -> "VariableScope":
        return VariableScope(list(self.bindings))

    def extend(self, other: "VariableScope") -> "VariableScope":
        """New scope: our bindings, then other's, shifted by our size."""
        return VariableScope(self.bindings + other.bindings)

    def index_of(self, name: str) -> int | None:
        # Innermost (last appended) binding shadows outer ones
        for slot in range(len(self.bindings) - 1, -1, -1):
            if self.bindings[slot][0] == name:
                return slot
        return None

    def name(self, slot: int) -> str:
        return self.bindings[slot][0]

    def type(self, slot: int) -> str:
        return self.bindings[slot][1]


def scope_from_typed_list(text: str) -> VariableScope:
    """Build a scope from text like '?r - robot ?from ?to - room'."""
    from plantree.core.tokenize import TokenReader, parse_typed_list

    reader = TokenReader.from_text(text)
    scope = parse_typed_list(reader, stop=None)
    return scope
