# src/plantree/core/grounding.py
"""
Grounding: replace variable names with objects in a subtree, and enumerate
candidate bindings.
"""

from dataclasses import replace
from itertools import product
from typing import Sequence, TypeVar

from plantree.core.tree import Tree

T = TypeVar("T")


def substitute(tree: Tree, node_id: int, mapping: dict[str, str]) -> Tree:
    """
    Return a copy of tree where every parameter in the subtree rooted at
    node_id whose name is a key of mapping is replaced by its value.

    The input tree is not modified.
    """
    new_tree = tree.copy()
    _substitute_in_place(new_tree, node_id, mapping)
    return new_tree


def _substitute_in_place(tree: Tree, node_id: int, mapping: dict[str, str]) -> None:
    node = tree.nodes[node_id]
    for child_id in node.children:
        if 0 <= child_id < len(tree.nodes):
            _substitute_in_place(tree, child_id, mapping)

    for i, param in enumerate(node.parameters):
        if param.name in mapping:
            node.parameters[i] = replace(param, name=mapping[param.name])


def cartesian_product(lists: Sequence[Sequence[T]]) -> list[tuple[T, ...]]:
    """
    All combinations taking one element from each list, last list varying
    fastest. No lists gives one empty combination.
    """
    return list(product(*lists))
