# src/plantree/core/evaluate.py
"""
Tree evaluator.

evaluate() walks a condition tree against a state backend and returns
EvalResult(success, truth, value):

  success  the subtree was computable (no unknown function, no division by
           ~0, no malformed node, no failed mutation)
  truth    the logical outcome; only meaningful when success is True
  value    the numeric outcome for functions, numbers and arithmetic

Negation is threaded down as a flag instead of inverting results, so a
predicate under 'not' knows to delete rather than add when applying.

Existential quantifiers are grounded by trying every combination of
candidate objects, one per quantified variable. That is |objects|^n body
evaluations in the worst case for n variables; the cost comes from the
semantics of 'exists' over a finite domain, not from the implementation.
"""

import sys
from dataclasses import dataclass

from plantree.core.facts import Predicate, Function
from plantree.core.grounding import substitute, cartesian_product
from plantree.core.state import StateBackend
from plantree.core.tree import (
    Tree, NodeType, to_string,
    COMP_GE, COMP_GT, COMP_LE, COMP_LT, COMP_EQ,
    ARITH_ADD, ARITH_SUB, ARITH_MULT, ARITH_DIV,
    ASSIGN, INCREASE, DECREASE, SCALE_UP, SCALE_DOWN,
)


EPSILON = 1e-5


@dataclass(frozen=True)
class EvalResult:
    success: bool
    truth: bool
    value: float = 0.0


FAILED = EvalResult(False, False, 0.0)


def _report(tree: Tree, node_id: int) -> None:
    print(f"evaluate: Error parsing expression [{to_string(tree, node_id)}]", file=sys.stderr)


def evaluate(
    tree: Tree,
    state: StateBackend,
    apply: bool = False,
    node_id: int = 0,
    negate: bool = False,
) -> EvalResult:
    """
    Evaluate the subtree rooted at node_id.

    Args:
        tree: condition tree
        state: backend providing facts and functions
        apply: commit effects (add/remove facts, update functions)
        node_id: root of the subtree to evaluate
        negate: an odd number of enclosing 'not' nodes

    Returns:
        EvalResult. An empty tree is trivially satisfied.
    """
    if tree.empty:
        return EvalResult(True, True, 0.0)

    if not 0 <= node_id < len(tree.nodes):
        _report(tree, node_id)
        return FAILED

    node = tree.nodes[node_id]
    kind = node.node_type

    if kind == NodeType.AND:
        success = True
        truth = True
        # Every child is evaluated so all failures surface in one pass
        for child_id in node.children:
            result = evaluate(tree, state, apply, child_id, negate)
            success = success and result.success
            truth = truth and result.truth
        return EvalResult(success, truth, 0.0)

    elif kind == NodeType.OR:
        success = True
        truth = False
        for child_id in node.children:
            result = evaluate(tree, state, apply, child_id, negate)
            success = success and result.success
            truth = truth or result.truth
        return EvalResult(success, truth, 0.0)

    elif kind == NodeType.NOT:
        if not node.children:
            _report(tree, node_id)
            return FAILED
        return evaluate(tree, state, apply, node.children[0], not negate)

    elif kind == NodeType.PREDICATE:
        return _evaluate_predicate(tree, state, apply, node_id, negate)

    elif kind == NodeType.FUNCTION:
        value = state.read_function(to_string(tree, node_id))
        if value is None:
            return FAILED
        return EvalResult(True, False, value)

    elif kind == NodeType.EXPRESSION:
        return _evaluate_expression(tree, state, apply, node_id, negate)

    elif kind == NodeType.FUNCTION_MODIFIER:
        return _evaluate_modifier(tree, state, apply, node_id, negate)

    elif kind == NodeType.NUMBER:
        return EvalResult(True, True, node.value)

    elif kind == NodeType.CONSTANT:
        return EvalResult(True, bool(node.name), 0.0)

    elif kind == NodeType.PARAMETER:
        # Unresolved '?n' placeholders count as false
        bound = bool(node.parameters) and node.parameters[0].is_bound
        return EvalResult(True, bound, 0.0)

    elif kind == NodeType.EXISTS:
        return _evaluate_exists(tree, state, apply, node_id, negate)

    _report(tree, node_id)
    return FAILED


def _evaluate_predicate(tree: Tree, state: StateBackend, apply: bool, node_id: int, negate: bool) -> EvalResult:
    predicate = Predicate.from_node(tree.nodes[node_id])

    if apply:
        if negate:
            return EvalResult(state.remove(predicate), False, 0.0)
        return EvalResult(state.add(predicate), True, 0.0)

    # negate | exists | truth
    #   F    |   F    |   F
    #   F    |   T    |   T
    #   T    |   F    |   T
    #   T    |   T    |   F
    return EvalResult(True, negate != state.exists(predicate), 0.0)


def _operand_name(tree: Tree, node_id: int) -> str | None:
    node = tree.nodes[node_id]
    if node.node_type == NodeType.CONSTANT:
        return node.name
    if node.node_type == NodeType.PARAMETER:
        return node.parameters[0].name if node.parameters else ""
    return None


def _evaluate_expression(tree: Tree, state: StateBackend, apply: bool, node_id: int, negate: bool) -> EvalResult:
    node = tree.nodes[node_id]
    if len(node.children) != 2:
        _report(tree, node_id)
        return FAILED

    left_id, right_id = node.children
    left = evaluate(tree, state, apply, left_id, negate)
    right = evaluate(tree, state, apply, right_id, negate)

    if not left.success or not right.success:
        return FAILED

    op = node.expression_type

    if op == COMP_GE:
        return EvalResult(True, negate != (left.value >= right.value), 0.0)
    elif op == COMP_GT:
        return EvalResult(True, negate != (left.value > right.value), 0.0)
    elif op == COMP_LE:
        return EvalResult(True, negate != (left.value <= right.value), 0.0)
    elif op == COMP_LT:
        return EvalResult(True, negate != (left.value < right.value), 0.0)
    elif op == COMP_EQ:
        left_name = _operand_name(tree, left_id)
        right_name = _operand_name(tree, right_id)
        if left_name is not None and right_name is not None:
            return EvalResult(True, negate != (left_name == right_name), 0.0)

        left_kind = tree.nodes[left_id].node_type
        right_kind = tree.nodes[right_id].node_type
        if left_kind == NodeType.NUMBER and right_kind == NodeType.NUMBER:
            return EvalResult(True, negate != (left.value == right.value), 0.0)

        # Mixed symbolic/numeric operands
        _report(tree, node_id)
        return FAILED
    elif op == ARITH_ADD:
        return EvalResult(True, False, left.value + right.value)
    elif op == ARITH_SUB:
        return EvalResult(True, False, left.value - right.value)
    elif op == ARITH_MULT:
        return EvalResult(True, False, left.value * right.value)
    elif op == ARITH_DIV:
        if abs(right.value) > EPSILON:
            return EvalResult(True, False, left.value / right.value)
        return FAILED

    _report(tree, node_id)
    return FAILED


def _evaluate_modifier(tree: Tree, state: StateBackend, apply: bool, node_id: int, negate: bool) -> EvalResult:
    node = tree.nodes[node_id]
    if len(node.children) != 2:
        _report(tree, node_id)
        return FAILED

    left_id, right_id = node.children
    left = evaluate(tree, state, apply, left_id, negate)
    right = evaluate(tree, state, apply, right_id, negate)

    if not left.success or not right.success:
        return FAILED

    op = node.modifier_type

    if op == ASSIGN:
        value = right.value
    elif op == INCREASE:
        value = left.value + right.value
    elif op == DECREASE:
        value = left.value - right.value
    elif op == SCALE_UP:
        value = left.value * right.value
    elif op == SCALE_DOWN:
        if abs(right.value) <= EPSILON:
            return FAILED
        value = left.value / right.value
    else:
        _report(tree, node_id)
        return FAILED

    success = True
    if apply:
        target = tree.nodes[left_id]
        if target.node_type != NodeType.FUNCTION:
            _report(tree, node_id)
            return FAILED
        success = state.write_function(Function.from_node(target, value))

    return EvalResult(success, False, value)


def _evaluate_exists(tree: Tree, state: StateBackend, apply: bool, node_id: int, negate: bool) -> EvalResult:
    node = tree.nodes[node_id]
    if not node.children:
        return EvalResult(True, True, 0.0)

    objects = state.instances()
    candidates = [objects for _ in node.parameters]

    for values in cartesian_product(candidates):
        mapping = {param.name: value for param, value in zip(node.parameters, values)}
        grounded = substitute(tree, node_id, mapping)
        result = evaluate(grounded, state, apply, grounded.nodes[node_id].children[0], negate)
        if result.truth:
            return result

    return EvalResult(True, False, 0.0)


def check(tree: Tree, state: StateBackend, node_id: int = 0) -> bool:
    """True when the condition holds. Never modifies state."""
    return evaluate(tree, state, apply=False, node_id=node_id).truth


def apply(tree: Tree, state: StateBackend, node_id: int = 0) -> bool:
    """Commit the effects in tree. Returns whether every mutation succeeded."""
    return evaluate(tree, state, apply=True, node_id=node_id).success
