# tests/test_conditions.py
"""Tests for condition parsing, printing and lowering."""

import pytest

from plantree.core.conditions import (
    And, Or, Not, Atom, Compare, Modifier, Exists,
    Number, ParamRef, ConstantTerm, FunctionTerm, Arith,
    parse, format_condition, to_tree, lower_condition, compile_condition,
)
from plantree.core.scope import VariableScope
from plantree.core.tokenize import ParseError
from plantree.core.tree import Tree, Node, NodeType, to_string


def action_scope():
    scope = VariableScope()
    scope.append("?r", "robot")
    scope.append("?from", "room")
    scope.append("?to", "room")
    return scope


def structure(tree: Tree) -> list[tuple]:
    return [
        (n.node_type, n.expression_type, n.modifier_type, n.name,
         tuple(p.name for p in n.parameters), n.value, tuple(n.children))
        for n in tree.nodes
    ]


# === Parsing: connectives and atoms ===

def test_parse_atom_with_variables_and_constants():
    cond = parse("(robot_at ?r kitchen)", action_scope())
    assert cond == Atom("robot_at", [0, "kitchen"])


def test_parse_and_or_not():
    cond = parse("(and (robot_at ?r ?from) (or (connected ?from ?to) (not (locked ?to))))", action_scope())
    assert cond == And([
        Atom("robot_at", [0, 1]),
        Or([
            Atom("connected", [1, 2]),
            Not(Atom("locked", [2])),
        ]),
    ])


def test_parse_keywords_case_insensitive():
    cond = parse("(AND (p a))")
    assert cond == And([Atom("p", ["a"])])


def test_parse_comparison():
    cond = parse("(>= (battery ?r) 20)", action_scope())
    assert cond == Compare(">=", FunctionTerm("battery", [0]), Number(20.0))


def test_parse_equality_of_parameters():
    cond = parse("(= ?from ?to)", action_scope())
    assert cond == Compare("=", ParamRef(1), ParamRef(2))


def test_parse_arithmetic():
    cond = parse("(> (battery ?r) (* 2 (distance ?from ?to)))", action_scope())
    assert cond == Compare(
        ">",
        FunctionTerm("battery", [0]),
        Arith("*", Number(2.0), FunctionTerm("distance", [1, 2])),
    )


def test_parse_modifier():
    cond = parse("(decrease (battery ?r) 10)", action_scope())
    assert cond == Modifier("decrease", FunctionTerm("battery", [0]), Number(10.0))


def test_parse_constant_operand():
    cond = parse("(= ?r r2d2)", action_scope())
    assert cond == Compare("=", ParamRef(0), ConstantTerm("r2d2"))


@pytest.mark.parametrize("token", ["inf", "nan", "Infinity", "1e", "e5", "1.2.3"])
def test_non_numeric_words_are_constants(token):
    cond = parse(f"(= ?r {token})", action_scope())
    assert cond.right == ConstantTerm(token)


@pytest.mark.parametrize("token,value", [("42", 42.0), ("-3", -3.0), ("0.5", 0.5), (".5", 0.5), ("1e3", 1000.0), ("2.5E-2", 0.025)])
def test_numeric_literals(token, value):
    cond = parse(f"(> (battery ?r) {token})", action_scope())
    assert cond.right == Number(value)


def test_predicate_name_keeps_case():
    assert parse("(NOT (Robot_At r2d2 Kitchen))") == Not(Atom("Robot_At", ["r2d2", "Kitchen"]))


def test_parse_empty_condition():
    assert parse("()") is None


def test_parse_ignores_comments():
    cond = parse("(and ; the robot\n (p a))")
    assert cond == And([Atom("p", ["a"])])


# === Parsing: exists ===

def test_parse_exists_offsets_slots():
    scope = action_scope()
    cond = parse("(exists (?x ?y - room) (connected ?x ?y))", scope)

    assert isinstance(cond, Exists)
    assert cond.variables == [("?x", "room"), ("?y", "room")]
    assert cond.params == [3, 4]
    assert cond.condition == Atom("connected", [3, 4])


def test_parse_exists_does_not_leak_into_enclosing_scope():
    scope = action_scope()
    parse("(exists (?x - room) (p ?x))", scope)
    assert scope.size() == 3


def test_parse_exists_sibling_cannot_see_bound_variable():
    with pytest.raises(ParseError, match="Unknown variable"):
        parse("(and (exists (?x) (p ?x)) (q ?x))")


def test_parse_exists_can_use_outer_variables():
    cond = parse("(exists (?l - room) (and (robot_at ?r ?l) (connected ?l ?to)))", action_scope())
    assert cond.params == [3]
    assert cond.condition == And([Atom("robot_at", [0, 3]), Atom("connected", [3, 2])])


def test_parse_nested_exists():
    cond = parse("(exists (?x) (exists (?y) (p ?x ?y)))")
    assert cond.params == [0]
    assert cond.condition.params == [1]
    assert cond.condition.condition == Atom("p", [0, 1])


def test_parse_nested_exists_shadows_name():
    cond = parse("(exists (?x) (exists (?x) (p ?x)))")
    assert cond.condition.condition == Atom("p", [1])


def test_parse_exists_untyped_defaults_to_object():
    cond = parse("(exists (?x) (p ?x))")
    assert cond.variables == [("?x", "object")]


def test_parse_exists_empty_body():
    cond = parse("(exists (?x - room) ())")
    assert cond == Exists([("?x", "room")], [0], None)


# === Parse errors ===

def test_missing_closing_paren():
    with pytest.raises(ParseError):
        parse("(exists (?x) (p ?x)")


def test_missing_opening_paren_of_variable_list():
    with pytest.raises(ParseError, match="Expected '\\('"):
        parse("(exists ?x (p ?x))")


def test_missing_opening_paren():
    with pytest.raises(ParseError):
        parse("p a)")


def test_unknown_variable():
    with pytest.raises(ParseError, match="Unknown variable: \\?z"):
        parse("(p ?z)")


def test_unsupported_keyword():
    with pytest.raises(ParseError, match="Unsupported keyword: forall"):
        parse("(forall (?x) (p ?x))")


def test_trailing_input():
    with pytest.raises(ParseError, match="trailing"):
        parse("(p a) (q b)")


def test_quantified_variable_needs_marker():
    with pytest.raises(ParseError, match="must start with"):
        parse("(exists (x) (p x))")


def test_modifier_requires_function():
    with pytest.raises(ParseError, match="must modify a function"):
        parse("(increase 3 1)")


def test_parse_error_reports_position():
    with pytest.raises(ParseError) as info:
        parse("(and (p a) (q ?nope))")
    assert info.value.position == 19


# === Printing ===

def test_format_atom():
    assert format_condition(parse("(robot_at ?r kitchen)", action_scope()), action_scope()) == "( robot_at ?r kitchen )"


def test_format_exists():
    cond = parse("(exists (?x - room) (connected ?from ?x))", action_scope())
    text = format_condition(cond, action_scope())
    assert text == "( exists ( ?x - room )\n\t( connected ?from ?x )\n)"


def test_format_exists_without_condition():
    cond = parse("(exists (?x - room) ())")
    assert format_condition(cond) == "( exists ( ?x - room )\n\t()\n)"


def test_format_indents_nested():
    cond = parse("(and (not (p a)))")
    assert format_condition(cond, indent=1) == "\t( and\n\t\t( not\n\t\t\t( p a )\n\t\t)\n\t)"


@pytest.mark.parametrize("text", [
    "(robot_at ?r ?from)",
    "(and (robot_at ?r ?from) (connected ?from ?to))",
    "(or (p a) (not (q ?to)))",
    "(>= (battery ?r) 20.5)",
    "(< (- (battery ?r) (distance ?from ?to)) 0)",
    "(= ?from ?to)",
    "(= ?r r2d2)",
    "(scale-down (speed ?r) 2)",
    "(exists (?x ?y - room) (and (connected ?x ?y) (robot_at ?r ?x)))",
    "(exists (?x) (exists (?y - room) (not (connected ?x ?y))))",
    "(exists (?x) ())",
    "(> (battery ?r) 1234567)",
    "(< (distance ?from ?to) 26.666666666666668)",
    "(assign (speed ?r) 0.1)",
    "(Robot_At ?r Kitchen)",
])
def test_round_trip(text):
    first = parse(text, action_scope())
    printed = format_condition(first, action_scope())
    second = parse(printed, action_scope())

    assert second == first
    assert structure(to_tree(second)) == structure(to_tree(first))


# === Lowering ===

def test_lower_exists_appends_body_after_node():
    tree = to_tree(parse("(exists (?x - room) (robot_at ?r ?x))", action_scope()))

    assert [n.node_type for n in tree.nodes] == [NodeType.EXISTS, NodeType.PREDICATE]
    assert tree.nodes[0].children == [1]
    assert [p.name for p in tree.nodes[0].parameters] == ["?3"]
    assert [p.type for p in tree.nodes[0].parameters] == ["room"]
    assert [p.name for p in tree.nodes[1].parameters] == ["?0", "?3"]


def test_lower_with_replacement():
    cond = parse("(exists (?x - room) (connected ?from ?x))", action_scope())
    tree = to_tree(cond, ["r2d2", "kitchen", "bedroom"])

    assert [p.name for p in tree.nodes[1].parameters] == ["kitchen", "?3"]
    assert tree.nodes[0].parameters[0].name == "?3"


def test_lower_replacement_covers_quantified_slot():
    cond = parse("(exists (?x) (p ?x))")
    tree = to_tree(cond, ["a"])
    assert tree.nodes[0].parameters[0].name == "a"
    assert tree.nodes[1].parameters[0].name == "a"


def test_lower_appends_to_existing_tree():
    tree = Tree()
    tree.add(Node(NodeType.PREDICATE, name="other"))

    node = lower_condition(parse("(exists (?x) (p ?x))"), tree)

    assert node.node_id == 1
    assert tree.nodes[1].children == [2]
    assert len(tree) == 3


def test_lower_empty_exists_has_no_children():
    tree = to_tree(parse("(exists (?x) ())"))
    assert len(tree) == 1
    assert tree.nodes[0].children == []


def test_lower_comparison_and_arithmetic():
    tree = compile_condition("(> (battery r2d2) (+ 1 ?x))", VariableScope([("?x", "object")]))

    assert [n.node_type for n in tree.nodes] == [
        NodeType.EXPRESSION, NodeType.FUNCTION, NodeType.EXPRESSION,
        NodeType.NUMBER, NodeType.PARAMETER,
    ]
    assert tree.nodes[0].expression_type == ">"
    assert tree.nodes[0].children == [1, 2]
    assert tree.nodes[2].expression_type == "+"
    assert tree.nodes[2].children == [3, 4]
    assert to_string(tree) == "(> (battery r2d2) (+ 1 ?0))"


def test_lower_modifier():
    tree = compile_condition("(increase (battery r2d2) 5)")
    assert tree.nodes[0].node_type == NodeType.FUNCTION_MODIFIER
    assert tree.nodes[0].modifier_type == "increase"
    assert to_string(tree) == "(increase (battery r2d2) 5)"


def test_to_tree_of_empty_condition():
    assert to_tree(parse("()")).empty
