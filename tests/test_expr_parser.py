import sys
import os
# Add the parent directory to the sys.path
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from expr_parser import (
    Expr,
    Name,
    Negate,
    And,
    Or,
    MAX_RECURSION,
    parse_tokens
)
from expr_lexer import lex
from errors import ParseError, EvaluationError, ExpressionError
from records import DomainRecord, GeneRecord

import pytest

### Fixtures

@pytest.fixture
def gene_with_wd40_repeats():
    """A gene with two WD40 domains and one kinase domain"""
    gene = GeneRecord.from_span("gene1", 1, 500)
    gene.push_domain(DomainRecord("Pfam", 10, 50, "PF00400", "WD domain, G-beta repeat"))
    gene.push_domain(DomainRecord("Pfam", 60, 100, "PF00400", "WD domain, G-beta repeat"))
    gene.push_domain(DomainRecord("SMART", 200, 450, "SM00220", "Serine/Threonine protein kinases"))
    return gene

###T Expr.from_string

def test_empty_string_is_empty_expression():
    expr = Expr.from_string("")
    assert expr.is_empty()
    assert expr == Expr.empty()
    assert expr.to_text() == ""

@pytest.mark.parametrize("tags", [[], ["a"], ["a", "b", "a"], ["anything$2"]])
def test_empty_expression_matches_anything(tags):
    assert Expr.from_string("   ").matches(tags)

def test_or_alias():
    assert Expr.from_string("a | b") == Expr.from_string("a , b")
    assert Expr.from_string("a | b").root == Or(Name("a"), Name("b"))

def test_simple_and():
    expr = Expr.from_string("a & b")
    assert expr.root == And(Name("a"), Name("b"))

    assert expr.matches(["a", "b"])
    assert not expr.matches(["a"])
    assert not expr.matches(["c"])

def test_simple_inversion():
    """Unbracketed negation binds to the adjacent name only"""
    expr = Expr.from_string("!a & b")
    assert expr.root == And(Negate(Name("a")), Name("b"))

    assert expr.matches(["b"])
    assert not expr.matches(["a", "b"])
    assert not expr.matches(["a"])
    assert not expr.matches([])
    assert not expr.matches(["c"])

def test_inversion_before_or():
    expr = Expr.from_string("!a | b")
    assert expr.root == Or(Negate(Name("a")), Name("b"))
    assert expr.matches([])
    assert not expr.matches(["a"])
    assert expr.matches(["a", "b"])

def test_negated_group_takes_following_operator():
    """A negated bracket negates the group together with the operator after it"""
    expr = Expr.from_string("!(a) & b")
    assert expr.root == Negate(And(Name("a"), Name("b")))
    assert expr.matches([])
    assert expr.matches(["a"])
    assert not expr.matches(["a", "b"])

def test_negated_or_group_takes_following_operator():
    expr = Expr.from_string("!(a | b) & c")
    assert expr.root == Negate(And(Or(Name("a"), Name("b")), Name("c")))
    assert expr.matches(["c"])
    assert expr.matches(["a"])
    assert not expr.matches(["a", "c"])

def test_bracketed_negated_group_as_left_operand():
    expr = Expr.from_string("(!(a | b)) & c")
    assert expr.root == And(Negate(Or(Name("a"), Name("b"))), Name("c"))
    assert expr.matches(["c"])
    assert not expr.matches(["a", "c"])

def test_operators_group_to_the_right():
    """No precedence between & and |, the unit on the left is the left operand"""
    assert Expr.from_string("a & b | c").root == And(Name("a"), Or(Name("b"), Name("c")))
    assert Expr.from_string("a | b & c").root == Or(Name("a"), And(Name("b"), Name("c")))
    assert Expr.from_string("(a | b) & c").root == And(Or(Name("a"), Name("b")), Name("c"))

def test_bracketed_name_is_same_as_name():
    assert Expr.from_string("(a) & b") == Expr.from_string("a & b")
    assert Expr.from_string("((a))").root == Name("a")

def test_negation_inside_right_operand():
    assert Expr.from_string("a & !b").root == And(Name("a"), Negate(Name("b")))

def test_negation_before_closing_bracket():
    assert Expr.from_string("(!a) & b").root == And(Negate(Name("a")), Name("b"))

@pytest.mark.parametrize("text, message", [
    ("!!a", "double negation"),
    ("a &", "unexpected end of expression"),
    ("& a", "unexpected binary operator"),
    ("a & | b", "unexpected binary operator"),
    (")", "unexpected closing bracket"),
    ("()", "unexpected closing bracket"),
    ("(a", "expected closing bracket"),
    ("(a b)", "name followed by invalid token"),
    ("a b", "name followed by invalid token"),
    ("(a) b", "invalid token after closing bracket"),
    ("!a b", "invalid token after negated name"),
    ("!", "expected token to negate"),
    ("!&", "expected expression after negation"),
    ("a)", "extra tokens"),
    ("(a))", "extra tokens"),
])
def test_parse_errors(text, message):
    with pytest.raises(ParseError, match=message):
        Expr.from_string(text)

def test_parse_error_is_expression_error():
    with pytest.raises(ExpressionError):
        Expr.from_string("a & & b")

###T depth guard

def test_depth_guard_rejects_21_nested_brackets():
    text = "(" * 21 + "a" + ")" * 21
    with pytest.raises(ParseError, match="expression too deep"):
        Expr.from_string(text)

def test_depth_guard_rejects_20_nested_brackets():
    text = "(" * MAX_RECURSION + "a" + ")" * MAX_RECURSION
    with pytest.raises(ParseError, match="expression too deep"):
        Expr.from_string(text)

def test_depth_guard_accepts_19_nested_brackets():
    text = "(" * 19 + "a" + ")" * 19
    assert Expr.from_string(text).root == Name("a")

def test_parse_tokens_with_custom_depth():
    """Each name before an operator costs two levels"""
    with pytest.raises(ParseError, match="expression too deep"):
        parse_tokens(lex("a & b & c"), depth=4)
    assert parse_tokens(lex("a & b & c"), depth=5) == And(Name("a"), And(Name("b"), Name("c")))

def test_depth_guard_rejects_11_name_chain():
    text = " & ".join(f"a{i}" for i in range(11))
    with pytest.raises(ParseError, match="expression too deep"):
        Expr.from_string(text)

def test_depth_guard_accepts_10_name_chain():
    text = " | ".join(f"a{i}" for i in range(10))
    assert Expr.from_string(text).matches(["a9"])

def test_depth_guard_negated_name_before_operator():
    with pytest.raises(ParseError, match="expression too deep"):
        parse_tokens(lex("!a & b"), depth=4)
    assert parse_tokens(lex("!a & b"), depth=5) == And(Negate(Name("a")), Name("b"))

def test_depth_guard_negated_group():
    with pytest.raises(ParseError, match="expression too deep"):
        parse_tokens(lex("!(a)"), depth=2)
    assert parse_tokens(lex("!(a)"), depth=3) == Negate(Name("a"))

###T Expr.matches

def test_simple_and_matching():
    expr = Expr.from_string("a & b & c")
    assert expr.matches(["a", "b", "c"])
    assert expr.matches(["a", "b", "c", "d"])
    assert not expr.matches(["a", "c"])
    assert not expr.matches(["a", "b"])
    assert not expr.matches(["c", "b", "d"])

def test_simple_or_matching():
    expr = Expr.from_string("a | b | c")
    assert expr.matches(["a"])
    assert expr.matches(["b", "d"])
    assert expr.matches(["c", "d"])
    assert not expr.matches(["d"])
    assert not expr.matches(["hdwf", "dtw"])

def test_lone_names():
    assert Expr.from_string("a").matches(["a", "b"])
    assert not Expr.from_string("a").matches(["b"])
    assert not Expr.from_string("!a").matches(["a"])
    assert Expr.from_string("!a").matches(["b"])
    assert not Expr.from_string("!(a)").matches(["a", "b"])
    assert Expr.from_string("!(a)").matches(["b"])

def test_check_expr_with_groups():
    expr = Expr.from_string("(a | b | c) | (d & e & c)")
    assert expr.matches(["a"])
    assert expr.matches(["d", "e", "c"])
    assert not expr.matches(["d"])

def test_count_matches_exact_number():
    expr = Expr.from_string("name$2")
    assert expr.matches(["name", "other", "name"])
    assert not expr.matches(["name"])
    assert not expr.matches(["name", "name", "name"])

def test_count_zero():
    assert Expr.from_string("a$0").matches(["b"])
    assert not Expr.from_string("a$0").matches(["a"])

def test_count_combined_with_and():
    assert Expr.from_string("a$2 & b").matches(["a", "a", "b"])
    assert not Expr.from_string("a$2 & b").matches(["a", "b"])

def test_matches_accepts_generators_and_tuples():
    expr = Expr.from_string("a$2")
    assert expr.matches(tag for tag in ["a", "a"])
    assert expr.matches(("a", "a"))

@pytest.mark.parametrize("text", ["a$x", "a$", "a$-1", "a$+1", "a$1_0", "a$\u0661\u0660", "a$1$2"])
def test_count_format_errors(text):
    """Malformed counts parse fine but fail when evaluated"""
    expr = Expr.from_string(text)
    with pytest.raises(EvaluationError):
        expr.matches(["a"])

def test_evaluation_error_is_not_hidden_by_or():
    expr = Expr.from_string("b$x | a")
    with pytest.raises(EvaluationError):
        expr.matches(["c"])

###T Expr.matches_domains

def test_matches_domains_uses_domain_names(gene_with_wd40_repeats):
    assert Expr.from_string("PF00400").matches_domains(gene_with_wd40_repeats)
    assert Expr.from_string("PF00400$2 & SM00220").matches_domains(gene_with_wd40_repeats)
    assert not Expr.from_string("PF00400$3").matches_domains(gene_with_wd40_repeats)
    # Sources are not domain names
    assert not Expr.from_string("Pfam").matches_domains(gene_with_wd40_repeats)

def test_matches_domains_on_gene_without_domains():
    gene = GeneRecord.from_span("gene2", 1, 10)
    assert Expr.empty().matches_domains(gene)
    assert Expr.from_string("!PF00400").matches_domains(gene)
    assert not Expr.from_string("PF00400").matches_domains(gene)

###T Expr.to_text

@pytest.mark.parametrize("text", [
    "a",
    "!a",
    "a & b",
    "!a & b",
    "a & b | c",
    "(a | b) & c",
    "!(a | b) & !c",
    "((a & b) | c) & !(d$2)",
    "(a, b), (c & d)",
    "!(a) & b",
    "(!(a | b)) & c",
    "a & !(b | c) & d",
])
def test_to_text_reparses_to_same_tree(text):
    expr = Expr.from_string(text)
    assert Expr.from_string(expr.to_text()) == expr

def test_to_text_canonical_form():
    assert Expr.from_string("(a,b)&!c").to_text() == "(a | b) & !c"
    assert Expr.from_string("!(a)").to_text() == "!a"
    assert repr(Expr.from_string("a|b")) == "Expr('a | b')"

def test_to_text_brackets_negated_group_on_the_left():
    node = And(Negate(Or(Name("a"), Name("b"))), Name("c"))
    assert Expr(node).to_text() == "(!(a | b)) & c"
    assert Expr.from_string("(!(a | b)) & c").root == node
    assert Expr.from_string("!(a | b) & c").to_text() == "!((a | b) & c)"
