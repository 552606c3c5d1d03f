"""
expr_parser.py

Copyright 2025 Eduardo Horta Santos <GitHub: Eduardo-HortaS>

This program is free software; you can redistribute it and/or modify
it under the terms of the GNU General Public License as published by
the Free Software Foundation; either version 3 of the License, or
(at your option) any later version.

This program is distributed in the hope that it will be useful,
but WITHOUT ANY WARRANTY; without even the implied warranty of
MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
GNU General Public License for more details.

You should have received a copy of the GNU General Public License
along with this program; if not, write to the Free Software
Foundation, Inc., 51 Franklin Street, Fifth Floor, Boston,
MA 02110-1301, USA.

Builds and evaluates the boolean filter expressions used to select records
by gene identifier, by the domain names a gene carries, or by the source
database of each domain.

Grammar notes:
- "&" and "|" (or ",") have the same precedence. The operand to the left of an
operator is a single unit (a name, a negated name or a bracketed group) and
everything to its right is parsed as the right operand, so "a & b | c" means
"a & (b | c)". Use brackets to group differently.
- "!" before a name binds to that name only: "!a & b" means "(!a) & b".
"!" before a bracket negates the group together with any operator that
follows it: "!(a | b) & c" means "!((a | b) & c)". Double negation is rejected.
- An operand "name$N" matches when exactly N tags equal "name".
- Nesting is limited to MAX_RECURSION levels. A bracket costs one level, a
name before an operator two, and a negated name before an operator needs four.

Functions:
    1 - Expr.from_string - Lexes and parses an expression, empty text means no constraint.
    2 - Expr.matches - Evaluates against a collection of tags.
    3 - Expr.matches_domains - Evaluates against the domain names of a GeneRecord.
    4 - Expr.to_text - Canonical text form, reparses to the same tree.
"""

from collections import Counter
from dataclasses import dataclass
from typing import Iterable, List, Optional, Union

from errors import EvaluationError, ParseError
from expr_lexer import AND, CLOSE_GROUP, NAME, NEGATE, OPEN_GROUP, OR, Token, lex

MAX_RECURSION = 20
COUNT_SEPARATOR = "$"


@dataclass(frozen=True)
class Name:
    text: str

    def matches(self, tag_counts: Counter) -> bool:
        parts = self.text.split(COUNT_SEPARATOR)
        if len(parts) == 1:
            return tag_counts[self.text] > 0
        if len(parts) == 2:
            tag, count_text = parts
            if not (count_text.isascii() and count_text.isdigit()):
                raise EvaluationError(f"invalid count in '{self.text}': expected a non-negative integer")
            return tag_counts[tag] == int(count_text)
        raise EvaluationError(f"unexpected text format: '{self.text}'")

    def to_text(self) -> str:
        return self.text


@dataclass(frozen=True)
class Negate:
    child: "Node"

    def matches(self, tag_counts: Counter) -> bool:
        return not self.child.matches(tag_counts)

    def to_text(self) -> str:
        if isinstance(self.child, Name):
            return f"!{self.child.to_text()}"
        return f"!({self.child.to_text()})"


@dataclass(frozen=True)
class And:
    left: "Node"
    right: "Node"

    def matches(self, tag_counts: Counter) -> bool:
        return self.left.matches(tag_counts) and self.right.matches(tag_counts)

    def to_text(self) -> str:
        return f"{_left_operand_text(self.left)} & {self.right.to_text()}"


@dataclass(frozen=True)
class Or:
    left: "Node"
    right: "Node"

    def matches(self, tag_counts: Counter) -> bool:
        return self.left.matches(tag_counts) or self.right.matches(tag_counts)

    def to_text(self) -> str:
        return f"{_left_operand_text(self.left)} | {self.right.to_text()}"


Node = Union[Name, Negate, And, Or]
BINARY_NODES = {AND: And, OR: Or}


def _left_operand_text(node: Node) -> str:
    """Left operands of a binary node are single units. Binary nodes and
    negated groups need brackets, "!(a) & b" would negate the whole."""
    if isinstance(node, (And, Or)):
        return f"({node.to_text()})"
    if isinstance(node, Negate) and not isinstance(node.child, Name):
        return f"({node.to_text()})"
    return node.to_text()


def check_depth(depth: int) -> None:
    if depth <= 0:
        raise ParseError("expression too deep")


class Parser:
    """Recursive-descent parser over a token list, using two tokens of lookahead.

    The token list is never modified, a cursor tracks the next token.
    """

    def __init__(self, tokens: List[Token]) -> None:
        self.tokens = tokens
        self.pos = 0

    def peek(self, offset: int = 0) -> Optional[Token]:
        index = self.pos + offset
        if index < len(self.tokens):
            return self.tokens[index]
        return None

    def peek_kind(self, offset: int = 0) -> Optional[str]:
        token = self.peek(offset)
        return token.kind if token else None

    def advance(self) -> Token:
        token = self.tokens[self.pos]
        self.pos += 1
        return token

    def at_end(self) -> bool:
        return self.pos >= len(self.tokens)

    def parse(self, depth: int = MAX_RECURSION) -> Node:
        """Parses the longest well-formed expression starting at the cursor."""
        check_depth(depth)

        kind = self.peek_kind()
        if kind is None:
            raise ParseError("unexpected end of expression")
        if kind == CLOSE_GROUP:
            raise ParseError("unexpected closing bracket")
        if kind in BINARY_NODES:
            raise ParseError("unexpected binary operator")
        if kind == OPEN_GROUP:
            group = self.parse_group(depth)
            return self.parse_continuation(group, depth - 1, "invalid token after closing bracket")
        if kind == NEGATE:
            return self.parse_negation(depth)
        return self.parse_name(depth)

    def parse_group(self, depth: int) -> Node:
        self.advance()
        inner = self.parse(depth - 1)
        if self.peek_kind() != CLOSE_GROUP:
            raise ParseError("expected closing bracket")
        self.advance()
        return inner

    def parse_negation(self, depth: int) -> Node:
        self.advance()
        kind = self.peek_kind()
        if kind == OPEN_GROUP:
            # "!(a) & b" is "!((a) & b)"
            check_depth(depth - 1)
            group = self.parse_group(depth - 1)
            return Negate(self.parse_continuation(group, depth - 2, "invalid token after closing bracket"))
        if kind == NAME:
            following = self.peek_kind(1)
            if following in BINARY_NODES:
                # "!a & b" is "(!(a)) & b"
                check_depth(depth - 4)
                negated = Negate(Name(self.advance().text))
                return self.parse_continuation(negated, depth - 2, "invalid token after negated name")
            if following in (None, CLOSE_GROUP):
                return Negate(Name(self.advance().text))
            raise ParseError("invalid token after negated name")
        if kind == NEGATE:
            raise ParseError("double negation not supported")
        if kind is None:
            raise ParseError("expected token to negate, got end of expression")
        raise ParseError("expected expression after negation")

    def parse_name(self, depth: int) -> Node:
        following = self.peek_kind(1)
        if following in BINARY_NODES:
            # "a & b" is "(a) & b"
            check_depth(depth - 2)
            return self.parse_continuation(Name(self.advance().text), depth - 2, "name followed by invalid token")
        if following in (None, CLOSE_GROUP):
            return Name(self.advance().text)
        raise ParseError("name followed by invalid token")

    def parse_continuation(self, left: Node, right_depth: int, error: str) -> Node:
        """Binds a resolved unit as the left operand of a trailing "&" or "|"."""
        kind = self.peek_kind()
        if kind in BINARY_NODES:
            self.advance()
            right = self.parse(right_depth)
            return BINARY_NODES[kind](left, right)
        if kind in (None, CLOSE_GROUP):
            return left
        raise ParseError(error)


def parse_tokens(tokens: List[Token], depth: int = MAX_RECURSION) -> Node:
    """Parses a complete token list, extra tokens after the expression are an error."""
    parser = Parser(tokens)
    node = parser.parse(depth)
    if not parser.at_end():
        raise ParseError("expected end of expression, found extra tokens")
    return node


class Expr:
    """A parsed filter expression. An empty expression matches anything."""

    def __init__(self, root: Optional[Node] = None) -> None:
        self.root = root

    @classmethod
    def from_string(cls, text: str) -> "Expr":
        tokens = lex(text)
        if not tokens:
            return cls.empty()
        return cls(parse_tokens(tokens))

    @classmethod
    def empty(cls) -> "Expr":
        return cls(None)

    def is_empty(self) -> bool:
        return self.root is None

    def matches(self, tags: Iterable[str]) -> bool:
        if self.root is None:
            return True
        return self.root.matches(Counter(tags))

    def matches_domains(self, gene_record) -> bool:
        """Evaluates against the names (not the sources) of a gene's domains."""
        return self.matches(domain.domain_name for domain in gene_record.iter_domains())

    def to_text(self) -> str:
        return self.root.to_text() if self.root is not None else ""

    def __eq__(self, other) -> bool:
        return isinstance(other, Expr) and self.root == other.root

    def __repr__(self) -> str:
        return f"Expr({self.to_text()!r})"
