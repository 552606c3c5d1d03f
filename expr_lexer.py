"""
expr_lexer.py

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

Turns a filter expression such as "!(PF00001 | PF00002) & PF07728$2"
into a flat list of tokens consumed by expr_parser.py.

Operators are single characters:
    (  open group        )  close group
    &  and               |  or (also ",")
    !  negate
Any other run of non-whitespace characters is a name.
"""

from dataclasses import dataclass
from typing import List, Optional

OPEN_GROUP = "OPEN_GROUP"
CLOSE_GROUP = "CLOSE_GROUP"
NEGATE = "NEGATE"
AND = "AND"
OR = "OR"
NAME = "NAME"

OPERATOR_CHARS = {
    "(": OPEN_GROUP,
    ")": CLOSE_GROUP,
    "|": OR,
    ",": OR,
    "&": AND,
    "!": NEGATE,
}

OPERATOR_TEXT = {
    OPEN_GROUP: "(",
    CLOSE_GROUP: ")",
    OR: "|",
    AND: "&",
    NEGATE: "!",
}


@dataclass(frozen=True)
class Token:
    kind: str
    text: str = ""

    def __str__(self) -> str:
        if self.kind == NAME:
            return self.text
        return OPERATOR_TEXT[self.kind]


def op_from_char(char: str) -> Optional[Token]:
    """Returns the operator token for char, or None if char is not an operator."""
    kind = OPERATOR_CHARS.get(char)
    return Token(kind) if kind else None


def lex(text: str) -> List[Token]:
    """Splits text into tokens. Whitespace only separates names and is never emitted."""
    tokens = []
    name_chars = []

    for char in text:
        op_token = op_from_char(char)
        if op_token is None and not char.isspace():
            name_chars.append(char)
            continue

        # An operator or whitespace closes the name being accumulated
        if name_chars:
            tokens.append(Token(NAME, "".join(name_chars)))
            name_chars = []
        if op_token is not None:
            tokens.append(op_token)

    if name_chars:
        tokens.append(Token(NAME, "".join(name_chars)))

    return tokens
