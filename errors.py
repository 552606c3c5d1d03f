"""
errors.py

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

Exception classes raised while selecting InterProScan GFF3 records.
Callers branch on the class, never on the message text.

    IprSelectError
    ├── ExpressionError
    │   ├── LexError
    │   ├── ParseError
    │   └── EvaluationError
    ├── LineFormatError
    ├── ConfigError
    └── InputFileError (also an OSError)
"""

from typing import Optional


class IprSelectError(Exception):
    """Base class for every error raised by select_records and its modules."""


class ExpressionError(IprSelectError):
    """A boolean filter expression could not be built or evaluated."""


class LexError(ExpressionError):
    """Reserved for characters the lexer cannot classify."""


class ParseError(ExpressionError):
    """Malformed operator sequence, unmatched bracket, double negation,
    trailing tokens or an expression nested too deep."""


class EvaluationError(ExpressionError):
    """Malformed `name$N` count operand met while evaluating."""


class LineFormatError(IprSelectError):
    """A GFF3 line does not have the nine-column shape the reader consumes."""

    def __init__(self, message: str, line_number: Optional[int] = None, line: Optional[str] = None):
        self.line_number = line_number
        self.line = line
        if line_number is not None:
            message = f"line {line_number}: {message}"
        super().__init__(message)


class ConfigError(IprSelectError):
    """Invalid option value, either from the command line or the INI config."""


class InputFileError(IprSelectError, OSError):
    """The input file could not be opened or decompressed."""
