"""
    Copyright 2025 Inmanta

    Licensed under the Apache License, Version 2.0 (the "License");
    you may not use this file except in compliance with the License.
    You may obtain a copy of the License at

        http://www.apache.org/licenses/LICENSE-2.0

    Unless required by applicable law or agreed to in writing, software
    distributed under the License is distributed on an "AS IS" BASIS,
    WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
    See the License for the specific language governing permissions and
    limitations under the License.

    Contact: code@inmanta.com
"""

from collections import abc
from typing import Optional

import soyparse.ast.export as ast_export
from soyparse.ast import CompilerException, Position


def describe(value: Optional[str]) -> str:
    if value is None:
        return "end of input"
    return repr(value)


class ParserException(CompilerException):
    """
    Exception occurring during the parsing of the code

    :param location: the position where the input stopped matching the grammar
    :param value: the character found at that position, None at the end of the input
    :param expected: the terminals that would have been accepted at that position
    """

    def __init__(
        self,
        location: Position,
        value: Optional[str],
        msg: Optional[str] = None,
        expected: abc.Sequence[str] = (),
        filename: Optional[str] = None,
    ) -> None:
        self.expected: list[str] = sorted(set(expected))
        if msg is None:
            msg = "unexpected %s" % describe(value)
            if self.expected:
                msg += ", expected one of: %s" % ", ".join(self.expected)
        CompilerException.__init__(self, "Syntax error at line %d, column %d: %s" % (location.line, location.column, msg))
        self.set_location(location, filename)
        self.value = value

    def export(self) -> ast_export.Error:
        error: ast_export.Error = super().export()
        error.category = ast_export.ErrorCategory.parser
        error.expected = self.expected
        return error


class UnterminatedBlockException(ParserException):
    """
    The input ended inside a block. The location is the opening tag of the block.
    """

    def __init__(self, location: Position, name: str, filename: Optional[str] = None) -> None:
        self.name = name
        super().__init__(
            location,
            None,
            msg="unterminated {%s} block, no matching {/%s} found" % (name, name),
            expected=["'{/%s}'" % name],
            filename=filename,
        )

    def export(self) -> ast_export.Error:
        error: ast_export.Error = super().export()
        error.category = ast_export.ErrorCategory.unterminated
        return error


class NestingTooDeepException(ParserException):
    """
    Blocks or expressions are nested deeper than the parser.max_nesting_depth option allows.
    """

    def __init__(self, location: Position, limit: int, filename: Optional[str] = None) -> None:
        self.limit = limit
        super().__init__(location, None, msg="nesting deeper than %d levels" % limit, filename=filename)


class GrammarError(Exception):
    """
    A defect in the grammar itself, e.g. a rule that is defined twice. Never caused by the input.
    """
