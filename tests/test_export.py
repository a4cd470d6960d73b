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

import pydantic
import pytest

from soyparse.ast import CompilerException, Position
from soyparse.ast import export as ast_export
from soyparse.parser import NestingTooDeepException, ParserException, UnterminatedBlockException


def test_compiler_exception_export():
    error = CompilerException("something failed")
    assert error.format() == "something failed"
    exported = error.export()
    assert exported.category == ast_export.ErrorCategory.internal
    assert exported.type == "soyparse.ast.CompilerException"
    assert exported.location is None

    error.set_location(Position(10, 2, 3), "a.soy")
    # the first location wins
    error.set_location(Position(20, 3, 1), "b.soy")
    assert str(error) == "something failed (a.soy:2:3)"
    assert error.export().location.range.start == ast_export.Position(line=1, character=2)


def test_parser_exception_export():
    error = ParserException(Position(0, 1, 1), "x", expected=["'b'", "'a'", "'a'"])
    assert error.expected == ["'a'", "'b'"]
    assert error.format() == "Syntax error at line 1, column 1: unexpected 'x', expected one of: 'a', 'b' (<input>:1:1)"
    exported = error.export()
    assert exported.category == ast_export.ErrorCategory.parser
    assert exported.expected == ["'a'", "'b'"]
    assert exported.location.uri == "<input>"


def test_specialized_exceptions():
    unterminated = UnterminatedBlockException(Position(5, 1, 6), "foreach", "x.soy")
    assert unterminated.export().category == ast_export.ErrorCategory.unterminated
    assert unterminated.export().location.uri == "x.soy"
    assert "unterminated {foreach} block, no matching {/foreach} found" in unterminated.format()

    too_deep = NestingTooDeepException(Position(5, 1, 6), 3)
    assert too_deep.export().category == ast_export.ErrorCategory.parser
    assert too_deep.export().expected == []


def test_error_validation():
    error = ast_export.Error(type="x", message="y")
    with pytest.raises(pydantic.ValidationError):
        error.category = "not a category"
    error.category = "parse_error"
    assert error.category is ast_export.ErrorCategory.parser


def test_parse_report():
    ok = ast_export.FileReport(file="a.soy", templates=["a.t"])
    report = ast_export.ParseReport(files=[ok])
    assert not report.is_failure()

    failed = ast_export.FileReport(file="b.soy", errors=[ast_export.Error(type="x", message="y")])
    report = ast_export.ParseReport(files=[ok, failed])
    assert report.is_failure()
    assert ast_export.ParseReport.model_validate_json(report.model_dump_json()) == report
