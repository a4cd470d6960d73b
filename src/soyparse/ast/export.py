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

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict


class Exportable:
    # explicitly set empty slots so child classes are allowed to use __slots__
    __slots__ = ()

    def export(self) -> BaseModel:
        raise NotImplementedError()


class Position(BaseModel):
    """
    Position in a file. Based on the
    `LSP spec 3.15 <https://microsoft.github.io/language-server-protocol/specifications/specification-3-15/#position>`__
    """

    line: int
    character: int


class Range(BaseModel):
    """
    Range in a file. Based on the
    `LSP spec 3.15 <https://microsoft.github.io/language-server-protocol/specifications/specification-3-15/#range>`__
    """

    start: Position
    end: Position


class Location(BaseModel):
    """
    Location in a file. Based on the
    `LSP spec 3.15 <https://microsoft.github.io/language-server-protocol/specifications/specification-3-15/#location>`__
    """

    uri: str
    range: Range


class ErrorCategory(str, Enum):
    """
    Category of an error.
    """

    parser = "parse_error"
    """
        The template source does not match the grammar.
    """

    unterminated = "unterminated_block"
    """
        The input ended before the closing tag of a block was found.
    """

    internal = "internal_error"
    """
        Anything else.
    """


class Error(BaseModel):
    """
    Error occurred while trying to parse a file.
    """

    model_config = ConfigDict(validate_assignment=True)

    category: ErrorCategory = ErrorCategory.internal
    """
        Category of this error.
    """

    type: str
    """
        Fully qualified name of the actual exception.
    """

    message: str
    """
        Error message.
    """

    location: Optional[Location] = None
    """
        Location where this error occurred.
    """

    expected: list[str] = []
    """
        The tokens that would have been accepted at the location of the error.
    """


class FileReport(BaseModel):
    """
    Outcome of parsing a single file.
    """

    file: str
    templates: list[str] = []
    """
        Fully qualified names of the templates found in the file.
    """

    errors: list[Error] = []


class ParseReport(BaseModel):
    """
    Top level structure written by `soyparse check --export-report`.
    """

    files: list[FileReport]

    def is_failure(self) -> bool:
        return any(f.errors for f in self.files)
