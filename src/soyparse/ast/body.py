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

import dataclasses
from typing import Union

from soyparse.ast import Node
from soyparse.ast.expressions import Expression


@dataclasses.dataclass(frozen=True)
class Attribute(Node):
    """`name="value"`, the value is the raw text between the quotes"""

    name: str
    value: str


@dataclasses.dataclass(frozen=True)
class TextNode(Node):
    """Plain text between commands"""

    text: str


@dataclasses.dataclass(frozen=True)
class Interpolation(Node):
    """
    Any brace delimited construct that is not a structured command, e.g. `{$name}` or `{sp}`.
    `raw` is the text between the braces.
    """

    raw: str


@dataclasses.dataclass(frozen=True)
class Param(Node):
    """
    A `{param}` inside a call. The value is either an expression (`{param a: $x /}`) or
    a body (`{param a}...{/param}`).
    """

    name: str
    value: Union[Expression, "Body"]
    attributes: tuple[Attribute, ...] = ()

    def opens_level(self) -> bool:
        return isinstance(self.value, tuple)


@dataclasses.dataclass(frozen=True)
class Call(Node):
    """
    `{call}` or, when `delegate` is set, `{delcall}`. The template name is stored as written.
    """

    template_name: str
    params: tuple[Param, ...]
    attributes: tuple[Attribute, ...] = ()
    delegate: bool = False


@dataclasses.dataclass(frozen=True)
class LetStatement(Node):
    name: str
    value: Union[Expression, "Body"]
    attributes: tuple[Attribute, ...] = ()

    def opens_level(self) -> bool:
        return isinstance(self.value, tuple)


@dataclasses.dataclass(frozen=True)
class OtherCmd(Node):
    """
    A wrapper block such as `{if}` or `{foreach}`. Interior commands (`{else}`, `{ifempty}`, ...) are
    dropped, all arms end up in one flat body.
    """

    name: str
    body: "Body"

    def opens_level(self) -> bool:
        return True


BodyNode = Union[TextNode, Interpolation, Call, LetStatement, OtherCmd]
Body = tuple[BodyNode, ...]
