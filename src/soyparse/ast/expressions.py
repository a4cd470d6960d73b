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


@dataclasses.dataclass(frozen=True)
class ExpressionNode(Node):
    """Base class of the expression nodes, each one is a level of nesting"""

    def opens_level(self) -> bool:
        return True


@dataclasses.dataclass(frozen=True)
class Reference(ExpressionNode):
    """A variable reference: `$name`"""

    name: str


@dataclasses.dataclass(frozen=True)
class StringLiteral(ExpressionNode):
    """A single quoted string, `value` holds the decoded text"""

    value: str


@dataclasses.dataclass(frozen=True)
class BooleanLiteral(ExpressionNode):
    value: bool


@dataclasses.dataclass(frozen=True)
class NumberLiteral(ExpressionNode):
    value: float


@dataclasses.dataclass(frozen=True)
class MapItem(Node):
    key: StringLiteral
    value: "Expression"


@dataclasses.dataclass(frozen=True)
class MapLiteral(ExpressionNode):
    items: tuple[MapItem, ...]


@dataclasses.dataclass(frozen=True)
class FunctionCall(ExpressionNode):
    name: str
    args: tuple["Expression", ...]


@dataclasses.dataclass(frozen=True)
class Ternary(ExpressionNode):
    """
    `cond ? left : right`. The mark runs from the start of the condition to the end of the false branch.
    """

    cond: "Expression"
    left: "Expression"
    right: "Expression"


@dataclasses.dataclass(frozen=True)
class OtherExpression(ExpressionNode):
    """
    Expression text outside of the modelled subset (arithmetic, comparisons, field access, ...), kept verbatim.
    """

    raw: str


Expression = Union[
    Reference,
    StringLiteral,
    BooleanLiteral,
    NumberLiteral,
    MapLiteral,
    FunctionCall,
    Ternary,
    OtherExpression,
]
