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
from typing import Optional, Union

from soyparse import namespace
from soyparse.ast import Node
from soyparse.ast.body import Attribute, Body, Interpolation


@dataclasses.dataclass(frozen=True)
class ParamDeclaration(Node):
    """
    A declared template parameter, either `{@param name: type}` or an `@param` line in a doc block.

    :param required: False when the declaration carries the `?` marker
    :param type_expr: the type as written, `any` for parameters declared in a doc block
    :param description: trailing text of a doc block `@param` line
    """

    required: bool
    name: str
    type_expr: str
    description: Optional[str] = None


@dataclasses.dataclass(frozen=True)
class SoyDoc(Node):
    text: str
    params: tuple[ParamDeclaration, ...]


@dataclasses.dataclass(frozen=True)
class Template(Node):
    doc: Optional[SoyDoc]
    name: str
    attributes: tuple[Attribute, ...]
    params: tuple[ParamDeclaration, ...]
    body: Body

    def opens_level(self) -> bool:
        return True

    def all_params(self) -> tuple[ParamDeclaration, ...]:
        """
        Parameters declared in the doc block followed by the ones declared with `{@param}`.
        """
        return (self.doc.params if self.doc is not None else ()) + self.params

    def full_name(self, path: tuple[str, ...]) -> str:
        return namespace.resolve_template_name(self.name, path)


@dataclasses.dataclass(frozen=True)
class DelTemplate(Template):
    variant: Optional[Interpolation] = None


@dataclasses.dataclass(frozen=True)
class Program(Node):
    """
    Root of the tree: one namespace and at least one template.
    """

    namespace: tuple[str, ...]
    templates: tuple[Union[Template, DelTemplate], ...]
    attributes: tuple[Attribute, ...] = ()

    def template_names(self) -> tuple[str, ...]:
        """
        The fully qualified names of all templates, in source order.
        """
        return tuple(template.full_name(self.namespace) for template in self.templates)
