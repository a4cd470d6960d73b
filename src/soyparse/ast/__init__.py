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
from typing import NamedTuple, Optional

from soyparse.ast import export


class Position(NamedTuple):
    """
    A point in the source text.

    :param offset: absolute index in the source, 0-based
    :param line: line number, 1-based
    :param column: column number, 1-based
    """

    offset: int
    line: int
    column: int

    def __str__(self) -> str:
        return "%d:%d" % (self.line, self.column)

    def export(self) -> export.Position:
        # Position is 1-based, export.Position spec is 0-based
        return export.Position(line=self.line - 1, character=self.column - 1)


class Mark(NamedTuple):
    """
    The span of source text a node was built from. `end` is exclusive.
    """

    start: Position
    end: Position

    def __str__(self) -> str:
        return "%s-%s" % (self.start, self.end)

    def combine(self, other: "Mark") -> "Mark":
        """
        The mark running from the start of this mark to the end of the other one.
        """
        return Mark(self.start, other.end)

    def contains(self, other: "Mark") -> bool:
        return self.start.offset <= other.start.offset and other.end.offset <= self.end.offset

    def slice(self, source: str) -> str:
        """
        The text this mark covers in the given source.
        """
        return source[self.start.offset : self.end.offset]

    def export(self, file: str) -> export.Location:
        return export.Location(uri=file, range=export.Range(start=self.start.export(), end=self.end.export()))


@dataclasses.dataclass(frozen=True)
class Node:
    """
    Base class for all nodes of the syntax tree. Nodes are immutable and only carry data.
    """

    mark: Mark

    @property
    def kind(self) -> str:
        return type(self).__name__

    def opens_level(self) -> bool:
        """
        Nodes that count as one level of nesting, see parser.max_nesting_depth
        """
        return False


def to_data(value: object) -> object:
    """
    Convert a node, a tuple of nodes or a plain value into JSON compatible data.
    """
    if isinstance(value, Node):
        result: dict[str, object] = {
            "kind": value.kind,
            "mark": {
                "start": value.mark.start._asdict(),
                "end": value.mark.end._asdict(),
            },
        }
        for field in dataclasses.fields(value):
            if field.name == "mark":
                continue
            result[field.name] = to_data(getattr(value, field.name))
        return result
    if isinstance(value, (tuple, list)):
        return [to_data(item) for item in value]
    return value


def children(node: Node) -> list[Node]:
    """
    The direct children of a node in source order.
    """
    out: list[Node] = []
    for field in dataclasses.fields(node):
        if field.name == "mark":
            continue
        value = getattr(node, field.name)
        for item in value if isinstance(value, tuple) else (value,):
            if isinstance(item, Node):
                out.append(item)
    # field order is not source order, e.g. the variant of a deltemplate
    return sorted(out, key=lambda child: child.mark.start.offset)


def walk(node: Node) -> list[Node]:
    """
    All nodes of the given tree in source order, the given node first.
    """
    out: list[Node] = [node]
    for child in children(node):
        out.extend(walk(child))
    return out


def too_deep(node: Node, limit: int, depth: int = 0) -> Optional[Node]:
    """
    The first node, in source order, that is nested more than `limit` levels deep. None when there is no such node.
    """
    if node.opens_level():
        depth += 1
        if depth > limit:
            return node
    for child in children(node):
        found = too_deep(child, limit, depth)
        if found is not None:
            return found
    return None


class CompilerException(Exception, export.Exportable):
    """Base class for exceptions raised while processing template source"""

    def __init__(self, msg: str) -> None:
        Exception.__init__(self, msg)
        self.location: Optional[Position] = None
        self.file: Optional[str] = None
        self.msg = msg

    def set_location(self, location: Position, file: Optional[str] = None) -> None:
        if self.location is None:
            self.location = location
        if self.file is None:
            self.file = file

    def get_message(self) -> str:
        return self.msg

    def get_location(self) -> Optional[Position]:
        return self.location

    def format(self) -> str:
        """Make a string representation of this particular exception"""
        location = self.get_location()
        if location is not None:
            return "%s (%s:%s)" % (self.get_message(), self.file or "<input>", location)
        else:
            return self.get_message()

    def export(self) -> export.Error:
        location: Optional[Position] = self.get_location()
        module: Optional[str] = self.__class__.__module__
        name: str = self.__class__.__qualname__
        exported_location: Optional[export.Location] = None
        if location is not None:
            point = location.export()
            exported_location = export.Location(uri=self.file or "<input>", range=export.Range(start=point, end=point))
        return export.Error(
            type=name if module is None else "%s.%s" % (module, name),
            message=self.get_message(),
            location=exported_location,
        )

    def __str__(self) -> str:
        return self.format()
